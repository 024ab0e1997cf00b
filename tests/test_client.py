"""Tests for the RPC client call helper."""

import io
import json

import pytest

from rpc_wire.client import RpcClientError, call_rpc
from rpc_wire.http.response import UNAUTHORIZED_RESPONSE, ResponseFormatter
from rpc_wire.http.status import HttpStatus
from rpc_wire.jsonrpc import format_reply

SERVER = ResponseFormatter("server", clock=lambda: 0.0)
CLIENT = ResponseFormatter("client", product="rpc-cli")
STATUS_FORBIDDEN = 403


class _Connection:
    """An in-memory duplex stream: canned input, captured output."""

    def __init__(self, data: bytes) -> None:
        self._inbound = io.BytesIO(data)
        self.outbound = io.BytesIO()

    def readline(self) -> bytes:
        return self._inbound.readline()

    def read(self, size: int, /) -> bytes:
        return self._inbound.read(size)

    def write(self, data: bytes, /) -> int:
        return self.outbound.write(data)

    def flush(self) -> None:
        pass


class TestCallRpc:
    """Verify the request written and the reply handling."""

    def test_successful_call(self) -> None:
        """The request is a framed POST and the reply is decoded."""
        conn = _Connection(SERVER.reply(HttpStatus.OK, format_reply(7, None, 1), keep_alive=False))
        reply = call_rpc(conn, "getblockcount", [], formatter=CLIENT)
        assert reply == {"result": 7, "error": None, "id": 1}

        sent = conn.outbound.getvalue()
        assert sent.startswith(b"POST / HTTP/1.1\nUser-Agent: rpc-cli/client\n")
        assert sent.endswith(b'\n\n{"method":"getblockcount","params":[],"id":1}\n')

    def test_extra_headers_and_id(self) -> None:
        """Caller headers and request id reach the wire."""
        conn = _Connection(
            SERVER.reply(HttpStatus.OK, format_reply(None, None, "abc"), keep_alive=False)
        )
        call_rpc(
            conn,
            "ping",
            [],
            formatter=CLIENT,
            request_id="abc",
            headers={"Authorization": "Basic dXNlcjpwYXNz"},
        )
        sent = conn.outbound.getvalue()
        assert b"Authorization: Basic dXNlcjpwYXNz\n" in sent
        assert b'"id":"abc"' in sent

    def test_error_reply_is_returned(self) -> None:
        """A 404 carrying a JSON-RPC error is still a reply."""
        body = format_reply(None, {"code": -32601, "message": "Method not found"}, 1)
        conn = _Connection(SERVER.reply(HttpStatus.NOT_FOUND, body, keep_alive=False))
        reply = call_rpc(conn, "nope", [], formatter=CLIENT)
        assert reply["error"]["code"] == -32601  # noqa: PLR2004

    def test_unauthorized(self) -> None:
        """The fixed 401 is reported as an authorisation failure."""
        with pytest.raises(RpcClientError, match="authorization failed"):
            call_rpc(_Connection(UNAUTHORIZED_RESPONSE), "getinfo", [], formatter=CLIENT)

    def test_unexpected_status(self) -> None:
        """Other error statuses are reported with their code."""
        conn = _Connection(SERVER.error(STATUS_FORBIDDEN, keep_alive=False))
        with pytest.raises(RpcClientError, match="HTTP error 403"):
            call_rpc(conn, "getinfo", [], formatter=CLIENT)

    def test_empty_body(self) -> None:
        """A reply without a body is an error."""
        conn = _Connection(SERVER.reply(HttpStatus.OK, b"", keep_alive=False))
        with pytest.raises(RpcClientError, match="No response"):
            call_rpc(conn, "getinfo", [], formatter=CLIENT)

    def test_undecodable_body(self) -> None:
        """A non-JSON body is an error."""
        conn = _Connection(SERVER.reply(HttpStatus.OK, b"<html>", keep_alive=False))
        with pytest.raises(RpcClientError, match="parse reply"):
            call_rpc(conn, "getinfo", [], formatter=CLIENT)

    def test_incomplete_reply(self) -> None:
        """A reply missing envelope keys is an error."""
        conn = _Connection(
            SERVER.reply(HttpStatus.OK, json.dumps({"result": 1}), keep_alive=False)
        )
        with pytest.raises(RpcClientError, match="result, error and id"):
            call_rpc(conn, "getinfo", [], formatter=CLIENT)
