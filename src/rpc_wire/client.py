"""RPC client — send one call over an open stream and read the reply.

The client half mirrors the server: it writes a ``POST /`` request with
a JSON-RPC envelope as its body, then reads back a status line, headers
and a length-delimited body.  Connecting (and any TLS) is the caller's
business; pass in something file-like, such as ``socket.makefile("rwb")``.
"""

from typing import Any

from rpc_wire.config import DEFAULT_MAX_BODY_SIZE
from rpc_wire.http.lines import read_status_line
from rpc_wire.http.message import read_message
from rpc_wire.http.response import ResponseFormatter
from rpc_wire.http.status import HttpStatus
from rpc_wire.jsonrpc import RpcError, decode_payload, format_request
from rpc_wire.server import DuplexStream

# Statuses whose body is still a JSON-RPC reply worth decoding.
_REPLY_STATUSES = frozenset(
    {HttpStatus.BAD_REQUEST, HttpStatus.NOT_FOUND, HttpStatus.INTERNAL_SERVER_ERROR}
)


class RpcClientError(Exception):
    """Raise when a call cannot produce a JSON-RPC reply."""


def call_rpc(
    stream: DuplexStream,
    method: str,
    params: list[Any],
    *,
    formatter: ResponseFormatter,
    request_id: Any = 1,
    headers: dict[str, str] | None = None,
    max_size: int = DEFAULT_MAX_BODY_SIZE,
) -> dict[str, Any]:
    """Call *method* with *params* and return the decoded reply object.

    Args:
        stream: An open, writable byte stream to the server.
        method: RPC method name.
        params: Positional parameters.
        formatter: Supplies the ``User-Agent`` token for the request.
        request_id: The ``id`` to send (and expect back).
        headers: Extra request headers, such as ``Authorization``.
        max_size: Largest reply body accepted.

    Raises:
        RpcClientError: On authorisation failure, an unexpected HTTP
            status, an empty or undecodable body, or a reply without
            ``result``/``error``/``id``.

    """
    body = format_request(method, params, request_id)
    stream.write(formatter.post_request(body, headers=headers))
    stream.flush()

    status = read_status_line(stream)
    if status.status_code == HttpStatus.UNAUTHORIZED:
        msg = "Incorrect rpcuser or rpcpassword (authorization failed)"
        raise RpcClientError(msg)
    if status.status_code >= HttpStatus.BAD_REQUEST and status.status_code not in _REPLY_STATUSES:
        msg = f"Server returned HTTP error {status.status_code}"
        raise RpcClientError(msg)

    message = read_message(stream, status.protocol_version, max_size)
    if not message.body:
        msg = "No response from server"
        raise RpcClientError(msg)

    try:
        reply = decode_payload(message.body)
    except RpcError as e:
        msg = "Couldn't parse reply from server"
        raise RpcClientError(msg) from e
    if not isinstance(reply, dict) or not {"result", "error", "id"} <= reply.keys():
        msg = "Expected reply to have result, error and id properties"
        raise RpcClientError(msg)
    return reply
