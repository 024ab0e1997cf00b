r"""Response rendering — status line, fixed headers, optional body.

Replies follow one rigid layout that existing RPC clients expect::

    HTTP/1.1 200 OK\n
    Date: Sat, 17 Oct 2026 12:00:00 +0000\n
    Connection: keep-alive\n
    Content-Length: 42\n
    Content-Type: application/json\n
    Server: nodex-json-rpc/v1.0.0\n
    \n
    [body]

Lines end in a bare ``\n``.  The one exception to the layout is 401,
which is always the same literal response, byte for byte.

The formatter also renders the client side of the exchange: the
``POST /`` request an RPC client sends to a server.
"""

import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime

from rpc_wire.http.status import HttpStatus, status_reason

_DATE_FORMAT = "%a, %d %b %Y %H:%M:%S +0000"

_UNAUTHORIZED_BODY = (
    b'<!DOCTYPE HTML PUBLIC "-//W3C//DTD HTML 4.01 Transitional//EN"\n'
    b'"http://www.w3.org/TR/1999/REC-html401-19991224/loose.dtd">\n'
    b"<HTML>\n"
    b"<HEAD>\n"
    b"<TITLE>Error</TITLE>\n"
    b"<META HTTP-EQUIV='Content-Type' CONTENT='text/html; charset=ISO-8859-1'>\n"
    b"</HEAD>\n"
    b"<BODY><H1>401 Unauthorized.</H1></BODY>\n"
    b"</HTML>\n"
)

# Content-Length is part of the literal and is not derived from the body.
UNAUTHORIZED_RESPONSE = (
    b"HTTP/1.0 401 Authorization Required\n"
    b'WWW-Authenticate: Basic realm="jsonrpc"\n'
    b"Content-Type: text/html\n"
    b"Content-Length: 296\n"
    b"\n" + _UNAUTHORIZED_BODY
)


def unauthorized_response() -> bytes:
    """Return the fixed 401 response."""
    return UNAUTHORIZED_RESPONSE


def unauthorized_body() -> bytes:
    """Return the HTML document carried by the fixed 401 response."""
    return _UNAUTHORIZED_BODY


class ResponseFormatter:
    """Render replies stamped with a server identity and the current time.

    The version token and clock are supplied by the caller so that the
    output is reproducible under test.
    """

    def __init__(
        self,
        version: str,
        *,
        product: str = "nodex-json-rpc",
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Create a formatter for ``Server: <product>/<version>``."""
        self._version = version
        self._product = product
        self._clock = clock

    @property
    def server_token(self) -> str:
        """Return the ``product/version`` identification string."""
        return f"{self._product}/{self._version}"

    def http_date(self) -> str:
        """Return the current time in the ``Date`` header format."""
        return datetime.fromtimestamp(self._clock(), tz=UTC).strftime(_DATE_FORMAT)

    def reply_header(
        self,
        status: int,
        *,
        keep_alive: bool,
        content_length: int,
        content_type: str,
    ) -> bytes:
        """Render the status line and headers, ending with the blank line."""
        lines = [
            f"HTTP/1.1 {status} {status_reason(status)}",
            f"Date: {self.http_date()}",
            f"Connection: {'keep-alive' if keep_alive else 'close'}",
            f"Content-Length: {content_length}",
            f"Content-Type: {content_type}",
            f"Server: {self.server_token}",
            "",
            "",
        ]
        return "\n".join(lines).encode("latin-1")

    def reply(
        self,
        status: int,
        body: bytes | str,
        *,
        keep_alive: bool,
        headers_only: bool = False,
        content_type: str = "application/json",
    ) -> bytes:
        """Render a complete reply.

        With *headers_only* the body is omitted and ``Content-Length``
        reports 0.
        """
        if isinstance(body, str):
            body = body.encode()
        if headers_only:
            return self.reply_header(
                status, keep_alive=keep_alive, content_length=0, content_type=content_type
            )
        header = self.reply_header(
            status, keep_alive=keep_alive, content_length=len(body), content_type=content_type
        )
        return header + body

    def error(self, status: int, *, keep_alive: bool, headers_only: bool = False) -> bytes:
        """Render a plain-text error reply whose body is the reason phrase.

        401 ignores every flag and yields :data:`UNAUTHORIZED_RESPONSE`.
        """
        if status == HttpStatus.UNAUTHORIZED:
            return UNAUTHORIZED_RESPONSE
        return self.reply(
            status,
            status_reason(status),
            keep_alive=keep_alive,
            headers_only=headers_only,
            content_type="text/plain",
        )

    def post_request(self, body: bytes | str, *, headers: Mapping[str, str] | None = None) -> bytes:
        """Render the ``POST /`` request a client sends to an RPC server."""
        if isinstance(body, str):
            body = body.encode()
        lines = [
            "POST / HTTP/1.1",
            f"User-Agent: {self.server_token}",
            "Host: 127.0.0.1",
            "Content-Type: application/json",
            f"Content-Length: {len(body)}",
            "Connection: close",
            "Accept: application/json",
        ]
        lines.extend(f"{name}: {value}" for name, value in (headers or {}).items())
        lines.extend(["", ""])
        return "\n".join(lines).encode("latin-1") + body
