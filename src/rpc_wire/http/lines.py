r"""First-line parsing — request lines, status lines, and the line reader.

Every HTTP message starts with one line that says what it is::

    Request:   POST / HTTP/1.1
    Response:  HTTP/1.1 200 OK

This module reads such lines off a byte stream and interprets them.
Only the pieces the RPC server cares about are extracted: the method
and URI of a request, the numeric status of a response, and the minor
protocol version of either (``HTTP/1.1`` → 1, anything unrecognised → 0).

Numbers are read the forgiving way old HTTP code does: leading digits
count, trailing junk is ignored, and no digits at all means zero.
"""

import re
from dataclasses import dataclass
from typing import Protocol

from rpc_wire.http.errors import HttpParseError, StreamFailureError
from rpc_wire.http.status import HttpStatus

ALLOWED_METHODS = frozenset({"GET", "POST"})

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_PROTOCOL_MARKER = "HTTP/1."
_MIN_LINE_TOKENS = 2


class ByteStream(Protocol):
    """The slice of a binary file object the readers need."""

    def readline(self) -> bytes: ...

    def read(self, size: int, /) -> bytes: ...


@dataclass(frozen=True)
class RequestLine:
    """The interpreted first line of an inbound request."""

    method: str
    uri: str
    protocol_version: int


@dataclass(frozen=True)
class StatusLine:
    """The interpreted first line of a peer's response."""

    status_code: int
    protocol_version: int


# Returned when a status line is too short to interpret.
MALFORMED_STATUS = StatusLine(status_code=HttpStatus.INTERNAL_SERVER_ERROR, protocol_version=0)


def scan_int(text: str) -> int | None:
    """Return the integer at the start of *text*, or None if there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def leading_int(text: str) -> int:
    """Return the integer at the start of *text*, or 0 if there is none."""
    value = scan_int(text)
    return 0 if value is None else value


def protocol_version(text: str) -> int:
    """Return the minor version following ``HTTP/1.`` in *text*, else 0."""
    marker = text.find(_PROTOCOL_MARKER)
    if marker < 0:
        return 0
    return leading_int(text[marker + len(_PROTOCOL_MARKER) :])


def read_line(stream: ByteStream) -> str:
    """Read one line and return it without its terminator.

    Both ``\n`` and ``\r\n`` endings are accepted.  End of stream reads
    as an empty line.

    Raises:
        StreamFailureError: If the stream itself reports an error.

    """
    try:
        raw = stream.readline()
    except OSError as e:
        msg = f"Stream failed while reading a line: {e}"
        raise StreamFailureError(msg) from e
    line = raw.decode("latin-1")
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def parse_request_line(line: str) -> RequestLine:
    """Interpret ``METHOD SP URI [SP HTTP/1.x]``.

    Raises:
        HttpParseError: If the method is not GET/POST, the URI is not an
            absolute path, or there are fewer than two tokens.

    """
    words = line.split(" ")
    if len(words) < _MIN_LINE_TOKENS:
        msg = f"Malformed request line: {line!r}"
        raise HttpParseError(msg)

    method = words[0]
    if method not in ALLOWED_METHODS:
        msg = f"Unsupported method: {method!r}"
        raise HttpParseError(msg)

    uri = words[1]
    if not uri.startswith("/"):
        msg = f"Request URI must be an absolute path: {uri!r}"
        raise HttpParseError(msg)

    proto = protocol_version(words[2]) if len(words) > _MIN_LINE_TOKENS else 0
    return RequestLine(method=method, uri=uri, protocol_version=proto)


def read_request_line(stream: ByteStream) -> RequestLine:
    """Read and interpret the request line of an inbound message."""
    return parse_request_line(read_line(stream))


def parse_status_line(line: str) -> StatusLine:
    """Interpret ``HTTP/1.x CODE REASON``.

    Unlike request lines this never raises: a line too short to carry a
    status yields :data:`MALFORMED_STATUS`.
    """
    words = line.split(" ")
    if len(words) < _MIN_LINE_TOKENS:
        return MALFORMED_STATUS
    return StatusLine(status_code=leading_int(words[1]), protocol_version=protocol_version(line))


def read_status_line(stream: ByteStream) -> StatusLine:
    """Read and interpret the status line of a peer's response."""
    return parse_status_line(read_line(stream))
