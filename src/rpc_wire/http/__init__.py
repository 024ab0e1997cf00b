"""HTTP framing — first lines, headers, bodies and replies.

Re-exports public symbols so callers can write::

    from rpc_wire.http import read_request_line, read_message, ResponseFormatter
"""

from rpc_wire.http.errors import HttpError, HttpParseError, OversizeBodyError, StreamFailureError
from rpc_wire.http.headers import HeaderMap, read_headers
from rpc_wire.http.lines import (
    MALFORMED_STATUS,
    RequestLine,
    StatusLine,
    parse_request_line,
    parse_status_line,
    read_line,
    read_request_line,
    read_status_line,
)
from rpc_wire.http.message import (
    POST_READ_SIZE,
    HttpMessage,
    normalize_connection,
    read_body,
    read_message,
)
from rpc_wire.http.response import (
    UNAUTHORIZED_RESPONSE,
    ResponseFormatter,
    unauthorized_response,
)
from rpc_wire.http.status import HttpStatus, status_reason

__all__ = [
    "MALFORMED_STATUS",
    "POST_READ_SIZE",
    "UNAUTHORIZED_RESPONSE",
    "HeaderMap",
    "HttpError",
    "HttpMessage",
    "HttpParseError",
    "HttpStatus",
    "OversizeBodyError",
    "RequestLine",
    "ResponseFormatter",
    "StatusLine",
    "StreamFailureError",
    "normalize_connection",
    "parse_request_line",
    "parse_status_line",
    "read_body",
    "read_headers",
    "read_line",
    "read_message",
    "read_request_line",
    "read_status_line",
    "status_reason",
    "unauthorized_response",
]
