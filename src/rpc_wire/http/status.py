"""HTTP status codes and the reason phrases this server knows about."""

from enum import IntEnum


class HttpStatus(IntEnum):
    """HTTP response status codes used by the RPC server."""

    OK = 200
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500


# 401 is deliberately absent; it always goes out as the fixed literal reply.
_REASON_PHRASES: dict[int, str] = {
    HttpStatus.OK: "OK",
    HttpStatus.BAD_REQUEST: "Bad Request",
    HttpStatus.FORBIDDEN: "Forbidden",
    HttpStatus.NOT_FOUND: "Not Found",
    HttpStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def status_reason(status: int) -> str:
    """Return the reason phrase for *status*, or ``""`` if unknown."""
    return _REASON_PHRASES.get(status, "")
