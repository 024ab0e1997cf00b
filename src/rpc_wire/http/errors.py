"""Failure taxonomy for reading HTTP messages.

Each error carries the HTTP status a server should answer with, so a
connection handler can turn any of them into a reply without a lookup
table of its own.  Whether the connection survives is the caller's
decision; in practice only a parse error leaves the stream in a state
where a reply still makes sense.
"""

from rpc_wire.http.status import HttpStatus


class HttpError(Exception):
    """Raise when an HTTP message cannot be read."""

    status: HttpStatus = HttpStatus.INTERNAL_SERVER_ERROR


class HttpParseError(HttpError):
    """Raise when a request line is malformed."""

    status = HttpStatus.BAD_REQUEST


class OversizeBodyError(HttpError):
    """Raise when a declared body length is negative or over the limit."""


class StreamFailureError(HttpError):
    """Raise when the stream fails or closes before a body is complete."""
