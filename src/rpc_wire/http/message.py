"""Message assembly — headers, a length-delimited body, and keep-alive.

HTTP tells the reader how long the body is out-of-band, in the
``content-length`` header, so reading a message is a two-step affair:

1. Collect headers up to the blank line and note the declared length.
2. Read exactly that many bytes — no more, no less.

The declared length comes from the peer, so it is checked against a
caller-supplied ceiling *before* anything is allocated, and the body is
pulled in bounded chunks so the transport never has to hand over a huge
body in one go.

Once the message is complete the ``connection`` header is normalised to
``close`` or ``keep-alive`` so that connection handling has a single
signal to look at.
"""

from dataclasses import dataclass, field

from rpc_wire.http.errors import OversizeBodyError, StreamFailureError
from rpc_wire.http.headers import HeaderMap, read_headers
from rpc_wire.http.lines import ByteStream
from rpc_wire.logging import Logger, LogLevel

POST_READ_SIZE = 256 * 1024

CONNECTION = "connection"
CLOSE = "close"
KEEP_ALIVE = "keep-alive"


@dataclass(frozen=True)
class HttpMessage:
    """Headers and body of one complete inbound message."""

    headers: HeaderMap = field(default_factory=HeaderMap)
    body: bytes = b""

    @property
    def keep_alive(self) -> bool:
        """Return True if the peer may reuse the connection."""
        return self.headers.get(CONNECTION, "").lower() == KEEP_ALIVE


def check_body_length(length: int, max_size: int) -> None:
    """Raise :class:`OversizeBodyError` unless ``0 <= length <= max_size``."""
    if length < 0 or length > max_size:
        msg = f"Declared body length {length} outside 0..{max_size}"
        raise OversizeBodyError(msg)


def read_body(
    stream: ByteStream,
    length: int,
    max_size: int,
    *,
    chunk_size: int = POST_READ_SIZE,
) -> bytes:
    """Read exactly *length* bytes in reads of at most *chunk_size*.

    Raises:
        OversizeBodyError: If *length* is negative or above *max_size*;
            nothing is read in that case.
        StreamFailureError: If the stream errors or ends early.  Bytes
            read so far are discarded.

    """
    check_body_length(length, max_size)

    body = bytearray()
    while len(body) < length:
        want = min(length - len(body), chunk_size)
        try:
            chunk = stream.read(want)
        except OSError as e:
            msg = f"Stream failed after {len(body)} of {length} body bytes: {e}"
            raise StreamFailureError(msg) from e
        if not chunk:
            msg = f"Connection closed after {len(body)} of {length} body bytes"
            raise StreamFailureError(msg)
        body += chunk
    return bytes(body)


def normalize_connection(headers: HeaderMap, protocol_version: int) -> None:
    """Force ``connection`` to ``close`` or ``keep-alive``.

    An explicit ``close`` or ``keep-alive`` (any casing) is left alone;
    anything else is replaced with the protocol's default.
    """
    if headers.get(CONNECTION, "").lower() in {CLOSE, KEEP_ALIVE}:
        return
    headers[CONNECTION] = KEEP_ALIVE if protocol_version >= 1 else CLOSE


def read_message(
    stream: ByteStream,
    protocol_version: int,
    max_size: int,
    *,
    chunk_size: int = POST_READ_SIZE,
    logger: Logger | None = None,
) -> HttpMessage:
    """Read the headers and body that follow a request or status line.

    Raises:
        OversizeBodyError: If the declared length is out of bounds.
        StreamFailureError: If the stream fails before the body is complete.

    """
    try:
        length, headers = read_headers(stream, logger=logger)
        body = read_body(stream, length, max_size, chunk_size=chunk_size)
    except (OversizeBodyError, StreamFailureError) as e:
        if logger is not None:
            logger.log(LogLevel.ERROR, str(e), source="http")
        raise
    normalize_connection(headers, protocol_version)
    return HttpMessage(headers=headers, body=body)
