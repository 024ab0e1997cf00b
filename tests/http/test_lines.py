"""Tests for request-line and status-line parsing.

The first line of an HTTP message decides everything that follows: a
request line names the method and resource, a status line names the
outcome.  These tests check what is accepted, what is rejected, and how
the protocol version is teased out of both.
"""

import io

import pytest

from rpc_wire.http.errors import HttpParseError, StreamFailureError
from rpc_wire.http.lines import (
    MALFORMED_STATUS,
    leading_int,
    parse_request_line,
    parse_status_line,
    read_line,
    read_request_line,
    read_status_line,
    scan_int,
)
from rpc_wire.http.status import HttpStatus

STATUS_OK = 200
STATUS_NOT_FOUND = 404
STATUS_INTERNAL_SERVER_ERROR = 500
SAMPLE_INT = 42
NEGATIVE_INT = -7


class _BrokenStream:
    """A stream whose every read fails."""

    def readline(self) -> bytes:
        raise ConnectionResetError("reset by peer")

    def read(self, size: int, /) -> bytes:
        raise ConnectionResetError("reset by peer")


class TestReadLine:
    """Verify the shared line reader."""

    def test_strips_lf(self) -> None:
        """A bare newline terminator is removed."""
        assert read_line(io.BytesIO(b"POST / HTTP/1.1\nHost: x\n")) == "POST / HTTP/1.1"

    def test_strips_crlf(self) -> None:
        """A CRLF terminator is removed entirely."""
        assert read_line(io.BytesIO(b"GET /x HTTP/1.0\r\n")) == "GET /x HTTP/1.0"

    def test_unterminated_last_line(self) -> None:
        """A final line without a terminator is returned as-is."""
        assert read_line(io.BytesIO(b"tail")) == "tail"

    def test_end_of_stream_is_empty(self) -> None:
        """Reading past the end yields an empty line."""
        assert read_line(io.BytesIO(b"")) == ""

    def test_consumes_one_line_only(self) -> None:
        """Consecutive calls walk the stream line by line."""
        stream = io.BytesIO(b"one\ntwo\n")
        assert read_line(stream) == "one"
        assert read_line(stream) == "two"

    def test_stream_error_is_wrapped(self) -> None:
        """An OSError from the transport surfaces as StreamFailureError."""
        with pytest.raises(StreamFailureError, match="reset by peer"):
            read_line(_BrokenStream())


class TestIntegerScanning:
    """Verify the forgiving integer reader used for lengths and codes."""

    def test_plain_number(self) -> None:
        """Digits parse as an integer."""
        assert leading_int("42") == SAMPLE_INT

    def test_trailing_junk_ignored(self) -> None:
        """Only the leading digits count."""
        assert leading_int("42abc") == SAMPLE_INT

    def test_sign_and_whitespace(self) -> None:
        """Leading whitespace and a sign are accepted."""
        assert leading_int("  -7") == NEGATIVE_INT

    def test_no_digits_is_zero(self) -> None:
        """Text without leading digits reads as zero."""
        assert leading_int("abc") == 0
        assert scan_int("abc") is None


class TestParseRequestLine:
    """Verify request-line acceptance and rejection."""

    def test_post_http11(self) -> None:
        """A normal JSON-RPC request line parses fully."""
        line = parse_request_line("POST / HTTP/1.1")
        assert line.method == "POST"
        assert line.uri == "/"
        assert line.protocol_version == 1

    def test_get_http10(self) -> None:
        """HTTP/1.0 yields protocol version 0."""
        line = parse_request_line("GET /status HTTP/1.0")
        assert line.method == "GET"
        assert line.uri == "/status"
        assert line.protocol_version == 0

    def test_protocol_is_optional(self) -> None:
        """Two tokens are enough; the version defaults to 0."""
        line = parse_request_line("POST /")
        assert line.protocol_version == 0

    def test_unrecognised_protocol_defaults_to_zero(self) -> None:
        """A protocol tag without the HTTP/1. marker gives version 0."""
        assert parse_request_line("POST / SPDY/3").protocol_version == 0

    @pytest.mark.parametrize("method", ["PUT", "DELETE", "HEAD", "post", "OPTIONS"])
    def test_rejects_other_methods(self, method: str) -> None:
        """Only GET and POST (exact case) are accepted."""
        with pytest.raises(HttpParseError, match="method"):
            parse_request_line(f"{method} / HTTP/1.1")

    @pytest.mark.parametrize("uri", ["http://host/", "index.html", "*"])
    def test_rejects_non_absolute_uri(self, uri: str) -> None:
        """The URI must be an absolute path beginning with '/'."""
        with pytest.raises(HttpParseError, match="absolute path"):
            parse_request_line(f"POST {uri} HTTP/1.1")

    def test_rejects_empty_uri(self) -> None:
        """A doubled space leaves an empty URI token, which is rejected."""
        with pytest.raises(HttpParseError):
            parse_request_line("POST  HTTP/1.1")

    @pytest.mark.parametrize("line", ["", "POST", "garbage"])
    def test_rejects_short_lines(self, line: str) -> None:
        """Fewer than two tokens is malformed."""
        with pytest.raises(HttpParseError, match="Malformed"):
            parse_request_line(line)

    def test_parse_error_maps_to_bad_request(self) -> None:
        """Parse errors carry the 400 status for the reply."""
        with pytest.raises(HttpParseError) as info:
            parse_request_line("BREW /pot HTTP/1.1")
        assert info.value.status is HttpStatus.BAD_REQUEST

    def test_read_request_line_from_stream(self) -> None:
        """read_request_line reads then parses a CRLF-terminated line."""
        stream = io.BytesIO(b"POST / HTTP/1.1\r\nHost: localhost\r\n")
        line = read_request_line(stream)
        assert line.uri == "/"
        assert line.protocol_version == 1
        assert stream.readline() == b"Host: localhost\r\n"


class TestParseStatusLine:
    """Verify status-line interpretation on the client side."""

    def test_ok(self) -> None:
        """Status code and protocol version are extracted."""
        line = parse_status_line("HTTP/1.1 200 OK")
        assert line.status_code == STATUS_OK
        assert line.protocol_version == 1

    def test_http10(self) -> None:
        """HTTP/1.0 gives protocol version 0."""
        line = parse_status_line("HTTP/1.0 404 Not Found")
        assert line.status_code == STATUS_NOT_FOUND
        assert line.protocol_version == 0

    def test_marker_anywhere_in_line(self) -> None:
        """The protocol marker is searched across the whole line."""
        assert parse_status_line("X 200 via HTTP/1.1").protocol_version == 1

    def test_short_line_is_sentinel(self) -> None:
        """Too few tokens yields the internal-error sentinel, not an exception."""
        line = parse_status_line("garbage")
        assert line == MALFORMED_STATUS
        assert line.status_code == STATUS_INTERNAL_SERVER_ERROR

    def test_non_numeric_code_reads_as_zero(self) -> None:
        """A non-numeric status token reads as 0."""
        assert parse_status_line("HTTP/1.1 abc Weird").status_code == 0

    def test_read_status_line_from_stream(self) -> None:
        """read_status_line reads the first line of a response."""
        stream = io.BytesIO(b"HTTP/1.1 500 Internal Server Error\nDate: x\n")
        assert read_status_line(stream).status_code == STATUS_INTERNAL_SERVER_ERROR
