"""Header collection — ``name: value`` lines up to the blank line.

Header names are case-insensitive on the wire, so :class:`HeaderMap`
canonicalises every key (trimmed, lowercased) as it goes in and as it is
looked up.  The original spelling a peer used is never kept.

The only header given special treatment while reading is
``content-length``: it declares how many body bytes follow the blank
line.  A missing or unparsable value declares an empty body.
"""

from collections.abc import Iterable, Iterator, MutableMapping

from rpc_wire.http.lines import ByteStream, read_line, scan_int
from rpc_wire.logging import Logger, LogLevel

CONTENT_LENGTH = "content-length"


def canonical_name(name: str) -> str:
    """Return the stored form of a header name."""
    return name.strip().lower()


class HeaderMap(MutableMapping[str, str]):
    """A mapping from header name to value with case-insensitive keys.

    Later writes to the same name (in any casing) replace earlier ones.
    """

    def __init__(self, initial: Iterable[tuple[str, str]] | None = None) -> None:
        """Create a header map, optionally from ``(name, value)`` pairs."""
        self._fields: dict[str, str] = {}
        for name, value in initial or ():
            self[name] = value

    def __getitem__(self, name: str) -> str:
        """Return the value stored for *name*."""
        return self._fields[canonical_name(name)]

    def __setitem__(self, name: str, value: str) -> None:
        """Store *value* under the canonical form of *name*."""
        self._fields[canonical_name(name)] = value

    def __delitem__(self, name: str) -> None:
        """Remove *name* from the map."""
        del self._fields[canonical_name(name)]

    def __contains__(self, name: object) -> bool:
        """Return True if *name* (in any casing) is present."""
        return isinstance(name, str) and canonical_name(name) in self._fields

    def __iter__(self) -> Iterator[str]:
        """Iterate over canonical header names."""
        return iter(self._fields)

    def __len__(self) -> int:
        """Return the number of distinct headers."""
        return len(self._fields)

    def __repr__(self) -> str:
        """Show the canonical contents."""
        return f"HeaderMap({self._fields!r})"


def read_headers(stream: ByteStream, *, logger: Logger | None = None) -> tuple[int, HeaderMap]:
    """Read header lines until a blank line or end of stream.

    Lines without a colon are skipped.

    Returns:
        The declared body length (0 when ``content-length`` is absent or
        unparsable) and the collected headers.

    """
    headers = HeaderMap()
    length = 0
    while True:
        line = read_line(stream)
        if not line:
            break
        name, colon, value = line.partition(":")
        if not colon:
            continue
        name = canonical_name(name)
        value = value.strip()
        headers[name] = value
        if name == CONTENT_LENGTH:
            declared = scan_int(value)
            length = 0 if declared is None else declared
            if declared is None and logger is not None:
                logger.log(
                    LogLevel.WARNING,
                    f"Unparsable content-length {value!r}; treating body as empty",
                    source="http",
                )
    return length, headers
