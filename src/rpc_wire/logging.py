"""Per-connection event log.

A connection handler records malformed lines, rejected bodies, failed
authorisation and dispatched calls here instead of writing to a global
logging tree.  The owner of the connection decides what to do with the
entries afterwards: inspect them in tests, forward them, or drop them
with the connection.

Entries are tagged with the layer that produced them (``"http"`` for
framing, ``"rpc"`` for dispatch) and, when known, the remote peer.  A
logger created with a *capacity* keeps only the newest entries, so a
keep-alive connection serving many requests holds a fixed amount.
"""

from collections import deque
from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Severity, ordered so ``min_level`` filtering is a comparison."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One recorded event.

    Attributes:
        level: Severity.
        message: What happened.
        source: ``"http"`` or ``"rpc"``.
        peer: Remote end, or ``""`` if unknown.

    """

    level: LogLevel
    message: str
    source: str
    peer: str = ""

    def __str__(self) -> str:
        """Format as ``[LEVEL] source@peer: message``."""
        where = f"{self.source}@{self.peer}" if self.peer else self.source
        return f"[{self.level.name}] {where}: {self.message}"


class Logger:
    """Event buffer for one connection, optionally bounded."""

    def __init__(self, capacity: int | None = None) -> None:
        """Create an empty log keeping at most *capacity* entries."""
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    @property
    def entries(self) -> list[LogEntry]:
        """Return the retained entries, oldest first."""
        return list(self._entries)

    def log(self, level: LogLevel, message: str, *, source: str, peer: str = "") -> None:
        """Record an event, evicting the oldest entry when full."""
        self._entries.append(LogEntry(level=level, message=message, source=source, peer=peer))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return retained entries at or above *min_level* from *source*."""
        return [
            e
            for e in self._entries
            if (min_level is None or e.level >= min_level)
            and (source is None or e.source == source)
        ]

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        """Return the number of retained entries."""
        return len(self._entries)
