"""Status log for the file system engine.

The engine reports every operation it performs to a log sink: one
line per success at INFO, one per failure at ERROR, and block-level
bookkeeping at DEBUG.  The sink is write-only from the engine's point
of view — nothing it records ever feeds back into control flow.

Like a kernel ring buffer (``dmesg``), the log can be bounded: once it
holds ``capacity`` entries, each new entry pushes out the oldest one.

- **LogLevel** — severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** — a single structured record (level, message, source).
- **Logger** — the buffer itself, with filtering and rendering.
"""

from collections import deque
from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Severity levels for log entries.

    Using IntEnum means levels compare with ``<`` / ``>`` naturally,
    which makes minimum-level filtering trivial.
    """

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """A single log record.

    Attributes:
        level: The severity of this event.
        message: What happened, e.g. ``"create /a: id=1 type=file ..."``.
        source: The component that reported it (the engine uses "fs").

    """

    level: LogLevel
    message: str
    source: str

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Ring buffer of log entries with level and source filtering."""

    def __init__(self, *, capacity: int | None = None) -> None:
        """Create an empty logger.

        Args:
            capacity: Maximum number of entries kept; unbounded if None.

        """
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int | None:
        """Return the entry limit (None when unbounded)."""
        return self._entries.maxlen

    @property
    def entries(self) -> list[LogEntry]:
        """Return the retained entries, oldest first."""
        return list(self._entries)

    def log(self, level: LogLevel, message: str, *, source: str) -> None:
        """Append an entry, evicting the oldest one if the buffer is full."""
        self._entries.append(LogEntry(level=level, message=message, source=source))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching every given criterion.

        Args:
            min_level: If set, only entries at or above this level.
            source: If set, only entries from this source.

        """
        return [
            e
            for e in self._entries
            if (min_level is None or e.level >= min_level)
            and (source is None or e.source == source)
        ]

    def lines(self, *, min_level: LogLevel = LogLevel.INFO) -> list[str]:
        """Render entries at or above *min_level* for display."""
        return [str(e) for e in self.filter(min_level=min_level)]

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()
