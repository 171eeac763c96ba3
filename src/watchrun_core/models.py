"""Shared data models for watchrun_core."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ChangeKind(Enum):
    """Kind of file system change reported by the notification backend."""

    CREATED = "created"
    MODIFIED = "modified"
    REMOVED = "removed"
    OTHER = "other"

    @property
    def triggers(self) -> bool:
        """Whether this kind of change can trigger the command."""
        return self is not ChangeKind.OTHER


@dataclass(frozen=True)
class ChangeEvent:
    """A single change observed inside the watched tree."""

    path: Path
    """Absolute path affected by the change."""

    kind: ChangeKind
    """What happened to the path."""

    is_directory: bool = False
    """Whether the backend reported the path as a directory."""


@dataclass
class ExecutionResult:
    """Outcome of one command run."""

    success: bool
    """True iff the process exited with status 0."""

    elapsed: float
    """Wall-clock seconds from just before spawn to just after exit."""

    error: str | None = None
    """Failure detail (exit status or spawn error). None on success."""

    returncode: int | None = None
    """Process exit status, None when the process never started."""

    @property
    def elapsed_ms(self) -> int:
        """Elapsed time rounded to a whole millisecond."""
        return max(0, round(self.elapsed * 1000))

    @property
    def elapsed_str(self) -> str:
        """Human readable elapsed time, e.g. ``12ms`` or ``1.234s``."""
        return format_elapsed(self.elapsed_ms)

    @property
    def icon(self) -> str:
        """Result symbol shown on the summary line."""
        return map_result_to_icon(self.success)


def format_elapsed(ms: int) -> str:
    """Format a millisecond count for display.

    Args:
        ms: Duration in whole milliseconds.

    Returns:
        ``"<n>ms"`` below one second, seconds with up to three decimals
        below a minute, otherwise ``"<m>m<s>s"``.
    """
    if ms < 1000:
        return f"{ms}ms"

    seconds = f"{(ms % 60000) / 1000:.3f}".rstrip("0").rstrip(".")
    if ms < 60000:
        return f"{seconds}s"
    return f"{ms // 60000}m{seconds}s"


def map_result_to_icon(success: bool) -> str:
    """Map a command outcome to its result symbol."""
    return "✓" if success else "✗"
