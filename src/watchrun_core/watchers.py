"""Watch configuration and the notification backend protocol."""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from watchrun_core.models import ChangeEvent

DEFAULT_PATTERN = "*"
DEFAULT_DEBOUNCE_MS = 300


@dataclass(frozen=True)
class WatchConfig:
    """Configuration for a watch session. Built once at startup."""

    root: Path
    """Directory to watch (the working directory)."""

    command: list[str] = field(default_factory=list)
    """Program name followed by its arguments."""

    pattern: str = DEFAULT_PATTERN
    """Glob pattern a changed path must match."""

    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    """Quiet period in milliseconds before the command runs."""

    def __post_init__(self):
        if not self.command:
            raise ValueError("A command to run is required")
        if self.debounce_ms < 0:
            raise ValueError(f"debounce_ms must be >= 0, got {self.debounce_ms}")

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0


EventCallback = Callable[[ChangeEvent], None]
ErrorCallback = Callable[[Exception], None]


class WatchBackend(Protocol):
    """Protocol for file system notification backends.

    Callbacks may be invoked from a backend-owned thread.
    """

    def start(self, on_event: EventCallback, on_error: ErrorCallback) -> None:
        """Start delivering events and errors."""
        ...

    def add(self, path: Path) -> None:
        """Register a single directory (not its children).

        Raises:
            OSError: If the directory cannot be watched
        """
        ...

    def stop(self) -> None:
        """Stop delivering events and release OS resources."""
        ...
