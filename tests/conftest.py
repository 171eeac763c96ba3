"""Pytest configuration and fixtures."""

import asyncio
import sys
import threading
import time
from pathlib import Path

import pytest

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from watchrun_core.models import ExecutionResult  # noqa: E402


class FakeBackend:
    """In-memory WatchBackend that records registrations."""

    def __init__(self, fail_on: set[str] | None = None, fail_start: bool = False):
        self.added: list[Path] = []
        self.fail_on = fail_on or set()
        self.fail_start = fail_start
        self.started = False
        self.stopped = False
        self.on_event = None
        self.on_error = None

    def start(self, on_event, on_error) -> None:
        if self.fail_start:
            raise OSError("too many open files")
        self.on_event = on_event
        self.on_error = on_error
        self.started = True

    def add(self, path: Path) -> None:
        if Path(path).name in self.fail_on:
            raise PermissionError(f"Permission denied: {path}")
        self.added.append(Path(path))

    def stop(self) -> None:
        self.stopped = True

    def emit(self, event) -> None:
        """Deliver an event the way the watchdog thread would."""
        self.on_event(event)

    def emit_error(self, error: Exception) -> None:
        self.on_error(error)


class RecordingRunner:
    """CommandRunner stand-in that records executions instead of spawning."""

    def __init__(self, duration: float = 0.0, success: bool = True):
        self.duration = duration
        self.success = success
        self.calls: list[tuple[list[str], float]] = []
        self.finished = threading.Event()

    def execute(self, command):
        self.calls.append((list(command), time.monotonic()))
        if self.duration:
            time.sleep(self.duration)
        self.finished.set()
        return ExecutionResult(
            success=self.success,
            elapsed=self.duration,
            error=None if self.success else "exit status 1",
            returncode=0 if self.success else 1,
        )


class RecordingNotifier:
    """Notifier that keeps every message."""

    def __init__(self):
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def info(self, msg: str) -> None:
        self.infos.append(msg)

    def warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def error(self, msg: str) -> None:
        self.errors.append(msg)


def wait_for(predicate, timeout: float = 3.0, interval: float = 0.01) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


async def async_wait_for(predicate, timeout: float = 3.0, interval: float = 0.01) -> bool:
    """Like wait_for, but yields to the running event loop while polling."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def tree(tmp_path):
    """Create a small project tree with a .git directory."""
    (tmp_path / "src" / "pkg").mkdir(parents=True)
    (tmp_path / "docs").mkdir()
    (tmp_path / ".git" / "objects").mkdir(parents=True)
    (tmp_path / "src" / ".cache").mkdir()
    (tmp_path / "src" / "pkg" / "mod.py").write_text("x = 1\n")
    (tmp_path / "README.md").write_text("readme\n")
    return tmp_path
