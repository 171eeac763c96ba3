"""Notification backend implementation using watchdog."""

import logging
import os
from pathlib import Path
from threading import Lock

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from watchrun_core.models import ChangeEvent, ChangeKind
from watchrun_core.registrar import is_hidden
from watchrun_core.watchers import ErrorCallback, EventCallback

logger = logging.getLogger(__name__)

_KINDS = {
    EVENT_TYPE_CREATED: ChangeKind.CREATED,
    EVENT_TYPE_MODIFIED: ChangeKind.MODIFIED,
    EVENT_TYPE_DELETED: ChangeKind.REMOVED,
}


def translate_event(event: FileSystemEvent) -> list[ChangeEvent]:
    """Convert a watchdog event into ChangeEvents.

    A move becomes a removal of the source plus a creation of the destination.
    """
    src = Path(os.fsdecode(event.src_path))

    if event.event_type == EVENT_TYPE_MOVED:
        changes = [ChangeEvent(src, ChangeKind.REMOVED, event.is_directory)]
        if event.dest_path:
            dest = Path(os.fsdecode(event.dest_path))
            changes.append(ChangeEvent(dest, ChangeKind.CREATED, event.is_directory))
        return changes

    kind = _KINDS.get(event.event_type, ChangeKind.OTHER)
    return [ChangeEvent(src, kind, event.is_directory)]


class _EventForwarder(FileSystemEventHandler):
    """Hands translated events to the backend, which decides what to forward."""

    def __init__(self, backend: "WatchdogBackend"):
        self.backend = backend

    def on_any_event(self, event: FileSystemEvent) -> None:
        try:
            changes = translate_event(event)
        except Exception as e:
            self.backend.report_error(e)
            return

        for change in changes:
            if self.backend.covers(change.path):
                self.backend.report_event(change)


class WatchdogBackend:
    """WatchBackend built on a watchdog Observer.

    The first directory added is scheduled recursively and later directories
    beneath it are already covered. Events are forwarded unless a directory
    between the scheduled root and the changed path is hidden, so hidden
    subtrees stay silent. The check is purely on the path and does not depend
    on the consumer having registered a new directory yet.
    """

    def __init__(self):
        self.observer = Observer()
        self._handler = _EventForwarder(self)
        self._lock = Lock()
        self._scheduled: list[Path] = []
        self._on_event: EventCallback | None = None
        self._on_error: ErrorCallback | None = None

    def start(self, on_event: EventCallback, on_error: ErrorCallback) -> None:
        """Start the observer thread.

        Args:
            on_event: Called from the observer thread for each change
            on_error: Called from the observer thread for backend errors
        """
        self._on_event = on_event
        self._on_error = on_error
        self.observer.start()
        logger.debug("Watchdog observer started")

    def add(self, path: Path) -> None:
        """Register a directory, scheduling a recursive watch if it is a new tree."""
        path = Path(path)
        with self._lock:
            if any(path.is_relative_to(root) for root in self._scheduled):
                return

        # Starts the emitter right away on a running observer, raising OSError on failure
        self.observer.schedule(self._handler, str(path), recursive=True)
        with self._lock:
            self._scheduled.append(path)
        logger.debug(f"Scheduled recursive watch on {path}")

    def covers(self, path: Path) -> bool:
        """True if no directory between a scheduled root and ``path`` is hidden.

        The root's own name and the changed entry's own name are not checked.
        """
        with self._lock:
            roots = list(self._scheduled)

        for root in roots:
            if path.is_relative_to(root):
                directories = path.relative_to(root).parts[:-1]
                return not any(is_hidden(name) for name in directories)
        return False

    def report_event(self, change: ChangeEvent) -> None:
        if self._on_event is not None:
            self._on_event(change)

    def report_error(self, error: Exception) -> None:
        if self._on_error is not None:
            self._on_error(error)
        else:
            logger.error(f"Watch backend error: {error}")

    def stop(self) -> None:
        """Stop the observer and release its watches."""
        if self.observer.is_alive():
            self.observer.stop()
            self.observer.join(timeout=2.0)
            logger.debug("Watchdog observer stopped")
        self._on_event = None
        self._on_error = None
