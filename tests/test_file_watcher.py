"""Tests for the watchdog-backed notification backend."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from conftest import wait_for
from watchrun_core.file_watcher import WatchdogBackend, _EventForwarder, translate_event
from watchrun_core.models import ChangeEvent, ChangeKind


class TestTranslateEvent:
    def test_created(self):
        assert translate_event(FileCreatedEvent("/w/a.txt")) == [
            ChangeEvent(Path("/w/a.txt"), ChangeKind.CREATED, False)
        ]

    def test_modified(self):
        (change,) = translate_event(FileModifiedEvent("/w/a.txt"))
        assert change.kind is ChangeKind.MODIFIED

    def test_deleted(self):
        (change,) = translate_event(FileDeletedEvent("/w/a.txt"))
        assert change.kind is ChangeKind.REMOVED

    def test_directory_flag(self):
        (change,) = translate_event(DirCreatedEvent("/w/sub"))
        assert change.is_directory
        assert change.kind is ChangeKind.CREATED

    def test_move_is_remove_plus_create(self):
        changes = translate_event(FileMovedEvent("/w/a.txt", "/w/b.txt"))
        assert changes == [
            ChangeEvent(Path("/w/a.txt"), ChangeKind.REMOVED, False),
            ChangeEvent(Path("/w/b.txt"), ChangeKind.CREATED, False),
        ]

    def test_closed_is_other(self):
        (change,) = translate_event(FileClosedEvent("/w/a.txt"))
        assert change.kind is ChangeKind.OTHER


class TestForwarding:
    @pytest.fixture
    def backend(self):
        backend = WatchdogBackend()
        self.events = []
        self.errors = []
        backend._on_event = self.events.append
        backend._on_error = self.errors.append
        backend._scheduled = [Path("/w")]
        return backend

    def test_events_from_watched_tree_forwarded(self, backend):
        forwarder = _EventForwarder(backend)
        forwarder.dispatch(FileModifiedEvent("/w/src/a.py"))
        assert [e.path for e in self.events] == [Path("/w/src/a.py")]

    def test_file_in_directory_not_yet_registered_forwarded(self, backend):
        """A new directory's files must not wait for the directory to be registered."""
        forwarder = _EventForwarder(backend)
        forwarder.dispatch(FileCreatedEvent("/w/new/deeper/b.go"))
        assert [e.path for e in self.events] == [Path("/w/new/deeper/b.go")]

    @pytest.mark.parametrize("path", ["/w/.git/index", "/w/src/.cache/x.py", "/w/.venv/lib/site.py"])
    def test_events_inside_hidden_directories_dropped(self, backend, path):
        _EventForwarder(backend).dispatch(FileModifiedEvent(path))
        assert self.events == []

    def test_hidden_file_and_hidden_directory_entry_forwarded(self, backend):
        forwarder = _EventForwarder(backend)
        forwarder.dispatch(FileModifiedEvent("/w/.env"))
        forwarder.dispatch(DirCreatedEvent("/w/.venv"))
        assert [e.path for e in self.events] == [Path("/w/.env"), Path("/w/.venv")]

    def test_hidden_root_name_not_checked(self, backend):
        backend._scheduled = [Path("/home/.dotfiles")]
        _EventForwarder(backend).dispatch(FileModifiedEvent("/home/.dotfiles/vimrc"))
        assert [e.path for e in self.events] == [Path("/home/.dotfiles/vimrc")]

    def test_events_outside_scheduled_roots_dropped(self, backend):
        _EventForwarder(backend).dispatch(FileModifiedEvent("/elsewhere/a.py"))
        assert self.events == []

    def test_add_inside_scheduled_root_does_not_reschedule(self, backend):
        backend.observer = MagicMock()
        backend.add(Path("/w/src"))
        backend.observer.schedule.assert_not_called()

        backend.add(Path("/other"))
        backend.observer.schedule.assert_called_once()
        assert backend._scheduled == [Path("/w"), Path("/other")]

    def test_translation_errors_reported(self, backend, monkeypatch):
        def broken(event):
            raise RuntimeError("bad event")

        monkeypatch.setattr("watchrun_core.file_watcher.translate_event", broken)
        _EventForwarder(backend).dispatch(FileModifiedEvent("/w/a.py"))

        assert [str(e) for e in self.errors] == ["bad event"]


def test_real_observer_reports_changes(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / ".git").mkdir()

    events: list[ChangeEvent] = []
    errors: list[Exception] = []
    backend = WatchdogBackend()
    backend.start(events.append, errors.append)
    try:
        backend.add(tmp_path)
        backend.add(tmp_path / "src")

        (tmp_path / "src" / "a.py").write_text("x = 1\n")
        (tmp_path / ".git" / "index").write_text("ignored\n")

        assert wait_for(lambda: any(e.path == tmp_path / "src" / "a.py" for e in events))
    finally:
        backend.stop()

    assert not any(".git" in e.path.parts for e in events)
    assert errors == []
    assert not backend.observer.is_alive()
