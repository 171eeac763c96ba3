"""Watch controller: turns file system events into debounced command runs."""

import asyncio
import logging
import os
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from watchrun_core.debounce import Debouncer
from watchrun_core.matcher import is_valid_pattern, matches
from watchrun_core.models import ChangeEvent, ChangeKind, ExecutionResult
from watchrun_core.notifier import NoOpNotifier, WatchNotifier
from watchrun_core.registrar import DirectoryRegistrar, is_hidden
from watchrun_core.runner import CommandRunner, format_command
from watchrun_core.watchers import WatchBackend, WatchConfig

logger = logging.getLogger(__name__)


class WatchStartupError(Exception):
    """Setting up the watch failed; nothing is being watched."""


class WatchState(Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    WATCHING = "watching"
    STOPPED = "stopped"


class WatchController:
    """Owns one watch session. Primary embed point.

    Lifecycle: ``start()`` (registers the tree, fatal on failure), then
    ``run()`` consumes the event and error sources until ``stop()`` is called.
    ``run()`` calls ``start()`` itself when needed.

    Events arrive on the backend's thread and are handed to the event loop with
    ``call_soon_threadsafe``. Commands run on the debouncer's timer thread, so
    a long command never blocks event processing.
    """

    def __init__(
        self,
        config: WatchConfig,
        backend: WatchBackend | None = None,
        notifier: WatchNotifier | None = None,
        runner: CommandRunner | None = None,
    ):
        """Initialize controller.

        Args:
            config: Watch configuration
            backend: Notification backend (defaults to WatchdogBackend)
            notifier: Optional notification handler (defaults to NoOpNotifier - silent)
            runner: Command runner (defaults to CommandRunner on stdout)
        """
        if backend is None:
            from watchrun_core.file_watcher import WatchdogBackend

            backend = WatchdogBackend()

        self.config = config
        self.backend = backend
        self.notifier = notifier or NoOpNotifier()
        self.runner = runner or CommandRunner()
        self.registrar = DirectoryRegistrar(self.backend)
        self.debouncer = Debouncer(config.debounce_seconds)
        self.root = Path(config.root)
        self.state = WatchState.IDLE
        self.last_result: ExecutionResult | None = None

        self._loop: asyncio.AbstractEventLoop | None = None
        self._events: asyncio.Queue = asyncio.Queue()
        self._errors: asyncio.Queue = asyncio.Queue()

        # Outbound events (host wires these)
        self.on_change_matched: Callable[[str, ChangeEvent], None] | None = None
        self.on_command_finished: Callable[[ExecutionResult], None] | None = None

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        """Print the banner, start the backend and register the tree.

        Idempotent once watching.

        Raises:
            RuntimeError: If ``loop`` is not running
            WatchStartupError: If the root cannot be resolved or registered
        """
        if self.state is not WatchState.IDLE:
            return

        if not loop.is_running():
            raise RuntimeError("Event loop must be running before start().")

        self.state = WatchState.INITIALIZING
        self._loop = loop

        try:
            self.root = self.root.resolve(strict=True)
        except OSError as e:
            self.state = WatchState.STOPPED
            raise WatchStartupError(f"Failed to resolve directory {self.root}: {e}") from e
        if not self.root.is_dir():
            self.state = WatchState.STOPPED
            raise WatchStartupError(f"Not a directory: {self.root}")

        self.notifier.info(f"Watching directory: {self.root}")
        self.notifier.info(f"Pattern: {self.config.pattern}")
        self.notifier.info(f"Command: {format_command(self.config.command)}")
        self.notifier.info(f"Debounce: {self.config.debounce_ms}ms\n")
        if not is_valid_pattern(self.config.pattern):
            self.notifier.warning(f"Pattern {self.config.pattern!r} is not a valid glob and will never match")

        try:
            self.backend.start(self._on_backend_event, self._on_backend_error)
        except Exception as e:
            self.state = WatchState.STOPPED
            raise WatchStartupError(f"Failed to create watcher: {e}") from e

        try:
            added = self.registrar.register_tree(self.root)
        except OSError as e:
            self.stop()
            raise WatchStartupError(f"Failed to add directories: {e}") from e

        logger.info(f"Watching {len(added)} directories under {self.root}")
        self.state = WatchState.WATCHING
        self.notifier.info("Watching for changes... Press Ctrl+C to stop")

    async def run(self) -> None:
        """Consume events and errors until both sources are closed by stop()."""
        self.start(asyncio.get_running_loop())
        try:
            await asyncio.gather(self._consume_events(), self._consume_errors())
        finally:
            self.stop()

    def stop(self) -> None:
        """Stop watching. Safe to call from any thread, more than once.

        Any pending debounced run is dropped. A command already executing is
        left to finish.
        """
        if self.state is WatchState.STOPPED:
            return
        self.state = WatchState.STOPPED

        self.debouncer.cancel()
        try:
            self.backend.stop()
        except Exception as e:
            logger.error(f"Error stopping watch backend: {e}")

        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(self._events.put_nowait, None)
            loop.call_soon_threadsafe(self._errors.put_nowait, None)
        logger.debug("Watch controller stopped")

    @property
    def watching(self) -> bool:
        return self.state is WatchState.WATCHING

    def handle_change(self, event: ChangeEvent) -> None:
        """Process one change event on the event-consuming path."""
        if event.kind is ChangeKind.CREATED and event.path.is_dir():
            self.add_directory(event.path)
            return

        if not event.kind.triggers or event.is_directory:
            return

        relative = self.relative_path(event.path)
        if not matches(relative, self.config.pattern):
            logger.debug(f"Ignoring {relative} ({event.kind.value}) - no match for {self.config.pattern!r}")
            return

        self.notifier.info(f"Change detected: {relative} ({event.kind.value})")
        if self.on_change_matched:
            self.on_change_matched(relative, event)
        self.debouncer.trigger(self.run_command)

    def handle_error(self, error: Exception) -> None:
        """Log a backend error and keep watching."""
        logger.error(f"Watch error: {error}")
        self.notifier.error(f"Watch error: {error}")

    def add_directory(self, path: Path) -> list[Path]:
        """Register a newly created directory tree. Failures are not fatal.

        The notice is printed for every non-hidden directory, including one
        that was deleted and re-created and so is already in the watch set.
        """
        if is_hidden(path.name):
            logger.debug(f"Not watching new hidden directory {path}")
            return []

        try:
            added = self.registrar.register_tree(path)
        except OSError as e:
            logger.error(f"Failed to watch new directory {path}: {e}")
            self.notifier.error(f"Failed to watch new directory {path}: {e}")
            return []

        self.notifier.info(f"New directory added to watch: {path}")
        return added

    def run_command(self) -> ExecutionResult:
        """Run the configured command. Called from the debouncer's thread."""
        result = self.runner.execute(self.config.command)
        self.last_result = result
        if not result.success:
            logger.debug(f"Command failed: {result.error}")
        if self.on_command_finished:
            self.on_command_finished(result)
        return result

    def relative_path(self, path: Path) -> str:
        """Path relative to the watched root in ``/`` form, or the raw path."""
        try:
            relative = os.path.relpath(path, self.root)
        except ValueError:
            return str(path)
        return Path(relative).as_posix()

    # Backend callbacks, invoked on the backend's thread
    def _on_backend_event(self, event: ChangeEvent) -> None:
        self._post(self._events, event)

    def _on_backend_error(self, error: Exception) -> None:
        self._post(self._errors, error)

    def _post(self, queue: asyncio.Queue, item: object) -> None:
        loop = self._loop
        if loop is None or loop.is_closed() or self.state is WatchState.STOPPED:
            return
        loop.call_soon_threadsafe(queue.put_nowait, item)

    async def _consume_events(self) -> None:
        while True:
            event = await self._events.get()
            if event is None:
                break
            try:
                self.handle_change(event)
            except Exception as e:
                logger.exception(f"Error handling change event {event}: {e}")

    async def _consume_errors(self) -> None:
        while True:
            error = await self._errors.get()
            if error is None:
                break
            self.handle_error(error)
