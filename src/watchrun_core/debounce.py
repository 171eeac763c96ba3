"""Trailing-edge debounce built on threading.Timer."""

import logging
from collections.abc import Callable
from threading import Lock, Timer

logger = logging.getLogger(__name__)

Action = Callable[[], None]


class Debouncer:
    """Collapse bursts of triggers into a single call.

    Every ``trigger()`` cancels the pending firing and schedules a new one
    ``duration`` seconds later, so the action only runs once the stream of
    triggers has been quiet for a full window. The action recorded by the last
    trigger wins.

    Actions run on the timer thread and never overlap. If a firing elapses
    while the previous action is still running it becomes the single queued
    follow-up (a later firing replaces it) and runs as soon as the current
    action returns.
    """

    def __init__(self, duration: float):
        """Initialize debouncer.

        Args:
            duration: Quiet period in seconds
        """
        if duration < 0:
            raise ValueError(f"Debounce duration must be >= 0, got {duration}")
        self.duration = duration
        self._lock = Lock()
        self._timer: Timer | None = None
        self._generation = 0
        self._action: Action | None = None
        self._follow_up: Action | None = None
        self._running = False
        self._closed = False

    @property
    def pending(self) -> bool:
        """True while a firing is scheduled or queued behind a running action."""
        with self._lock:
            return self._timer is not None or self._follow_up is not None

    @property
    def running(self) -> bool:
        """True while an action is executing."""
        with self._lock:
            return self._running

    def trigger(self, action: Action) -> None:
        """Schedule ``action`` after the quiet period, replacing any pending one."""
        with self._lock:
            if self._closed:
                logger.debug("Trigger ignored - debouncer cancelled")
                return

            if self._timer is not None:
                self._timer.cancel()

            self._action = action
            self._generation += 1
            timer = Timer(self.duration, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        """Drop any pending firing and refuse further triggers.

        An action that is already executing is allowed to finish.
        """
        with self._lock:
            self._closed = True
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._action = None
            self._follow_up = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A newer trigger or cancel() replaced this timer after it had already elapsed
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
            action = self._action

            if self._running:
                self._follow_up = action
                logger.debug("Debounce elapsed while action running - queued follow-up")
                return
            self._running = True

        while action is not None:
            try:
                action()
            except Exception as e:
                logger.exception(f"Debounced action failed: {e}")

            with self._lock:
                action, self._follow_up = self._follow_up, None
                if action is None:
                    self._running = False
