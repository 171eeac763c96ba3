"""User-facing notices for a watch session.

The controller reports the banner, matched changes and recoverable failures
through a WatchNotifier, so the CLI can print them while an embedding host
routes them elsewhere.
"""

import logging
import sys
from typing import Protocol

logger = logging.getLogger(__name__)


class WatchNotifier(Protocol):
    """Where the controller sends its notices."""

    def info(self, message: str) -> None:
        """Banner lines, matched changes, new directories."""
        ...

    def warning(self, message: str) -> None:
        """Suspicious but harmless configuration."""
        ...

    def error(self, message: str) -> None:
        """Recoverable failures while watching."""
        ...


class NoOpNotifier:
    """Discards every notice. Default when the controller is embedded."""

    def info(self, msg: str) -> None:
        pass

    def warning(self, msg: str) -> None:
        pass

    def error(self, msg: str) -> None:
        pass


class ConsoleNotifier:
    """Terminal output for the CLI: info on stdout, problems on stderr."""

    def info(self, msg: str) -> None:
        print(msg, flush=True)

    def warning(self, msg: str) -> None:
        print(f"Warning: {msg}", file=sys.stderr, flush=True)

    def error(self, msg: str) -> None:
        print(f"Error: {msg}", file=sys.stderr, flush=True)


class LoggingNotifier:
    """Sends notices to the ``watchrun_core.notifier`` logger, for hosts that own logging."""

    def info(self, msg: str) -> None:
        logger.info(msg.rstrip("\n"))

    def warning(self, msg: str) -> None:
        logger.warning(msg)

    def error(self, msg: str) -> None:
        logger.error(msg)
