"""Run the watched command with the terminal attached."""

import logging
import shlex
import subprocess
import sys
import time
from collections.abc import Sequence
from typing import TextIO

from watchrun_core.models import ExecutionResult

logger = logging.getLogger(__name__)

SEPARATOR = "─" * 60


def format_command(command: Sequence[str]) -> str:
    """Join command tokens for display."""
    return " ".join(command)


class CommandRunner:
    """Executes a command, passing stdin/stdout/stderr straight through.

    The runner never raises for a failing command. Spawn errors and non-zero
    exits are both reported as a failed ExecutionResult.
    """

    def __init__(self, stream: TextIO | None = None):
        """Initialize runner.

        Args:
            stream: Where the header and result lines go (default: sys.stdout)
        """
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def execute(self, command: Sequence[str]) -> ExecutionResult:
        """Run ``command`` and block until it exits.

        Args:
            command: Program name followed by its arguments

        Returns:
            ExecutionResult with success flag, elapsed time and error detail
        """
        if not command:
            raise ValueError("Command must contain at least one token")

        self._print(f"\n▶ Executing: {format_command(command)}")
        self._print(SEPARATOR)

        result = self.run(command)

        self._print(SEPARATOR)
        if result.success:
            self._print(f"{result.icon} Command completed successfully in {result.elapsed_str}\n")
        else:
            self._print(f"{result.icon} Command failed after {result.elapsed_str}: {result.error}\n")
        return result

    def run(self, command: Sequence[str]) -> ExecutionResult:
        """Run ``command`` without printing anything around it."""
        logger.debug(f"Spawning: {shlex.join(command)}")
        start = time.monotonic()
        try:
            completed = subprocess.run(list(command), stdin=None, stdout=None, stderr=None)
        except OSError as e:
            elapsed = time.monotonic() - start
            logger.debug(f"Failed to start {command[0]!r}: {e}")
            return ExecutionResult(success=False, elapsed=elapsed, error=str(e))

        elapsed = time.monotonic() - start
        if completed.returncode == 0:
            return ExecutionResult(success=True, elapsed=elapsed, returncode=0)
        return ExecutionResult(
            success=False,
            elapsed=elapsed,
            error=describe_returncode(completed.returncode),
            returncode=completed.returncode,
        )

    def _print(self, line: str) -> None:
        print(line, file=self.stream, flush=True)


def describe_returncode(returncode: int) -> str:
    """Describe a non-zero exit status."""
    if returncode < 0:
        return f"terminated by signal {-returncode}"
    return f"exit status {returncode}"
