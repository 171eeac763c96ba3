#!/usr/bin/env python3
"""
Example: Headless Embedding
Shows how to drive WatchController from your own asyncio program.

This example demonstrates:
- Building a WatchConfig in code instead of from CLI flags
- Routing notices through logging with LoggingNotifier
- Reacting to results with on_command_finished
- Stopping the watch programmatically after a few runs

Try it:
    python examples/embedding_headless.py
    # then save a .py file in the current directory a few times
"""

import asyncio
import logging
import sys
from pathlib import Path

from watchrun import WatchController
from watchrun_core import ExecutionResult, WatchConfig
from watchrun_core.notifier import LoggingNotifier


class RunBudget:
    """Stop watching after a fixed number of command runs."""

    def __init__(self, controller: WatchController, max_runs: int):
        self.controller = controller
        self.max_runs = max_runs
        self.results: list[ExecutionResult] = []

    def on_finished(self, result: ExecutionResult) -> None:
        # Called from the debouncer's thread; stop() is thread-safe
        self.results.append(result)
        logging.info(f"Run {len(self.results)}/{self.max_runs}: {result.icon} {result.elapsed_str}")
        if len(self.results) >= self.max_runs:
            self.controller.stop()


async def main() -> None:
    config = WatchConfig(
        root=Path.cwd(),
        command=[sys.executable, "-c", "print('checking...')"],
        pattern="**/*.py",
        debounce_ms=250,
    )
    controller = WatchController(config, notifier=LoggingNotifier())
    budget = RunBudget(controller, max_runs=3)
    controller.on_command_finished = budget.on_finished

    await controller.run()

    passed = sum(1 for r in budget.results if r.success)
    print(f"\n{passed}/{len(budget.results)} runs succeeded")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
