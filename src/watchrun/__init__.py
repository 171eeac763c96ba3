"""watchrun: run a command whenever matching files change."""

__version__ = "0.1.0"

# Public API
from watchrun.controller import WatchController, WatchStartupError, WatchState

__all__ = [
    "__version__",
    # Primary components
    "WatchController",
    "WatchStartupError",
    "WatchState",
]
