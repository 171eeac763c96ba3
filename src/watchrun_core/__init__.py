"""watchrun-core: matching, registration, debouncing and command running for watchrun."""

__version__ = "0.1.0"

# Models
from watchrun_core.models import ChangeEvent, ChangeKind, ExecutionResult, format_elapsed

# Core components
from watchrun_core.debounce import Debouncer
from watchrun_core.matcher import matches
from watchrun_core.registrar import DirectoryRegistrar
from watchrun_core.runner import CommandRunner

# Config
from watchrun_core.config import build_watch_config, load_file_settings
from watchrun_core.watchers import WatchBackend, WatchConfig

__all__ = [
    "__version__",
    # Models
    "ChangeEvent",
    "ChangeKind",
    "ExecutionResult",
    "format_elapsed",
    # Core
    "Debouncer",
    "DirectoryRegistrar",
    "CommandRunner",
    "matches",
    # Config
    "WatchBackend",
    "WatchConfig",
    "build_watch_config",
    "load_file_settings",
]
