"""Configuration loading for watchrun."""

import logging
import shlex
import tomllib
from pathlib import Path
from typing import Any

from watchrun_core.watchers import DEFAULT_DEBOUNCE_MS, DEFAULT_PATTERN, WatchConfig

logger = logging.getLogger(__name__)


def load_file_settings(path: str | Path) -> dict[str, Any]:
    """Read the ``[watch]`` table of a TOML config file.

    Args:
        path: Path to TOML config file

    Returns:
        Dict with any of ``pattern``, ``debounce_ms`` and ``command`` (as a list)

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid TOML or has bad values
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Failed to parse config file {path}: {e}") from e

    table = raw.get("watch", {})
    if not isinstance(table, dict):
        raise ValueError(f"[watch] in {path} must be a table")

    settings: dict[str, Any] = {}

    if "pattern" in table:
        if not isinstance(table["pattern"], str):
            raise ValueError(f"watch.pattern in {path} must be a string")
        settings["pattern"] = table["pattern"]

    if "debounce_ms" in table:
        debounce = table["debounce_ms"]
        if not isinstance(debounce, int) or isinstance(debounce, bool) or debounce < 0:
            raise ValueError(f"watch.debounce_ms in {path} must be a non-negative integer")
        settings["debounce_ms"] = debounce

    if "command" in table:
        settings["command"] = _parse_command(table["command"], path)

    unknown = set(table) - {"pattern", "debounce_ms", "command"}
    if unknown:
        logger.warning(f"Ignoring unknown keys in [watch] of {path}: {', '.join(sorted(unknown))}")

    return settings


def _parse_command(value: Any, path: Path) -> list[str]:
    if isinstance(value, str):
        return shlex.split(value)
    if isinstance(value, list) and all(isinstance(token, str) for token in value):
        return list(value)
    raise ValueError(f"watch.command in {path} must be a string or a list of strings")


def build_watch_config(
    root: str | Path,
    command: list[str] | None = None,
    pattern: str | None = None,
    debounce_ms: int | None = None,
    config_path: str | Path | None = None,
) -> WatchConfig:
    """Merge CLI values, an optional config file and defaults into a WatchConfig.

    Explicit arguments win over the config file, which wins over defaults.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist
        ValueError: If no command is available or values are invalid
    """
    settings = load_file_settings(config_path) if config_path else {}

    return WatchConfig(
        root=Path(root),
        command=command or settings.get("command", []),
        pattern=pattern if pattern is not None else settings.get("pattern", DEFAULT_PATTERN),
        debounce_ms=debounce_ms if debounce_ms is not None else settings.get("debounce_ms", DEFAULT_DEBOUNCE_MS),
    )
