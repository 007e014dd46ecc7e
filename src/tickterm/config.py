"""Configuration for tickterm applications."""

from __future__ import annotations

import json
import math
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

DEFAULT_TICK_INTERVAL = 0.2  # seconds

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ENV_TICK_INTERVAL = "TICKTERM_TICK_INTERVAL"
ENV_LOG_LEVEL = "TICKTERM_LOG_LEVEL"
ENV_LOG_FILE = "TICKTERM_LOG_FILE"


@dataclass
class Config:
    """Terminal session and event loop settings."""

    tick_interval: float = DEFAULT_TICK_INTERVAL
    mouse_capture: bool = True
    forward_resize: bool = False
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        try:
            self.tick_interval = float(self.tick_interval)
        except (TypeError, ValueError):
            raise ValueError(f"tick_interval is not a number: {self.tick_interval!r}") from None
        if not math.isfinite(self.tick_interval) or self.tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {self.tick_interval}")

        if not isinstance(self.log_level, str):
            raise ValueError(f"log_level must be a string, got {self.log_level!r}")
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def get_config_path(custom_path: Optional[Path] = None) -> Path:
    """Get the configuration file path (``~/.config/tickterm/config.json`` by default)."""
    if custom_path is not None:
        return custom_path
    return Path.home() / ".config" / "tickterm" / "config.json"


def _default_file_reader(path: Path) -> Optional[dict[str, Any]]:
    """Load JSON from disk. Missing, empty or unreadable files give None."""
    if not path.exists():
        return None
    try:
        content = path.read_text()
        if not content.strip():
            return None
        data = json.loads(content)
    except (OSError, json.JSONDecodeError):
        return None
    return data if isinstance(data, dict) else None


def load_config(
    path: Optional[Path] = None,
    file_reader: Optional[Callable[[Path], Optional[dict[str, Any]]]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """Load configuration from file, then apply environment overrides.

    Args:
        path: Path to config file. If None, uses the default path.
        file_reader: Injectable file reader for testing.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Config with values from file and environment, or defaults.

    Raises:
        ValueError: If a configured value is out of range.
    """
    reader = file_reader or _default_file_reader
    env = os.environ if environ is None else environ

    data = reader(get_config_path(path)) or {}

    values: dict[str, Any] = {
        "tick_interval": data.get("tick_interval", Config.tick_interval),
        "mouse_capture": bool(data.get("mouse_capture", Config.mouse_capture)),
        "forward_resize": bool(data.get("forward_resize", Config.forward_resize)),
        "log_level": data.get("log_level", Config.log_level),
        "log_file": data.get("log_file", Config.log_file),
    }

    if tick := env.get(ENV_TICK_INTERVAL):
        try:
            values["tick_interval"] = float(tick)
        except ValueError:
            raise ValueError(f"{ENV_TICK_INTERVAL} is not a number: {tick!r}") from None
    if level := env.get(ENV_LOG_LEVEL):
        values["log_level"] = level
    if log_file := env.get(ENV_LOG_FILE):
        values["log_file"] = log_file

    return Config(**values)
