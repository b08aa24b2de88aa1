"""Configuration loader with layered priority.

Priority order (highest to lowest):
1. Environment variables (ACTRUN_DEVICE, ACTRUN_VERBOSE, ACTRUN_COMMAND_TIMEOUT)
2. Project config (.actrun.yaml in current directory)
3. Global config (~/.actrun.yaml)
4. Default values
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# Config file paths
GLOBAL_CONFIG = Path.home() / ".actrun.yaml"
PROJECT_CONFIG = Path.cwd() / ".actrun.yaml"


def _safe_int(value: Any, default: int) -> int:
    """Convert value to int, returning default if None or invalid."""
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _parse_bool(value: Any, default: bool = False) -> bool:
    """Parse boolean value from various formats.

    Handles:
    - None -> default
    - bool -> as-is
    - str -> "true", "1", "yes", "on" are True
    - other -> bool(value)
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "on")
    return bool(value)


def parse_duration(value: Any, default: float) -> float:
    """Parse duration value from string (e.g., '5s', '500ms') or number.

    Args:
        value: Duration as string ('5s', '500ms', '1.5s') or number (seconds)
        default: Default value if parsing fails

    Returns:
        Duration in seconds as float
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        value = value.strip().lower()
        try:
            if value.endswith("ms"):
                return float(value[:-2]) / 1000
            if value.endswith("s"):
                return float(value[:-1])
            return float(value)
        except ValueError:
            return default
    return default


@dataclass
class TimeoutConfig:
    """Timeout settings, in seconds."""

    command: float = 60.0  # Upper bound for a single command, scroll loops included
    resolve: float = 5.0  # Polling window for element resolution


@dataclass
class AdbConfig:
    """Settings for the adb backend."""

    poll_interval: float = 0.5
    swipe_duration_ms: int = 300


@dataclass
class ActrunConfig:
    """Main configuration for actrun."""

    device: str | None = None
    verbose: bool = False
    stop_on_failure: bool = True

    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    adb: AdbConfig = field(default_factory=AdbConfig)


class ConfigLoader:
    """Loads and merges configuration from multiple sources."""

    @classmethod
    def load(cls) -> ActrunConfig:
        """Load configuration with layered priority.

        Returns:
            Merged ActrunConfig instance.
        """
        config_dict: dict[str, Any] = {}

        # Layer 1: Global config (~/.actrun.yaml)
        if GLOBAL_CONFIG.exists():
            config_dict = cls._deep_merge(config_dict, cls._load_yaml(GLOBAL_CONFIG))

        # Layer 2: Project config (.actrun.yaml)
        if PROJECT_CONFIG.exists():
            config_dict = cls._deep_merge(config_dict, cls._load_yaml(PROJECT_CONFIG))

        # Layer 3: Environment variables (highest priority)
        config_dict = cls._deep_merge(config_dict, cls._get_env_overrides())

        return cls._build_config(config_dict)

    @classmethod
    def _load_yaml(cls, path: Path) -> dict[str, Any]:
        """Load YAML file safely."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
                return data if isinstance(data, dict) else {}
        except (yaml.YAMLError, OSError):
            return {}

    @classmethod
    def _get_env_overrides(cls) -> dict[str, Any]:
        """Get configuration overrides from environment variables."""
        overrides: dict[str, Any] = {}

        if "ACTRUN_DEVICE" in os.environ:
            overrides["device"] = os.environ["ACTRUN_DEVICE"]

        if "ACTRUN_VERBOSE" in os.environ:
            overrides["verbose"] = _parse_bool(os.environ["ACTRUN_VERBOSE"])

        if "ACTRUN_COMMAND_TIMEOUT" in os.environ:
            overrides["timeouts"] = {"command": os.environ["ACTRUN_COMMAND_TIMEOUT"]}

        return overrides

    @classmethod
    def _deep_merge(cls, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = cls._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    @classmethod
    def _build_config(cls, config_dict: dict[str, Any]) -> ActrunConfig:
        """Build ActrunConfig from dictionary."""
        timeouts_dict = config_dict.get("timeouts") or {}
        adb_dict = config_dict.get("adb") or {}

        timeouts = TimeoutConfig(
            command=parse_duration(timeouts_dict.get("command"), 60.0),
            resolve=parse_duration(timeouts_dict.get("resolve"), 5.0),
        )

        adb = AdbConfig(
            poll_interval=parse_duration(adb_dict.get("poll_interval"), 0.5),
            swipe_duration_ms=_safe_int(adb_dict.get("swipe_duration_ms"), 300),
        )

        return ActrunConfig(
            device=config_dict.get("device"),
            verbose=_parse_bool(config_dict.get("verbose"), False),
            stop_on_failure=_parse_bool(config_dict.get("stop_on_failure"), True),
            timeouts=timeouts,
            adb=adb,
        )


def setup_logging(verbose: bool, log_dir: Path | None) -> Path | None:
    """Configure file-based DEBUG logging.

    Args:
        verbose: Enable logging when True
        log_dir: Directory to write debug.log

    Returns:
        Path to log file if created, None otherwise
    """
    if not verbose or log_dir is None:
        return None

    log_file = log_dir / "debug.log"
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_file, mode="w")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s.%(msecs)03d [%(levelname)-5s] %(name)-20s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))

    # Configure root actrun logger (clear existing handlers to prevent duplicates)
    actrun_logger = logging.getLogger("actrun")
    for old in actrun_logger.handlers:
        old.close()
    actrun_logger.handlers.clear()
    actrun_logger.setLevel(logging.DEBUG)
    actrun_logger.addHandler(handler)

    return log_file
