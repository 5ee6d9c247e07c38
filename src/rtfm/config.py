"""Config file loading and validation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from .constants import DEFAULT_CONFIG_FILE, MAX_SECTION, MIN_SECTION
from .errors import ConfigError
from .models import AppConfig
from .path_utils import map_path

MIN_MAN_WIDTH = 20

KNOWN_KEYS = frozenset(
    {
        "default_section",
        "debounce_ms",
        "cache_capacity",
        "fetch_timeout_sec",
        "auto_preview",
        "man_width",
        "logs_dir",
    }
)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_section(value: Any, field_name: str = "default_section") -> int:
    """Validate a man section number.

    Raises:
        ConfigError: If the value is not an int within the section range
    """
    if not _is_int(value):
        raise ConfigError(f"{field_name} must be an integer")
    if not MIN_SECTION <= value <= MAX_SECTION:
        raise ConfigError(
            f"{field_name} must be between {MIN_SECTION} and {MAX_SECTION}, got {value}"
        )
    return int(value)


def validate_config(payload: dict[str, Any]) -> None:
    """Validate config structure.

    Args:
        payload: Config dictionary to validate

    Raises:
        ConfigError: If config is invalid
    """
    if not isinstance(payload, dict):
        raise ConfigError("Config must be a JSON object")

    unknown = sorted(set(payload) - KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    if "default_section" in payload:
        validate_section(payload["default_section"])

    if "debounce_ms" in payload:
        value = payload["debounce_ms"]
        if not _is_int(value) or value < 0:
            raise ConfigError("debounce_ms must be a non-negative integer")

    if "cache_capacity" in payload:
        value = payload["cache_capacity"]
        if not _is_int(value) or value < 1:
            raise ConfigError("cache_capacity must be a positive integer")

    if payload.get("fetch_timeout_sec") is not None:
        value = payload["fetch_timeout_sec"]
        if not _is_number(value) or value <= 0:
            raise ConfigError("fetch_timeout_sec must be a positive number or null")

    if "auto_preview" in payload and not isinstance(payload["auto_preview"], bool):
        raise ConfigError("auto_preview must be a boolean")

    if payload.get("man_width") is not None:
        value = payload["man_width"]
        if not _is_int(value) or value < MIN_MAN_WIDTH:
            raise ConfigError(
                f"man_width must be an integer >= {MIN_MAN_WIDTH} or null"
            )

    if payload.get("logs_dir") is not None:
        value = payload["logs_dir"]
        if not isinstance(value, str) or not value.strip():
            raise ConfigError("logs_dir must be a non-empty string or null")


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load config from a JSON file.

    With no explicit path, the default config file is used when it exists;
    otherwise built-in defaults apply.

    Raises:
        ConfigError: If the file is missing (explicit path), unreadable, or invalid
    """
    explicit = path is not None
    try:
        config_path = Path(map_path(path if explicit else DEFAULT_CONFIG_FILE))
    except ValueError as e:
        raise ConfigError(f"Invalid config path: {e}") from e

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        return AppConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    validate_config(payload)

    if payload.get("logs_dir") is not None:
        try:
            payload["logs_dir"] = map_path(payload["logs_dir"])
        except ValueError as e:
            raise ConfigError(f"Invalid logs_dir: {e}") from e

    config = AppConfig.from_dict(payload)
    config.config_path = str(config_path)
    return config
