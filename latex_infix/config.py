"""Project-level .env config file reader for service settings."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

# Project root .env (next to pyproject.toml)
_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
DEFAULT_PORT = 8770
DEFAULT_MODE = "strict"
DEFAULT_MAX_LENGTH = 2000
DEFAULT_LOG_LEVEL = "INFO"

MODES = ("strict", "lenient")


def read_config() -> dict[str, str]:
    """Read all variables from the project .env file."""
    config: dict[str, str] = {}
    if not _ENV_FILE.exists():
        return config
    for line in _ENV_FILE.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        match = re.match(r"^([A-Z_][A-Z0-9_]*)=(.*)$", line)
        if match:
            config[match.group(1)] = match.group(2).strip("\"'")
    return config


def get_key(key: str) -> str | None:
    """Get a single key value, checking .env then os.environ."""
    config = read_config()
    if key in config:
        return config[key]
    return os.environ.get(key) or None


def _get_int(key: str, default: int, low: int, high: int) -> int:
    raw = get_key(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if not (low <= value <= high):
        return default
    return value


def get_port(default: int = DEFAULT_PORT) -> int:
    """Resolve LATEX_INFIX_PORT from config/env, with validation and fallback."""
    return _get_int("LATEX_INFIX_PORT", default, 1, 65535)


def get_max_length(default: int = DEFAULT_MAX_LENGTH) -> int:
    """Longest LaTeX input (in characters) the service accepts."""
    return _get_int("LATEX_INFIX_MAX_LENGTH", default, 1, 1_000_000)


def get_mode(default: str = DEFAULT_MODE) -> str:
    """Default error mode, ``strict`` or ``lenient``."""
    raw = (get_key("LATEX_INFIX_MODE") or "").strip().lower()
    return raw if raw in MODES else default


def get_log_level(default: str = DEFAULT_LOG_LEVEL) -> int:
    raw = (get_key("LATEX_INFIX_LOG_LEVEL") or default).upper()
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.INFO
