"""YAML configuration for ccexp.

Read-only: ~/.config/ccexp/config.yaml (or $XDG_CONFIG_HOME/ccexp) is
deep-merged over DEFAULT_CONFIG, then CCEXP_* environment variables are
applied on top. Command-line flags override both.
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from .menu import MessageDurations
from .types import ScanOptions

logger = logging.getLogger(__name__)

THEME_CHOICES = ("auto", "unicode", "ascii")

DEFAULT_CONFIG: dict[str, Any] = {
    "recursive": True,
    "include_hidden": False,
    "max_depth": 20,
    "extra_exclusions": [],
    "success_message_seconds": 2.0,
    "error_message_seconds": 3.0,
    "theme": "auto",
    "debug": False,
}

ENV_THEME = "CCEXP_THEME"
ENV_DEBUG = "CCEXP_DEBUG"

_TRUTHY = {"1", "true", "yes", "on"}


def get_config_dir() -> Path:
    """Get the ccexp config directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(xdg_config) / "ccexp"


def get_config_path() -> Path:
    return get_config_dir() / "config.yaml"


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env(cfg: dict[str, Any]) -> dict[str, Any]:
    theme = os.environ.get(ENV_THEME, "").strip().lower()
    if theme:
        if theme in THEME_CHOICES:
            cfg["theme"] = theme
        else:
            logger.warning("Ignoring %s=%s (expected one of %s)",
                           ENV_THEME, theme, ", ".join(THEME_CHOICES))

    debug = os.environ.get(ENV_DEBUG)
    if debug is not None:
        cfg["debug"] = debug.strip().lower() in _TRUTHY
    return cfg


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load the config file merged over defaults, with env overrides applied.

    A missing file yields the defaults. An unreadable or invalid file yields
    the defaults and logs a warning.
    """
    config_path = path or get_config_path()
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        data = None
    except (yaml.YAMLError, OSError) as e:
        logger.warning("Ignoring config file %s: %s", config_path, e)
        data = None

    if isinstance(data, dict):
        cfg = _deep_merge(cfg, data)
    elif data is not None:
        logger.warning("Ignoring config file %s: expected a mapping", config_path)

    return _apply_env(cfg)


def _as_float(cfg: dict[str, Any], key: str) -> float:
    try:
        value = float(cfg.get(key, DEFAULT_CONFIG[key]))
    except (TypeError, ValueError):
        logger.warning("Invalid %s in config, using default", key)
        return DEFAULT_CONFIG[key]
    return value if value > 0 else DEFAULT_CONFIG[key]


def message_durations(cfg: dict[str, Any]) -> MessageDurations:
    return MessageDurations(
        success=_as_float(cfg, "success_message_seconds"),
        error=_as_float(cfg, "error_message_seconds"),
    )


def scan_options(
    cfg: dict[str, Any],
    path: Path | None = None,
    *,
    recursive: bool | None = None,
    include_hidden: bool | None = None,
    **extra: Any,
) -> ScanOptions:
    """Build ScanOptions from config values and command-line overrides.

    Args:
        cfg: Loaded config.
        path: Project root (defaults to cwd).
        recursive: Flag override; None keeps the config value.
        include_hidden: Flag override; None keeps the config value.
        **extra: Passed straight to ScanOptions (kind, home, ...).
    """
    try:
        max_depth = int(cfg.get("max_depth", DEFAULT_CONFIG["max_depth"]))
    except (TypeError, ValueError):
        logger.warning("Invalid max_depth in config, using default")
        max_depth = DEFAULT_CONFIG["max_depth"]

    exclusions = cfg.get("extra_exclusions") or []
    if not isinstance(exclusions, list):
        logger.warning("extra_exclusions must be a list, ignoring")
        exclusions = []

    return ScanOptions(
        path=(path or Path.cwd()).expanduser(),
        recursive=bool(cfg.get("recursive", True)) if recursive is None else recursive,
        include_hidden=(
            bool(cfg.get("include_hidden", False)) if include_hidden is None else include_hidden
        ),
        max_depth=max_depth,
        extra_exclusions=tuple(str(name) for name in exclusions),
        **extra,
    )
