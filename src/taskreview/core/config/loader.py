"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars

CLI options are applied on top by the caller.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import ReviewConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per session
_config_cache: ReviewConfig | None = None

# Env var -> (config key, converter)
ENV_OVERRIDES: dict[str, tuple[str, type]] = {
    "TASKREVIEW_KEYS": ("keys_path", str),
    "TASKREVIEW_RTAG": ("reviewer_tag", str),
    "TASKREVIEW_FILTER": ("filter", str),
    "TASKREVIEW_REVIEW_WINDOW_HOURS": ("review_window_hours", float),
    "TASKREVIEW_TASK_COMMAND": ("task_command", str),
}


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/taskreview/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "taskreview" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .taskreview.json in the working directory
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".taskreview.json"


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            logger.warning("Ignoring config at %s: top level is not an object", path)
            return None
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        # Config system should be resilient
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence among the file layers.

    Supported env vars:
        TASKREVIEW_KEYS - overrides keys_path
        TASKREVIEW_RTAG - overrides reviewer_tag
        TASKREVIEW_FILTER - overrides filter
        TASKREVIEW_REVIEW_WINDOW_HOURS - overrides review_window_hours
        TASKREVIEW_TASK_COMMAND - overrides task_command

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    for env_name, (key, convert) in ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if not raw:
            continue
        try:
            result[key] = convert(raw)
        except ValueError:
            logger.warning("Invalid %s value %r, ignoring", env_name, raw)

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Most defaults live on the ReviewConfig model itself; only values that
    depend on nothing at runtime are listed here.
    """
    return {
        "review_window_hours": 24.0,
        "completion_period_days": 7,
        "default_color": "green",
        "list_limit": 30,
        "description_width": 60,
        "sort_mode": "urgency",
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> ReviewConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (TASKREVIEW_*)
        2. Project config (.taskreview.json)
        3. User config (~/.config/taskreview/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Directory to load .taskreview.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated ReviewConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    # Flat settings: each layer replaces whole keys
    merged = get_default_config()
    for path in (get_user_config_path(), get_project_config_path(project_dir)):
        merged.update(load_json_file(path) or {})

    merged = apply_env_overrides(merged)

    config = ReviewConfig(**merged)
    _config_cache = config

    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
