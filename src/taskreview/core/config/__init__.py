"""
Configuration system for taskreview.

Layered configuration: defaults < user config < project config < env vars,
with .env files feeding the environment layer.
"""

from .env import load_layered_env
from .loader import (
    apply_env_overrides,
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    load_config,
)
from .models import ReviewConfig, default_reviewer_tag

__all__ = [
    "ReviewConfig",
    "apply_env_overrides",
    "clear_cache",
    "default_reviewer_tag",
    "get_project_config_path",
    "get_user_config_path",
    "load_config",
    "load_layered_env",
]
