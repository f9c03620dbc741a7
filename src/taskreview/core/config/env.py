"""
.env file support.

Only TASKREVIEW_* variables are taken from .env files, and a variable
already exported in the shell always wins. Files are read in order,
later ones overriding earlier ones:

    ~/.config/taskreview/.env  <  ./.env  <  ./.env.local
"""

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

from .loader import get_xdg_config_home

logger = logging.getLogger(__name__)

ENV_PREFIX = "TASKREVIEW_"


def env_file_paths(project_dir: Path | None = None) -> list[Path]:
    """User .env first, then the project files in the working directory."""
    project_dir = project_dir or Path.cwd()
    return [
        get_xdg_config_home() / "taskreview" / ".env",
        project_dir / ".env",
        project_dir / ".env.local",
    ]


def load_layered_env(paths: Iterable[Path] | None = None) -> set[str]:
    """
    Export TASKREVIEW_* values from .env files into os.environ.

    Args:
        paths: Files in increasing precedence (defaults to env_file_paths())

    Returns:
        Names of the variables that were set from a file
    """
    from_files: dict[str, str] = {}
    for path in env_file_paths() if paths is None else paths:
        if not path.is_file():
            continue
        for name, value in dotenv_values(path).items():
            if name.startswith(ENV_PREFIX) and value is not None:
                from_files[name] = value

    applied: set[str] = set()
    for name, value in from_files.items():
        if name in os.environ:
            logger.debug("Keeping %s from the shell environment", name)
            continue
        os.environ[name] = value
        applied.add(name)
    return applied
