"""
Keybinding registry and per-run key generation.
"""

from .defaults import (
    ASSIGNEE,
    COLOR,
    EDITOR,
    LISTING,
    PROJECT,
    SHELL,
    TAG,
    generate_mappings,
)
from .models import KeyBinding, KeyMapFile
from .registry import KeyRegistry

__all__ = [
    "KeyRegistry",
    "KeyBinding",
    "KeyMapFile",
    "generate_mappings",
    # Contexts
    "ASSIGNEE",
    "COLOR",
    "EDITOR",
    "LISTING",
    "PROJECT",
    "SHELL",
    "TAG",
]
