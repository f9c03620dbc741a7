"""
Models for the persisted key map.

The key map file stores, per context, the ordered character -> value
assignments learned on previous runs.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

KEYMAP_VERSION = 1


class KeyBinding(BaseModel):
    """One character bound to one value within a context."""

    key: str = Field(..., min_length=1, max_length=1, description="Single keystroke")
    value: str = Field(..., min_length=1, description="Action or vocabulary value")


class KeyMapFile(BaseModel):
    """
    Root model for the key map file.

    Example file:
        {
          "version": 1,
          "contexts": {
            "color": [{"key": "r", "value": "red"}],
            "item-editor": [{"key": "e", "value": "description"}]
          }
        }
    """

    version: int = Field(default=KEYMAP_VERSION)
    contexts: dict[str, list[KeyBinding]] = Field(default_factory=dict)
