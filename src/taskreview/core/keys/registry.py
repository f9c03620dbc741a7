"""
Keybinding registry.

Maps single keystrokes to values (built-in action names or backend
vocabulary such as projects and tags) within independent contexts. The
registry is rebuilt each run from observed data plus preferred defaults and
persisted so that learned keys stay stable between runs.

Entries read from disk start out stale: they keep their character reserved
but do not resolve until an assignment call confirms the value still exists.
A stale character is only handed to another value when that value has no
free character left.
"""

import json
import logging
import os
import string
import tempfile
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from .models import KeyBinding, KeyMapFile

logger = logging.getLogger(__name__)

FALLBACK_ALPHABET = string.ascii_lowercase + string.digits + string.ascii_uppercase


@dataclass
class _Entry:
    value: str
    live: bool = True


class KeyRegistry:
    """
    Per-context single-character shortcuts.

    Example:
        >>> keys = KeyRegistry()
        >>> keys.auto_assign("home", "project")
        'h'
        >>> keys.best_effort_assign("h", "health", "project")
        'a'
        >>> keys.maps_to("h", "project")
        ('home', True)
    """

    def __init__(self) -> None:
        self._contexts: dict[str, dict[str, _Entry]] = {}

    def _table(self, context: str) -> dict[str, _Entry]:
        return self._contexts.setdefault(context, {})

    def _confirm(self, value: str, context: str) -> str | None:
        """Return the key already bound to `value`, reviving it if stale."""
        for key, entry in self._table(context).items():
            if entry.value == value:
                entry.live = True
                return key
        return None

    def _bind(self, key: str, value: str, context: str) -> str:
        table = self._table(context)
        previous = table.get(key)
        if previous is not None:
            logger.debug(
                "Key %r in %s: replacing stale %r with %r", key, context, previous.value, value
            )
        table[key] = _Entry(value)
        return key

    def _is_stale(self, key: str, context: str) -> bool:
        entry = self._table(context).get(key)
        return entry is not None and not entry.live

    def auto_assign(self, value: str, context: str) -> str | None:
        """
        Bind `value` to the first free character of its own text.

        Idempotent: a value that already has a key keeps it. Whitespace is
        never used as a key. If every character is taken the value stays
        unbound.

        Args:
            value: Value to bind (e.g. a project name)
            context: Context the key lives in

        Returns:
            The bound key, or None if the value could not be bound
        """
        if not value:
            return None
        existing = self._confirm(value, context)
        if existing is not None:
            return existing

        table = self._table(context)
        candidates = [ch for ch in value if not ch.isspace()]
        for ch in candidates:
            if ch not in table:
                return self._bind(ch, value, context)
        for ch in candidates:
            if self._is_stale(ch, context):
                return self._bind(ch, value, context)

        logger.debug("No free key for %r in %s", value, context)
        return None

    def best_effort_assign(self, preferred: str, value: str, context: str) -> str | None:
        """
        Bind `value` to `preferred`, or to the first free fallback character.

        Idempotent: a value that already has a key keeps it.

        Args:
            preferred: Preferred single-character key
            value: Value to bind (e.g. an action name)
            context: Context the key lives in

        Returns:
            The bound key, or None if no character was free
        """
        existing = self._confirm(value, context)
        if existing is not None:
            return existing

        table = self._table(context)
        if preferred not in table or self._is_stale(preferred, context):
            return self._bind(preferred, value, context)
        for ch in FALLBACK_ALPHABET:
            if ch not in table:
                return self._bind(ch, value, context)

        logger.debug("No free key for %r in %s", value, context)
        return None

    def maps_to(self, key: str, context: str) -> tuple[str, bool]:
        """
        Resolve a keystroke within a context.

        Returns:
            (value, True) if the key is bound, ("", False) otherwise
        """
        entry = self._contexts.get(context, {}).get(key)
        if entry is None or not entry.live:
            return "", False
        return entry.value, True

    def bindings(self, context: str) -> list[tuple[str, str]]:
        """Live (key, value) pairs of a context, in assignment order."""
        return [
            (key, entry.value)
            for key, entry in self._contexts.get(context, {}).items()
            if entry.live
        ]

    def entries(self, context: str) -> list[tuple[str, str, bool]]:
        """All (key, value, live) entries of a context, stale ones included."""
        return [
            (key, entry.value, entry.live)
            for key, entry in self._contexts.get(context, {}).items()
        ]

    def contexts(self) -> list[str]:
        return list(self._contexts)

    @classmethod
    def load(cls, path: Path) -> "KeyRegistry":
        """
        Load a persisted key map.

        A missing file gives an empty registry. A malformed file is logged
        and ignored, since keys are regenerated every run anyway.

        Args:
            path: Key map file

        Returns:
            Registry whose loaded entries are all stale
        """
        registry = cls()
        if not path.exists():
            return registry

        try:
            data = KeyMapFile.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError, OSError) as e:
            logger.warning("Ignoring unreadable key map at %s: %s", path, e)
            return registry

        for context, bindings in data.contexts.items():
            table = registry._table(context)
            seen: set[str] = set()
            for binding in bindings:
                if binding.key in table or binding.value in seen:
                    continue
                table[binding.key] = _Entry(binding.value, live=False)
                seen.add(binding.value)

        logger.debug("Loaded key map from %s", path)
        return registry

    def save(self, path: Path) -> None:
        """
        Persist every entry, live or stale, atomically.

        Args:
            path: Key map file (parent directories are created)
        """
        data = KeyMapFile(
            contexts={
                context: [KeyBinding(key=key, value=entry.value) for key, entry in table.items()]
                for context, table in self._contexts.items()
                if table
            }
        )

        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".keys_", suffix=".json.tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(temp_path, path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

        logger.debug("Saved key map to %s", path)
