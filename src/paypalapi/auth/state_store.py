"""Persistent key-value store for auth state that must survive restarts.

The :class:`~paypalapi.auth.token_manager.TokenManager` writes one record per
provider (``"paypal"``) holding a credential slot per endpoint family::

    {"auth": {"accessToken": "...", "expiresAt": 1700000000},
     "mAuth": {"accessToken": "...", "expiresAt": 1700000000}}

:meth:`StateStore.set` merges the given top-level keys into the existing
record, so writing ``{"mAuth": ...}`` leaves ``auth`` untouched.

Two implementations ship with the package:

- :class:`FileStateStore` -- one JSON file per key under
  ``<data_dir>/state/``, written atomically with ``0o600`` permissions so that
  tokens are never world-readable, even momentarily.
- :class:`MemoryStateStore` -- process-local dict, for tests and for callers
  that don't want anything on disk.
"""

from __future__ import annotations

import copy
import json
import re
from pathlib import Path
from typing import Any, Optional, Protocol

from paypalapi.config import atomic_write, get_data_dir

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class StateStore(Protocol):
    """Key-value record store used to warm the token cache at startup."""

    def get(self, key: str) -> Optional[dict[str, Any]]:
        """Return the record stored under *key*, or ``None``."""
        ...

    def set(self, key: str, data: dict[str, Any]) -> None:
        """Merge the top-level keys of *data* into the record under *key*."""
        ...


class MemoryStateStore:
    """In-memory :class:`StateStore`.  Records are deep-copied on the way in and out."""

    def __init__(self, initial: Optional[dict[str, dict[str, Any]]] = None) -> None:
        self._records: dict[str, dict[str, Any]] = copy.deepcopy(initial or {})

    def get(self, key: str) -> Optional[dict[str, Any]]:
        record = self._records.get(key)
        return copy.deepcopy(record) if record is not None else None

    def set(self, key: str, data: dict[str, Any]) -> None:
        record = self._records.setdefault(key, {})
        record.update(copy.deepcopy(data))


def _state_dir() -> Path:
    """Return the state directory, creating it if needed."""
    path = get_data_dir() / "state"
    path.mkdir(parents=True, exist_ok=True)
    return path


class FileStateStore:
    """JSON-file backed :class:`StateStore`.

    Each key maps to ``<directory>/<key>.json``.  Writes go through
    :func:`~paypalapi.config.atomic_write` so a crash mid-write never leaves
    a truncated record behind.

    Args:
        directory: Where to keep the record files.  Defaults to
            ``get_data_dir() / "state"``.

    Example::

        store = FileStateStore()
        store.set("paypal", {"auth": {"accessToken": "abc", "expiresAt": 4420}})
        store.get("paypal")["auth"]["accessToken"]  # "abc"
    """

    def __init__(self, directory: Optional[Path] = None) -> None:
        self._directory = directory if directory is not None else _state_dir()

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """The file backing *key*.

        Raises:
            ValueError: If *key* contains characters unsafe in a file name.
        """
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid state key '{key}'")
        return self._directory / f"{key}.json"

    def get(self, key: str) -> Optional[dict[str, Any]]:
        """Load the record for *key*.

        Returns:
            The stored dict, or ``None`` if the file does not exist or cannot
            be parsed.
        """
        path = self.path_for(key)
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return None
        return data if isinstance(data, dict) else None

    def set(self, key: str, data: dict[str, Any]) -> None:
        """Merge *data* into the record for *key* and persist it.

        Raises:
            OSError: If the file cannot be written (permissions, disk full, etc.).
        """
        record = self.get(key) or {}
        record.update(data)
        atomic_write(
            self.path_for(key),
            json.dumps(record, indent=2) + "\n",
            mode=0o600,
        )

    def clear(self, key: str) -> None:
        """Delete the record for *key*.  No-op when it does not exist."""
        path = self.path_for(key)
        if path.is_file():
            path.unlink()
