"""Storage backends for persisting flow state across a redirect.

Each backend stores one JSON-compatible record under a storage key.
``MemoryStorage`` lives as long as the process (session tier);
``JSONFileStorage`` survives restarts (durable tier).
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    """Protocol for a single storage tier."""

    def get_storage(self) -> dict[str, Any]:
        """Return the stored record, or an empty dict when nothing is stored."""
        ...

    def set_storage(self, record: dict[str, Any]) -> None:
        """Replace the stored record."""
        ...

    def clear_storage(self) -> None:
        """Remove the stored record. Clearing an empty tier is a no-op."""
        ...


class MemoryStorage:
    """Process-local storage tier.

    Records are kept in a shared dict keyed by storage key, so every backend
    built with the same ``store`` and key sees the same record.
    """

    def __init__(
        self,
        storage_key: str,
        store: dict[str, dict[str, Any]] | None = None,
        options: dict[str, Any] | None = None,
    ):
        self.storage_key = storage_key
        self.options = options or {}
        self._store = store if store is not None else {}

    def get_storage(self) -> dict[str, Any]:
        return copy.deepcopy(self._store.get(self.storage_key, {}))

    def set_storage(self, record: dict[str, Any]) -> None:
        self._store[self.storage_key] = copy.deepcopy(record)

    def clear_storage(self) -> None:
        self._store.pop(self.storage_key, None)


class JSONFileStorage:
    """Durable storage tier backed by a JSON file.

    The file holds one object per storage key. Writes go through a temporary
    file created owner-only and then ``os.replace``d into place.
    """

    def __init__(
        self,
        path: Path | str,
        storage_key: str,
        options: dict[str, Any] | None = None,
    ):
        self.path = Path(path)
        self.storage_key = storage_key
        self.options = options or {}

    def get_storage(self) -> dict[str, Any]:
        record = self._read_all().get(self.storage_key)
        return record if isinstance(record, dict) else {}

    def set_storage(self, record: dict[str, Any]) -> None:
        data = self._read_all()
        data[self.storage_key] = record
        self._write_all(data)

    def clear_storage(self) -> None:
        data = self._read_all()
        if self.storage_key not in data:
            return
        del data[self.storage_key]
        self._write_all(data)

    def _read_all(self) -> dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unreadable storage file {self.path}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            # A leftover temp file keeps its old mode under O_CREAT
            try:
                os.chmod(tmp, 0o600)
            except OSError:
                logger.debug(f"Could not restrict permissions on {tmp}")
            json.dump(data, f, indent=2)
        os.replace(tmp, self.path)
