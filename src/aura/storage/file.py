"""
JSON file key-value store.

Keeps all entries in a single JSON document on disk. Writes go to a
temporary file that atomically replaces the document.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import threading
from pathlib import Path

from aura.storage.base import KeyValueStore, StorageError


logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStore):
    """
    File-backed store.

    Blocking file I/O runs in a worker thread so the event loop is never
    blocked. A thread lock serializes access to the document.
    """

    def __init__(self, path: str | Path, create_if_missing: bool = True) -> None:
        """
        Initialize the store.

        Args:
            path: Location of the JSON document
            create_if_missing: Create parent directories if they don't exist
        """
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

        if create_if_missing:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt store file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Corrupt store file {self.path}: not an object")
        return data

    def _write(self, data: dict[str, str]) -> None:
        fd, tmp_path = tempfile.mkstemp(
            prefix=".store-", suffix=".json", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _get_sync(self, key: str) -> str | None:
        with self._lock:
            value = self._read().get(key)
        if value is not None and not isinstance(value, str):
            raise StorageError(f"Corrupt entry {key} in {self.path}: not a string")
        return value

    def _set_sync(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def _remove_sync(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)

    def _keys_sync(self, prefix: str) -> list[str]:
        with self._lock:
            return sorted(k for k in self._read() if k.startswith(prefix))

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set_sync, key, value)
        logger.debug("Stored key %s in %s", key, self.path)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._remove_sync, key)

    async def keys(self, prefix: str = "") -> list[str]:
        return await asyncio.to_thread(self._keys_sync, prefix)
