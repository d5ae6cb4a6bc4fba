"""
In-memory key-value store.
"""

from __future__ import annotations

from aura.storage.base import KeyValueStore


class MemoryStore(KeyValueStore):
    """Dictionary-backed store. Contents live for the lifetime of the object."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))

    def snapshot(self) -> dict[str, str]:
        """Copy of the current contents."""
        return dict(self._data)
