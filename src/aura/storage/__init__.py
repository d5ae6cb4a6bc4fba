"""
Persistence layer.

Asynchronous key-value stores used by the device binding policy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from aura.storage.base import (
    KeyValueStore,
    StorageError,
    StorageResult,
    attempt,
    decode_json,
)
from aura.storage.database import SQLiteStore
from aura.storage.file import JsonFileStore
from aura.storage.memory import MemoryStore

if TYPE_CHECKING:
    from aura.config import StorageConfig


def create_store(config: StorageConfig) -> KeyValueStore:
    """
    Create the store selected by configuration.

    Args:
        config: Storage settings

    Returns:
        KeyValueStore instance

    Raises:
        ValueError: If the backend is unknown
    """
    if config.backend == "memory":
        return MemoryStore()
    if config.backend == "file":
        return JsonFileStore(config.path)
    if config.backend == "sqlite":
        return SQLiteStore(config.path, wal_mode=config.wal_mode)
    raise ValueError(f"Unknown storage backend: {config.backend}")


__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "SQLiteStore",
    "StorageError",
    "StorageResult",
    "attempt",
    "create_store",
    "decode_json",
]
