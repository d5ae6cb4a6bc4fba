"""
User to device mapping persistence.

Two layouts are supported:

- keyed: one store entry per user. Writes for different users never
  touch each other.
- blob: the whole mapping as a single JSON object, read, modified and
  rewritten on every mutation. Mutations are serialized within the
  process; writers in other processes can still lose updates.

Methods raise on storage failure or malformed data; callers decide how
to degrade.
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod

from aura.config import USER_DEVICE_MAPPING_KEY
from aura.device.models import DeviceRecord
from aura.storage.base import KeyValueStore, StorageError, decode_json


logger = logging.getLogger(__name__)


class DeviceMapping(ABC):
    """Persisted user id -> DeviceRecord mapping."""

    def __init__(self, store: KeyValueStore, key: str = USER_DEVICE_MAPPING_KEY) -> None:
        self.store = store
        self.key = key

    @abstractmethod
    async def get(self, user_id: str) -> DeviceRecord | None:
        """Record bound to user_id, or None."""

    @abstractmethod
    async def put(self, user_id: str, record: DeviceRecord) -> None:
        """Bind record to user_id, replacing any previous binding."""

    @abstractmethod
    async def delete(self, user_id: str) -> None:
        """Remove any binding for user_id."""

    @abstractmethod
    async def all(self) -> dict[str, DeviceRecord]:
        """Every binding."""


class KeyedDeviceMapping(DeviceMapping):
    """One store entry per user under '<key>:<user_id>'."""

    def entry_key(self, user_id: str) -> str:
        return f"{self.key}:{user_id}"

    async def get(self, user_id: str) -> DeviceRecord | None:
        raw = await self.store.get(self.entry_key(user_id))
        data = decode_json(raw, None)
        if data is None:
            return None
        return DeviceRecord.from_dict(data)

    async def put(self, user_id: str, record: DeviceRecord) -> None:
        await self.store.set(self.entry_key(user_id), json.dumps(record.to_dict()))

    async def delete(self, user_id: str) -> None:
        await self.store.remove(self.entry_key(user_id))

    async def all(self) -> dict[str, DeviceRecord]:
        prefix = f"{self.key}:"
        result: dict[str, DeviceRecord] = {}
        for entry_key in await self.store.keys(prefix):
            user_id = entry_key[len(prefix):]
            record = await self.get(user_id)
            if record is not None:
                result[user_id] = record
        return result


class BlobDeviceMapping(DeviceMapping):
    """Whole mapping stored as one JSON object under key."""

    def __init__(self, store: KeyValueStore, key: str = USER_DEVICE_MAPPING_KEY) -> None:
        super().__init__(store, key)
        self._lock = asyncio.Lock()

    async def _load(self) -> dict[str, dict]:
        data = decode_json(await self.store.get(self.key), {})
        if not isinstance(data, dict):
            raise StorageError(f"Device mapping under {self.key} is not an object")
        return data

    async def get(self, user_id: str) -> DeviceRecord | None:
        entry = (await self._load()).get(user_id)
        if entry is None:
            return None
        return DeviceRecord.from_dict(entry)

    async def put(self, user_id: str, record: DeviceRecord) -> None:
        async with self._lock:
            mapping = await self._load()
            mapping[user_id] = record.to_dict()
            await self.store.set(self.key, json.dumps(mapping))

    async def delete(self, user_id: str) -> None:
        async with self._lock:
            mapping = await self._load()
            if mapping.pop(user_id, None) is None:
                return
            await self.store.set(self.key, json.dumps(mapping))

    async def all(self) -> dict[str, DeviceRecord]:
        return {
            user_id: DeviceRecord.from_dict(entry)
            for user_id, entry in (await self._load()).items()
        }


def create_mapping(
    store: KeyValueStore,
    mode: str = "keyed",
    key: str = USER_DEVICE_MAPPING_KEY,
) -> DeviceMapping:
    """
    Create a mapping for the given layout.

    Raises:
        ValueError: If mode is unknown
    """
    if mode == "keyed":
        return KeyedDeviceMapping(store, key)
    if mode == "blob":
        return BlobDeviceMapping(store, key)
    raise ValueError(f"Invalid mapping mode: {mode}")
