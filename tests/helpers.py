"""
Test doubles and builders shared across Aura tests.
"""

from __future__ import annotations

import asyncio

from aura.device.binding import DeviceBindingPolicy
from aura.device.identity import DeviceIdentity, StaticMetadata
from aura.device.mapping import create_mapping
from aura.storage.base import KeyValueStore, StorageError
from aura.storage.memory import MemoryStore


class FailingStore(KeyValueStore):
    """Store whose every operation fails."""

    def __init__(self) -> None:
        self.calls = 0

    async def get(self, key: str) -> str | None:
        self.calls += 1
        raise StorageError("storage unavailable")

    async def set(self, key: str, value: str) -> None:
        self.calls += 1
        raise StorageError("storage unavailable")

    async def remove(self, key: str) -> None:
        self.calls += 1
        raise StorageError("storage unavailable")


class YieldingStore(MemoryStore):
    """Memory store that suspends on every call, letting coroutines interleave."""

    async def get(self, key: str) -> str | None:
        await asyncio.sleep(0)
        value = await super().get(key)
        await asyncio.sleep(0)
        return value

    async def set(self, key: str, value: str) -> None:
        await asyncio.sleep(0)
        await super().set(key, value)


class SlowStore(MemoryStore):
    """Memory store that takes longer than any reasonable timeout."""

    async def get(self, key: str) -> str | None:
        await asyncio.sleep(5)
        return await super().get(key)


def make_policy(
    store: KeyValueStore,
    device_id: str | None = "device-a",
    mode: str = "keyed",
    timeout: float | None = None,
    mapping_key: str = "@aura_user_device_mapping",
) -> DeviceBindingPolicy:
    """Policy for a device with a fixed native id over a shared mapping store."""
    identity = DeviceIdentity(
        MemoryStore(),
        metadata=StaticMetadata(
            native_device_id=device_id,
            name="Test Phone",
            platform_name="android",
            version="14",
        ),
        app_version="2.3.0",
    )
    mapping = create_mapping(store, mode, mapping_key)
    return DeviceBindingPolicy(identity, mapping, timeout=timeout)

