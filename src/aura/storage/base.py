"""
Key-value store contract.

Defines the asynchronous string store the policy components persist to,
and the internal result type used to keep storage failures out of their
public operations.
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError


logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageError(Exception):
    """Raised by a store when a read, write or remove fails."""


class KeyValueStore(ABC):
    """
    Asynchronous string-keyed store.

    Every operation may fail independently with StorageError.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under key, or None."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Remove key. Removing a missing key is not an error."""

    async def keys(self, prefix: str = "") -> list[str]:
        """List keys starting with prefix."""
        raise StorageError(f"{type(self).__name__} does not support key listing")

    async def close(self) -> None:
        """Release any resources held by the store."""


# Failures a storage call may surface; anything else is a programming error
STORAGE_FAILURES: tuple[type[BaseException], ...] = (
    StorageError,
    OSError,
    ValueError,  # includes json.JSONDecodeError
    SQLAlchemyError,
    asyncio.TimeoutError,
)


@dataclass
class StorageResult(Generic[T]):
    """Outcome of a storage call: a value or the error that prevented it."""

    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: T) -> T:
        """Return the value, or default when the call failed."""
        if self.error is not None:
            return default
        return self.value  # type: ignore[return-value]


async def attempt(
    operation: Awaitable[T],
    timeout: float | None = None,
) -> StorageResult[T]:
    """
    Await a storage operation and capture its failure.

    Args:
        operation: Awaitable performing the storage call
        timeout: Optional timeout in seconds

    Returns:
        StorageResult holding either the value or the error
    """
    try:
        if timeout is not None:
            value = await asyncio.wait_for(operation, timeout)
        else:
            value = await operation
    except STORAGE_FAILURES as e:
        return StorageResult(error=e)
    return StorageResult(value=value)


def decode_json(raw: str | None, default: Any) -> Any:
    """Decode a stored JSON value, returning default when nothing is stored."""
    if raw is None or raw == "":
        return default
    if not isinstance(raw, str):
        raise StorageError(f"Stored value is not a string: {type(raw).__name__}")
    return json.loads(raw)
