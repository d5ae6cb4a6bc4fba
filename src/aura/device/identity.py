"""
Installation Identity.

Derives a stable identifier for the current installation and persists it
so every later call returns the same value. How the identifier is derived
depends on what the environment can offer: a native installation id, a
browser fingerprint, or neither.
"""

from __future__ import annotations

import hashlib
import logging
import platform
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from aura.config import DEVICE_ID_KEY
from aura.device.models import DEFAULT_APP_VERSION, UNKNOWN_DEVICE_NAME, DeviceRecord
from aura.storage.base import KeyValueStore, StorageError, attempt


logger = logging.getLogger(__name__)

# Locations of the systemd/dbus machine id on Linux
MACHINE_ID_PATHS = (
    Path("/etc/machine-id"),
    Path("/var/lib/dbus/machine-id"),
)


def generate_unique_id() -> str:
    """Random identifier used when nothing stable is available."""
    return f"device_{int(time.time() * 1000)}_{secrets.token_hex(6)}"


@dataclass
class BrowserEnvironment:
    """Stable attributes of a browser session, used for fingerprinting."""

    user_agent: str
    screen_height: int | None = None
    screen_width: int | None = None
    pixel_depth: int | None = None


class PlatformMetadata(ABC):
    """Best-effort source of device metadata. Any field may be missing."""

    @abstractmethod
    def native_id(self) -> str | None:
        """Native installation identifier, if the platform has one."""

    @abstractmethod
    def device_name(self) -> str | None:
        """Human-readable device name."""

    @abstractmethod
    def platform(self) -> str:
        """Platform name."""

    @abstractmethod
    def os_version(self) -> str:
        """Operating system version."""


class SystemMetadata(PlatformMetadata):
    """Metadata for the machine this process runs on."""

    def __init__(self, machine_id_paths: tuple[Path, ...] = MACHINE_ID_PATHS) -> None:
        self.machine_id_paths = machine_id_paths

    def native_id(self) -> str | None:
        for path in self.machine_id_paths:
            try:
                value = path.read_text().strip()
            except OSError:
                continue
            if value:
                return value
        return None

    def device_name(self) -> str | None:
        return platform.node() or None

    def platform(self) -> str:
        return platform.system().lower() or "unknown"

    def os_version(self) -> str:
        return platform.release()


@dataclass
class StaticMetadata(PlatformMetadata):
    """Metadata supplied by the caller, e.g. reported by a client app."""

    native_device_id: str | None = None
    name: str | None = None
    platform_name: str = "unknown"
    version: str = ""

    def native_id(self) -> str | None:
        return self.native_device_id

    def device_name(self) -> str | None:
        return self.name

    def platform(self) -> str:
        return self.platform_name

    def os_version(self) -> str:
        return self.version


class IdStrategy(ABC):
    """Derives a fresh installation identifier."""

    name: str = "base"

    @abstractmethod
    def generate(self) -> str:
        """Produce an identifier."""


class NativeIdStrategy(IdStrategy):
    """Uses the platform's own installation identifier."""

    name = "native"

    def __init__(self, native_id: str) -> None:
        self.native_id = native_id

    def generate(self) -> str:
        return self.native_id


class BrowserFingerprintStrategy(IdStrategy):
    """
    Fingerprints a browser from stable environment attributes.

    The same user agent and display geometry always produce the same
    identifier.
    """

    name = "browser"

    def __init__(self, environment: BrowserEnvironment) -> None:
        self.environment = environment

    def components(self) -> list[str]:
        """Components hashed into the fingerprint."""
        env = self.environment
        return [
            f"ua:{env.user_agent.strip().lower()}",
            f"screen:{env.screen_height or ''}x{env.screen_width or ''}",
            f"depth:{env.pixel_depth or ''}",
        ]

    def generate(self) -> str:
        data = "|".join(self.components()).encode("utf-8")
        return f"web_{hashlib.sha256(data).hexdigest()[:16]}"


class RandomIdStrategy(IdStrategy):
    """Random identifier; only stable once persisted."""

    name = "random"

    def generate(self) -> str:
        return generate_unique_id()


def select_id_strategy(
    metadata: PlatformMetadata,
    browser: BrowserEnvironment | None = None,
) -> IdStrategy:
    """
    Pick the identifier strategy the environment supports.

    Args:
        metadata: Platform metadata provider
        browser: Browser attributes when running in a browser context

    Returns:
        Native strategy if a native id exists, else browser fingerprint
        if a browser context is available, else random
    """
    native_id = metadata.native_id()
    if native_id:
        return NativeIdStrategy(native_id)
    if browser is not None and browser.user_agent:
        return BrowserFingerprintStrategy(browser)
    return RandomIdStrategy()


class DeviceIdentity:
    """
    Identity of the current installation.

    The strategy is resolved once, on first use. The derived identifier
    is persisted under device_id_key and reused afterwards.
    """

    def __init__(
        self,
        store: KeyValueStore,
        metadata: PlatformMetadata | None = None,
        browser: BrowserEnvironment | None = None,
        device_id_key: str = DEVICE_ID_KEY,
        app_version: str = DEFAULT_APP_VERSION,
        device_name: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.store = store
        self.metadata = metadata or SystemMetadata()
        self.browser = browser
        self.device_id_key = device_id_key
        self.app_version = app_version
        self.device_name_override = device_name
        self.timeout = timeout
        self._strategy: IdStrategy | None = None

    @property
    def strategy(self) -> IdStrategy:
        if self._strategy is None:
            self._strategy = select_id_strategy(self.metadata, self.browser)
            logger.debug("Using %s device id strategy", self._strategy.name)
        return self._strategy

    async def _load_or_create(self) -> str:
        device_id = await self.store.get(self.device_id_key)
        if device_id is not None and not isinstance(device_id, str):
            raise StorageError(f"Stored device id is not a string: {device_id!r}")
        if not device_id:
            device_id = self.strategy.generate()
            await self.store.set(self.device_id_key, device_id)
            logger.info("Assigned device id %s", device_id)
        return device_id

    async def get_device_id(self) -> str:
        """
        Get the identifier of the current installation.

        Never fails: if storage is unavailable a fresh random identifier
        is returned for this call and not persisted.
        """
        result = await attempt(self._load_or_create(), self.timeout)
        if not result.ok:
            logger.error("Error getting device ID: %s", result.error)
            return generate_unique_id()
        return result.value

    async def get_device_info(self) -> DeviceRecord:
        """Build a full record describing the current installation."""
        device_id = await self.get_device_id()
        return DeviceRecord(
            device_id=device_id,
            device_name=(
                self.device_name_override
                or self.metadata.device_name()
                or UNKNOWN_DEVICE_NAME
            ),
            platform=self.metadata.platform(),
            os_version=self.metadata.os_version(),
            app_version=self.app_version or DEFAULT_APP_VERSION,
            registered_at=datetime.now(timezone.utc),
        )
