"""
Device Binding Policy.

Allows each user account to be active on at most one device. The first
device a user registers is bound to the account; sign-ins from any other
device are refused until the binding is removed.

The policy is fail-open: storage problems never block a user and never
raise to the caller. It deters account sharing; it is not access control.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aura.device.identity import DeviceIdentity
from aura.device.mapping import DeviceMapping, create_mapping
from aura.device.models import DeviceRecord, RestrictionResult
from aura.storage.base import attempt

if TYPE_CHECKING:
    from aura.config import AuraConfig
    from aura.device.identity import BrowserEnvironment, PlatformMetadata
    from aura.storage.base import KeyValueStore


logger = logging.getLogger(__name__)

RESTRICTED_REASON = "This account is already registered on another device"


class DeviceBindingPolicy:
    """
    Enforces the one-device-per-account binding.

    Callers check with check_device_restriction() before sign-in and call
    register_user_device() / unregister_user_device() around account
    lifecycle events. Registration does not check the restriction itself.
    """

    def __init__(
        self,
        identity: DeviceIdentity,
        mapping: DeviceMapping,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize the policy.

        Args:
            identity: Identity of the current installation
            mapping: Persisted user -> device mapping
            timeout: Optional timeout in seconds for each storage call
        """
        self.identity = identity
        self.mapping = mapping
        self.timeout = timeout

    @classmethod
    def from_config(
        cls,
        config: AuraConfig,
        store: KeyValueStore,
        metadata: PlatformMetadata | None = None,
        browser: BrowserEnvironment | None = None,
    ) -> DeviceBindingPolicy:
        """Build a policy over store using configured keys and layout."""
        storage = config.storage
        identity = DeviceIdentity(
            store,
            metadata=metadata,
            browser=browser,
            device_id_key=storage.device_id_key,
            app_version=config.device.app_version,
            device_name=config.device.device_name,
            timeout=storage.timeout,
        )
        mapping = create_mapping(store, storage.mapping_mode, storage.mapping_key)
        return cls(identity, mapping, timeout=storage.timeout)

    async def get_device_id(self) -> str:
        """Identifier of the current installation."""
        return await self.identity.get_device_id()

    async def get_device_info(self) -> DeviceRecord:
        """Record describing the current installation."""
        return await self.identity.get_device_info()

    async def check_device_restriction(self, user_id: str) -> RestrictionResult:
        """
        Check whether user_id may operate from the current device.

        Args:
            user_id: Account identifier

        Returns:
            RestrictionResult; allowed unless the user is bound to a
            different device. Storage failures resolve to allowed.
        """
        if not user_id:
            return RestrictionResult(allowed=True)

        current_device_id = await self.get_device_id()
        result = await attempt(self.mapping.get(user_id), self.timeout)
        if not result.ok:
            logger.error("Error checking device restriction: %s", result.error)
            return RestrictionResult(allowed=True)

        registered = result.value
        if registered is None:
            logger.debug("No device bound to user %s", user_id)
            return RestrictionResult(allowed=True)

        if registered.device_id == current_device_id:
            return RestrictionResult(allowed=True)

        logger.info(
            "User %s is bound to device %s, refusing %s",
            user_id, registered.device_id, current_device_id,
        )
        return RestrictionResult(
            allowed=False,
            reason=RESTRICTED_REASON,
            existing_device=registered,
        )

    async def register_user_device(self, user_id: str) -> None:
        """
        Bind the current device to user_id, replacing any prior binding.

        Failures are logged and leave the mapping unchanged.
        """
        if not user_id:
            logger.warning("Refusing to register device for empty user id")
            return

        device_info = await self.get_device_info()
        result = await attempt(self.mapping.put(user_id, device_info), self.timeout)
        if not result.ok:
            logger.error("Error registering device: %s", result.error)
            return

        logger.info("Device registered for user %s: %s", user_id, device_info.device_id)

    async def unregister_user_device(self, user_id: str) -> None:
        """
        Remove any device binding for user_id.

        Failures are logged and leave the mapping unchanged.
        """
        if not user_id:
            return

        result = await attempt(self.mapping.delete(user_id), self.timeout)
        if not result.ok:
            logger.error("Error unregistering device: %s", result.error)
            return

        logger.info("Device unregistered for user %s", user_id)

    async def get_user_device(self, user_id: str) -> DeviceRecord | None:
        """Device bound to user_id, or None if unbound or unreadable."""
        if not user_id:
            return None
        result = await attempt(self.mapping.get(user_id), self.timeout)
        if not result.ok:
            logger.error("Error reading device binding: %s", result.error)
            return None
        return result.value
