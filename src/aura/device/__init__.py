"""
Device Binding.

Single-device-per-account policy and installation identity.
"""

from aura.device.binding import RESTRICTED_REASON, DeviceBindingPolicy
from aura.device.identity import (
    BrowserEnvironment,
    BrowserFingerprintStrategy,
    DeviceIdentity,
    IdStrategy,
    NativeIdStrategy,
    PlatformMetadata,
    RandomIdStrategy,
    StaticMetadata,
    SystemMetadata,
    generate_unique_id,
    select_id_strategy,
)
from aura.device.mapping import (
    BlobDeviceMapping,
    DeviceMapping,
    KeyedDeviceMapping,
    create_mapping,
)
from aura.device.models import DeviceRecord, RestrictionResult

__all__ = [
    # Policy
    "DeviceBindingPolicy",
    "RESTRICTED_REASON",
    # Identity
    "BrowserEnvironment",
    "BrowserFingerprintStrategy",
    "DeviceIdentity",
    "IdStrategy",
    "NativeIdStrategy",
    "PlatformMetadata",
    "RandomIdStrategy",
    "StaticMetadata",
    "SystemMetadata",
    "generate_unique_id",
    "select_id_strategy",
    # Mapping
    "BlobDeviceMapping",
    "DeviceMapping",
    "KeyedDeviceMapping",
    "create_mapping",
    # Models
    "DeviceRecord",
    "RestrictionResult",
]
