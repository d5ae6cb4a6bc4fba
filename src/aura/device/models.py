"""
Device binding data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


UNKNOWN_DEVICE_NAME = "Unknown Device"
DEFAULT_APP_VERSION = "1.0.0"


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        raise ValueError("registeredAt is required")
    # fromisoformat before 3.11 rejects the trailing Z
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class DeviceRecord:
    """
    A device bound to a user account.

    Records are replaced wholesale, never partially updated. Only
    device_id takes part in policy decisions; the rest is descriptive.
    """

    device_id: str
    device_name: str
    platform: str
    os_version: str
    app_version: str
    registered_at: datetime

    def to_dict(self) -> dict[str, str]:
        """Convert to the persisted (camelCase) representation."""
        return {
            "deviceId": self.device_id,
            "deviceName": self.device_name,
            "platform": self.platform,
            "osVersion": self.os_version,
            "appVersion": self.app_version,
            "registeredAt": self.registered_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeviceRecord:
        """
        Create from the persisted representation.

        Raises:
            ValueError: If the record is malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"Device record must be an object, got {type(data).__name__}")
        device_id = data.get("deviceId")
        if not device_id:
            raise ValueError("Device record is missing deviceId")
        return cls(
            device_id=str(device_id),
            device_name=str(data.get("deviceName") or UNKNOWN_DEVICE_NAME),
            platform=str(data.get("platform") or "unknown"),
            os_version=str(data.get("osVersion") or ""),
            app_version=str(data.get("appVersion") or DEFAULT_APP_VERSION),
            registered_at=_parse_timestamp(data.get("registeredAt")),
        )


@dataclass
class RestrictionResult:
    """Outcome of a device restriction check."""

    allowed: bool
    reason: str | None = None
    existing_device: DeviceRecord | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {"allowed": self.allowed}
        if self.reason is not None:
            result["reason"] = self.reason
        if self.existing_device is not None:
            result["existingDevice"] = self.existing_device.to_dict()
        return result
