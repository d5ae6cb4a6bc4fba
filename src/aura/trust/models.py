"""
Trust data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class TrustLevel(str, Enum):
    """Coarse reliability classification of an account or listing."""

    VERIFIED = "verified"
    BUILDING = "building"
    RESTRICTED = "restricted"

    def __str__(self) -> str:
        return self.value


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# camelCase wire names -> field names
_WIRE_FIELDS = {
    "verifiedId": "verified_id",
    "verifiedBusiness": "verified_business",
    "completedBookings": "completed_bookings",
    "avgResponseTime": "avg_response_time",
    "cancellationRate": "cancellation_rate",
    "disputeCount": "dispute_count",
    "lastUpdated": "last_updated",
}


@dataclass
class TrustScore:
    """
    Behavioral trust record for a user or listing.

    score and level are supplied independently and are not reconciled.
    """

    score: float
    level: TrustLevel
    verified_id: bool = False
    verified_business: bool = False
    completed_bookings: int = 0
    avg_response_time: float = 0.0  # minutes
    cancellation_rate: float = 0.0  # 0-1
    dispute_count: int = 0
    last_updated: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if not isinstance(self.level, TrustLevel):
            self.level = TrustLevel(self.level)
        if not 0 <= self.score <= 100:
            raise ValueError(f"score must be 0-100, got {self.score}")
        if self.completed_bookings < 0:
            raise ValueError(f"completed_bookings must be >= 0, got {self.completed_bookings}")
        if self.avg_response_time < 0:
            raise ValueError(f"avg_response_time must be >= 0, got {self.avg_response_time}")
        if not 0 <= self.cancellation_rate <= 1:
            raise ValueError(f"cancellation_rate must be 0-1, got {self.cancellation_rate}")
        if self.dispute_count < 0:
            raise ValueError(f"dispute_count must be >= 0, got {self.dispute_count}")
        if isinstance(self.last_updated, str):
            text = self.last_updated
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            self.last_updated = datetime.fromisoformat(text)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TrustScore:
        """Create from a dictionary with camelCase or snake_case keys."""
        values = {_WIRE_FIELDS.get(key, key): value for key, value in data.items()}
        known = set(cls.__dataclass_fields__)
        return cls(**{key: value for key, value in values.items() if key in known})

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire representation."""
        return {
            "score": self.score,
            "level": self.level.value,
            "verifiedId": self.verified_id,
            "verifiedBusiness": self.verified_business,
            "completedBookings": self.completed_bookings,
            "avgResponseTime": self.avg_response_time,
            "cancellationRate": self.cancellation_rate,
            "disputeCount": self.dispute_count,
            "lastUpdated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True)
class TrustBadge:
    """Presentation of a trust level."""

    color: str
    label: str
    icon: str

    def to_dict(self) -> dict[str, str]:
        return {"color": self.color, "label": self.label, "icon": self.icon}
