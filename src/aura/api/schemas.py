"""
Pydantic Schemas for the Aura API.

Request and response models. Field names follow the client's camelCase
wire format; snake_case names are accepted on input too.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from aura.device.models import DeviceRecord, RestrictionResult
from aura.trust.models import TrustLevel, TrustScore
from aura.trust.scoring import TrustEvent


class CamelModel(BaseModel):
    """Base model accepting both alias and field names."""

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Device Schemas
# =============================================================================


class DeviceRecordSchema(CamelModel):
    """Device bound to an account."""

    device_id: str = Field(..., alias="deviceId")
    device_name: str = Field(..., alias="deviceName")
    platform: str
    os_version: str = Field(..., alias="osVersion")
    app_version: str = Field(..., alias="appVersion")
    registered_at: datetime = Field(..., alias="registeredAt")

    @classmethod
    def from_record(cls, record: DeviceRecord) -> DeviceRecordSchema:
        return cls(
            device_id=record.device_id,
            device_name=record.device_name,
            platform=record.platform,
            os_version=record.os_version,
            app_version=record.app_version,
            registered_at=record.registered_at,
        )


class RestrictionResponse(CamelModel):
    """Outcome of a device restriction check."""

    allowed: bool
    reason: str | None = None
    existing_device: DeviceRecordSchema | None = Field(None, alias="existingDevice")

    @classmethod
    def from_result(cls, result: RestrictionResult) -> RestrictionResponse:
        existing = None
        if result.existing_device is not None:
            existing = DeviceRecordSchema.from_record(result.existing_device)
        return cls(allowed=result.allowed, reason=result.reason, existing_device=existing)


# =============================================================================
# Trust Schemas
# =============================================================================


class TrustScoreSchema(CamelModel):
    """Trust record as exchanged with clients."""

    score: float = Field(..., ge=0, le=100)
    level: TrustLevel
    verified_id: bool = Field(False, alias="verifiedId")
    verified_business: bool = Field(False, alias="verifiedBusiness")
    completed_bookings: int = Field(0, ge=0, alias="completedBookings")
    avg_response_time: float = Field(0.0, ge=0, alias="avgResponseTime")
    cancellation_rate: float = Field(0.0, ge=0, le=1, alias="cancellationRate")
    dispute_count: int = Field(0, ge=0, alias="disputeCount")
    last_updated: datetime | None = Field(None, alias="lastUpdated")

    def to_model(self) -> TrustScore:
        values: dict[str, Any] = {
            "score": self.score,
            "level": self.level,
            "verified_id": self.verified_id,
            "verified_business": self.verified_business,
            "completed_bookings": self.completed_bookings,
            "avg_response_time": self.avg_response_time,
            "cancellation_rate": self.cancellation_rate,
            "dispute_count": self.dispute_count,
        }
        if self.last_updated is not None:
            values["last_updated"] = self.last_updated
        return TrustScore(**values)

    @classmethod
    def from_model(cls, trust_score: TrustScore) -> TrustScoreSchema:
        return cls(
            score=trust_score.score,
            level=trust_score.level,
            verified_id=trust_score.verified_id,
            verified_business=trust_score.verified_business,
            completed_bookings=trust_score.completed_bookings,
            avg_response_time=trust_score.avg_response_time,
            cancellation_rate=trust_score.cancellation_rate,
            dispute_count=trust_score.dispute_count,
            last_updated=trust_score.last_updated,
        )


class TrustBadgeSchema(BaseModel):
    """Presentation of a trust level."""

    color: str
    label: str
    icon: str


class TrustEvaluation(CamelModel):
    """Badge, gates and recommendations for a trust record."""

    badge: TrustBadgeSchema
    can_boost_property: bool = Field(..., alias="canBoostProperty")
    can_access_premium_features: bool = Field(..., alias="canAccessPremiumFeatures")
    recommendations: list[str]


class TrustCalculateRequest(CamelModel):
    """Behavioral counters to score."""

    verified_id: bool = Field(False, alias="verifiedId")
    verified_business: bool = Field(False, alias="verifiedBusiness")
    completed_bookings: int = Field(0, ge=0, alias="completedBookings")
    avg_response_time: float = Field(0.0, ge=0, alias="avgResponseTime")
    cancellation_rate: float = Field(0.0, ge=0, le=1, alias="cancellationRate")
    dispute_count: int = Field(0, ge=0, alias="disputeCount")


class TrustEventRequest(CamelModel):
    """Activity event applied to a trust record."""

    trust_score: TrustScoreSchema = Field(..., alias="trustScore")
    event: TrustEvent
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("event", mode="before")
    @classmethod
    def normalize_event(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v


# =============================================================================
# Health
# =============================================================================


class HealthCheck(BaseModel):
    """Service health status."""

    status: str
    version: str
    uptime_seconds: float
    storage_backend: str | None = None
    mapping_mode: str | None = None
