"""
REST API routes for Aura.

Provides endpoints for device binding checks and trust evaluation.
"""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from aura import __version__
from aura.api.schemas import (
    DeviceRecordSchema,
    HealthCheck,
    RestrictionResponse,
    TrustBadgeSchema,
    TrustCalculateRequest,
    TrustEvaluation,
    TrustEventRequest,
    TrustScoreSchema,
)
from aura.device.binding import DeviceBindingPolicy
from aura.device.identity import BrowserEnvironment, DeviceIdentity, StaticMetadata
from aura.storage.memory import MemoryStore
from aura.trust.evaluator import evaluate
from aura.trust.scoring import apply_event, build_trust_score

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ============================================================================
# Dependencies
# ============================================================================


class ServiceDependencies:
    """
    Container for service dependencies.

    Set these after app initialization to inject configuration, store
    and device mapping.
    """

    config = None  # AuraConfig instance
    store = None  # KeyValueStore instance
    mapping = None  # DeviceMapping instance
    start_time: float = time.time()


deps = ServiceDependencies()


def _parse_screen(value: str | None) -> tuple[int | None, int | None, int | None]:
    """Parse an 'HEIGHTxWIDTHxDEPTH' screen header."""
    if not value:
        return None, None, None
    parts = value.lower().split("x")
    numbers: list[int | None] = []
    for part in parts[:3]:
        numbers.append(int(part) if part.strip().isdigit() else None)
    while len(numbers) < 3:
        numbers.append(None)
    return numbers[0], numbers[1], numbers[2]


def get_policy(request: Request) -> DeviceBindingPolicy:
    """
    Build the binding policy for the calling device.

    The caller's device is identified from request headers. Its id is
    held per request; only the user -> device mapping is shared. Requests
    carrying neither X-Device-Id nor User-Agent are rejected, since any
    id minted for them would differ on the next request.
    """
    if deps.mapping is None or deps.config is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Device storage not initialized",
        )

    headers = request.headers
    if not headers.get("x-device-id") and not headers.get("user-agent"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request must identify the device with X-Device-Id or User-Agent",
        )

    metadata = StaticMetadata(
        native_device_id=headers.get("x-device-id"),
        name=headers.get("x-device-name"),
        platform_name=headers.get("x-platform", "web"),
        version=headers.get("x-os-version", ""),
    )
    browser = None
    user_agent = headers.get("user-agent")
    if user_agent:
        height, width, depth = _parse_screen(headers.get("x-screen"))
        browser = BrowserEnvironment(
            user_agent=user_agent,
            screen_height=height,
            screen_width=width,
            pixel_depth=depth,
        )

    identity = DeviceIdentity(
        MemoryStore(),
        metadata=metadata,
        browser=browser,
        app_version=headers.get("x-app-version") or deps.config.device.app_version,
    )
    return DeviceBindingPolicy(identity, deps.mapping, timeout=deps.config.storage.timeout)


# ============================================================================
# Health Check Endpoints
# ============================================================================


@router.get("/health", response_model=HealthCheck, tags=["Health"])
async def health_check() -> HealthCheck:
    """Check service health status."""
    config = deps.config
    return HealthCheck(
        status="healthy" if deps.mapping is not None else "degraded",
        version=__version__,
        uptime_seconds=time.time() - deps.start_time,
        storage_backend=config.storage.backend if config else None,
        mapping_mode=config.storage.mapping_mode if config else None,
    )


# ============================================================================
# Device Endpoints
# ============================================================================


@router.get("/device/current", response_model=DeviceRecordSchema, tags=["Devices"])
async def current_device(
    policy: DeviceBindingPolicy = Depends(get_policy),
) -> DeviceRecordSchema:
    """Describe the calling device."""
    return DeviceRecordSchema.from_record(await policy.get_device_info())


@router.get("/devices/{user_id}", response_model=DeviceRecordSchema, tags=["Devices"])
async def get_user_device(
    user_id: str,
    policy: DeviceBindingPolicy = Depends(get_policy),
) -> DeviceRecordSchema:
    """Get the device bound to a user."""
    record = await policy.get_user_device(user_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No device bound to user: {user_id}",
        )
    return DeviceRecordSchema.from_record(record)


@router.get(
    "/devices/{user_id}/restriction",
    response_model=RestrictionResponse,
    response_model_exclude_none=True,
    tags=["Devices"],
)
async def check_restriction(
    user_id: str,
    policy: DeviceBindingPolicy = Depends(get_policy),
) -> RestrictionResponse:
    """Check whether the calling device may sign in as user_id."""
    result = await policy.check_device_restriction(user_id)
    return RestrictionResponse.from_result(result)


@router.post(
    "/devices/{user_id}",
    response_model=DeviceRecordSchema,
    status_code=status.HTTP_201_CREATED,
    tags=["Devices"],
)
async def register_device(
    user_id: str,
    force: bool = Query(False, description="Replace a binding to another device"),
    policy: DeviceBindingPolicy = Depends(get_policy),
) -> DeviceRecordSchema:
    """Bind the calling device to user_id."""
    if not force:
        restriction = await policy.check_device_restriction(user_id)
        if not restriction.allowed:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=restriction.reason,
            )

    await policy.register_user_device(user_id)

    record = await policy.get_user_device(user_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Device binding could not be stored",
        )
    return DeviceRecordSchema.from_record(record)


@router.delete(
    "/devices/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Devices"],
)
async def unregister_device(
    user_id: str,
    policy: DeviceBindingPolicy = Depends(get_policy),
) -> None:
    """Remove the device binding of user_id."""
    await policy.unregister_user_device(user_id)


# ============================================================================
# Trust Endpoints
# ============================================================================


@router.post("/trust/evaluate", response_model=TrustEvaluation, tags=["Trust"])
async def evaluate_trust(payload: TrustScoreSchema) -> TrustEvaluation:
    """Badge, feature gates and recommendations for a trust record."""
    result = evaluate(payload.to_model())
    return TrustEvaluation(
        badge=TrustBadgeSchema(**result["badge"]),
        can_boost_property=result["can_boost_property"],
        can_access_premium_features=result["can_access_premium_features"],
        recommendations=result["recommendations"],
    )


@router.post("/trust/calculate", response_model=TrustScoreSchema, tags=["Trust"])
async def calculate_trust(payload: TrustCalculateRequest) -> TrustScoreSchema:
    """Score behavioral counters."""
    trust_score = build_trust_score(
        verified_id=payload.verified_id,
        verified_business=payload.verified_business,
        completed_bookings=payload.completed_bookings,
        avg_response_time=payload.avg_response_time,
        cancellation_rate=payload.cancellation_rate,
        dispute_count=payload.dispute_count,
    )
    return TrustScoreSchema.from_model(trust_score)


@router.post("/trust/events", response_model=TrustScoreSchema, tags=["Trust"])
async def apply_trust_event(payload: TrustEventRequest) -> TrustScoreSchema:
    """Apply an activity event to a trust record and recalculate."""
    try:
        updated = apply_event(payload.trust_score.to_model(), payload.event, payload.metadata)
    except ValueError as e:
        raise HTTPException(
            status_code=422,
            detail=str(e),
        ) from e
    logger.info("Applied trust event %s", payload.event)
    return TrustScoreSchema.from_model(updated)
