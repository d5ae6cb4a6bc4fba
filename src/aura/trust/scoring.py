"""
Trust score calculation.

Computes a 0-100 score from behavioral counters and suggests a level for
it. Produces TrustScore records; the evaluator consumes them without
re-deriving the level.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from aura.trust.models import TrustLevel, TrustScore


logger = logging.getLogger(__name__)

# Level thresholds
THRESHOLD_VERIFIED = 75
THRESHOLD_RESTRICTED = 40


class TrustEvent(str, Enum):
    """Activity that changes a trust record's counters."""

    BOOKING_COMPLETED = "booking_completed"
    BOOKING_CANCELLED = "booking_cancelled"
    DISPUTE_LOGGED = "dispute_logged"
    RESPONSE_TIME_UPDATED = "response_time_updated"

    def __str__(self) -> str:
        return self.value


def calculate_score(
    verified_id: bool,
    verified_business: bool,
    completed_bookings: int,
    avg_response_time: float,
    cancellation_rate: float,
    dispute_count: int,
) -> int:
    """
    Calculate a trust score from behavioral counters.

    Points:
        ID verified:        25
        Business verified:  20
        Bookings:           30 (>=50), 20 (>=20), 10 (>=5)
        Response time:      15 (<=10 min), 10 (<=30), 5 (<=60)
        Cancellation rate:  10 (<=5%), 5 (<=15%)
        Disputes:           10 (none), 5 (<=2)

    Returns:
        Score 0-100
    """
    score = 0

    if verified_id:
        score += 25
    if verified_business:
        score += 20

    if completed_bookings >= 50:
        score += 30
    elif completed_bookings >= 20:
        score += 20
    elif completed_bookings >= 5:
        score += 10

    if avg_response_time <= 10:
        score += 15
    elif avg_response_time <= 30:
        score += 10
    elif avg_response_time <= 60:
        score += 5

    if cancellation_rate <= 0.05:
        score += 10
    elif cancellation_rate <= 0.15:
        score += 5

    if dispute_count == 0:
        score += 10
    elif dispute_count <= 2:
        score += 5

    return max(0, min(100, score))


def level_for_score(score: float) -> TrustLevel:
    """
    Suggested trust level for a score.

    Score ranges:
        0-39:   RESTRICTED
        40-74:  BUILDING
        75-100: VERIFIED
    """
    if score >= THRESHOLD_VERIFIED:
        return TrustLevel.VERIFIED
    if score < THRESHOLD_RESTRICTED:
        return TrustLevel.RESTRICTED
    return TrustLevel.BUILDING


def build_trust_score(
    verified_id: bool = False,
    verified_business: bool = False,
    completed_bookings: int = 0,
    avg_response_time: float = 0.0,
    cancellation_rate: float = 0.0,
    dispute_count: int = 0,
) -> TrustScore:
    """Build a TrustScore with calculated score and suggested level."""
    score = calculate_score(
        verified_id,
        verified_business,
        completed_bookings,
        avg_response_time,
        cancellation_rate,
        dispute_count,
    )
    return TrustScore(
        score=score,
        level=level_for_score(score),
        verified_id=verified_id,
        verified_business=verified_business,
        completed_bookings=completed_bookings,
        avg_response_time=avg_response_time,
        cancellation_rate=cancellation_rate,
        dispute_count=dispute_count,
    )


def _cancelled_bookings(trust_score: TrustScore) -> float | None:
    """
    Estimate cancelled bookings from the completed count and the rate.

    Returns None when the count cannot be recovered: a positive rate with
    no completed bookings, or a rate of 1.
    """
    rate = trust_score.cancellation_rate
    completed = trust_score.completed_bookings
    if rate <= 0:
        return 0.0
    if completed == 0 or rate >= 1:
        return None
    return rate * completed / (1 - rate)


def apply_event(
    trust_score: TrustScore,
    event: TrustEvent | str,
    metadata: dict[str, Any] | None = None,
) -> TrustScore:
    """
    Apply an activity event and recalculate.

    Args:
        trust_score: Current record; left untouched
        event: Event kind
        metadata: Event details; response_time_updated requires
            avg_response_time (minutes)

    Returns:
        New TrustScore with updated counters, score and level

    Raises:
        ValueError: If the event is unknown or metadata is missing
    """
    event = TrustEvent(event)
    metadata = metadata or {}

    completed = trust_score.completed_bookings
    cancelled = _cancelled_bookings(trust_score)
    disputes = trust_score.dispute_count
    response_time = trust_score.avg_response_time

    if event == TrustEvent.BOOKING_COMPLETED:
        completed += 1
    elif event == TrustEvent.BOOKING_CANCELLED:
        if cancelled is not None:
            cancelled += 1
    elif event == TrustEvent.DISPUTE_LOGGED:
        disputes += 1
    elif event == TrustEvent.RESPONSE_TIME_UPDATED:
        if "avg_response_time" not in metadata:
            raise ValueError("response_time_updated requires avg_response_time")
        response_time = float(metadata["avg_response_time"])

    # Only booking events move the rate; an unrecoverable history keeps it
    rate = trust_score.cancellation_rate
    if cancelled is not None and event in (
        TrustEvent.BOOKING_COMPLETED,
        TrustEvent.BOOKING_CANCELLED,
    ):
        total = completed + cancelled
        rate = cancelled / total if total else 0.0

    score = calculate_score(
        trust_score.verified_id,
        trust_score.verified_business,
        completed,
        response_time,
        rate,
        disputes,
    )

    logger.debug("Applied %s: score %s -> %s", event, trust_score.score, score)

    return replace(
        trust_score,
        score=score,
        level=level_for_score(score),
        completed_bookings=completed,
        avg_response_time=response_time,
        cancellation_rate=rate,
        dispute_count=disputes,
        last_updated=datetime.now(timezone.utc),
    )
