"""
Trust score evaluation.

Turns a TrustScore into a badge, feature gates and improvement tips.
Every function here is pure.
"""

from __future__ import annotations

from aura.trust.models import TrustBadge, TrustLevel, TrustScore


# Numeric score that unlocks property boosting without full verification
BOOST_SCORE_THRESHOLD = 50

MIN_COMPLETED_BOOKINGS = 5
MAX_RESPONSE_TIME_MINUTES = 30
MAX_CANCELLATION_RATE = 0.15

BADGES: dict[TrustLevel, TrustBadge] = {
    TrustLevel.VERIFIED: TrustBadge(color="#10B981", label="Verified", icon="🟢"),
    TrustLevel.BUILDING: TrustBadge(
        color="#F59E0B", label="Building Reputation", icon="🟡"
    ),
    TrustLevel.RESTRICTED: TrustBadge(color="#EF4444", label="Restricted", icon="🔴"),
}


def classify(level: TrustLevel | str) -> TrustBadge:
    """
    Get the badge for a trust level.

    Args:
        level: Trust level or its string value

    Returns:
        TrustBadge with color, label and icon

    Raises:
        ValueError: If level is not a valid trust level
    """
    try:
        return BADGES[TrustLevel(level)]
    except (ValueError, KeyError):
        raise ValueError(f"Invalid trust level: {level!r}") from None


def get_trust_level_color(level: TrustLevel | str) -> str:
    return classify(level).color


def get_trust_level_label(level: TrustLevel | str) -> str:
    return classify(level).label


def get_trust_level_icon(level: TrustLevel | str) -> str:
    return classify(level).icon


def can_boost_property(trust_score: TrustScore | None = None) -> bool:
    """Verified accounts, or any account scoring at least 50, may boost."""
    if trust_score is None:
        return False
    return (
        trust_score.level == TrustLevel.VERIFIED
        or trust_score.score >= BOOST_SCORE_THRESHOLD
    )


def can_access_premium_features(trust_score: TrustScore | None = None) -> bool:
    """Only verified accounts get premium features; score is ignored."""
    if trust_score is None:
        return False
    return trust_score.level == TrustLevel.VERIFIED


def get_recommendations(trust_score: TrustScore) -> list[str]:
    """
    Get improvement tips for a trust record.

    Tips are returned in a fixed order. Business verification is only
    suggested once identity is verified.

    Args:
        trust_score: Record to evaluate

    Returns:
        Ordered list of recommendation strings, possibly empty
    """
    recommendations: list[str] = []

    if not trust_score.verified_id:
        recommendations.append("Complete ID verification to boost your trust score")
    elif not trust_score.verified_business:
        recommendations.append("Verify your business documents")

    if trust_score.completed_bookings < MIN_COMPLETED_BOOKINGS:
        recommendations.append("Complete more bookings to build reputation")

    if trust_score.avg_response_time > MAX_RESPONSE_TIME_MINUTES:
        recommendations.append("Improve response time to inquiries")

    if trust_score.cancellation_rate > MAX_CANCELLATION_RATE:
        recommendations.append("Reduce cancellation rate")

    if trust_score.dispute_count > 0:
        recommendations.append("Resolve outstanding disputes")

    return recommendations


def evaluate(trust_score: TrustScore) -> dict:
    """Badge, feature gates and recommendations in one dictionary."""
    return {
        "badge": classify(trust_score.level).to_dict(),
        "can_boost_property": can_boost_property(trust_score),
        "can_access_premium_features": can_access_premium_features(trust_score),
        "recommendations": get_recommendations(trust_score),
    }
