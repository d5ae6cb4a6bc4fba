"""
Trust Scoring.

Classification, feature gating and recommendations for trust records,
plus score calculation from behavioral counters.
"""

from aura.trust.evaluator import (
    BADGES,
    BOOST_SCORE_THRESHOLD,
    can_access_premium_features,
    can_boost_property,
    classify,
    evaluate,
    get_recommendations,
    get_trust_level_color,
    get_trust_level_icon,
    get_trust_level_label,
)
from aura.trust.models import TrustBadge, TrustLevel, TrustScore
from aura.trust.scoring import (
    TrustEvent,
    apply_event,
    build_trust_score,
    calculate_score,
    level_for_score,
)

__all__ = [
    # Evaluator
    "BADGES",
    "BOOST_SCORE_THRESHOLD",
    "can_access_premium_features",
    "can_boost_property",
    "classify",
    "evaluate",
    "get_recommendations",
    "get_trust_level_color",
    "get_trust_level_icon",
    "get_trust_level_label",
    # Models
    "TrustBadge",
    "TrustLevel",
    "TrustScore",
    # Scoring
    "TrustEvent",
    "apply_event",
    "build_trust_score",
    "calculate_score",
    "level_for_score",
]
