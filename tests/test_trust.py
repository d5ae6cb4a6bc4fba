"""
Tests for trust score evaluation.
"""

from __future__ import annotations

from dataclasses import replace

import pytest

from aura.trust import (
    TrustBadge,
    TrustLevel,
    TrustScore,
    can_access_premium_features,
    can_boost_property,
    classify,
    evaluate,
    get_recommendations,
    get_trust_level_color,
    get_trust_level_icon,
    get_trust_level_label,
)


def make_score(**overrides) -> TrustScore:
    """Well-established verified host, with overrides."""
    values = {
        "score": 90,
        "level": TrustLevel.VERIFIED,
        "verified_id": True,
        "verified_business": True,
        "completed_bookings": 40,
        "avg_response_time": 5,
        "cancellation_rate": 0.01,
        "dispute_count": 0,
    }
    values.update(overrides)
    return TrustScore(**values)


class TestClassify:
    """Tests for trust level presentation."""

    @pytest.mark.parametrize(
        "level,color,label,icon",
        [
            (TrustLevel.VERIFIED, "#10B981", "Verified", "🟢"),
            (TrustLevel.BUILDING, "#F59E0B", "Building Reputation", "🟡"),
            (TrustLevel.RESTRICTED, "#EF4444", "Restricted", "🔴"),
        ],
    )
    def test_badges(self, level: TrustLevel, color: str, label: str, icon: str) -> None:
        """Test the fixed level to badge mapping."""
        assert classify(level) == TrustBadge(color=color, label=label, icon=icon)
        assert get_trust_level_color(level) == color
        assert get_trust_level_label(level) == label
        assert get_trust_level_icon(level) == icon

    def test_accepts_string_value(self) -> None:
        """Test string level values are accepted."""
        assert classify("building").label == "Building Reputation"

    @pytest.mark.parametrize("bad", ["gold", "Verified", "", None, 3])
    def test_invalid_level(self, bad) -> None:
        """Test anything but a valid level fails fast."""
        with pytest.raises(ValueError):
            classify(bad)


class TestFeatureGates:
    """Tests for can_boost_property and can_access_premium_features."""

    def test_boost_absent(self) -> None:
        """Test boosting is denied without a trust record."""
        assert can_boost_property(None) is False
        assert can_boost_property() is False

    def test_boost_verified(self) -> None:
        """Test verified accounts may boost regardless of score."""
        assert can_boost_property(make_score(score=10)) is True

    def test_boost_by_score(self) -> None:
        """Test the score threshold alone unlocks boosting."""
        assert can_boost_property(make_score(level="building", score=55)) is True
        assert can_boost_property(make_score(level="building", score=50)) is True

    def test_boost_below_threshold(self) -> None:
        """Test unverified accounts under the threshold cannot boost."""
        assert can_boost_property(make_score(level="building", score=40)) is False
        assert can_boost_property(make_score(level="restricted", score=49.9)) is False

    def test_premium_absent(self) -> None:
        assert can_access_premium_features(None) is False

    def test_premium_requires_verified(self) -> None:
        """Test a high score does not unlock premium features."""
        assert can_access_premium_features(make_score(level="building", score=99)) is False
        assert can_access_premium_features(make_score(level="verified", score=0)) is True

    def test_level_and_score_independent(self) -> None:
        """Test a restricted level with a high score is taken as given."""
        trust_score = make_score(level="restricted", score=90)

        assert can_boost_property(trust_score) is True
        assert can_access_premium_features(trust_score) is False
        assert classify(trust_score.level).label == "Restricted"


class TestRecommendations:
    """Tests for get_recommendations."""

    def test_new_host(self, new_host_score: TrustScore) -> None:
        """Test business tip is held back until identity is verified."""
        assert get_recommendations(new_host_score) == [
            "Complete ID verification to boost your trust score",
            "Complete more bookings to build reputation",
        ]

    def test_struggling_host(self, struggling_host_score: TrustScore) -> None:
        """Test every threshold breach is reported in order."""
        assert get_recommendations(struggling_host_score) == [
            "Verify your business documents",
            "Improve response time to inquiries",
            "Reduce cancellation rate",
            "Resolve outstanding disputes",
        ]

    def test_established_host(self) -> None:
        """Test nothing is recommended when all thresholds are met."""
        assert get_recommendations(make_score()) == []

    def test_thresholds_are_exclusive(self) -> None:
        """Test values exactly at a threshold do not trigger tips."""
        trust_score = make_score(
            completed_bookings=5, avg_response_time=30, cancellation_rate=0.15
        )
        assert get_recommendations(trust_score) == []

    def test_unverified_with_business(self) -> None:
        """Test business verification without ID only yields the ID tip."""
        trust_score = make_score(verified_id=False, verified_business=True)
        assert get_recommendations(trust_score) == [
            "Complete ID verification to boost your trust score",
        ]

    def test_deterministic(self, struggling_host_score: TrustScore) -> None:
        """Test repeated calls return equal lists and leave input untouched."""
        before = replace(struggling_host_score)

        first = get_recommendations(struggling_host_score)
        second = get_recommendations(struggling_host_score)

        assert first == second
        assert first is not second
        assert struggling_host_score == before


class TestEvaluate:
    """Tests for the combined evaluation."""

    def test_evaluate(self, struggling_host_score: TrustScore) -> None:
        result = evaluate(struggling_host_score)

        assert result["badge"]["label"] == "Building Reputation"
        assert result["can_boost_property"] is False
        assert result["can_access_premium_features"] is False
        assert len(result["recommendations"]) == 4


class TestTrustScoreModel:
    """Tests for TrustScore validation and serialization."""

    def test_level_coerced(self) -> None:
        assert make_score(level="building").level is TrustLevel.BUILDING

    @pytest.mark.parametrize(
        "field,value",
        [
            ("score", 101),
            ("score", -1),
            ("completed_bookings", -1),
            ("avg_response_time", -0.5),
            ("cancellation_rate", 1.5),
            ("dispute_count", -2),
            ("level", "gold"),
        ],
    )
    def test_invalid_values(self, field: str, value) -> None:
        """Test out-of-range values are rejected."""
        with pytest.raises(ValueError):
            make_score(**{field: value})

    def test_from_dict_camel_case(self) -> None:
        """Test the client wire format is accepted."""
        trust_score = TrustScore.from_dict({
            "score": 72,
            "level": "building",
            "verifiedId": True,
            "verifiedBusiness": False,
            "completedBookings": 12,
            "avgResponseTime": 18,
            "cancellationRate": 0.04,
            "disputeCount": 1,
            "lastUpdated": "2024-06-01T12:00:00Z",
            "unknownField": "ignored",
        })

        assert trust_score.verified_id is True
        assert trust_score.completed_bookings == 12
        assert trust_score.last_updated.year == 2024

    def test_to_dict(self) -> None:
        data = make_score().to_dict()
        assert data["level"] == "verified"
        assert data["verifiedBusiness"] is True
        assert TrustScore.from_dict(data) == make_score(last_updated=data["lastUpdated"])
