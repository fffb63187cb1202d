"""
Tests for property analytics: stats, performance score, trends, insights
and the dashboard summary.
"""

import pytest
from datetime import datetime, timedelta, timezone

from src.analytics import (
    PerformanceConfig,
    PerformanceScorer,
    PropertyStats,
    TrendPeriod,
    build_dashboard,
    compute_category_ratings,
    compute_property_analytics,
    compute_property_stats,
    compute_trends,
    detect_issues,
    generate_insights,
    period_key,
)
from src.reviews.errors import ReviewValidationError
from src.reviews.review_models import Review, ReviewRating, ReviewStatus


NOW = datetime(2024, 8, 21, 12, 0, tzinfo=timezone.utc)


def make_review(review_id, overall=4.0, status=ReviewStatus.APPROVED, days_ago=0,
                property_name="Shoreditch Heights", source="hostaway", categories=None,
                updated_days_ago=None, submitted_at=None):
    return Review(
        id=review_id,
        source=source,
        property_name=property_name,
        guest_name="Guest",
        review_text="Stay",
        rating=ReviewRating(overall=overall, categories=categories or {}),
        submitted_at=submitted_at or NOW - timedelta(days=days_ago),
        status=status,
        created_at=NOW,
        updated_at=NOW - timedelta(days=updated_days_ago if updated_days_ago is not None else days_ago),
    )


class TestPropertyStats:
    """Tests for compute_property_stats."""

    def test_groups_by_property(self):
        reviews = [
            make_review("a", overall=5.0),
            make_review("b", overall=3.0, status=ReviewStatus.PENDING, days_ago=3),
            make_review("c", overall=None, status=ReviewStatus.REJECTED, days_ago=1),
            make_review("d", property_name="Camden Lock", source="google"),
        ]

        stats = {s.property_id: s for s in compute_property_stats(reviews)}

        shoreditch = stats["shoreditch-heights"]
        assert shoreditch.total_reviews == 3
        assert shoreditch.approved_reviews == 1
        assert shoreditch.pending_reviews == 1
        assert shoreditch.rejected_reviews == 1
        assert shoreditch.average_rating == 4.0
        assert shoreditch.last_review_date == NOW
        assert shoreditch.approval_rate == pytest.approx(100 / 3)
        assert stats["camden-lock"].channel_breakdown["google"].count == 1

    def test_to_dict_rounds(self):
        reviews = [make_review("a", overall=4.0), make_review("b", overall=4.5), make_review("c", overall=4.0)]
        data = compute_property_stats(reviews)[0].to_dict()
        assert data["averageRating"] == 4.2
        assert data["approvalRate"] == 100
        assert data["channelBreakdown"]["multiple"] == {"count": 3, "averageRating": 4.2}

    def test_category_ratings(self):
        reviews = [
            make_review("a", categories={"cleanliness": 5.0, "value": 4.0}),
            make_review("b", categories={"cleanliness": 4.0}),
        ]
        assert compute_category_ratings(reviews) == {"cleanliness": 4.5, "value": 4.0}


class TestPerformanceScorer:
    """Tests for the 0-100 performance score."""

    def setup_method(self):
        self.scorer = PerformanceScorer()

    def test_perfect_property(self):
        reviews = [make_review(f"r{i}", overall=5.0) for i in range(20)]
        stats = compute_property_stats(reviews)[0]

        score = self.scorer.score(stats, now=NOW)

        assert score.total == 100
        assert score.components["rating"].points == 40
        assert score.components["volume"].points == 30
        assert score.components["approval"].points == 20
        assert score.components["recency"].points == 10

    def test_property_without_reviews(self):
        score = self.scorer.score(PropertyStats(property_id="empty", property_name="Empty"), now=NOW)
        assert score.total == 0

    def test_mixed_property(self):
        reviews = (
            [make_review(f"a{i}", overall=4.0, days_ago=40) for i in range(5)]
            + [make_review(f"p{i}", overall=4.0, status=ReviewStatus.PENDING, days_ago=45) for i in range(5)]
        )
        score = self.scorer.score(compute_property_stats(reviews)[0], now=NOW)

        assert score.components["rating"].points == pytest.approx(32.0)
        assert score.components["volume"].points == pytest.approx(15.0)
        assert score.components["approval"].points == pytest.approx(10.0)
        assert score.components["recency"].points == 0
        assert score.total == 57

    def test_ten_scale_rating_capped_at_full_weight(self):
        stats = compute_property_stats([make_review("a", overall=10.0)])[0]

        score = self.scorer.score(stats, now=NOW)

        assert score.components["rating"].points == pytest.approx(40.0)
        assert 0 <= score.total <= 100

    def test_recency_decays_linearly(self):
        stats = compute_property_stats([make_review("a", days_ago=15)])[0]
        assert self.scorer.score_recency(stats, NOW).points == pytest.approx(5.0)

    def test_future_review_counts_as_today(self):
        stats = compute_property_stats([make_review("a", days_ago=-3)])[0]
        assert self.scorer.score_recency(stats, NOW).points == pytest.approx(10.0)

    def test_explanation(self):
        stats = compute_property_stats([make_review("a")])[0]
        explanation = self.scorer.score(stats, now=NOW).get_explanation()
        assert "rating" in explanation
        assert "recency" in explanation

    def test_invalid_weights(self):
        with pytest.raises(ValueError):
            PerformanceScorer(PerformanceConfig(rating_weight=50.0))


class TestPropertyAnalytics:
    """Tests for compute_property_analytics ranking."""

    def test_ranked_by_performance(self):
        reviews = (
            [make_review(f"s{i}", overall=5.0) for i in range(20)]
            + [make_review("c1", overall=2.0, status=ReviewStatus.PENDING, property_name="Camden Lock", days_ago=60)]
        )

        analytics = compute_property_analytics(reviews, now=NOW)

        assert [a.stats.property_id for a in analytics] == ["shoreditch-heights", "camden-lock"]
        assert analytics[0].to_dict()["metrics"]["performance"] == 100

    def test_category_ratings_use_approved_only(self):
        reviews = [
            make_review("a", categories={"cleanliness": 5.0}),
            make_review("b", status=ReviewStatus.REJECTED, categories={"cleanliness": 1.0}),
        ]
        analytics = compute_property_analytics(reviews, now=NOW)
        assert analytics[0].category_ratings == {"cleanliness": 5.0}

    def test_equal_scores_ordered_by_property_id(self):
        reviews = [
            make_review("z", property_name="Zeta"),
            make_review("a", property_name="Alpha"),
        ]
        analytics = compute_property_analytics(reviews, now=NOW)
        assert [a.stats.property_id for a in analytics] == ["alpha", "zeta"]


class TestTrends:
    """Tests for period bucketing."""

    @pytest.mark.parametrize("period,expected", [
        (TrendPeriod.WEEK, "2024-08-18"),
        (TrendPeriod.MONTH, "2024-08"),
        (TrendPeriod.QUARTER, "2024-07"),
        (TrendPeriod.YEAR, "2024"),
    ])
    def test_period_keys(self, period, expected):
        # 2024-08-21 is a Wednesday
        assert period_key(NOW, period) == expected

    def test_sunday_starts_its_own_week(self):
        sunday = datetime(2024, 8, 18, 9, 0, tzinfo=timezone.utc)
        assert period_key(sunday, TrendPeriod.WEEK) == "2024-08-18"

    def test_same_month_bucket(self):
        reviews = [
            make_review("a", overall=4.0, submitted_at=datetime(2024, 8, 2, tzinfo=timezone.utc)),
            make_review("b", overall=5.0, status=ReviewStatus.REJECTED,
                        submitted_at=datetime(2024, 8, 30, tzinfo=timezone.utc)),
        ]

        buckets = compute_trends(reviews, "month")

        assert len(buckets) == 1
        assert buckets[0].to_dict() == {
            "period": "2024-08",
            "reviewCount": 2,
            "averageRating": 4.5,
            "approvedCount": 1,
            "rejectedCount": 1,
            "approvalRate": 50,
        }

    def test_buckets_in_chronological_order(self):
        reviews = [
            make_review("a", submitted_at=datetime(2024, 9, 1, tzinfo=timezone.utc)),
            make_review("b", submitted_at=datetime(2023, 12, 31, tzinfo=timezone.utc)),
            make_review("c", submitted_at=datetime(2024, 2, 15, tzinfo=timezone.utc)),
        ]
        assert [b.period for b in compute_trends(reviews, "month")] == ["2023-12", "2024-02", "2024-09"]

    def test_unrated_bucket_average_zero(self):
        buckets = compute_trends([make_review("a", overall=None)], "year")
        assert buckets[0].to_dict()["averageRating"] == 0

    def test_invalid_period(self):
        with pytest.raises(ReviewValidationError):
            compute_trends([], "decade")


class TestInsightsAndIssues:
    """Tests for rule-based insights and issue detection."""

    def test_all_insights(self):
        reviews = (
            [make_review(f"h{i}", overall=5.0, status=ReviewStatus.PENDING) for i in range(6)]
            + [make_review(f"a{i}", overall=5.0) for i in range(2)]
            + [make_review("low", overall=2.0), make_review("mid", overall=4.0)]
        )

        insights = generate_insights(reviews)

        assert [i.type for i in insights] == ["warning", "info", "success"]
        assert insights[0].message == "1 reviews with rating below 3.0 require attention"
        assert insights[1].message == "6 reviews are waiting for approval"
        assert insights[2].message == "80% of reviews are 4.5+ stars"

    def test_no_insights(self):
        assert generate_insights([]) == []
        assert generate_insights([make_review("a", overall=4.0)]) == []

    def test_issues(self):
        reviews = [
            make_review("old", status=ReviewStatus.PENDING, days_ago=10),
            make_review("new", status=ReviewStatus.PENDING, days_ago=3),
            make_review("low", overall=1.0),
        ]

        issues = {i.type: i for i in detect_issues(reviews, now=NOW)}

        assert issues["stale_pending"].count == 1
        assert issues["low_ratings"].count == 1
        assert issues["low_ratings"].to_dict()["severity"] == "high"

    def test_stale_threshold_configurable(self):
        reviews = [make_review("p", status=ReviewStatus.PENDING, days_ago=3)]
        assert detect_issues(reviews, now=NOW, stale_pending_days=2)[0].type == "stale_pending"


class TestDashboard:
    """Tests for build_dashboard."""

    def setup_method(self):
        self.reviews = [
            make_review("a", overall=5.0, property_name="Alpha", updated_days_ago=0),
            make_review("b", overall=3.0, property_name="Beta", status=ReviewStatus.PENDING, updated_days_ago=2),
            make_review("c", overall=4.0, property_name="Gamma", status=ReviewStatus.REJECTED,
                        source="google", updated_days_ago=1),
        ]

    def test_overview(self):
        data = build_dashboard(self.reviews, now=NOW).to_dict()

        assert data["overview"] == {
            "totalReviews": 3,
            "approvedReviews": 1,
            "pendingReviews": 1,
            "rejectedReviews": 1,
            "averageRating": 4.0,
            "totalProperties": 3,
        }
        assert data["ratingDistribution"] == {"5": 1, "4": 1, "3": 1, "2": 0, "1": 0}

    def test_top_properties_limit(self):
        data = build_dashboard(self.reviews, now=NOW, top_n=2).to_dict()
        assert [p["propertyName"] for p in data["topPerformingProperties"]] == ["Alpha", "Gamma"]

    def test_recent_activity_order(self):
        data = build_dashboard(self.reviews, now=NOW, recent_limit=2).to_dict()
        assert [entry["id"] for entry in data["recentActivity"]] == ["a", "c"]
        assert data["recentActivity"][1]["action"] == "rejected"

    def test_channel_performance(self):
        data = build_dashboard(self.reviews, now=NOW).to_dict()
        channels = {c["name"]: c for c in data["channelPerformance"]}
        assert channels["multiple"]["totalReviews"] == 2
        assert channels["multiple"]["approvalRate"] == 50
        assert channels["google"]["averageRating"] == 4.0

    def test_empty_snapshot(self):
        data = build_dashboard([], now=NOW).to_dict()
        assert data["overview"]["totalReviews"] == 0
        assert data["overview"]["averageRating"] == 0
        assert data["topPerformingProperties"] == []
