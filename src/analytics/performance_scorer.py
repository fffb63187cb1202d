"""
Property Performance Scorer
===========================

Deterministic 0-100 score per property, built from four components
(rating, volume, approval, recency). Each component keeps its unrounded
points and a short explanation so the total can always be traced back.

Usage:
    scorer = PerformanceScorer()
    result = scorer.score(property_stats, now=utcnow())

    print(result.total)          # 87
    print(result.get_explanation())
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..reviews.review_models import Review, ReviewStatus, utcnow
from ..reviews.rounding import round_half_up, round_to_int
from .performance_config import DEFAULT_PERFORMANCE_CONFIG, PerformanceConfig
from .property_stats import PropertyStats, compute_category_ratings, compute_property_stats

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass
class ComponentScore:
    """One weighted component of the performance score."""
    name: str
    points: float
    max_points: float
    explanation: str = ""

    @property
    def percentage(self) -> float:
        """Share of the component's maximum obtained."""
        if self.max_points == 0:
            return 0.0
        return self.points / self.max_points * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "points": round_half_up(self.points, 1),
            "maxPoints": self.max_points,
            "percentage": round_to_int(self.percentage),
        }


@dataclass
class PerformanceScore:
    """Total score plus its component breakdown."""
    property_id: Optional[str]
    components: Dict[str, ComponentScore] = field(default_factory=dict)

    @property
    def raw_total(self) -> float:
        return sum(c.points for c in self.components.values())

    @property
    def total(self) -> int:
        """Integer score, rounded half-up."""
        return round_to_int(self.raw_total)

    def get_explanation(self) -> str:
        lines = [f"Performance {self.property_id}: {self.total}/100"]
        for comp in self.components.values():
            lines.append(f"  {comp.name}: {comp.points:.1f}/{comp.max_points:g} - {comp.explanation}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.total,
            "components": {name: c.to_dict() for name, c in self.components.items()},
        }


class PerformanceScorer:
    """
    Weighted property score.

    Components (default weights):
        - rating (40): average rating relative to 5 stars
        - volume (30): review count, saturating at 20 reviews
        - approval (20): approved share of all reviews
        - recency (10): decays linearly to 0 over 30 days since the last review
    """

    def __init__(self, config: Optional[PerformanceConfig] = None):
        self.config = config or DEFAULT_PERFORMANCE_CONFIG
        self.config.validate()

    def score_rating(self, stats: PropertyStats) -> ComponentScore:
        cfg = self.config
        average = stats.average_rating
        if not average or average <= 0:
            return ComponentScore("rating", 0.0, cfg.rating_weight, "no rated reviews")
        ratio = min(average / cfg.max_rating, 1.0)
        return ComponentScore("rating", ratio * cfg.rating_weight, cfg.rating_weight,
                              f"average {average:.2f}/{cfg.max_rating:g}")

    def score_volume(self, stats: PropertyStats) -> ComponentScore:
        cfg = self.config
        ratio = min(stats.total_reviews / cfg.volume_saturation, 1.0)
        return ComponentScore("volume", ratio * cfg.volume_weight, cfg.volume_weight,
                              f"{stats.total_reviews} review(s), full at {cfg.volume_saturation}")

    def score_approval(self, stats: PropertyStats) -> ComponentScore:
        cfg = self.config
        if stats.total_reviews == 0:
            return ComponentScore("approval", 0.0, cfg.approval_weight, "no reviews")
        ratio = stats.approved_reviews / stats.total_reviews
        return ComponentScore("approval", ratio * cfg.approval_weight, cfg.approval_weight,
                              f"{stats.approved_reviews}/{stats.total_reviews} approved")

    def score_recency(self, stats: PropertyStats, now: datetime) -> ComponentScore:
        cfg = self.config
        if stats.last_review_date is None:
            return ComponentScore("recency", 0.0, cfg.recency_weight, "no reviews yet")
        days = (now - stats.last_review_date).total_seconds() / SECONDS_PER_DAY
        # Future-dated reviews count as "today"
        ratio = min(1.0, max(0.0, 1 - days / cfg.recency_window_days))
        return ComponentScore("recency", ratio * cfg.recency_weight, cfg.recency_weight,
                              f"last review {max(days, 0):.1f} day(s) ago")

    def score(self, stats: PropertyStats, now: Optional[datetime] = None) -> PerformanceScore:
        """
        Score one property.

        Args:
            stats: Aggregated stats of the property
            now: Reference time for recency (default: current UTC time)

        Returns:
            PerformanceScore with the four components
        """
        now = now or utcnow()
        components = [
            self.score_rating(stats),
            self.score_volume(stats),
            self.score_approval(stats),
            self.score_recency(stats, now),
        ]
        result = PerformanceScore(
            property_id=stats.property_id,
            components={c.name: c for c in components},
        )
        logger.debug(result.get_explanation())
        return result


# =============================================================================
# PROPERTY ANALYTICS
# =============================================================================

@dataclass
class PropertyAnalytics:
    """Stats, performance and category averages for one property."""
    stats: PropertyStats
    performance: PerformanceScore
    category_ratings: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = self.stats.to_dict()
        data["metrics"] = {
            "totalReviews": self.stats.total_reviews,
            "averageRating": round_half_up(self.stats.average_rating or 0.0, 1),
            "approvedReviews": self.stats.approved_reviews,
            "pendingReviews": self.stats.pending_reviews,
            "rejectedReviews": self.stats.rejected_reviews,
            "approvalRate": round_to_int(self.stats.approval_rate),
            "lastReviewDate": data["lastReviewDate"],
            "performance": self.performance.total,
            "performanceBreakdown": self.performance.to_dict()["components"],
            "categoryRatings": {k: round_half_up(v, 1) for k, v in self.category_ratings.items()},
            "channelBreakdown": data["channelBreakdown"],
        }
        return data


def compute_property_analytics(
    reviews: Iterable[Review],
    now: Optional[datetime] = None,
    scorer: Optional[PerformanceScorer] = None,
) -> List[PropertyAnalytics]:
    """
    Per-property analytics ranked by performance score, best first.

    Category averages use approved reviews only (what guests can see).
    Equal scores keep property_id order.
    """
    snapshot = list(reviews)
    now = now or utcnow()
    scorer = scorer or PerformanceScorer()

    analytics: List[PropertyAnalytics] = []
    for stats in compute_property_stats(snapshot):
        approved = [
            r for r in snapshot
            if r.property_id == stats.property_id and r.status == ReviewStatus.APPROVED
        ]
        analytics.append(PropertyAnalytics(
            stats=stats,
            performance=scorer.score(stats, now),
            category_ratings=compute_category_ratings(approved),
        ))

    analytics.sort(key=lambda a: a.stats.property_id or "")
    analytics.sort(key=lambda a: a.performance.total, reverse=True)
    return analytics
