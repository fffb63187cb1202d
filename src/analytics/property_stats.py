"""
Per-Property Statistics
=======================

Groups a review snapshot by property_id and derives counts by status,
mean rating (over reviews that have one), last review date and a channel
breakdown. Stats keep raw (unrounded) numbers; rounding happens in to_dict().

Usage:
    stats = compute_property_stats(storage.get_all())
    for s in stats:
        print(s.property_name, s.average_rating)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..reviews.review_models import Review, ReviewStatus, to_iso
from ..reviews.rounding import round_half_up, round_to_int


@dataclass
class ChannelBreakdown:
    """Review count and rating total for one channel."""
    channel: str
    count: int = 0
    rating_total: float = 0.0
    rated_count: int = 0

    @property
    def average_rating(self) -> Optional[float]:
        if self.rated_count == 0:
            return None
        return self.rating_total / self.rated_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "averageRating": round_half_up(self.average_rating, 1),
        }


@dataclass
class PropertyStats:
    """Aggregates for one property."""
    property_id: Optional[str]
    property_name: str
    total_reviews: int = 0
    approved_reviews: int = 0
    pending_reviews: int = 0
    rejected_reviews: int = 0
    rating_total: float = 0.0
    rated_count: int = 0
    last_review_date: Optional[datetime] = None
    channel_breakdown: Dict[str, ChannelBreakdown] = field(default_factory=dict)

    @property
    def average_rating(self) -> Optional[float]:
        """Mean overall rating, ignoring reviews without one."""
        if self.rated_count == 0:
            return None
        return self.rating_total / self.rated_count

    @property
    def approval_rate(self) -> float:
        """Approved share in percent (0 when there are no reviews)."""
        if self.total_reviews == 0:
            return 0.0
        return self.approved_reviews / self.total_reviews * 100

    def add(self, review: Review) -> None:
        self.total_reviews += 1
        if review.status == ReviewStatus.APPROVED:
            self.approved_reviews += 1
        elif review.status == ReviewStatus.PENDING:
            self.pending_reviews += 1
        elif review.status == ReviewStatus.REJECTED:
            self.rejected_reviews += 1

        overall = review.rating.overall
        if overall is not None:
            self.rating_total += overall
            self.rated_count += 1

        if self.last_review_date is None or review.submitted_at > self.last_review_date:
            self.last_review_date = review.submitted_at

        channel = self.channel_breakdown.setdefault(review.channel, ChannelBreakdown(channel=review.channel))
        channel.count += 1
        if overall is not None:
            channel.rating_total += overall
            channel.rated_count += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "propertyId": self.property_id,
            "propertyName": self.property_name,
            "totalReviews": self.total_reviews,
            "approvedReviews": self.approved_reviews,
            "pendingReviews": self.pending_reviews,
            "rejectedReviews": self.rejected_reviews,
            "averageRating": round_half_up(self.average_rating, 1),
            "approvalRate": round_to_int(self.approval_rate),
            "lastReviewDate": to_iso(self.last_review_date),
            "channelBreakdown": {name: c.to_dict() for name, c in self.channel_breakdown.items()},
        }


def compute_property_stats(reviews: Iterable[Review]) -> List[PropertyStats]:
    """
    Aggregate reviews per property_id.

    Returns:
        One PropertyStats per distinct property, in first-seen order
    """
    stats: Dict[Optional[str], PropertyStats] = {}
    for review in reviews:
        stat = stats.get(review.property_id)
        if stat is None:
            stat = PropertyStats(property_id=review.property_id, property_name=review.property_name)
            stats[review.property_id] = stat
        stat.add(review)
    return list(stats.values())


def compute_category_ratings(reviews: Iterable[Review]) -> Dict[str, float]:
    """Unrounded mean of each rating category across the given reviews."""
    totals: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for review in reviews:
        for category, value in review.rating.categories.items():
            totals[category] = totals.get(category, 0.0) + value
            counts[category] = counts.get(category, 0) + 1
    return {category: totals[category] / counts[category] for category in totals}
