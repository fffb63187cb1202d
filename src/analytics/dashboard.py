"""
Dashboard Summary
=================

One-call overview for the manager dashboard:
    - overview counts and overall mean rating
    - most recently updated reviews (activity feed)
    - top properties by mean rating
    - issues requiring attention
    - per-channel performance
    - 1-5 star distribution

All numbers are computed fresh from the snapshot passed in.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..query.query_engine import mean_rating, rating_distribution
from ..reviews.review_models import Review, ReviewStatus, to_iso, utcnow
from ..reviews.rounding import round_half_up, round_to_int
from .insights import DEFAULT_STALE_PENDING_DAYS, Issue, detect_issues
from .property_stats import PropertyStats, compute_property_stats

logger = logging.getLogger(__name__)

DEFAULT_TOP_PROPERTIES = 5
DEFAULT_RECENT_ACTIVITY = 10


@dataclass
class ChannelPerformance:
    name: str
    total_reviews: int = 0
    approved_reviews: int = 0
    rating_total: float = 0.0
    rated_count: int = 0

    @property
    def average_rating(self) -> Optional[float]:
        if self.rated_count == 0:
            return None
        return self.rating_total / self.rated_count

    @property
    def approval_rate(self) -> float:
        if self.total_reviews == 0:
            return 0.0
        return self.approved_reviews / self.total_reviews * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "totalReviews": self.total_reviews,
            "approvedReviews": self.approved_reviews,
            "averageRating": round_half_up(self.average_rating or 0.0, 1),
            "approvalRate": round_to_int(self.approval_rate),
        }


@dataclass
class DashboardSummary:
    total_reviews: int
    approved_reviews: int
    pending_reviews: int
    rejected_reviews: int
    average_rating: Optional[float]
    total_properties: int
    recent_activity: List[Review] = field(default_factory=list)
    top_properties: List[PropertyStats] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)
    channel_performance: List[ChannelPerformance] = field(default_factory=list)
    rating_distribution: Dict[int, int] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overview": {
                "totalReviews": self.total_reviews,
                "approvedReviews": self.approved_reviews,
                "pendingReviews": self.pending_reviews,
                "rejectedReviews": self.rejected_reviews,
                "averageRating": round_half_up(self.average_rating or 0.0, 1),
                "totalProperties": self.total_properties,
            },
            "recentActivity": [
                {
                    "id": r.id,
                    "propertyName": r.property_name,
                    "guestName": r.guest_name,
                    "action": r.status.value,
                    "timestamp": to_iso(r.updated_at),
                    "rating": r.rating.overall,
                }
                for r in self.recent_activity
            ],
            "topPerformingProperties": [
                {
                    "propertyId": s.property_id,
                    "propertyName": s.property_name,
                    "averageRating": round_half_up(s.average_rating or 0.0, 1),
                    "totalReviews": s.total_reviews,
                    "approvalRate": round_to_int(s.approval_rate),
                }
                for s in self.top_properties
            ],
            "issuesRequiringAttention": [i.to_dict() for i in self.issues],
            "channelPerformance": [c.to_dict() for c in self.channel_performance],
            "ratingDistribution": {str(k): v for k, v in self.rating_distribution.items()},
        }


def recent_activity(reviews: Iterable[Review], limit: int = DEFAULT_RECENT_ACTIVITY) -> List[Review]:
    """Most recently updated reviews first (ties by id)."""
    ordered = sorted(reviews, key=lambda r: r.id)
    ordered.sort(key=lambda r: r.updated_at, reverse=True)
    return ordered[:limit]


def top_properties(stats: Iterable[PropertyStats], limit: int = DEFAULT_TOP_PROPERTIES) -> List[PropertyStats]:
    """Best mean rating first; properties without reviews are left out."""
    candidates = sorted((s for s in stats if s.total_reviews > 0), key=lambda s: s.property_id or "")
    candidates.sort(key=lambda s: s.average_rating or 0.0, reverse=True)
    return candidates[:limit]


def channel_performance(reviews: Iterable[Review]) -> List[ChannelPerformance]:
    """Per-channel counts, mean rating and approval rate, in first-seen order."""
    channels: Dict[str, ChannelPerformance] = {}
    for review in reviews:
        perf = channels.setdefault(review.channel, ChannelPerformance(name=review.channel))
        perf.total_reviews += 1
        if review.status == ReviewStatus.APPROVED:
            perf.approved_reviews += 1
        if review.rating.overall is not None:
            perf.rating_total += review.rating.overall
            perf.rated_count += 1
    return list(channels.values())


def build_dashboard(
    reviews: Iterable[Review],
    now: Optional[datetime] = None,
    top_n: int = DEFAULT_TOP_PROPERTIES,
    recent_limit: int = DEFAULT_RECENT_ACTIVITY,
    stale_pending_days: int = DEFAULT_STALE_PENDING_DAYS,
) -> DashboardSummary:
    """
    Build the dashboard summary from a review snapshot.

    Args:
        reviews: Review snapshot
        now: Reference time for issue detection
        top_n: Number of top properties
        recent_limit: Size of the activity feed
        stale_pending_days: Age that makes a pending review stale
    """
    snapshot = list(reviews)
    now = now or utcnow()
    stats = compute_property_stats(snapshot)

    summary = DashboardSummary(
        total_reviews=len(snapshot),
        approved_reviews=sum(1 for r in snapshot if r.status == ReviewStatus.APPROVED),
        pending_reviews=sum(1 for r in snapshot if r.status == ReviewStatus.PENDING),
        rejected_reviews=sum(1 for r in snapshot if r.status == ReviewStatus.REJECTED),
        average_rating=mean_rating(snapshot),
        total_properties=len(stats),
        recent_activity=recent_activity(snapshot, recent_limit),
        top_properties=top_properties(stats, top_n),
        issues=detect_issues(snapshot, now, stale_pending_days),
        channel_performance=channel_performance(snapshot),
        rating_distribution=rating_distribution(snapshot),
        generated_at=now,
    )
    logger.info(
        f"Dashboard built: {summary.total_reviews} reviews, "
        f"{summary.total_properties} properties, {len(summary.issues)} issue(s)"
    )
    return summary
