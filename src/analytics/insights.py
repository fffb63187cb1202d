"""
Insights & Issues
=================

Rule-based operator hints derived from a review snapshot.

Insights (each rule independent, emitted in this order):
    - any review rated below 3          -> warning, high priority
    - more than 5 reviews pending       -> info, medium priority
    - over 70% of reviews rated >= 4.5  -> success, low priority

Issues:
    - low_ratings:   reviews rated below 3 (high severity)
    - stale_pending: pending reviews submitted more than N days ago (medium)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from ..reviews.review_models import Priority, Review, ReviewStatus, utcnow
from ..reviews.rounding import round_to_int

LOW_RATING_THRESHOLD = 3.0
HIGH_RATING_THRESHOLD = 4.5
PENDING_BACKLOG_THRESHOLD = 5
EXCELLENCE_SHARE = 0.7
DEFAULT_STALE_PENDING_DAYS = 7


@dataclass(frozen=True)
class Insight:
    type: str
    title: str
    message: str
    action: str
    priority: Priority

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "action": self.action,
            "priority": self.priority.value,
        }


@dataclass(frozen=True)
class Issue:
    type: str
    count: int
    severity: Priority
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "count": self.count,
            "severity": self.severity.value,
            "description": self.description,
        }


def _is_low(review: Review) -> bool:
    return review.rating.overall is not None and review.rating.overall < LOW_RATING_THRESHOLD


def generate_insights(reviews: Iterable[Review]) -> List[Insight]:
    snapshot = list(reviews)
    insights: List[Insight] = []

    low = sum(1 for r in snapshot if _is_low(r))
    if low > 0:
        insights.append(Insight(
            type="warning",
            title="Low Rating Alert",
            message=f"{low} reviews with rating below 3.0 require attention",
            action="review_low_ratings",
            priority=Priority.HIGH,
        ))

    pending = sum(1 for r in snapshot if r.status == ReviewStatus.PENDING)
    if pending > PENDING_BACKLOG_THRESHOLD:
        insights.append(Insight(
            type="info",
            title="Pending Reviews",
            message=f"{pending} reviews are waiting for approval",
            action="approve_pending",
            priority=Priority.MEDIUM,
        ))

    high = sum(
        1 for r in snapshot
        if r.rating.overall is not None and r.rating.overall >= HIGH_RATING_THRESHOLD
    )
    if snapshot and high > len(snapshot) * EXCELLENCE_SHARE:
        percentage = round_to_int(high / len(snapshot) * 100)
        insights.append(Insight(
            type="success",
            title="Excellent Performance",
            message=f"{percentage}% of reviews are 4.5+ stars",
            action="celebrate",
            priority=Priority.LOW,
        ))

    return insights


def detect_issues(
    reviews: Iterable[Review],
    now: Optional[datetime] = None,
    stale_pending_days: int = DEFAULT_STALE_PENDING_DAYS,
) -> List[Issue]:
    """
    Issues requiring operator attention.

    Args:
        reviews: Review snapshot
        now: Reference time (default: current UTC time)
        stale_pending_days: Age after which a pending review is stale
    """
    snapshot = list(reviews)
    now = now or utcnow()
    issues: List[Issue] = []

    low = sum(1 for r in snapshot if _is_low(r))
    if low > 0:
        issues.append(Issue(
            type="low_ratings",
            count=low,
            severity=Priority.HIGH,
            description="Reviews with ratings below 3.0",
        ))

    cutoff = now - timedelta(days=stale_pending_days)
    stale = sum(
        1 for r in snapshot
        if r.status == ReviewStatus.PENDING and r.submitted_at < cutoff
    )
    if stale > 0:
        issues.append(Issue(
            type="stale_pending",
            count=stale,
            severity=Priority.MEDIUM,
            description=f"Pending reviews older than {stale_pending_days} days",
        ))

    return issues
