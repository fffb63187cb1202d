"""
Review Trends
=============

Buckets reviews into calendar periods by submitted_at (UTC).

Bucket keys:
    week     YYYY-MM-DD of the Sunday starting the week
    month    YYYY-MM
    quarter  YYYY-MM of the quarter's first month
    year     YYYY

Keys sort lexicographically in chronological order, so buckets are
emitted by sorting on the key.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..reviews.errors import ReviewValidationError
from ..reviews.review_models import Review, ReviewStatus
from ..reviews.rounding import round_half_up, round_to_int


class TrendPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


def parse_period(period: Any) -> TrendPeriod:
    try:
        return TrendPeriod(str(period).lower())
    except ValueError:
        raise ReviewValidationError(
            f"Invalid period '{period}'",
            details=["period: must be one of week, month, quarter, year"],
        )


def period_key(moment: datetime, period: TrendPeriod) -> str:
    """Canonical start-of-period key for a timestamp."""
    if period == TrendPeriod.WEEK:
        # weekday(): Monday=0 ... Sunday=6
        start = moment.date() - timedelta(days=(moment.weekday() + 1) % 7)
        return start.strftime("%Y-%m-%d")
    if period == TrendPeriod.QUARTER:
        first_month = 3 * ((moment.month - 1) // 3) + 1
        return f"{moment.year:04d}-{first_month:02d}"
    if period == TrendPeriod.YEAR:
        return f"{moment.year:04d}"
    return f"{moment.year:04d}-{moment.month:02d}"


@dataclass
class TrendBucket:
    """Aggregates for one calendar period."""
    period: str
    review_count: int = 0
    rating_total: float = 0.0
    rated_count: int = 0
    approved_count: int = 0
    rejected_count: int = 0

    @property
    def average_rating(self) -> Optional[float]:
        if self.rated_count == 0:
            return None
        return self.rating_total / self.rated_count

    @property
    def approval_rate(self) -> float:
        if self.review_count == 0:
            return 0.0
        return self.approved_count / self.review_count * 100

    def add(self, review: Review) -> None:
        self.review_count += 1
        if review.rating.overall is not None:
            self.rating_total += review.rating.overall
            self.rated_count += 1
        if review.status == ReviewStatus.APPROVED:
            self.approved_count += 1
        elif review.status == ReviewStatus.REJECTED:
            self.rejected_count += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "reviewCount": self.review_count,
            "averageRating": round_half_up(self.average_rating, 1) if self.average_rating is not None else 0,
            "approvedCount": self.approved_count,
            "rejectedCount": self.rejected_count,
            "approvalRate": round_to_int(self.approval_rate),
        }


def compute_trends(reviews: Iterable[Review], period: Any = TrendPeriod.MONTH) -> List[TrendBucket]:
    """
    Group reviews into period buckets, oldest first.

    Raises:
        ReviewValidationError: unknown period
    """
    trend_period = parse_period(period)
    buckets: Dict[str, TrendBucket] = {}
    for review in reviews:
        key = period_key(review.submitted_at, trend_period)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = TrendBucket(period=key)
        bucket.add(review)
    return [buckets[key] for key in sorted(buckets)]
