"""
Review Query Engine
===================

Filter -> sort -> paginate over a snapshot list of reviews.

Rules:
    - Filters are AND-combined; any subset may be present
    - A rating filter excludes reviews without an overall rating
    - Sorting uses one key; rating sorts missing values as 0
    - Ties are broken by review id ascending, so output is reproducible
    - page is 1-indexed; totalPages = ceil(total / limit)

Usage:
    engine = ReviewQueryEngine()
    result = engine.execute(storage.get_all(), {"status": "approved", "page": 2})
    result.meta.total_pages
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from ..reviews.review_models import Review, ReviewStatus
from ..reviews.rounding import round_half_up, round_to_int
from .review_query import ReviewQuery

logger = logging.getLogger(__name__)

QueryInput = Union[ReviewQuery, Mapping[str, Any], None]


@dataclass
class PaginationMeta:
    """Pagination details for one page of results."""
    total: int
    page: int
    limit: int
    total_pages: int
    has_more: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
            "hasMore": self.has_more,
        }


@dataclass
class QueryResult:
    """One page of reviews plus pagination metadata."""
    items: List[Review]
    meta: PaginationMeta

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [review.to_manager_view() for review in self.items],
            "meta": self.meta.to_dict(),
        }


@dataclass
class PublicQueryResult:
    """Public listing: guest-safe projections plus rating summary."""
    items: List[Dict[str, Any]]
    meta: PaginationMeta
    rating_distribution: Dict[int, int] = field(default_factory=dict)
    average_rating: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        meta = self.meta.to_dict()
        meta["averageRating"] = round_half_up(self.average_rating, 1) if self.average_rating is not None else 0
        meta["ratingDistribution"] = {str(k): v for k, v in self.rating_distribution.items()}
        return {"data": list(self.items), "meta": meta}


def _sort_key(sort_by: str) -> Callable[[Review], Any]:
    if sort_by == "rating":
        return lambda r: r.rating.overall if r.rating.overall is not None else 0
    if sort_by == "property":
        return lambda r: r.property_name
    if sort_by == "status":
        return lambda r: r.status.value
    return lambda r: r.submitted_at


def rating_distribution(reviews: Iterable[Review]) -> Dict[int, int]:
    """
    Count reviews per star bucket 5..1.

    overall is rounded half-up to the nearest integer; reviews without a
    rating or outside 1-5 after rounding are not counted.
    """
    distribution = {5: 0, 4: 0, 3: 0, 2: 0, 1: 0}
    for review in reviews:
        if review.rating.overall is None:
            continue
        bucket = round_to_int(review.rating.overall)
        if bucket in distribution:
            distribution[bucket] += 1
    return distribution


def mean_rating(reviews: Iterable[Review]) -> Optional[float]:
    """Unrounded mean of the non-null overall ratings (None if there are none)."""
    values = [r.rating.overall for r in reviews if r.rating.overall is not None]
    if not values:
        return None
    return sum(values) / len(values)


class ReviewQueryEngine:
    """Stateless filter / sort / paginate over review snapshots."""

    @staticmethod
    def _coerce(query: QueryInput) -> ReviewQuery:
        if isinstance(query, ReviewQuery):
            return query
        return ReviewQuery.parse(query)

    def filter(self, reviews: Iterable[Review], query: ReviewQuery) -> List[Review]:
        """Apply every present filter (AND)."""
        result = list(reviews)

        if query.property_id:
            property_ids = set(query.property_id)
            result = [r for r in result if r.property_id in property_ids]

        if query.status:
            statuses = set(query.status)
            result = [r for r in result if r.status in statuses]

        if query.rating_range:
            low, high = query.rating_range
            result = [
                r for r in result
                if r.rating.overall is not None and low <= r.rating.overall <= high
            ]

        if query.date_from:
            result = [r for r in result if r.submitted_at >= query.date_from]

        if query.date_to:
            result = [r for r in result if r.submitted_at <= query.date_to]

        if query.channel:
            channels = set(query.channel)
            result = [r for r in result if r.channel in channels]

        if query.search:
            term = query.search.lower()
            result = [
                r for r in result
                if term in r.review_text.lower()
                or term in r.guest_name.lower()
                or term in r.property_name.lower()
            ]

        return result

    def sort(self, reviews: Iterable[Review], query: ReviewQuery) -> List[Review]:
        """Sort by one key; equal keys stay in id order for both directions."""
        ordered = sorted(reviews, key=lambda r: r.id)
        ordered.sort(key=_sort_key(query.sort_by), reverse=query.sort_order == "desc")
        return ordered

    def paginate(self, reviews: List[Review], query: ReviewQuery) -> QueryResult:
        total = len(reviews)
        start = (query.page - 1) * query.limit
        end = start + query.limit
        meta = PaginationMeta(
            total=total,
            page=query.page,
            limit=query.limit,
            total_pages=math.ceil(total / query.limit),
            has_more=end < total,
        )
        return QueryResult(items=reviews[start:end], meta=meta)

    def execute(self, reviews: Iterable[Review], query: QueryInput = None) -> QueryResult:
        """
        Run a full listing query.

        Args:
            reviews: Snapshot of the review collection
            query: ReviewQuery or raw parameters (validated here)

        Returns:
            QueryResult with the requested page

        Raises:
            ReviewValidationError: invalid raw parameters
        """
        query = self._coerce(query)
        matched = self.filter(reviews, query)
        result = self.paginate(self.sort(matched, query), query)
        logger.debug(
            f"Query matched {result.meta.total} review(s), "
            f"returning page {query.page}/{result.meta.total_pages}"
        )
        return result

    def execute_public(
        self,
        reviews: Iterable[Review],
        property_id: str,
        query: QueryInput = None,
    ) -> PublicQueryResult:
        """
        Public listing for one property: approved reviews only.

        The rating distribution and average cover every matching approved
        review, not just the returned page.
        """
        snapshot = list(reviews)
        query = self._coerce(query).with_overrides(
            property_id=[property_id],
            status=[ReviewStatus.APPROVED],
        )

        page = self.execute(snapshot, query)

        approved = [
            r for r in snapshot
            if r.property_id == property_id and r.status == ReviewStatus.APPROVED
        ]

        return PublicQueryResult(
            items=[review.to_public_view() for review in page.items],
            meta=page.meta,
            rating_distribution=rating_distribution(approved),
            average_rating=mean_rating(approved),
        )
