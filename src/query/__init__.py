"""
Review Query Module
===================

Validated listing queries (ReviewQuery) and the engine that runs them
over a review snapshot (ReviewQueryEngine).
"""

from .review_query import ReviewQuery, parse_rating_range, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .query_engine import (
    ReviewQueryEngine,
    QueryResult,
    PublicQueryResult,
    PaginationMeta,
    rating_distribution,
    mean_rating,
)

__all__ = [
    "ReviewQuery",
    "parse_rating_range",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "ReviewQueryEngine",
    "QueryResult",
    "PublicQueryResult",
    "PaginationMeta",
    "rating_distribution",
    "mean_rating",
]
