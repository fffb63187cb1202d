"""
Guest Reviews API Services
==========================

Business logic layer an HTTP adapter calls: one method per endpoint of the
review manager. Each method returns an ApiResponse; typed errors become
failure envelopes instead of exceptions.

    not_found           unknown review id
    validation_failed   malformed query, body or action
    internal_error      anything unexpected (logged with traceback)

Usage:
    service = ReviewService()
    response = service.list_reviews({"status": "pending", "limit": 10})
    if response.success:
        print(response.meta["total"])
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, ValidationError

from ..analytics import (
    PerformanceScorer,
    build_dashboard,
    compute_property_analytics,
    compute_property_stats,
    compute_trends,
    generate_insights,
)
from ..data.config import Settings, get_settings
from ..data.ingestion_pipeline import ReviewIngestionService
from ..moderation import ModerationService
from ..query import ReviewQuery, ReviewQueryEngine
from ..reviews.errors import ReviewError, ReviewNotFoundError, ReviewValidationError
from ..storage import ReviewStorage, create_storage
from .models import ApiResponse, BulkActionRequest, ReviewActionRequest, SyncRequest, timestamp

logger = logging.getLogger(__name__)


def _validate_body(model: type, payload: Optional[Mapping[str, Any]]) -> BaseModel:
    try:
        return model.model_validate(dict(payload or {}))
    except ValidationError as e:
        raise ReviewValidationError(
            "Invalid request body",
            details=[
                f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
                for err in e.errors()
            ],
        )


def envelope(operation: str) -> Callable:
    """Turn a method returning ApiResponse into one that never raises."""

    def decorator(func: Callable[..., ApiResponse]) -> Callable[..., ApiResponse]:
        @wraps(func)
        def wrapper(self, *args: Any, **kwargs: Any) -> ApiResponse:
            start = time.monotonic()
            try:
                return func(self, *args, **kwargs)
            except ReviewNotFoundError as e:
                logger.info(f"{operation}: {e.message}", extra={"review_id": e.review_id})
                return ApiResponse.fail(e.code, e.message)
            except ReviewValidationError as e:
                logger.info(f"{operation}: {e.message} {e.details}")
                return ApiResponse.fail(e.code, e.message, e.details)
            except ReviewError as e:
                logger.warning(f"{operation}: {e.message}")
                return ApiResponse.fail(e.code, e.message)
            except Exception as e:
                logger.exception(f"{operation} failed: {e}")
                return ApiResponse.fail("internal_error", "Internal Server Error")
            finally:
                logger.debug(
                    f"{operation} finished",
                    extra={"action": operation, "duration": round(time.monotonic() - start, 3)},
                )
        return wrapper

    return decorator


class ReviewService:
    """Façade over storage, ingestion, query, moderation and analytics."""

    def __init__(
        self,
        storage: Optional[ReviewStorage] = None,
        ingestion: Optional[ReviewIngestionService] = None,
        settings: Optional[Settings] = None,
        scorer: Optional[PerformanceScorer] = None,
    ):
        self.settings = settings or get_settings()
        self.storage = storage or create_storage(self.settings.storage)
        self.ingestion = ingestion or ReviewIngestionService(self.storage)
        self.query_engine = ReviewQueryEngine()
        self.moderation = ModerationService(self.storage)
        self.scorer = scorer or PerformanceScorer()

    # =========================================================================
    # REVIEWS
    # =========================================================================

    @envelope("list_reviews")
    def list_reviews(self, params: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        result = self.query_engine.execute(self.storage.get_all(), ReviewQuery.parse(params))
        payload = result.to_dict()
        return ApiResponse.ok(data=payload["data"], meta=payload["meta"])

    @envelope("get_review")
    def get_review(self, review_id: str) -> ApiResponse:
        return ApiResponse.ok(data=self.moderation.get_review(review_id).to_manager_view())

    @envelope("approve_review")
    def approve_review(self, review_id: str, body: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        request = _validate_body(ReviewActionRequest, body)
        review = self.moderation.approve(review_id, request.actionBy, notes=request.notes)
        return ApiResponse.ok(data=review.to_manager_view(), message="Review approved successfully")

    @envelope("reject_review")
    def reject_review(self, review_id: str, body: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        request = _validate_body(ReviewActionRequest, body)
        review = self.moderation.reject(review_id, request.actionBy, reason=request.reason)
        return ApiResponse.ok(data=review.to_manager_view(), message="Review rejected successfully")

    @envelope("bulk_action")
    def bulk_action(self, body: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        request = _validate_body(BulkActionRequest, body)
        result = self.moderation.bulk_update(
            request.reviewIds, request.action, request.actionBy, reason=request.reason,
        )
        payload = result.to_dict()
        return ApiResponse.ok(
            data=payload["results"],
            meta={"summary": payload["summary"]},
            message=(
                f"Bulk {request.action} completed: "
                f"{result.succeeded} successful, {result.failed} failed"
            ),
        )

    @envelope("public_reviews")
    def public_reviews(self, property_id: str, params: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        result = self.query_engine.execute_public(self.storage.get_all(), property_id, ReviewQuery.parse(params))
        payload = result.to_dict()
        return ApiResponse.ok(data=payload["data"], meta=payload["meta"])

    # =========================================================================
    # PROVIDERS & ADMIN
    # =========================================================================

    @envelope("fetch_hostaway_reviews")
    def fetch_hostaway_reviews(self, limit: int = 100, offset: int = 0) -> ApiResponse:
        """Fetch from Hostaway (cached, fallback protected) and store new reviews."""
        client = self.ingestion.hostaway
        reviews = client.fetch_reviews({"limit": limit, "offset": offset})
        new = [r for r in reviews if not self.storage.exists(r.id)]
        if new:
            self.storage.save(new)
        return ApiResponse.ok(
            data=[r.to_manager_view() for r in reviews],
            meta={
                "total": len(reviews),
                "source": "hostaway",
                "cached": client.get_cache_info({"limit": limit, "offset": offset})["cached"],
                "fallback": client.last_fetch_used_fallback,
                "timestamp": timestamp(),
            },
        )

    @envelope("google_reviews")
    def google_reviews(self, property_id: Optional[str] = None) -> ApiResponse:
        """Google reviews for one property, or for every mapped property."""
        client = self.ingestion.google
        if property_id:
            reviews = client.fetch_property_reviews(property_id)
        else:
            reviews = client.fetch_all_property_reviews()
        return ApiResponse.ok(
            data=[r.to_manager_view() for r in reviews],
            meta={"count": len(reviews), "propertyId": property_id or "all", "timestamp": timestamp()},
        )

    @envelope("sync_reviews")
    def sync_reviews(self, body: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        request = _validate_body(SyncRequest, body)
        result = self.ingestion.sync(request.sources, force_refresh=request.forceRefresh)
        return ApiResponse.ok(data=result.to_dict(), message="Reviews synced successfully")

    @envelope("clear_reviews")
    def clear_reviews(self) -> ApiResponse:
        self.storage.clear()
        return ApiResponse.ok(message="All reviews cleared", meta={"timestamp": timestamp()})

    @envelope("get_stats")
    def get_stats(self) -> ApiResponse:
        stats = compute_property_stats(self.storage.get_all())
        return ApiResponse.ok(data={
            "properties": [s.to_dict() for s in stats],
            "system": {
                "storage": self.storage.get_info(),
                "cache": self.ingestion.hostaway.get_cache_info(),
                "timestamp": timestamp(),
            },
        })

    # =========================================================================
    # ANALYTICS
    # =========================================================================

    @envelope("property_analytics")
    def property_analytics(self) -> ApiResponse:
        analytics = compute_property_analytics(self.storage.get_all(), scorer=self.scorer)
        return ApiResponse.ok(
            data=[a.to_dict() for a in analytics],
            meta={"totalProperties": len(analytics), "timestamp": timestamp()},
        )

    @envelope("trends")
    def trends(self, period: str = "month", property_id: Optional[str] = None) -> ApiResponse:
        """Trend buckets and insights over every review (optionally one property)."""
        reviews = self.storage.get_all()
        if property_id:
            reviews = [r for r in reviews if r.property_id == property_id]

        buckets = compute_trends(reviews, period)
        insights = generate_insights(reviews)
        return ApiResponse.ok(
            data={
                "trends": [b.to_dict() for b in buckets],
                "insights": [i.to_dict() for i in insights],
                "period": str(period).lower(),
                "propertyId": property_id or "all",
            },
            meta={
                "totalReviews": len(reviews),
                "dateRange": {
                    "from": buckets[0].period if buckets else None,
                    "to": buckets[-1].period if buckets else None,
                },
                "timestamp": timestamp(),
            },
        )

    @envelope("dashboard")
    def dashboard(self, top_n: Optional[int] = None) -> ApiResponse:
        cfg = self.settings.analytics
        summary = build_dashboard(
            self.storage.get_all(),
            top_n=top_n or cfg.top_properties,
            recent_limit=cfg.recent_activity,
            stale_pending_days=cfg.stale_pending_days,
        )
        generated = summary.generated_at.isoformat()
        return ApiResponse.ok(data=summary.to_dict(), meta={"generatedAt": generated, "dataAsOf": generated})
