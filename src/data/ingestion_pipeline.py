"""
Review Ingestion Service
========================

Pulls reviews from the configured providers, merges them into storage and
reports what happened.

Features:
    - Per-source fetch through the cached, fallback-protected clients
    - Idempotent re-sync (review ids are deterministic per source record)
    - Stored moderation decisions survive a re-sync
    - Per-source counts and errors in an IngestionResult

Usage:
    from src.data.ingestion_pipeline import ReviewIngestionService

    service = ReviewIngestionService(storage)
    result = service.sync(sources=("hostaway", "google"))
    print(f"Inserted {result.inserted} new reviews")
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..orchestrator.logging_config import log_context
from ..reviews.errors import ReviewValidationError
from ..reviews.review_models import Review, to_iso, utcnow
from ..storage.base import ReviewStorage
from .google_places_client import GooglePlacesClient
from .hostaway_client import HostawayClient

logger = logging.getLogger(__name__)

SUPPORTED_SOURCES = ("hostaway", "google")


@dataclass
class IngestionResult:
    """Result of one sync run."""
    batch_id: str
    started_at: datetime
    completed_at: Optional[datetime] = None

    # Counts
    fetched: int = 0
    inserted: int = 0
    skipped_existing: int = 0
    per_source: Dict[str, int] = field(default_factory=dict)
    fallback_sources: List[str] = field(default_factory=list)

    # Errors
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def duration_seconds(self) -> Optional[float]:
        """Calculate duration in seconds."""
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def add_error(self, source: str, error_type: str, message: str):
        """Record an error."""
        self.errors.append({
            "source": source,
            "error_type": error_type,
            "message": message,
            "timestamp": to_iso(utcnow()),
        })

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batchId": self.batch_id,
            "startedAt": to_iso(self.started_at),
            "completedAt": to_iso(self.completed_at),
            "durationSeconds": self.duration_seconds,
            "fetched": self.fetched,
            "inserted": self.inserted,
            "skippedExisting": self.skipped_existing,
            "perSource": dict(self.per_source),
            "fallbackSources": list(self.fallback_sources),
            "errors": list(self.errors),
        }


class ReviewIngestionService:
    """
    Orchestrates provider fetch -> normalize -> merge into storage.

    Reviews already in storage are left untouched, so approvals and
    rejections made by managers are never overwritten by a re-sync.
    """

    def __init__(
        self,
        storage: ReviewStorage,
        hostaway_client: Optional[HostawayClient] = None,
        google_client: Optional[GooglePlacesClient] = None,
    ):
        """
        Initialize the ingestion service.

        Args:
            storage: Destination adapter
            hostaway_client: Hostaway client (creates new if None)
            google_client: Google Places client (creates new if None)
        """
        self.storage = storage
        self._hostaway = hostaway_client
        self._google = google_client

    @property
    def hostaway(self) -> HostawayClient:
        if self._hostaway is None:
            self._hostaway = HostawayClient()
        return self._hostaway

    @property
    def google(self) -> GooglePlacesClient:
        if self._google is None:
            self._google = GooglePlacesClient()
        return self._google

    def fetch_source(self, source: str, force_refresh: bool = False) -> List[Review]:
        """Normalized reviews from one provider (fallback dataset on failure)."""
        if source == "hostaway":
            return self.hostaway.fetch_reviews(force_refresh=force_refresh)
        if source == "google":
            return self.google.fetch_all_property_reviews(force_refresh=force_refresh)
        raise ReviewValidationError(
            f"Unknown review source '{source}'",
            details=[f"sources must be one of: {', '.join(SUPPORTED_SOURCES)}"],
        )

    def _client_for(self, source: str):
        return self.hostaway if source == "hostaway" else self.google

    def sync(
        self,
        sources: Iterable[str] = ("hostaway",),
        force_refresh: bool = False,
    ) -> IngestionResult:
        """
        Fetch every requested source and store the reviews not seen before.

        Args:
            sources: Provider names ("hostaway", "google")
            force_refresh: Bypass provider caches

        Returns:
            IngestionResult with counts and errors

        Raises:
            ReviewValidationError: an unknown source was requested
        """
        sources = [s.lower() for s in sources]
        unknown = [s for s in sources if s not in SUPPORTED_SOURCES]
        if unknown:
            raise ReviewValidationError(
                f"Unknown review source(s): {', '.join(unknown)}",
                details=[f"sources must be one of: {', '.join(SUPPORTED_SOURCES)}"],
            )

        result = IngestionResult(batch_id=str(uuid.uuid4()), started_at=utcnow())
        with log_context(batch_id=result.batch_id):
            self._run_sync(result, sources, force_refresh)
        return result

    def _run_sync(self, result: IngestionResult, sources: List[str], force_refresh: bool) -> None:
        start = time.monotonic()
        logger.info(f"Starting review sync (sources={sources})")

        new_reviews: Dict[str, Review] = {}
        for source in sources:
            with log_context(source=source):
                reviews = self.fetch_source(source, force_refresh=force_refresh)
            result.per_source[source] = len(reviews)
            result.fetched += len(reviews)
            if self._client_for(source).last_fetch_used_fallback:
                result.fallback_sources.append(source)
                result.add_error(source, "provider_unavailable", "served fallback dataset")

            for review in reviews:
                if review.id in new_reviews or self.storage.exists(review.id):
                    result.skipped_existing += 1
                    continue
                new_reviews[review.id] = review

        if new_reviews:
            result.inserted = self.storage.save(new_reviews.values())

        result.completed_at = utcnow()
        logger.info(
            f"Review sync complete: fetched={result.fetched}, inserted={result.inserted}, "
            f"skipped={result.skipped_existing}",
            extra={"duration": round(time.monotonic() - start, 3)},
        )
