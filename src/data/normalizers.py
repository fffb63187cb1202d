"""
Source Normalizers
==================

Pure mapping functions from one provider's raw review payload to the
canonical Review entity.

Each normalizer declares:
    - the raw fields that identify a record at its origin (records missing
      them are dropped with a warning, never fatal)
    - a StatusSeedingPolicy: origin-status -> initial moderation status

Adding a provider means adding a normalizer subclass and a policy table;
shared logic does not change.

Usage:
    normalizer = HostawayNormalizer()
    reviews = normalizer.normalize_batch(raw_records)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..reviews.review_models import (
    DEFAULT_REVIEW_TYPE,
    Review,
    ReviewMetadata,
    ReviewRating,
    ReviewStatus,
    derive_property_id,
    parse_datetime,
    review_id_for,
    utcnow,
)

logger = logging.getLogger(__name__)


def text_field(raw: Mapping[str, Any], name: str) -> str:
    """Read an optional free-text field; non-string values make the record unusable."""
    value = raw.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class StatusSeedingPolicy:
    """
    Decides the initial moderation status of a freshly normalized review.

    status_field: raw field carrying the origin status (None = provider has none)
    mapping: origin status (lowercased) -> seeded status
    default: status for any origin value not in the mapping
    """
    status_field: Optional[str] = None
    mapping: Mapping[str, ReviewStatus] = field(default_factory=dict)
    default: ReviewStatus = ReviewStatus.PENDING

    def seed(self, raw: Mapping[str, Any]) -> ReviewStatus:
        if self.status_field is None:
            return self.default
        origin = raw.get(self.status_field)
        if origin is None:
            return self.default
        return self.mapping.get(str(origin).lower(), self.default)


# Published Hostaway reviews await a manager decision; anything else
# (unpublished, awaiting, expired...) was never publishable.
HOSTAWAY_STATUS_POLICY = StatusSeedingPolicy(
    status_field="status",
    mapping={"published": ReviewStatus.PENDING},
    default=ReviewStatus.REJECTED,
)

# Google reviews are public at the origin; they still need a manager decision.
GOOGLE_STATUS_POLICY = StatusSeedingPolicy(default=ReviewStatus.PENDING)


class SourceNormalizer(ABC):
    """Base class: validation, error isolation and batch handling."""

    source: str = "unknown"
    required_fields: Tuple[str, ...] = ()
    default_policy: StatusSeedingPolicy = StatusSeedingPolicy()

    def __init__(self, status_policy: Optional[StatusSeedingPolicy] = None):
        self.status_policy = status_policy or self.default_policy

    def normalize(self, raw: Any, **context: Any) -> Optional[Review]:
        """
        Normalize one raw record.

        Returns:
            Review, or None when the record is unusable (logged as warning)
        """
        if not isinstance(raw, Mapping):
            logger.warning(f"Skipping {self.source} record: expected an object, got {type(raw).__name__}")
            return None

        missing = [name for name in self.required_fields if raw.get(name) in (None, "")]
        if missing:
            logger.warning(f"Skipping {self.source} record missing {', '.join(missing)}")
            return None

        try:
            return self._build(raw, **context)
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            logger.warning(f"Failed to normalize {self.source} record: {e}")
            return None

    def normalize_batch(self, raws: Iterable[Any], **context: Any) -> List[Review]:
        """Normalize a batch; yields at most len(raws) reviews."""
        reviews: List[Review] = []
        skipped = 0
        for raw in raws or []:
            review = self.normalize(raw, **context)
            if review is None:
                skipped += 1
                continue
            reviews.append(review)

        if skipped:
            logger.warning(f"{self.source}: dropped {skipped} unusable record(s)")
        logger.debug(f"{self.source}: normalized {len(reviews)} review(s)")
        return reviews

    @abstractmethod
    def _build(self, raw: Mapping[str, Any], **context: Any) -> Review:
        """Map a validated raw record to a Review."""


class HostawayNormalizer(SourceNormalizer):
    """Hostaway /reviews records."""

    source = "hostaway"
    required_fields = ("id",)
    default_policy = HOSTAWAY_STATUS_POLICY

    def _build(self, raw: Mapping[str, Any], **context: Any) -> Review:
        source_id = str(raw["id"])
        listing_name = text_field(raw, "listingName")
        now = utcnow()

        return Review(
            id=review_id_for(self.source, source_id),
            source_id=source_id,
            source=self.source,
            property_id=derive_property_id(listing_name),
            property_name=listing_name,
            guest_name=text_field(raw, "guestName"),
            review_text=text_field(raw, "publicReview"),
            rating=ReviewRating.from_raw(raw.get("rating"), self._categories(raw)),
            submitted_at=parse_datetime(raw.get("submittedAt")) or now,
            status=self.status_policy.seed(raw),
            type=text_field(raw, "type") or DEFAULT_REVIEW_TYPE,
            metadata=ReviewMetadata(source_data=ReviewMetadata.encode_source_data(raw)),
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def _categories(raw: Mapping[str, Any]) -> Dict[str, Any]:
        """reviewCategory: [{"category": "cleanliness", "rating": 10}, ...]"""
        categories: Dict[str, Any] = {}
        entries = raw.get("reviewCategory")
        if not isinstance(entries, list):
            return categories
        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            name = entry.get("category")
            if name and entry.get("rating") is not None:
                categories[name] = entry["rating"]
        return categories


class GoogleReviewNormalizer(SourceNormalizer):
    """
    Google Places review objects (place details "reviews" array).

    Google reviews carry no id and no listing name: the record is identified
    by author + timestamp, and the property comes from the caller's
    property -> place mapping.
    """

    source = "google"
    required_fields = ("author_name", "time", "text")
    default_policy = GOOGLE_STATUS_POLICY

    def _build(
        self,
        raw: Mapping[str, Any],
        property_id: Optional[str] = None,
        property_name: str = "",
        place_id: Optional[str] = None,
        **context: Any,
    ) -> Review:
        property_id = property_id or derive_property_id(property_name)
        if not property_id:
            raise ValueError("no property to attach the review to")

        source_id = f"{place_id or property_id}:{raw['author_name']}:{int(raw['time'])}"
        now = utcnow()

        return Review(
            id=review_id_for(self.source, source_id),
            source_id=source_id,
            source=self.source,
            property_id=property_id,
            property_name=property_name or property_id,
            guest_name=text_field(raw, "author_name"),
            review_text=text_field(raw, "text"),
            rating=ReviewRating.from_raw(raw.get("rating")),
            submitted_at=parse_datetime(int(raw["time"])) or now,
            status=self.status_policy.seed(raw),
            metadata=ReviewMetadata(source_data=ReviewMetadata.encode_source_data(raw)),
            created_at=now,
            updated_at=now,
        )


NORMALIZERS: Dict[str, SourceNormalizer] = {
    HostawayNormalizer.source: HostawayNormalizer(),
    GoogleReviewNormalizer.source: GoogleReviewNormalizer(),
}


def get_normalizer(source: str) -> SourceNormalizer:
    """Return the registered normalizer for a source tag."""
    try:
        return NORMALIZERS[source.lower()]
    except KeyError:
        raise ValueError(f"No normalizer registered for source '{source}'")
