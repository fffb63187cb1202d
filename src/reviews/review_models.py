"""
Canonical Review Models
=======================

The single normalized representation of a guest review, whatever system it
came from (Hostaway, Google Places, ...).

Entities are immutable: moderation transitions return a new Review that the
storage adapter persists. Two projections are exposed:
    - to_manager_view(): every field, camelCase keys, for the moderation UI
    - to_public_view():  guest-safe subset for the public property page

property_id is a slug of the listing name and is the only join key across
the system (there is no property registry).
"""

import json
import math
import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class ReviewStatus(str, Enum):
    """Moderation state of a review."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Priority(str, Enum):
    """Operator priority attached to a review."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Source system -> display channel
CHANNEL_MAP: Dict[str, str] = {
    "hostaway": "multiple",
    "airbnb": "airbnb",
    "booking": "booking.com",
    "vrbo": "vrbo",
    "google": "google",
}
UNKNOWN_CHANNEL = "unknown"

DEFAULT_REVIEW_TYPE = "guest-review"

_REVIEW_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "https://guest-reviews/review")

_SLUG_INVALID = re.compile(r"[^a-z0-9\s-]")
_SLUG_SPACES = re.compile(r"\s+")
_SLUG_DASHES = re.compile(r"-+")


# =============================================================================
# DERIVATION HELPERS
# =============================================================================

def derive_property_id(listing_name: Optional[str]) -> Optional[str]:
    """
    Slug a listing name into a property id.

    "2B N1 A - 29 Shoreditch Heights" -> "2b-n1-a-29-shoreditch-heights"

    Idempotent: derive_property_id(derive_property_id(x)) == derive_property_id(x).
    """
    if not listing_name:
        return None

    slug = listing_name.lower()
    slug = _SLUG_INVALID.sub("", slug)
    slug = _SLUG_SPACES.sub("-", slug)
    slug = _SLUG_DASHES.sub("-", slug)
    slug = slug.strip("-")
    return slug or None


def derive_channel(source: Optional[str]) -> str:
    """Map a source tag to its display channel (case-insensitive)."""
    if not source:
        return UNKNOWN_CHANNEL
    return CHANNEL_MAP.get(source.lower(), UNKNOWN_CHANNEL)


def review_id_for(source: str, source_id: str) -> str:
    """Deterministic review id for a source record, so re-syncs don't duplicate."""
    return str(uuid.uuid5(_REVIEW_ID_NAMESPACE, f"{source}:{source_id}"))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse the timestamp shapes the providers send into an aware UTC datetime.

    Accepts datetime objects, unix seconds, ISO-8601 strings and the
    Hostaway "YYYY-MM-DD HH:MM:SS" format. Naive values are taken as UTC.

    Returns:
        Aware datetime, or None when the value is empty or unparseable
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            try:
                parsed = datetime.strptime(text, "%Y-%m-%d %H:%M:%S")
            except ValueError:
                return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _to_float(value: Any) -> Optional[float]:
    """Parse a rating value; None for missing, unparseable or non-finite input."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


# =============================================================================
# VALUE OBJECTS
# =============================================================================

@dataclass(frozen=True)
class ReviewRating:
    """Overall rating plus per-category sub-ratings."""
    overall: Optional[float] = None
    categories: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_raw(
        cls,
        overall: Any = None,
        categories: Optional[Mapping[str, Any]] = None,
    ) -> "ReviewRating":
        """
        Build a rating from raw provider values.

        Category values are parsed to float (unparseable ones are dropped).
        When no usable overall is supplied, it is the plain mean of the
        categories; no rounding happens here.
        """
        parsed_categories: Dict[str, float] = {}
        for name, raw_value in (categories or {}).items():
            number = _to_float(raw_value)
            if name and number is not None:
                parsed_categories[str(name)] = number

        parsed_overall = _to_float(overall)
        if parsed_overall is None and parsed_categories:
            values = list(parsed_categories.values())
            parsed_overall = sum(values) / len(values)

        return cls(overall=parsed_overall, categories=parsed_categories)

    def to_dict(self) -> Dict[str, Any]:
        return {"overall": self.overall, "categories": dict(self.categories)}


@dataclass(frozen=True)
class ReviewMetadata:
    """Operator flags plus audit data captured from the source."""
    response_required: bool = False
    flagged_for_review: bool = False
    priority: Priority = Priority.LOW
    tags: Tuple[str, ...] = ()
    source_data: Optional[str] = None   # opaque JSON copy of the raw payload
    approval_notes: Optional[str] = None
    rejection_reason: Optional[str] = None

    @staticmethod
    def encode_source_data(raw: Any) -> str:
        """Serialize a raw payload into the opaque audit blob."""
        return json.dumps(raw, default=str, sort_keys=True)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "responseRequired": self.response_required,
            "flaggedForReview": self.flagged_for_review,
            "priority": self.priority.value,
            "tags": list(self.tags),
            "sourceData": self.source_data,
        }
        if self.approval_notes is not None:
            data["approvalNotes"] = self.approval_notes
        if self.rejection_reason is not None:
            data["rejectionReason"] = self.rejection_reason
        return data

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ReviewMetadata":
        data = data or {}
        source_data = data.get("sourceData")
        if source_data is not None and not isinstance(source_data, str):
            source_data = cls.encode_source_data(source_data)
        return cls(
            response_required=bool(data.get("responseRequired", False)),
            flagged_for_review=bool(data.get("flaggedForReview", False)),
            priority=Priority(data.get("priority") or Priority.LOW.value),
            tags=tuple(data.get("tags") or ()),
            source_data=source_data,
            approval_notes=data.get("approvalNotes"),
            rejection_reason=data.get("rejectionReason"),
        )


# =============================================================================
# CANONICAL ENTITY
# =============================================================================

@dataclass(frozen=True)
class Review:
    """
    Canonical guest review.

    is_public is derived from status, so the "public iff approved" rule
    cannot be broken by construction. Transitions (approve/reject) return
    a new instance with updated_at refreshed.
    """
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    source_id: Optional[str] = None
    source: str = "unknown"

    property_id: Optional[str] = None
    property_name: str = ""

    guest_name: str = ""
    review_text: str = ""
    rating: ReviewRating = field(default_factory=ReviewRating)
    submitted_at: datetime = field(default_factory=utcnow)

    status: ReviewStatus = ReviewStatus.PENDING
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None

    channel: Optional[str] = None
    type: str = DEFAULT_REVIEW_TYPE
    metadata: ReviewMetadata = field(default_factory=ReviewMetadata)

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        # Frozen dataclass: normalize loose inputs in place
        if not isinstance(self.status, ReviewStatus):
            object.__setattr__(self, "status", ReviewStatus(self.status))
        if self.channel is None:
            object.__setattr__(self, "channel", derive_channel(self.source))
        if self.source_id is None:
            object.__setattr__(self, "source_id", self.id)
        if self.property_id is None and self.property_name:
            object.__setattr__(self, "property_id", derive_property_id(self.property_name))

    @property
    def is_public(self) -> bool:
        return self.status == ReviewStatus.APPROVED

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def approve(self, approved_by: str, notes: Optional[str] = None,
                at: Optional[datetime] = None) -> "Review":
        """Return an approved copy; any previous rejection is cleared."""
        now = at or utcnow()
        metadata = replace(
            self.metadata,
            approval_notes=notes if notes else self.metadata.approval_notes,
            rejection_reason=None,
        )
        return replace(
            self,
            status=ReviewStatus.APPROVED,
            approved_by=approved_by,
            approved_at=now,
            rejected_by=None,
            rejected_at=None,
            metadata=metadata,
            updated_at=now,
        )

    def reject(self, rejected_by: str, reason: Optional[str] = None,
               at: Optional[datetime] = None) -> "Review":
        """Return a rejected copy; any previous approval is cleared."""
        now = at or utcnow()
        metadata = replace(
            self.metadata,
            rejection_reason=reason if reason else self.metadata.rejection_reason,
            approval_notes=None,
        )
        return replace(
            self,
            status=ReviewStatus.REJECTED,
            rejected_by=rejected_by,
            rejected_at=now,
            approved_by=None,
            approved_at=None,
            metadata=metadata,
            updated_at=now,
        )

    # -------------------------------------------------------------------------
    # Projections
    # -------------------------------------------------------------------------

    def to_public_view(self) -> Dict[str, Any]:
        """Guest-safe projection (no moderation fields)."""
        return {
            "id": self.id,
            "propertyName": self.property_name,
            "guestName": self.guest_name,
            "reviewText": self.review_text,
            "rating": self.rating.to_dict(),
            "submittedAt": to_iso(self.submitted_at),
            "channel": self.channel,
        }

    def to_manager_view(self) -> Dict[str, Any]:
        """Full projection for the moderation UI and for storage."""
        return {
            "id": self.id,
            "sourceId": self.source_id,
            "source": self.source,
            "propertyId": self.property_id,
            "propertyName": self.property_name,
            "guestName": self.guest_name,
            "reviewText": self.review_text,
            "rating": self.rating.to_dict(),
            "submittedAt": to_iso(self.submitted_at),
            "status": self.status.value,
            "isPublic": self.is_public,
            "approvedBy": self.approved_by,
            "approvedAt": to_iso(self.approved_at),
            "rejectedBy": self.rejected_by,
            "rejectedAt": to_iso(self.rejected_at),
            "channel": self.channel,
            "type": self.type,
            "metadata": self.metadata.to_dict(),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_manager_view(cls, view: Mapping[str, Any]) -> "Review":
        """Rebuild an entity from its manager view (storage round-trip)."""
        rating = view.get("rating") or {}
        now = utcnow()
        return cls(
            id=view["id"],
            source_id=view.get("sourceId"),
            source=view.get("source") or "unknown",
            property_id=view.get("propertyId"),
            property_name=view.get("propertyName") or "",
            guest_name=view.get("guestName") or "",
            review_text=view.get("reviewText") or "",
            rating=ReviewRating(
                overall=_to_float(rating.get("overall")),
                categories={
                    k: float(v) for k, v in (rating.get("categories") or {}).items()
                    if _to_float(v) is not None
                },
            ),
            submitted_at=parse_datetime(view.get("submittedAt")) or now,
            status=ReviewStatus(view.get("status") or ReviewStatus.PENDING.value),
            approved_by=view.get("approvedBy"),
            approved_at=parse_datetime(view.get("approvedAt")),
            rejected_by=view.get("rejectedBy"),
            rejected_at=parse_datetime(view.get("rejectedAt")),
            channel=view.get("channel"),
            type=view.get("type") or DEFAULT_REVIEW_TYPE,
            metadata=ReviewMetadata.from_dict(view.get("metadata")),
            created_at=parse_datetime(view.get("createdAt")) or now,
            updated_at=parse_datetime(view.get("updatedAt")) or now,
        )
