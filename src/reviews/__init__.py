"""
Guest Review Canonical Model
============================

Source-independent representation of a guest review and the error
taxonomy shared by the rest of the pipeline.

Modules:
    review_models - Review entity, rating/metadata value objects, slug + channel derivation
    errors        - ReviewNotFoundError, ReviewValidationError, ProviderUnavailableError
    rounding      - half-up rounding used at presentation time
"""

from .errors import (
    ReviewError,
    ReviewNotFoundError,
    ReviewValidationError,
    ProviderUnavailableError,
)
from .review_models import (
    Review,
    ReviewRating,
    ReviewMetadata,
    ReviewStatus,
    Priority,
    CHANNEL_MAP,
    derive_channel,
    derive_property_id,
    review_id_for,
)

__all__ = [
    "Review",
    "ReviewRating",
    "ReviewMetadata",
    "ReviewStatus",
    "Priority",
    "CHANNEL_MAP",
    "derive_channel",
    "derive_property_id",
    "review_id_for",
    "ReviewError",
    "ReviewNotFoundError",
    "ReviewValidationError",
    "ProviderUnavailableError",
]
