"""
Review Error Taxonomy
=====================

Typed failures shared by every layer of the review pipeline.

    ReviewNotFoundError       unknown review id (propagated to the caller)
    ReviewValidationError     malformed filter / action input (propagated, never retried)
    ProviderUnavailableError  external source failed (absorbed by the fallback dataset)

Partial failures of a bulk action are not exceptions: they are reported
per item in a BulkActionResult.
"""

from typing import List, Optional


class ReviewError(Exception):
    """Base exception for review pipeline errors."""

    code = "review_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ReviewNotFoundError(ReviewError):
    """Requested review id does not exist in storage."""

    code = "not_found"

    def __init__(self, review_id: str):
        self.review_id = review_id
        super().__init__(f"Review with ID {review_id} not found")


class ReviewValidationError(ReviewError):
    """Filter, query or moderation input failed validation."""

    code = "validation_failed"

    def __init__(self, message: str, details: Optional[List[str]] = None):
        self.details = details or []
        super().__init__(message)


class ProviderUnavailableError(ReviewError):
    """External review provider could not be reached or returned garbage."""

    code = "provider_unavailable"

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"{provider}: {message}")
