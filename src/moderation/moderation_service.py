"""
Review Moderation
=================

Approve / reject transitions, one review at a time or in bulk.

Single actions propagate ReviewNotFoundError and ReviewValidationError.
Bulk actions validate their arguments up front, then process ids one by
one: an unknown id is recorded as a failed item and never stops or rolls
back the others.

Usage:
    moderation = ModerationService(storage)
    moderation.approve(review_id, action_by="manager@flex.com", notes="Great stay")
    result = moderation.bulk_update(ids, "reject", "manager@flex.com", reason="Spam")
    print(f"{result.succeeded}/{result.total} rejected")
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..reviews.errors import ReviewError, ReviewValidationError
from ..reviews.review_models import Review
from ..storage.base import ReviewStorage

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 500
MAX_NOTES_LENGTH = 1000


class ModerationAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


@dataclass
class BulkItemResult:
    """Outcome for one id of a bulk action."""
    review_id: str
    success: bool
    review: Optional[Review] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"reviewId": self.review_id, "success": self.success}
        if self.review is not None:
            data["review"] = self.review.to_manager_view()
        if self.error is not None:
            data["error"] = self.error
            data["errorCode"] = self.error_code
        return data


@dataclass
class BulkActionResult:
    """Per-item outcomes of a bulk action; counts are derived."""
    action: ModerationAction
    items: List[BulkItemResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def succeeded(self) -> int:
        return sum(1 for item in self.items if item.success)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "results": [item.to_dict() for item in self.items],
            "summary": {
                "total": self.total,
                "successful": self.succeeded,
                "failed": self.failed,
            },
        }


def _require_actor(action_by: Optional[str]) -> str:
    if action_by is None or not str(action_by).strip():
        raise ReviewValidationError("actionBy is required", details=["actionBy: must not be empty"])
    return str(action_by).strip()


def _check_length(name: str, value: Optional[str], limit: int) -> None:
    if value is not None and len(value) > limit:
        raise ReviewValidationError(
            f"{name} is too long",
            details=[f"{name}: must be at most {limit} characters"],
        )


def parse_action(action: Any) -> ModerationAction:
    """'approve' / 'reject' (case-insensitive) -> ModerationAction."""
    try:
        return ModerationAction(str(action).lower())
    except ValueError:
        raise ReviewValidationError(
            f"Invalid action '{action}'",
            details=["action: must be one of approve, reject"],
        )


class ModerationService:
    """State transitions on stored reviews."""

    def __init__(self, storage: ReviewStorage):
        self.storage = storage

    def get_review(self, review_id: str) -> Review:
        """Raises ReviewNotFoundError for an unknown id."""
        return self.storage.get_by_id(review_id)

    def approve(self, review_id: str, action_by: str, notes: Optional[str] = None) -> Review:
        """
        Approve a review and make it public.

        Args:
            review_id: Review to approve
            action_by: Manager performing the action (required)
            notes: Optional approval notes stored in metadata

        Returns:
            The approved review as persisted

        Raises:
            ReviewNotFoundError: unknown id
            ReviewValidationError: missing action_by or oversized notes
        """
        actor = _require_actor(action_by)
        _check_length("notes", notes, MAX_NOTES_LENGTH)

        review = self.storage.get_by_id(review_id).approve(actor, notes=notes)
        self.storage.save([review])
        logger.info(
            f"Review {review_id} approved by {actor}",
            extra={"review_id": review_id, "action": "approve", "property_id": review.property_id},
        )
        return review

    def reject(self, review_id: str, action_by: str, reason: Optional[str] = None) -> Review:
        """
        Reject a review; it is no longer public.

        Raises:
            ReviewNotFoundError: unknown id
            ReviewValidationError: missing action_by or oversized reason
        """
        actor = _require_actor(action_by)
        _check_length("reason", reason, MAX_REASON_LENGTH)

        review = self.storage.get_by_id(review_id).reject(actor, reason=reason)
        self.storage.save([review])
        logger.info(
            f"Review {review_id} rejected by {actor}",
            extra={"review_id": review_id, "action": "reject", "property_id": review.property_id},
        )
        return review

    def apply(self, review_id: str, action: Any, action_by: str,
              reason: Optional[str] = None, notes: Optional[str] = None) -> Review:
        """Dispatch a single approve/reject by action name."""
        if parse_action(action) == ModerationAction.APPROVE:
            return self.approve(review_id, action_by, notes=notes)
        return self.reject(review_id, action_by, reason=reason)

    def bulk_update(
        self,
        review_ids: Iterable[str],
        action: Any,
        action_by: str,
        reason: Optional[str] = None,
    ) -> BulkActionResult:
        """
        Apply one action to many reviews, best effort.

        Args:
            review_ids: Ids to process, in order (at least one)
            action: "approve" or "reject"
            action_by: Manager performing the action
            reason: Rejection reason, or the approval notes for approve

        Returns:
            BulkActionResult with one entry per id

        Raises:
            ReviewValidationError: empty ids, unknown action or missing action_by
        """
        ids = list(review_ids or [])
        if not ids:
            raise ReviewValidationError("reviewIds must not be empty", details=["reviewIds: at least 1 item required"])
        parsed_action = parse_action(action)
        actor = _require_actor(action_by)
        _check_length("reason", reason, MAX_REASON_LENGTH)

        result = BulkActionResult(action=parsed_action)
        for review_id in ids:
            try:
                if parsed_action == ModerationAction.APPROVE:
                    review = self.approve(review_id, actor, notes=reason)
                else:
                    review = self.reject(review_id, actor, reason=reason)
                result.items.append(BulkItemResult(review_id=review_id, success=True, review=review))
            except ReviewError as e:
                logger.warning(f"Bulk {parsed_action.value} failed for {review_id}: {e.message}")
                result.items.append(BulkItemResult(
                    review_id=review_id,
                    success=False,
                    error=e.message,
                    error_code=e.code,
                ))

        logger.info(
            f"Bulk {parsed_action.value}: {result.succeeded}/{result.total} succeeded",
            extra={"action": f"bulk_{parsed_action.value}"},
        )
        return result
