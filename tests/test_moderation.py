"""
Tests for approve / reject moderation, single and bulk.
"""

import pytest

from src.moderation import ModerationAction, ModerationService, parse_action
from src.reviews.errors import ReviewNotFoundError, ReviewValidationError
from src.reviews.review_models import Review, ReviewStatus
from src.storage import MemoryReviewStorage


class TestModerationService:
    """Tests for single-review transitions."""

    def setup_method(self):
        self.storage = MemoryReviewStorage([
            Review(id="A", property_name="Flat One"),
            Review(id="C", property_name="Flat One"),
        ])
        self.service = ModerationService(self.storage)

    def test_approve_persists(self):
        review = self.service.approve("A", "manager@flex.com", notes="Great stay")

        stored = self.storage.get_by_id("A")
        assert stored == review
        assert stored.status == ReviewStatus.APPROVED
        assert stored.is_public is True
        assert stored.approved_by == "manager@flex.com"
        assert stored.metadata.approval_notes == "Great stay"

    def test_reject_after_approve(self):
        self.service.approve("A", "manager")
        self.service.reject("A", "moderator", reason="Offensive")

        stored = self.storage.get_by_id("A")
        assert stored.status == ReviewStatus.REJECTED
        assert stored.approved_by is None
        assert stored.approved_at is None
        assert stored.metadata.rejection_reason == "Offensive"

    def test_unknown_id(self):
        with pytest.raises(ReviewNotFoundError):
            self.service.approve("missing", "manager")

    @pytest.mark.parametrize("actor", [None, "", "   "])
    def test_actor_required(self, actor):
        with pytest.raises(ReviewValidationError):
            self.service.approve("A", actor)
        assert self.storage.get_by_id("A").status == ReviewStatus.PENDING

    def test_reason_length(self):
        with pytest.raises(ReviewValidationError):
            self.service.reject("A", "manager", reason="x" * 501)

    def test_notes_length(self):
        with pytest.raises(ReviewValidationError):
            self.service.approve("A", "manager", notes="x" * 1001)

    def test_apply_dispatches(self):
        assert self.service.apply("A", "REJECT", "manager").status == ReviewStatus.REJECTED
        assert self.service.apply("A", "approve", "manager").status == ReviewStatus.APPROVED


class TestBulkUpdate:
    """Tests for bulk_update partial-failure semantics."""

    def setup_method(self):
        self.storage = MemoryReviewStorage([Review(id="A"), Review(id="C")])
        self.service = ModerationService(self.storage)

    def test_partial_failure(self):
        result = self.service.bulk_update(["A", "B", "C"], "approve", "manager")

        assert result.total == 3
        assert result.succeeded == 2
        assert result.failed == 1
        assert [item.review_id for item in result.items] == ["A", "B", "C"]

        missing = result.items[1]
        assert missing.success is False
        assert missing.error == "Review with ID B not found"
        assert missing.error_code == "not_found"

        assert self.storage.get_by_id("A").status == ReviewStatus.APPROVED
        assert self.storage.get_by_id("C").status == ReviewStatus.APPROVED

    def test_bulk_reject_with_reason(self):
        result = self.service.bulk_update(["A", "C"], "reject", "manager", reason="Spam")
        assert result.failed == 0
        assert all(self.storage.get_by_id(rid).metadata.rejection_reason == "Spam" for rid in ("A", "C"))

    def test_bulk_approve_reason_becomes_notes(self):
        result = self.service.bulk_update(["A"], "approve", "manager", reason="looks good")
        assert result.succeeded == 1
        assert self.storage.get_by_id("A").metadata.approval_notes == "looks good"

    def test_summary_dict(self):
        payload = self.service.bulk_update(["A", "B"], "reject", "manager").to_dict()

        assert payload["action"] == "reject"
        assert payload["summary"] == {"total": 2, "successful": 1, "failed": 1}
        assert payload["results"][0]["review"]["status"] == "rejected"
        assert payload["results"][1]["errorCode"] == "not_found"

    def test_empty_ids(self):
        with pytest.raises(ReviewValidationError):
            self.service.bulk_update([], "approve", "manager")

    def test_invalid_action_changes_nothing(self):
        with pytest.raises(ReviewValidationError):
            self.service.bulk_update(["A"], "archive", "manager")
        assert self.storage.get_by_id("A").status == ReviewStatus.PENDING

    def test_missing_actor(self):
        with pytest.raises(ReviewValidationError):
            self.service.bulk_update(["A"], "approve", "")


class TestParseAction:
    """Tests for parse_action."""

    def test_valid(self):
        assert parse_action("Approve") == ModerationAction.APPROVE

    def test_invalid(self):
        with pytest.raises(ReviewValidationError) as exc:
            parse_action("delete")
        assert exc.value.details == ["action: must be one of approve, reject"]
