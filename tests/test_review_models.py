"""
Tests for the canonical review entity.
"""

import json
import pytest
from datetime import datetime, timezone

from src.reviews.review_models import (
    Review,
    ReviewMetadata,
    ReviewRating,
    ReviewStatus,
    Priority,
    derive_channel,
    derive_property_id,
    parse_datetime,
    review_id_for,
)
from src.reviews.rounding import round_half_up, round_to_int


NOW = datetime(2024, 8, 21, 12, 0, tzinfo=timezone.utc)


class TestPropertySlug:
    """Tests for property id derivation."""

    def test_listing_name_slug(self):
        assert derive_property_id("2B N1 A - 29 Shoreditch Heights") == "2b-n1-a-29-shoreditch-heights"

    def test_collision_consistent(self):
        """Case and punctuation variants map to the same property."""
        assert derive_property_id("2b n1 a - 29 shoreditch heights!!") == \
            derive_property_id("2B N1 A - 29 Shoreditch Heights")

    def test_idempotent(self):
        slug = derive_property_id("Studio E1 B - 42 Canary Wharf Tower")
        assert derive_property_id(slug) == slug

    def test_trims_dashes(self):
        assert derive_property_id("  --Loft--  ") == "loft"

    @pytest.mark.parametrize("name", [None, "", "!!!"])
    def test_empty_names(self, name):
        assert derive_property_id(name) is None


class TestChannel:
    """Tests for source -> channel mapping."""

    @pytest.mark.parametrize("source,channel", [
        ("hostaway", "multiple"),
        ("Airbnb", "airbnb"),
        ("BOOKING", "booking.com"),
        ("vrbo", "vrbo"),
        ("google", "google"),
        ("expedia", "unknown"),
        (None, "unknown"),
    ])
    def test_mapping(self, source, channel):
        assert derive_channel(source) == channel

    def test_entity_derives_channel(self):
        review = Review(source="booking")
        assert review.channel == "booking.com"


class TestRating:
    """Tests for ReviewRating construction."""

    def test_mean_of_categories_when_overall_missing(self):
        rating = ReviewRating.from_raw(None, {"cleanliness": 5, "communication": 3})
        assert rating.overall == 4.0
        assert rating.categories == {"cleanliness": 5.0, "communication": 3.0}

    def test_explicit_overall_wins(self):
        rating = ReviewRating.from_raw(5, {"cleanliness": 3})
        assert rating.overall == 5.0

    def test_no_rating_at_all(self):
        assert ReviewRating.from_raw(None, {}).overall is None

    def test_mean_is_not_rounded(self):
        rating = ReviewRating.from_raw(None, {"a": 4, "b": 4, "c": 5})
        assert rating.overall == pytest.approx(13 / 3)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "abc", True])
    def test_non_finite_overall_is_absent(self, value):
        assert ReviewRating.from_raw(value).overall is None

    def test_unparseable_category_skipped(self):
        rating = ReviewRating.from_raw(None, {"cleanliness": "n/a", "value": "4"})
        assert rating.categories == {"value": 4.0}
        assert rating.overall == 4.0


class TestTransitions:
    """Tests for approve / reject."""

    def test_new_review_is_pending_and_private(self):
        review = Review()
        assert review.status == ReviewStatus.PENDING
        assert review.is_public is False

    def test_approve(self):
        review = Review(id="r1")
        approved = review.approve("manager", notes="Lovely", at=NOW)

        assert approved.status == ReviewStatus.APPROVED
        assert approved.is_public is True
        assert approved.approved_by == "manager"
        assert approved.approved_at == NOW
        assert approved.updated_at == NOW
        assert approved.metadata.approval_notes == "Lovely"
        # Original value untouched
        assert review.status == ReviewStatus.PENDING

    def test_reject_after_approve_clears_approval(self):
        approved = Review(id="r1").approve("manager", notes="ok", at=NOW)
        rejected = approved.reject("moderator", reason="Spam", at=NOW)

        assert rejected.is_public is False
        assert rejected.rejected_by == "moderator"
        assert rejected.approved_by is None
        assert rejected.approved_at is None
        assert rejected.metadata.rejection_reason == "Spam"
        assert rejected.metadata.approval_notes is None

    def test_approve_after_reject_clears_rejection(self):
        rejected = Review(id="r1").reject("moderator", reason="Spam", at=NOW)
        approved = rejected.approve("manager", at=NOW)

        assert approved.rejected_by is None
        assert approved.rejected_at is None
        assert approved.metadata.rejection_reason is None

    @pytest.mark.parametrize("status", list(ReviewStatus))
    def test_is_public_iff_approved(self, status):
        assert Review(status=status).is_public == (status == ReviewStatus.APPROVED)

    def test_string_status_coerced(self):
        assert Review(status="rejected").status == ReviewStatus.REJECTED


class TestProjections:
    """Tests for manager / public views."""

    def make_review(self):
        return Review(
            id="r1",
            source="hostaway",
            source_id="7453",
            property_name="2B N1 A - 29 Shoreditch Heights",
            guest_name="Shane",
            review_text="Great",
            rating=ReviewRating(overall=4.5, categories={"cleanliness": 5.0}),
            submitted_at=NOW,
            metadata=ReviewMetadata(tags=("family",), source_data=json.dumps({"id": 7453})),
            created_at=NOW,
            updated_at=NOW,
        )

    def test_public_view_fields(self):
        view = self.make_review().to_public_view()
        assert set(view) == {
            "id", "propertyName", "guestName", "reviewText", "rating", "submittedAt", "channel",
        }
        assert view["submittedAt"] == "2024-08-21T12:00:00+00:00"

    def test_manager_view_camel_case(self):
        view = self.make_review().to_manager_view()
        assert view["propertyId"] == "2b-n1-a-29-shoreditch-heights"
        assert view["isPublic"] is False
        assert view["metadata"]["sourceData"] == '{"id": 7453}'
        assert view["metadata"]["priority"] == Priority.LOW.value

    def test_manager_view_round_trip(self):
        review = self.make_review().approve("manager", notes="nice", at=NOW)
        rebuilt = Review.from_manager_view(review.to_manager_view())
        assert rebuilt == review

    def test_round_trip_filterable_fields(self):
        review = self.make_review()
        view = review.to_manager_view()
        assert view["status"] == review.status.value
        assert view["rating"]["overall"] == review.rating.overall
        assert view["propertyId"] == review.property_id


class TestHelpers:
    """Tests for id, datetime and rounding helpers."""

    def test_review_id_deterministic(self):
        assert review_id_for("hostaway", "7453") == review_id_for("hostaway", "7453")
        assert review_id_for("hostaway", "7453") != review_id_for("google", "7453")

    def test_parse_hostaway_format(self):
        parsed = parse_datetime("2020-08-21 22:45:14")
        assert parsed == datetime(2020, 8, 21, 22, 45, 14, tzinfo=timezone.utc)

    def test_parse_iso_z(self):
        assert parse_datetime("2024-08-15T14:30:22Z") == datetime(2024, 8, 15, 14, 30, 22, tzinfo=timezone.utc)

    def test_parse_epoch(self):
        assert parse_datetime(1723939200) == datetime(2024, 8, 18, tzinfo=timezone.utc)

    def test_parse_garbage(self):
        assert parse_datetime("not a date") is None
        assert parse_datetime(None) is None

    @pytest.mark.parametrize("value,digits,expected", [
        (2.5, 0, 3.0),
        (3.5, 0, 4.0),
        (4.45, 1, 4.5),
        (4.44, 1, 4.4),
        (None, 1, None),
    ])
    def test_round_half_up(self, value, digits, expected):
        assert round_half_up(value, digits) == expected

    def test_round_to_int(self):
        assert round_to_int(99.5) == 100
        assert isinstance(round_to_int(1.2), int)
