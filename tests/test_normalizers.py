"""
Tests for the provider -> canonical review normalizers.
"""

import json
import pytest
from datetime import datetime, timezone

from src.data.fallback_data import GOOGLE_FALLBACK_REVIEWS, HOSTAWAY_FALLBACK_REVIEWS
from src.data.normalizers import (
    GoogleReviewNormalizer,
    HostawayNormalizer,
    StatusSeedingPolicy,
    get_normalizer,
)
from src.query import ReviewQueryEngine
from src.reviews.review_models import ReviewStatus, review_id_for


def hostaway_record(**overrides):
    record = {
        "id": 9001,
        "type": "guest-to-host",
        "status": "published",
        "rating": None,
        "publicReview": "Lovely flat",
        "reviewCategory": [
            {"category": "cleanliness", "rating": 5},
            {"category": "communication", "rating": 3},
        ],
        "submittedAt": "2024-08-15 14:30:22",
        "guestName": "Emily Rodriguez",
        "listingName": "1B S2 C - 15 Camden Lock Apartments",
    }
    record.update(overrides)
    return record


class TestHostawayNormalizer:
    """Tests for HostawayNormalizer."""

    def setup_method(self):
        self.normalizer = HostawayNormalizer()

    def test_maps_fields(self):
        review = self.normalizer.normalize(hostaway_record())

        assert review.source == "hostaway"
        assert review.source_id == "9001"
        assert review.id == review_id_for("hostaway", "9001")
        assert review.property_id == "1b-s2-c-15-camden-lock-apartments"
        assert review.property_name == "1B S2 C - 15 Camden Lock Apartments"
        assert review.guest_name == "Emily Rodriguez"
        assert review.review_text == "Lovely flat"
        assert review.channel == "multiple"
        assert review.type == "guest-to-host"
        assert review.submitted_at == datetime(2024, 8, 15, 14, 30, 22, tzinfo=timezone.utc)

    def test_overall_is_category_mean_when_missing(self):
        review = self.normalizer.normalize(hostaway_record())
        assert review.rating.overall == 4.0
        assert review.rating.categories == {"cleanliness": 5.0, "communication": 3.0}

    def test_explicit_rating_used(self):
        review = self.normalizer.normalize(hostaway_record(rating=2))
        assert review.rating.overall == 2.0

    def test_published_seeds_pending(self):
        assert self.normalizer.normalize(hostaway_record()).status == ReviewStatus.PENDING

    @pytest.mark.parametrize("origin", ["unpublished", "awaiting", "expired"])
    def test_other_statuses_seed_rejected(self, origin):
        review = self.normalizer.normalize(hostaway_record(status=origin))
        assert review.status == ReviewStatus.REJECTED

    def test_source_data_is_raw_json(self):
        raw = hostaway_record()
        review = self.normalizer.normalize(raw)
        assert json.loads(review.metadata.source_data)["id"] == 9001

    def test_deterministic_id(self):
        first = self.normalizer.normalize(hostaway_record())
        second = self.normalizer.normalize(hostaway_record())
        assert first.id == second.id

    def test_missing_id_dropped(self):
        assert self.normalizer.normalize(hostaway_record(id=None)) is None

    def test_non_mapping_dropped(self):
        assert self.normalizer.normalize("not a record") is None

    def test_bad_categories_ignored(self):
        review = self.normalizer.normalize(hostaway_record(reviewCategory="oops", rating=4))
        assert review.rating.categories == {}
        assert review.rating.overall == 4.0

    def test_batch_drops_bad_records(self):
        reviews = self.normalizer.normalize_batch([hostaway_record(), {"guestName": "x"}, 42])
        assert len(reviews) == 1

    def test_fallback_dataset_normalizes_fully(self):
        reviews = self.normalizer.normalize_batch(HOSTAWAY_FALLBACK_REVIEWS)
        assert len(reviews) == len(HOSTAWAY_FALLBACK_REVIEWS)
        assert len({r.id for r in reviews}) == len(reviews)
        # 7453 only has 10-scale categories
        first = reviews[0]
        assert first.source_id == "7453"
        assert first.rating.overall == 10.0

    def test_custom_status_policy(self):
        normalizer = HostawayNormalizer(StatusSeedingPolicy(
            status_field="status",
            mapping={"published": ReviewStatus.APPROVED},
        ))
        review = normalizer.normalize(hostaway_record())
        assert review.status == ReviewStatus.APPROVED

    @pytest.mark.parametrize("field_name", ["listingName", "publicReview", "guestName", "type"])
    def test_mistyped_text_field_dropped(self, field_name):
        assert self.normalizer.normalize(hostaway_record(**{field_name: 12345})) is None

    def test_batch_keeps_well_typed_records(self):
        reviews = self.normalizer.normalize_batch([
            hostaway_record(id=1, listingName=42),
            hostaway_record(id=2, listingName="Ok Flat"),
        ])
        assert [r.property_id for r in reviews] == ["ok-flat"]

    def test_mistyped_text_never_reaches_search(self):
        reviews = self.normalizer.normalize_batch([
            hostaway_record(id=1, publicReview=12345),
            hostaway_record(id=2, publicReview="Lovely flat"),
        ])
        result = ReviewQueryEngine().execute(reviews, {"search": "flat"})
        assert [r.source_id for r in result.items] == ["2"]


class TestGoogleNormalizer:
    """Tests for GoogleReviewNormalizer."""

    def setup_method(self):
        self.normalizer = GoogleReviewNormalizer()
        self.raw = dict(GOOGLE_FALLBACK_REVIEWS[0])

    def test_maps_fields_with_context(self):
        review = self.normalizer.normalize(
            self.raw, property_id="prop-a", property_name="Prop A", place_id="PLACE_A",
        )

        assert review.source == "google"
        assert review.channel == "google"
        assert review.property_id == "prop-a"
        assert review.property_name == "Prop A"
        assert review.guest_name == "Sarah Wilson"
        assert review.rating.overall == 5.0
        assert review.source_id == "PLACE_A:Sarah Wilson:1723939200"
        assert review.submitted_at == datetime(2024, 8, 18, tzinfo=timezone.utc)
        assert review.status == ReviewStatus.PENDING

    def test_source_id_falls_back_to_property(self):
        review = self.normalizer.normalize(self.raw, property_id="prop-a")
        assert review.source_id == "prop-a:Sarah Wilson:1723939200"
        assert review.property_name == "prop-a"

    def test_property_from_name(self):
        review = self.normalizer.normalize(self.raw, property_name="29 Shoreditch Heights")
        assert review.property_id == "29-shoreditch-heights"

    def test_no_property_dropped(self):
        assert self.normalizer.normalize(self.raw) is None

    def test_missing_text_dropped(self):
        raw = dict(self.raw, text="")
        assert self.normalizer.normalize(raw, property_id="prop-a") is None

    def test_non_string_author_dropped(self):
        raw = dict(self.raw, author_name={"name": "Sarah"})
        assert self.normalizer.normalize(raw, property_id="prop-a") is None


class TestRegistry:
    """Tests for get_normalizer."""

    def test_lookup_case_insensitive(self):
        assert isinstance(get_normalizer("HOSTAWAY"), HostawayNormalizer)
        assert isinstance(get_normalizer("google"), GoogleReviewNormalizer)

    def test_unknown_source(self):
        with pytest.raises(ValueError):
            get_normalizer("tripadvisor")
