"""
Tests for the review storage backends.

The contract tests run against every backend; file and SQL backends get a
few extra persistence checks.
"""

import json
import pytest
from datetime import datetime, timezone

from src.data.config import StorageConfig
from src.reviews.errors import ReviewNotFoundError
from src.reviews.review_models import Review, ReviewMetadata, ReviewRating, ReviewStatus
from src.storage import (
    JsonFileReviewStorage,
    MemoryReviewStorage,
    SqlReviewStorage,
    create_storage,
)


NOW = datetime(2024, 8, 21, 12, 30, 15, 123456, tzinfo=timezone.utc)


def make_review(review_id="r1", **overrides):
    fields = dict(
        id=review_id,
        source="hostaway",
        source_id=f"src-{review_id}",
        property_name="2B N1 A - 29 Shoreditch Heights",
        guest_name="Shane",
        review_text="Wonderful",
        rating=ReviewRating(overall=4.5, categories={"cleanliness": 5.0, "value": 4.0}),
        submitted_at=NOW,
        metadata=ReviewMetadata(tags=("family",), source_data='{"id": 1}'),
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Review(**fields)


@pytest.fixture(params=["memory", "file", "sql"])
def storage(request, tmp_path):
    if request.param == "memory":
        backend = MemoryReviewStorage()
    elif request.param == "file":
        backend = JsonFileReviewStorage(str(tmp_path / "data"))
    else:
        backend = SqlReviewStorage(f"sqlite:///{tmp_path / 'db' / 'reviews.db'}")
    yield backend
    backend.close()


class TestStorageContract:
    """Behaviour shared by every backend."""

    def test_save_and_get(self, storage):
        assert storage.save([make_review("r1"), make_review("r2")]) == 2
        assert storage.count() == 2
        assert storage.get_by_id("r1").guest_name == "Shane"

    def test_round_trip_preserves_review(self, storage):
        review = make_review().approve("manager", notes="Great", at=NOW)
        storage.save([review])
        assert storage.get_by_id(review.id) == review

    def test_missing_id_raises(self, storage):
        with pytest.raises(ReviewNotFoundError) as exc:
            storage.get_by_id("missing")
        assert exc.value.message == "Review with ID missing not found"

    def test_exists(self, storage):
        storage.save([make_review("r1")])
        assert storage.exists("r1") is True
        assert storage.exists("r2") is False

    def test_upsert_replaces(self, storage):
        storage.save([make_review("r1")])
        storage.save([make_review("r1", status=ReviewStatus.REJECTED)])

        assert storage.count() == 1
        assert storage.get_by_id("r1").status == ReviewStatus.REJECTED

    def test_get_all_is_snapshot(self, storage):
        storage.save([make_review("r1")])
        snapshot = storage.get_all()

        storage.save([make_review("r2")])
        snapshot.clear()

        assert storage.count() == 2

    def test_clear(self, storage):
        storage.save([make_review("r1"), make_review("r2")])
        storage.clear()
        assert storage.count() == 0
        assert storage.get_all() == []

    def test_info(self, storage):
        storage.save([make_review("r1")])
        info = storage.get_info()
        assert info["count"] == 1
        assert info["backend"] in ("memory", "file", "sql")


class TestJsonFileStorage:
    """File backend specifics."""

    def test_persists_across_instances(self, tmp_path):
        JsonFileReviewStorage(str(tmp_path)).save([make_review("r1")])

        reopened = JsonFileReviewStorage(str(tmp_path))
        assert reopened.get_by_id("r1") == make_review("r1")

    def test_meta_file(self, tmp_path):
        storage = JsonFileReviewStorage(str(tmp_path))
        assert storage.get_meta() is None

        storage.save([make_review("r1"), make_review("r2")])

        meta = json.loads((tmp_path / "meta.json").read_text())
        assert meta["count"] == 2
        assert meta["version"] == "1.0"
        assert "lastUpdated" in meta

    def test_file_holds_manager_views(self, tmp_path):
        JsonFileReviewStorage(str(tmp_path)).save([make_review("r1")])
        views = json.loads((tmp_path / "reviews.json").read_text())
        assert views[0]["propertyId"] == "2b-n1-a-29-shoreditch-heights"
        assert views[0]["status"] == "pending"

    def test_clear_removes_files(self, tmp_path):
        storage = JsonFileReviewStorage(str(tmp_path))
        storage.save([make_review("r1")])
        storage.clear()
        assert not (tmp_path / "reviews.json").exists()
        assert not (tmp_path / "meta.json").exists()


class TestSqlStorage:
    """SQL backend specifics."""

    def test_persists_across_engines(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'reviews.db'}"
        first = SqlReviewStorage(url)
        first.save([make_review("r1")])
        first.close()

        second = SqlReviewStorage(url)
        assert second.get_by_id("r1") == make_review("r1")
        second.close()

    def test_datetimes_are_aware(self, tmp_path):
        storage = SqlReviewStorage(f"sqlite:///{tmp_path / 'reviews.db'}")
        storage.save([make_review("r1")])
        review = storage.get_by_id("r1")
        assert review.submitted_at.tzinfo is not None
        storage.close()


class TestCreateStorage:
    """Tests for backend selection."""

    def test_memory_default(self):
        storage = create_storage(StorageConfig(backend="memory"))
        assert isinstance(storage, MemoryReviewStorage)

    def test_file_backend(self, tmp_path):
        storage = create_storage(StorageConfig(backend="FILE", data_dir=str(tmp_path)))
        assert isinstance(storage, JsonFileReviewStorage)

    def test_sql_backend(self, tmp_path):
        storage = create_storage(StorageConfig(
            backend="sql", database_url=f"sqlite:///{tmp_path / 'reviews.db'}",
        ))
        assert isinstance(storage, SqlReviewStorage)
        storage.close()

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            StorageConfig(backend="mongo")
