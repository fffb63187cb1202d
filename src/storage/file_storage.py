"""
JSON File Review Storage
========================

Persists reviews as their manager views in `<data_dir>/reviews.json`, with a
small `<data_dir>/meta.json` alongside:

    {"lastUpdated": "2024-08-21T10:00:00+00:00", "count": 12, "version": "1.0"}

The file is loaded once on first access and rewritten in full on every
save (write to a temp file, then os.replace) so readers never see a
half-written document.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..reviews.errors import ReviewNotFoundError
from ..reviews.review_models import Review, to_iso, utcnow
from .base import ReviewStorage

logger = logging.getLogger(__name__)

STORAGE_FORMAT_VERSION = "1.0"


class JsonFileReviewStorage(ReviewStorage):
    """Single-writer JSON file backend."""

    backend = "file"

    def __init__(self, data_dir: str = "data"):
        self.data_dir = Path(data_dir)
        self.reviews_file = self.data_dir / "reviews.json"
        self.meta_file = self.data_dir / "meta.json"
        self._lock = threading.RLock()
        self._reviews: Optional[Dict[str, Review]] = None

    # =========================================================================
    # FILE I/O
    # =========================================================================

    def _load(self) -> Dict[str, Review]:
        if self._reviews is not None:
            return self._reviews

        reviews: Dict[str, Review] = {}
        if self.reviews_file.exists():
            with open(self.reviews_file, "r", encoding="utf-8") as f:
                views = json.load(f)
            for view in views:
                review = Review.from_manager_view(view)
                reviews[review.id] = review
            logger.info(f"Loaded {len(reviews)} review(s) from {self.reviews_file}")
        else:
            logger.info(f"No reviews file at {self.reviews_file}, starting empty")

        self._reviews = reviews
        return reviews

    def _write_json(self, path: Path, payload: Any) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _flush(self) -> None:
        reviews = self._load()
        self._write_json(self.reviews_file, [r.to_manager_view() for r in reviews.values()])
        self._write_json(self.meta_file, {
            "lastUpdated": to_iso(utcnow()),
            "count": len(reviews),
            "version": STORAGE_FORMAT_VERSION,
        })

    # =========================================================================
    # CONTRACT
    # =========================================================================

    def save(self, reviews: Iterable[Review]) -> int:
        with self._lock:
            stored = self._load()
            written = 0
            for review in reviews:
                stored[review.id] = review
                written += 1
            if written:
                self._flush()
        logger.info(f"Saved {written} review(s) to {self.reviews_file}")
        return written

    def get_all(self) -> List[Review]:
        with self._lock:
            return list(self._load().values())

    def get_by_id(self, review_id: str) -> Review:
        with self._lock:
            review = self._load().get(review_id)
        if review is None:
            raise ReviewNotFoundError(review_id)
        return review

    def count(self) -> int:
        with self._lock:
            return len(self._load())

    def clear(self) -> None:
        with self._lock:
            for path in (self.reviews_file, self.meta_file):
                if path.exists():
                    path.unlink()
            self._reviews = {}
        logger.info(f"Cleared review files in {self.data_dir}")

    def get_meta(self) -> Optional[Dict[str, Any]]:
        """Contents of meta.json, or None before the first save."""
        if not self.meta_file.exists():
            return None
        with open(self.meta_file, "r", encoding="utf-8") as f:
            return json.load(f)

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info["path"] = str(self.reviews_file)
        info["meta"] = self.get_meta()
        return info
