"""In-process review storage (default backend, also used by tests)."""

import logging
import threading
from typing import Dict, Iterable, List

from ..reviews.errors import ReviewNotFoundError
from ..reviews.review_models import Review
from .base import ReviewStorage

logger = logging.getLogger(__name__)


class MemoryReviewStorage(ReviewStorage):
    """Dict of reviews keyed by id, guarded by a re-entrant lock."""

    backend = "memory"

    def __init__(self, reviews: Iterable[Review] = ()):
        self._lock = threading.RLock()
        self._reviews: Dict[str, Review] = {}
        if reviews:
            self.save(reviews)

    def save(self, reviews: Iterable[Review]) -> int:
        written = 0
        with self._lock:
            for review in reviews:
                self._reviews[review.id] = review
                written += 1
        logger.debug(f"Saved {written} review(s) to memory")
        return written

    def get_all(self) -> List[Review]:
        with self._lock:
            return list(self._reviews.values())

    def get_by_id(self, review_id: str) -> Review:
        with self._lock:
            review = self._reviews.get(review_id)
        if review is None:
            raise ReviewNotFoundError(review_id)
        return review

    def exists(self, review_id: str) -> bool:
        with self._lock:
            return review_id in self._reviews

    def count(self) -> int:
        with self._lock:
            return len(self._reviews)

    def clear(self) -> None:
        with self._lock:
            self._reviews.clear()
        logger.info("Memory review storage cleared")
