"""
Review Storage Contract
=======================

Every persistence backend implements ReviewStorage. The rest of the system
(ingestion, query, moderation, analytics) only talks to this interface.

Contract:
    - save(reviews): upsert by id
    - get_all(): snapshot list; later writes never mutate a returned list
    - get_by_id(id): raises ReviewNotFoundError when absent
    - clear(): administrative wipe

Writers are serialized by the adapter; there is no conflict resolution
between concurrent writers.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List

from ..reviews.review_models import Review


class ReviewStorage(ABC):
    """Abstract review persistence adapter."""

    backend: str = "abstract"

    @abstractmethod
    def save(self, reviews: Iterable[Review]) -> int:
        """
        Insert or replace reviews by id.

        Returns:
            Number of reviews written
        """

    @abstractmethod
    def get_all(self) -> List[Review]:
        """Snapshot of every stored review."""

    @abstractmethod
    def get_by_id(self, review_id: str) -> Review:
        """
        Fetch one review.

        Raises:
            ReviewNotFoundError: unknown id
        """

    @abstractmethod
    def clear(self) -> None:
        """Delete every stored review."""

    def count(self) -> int:
        return len(self.get_all())

    def exists(self, review_id: str) -> bool:
        from ..reviews.errors import ReviewNotFoundError
        try:
            self.get_by_id(review_id)
        except ReviewNotFoundError:
            return False
        return True

    def get_info(self) -> Dict[str, Any]:
        """Backend name and review count."""
        return {"backend": self.backend, "count": self.count()}

    def close(self) -> None:
        """Release backend resources (no-op by default)."""
