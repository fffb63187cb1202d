"""
Performance Score Configuration
===============================

Weights and saturation points for the per-property performance score.

Every threshold lives here so the scorer has no magic numbers:

    rating    (avg / 5) * 40
    volume    min(total / 20, 1) * 30        saturates at 20 reviews
    approval  (approved / total) * 20
    recency   max(0, 1 - days / 30) * 10     linear decay over 30 days

The four weights must add up to 100.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PerformanceConfig:
    """Weights (points) and saturation parameters of the performance score."""

    rating_weight: float = 40.0
    volume_weight: float = 30.0
    approval_weight: float = 20.0
    recency_weight: float = 10.0

    max_rating: float = 5.0
    volume_saturation: int = 20         # reviews needed for the full volume points
    recency_window_days: float = 30.0   # days until the recency points reach 0

    @property
    def max_score(self) -> float:
        return self.rating_weight + self.volume_weight + self.approval_weight + self.recency_weight

    def validate(self) -> None:
        """
        Check configuration coherence.

        Raises:
            ValueError: weights don't sum to 100 or a parameter is not positive
        """
        if abs(self.max_score - 100.0) > 1e-9:
            raise ValueError(f"Performance weights must sum to 100, got {self.max_score}")
        for name in ("max_rating", "volume_saturation", "recency_window_days"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")


DEFAULT_PERFORMANCE_CONFIG = PerformanceConfig()
