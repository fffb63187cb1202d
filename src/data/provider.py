"""
Review Provider Base
====================

Shared plumbing for external review sources:
    - raw fetch contract: fetch(filters) -> raw records | ProviderUnavailableError
    - TTL cache of raw records (bypassable with force_refresh)
    - fallback to the provider's fixed dataset when the fetch fails

Subclasses implement fetch() and name their fallback dataset; callers of
fetch_reviews() never see a provider error.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from ..cache import RedisCache, get_cache
from ..reviews.errors import ProviderUnavailableError
from ..reviews.review_models import Review
from .normalizers import SourceNormalizer

logger = logging.getLogger(__name__)


class ReviewProvider(ABC):
    """Cached, fallback-protected access to one external review source."""

    name: str = "provider"

    def __init__(
        self,
        normalizer: SourceNormalizer,
        cache: Optional[RedisCache] = None,
        cache_ttl_seconds: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        if cache_ttl_seconds is None:
            from .config import get_settings
            cache_ttl_seconds = get_settings().cache.ttl_seconds

        self.normalizer = normalizer
        self.cache = cache if cache is not None else get_cache()
        self.cache_ttl_seconds = cache_ttl_seconds
        self.session = session or requests.Session()

        self.last_fetch_used_fallback = False
        self._stats = {
            "requests_made": 0,
            "cache_hits": 0,
            "fallbacks_served": 0,
            "last_error": None,
        }

    # =========================================================================
    # SUBCLASS CONTRACT
    # =========================================================================

    @abstractmethod
    def fetch(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Fetch raw records from the provider.

        Raises:
            ProviderUnavailableError: transport failure, bad status, malformed envelope
        """

    @abstractmethod
    def fallback_records(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Fixed dataset served when fetch() fails."""

    def normalize(self, raws: List[Dict[str, Any]], filters: Optional[Dict[str, Any]] = None) -> List[Review]:
        return self.normalizer.normalize_batch(raws)

    # =========================================================================
    # CACHED + FALLBACK PATH
    # =========================================================================

    def cache_key(self, filters: Optional[Dict[str, Any]] = None) -> str:
        key = f"provider:{self.name}:reviews"
        if filters:
            key += ":" + "&".join(f"{k}={filters[k]}" for k in sorted(filters))
        return key

    def fetch_reviews(
        self,
        filters: Optional[Dict[str, Any]] = None,
        force_refresh: bool = False,
    ) -> List[Review]:
        """
        Fetch and normalize reviews, serving from cache when fresh.

        Args:
            filters: Provider-specific query filters
            force_refresh: Skip the cache and hit the provider

        Returns:
            Normalized reviews (the fallback dataset if the provider failed)
        """
        key = self.cache_key(filters)

        if not force_refresh and self.cache_ttl_seconds > 0:
            cached = self.cache.get(key)
            if cached is not None:
                self._stats["cache_hits"] += 1
                self.last_fetch_used_fallback = False
                logger.info(f"{self.name}: returning {len(cached)} cached record(s)")
                return self.normalize(cached, filters)

        try:
            self._stats["requests_made"] += 1
            raws = self.fetch(filters)
        except ProviderUnavailableError as e:
            self._stats["fallbacks_served"] += 1
            self._stats["last_error"] = e.message
            self.last_fetch_used_fallback = True
            logger.warning(f"{self.name} unavailable ({e.message}), serving fallback dataset")
            return self.normalize(self.fallback_records(filters), filters)

        self.last_fetch_used_fallback = False
        # TTL 0 disables caching
        if self.cache_ttl_seconds > 0:
            self.cache.set(key, raws, ttl_seconds=self.cache_ttl_seconds)
        logger.info(f"{self.name}: fetched {len(raws)} record(s)")
        return self.normalize(raws, filters)

    def clear_cache(self) -> int:
        """Drop every cached payload of this provider."""
        removed = self.cache.clear_prefix(f"provider:{self.name}:")
        logger.info(f"{self.name}: cache cleared ({removed} key(s))")
        return removed

    def get_cache_info(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Cached flag, timestamp and age (seconds) of the cached payload."""
        entry = self.cache.get_entry(self.cache_key(filters))
        if entry is None:
            return {"cached": False, "timestamp": None, "age": None, "ttl": self.cache_ttl_seconds}
        stored_at, _ = entry
        return {
            "cached": True,
            "timestamp": stored_at,
            "age": max(0.0, time.time() - stored_at),
            "ttl": self.cache_ttl_seconds,
        }

    def get_stats(self) -> Dict[str, Any]:
        """Get client statistics."""
        return dict(self._stats)

    # =========================================================================
    # HTTP HELPERS
    # =========================================================================

    def _get_json(self, url: str, timeout: float, **kwargs: Any) -> Any:
        """GET a JSON document, translating every failure into ProviderUnavailableError."""
        try:
            response = self.session.get(url, timeout=timeout, **kwargs)
        except requests.Timeout:
            raise ProviderUnavailableError(self.name, f"timed out after {timeout}s")
        except requests.RequestException as e:
            raise ProviderUnavailableError(self.name, f"request failed: {e}")

        if response.status_code != 200:
            raise ProviderUnavailableError(
                self.name,
                f"HTTP {response.status_code} - {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            raise ProviderUnavailableError(self.name, "response is not valid JSON")
