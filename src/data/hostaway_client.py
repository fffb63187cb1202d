"""
Hostaway Review Client
======================

Fetches guest reviews from the Hostaway property-management API.

Configuration:
    HOSTAWAY_ACCOUNT_ID / HOSTAWAY_API_KEY: credentials (from .env)
    HOSTAWAY_TIMEOUT_SECONDS: bounded wait before falling back

Envelope:
    {"status": "success", "result": [{review}, ...]}

Anything else (missing credentials, timeout, non-200, "status": "fail")
makes fetch_reviews() serve HOSTAWAY_FALLBACK_REVIEWS instead.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from ..cache import RedisCache
from ..reviews.errors import ProviderUnavailableError, ReviewNotFoundError
from ..reviews.review_models import Review
from .config import HostawayConfig
from .fallback_data import HOSTAWAY_FALLBACK_REVIEWS
from .normalizers import HostawayNormalizer
from .provider import ReviewProvider

logger = logging.getLogger(__name__)


class HostawayClient(ReviewProvider):
    """Hostaway /reviews client with TTL cache and fixed fallback dataset."""

    name = "hostaway"

    def __init__(
        self,
        config: Optional[HostawayConfig] = None,
        cache: Optional[RedisCache] = None,
        cache_ttl_seconds: Optional[int] = None,
        session: Optional[requests.Session] = None,
        normalizer: Optional[HostawayNormalizer] = None,
    ):
        """
        Initialize client.

        Args:
            config: Hostaway settings (if None, loaded from config)
            cache: Cache for raw payloads (default: shared cache)
            cache_ttl_seconds: Cache lifetime (default: CACHE_TTL_SECONDS)
            session: requests session (injectable for tests)
            normalizer: Normalizer with a custom status policy
        """
        if config is None:
            from .config import get_settings
            config = get_settings().hostaway

        super().__init__(
            normalizer=normalizer or HostawayNormalizer(),
            cache=cache,
            cache_ttl_seconds=cache_ttl_seconds,
            session=session,
        )
        self.config = config

        logger.info(
            f"HostawayClient initialized: base_url={config.base_url}, "
            f"configured={config.is_configured}, timeout={config.timeout_seconds}s"
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def fetch(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Fetch raw review records.

        Args:
            filters: Extra query parameters (limit, offset, listingId, ...)

        Returns:
            Raw Hostaway review dicts

        Raises:
            ProviderUnavailableError: on any failure
        """
        if not self.config.is_configured:
            raise ProviderUnavailableError(self.name, "credentials not configured")

        params: Dict[str, Any] = {
            "accountId": self.config.account_id,
            "limit": self.config.page_limit,
            "offset": 0,
        }
        params.update(filters or {})

        payload = self._get_json(
            f"{self.config.base_url}/reviews",
            timeout=self.config.timeout_seconds,
            headers=self._headers(),
            params=params,
        )

        if not isinstance(payload, dict) or payload.get("status") != "success":
            raise ProviderUnavailableError(self.name, "invalid response envelope")

        result = payload.get("result") or []
        if not isinstance(result, list):
            raise ProviderUnavailableError(self.name, "'result' is not a list")
        return result

    def fallback_records(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return HOSTAWAY_FALLBACK_REVIEWS

    def get_review_by_id(self, source_id: str) -> Review:
        """
        Fetch a single review straight from Hostaway (no cache, no fallback).

        Raises:
            ProviderUnavailableError: provider failure
            ReviewNotFoundError: Hostaway answered without that review
        """
        if not self.config.is_configured:
            raise ProviderUnavailableError(self.name, "credentials not configured")

        payload = self._get_json(
            f"{self.config.base_url}/reviews/{source_id}",
            timeout=self.config.timeout_seconds,
            headers=self._headers(),
            params={"accountId": self.config.account_id},
        )

        if not isinstance(payload, dict) or payload.get("status") != "success":
            raise ReviewNotFoundError(str(source_id))

        review = self.normalizer.normalize(payload.get("result"))
        if review is None:
            raise ReviewNotFoundError(str(source_id))
        return review
