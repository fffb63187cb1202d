"""
Google Places Review Client
===========================

Fetches the public Google reviews of each managed property through the
Places "details" endpoint.

Properties are mapped to Google place ids (GOOGLE_PLACE_MAPPING). An
unmapped property, a missing API key, a transport error or a non-"OK"
status all serve the fixed Google fallback dataset for that property.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from ..cache import RedisCache
from ..reviews.errors import ProviderUnavailableError
from ..reviews.review_models import Review
from .config import GooglePlacesConfig
from .fallback_data import GOOGLE_FALLBACK_PROPERTY_NAMES, GOOGLE_FALLBACK_REVIEWS
from .normalizers import GoogleReviewNormalizer
from .provider import ReviewProvider

logger = logging.getLogger(__name__)


class GooglePlacesClient(ReviewProvider):
    """Google Places reviews, one property (place) per fetch."""

    name = "google"

    def __init__(
        self,
        config: Optional[GooglePlacesConfig] = None,
        cache: Optional[RedisCache] = None,
        cache_ttl_seconds: Optional[int] = None,
        session: Optional[requests.Session] = None,
        normalizer: Optional[GoogleReviewNormalizer] = None,
    ):
        if config is None:
            from .config import get_settings
            config = get_settings().google

        super().__init__(
            normalizer=normalizer or GoogleReviewNormalizer(),
            cache=cache,
            cache_ttl_seconds=cache_ttl_seconds,
            session=session,
        )
        self.config = config
        # Place names learned from successful fetches, by property id
        self._place_names: Dict[str, str] = {}

    @property
    def property_place_mapping(self) -> Dict[str, str]:
        return self.config.place_mapping

    def fetch(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Fetch raw Google reviews for filters["propertyId"].

        Raises:
            ProviderUnavailableError: missing key, unmapped property, HTTP or API error
        """
        property_id = (filters or {}).get("propertyId")
        if not property_id:
            raise ProviderUnavailableError(self.name, "propertyId filter is required")
        if not self.config.api_key:
            raise ProviderUnavailableError(self.name, "API key not configured")

        place_id = self.property_place_mapping.get(property_id)
        if not place_id:
            raise ProviderUnavailableError(self.name, f"no place id mapped for property {property_id}")

        payload = self._get_json(
            f"{self.config.base_url}/details/json",
            timeout=self.config.timeout_seconds,
            params={
                "place_id": place_id,
                "fields": "name,rating,reviews",
                "key": self.config.api_key,
                "language": self.config.language,
            },
        )

        if not isinstance(payload, dict) or payload.get("status") != "OK" or not payload.get("result"):
            status = payload.get("status") if isinstance(payload, dict) else None
            raise ProviderUnavailableError(self.name, f"Places API error: {status}")

        result = payload["result"]
        if result.get("name"):
            self._place_names[property_id] = result["name"]

        reviews = result.get("reviews") or []
        if not isinstance(reviews, list):
            raise ProviderUnavailableError(self.name, "'reviews' is not a list")
        return reviews

    def fallback_records(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return GOOGLE_FALLBACK_REVIEWS

    def normalize(self, raws: List[Dict[str, Any]], filters: Optional[Dict[str, Any]] = None) -> List[Review]:
        property_id = (filters or {}).get("propertyId")
        property_name = (
            self._place_names.get(property_id)
            or GOOGLE_FALLBACK_PROPERTY_NAMES.get(property_id)
            or "Property"
        )
        return self.normalizer.normalize_batch(
            raws,
            property_id=property_id,
            property_name=property_name,
            place_id=self.property_place_mapping.get(property_id),
        )

    def fetch_reviews(
        self,
        filters: Optional[Dict[str, Any]] = None,
        force_refresh: bool = False,
    ) -> List[Review]:
        """Reviews for filters["propertyId"], or for every mapped property when it is absent."""
        if not (filters or {}).get("propertyId"):
            return self.fetch_all_property_reviews(force_refresh=force_refresh)
        return super().fetch_reviews(filters, force_refresh=force_refresh)

    def fetch_property_reviews(self, property_id: str, force_refresh: bool = False) -> List[Review]:
        """Reviews for one property (fallback dataset on any provider failure)."""
        logger.info(f"Fetching Google reviews for property: {property_id}")
        return self.fetch_reviews({"propertyId": property_id}, force_refresh=force_refresh)

    def fetch_all_property_reviews(self, force_refresh: bool = False) -> List[Review]:
        """Reviews for every mapped property, concatenated."""
        all_reviews: List[Review] = []
        used_fallback = False
        for property_id in self.property_place_mapping:
            all_reviews.extend(self.fetch_property_reviews(property_id, force_refresh=force_refresh))
            used_fallback = used_fallback or self.last_fetch_used_fallback
        self.last_fetch_used_fallback = used_fallback
        return all_reviews
