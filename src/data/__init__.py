"""
Guest Reviews Data Module
=========================

Provider integrations and ingestion for guest reviews.

This module provides:
    - HostawayClient / GooglePlacesClient: cached clients with fixed fallback datasets
    - Source normalizers: raw provider payload -> canonical Review
    - ReviewIngestionService: merges provider reviews into storage

Quick Start:
    from src.data import ReviewIngestionService
    from src.storage import create_storage

    service = ReviewIngestionService(create_storage())
    result = service.sync(sources=("hostaway", "google"))
    print(f"Inserted {result.inserted} reviews")

Configuration:
    Set environment variables or create a .env file.
    Missing provider credentials are not fatal: the fallback datasets are served.
"""

from .config import get_settings, Settings
from .normalizers import (
    StatusSeedingPolicy,
    SourceNormalizer,
    HostawayNormalizer,
    GoogleReviewNormalizer,
    HOSTAWAY_STATUS_POLICY,
    GOOGLE_STATUS_POLICY,
    get_normalizer,
)
from .provider import ReviewProvider
from .hostaway_client import HostawayClient
from .google_places_client import GooglePlacesClient
from .ingestion_pipeline import ReviewIngestionService, IngestionResult

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "get_settings",
    "Settings",
    # Normalizers
    "StatusSeedingPolicy",
    "SourceNormalizer",
    "HostawayNormalizer",
    "GoogleReviewNormalizer",
    "HOSTAWAY_STATUS_POLICY",
    "GOOGLE_STATUS_POLICY",
    "get_normalizer",
    # Providers
    "ReviewProvider",
    "HostawayClient",
    "GooglePlacesClient",
    # Ingestion
    "ReviewIngestionService",
    "IngestionResult",
]
