"""
Guest Reviews Cache Module
==========================

Provides Redis-based caching with fallback to in-memory cache.

Usage:
    from src.cache import get_cache

    cache = get_cache()
    cache.set("provider:hostaway:reviews", payload, ttl_seconds=900)
    payload = cache.get("provider:hostaway:reviews")
"""

from .redis_cache import RedisCache, get_cache

__all__ = ["RedisCache", "get_cache"]
