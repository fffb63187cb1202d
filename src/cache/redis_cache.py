"""
Redis Cache for Guest Reviews
=============================

Caches raw provider payloads so repeated syncs inside the TTL window do not
hit Hostaway / Google again.

Features:
- TTL-based expiration
- JSON serialization
- Fallback to in-memory if Redis is unreachable
- Namespace prefixing for key isolation

Usage:
    cache = RedisCache()
    cache.set("provider:hostaway:reviews", payload, ttl_seconds=900)
    payload = cache.get("provider:hostaway:reviews")

Environment variables:
    REDIS_URL - Full Redis URL (redis://host:port/db). Unset = memory only.
    CACHE_PREFIX - Key prefix (default: guestreviews)
"""

import json
import logging
import threading
import time
from typing import Any, Dict, Optional, Tuple

import redis

logger = logging.getLogger(__name__)

# Global cache instance (singleton)
_cache_instance: Optional["RedisCache"] = None


class RedisCache:
    """
    Redis-based cache with in-memory fallback.

    Each entry also records when it was written, so callers can report
    cache age next to the TTL.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        prefix: str = "guestreviews",
        fallback_to_memory: bool = True,
    ):
        """
        Initialize cache.

        Args:
            redis_url: Redis URL. None keeps everything in process memory.
            prefix: Key prefix for namespace isolation.
            fallback_to_memory: If True, use in-memory cache when Redis unavailable.
        """
        self.prefix = prefix
        self.fallback_to_memory = fallback_to_memory
        self._redis: Optional[redis.Redis] = None
        # key -> (expires_at monotonic or None, stored_at epoch seconds, value)
        self._memory_cache: Dict[str, Tuple[Optional[float], float, Any]] = {}
        self._memory_lock = threading.Lock()
        self._use_memory = True

        if redis_url:
            self._connect(redis_url)

    def _connect(self, redis_url: str) -> None:
        """Establish Redis connection."""
        try:
            client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
            )
            client.ping()
        except redis.RedisError as e:
            if not self.fallback_to_memory:
                raise
            logger.warning(f"Redis connection failed: {e}. Using in-memory cache.")
            return

        self._redis = client
        self._use_memory = False
        logger.info(f"Redis cache connected: {redis_url.split('@')[-1]}")

    def _make_key(self, key: str) -> str:
        """Create prefixed key."""
        return f"{self.prefix}:{key}"

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/expired
        """
        entry = self.get_entry(key)
        return entry[1] if entry else None

    def get_entry(self, key: str) -> Optional[Tuple[float, Any]]:
        """
        Get (stored_at, value) for a key.

        Returns:
            Tuple of epoch seconds when written and the value, or None
        """
        full_key = self._make_key(key)

        if self._use_memory:
            return self._memory_get(full_key)

        try:
            raw = self._redis.get(full_key)
        except redis.RedisError as e:
            logger.warning(f"Redis get failed: {e}")
            return self._memory_get(full_key)

        if raw is None:
            return None
        envelope = json.loads(raw)
        return envelope["stored_at"], envelope["value"]

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        """
        Set value in cache.

        Args:
            key: Cache key
            value: Value to cache (must be JSON serializable)
            ttl_seconds: Time to live in seconds (None = no expiry)

        Returns:
            True if successful
        """
        full_key = self._make_key(key)
        stored_at = time.time()

        if self._use_memory:
            return self._memory_set(full_key, value, ttl_seconds, stored_at)

        serialized = json.dumps({"stored_at": stored_at, "value": value}, default=str)
        try:
            if ttl_seconds:
                self._redis.setex(full_key, ttl_seconds, serialized)
            else:
                self._redis.set(full_key, serialized)
            return True
        except redis.RedisError as e:
            logger.warning(f"Redis set failed: {e}")
            return self._memory_set(full_key, value, ttl_seconds, stored_at)

    def delete(self, key: str) -> bool:
        """Delete key from cache. Returns True if a key was removed."""
        full_key = self._make_key(key)

        if self._use_memory:
            return self._memory_delete(full_key)

        try:
            return self._redis.delete(full_key) > 0
        except redis.RedisError as e:
            logger.warning(f"Redis delete failed: {e}")
            return self._memory_delete(full_key)

    def clear_prefix(self, prefix: str) -> int:
        """
        Clear all keys with given prefix.

        Args:
            prefix: Key prefix to clear

        Returns:
            Number of keys deleted
        """
        full_prefix = self._make_key(prefix)

        if self._use_memory:
            with self._memory_lock:
                keys_to_delete = [k for k in self._memory_cache if k.startswith(full_prefix)]
                for k in keys_to_delete:
                    del self._memory_cache[k]
            return len(keys_to_delete)

        try:
            keys = list(self._redis.scan_iter(f"{full_prefix}*"))
            if keys:
                return self._redis.delete(*keys)
            return 0
        except redis.RedisError as e:
            logger.warning(f"Redis clear_prefix failed: {e}")
            return 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        stats: Dict[str, Any] = {
            "backend": "memory" if self._use_memory else "redis",
            "connected": not self._use_memory,
        }
        if self._use_memory:
            stats["memory_keys"] = len(self._memory_cache)
        return stats

    # =========================================================================
    # MEMORY FALLBACK
    # =========================================================================

    def _memory_get(self, key: str) -> Optional[Tuple[float, Any]]:
        """Get from in-memory cache."""
        with self._memory_lock:
            if key not in self._memory_cache:
                return None

            expires_at, stored_at, value = self._memory_cache[key]
            if expires_at is not None and time.monotonic() > expires_at:
                del self._memory_cache[key]
                return None

            return stored_at, value

    def _memory_set(self, key: str, value: Any, ttl_seconds: Optional[int], stored_at: float) -> bool:
        """Set in in-memory cache."""
        expires_at = None
        if ttl_seconds:
            expires_at = time.monotonic() + ttl_seconds

        with self._memory_lock:
            self._memory_cache[key] = (expires_at, stored_at, value)
        return True

    def _memory_delete(self, key: str) -> bool:
        """Delete from in-memory cache."""
        with self._memory_lock:
            return self._memory_cache.pop(key, None) is not None

    def close(self) -> None:
        """Close Redis connection."""
        if self._redis is not None:
            self._redis.close()
            self._redis = None
            self._use_memory = True


def get_cache(
    redis_url: Optional[str] = None,
    force_new: bool = False,
) -> RedisCache:
    """
    Get singleton cache instance.

    Args:
        redis_url: Optional Redis URL (only used if creating new instance).
            Defaults to the configured REDIS_URL.
        force_new: If True, create new instance even if one exists

    Returns:
        RedisCache instance
    """
    global _cache_instance

    if _cache_instance is None or force_new:
        from ..data.config import get_settings
        cache_config = get_settings().cache
        _cache_instance = RedisCache(
            redis_url=redis_url or cache_config.redis_url,
            prefix=cache_config.prefix,
        )

    return _cache_instance
