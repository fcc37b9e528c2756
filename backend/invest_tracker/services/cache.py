"""
Cache service for price feed responses.

Provides Redis-backed caching with TTL support. When Redis is unavailable
every call is a cheap no-op and callers simply go to the network.
"""
import json
import logging
from typing import Any, Optional

import redis

from invest_tracker.services.redis_client import get_redis_client

logger = logging.getLogger(__name__)


class CacheService:
    """Manage application-level caching with Redis."""

    def __init__(self, client: Optional[redis.Redis] = None, prefix: str = "invest_tracker"):
        """
        Args:
            client: Explicit Redis client; the shared client is used when omitted
            prefix: Namespace prepended to every key
        """
        self._client = client
        self.prefix = prefix

    @property
    def client(self) -> Optional[redis.Redis]:
        if self._client is None:
            self._client = get_redis_client()
        return self._client

    @property
    def available(self) -> bool:
        return self.client is not None

    def make_key(self, *parts: Any) -> str:
        """Generate a namespaced cache key."""
        return f"{self.prefix}:{':'.join(str(part) for part in parts)}"

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Returns:
            Cached value (deserialized from JSON) or None if not found/cache unavailable
        """
        client = self.client
        if client is None:
            return None

        try:
            value = client.get(key)
            if value is None:
                return None
            return json.loads(value)
        except (redis.RedisError, ValueError) as e:
            logger.debug(f"Cache get error for key {key}: {str(e)}")
            return None

    def set(self, key: str, value: Any, ttl_seconds: int = 60) -> bool:
        """
        Set value in cache with TTL.

        Returns:
            True if successful, False otherwise
        """
        client = self.client
        if client is None or ttl_seconds <= 0:
            return False

        try:
            client.setex(key, ttl_seconds, json.dumps(value))
            return True
        except (redis.RedisError, TypeError, ValueError) as e:
            logger.debug(f"Cache set error for key {key}: {str(e)}")
            return False


# Global cache instance (connects lazily)
cache = CacheService()
