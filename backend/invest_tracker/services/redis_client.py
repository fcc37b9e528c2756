"""Shared Redis client factory for the application.

Centralizes Redis client initialization so every consumer shares one
connection configuration and degrades the same way when Redis is down.
"""
import logging
import time
from typing import Optional

import redis

from invest_tracker.config import settings

logger = logging.getLogger(__name__)

# Seconds to wait before retrying after a failed connection attempt
RECONNECT_INTERVAL = 60

_redis_client: Optional[redis.Redis] = None
_last_failure: Optional[float] = None


def get_redis_client() -> Optional[redis.Redis]:
    """
    Get or initialize shared Redis client with graceful fallback.

    Returns None when caching is disabled in settings or Redis cannot be
    reached; callers treat that as "no cache". After a failure the
    connection is not retried for RECONNECT_INTERVAL seconds.
    """
    global _redis_client, _last_failure

    if not settings.cache_enabled:
        return None

    if _redis_client is not None:
        return _redis_client

    if _last_failure is not None and time.monotonic() - _last_failure < RECONNECT_INTERVAL:
        return None

    try:
        client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=2,
        )
        # Test connection
        client.ping()
        _redis_client = client
        _last_failure = None
        logger.debug("Redis client initialized successfully")
    except redis.RedisError as e:
        logger.warning(f"Failed to initialize Redis client: {e}")
        _last_failure = time.monotonic()

    return _redis_client


def reset_redis_client() -> None:
    """Reset the global Redis client.

    Used for testing to ensure a clean state between tests.
    """
    global _redis_client, _last_failure
    _redis_client = None
    _last_failure = None


def close_redis_client() -> None:
    """Close the global Redis client connection.

    Should be called during application shutdown.
    """
    global _redis_client
    if _redis_client:
        try:
            _redis_client.close()
            logger.debug("Redis client closed successfully")
        except redis.RedisError as e:
            logger.warning(f"Error closing Redis client: {e}")
        finally:
            _redis_client = None
