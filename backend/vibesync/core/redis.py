"""
Redis connection management for the persisted session state.
"""

from typing import Optional
import redis.asyncio as redis
import logging

from vibesync.core.config import REDIS_URL

logger = logging.getLogger(__name__)

# Global Redis connection instance
_redis_cache: Optional[redis.Redis] = None


async def get_redis_cache() -> redis.Redis:
    """
    Returns the Redis connection instance used for tokens and history.

    Creates a new connection pool if one doesn't exist.
    """
    global _redis_cache

    if _redis_cache is None:
        try:
            _redis_cache = redis.from_url(
                REDIS_URL,
                decode_responses=True,
                max_connections=20,
                retry_on_timeout=True,
            )

            # Test the connection
            await _redis_cache.ping()
            logger.info("Redis cache connection established successfully")

        except Exception as e:
            logger.error(f"Failed to connect to Redis cache: {e}")
            _redis_cache = None
            raise

    return _redis_cache


async def close_redis_connections():
    """
    Closes the Redis connection gracefully during application shutdown.
    """
    global _redis_cache

    if _redis_cache:
        await _redis_cache.aclose()
        _redis_cache = None
        logger.info("Redis cache connection closed")
