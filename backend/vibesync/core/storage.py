"""
Key-value storage for the persisted session state.

Holds the Spotify access token, the one-shot PKCE verifier and the
generation history. Values are plain strings; callers serialize.
"""

import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Dict, Optional

import redis.asyncio as redis

from vibesync.core.config import REDIS_KEY_PREFIX, STORAGE_BACKEND
from vibesync.core.redis import get_redis_cache

logger = logging.getLogger(__name__)

# Storage keys
HISTORY_KEY = "vibe_sync_history"
ACCESS_TOKEN_KEY = "spotify_access_token"
CODE_VERIFIER_KEY = "spotify_code_verifier"


class KeyValueStore(ABC):
    """Minimal async key-value interface."""

    name = "abstract"

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value stored under ``key`` or None."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""

    async def health(self) -> dict:
        return {"backend": self.name, "status": "connected", "error": None}


class MemoryStore(KeyValueStore):
    """Process-local store, lost on restart."""

    name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class RedisStore(KeyValueStore):
    """Store backed by the shared Redis connection."""

    name = "redis"

    def __init__(
        self,
        prefix: str = REDIS_KEY_PREFIX,
        connection_factory: Callable[[], Awaitable[redis.Redis]] = get_redis_cache,
    ):
        self.prefix = prefix
        self._connection_factory = connection_factory

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        connection = await self._connection_factory()
        return await connection.get(self._key(key))

    async def set(self, key: str, value: str) -> None:
        connection = await self._connection_factory()
        await connection.set(self._key(key), value)

    async def delete(self, key: str) -> None:
        connection = await self._connection_factory()
        await connection.delete(self._key(key))

    async def health(self) -> dict:
        status = {"backend": self.name, "status": "disconnected", "error": None}
        try:
            connection = await self._connection_factory()
            await connection.ping()
            status["status"] = "connected"
        except Exception as e:
            logger.error(f"Redis health check failed: {e}")
            status["error"] = str(e)
        return status


def create_store(backend: str = STORAGE_BACKEND) -> KeyValueStore:
    """Build the configured storage backend."""
    if backend == "redis":
        logger.info("Using Redis storage backend")
        return RedisStore()
    if backend != "memory":
        raise ValueError(f"Unknown storage backend: {backend}")
    logger.info("Using in-memory storage backend")
    return MemoryStore()
