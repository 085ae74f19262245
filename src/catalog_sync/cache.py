"""
Redis sink for synchronized category documents.

Category documents arrive already serialized; this module only owns the Redis
client lifecycle. Callers treat write failures as advisory.
"""

from __future__ import annotations

import logging
from typing import Any

from redis.asyncio import Redis

from .base import CategoryCache
from .config import SyncConfig, get_sync_config

logger = logging.getLogger(__name__)


class RedisCategoryCache(CategoryCache):
    """Category cache backed by an async Redis client.

    Args:
        config: Sync settings providing the Redis URL and pool options.
        client: Optional pre-built Redis client (tests pass a mock). When omitted
            a client is created from `config.redis_url` and closed by `aclose()`.
    """

    def __init__(self, config: SyncConfig | None = None, *, client: Redis | Any | None = None):
        self.config = config or get_sync_config()
        self._owns_client = client is None
        if client is None:
            logger.info(
                f"Initializing Redis client for category cache: {self.config.redis_url} "
                f"(max_connections={self.config.redis_max_connections})"
            )
            client = Redis.from_url(
                self.config.redis_url,
                decode_responses=True,
                max_connections=self.config.redis_max_connections,
                socket_connect_timeout=self.config.redis_socket_connect_timeout,
                socket_timeout=self.config.redis_socket_timeout,
            )
        self._client = client

    async def set(self, key: str, value: str) -> None:
        """Write `value` under `key` with no expiry."""
        if self._client is None:
            raise RuntimeError("Category cache is closed")
        await self._client.set(key, value)

    async def aclose(self) -> None:
        """Close the Redis client if this cache created it."""
        if self._owns_client and self._client is not None:
            logger.info("Closing Redis client for category cache.")
            await self._client.aclose()
        self._client = None
