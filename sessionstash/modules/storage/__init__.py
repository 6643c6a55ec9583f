"""
Storage Module - Black Box Interface

Purpose: Abstract all data persistence
Interface: connect(), disconnect(), CacheStore.set/set_with_expiry/get/delete
Hidden: Redis specifics, connection pooling, serialization

Can be replaced with any storage backend without affecting other modules.
"""

from typing import Optional

import redis.asyncio as redis

from ...config.provider import StorageConfig
from .cache import (
    CacheKeyNotFound,
    CacheStore,
    RedisCacheStore,
    decode,
    encode,
    tag_bytes,
    untag_bytes,
)


class StorageModule:
    """Black box storage abstraction."""

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize storage with connection settings."""
        self.config = config or StorageConfig()
        self._client = None

    async def connect(self) -> redis.Redis:
        """Get storage connection."""
        if not self._client:
            self._client = redis.from_url(
                self.config.redis_url,
                password=self.config.redis_password,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def cache_store(self, key_prefix: str = "") -> RedisCacheStore:
        """Get a CacheStore over the storage connection."""
        return RedisCacheStore(await self.connect(), key_prefix=key_prefix)

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None


__all__ = [
    "StorageModule",
    "CacheStore",
    "CacheKeyNotFound",
    "RedisCacheStore",
    "encode",
    "decode",
    "tag_bytes",
    "untag_bytes",
]
