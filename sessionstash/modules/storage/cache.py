import base64
import json
import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)

BYTES_TAG = "__bytes__"


class CacheKeyNotFound(KeyError):
    """Raised by a cache store when a key is absent."""


class CacheStore(Protocol):
    """Protocol for key-value cache stores."""

    async def set(self, key: str, value: Any) -> None:
        """Store value under key without expiry."""
        ...

    async def set_with_expiry(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store value under key, expiring after ttl_seconds."""
        ...

    async def get(self, key: str) -> Any:
        """
        Get the value stored under key.

        Raises:
            CacheKeyNotFound: If the key is absent
        """
        ...

    async def delete(self, key: str) -> None:
        """Remove key. Removing an absent key is not an error."""
        ...


def _encode_default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return {BYTES_TAG: base64.b64encode(bytes(value)).decode("ascii")}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode_hook(obj: dict) -> Any:
    if len(obj) == 1 and isinstance(obj.get(BYTES_TAG), str):
        return base64.b64decode(obj[BYTES_TAG])
    return obj


def tag_bytes(value: Any) -> Any:
    """Replace bytes anywhere in value with the tagged base64 form encode() writes."""
    if isinstance(value, (bytes, bytearray)):
        return _encode_default(value)
    if isinstance(value, dict):
        return {key: tag_bytes(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [tag_bytes(item) for item in value]
    return value


def untag_bytes(value: Any) -> Any:
    """Inverse of tag_bytes(); malformed base64 raises ValueError."""
    if isinstance(value, dict):
        return _decode_hook({key: untag_bytes(item) for key, item in value.items()})
    if isinstance(value, list):
        return [untag_bytes(item) for item in value]
    return value


def encode(value: Any) -> str:
    """Serialize a value to JSON; bytes are stored base64-encoded under a tag."""
    return json.dumps(value, default=_encode_default)


def decode(raw: str) -> Any:
    """Inverse of encode()."""
    return json.loads(raw, object_hook=_decode_hook)


class RedisCacheStore:
    """CacheStore backed by an async Redis client with JSON values."""

    def __init__(self, redis_client, key_prefix: str = ""):
        """
        Initialize cache store.

        Args:
            redis_client: Async Redis client (decode_responses=True)
            key_prefix: Namespace prepended to every key
        """
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def set(self, key: str, value: Any) -> None:
        await self.redis.set(self._key(key), encode(value))

    async def set_with_expiry(self, key: str, value: Any, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        await self.redis.setex(self._key(key), ttl_seconds, encode(value))

    async def get(self, key: str) -> Any:
        data = await self.redis.get(self._key(key))
        if data is None:
            logger.debug(f"Cache miss for {self._key(key)}")
            raise CacheKeyNotFound(key)
        return decode(data)

    async def delete(self, key: str) -> None:
        await self.redis.delete(self._key(key))
