import itertools
import time
from typing import Optional, Protocol


class SequenceSource(Protocol):
    """Protocol for unique, monotonically increasing sequence sources."""

    async def next(self) -> int:
        """Return the next value of the sequence."""
        ...


class RedisSequence:
    def __init__(self, redis_client, name: str = "session"):
        """
        Initialize sequence.

        Args:
            redis_client: Async Redis client
            name: Sequence name, one counter key per name
        """
        self.redis = redis_client
        self.name = name

    @property
    def key(self) -> str:
        return f"seq:{self.name}"

    async def next(self) -> int:
        """
        Get the next sequence value.

        INCR is atomic on the server, so values never repeat across
        processes sharing the same Redis.
        """
        return int(await self.redis.incr(self.key))


class LocalSequence:
    """
    In-process sequence seeded from the clock.

    Unique within one process only; use RedisSequence when several
    processes mint identifiers.
    """

    def __init__(self, start: Optional[int] = None):
        self._counter = itertools.count(time.time_ns() if start is None else start)

    async def next(self) -> int:
        return next(self._counter)
