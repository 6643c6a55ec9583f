"""
Shared pytest fixtures for sessionstash tests.

This module provides common fixtures including:
- Redis mocks for storage/sequence/session tests
- FakeCarrier: in-memory request/response carrier
- Session managers wired to the mocks
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sessionstash.config.provider import SessionConfig
from sessionstash.modules.sequence import RedisSequence
from sessionstash.modules.session import SessionManager
from sessionstash.modules.storage import RedisCacheStore


# =============================================================================
# Carrier Infrastructure
# =============================================================================


@dataclass
class SetCookie:
    """Record of a cookie set on the response."""
    value: str
    max_age: Optional[int]
    http_only: bool


@dataclass
class FakeCarrier:
    """
    In-memory request/response pair.

    Usage:
        carrier = FakeCarrier(cookies={"_SESSION_ID": session_id})
        session = await manager.find(carrier)
    """
    cookies: Dict[str, str] = field(default_factory=dict)
    form: Dict[str, str] = field(default_factory=dict)
    set_cookies: Dict[str, SetCookie] = field(default_factory=dict)

    def read_cookie(self, name: str) -> Optional[str]:
        return self.cookies.get(name)

    async def read_form_field(self, name: str) -> Optional[str]:
        return self.form.get(name)

    def set_cookie(self, name: str, value: str, max_age: Optional[int], http_only: bool) -> None:
        self.set_cookies[name] = SetCookie(value=value, max_age=max_age, http_only=http_only)

    def follow(self) -> "FakeCarrier":
        """Next request from the same browser: cookies set here are sent back."""
        cookies = dict(self.cookies)
        cookies.update({name: cookie.value for name, cookie in self.set_cookies.items()})
        return FakeCarrier(cookies=cookies)


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================


@pytest.fixture
def mock_redis():
    """Create a mock Redis client for async operations."""
    redis = AsyncMock()

    redis.set = AsyncMock()
    redis.setex = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.delete = AsyncMock(return_value=1)
    redis.incr = AsyncMock(return_value=1)

    return redis


@pytest.fixture
def mock_redis_with_data():
    """
    Redis mock with in-memory data storage for more realistic tests.

    This allows testing code that reads back what it writes.
    """
    storage: Dict[str, Any] = {}
    ttls: Dict[str, int] = {}
    counters: Dict[str, int] = {}

    redis = AsyncMock()

    async def mock_set(key, value, *args, **kwargs):
        storage[key] = value
        ttls.pop(key, None)
        return True

    async def mock_setex(key, ttl, value):
        storage[key] = value
        ttls[key] = ttl
        return True

    async def mock_get(key):
        return storage.get(key)

    async def mock_delete(*keys):
        count = 0
        for key in keys:
            if key in storage:
                del storage[key]
                ttls.pop(key, None)
                count += 1
        return count

    async def mock_incr(key):
        counters[key] = counters.get(key, 0) + 1
        return counters[key]

    redis.set = mock_set
    redis.setex = mock_setex
    redis.get = mock_get
    redis.delete = mock_delete
    redis.incr = mock_incr
    redis._storage = storage  # Expose for test assertions
    redis._ttls = ttls

    return redis


# =============================================================================
# Session Fixtures
# =============================================================================


@pytest.fixture
def session_config():
    return SessionConfig()


@pytest.fixture
def session_manager(mock_redis_with_data, session_config):
    """SessionManager over the data-backed Redis mock."""
    return SessionManager(
        session_config,
        RedisCacheStore(mock_redis_with_data, key_prefix=session_config.key_prefix),
        RedisSequence(mock_redis_with_data),
    )


@pytest.fixture
def carrier():
    return FakeCarrier()


@pytest.fixture
def make_carrier():
    """Factory for carriers with preset cookies/form fields."""
    return FakeCarrier
