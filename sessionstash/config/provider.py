"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

ONE_WEEK = 60 * 60 * 24 * 7


class FallbackPolicy(str, Enum):
    """When get-or-create falls back to creating a new session."""

    ANY_ERROR = "any_error"  # any failed lookup, backend errors included
    NOT_FOUND = "not_found"  # only a missing session; backend errors propagate


@dataclass
class SessionConfig:
    """Session configuration."""
    cookie_name: str = "_SESSION_ID"
    form_field: str = "_SESSION_ID"
    id_prefix: str = "SESSID_"
    max_age: int = ONE_WEEK
    http_only: bool = False
    key_prefix: str = "session:"
    fallback_policy: FallbackPolicy = FallbackPolicy.ANY_ERROR
    sequence_name: str = "session"


@dataclass
class StorageConfig:
    """Storage configuration."""
    redis_url: str = "redis://localhost:6379/0"
    redis_password: Optional[str] = None


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    log_level: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_session_config(self) -> SessionConfig:
        """Get session configuration."""
        ...

    def get_storage_config(self) -> StorageConfig:
        """Get storage configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_session_config(self) -> SessionConfig:
        """Get session configuration from environment variables."""
        policy = os.getenv("SESSION_FALLBACK_POLICY", FallbackPolicy.ANY_ERROR.value).lower()
        try:
            fallback_policy = FallbackPolicy(policy)
        except ValueError:
            raise ValueError(
                f"SESSION_FALLBACK_POLICY must be one of "
                f"{[p.value for p in FallbackPolicy]}, got {policy!r}"
            ) from None

        max_age = int(os.getenv("SESSION_MAX_AGE", str(ONE_WEEK)))
        if max_age < 0:
            raise ValueError("SESSION_MAX_AGE must not be negative")

        return SessionConfig(
            cookie_name=os.getenv("SESSION_COOKIE_NAME", "_SESSION_ID"),
            form_field=os.getenv("SESSION_FORM_FIELD", "_SESSION_ID"),
            id_prefix=os.getenv("SESSION_ID_PREFIX", "SESSID_"),
            max_age=max_age,
            http_only=os.getenv("SESSION_HTTP_ONLY", "false").lower() == "true",
            key_prefix=os.getenv("SESSION_KEY_PREFIX", "session:"),
            fallback_policy=fallback_policy,
            sequence_name=os.getenv("SESSION_SEQUENCE_NAME", "session"),
        )

    def get_storage_config(self) -> StorageConfig:
        """Get storage configuration from environment variables."""
        return StorageConfig(
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            redis_password=os.getenv("REDIS_PASSWORD"),
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=int(os.getenv("API_PORT", "8080")),
            host=os.getenv("API_HOST", "0.0.0.0"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
