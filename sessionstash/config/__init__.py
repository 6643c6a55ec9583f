from .provider import (
    APIConfig,
    ConfigProvider,
    EnvConfigProvider,
    FallbackPolicy,
    SessionConfig,
    StorageConfig,
)

__all__ = [
    "APIConfig",
    "ConfigProvider",
    "EnvConfigProvider",
    "FallbackPolicy",
    "SessionConfig",
    "StorageConfig",
]
