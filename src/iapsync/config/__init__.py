"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .http_resilience import NO_RETRY, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging, get_log_level
from .server import ServerConfig, get_server_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .subscription import DEFAULT_PRODUCT_ID, SubscriptionConfig, get_subscription_config

__all__ = [
    "DEFAULT_PRODUCT_ID",
    "NO_RETRY",
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ServerConfig",
    "StorageConfig",
    "SubscriptionConfig",
    "configure_logging",
    "get_database_config",
    "get_log_level",
    "get_server_config",
    "get_storage_config",
    "get_subscription_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
