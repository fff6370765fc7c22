"""Application configuration helpers."""

from __future__ import annotations

from .agent import DependencyAgentConfig, get_dependency_agent_config
from .beproduct import BeProductConfig, get_beproduct_config
from .env import optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)
from .sync import SyncConfig, get_sync_config

__all__ = [
    "BeProductConfig",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "DependencyAgentConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "get_beproduct_config",
    "get_database_config",
    "get_database_uri",
    "get_dependency_agent_config",
    "get_storage_config",
    "get_sync_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
