"""Application configuration helpers."""

from __future__ import annotations

from .diavgeia import DiavgeiaConfig, get_diavgeia_config
from .env import optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .geocoding import GeocodingConfig, get_geocoding_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .llm import LlmConfig, get_llm_config
from .logging import configure_logging
from .ministry import MinistryConfig, get_ministry_config
from .reconciliation import KnownRecordPolicy, ReconciliationConfig, get_reconciliation_config
from .storage import StorageConfig, get_snapshot_path, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DiavgeiaConfig",
    "GeocodingConfig",
    "KnownRecordPolicy",
    "LlmConfig",
    "MinistryConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReconciliationConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_diavgeia_config",
    "get_geocoding_config",
    "get_llm_config",
    "get_ministry_config",
    "get_reconciliation_config",
    "get_snapshot_path",
    "get_storage_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
