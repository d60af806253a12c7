from __future__ import annotations

from ._validators import validate_api_key, validate_endpoint, validate_model_name
from .cache import (
    MAX_REMOTE_TTL_HOURS,
    MIN_REMOTE_TTL_HOURS,
    CacheConfig,
    KeyStrategy,
    LocalBackend,
    retention_days_to_hours,
)
from .content import ExtractionConfig
from .llm import DEFAULT_MAX_TOKENS, DEFAULT_PROVIDER_ID, ProviderConfig, ProviderSettings
from .settings import AssistantConfig, RuntimeConfig, Settings, load_config

__all__ = [
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_PROVIDER_ID",
    "MAX_REMOTE_TTL_HOURS",
    "MIN_REMOTE_TTL_HOURS",
    "AssistantConfig",
    "CacheConfig",
    "ExtractionConfig",
    "KeyStrategy",
    "LocalBackend",
    "ProviderConfig",
    "ProviderSettings",
    "RuntimeConfig",
    "Settings",
    "load_config",
    "retention_days_to_hours",
    "validate_api_key",
    "validate_endpoint",
    "validate_model_name",
]
