from __future__ import annotations

import math
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ._validators import coerce_float, coerce_int, validate_endpoint

MIN_REMOTE_TTL_HOURS = 1
MAX_REMOTE_TTL_HOURS = 8760  # one year


class KeyStrategy(StrEnum):
    """How cache keys are derived from a page identity."""

    HASH = "hash"  # url + title
    URL = "url"  # url only
    HYBRID = "hybrid"  # url + title, accepted for settings compatibility


class LocalBackend(StrEnum):
    MEMORY = "memory"
    REDIS = "redis"


def retention_days_to_hours(days: float) -> int:
    """Convert a remote-cache retention in days to a TTL in hours clamped to 1..8760."""
    hours = float(days) * 24
    if math.isnan(hours):
        msg = "Retention days must be a number"
        raise ValueError(msg)
    return int(max(MIN_REMOTE_TTL_HOURS, min(MAX_REMOTE_TTL_HOURS, hours)))


class CacheConfig(BaseModel):
    """Settings for both content cache tiers."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    strategy: KeyStrategy = Field(default=KeyStrategy.HASH, validation_alias="CACHE_STRATEGY")
    local_enabled: bool = Field(default=True, validation_alias="CACHE_LOCAL_ENABLED")
    local_backend: LocalBackend = Field(
        default=LocalBackend.MEMORY, validation_alias="CACHE_LOCAL_BACKEND"
    )
    local_ttl_seconds: int = Field(default=3600, validation_alias="CACHE_LOCAL_TTL_SECONDS")
    remote_enabled: bool = Field(default=False, validation_alias="CACHE_REMOTE_ENABLED")
    remote_url: str | None = Field(default=None, validation_alias="CACHE_REMOTE_URL")
    remote_key: str | None = Field(default=None, validation_alias="CACHE_REMOTE_KEY", repr=False)
    remote_table: str = Field(default="content_cache", validation_alias="CACHE_REMOTE_TABLE")
    user_scope: str = Field(default="anonymous", validation_alias="CACHE_USER_SCOPE")
    retention_days: float = Field(default=7, validation_alias="CACHE_RETENTION_DAYS")
    tier_timeout_sec: float = Field(default=10.0, validation_alias="CACHE_TIER_TIMEOUT_SEC")
    sweep_interval_sec: float = Field(default=3600.0, validation_alias="CACHE_SWEEP_INTERVAL_SEC")
    redis_url: str = Field(default="redis://127.0.0.1:6379/0", validation_alias="REDIS_URL")
    redis_prefix: str = Field(default="pa", validation_alias="REDIS_PREFIX")

    @property
    def remote_configured(self) -> bool:
        return bool(self.remote_enabled and self.remote_url and self.remote_key)

    @property
    def remote_ttl_hours(self) -> int:
        return retention_days_to_hours(self.retention_days)

    @field_validator("strategy", "local_backend", mode="before")
    @classmethod
    def _lowercase_enum(cls, value: Any, info: ValidationInfo) -> str:
        if value in (None, ""):
            return str(cls.model_fields[info.field_name].default)
        return str(value).strip().lower()

    @field_validator("remote_url", mode="before")
    @classmethod
    def _validate_remote_url(cls, value: Any) -> str | None:
        if value in (None, ""):
            return None
        return validate_endpoint(value, name="Remote cache URL")

    @field_validator("remote_table", mode="before")
    @classmethod
    def _validate_table(cls, value: Any) -> str:
        table = str(value or "content_cache").strip()
        if not table.replace("_", "a").isalnum() or table[0].isdigit():
            msg = "Remote cache table name must be a plain identifier"
            raise ValueError(msg)
        return table

    @field_validator("local_ttl_seconds", mode="before")
    @classmethod
    def _validate_local_ttl(cls, value: Any) -> int:
        parsed = coerce_int(value, default=3600, field="local_ttl_seconds")
        if parsed < 1 or parsed > 86_400 * 30:
            msg = "Local cache TTL must be between 1 second and 30 days"
            raise ValueError(msg)
        return parsed

    @field_validator("retention_days", mode="before")
    @classmethod
    def _validate_retention(cls, value: Any) -> float:
        parsed = coerce_float(value, default=7, field="retention_days")
        if parsed < 0:
            msg = "Cache retention days cannot be negative"
            raise ValueError(msg)
        return parsed

    @field_validator("tier_timeout_sec", "sweep_interval_sec", mode="before")
    @classmethod
    def _validate_positive_seconds(cls, value: Any, info: ValidationInfo) -> float:
        default = cls.model_fields[info.field_name].default
        parsed = coerce_float(value, default=default, field=info.field_name)
        if parsed <= 0:
            msg = f"{info.field_name.replace('_', ' ').capitalize()} must be positive"
            raise ValueError(msg)
        return parsed

    @field_validator("redis_prefix", mode="before")
    @classmethod
    def _validate_prefix(cls, value: Any) -> str:
        prefix = str(value or "pa").strip()
        if len(prefix) > 50 or any(ch.isspace() for ch in prefix):
            msg = "Redis prefix must be at most 50 characters without whitespace"
            raise ValueError(msg)
        return prefix
