from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from page_assistant.core.lang import LANG_FR, SUPPORTED_LANGUAGES

from ._validators import coerce_int
from .cache import CacheConfig
from .content import ExtractionConfig
from .llm import ProviderSettings

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RuntimeConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    debug_payloads: bool = Field(default=False, validation_alias="DEBUG_PAYLOADS")
    default_language: str = Field(default=LANG_FR, validation_alias="DEFAULT_LANGUAGE")
    allow_missing_content: bool = Field(
        default=False,
        validation_alias="ALLOW_MISSING_CONTENT",
        description="Answer without page text when extraction fails and both cache tiers miss.",
    )
    log_truncate_length: int = Field(default=1000, validation_alias="LOG_TRUNCATE_LENGTH")

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> str:
        log_level = str(value or "INFO").strip().upper()
        if log_level not in LOG_LEVELS:
            msg = f"Unknown log level {value!r}, expected one of {', '.join(LOG_LEVELS)}"
            raise ValueError(msg)
        return log_level

    @field_validator("default_language", mode="before")
    @classmethod
    def _validate_lang(cls, value: Any) -> str:
        lang = str(value or LANG_FR).strip().lower()
        if lang not in SUPPORTED_LANGUAGES:
            msg = f"Invalid language: {lang}. Must be one of {sorted(SUPPORTED_LANGUAGES)}"
            raise ValueError(msg)
        return lang

    @field_validator("log_truncate_length", mode="before")
    @classmethod
    def _validate_truncate(cls, value: Any) -> int:
        parsed = coerce_int(value, default=1000, field="log_truncate_length")
        if parsed <= 0:
            msg = "Log truncate length must be positive"
            raise ValueError(msg)
        return parsed


@dataclass(frozen=True)
class AssistantConfig:
    """Immutable configuration passed explicitly into the pipeline."""

    provider: ProviderSettings
    cache: CacheConfig
    extraction: ExtractionConfig
    runtime: RuntimeConfig


def _env_names(field: FieldInfo) -> list[str]:
    alias = field.validation_alias
    if isinstance(alias, AliasChoices):
        names = [choice for choice in alias.choices if isinstance(choice, str)]
    else:
        names = [alias] if isinstance(alias, str) else []
    if field.alias:
        names.append(field.alias)
    return names


def _collect_section(model: type[BaseModel], source: dict[str, Any]) -> dict[str, Any]:
    """Pick the values in ``source`` addressed to ``model`` by its field aliases."""
    collected: dict[str, Any] = {}
    for name, field in model.model_fields.items():
        env_name = next((n for n in _env_names(field) if n in source), None)
        if env_name is not None:
            collected[name] = source[env_name]
    return collected


class Settings(BaseSettings):
    """Settings loaded automatically from environment variables and ``.env``.

    Nested models are populated by matching ``validation_alias`` on each field.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)

    @model_validator(mode="before")
    @classmethod
    def _sections_from_flat_env(cls, data: Any) -> Any:
        """Fill each section from flat variables such as ``CACHE_STRATEGY``.

        Keyword arguments win over the process environment, and explicit
        section dicts win over both.
        """
        if not isinstance(data, dict):
            return data

        source = {**os.environ, **data}
        merged = dict(data)
        for section, info in cls.model_fields.items():
            model = info.annotation
            if not (isinstance(model, type) and issubclass(model, BaseModel)):
                continue
            found = _collect_section(model, source)
            if not found:
                continue
            explicit = merged.get(section)
            if explicit is None:
                merged[section] = found
            elif isinstance(explicit, dict):
                by_name = {k: v for k, v in explicit.items() if k in model.model_fields}
                merged[section] = {**found, **by_name, **_collect_section(model, explicit)}
        return merged

    def as_assistant_config(self) -> AssistantConfig:
        return AssistantConfig(
            provider=self.provider,
            cache=self.cache,
            extraction=self.extraction,
            runtime=self.runtime,
        )


def load_config(**overrides: Any) -> AssistantConfig:
    """Load configuration from environment variables and an optional ``.env`` file.

    Args:
        **overrides: Section overrides, e.g. ``cache={"CACHE_STRATEGY": "url"}``.

    Returns:
        Immutable AssistantConfig instance.

    Raises:
        RuntimeError: If configuration validation fails.
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        msg = f"Configuration validation failed: {exc}"
        raise RuntimeError(msg) from exc

    config = settings.as_assistant_config()
    logger.debug(
        "config_loaded",
        extra={
            "provider_id": config.provider.provider_id,
            "cache_strategy": str(config.cache.strategy),
            "remote_cache": config.cache.remote_configured,
        },
    )
    return config
