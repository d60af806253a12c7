from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ._validators import (
    coerce_float,
    coerce_int,
    validate_api_key,
    validate_endpoint,
    validate_model_name,
)

DEFAULT_PROVIDER_ID = "albert"
DEFAULT_MAX_TOKENS = 500


class ProviderSettings(BaseModel):
    """Compiled-in or environment-provided provider defaults."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    provider_id: str = Field(default=DEFAULT_PROVIDER_ID, validation_alias="LLM_PROVIDER")
    endpoint: str | None = Field(default=None, validation_alias="LLM_ENDPOINT")
    model: str = Field(default="albert-large", validation_alias="LLM_MODEL")
    api_key: str | None = Field(default=None, validation_alias="LLM_API_KEY", repr=False)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, validation_alias="LLM_MAX_TOKENS")
    temperature: float = Field(default=0.7, validation_alias="LLM_TEMPERATURE")
    top_p: float = Field(default=0.9, validation_alias="LLM_TOP_P")
    timeout_sec: float = Field(default=30.0, validation_alias="LLM_TIMEOUT_SEC")
    validation_timeout_sec: float = Field(
        default=10.0,
        validation_alias="LLM_VALIDATION_TIMEOUT_SEC",
        description="Timeout for lightweight credential checks.",
    )
    max_response_size_mb: int = Field(default=10, validation_alias="LLM_MAX_RESPONSE_SIZE_MB")
    http_referer: str | None = Field(default=None, validation_alias="LLM_HTTP_REFERER")
    app_title: str = Field(default="Page Assistant", validation_alias="LLM_APP_TITLE")

    @field_validator("provider_id", mode="before")
    @classmethod
    def _normalize_provider_id(cls, value: Any) -> str:
        provider = str(value or DEFAULT_PROVIDER_ID).lower().strip()
        if len(provider) > 50 or any(ch.isspace() for ch in provider):
            msg = f"Invalid LLM provider id: {provider!r}"
            raise ValueError(msg)
        return provider

    @field_validator("endpoint", mode="before")
    @classmethod
    def _validate_endpoint(cls, value: Any) -> str | None:
        if value in (None, ""):
            return None
        return validate_endpoint(value, name="LLM endpoint")

    @field_validator("model", mode="before")
    @classmethod
    def _validate_model(cls, value: Any) -> str:
        return validate_model_name(str(value or "").strip())

    @field_validator("api_key", mode="before")
    @classmethod
    def _validate_api_key(cls, value: Any) -> str | None:
        if value in (None, ""):
            return None
        return validate_api_key(value, owner="LLM")

    @field_validator("max_tokens", mode="before")
    @classmethod
    def _validate_max_tokens(cls, value: Any) -> int:
        parsed = coerce_int(value, default=DEFAULT_MAX_TOKENS, field="max_tokens")
        if parsed < 1 or parsed > 100_000:
            msg = "Max tokens must be between 1 and 100000"
            raise ValueError(msg)
        return parsed

    @field_validator("temperature", "top_p", mode="before")
    @classmethod
    def _validate_sampling(cls, value: Any, info: ValidationInfo) -> float:
        default = cls.model_fields[info.field_name].default
        parsed = coerce_float(value, default=default, field=info.field_name)
        upper = 2.0 if info.field_name == "temperature" else 1.0
        if parsed < 0 or parsed > upper:
            msg = f"{info.field_name.capitalize()} must be between 0 and {upper}"
            raise ValueError(msg)
        return parsed

    @field_validator("timeout_sec", "validation_timeout_sec", mode="before")
    @classmethod
    def _validate_timeouts(cls, value: Any, info: ValidationInfo) -> float:
        default = cls.model_fields[info.field_name].default
        parsed = coerce_float(value, default=default, field=info.field_name)
        if parsed <= 0 or parsed > 300:
            msg = f"{info.field_name.replace('_', ' ').capitalize()} must be between 0 and 300"
            raise ValueError(msg)
        return parsed


class ProviderConfig(BaseModel):
    """Per-request provider parameters with an already-decoded API key.

    Built from persisted settings or compiled-in defaults for every request and
    never persisted by this package.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    provider_id: str
    endpoint: str
    model: str
    api_key: str = Field(repr=False)
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = 0.7
    top_p: float = 0.9
    extra_headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("provider_id", mode="before")
    @classmethod
    def _normalize_provider_id(cls, value: Any) -> str:
        return str(value or "").lower().strip()

    @field_validator("endpoint", mode="before")
    @classmethod
    def _validate_endpoint(cls, value: Any) -> str:
        return validate_endpoint(value, name="Provider endpoint")

    @field_validator("model", mode="before")
    @classmethod
    def _validate_model(cls, value: Any) -> str:
        return validate_model_name(str(value or "").strip())

    @field_validator("api_key", mode="before")
    @classmethod
    def _validate_api_key(cls, value: Any) -> str:
        return validate_api_key(value, owner="Provider")

    @field_validator("max_tokens", mode="before")
    @classmethod
    def _validate_max_tokens(cls, value: Any) -> int:
        parsed = coerce_int(value, default=DEFAULT_MAX_TOKENS, field="max_tokens")
        if parsed < 1:
            msg = "Max tokens must be positive"
            raise ValueError(msg)
        return parsed
