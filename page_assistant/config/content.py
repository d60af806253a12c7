from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ._validators import coerce_float, coerce_int, validate_endpoint


class ExtractionConfig(BaseModel):
    """Settings for the page-to-text extraction service."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    base_url: str = Field(default="https://r.jina.ai", validation_alias="EXTRACTION_BASE_URL")
    timeout_sec: float = Field(default=30.0, validation_alias="EXTRACTION_TIMEOUT_SEC")
    user_agent: str = Field(default="PageAssistant/1.0", validation_alias="EXTRACTION_USER_AGENT")
    max_response_size_mb: int = Field(
        default=20, validation_alias="EXTRACTION_MAX_RESPONSE_SIZE_MB"
    )

    @field_validator("base_url", mode="before")
    @classmethod
    def _validate_base_url(cls, value: Any) -> str:
        return validate_endpoint(value or "https://r.jina.ai", name="Extraction base URL")

    @field_validator("timeout_sec", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> float:
        parsed = coerce_float(value, default=30.0, field="timeout_sec")
        if parsed <= 0 or parsed > 300:
            msg = "Extraction timeout must be between 0 and 300 seconds"
            raise ValueError(msg)
        return parsed

    @field_validator("user_agent", mode="before")
    @classmethod
    def _validate_user_agent(cls, value: Any) -> str:
        agent = str(value or "PageAssistant/1.0").strip()
        if len(agent) > 200 or any(ch in agent for ch in "\r\n"):
            msg = "Extraction user agent is invalid"
            raise ValueError(msg)
        return agent

    @field_validator("max_response_size_mb", mode="before")
    @classmethod
    def _validate_size(cls, value: Any) -> int:
        parsed = coerce_int(value, default=20, field="max_response_size_mb")
        if parsed < 1 or parsed > 1024:
            msg = "Extraction max response size must be between 1 and 1024 MB"
            raise ValueError(msg)
        return parsed
