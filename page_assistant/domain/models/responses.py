"""Response models shared by the dispatcher, the synthesizer and the use case."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_EXTRACTED_SUGGESTIONS = 4
MAX_FALLBACK_SUGGESTIONS = 3


class TokenUsage(BaseModel):
    """Token accounting reported by a provider."""

    model_config = ConfigDict(frozen=True)

    prompt_tokens: int | None = Field(default=None, description="Tokens consumed by the prompt.")
    completion_tokens: int | None = Field(
        default=None, description="Tokens produced by the completion."
    )
    total_tokens: int | None = Field(default=None, description="Total tokens billed.")


class ProviderReply(BaseModel):
    """Normalized result of a single provider call."""

    model_config = ConfigDict(frozen=True)

    answer: str = Field(description="Raw text produced by the model.")
    usage: TokenUsage | None = Field(default=None, description="Token usage if reported.")
    model: str | None = Field(default=None, description="Model that produced the answer.")
    latency_ms: int | None = Field(default=None, description="Observed latency of the call.")


class SynthesizedResponse(BaseModel):
    """Visible answer plus machine-usable follow-up suggestions."""

    model_config = ConfigDict(frozen=True)

    answer: str
    suggestions: tuple[str, ...] = Field(default=(), max_length=MAX_EXTRACTED_SUGGESTIONS)

    @field_validator("suggestions", mode="before")
    @classmethod
    def _clean_suggestions(cls, value: object) -> tuple[str, ...]:
        items = value if isinstance(value, list | tuple) else ()
        cleaned = tuple(str(item).strip() for item in items)
        if any(not item for item in cleaned):
            msg = "Suggestions must be non-empty after trimming"
            raise ValueError(msg)
        return cleaned


class AssistantReply(BaseModel):
    """What the pipeline hands back to the UI layer."""

    model_config = ConfigDict(frozen=True)

    answer: str
    suggestions: tuple[str, ...] = ()
    site_type: str
    language: str
    cache_hit: bool = False
    usage: TokenUsage | None = None
