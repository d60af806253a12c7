"""Domain-specific exceptions.

These exceptions describe why a single pipeline request failed. Cache-tier
failures never leave the cache; extraction and provider failures are raised to
the caller, which maps them to localized messages.
"""

from __future__ import annotations

from typing import Any


class AssistantError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class InvalidInputError(AssistantError):
    """Raised for a bad URL, locale or argument before any I/O happens."""


class SecretDecodeError(AssistantError):
    """Raised when a stored credential cannot be decoded into a usable key."""


class MissingCredentialsError(AssistantError):
    """Raised when no API key is available for the selected provider."""


class CacheTierError(AssistantError):
    """Raised inside a cache tier; always absorbed by the tiered cache."""

    def __init__(self, message: str, *, tier: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, {"tier": tier, **(details or {})})
        self.tier = tier


class ExtractionError(AssistantError):
    """Base class for content extraction failures."""

    def __init__(self, message: str, *, url: str | None = None, **details: Any) -> None:
        context = {k: v for k, v in details.items() if v is not None}
        if url:
            context["url"] = url
        super().__init__(message, context)
        self.url = url


class ExtractionTimeoutError(ExtractionError):
    """The extraction service did not answer within the allowed time."""


class ExtractionUpstreamError(ExtractionError):
    """The extraction service answered with a non-success status or could not be reached."""

    def __init__(
        self, message: str, *, url: str | None = None, status_code: int | None = None
    ) -> None:
        super().__init__(message, url=url, status_code=status_code)
        self.status_code = status_code


class ExtractionInvalidError(ExtractionError):
    """The extraction service returned an empty or non-text body."""


class ProviderError(AssistantError):
    """Base class for LLM provider failures."""

    def __init__(
        self,
        message: str,
        *,
        provider_id: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        context: dict[str, Any] = dict(details or {})
        if provider_id:
            context["provider_id"] = provider_id
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, context)
        self.provider_id = provider_id
        self.status_code = status_code


class InvalidCredentialsError(ProviderError):
    """HTTP 401/403: the API key was rejected."""


class RateLimitedError(ProviderError):
    """HTTP 429: the provider throttled the request."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        provider_id: str | None = None,
        retry_after: int | None = None,
    ) -> None:
        details = {"retry_after": retry_after} if retry_after is not None else None
        super().__init__(message, provider_id=provider_id, status_code=429, details=details)
        self.retry_after = retry_after


class UpstreamUnavailableError(ProviderError):
    """HTTP 5xx from the provider."""


class UnreachableError(ProviderError):
    """Network failure or timeout before a response was received."""


class MalformedResponseError(ProviderError):
    """The provider answered 2xx but the body does not have the expected shape."""


class ProviderRequestError(ProviderError):
    """Any other non-success status (400, 404, 422, ...)."""
