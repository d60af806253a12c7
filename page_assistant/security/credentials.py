"""Turn stored credentials into a per-request provider configuration.

Decoding happens here, before the pipeline runs, and the outcome is an explicit
:class:`CredentialResult` rather than a silently cleared key. The stored value
is opaque; a :class:`SecretCodec` supplied by the host knows how to decode it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from pydantic import ValidationError

from page_assistant.adapters.llm.registry import app_headers, default_endpoint
from page_assistant.config import ProviderConfig
from page_assistant.domain.exceptions.domain_exceptions import (
    InvalidInputError,
    MissingCredentialsError,
    SecretDecodeError,
)

if TYPE_CHECKING:
    from page_assistant.config import ProviderSettings

logger = logging.getLogger(__name__)

MIN_API_KEY_LENGTH = 10


class SecretCodec(Protocol):
    def decode(self, stored: str) -> str:
        """Return the plaintext for ``stored``; raise on any failure."""
        ...


class CredentialSource(StrEnum):
    USER = "user"
    DEFAULT = "default"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class CredentialResult:
    """Outcome of resolving an API key.

    ``error`` is set when a stored key existed but could not be decoded, even if
    a default key was substituted.
    """

    api_key: str | None
    source: CredentialSource
    error: SecretDecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.api_key is not None

    def unwrap(self) -> str:
        if self.api_key is not None:
            return self.api_key
        if self.error is not None:
            raise self.error
        msg = "API key not configured"
        raise MissingCredentialsError(msg)


def _decode(stored: str, codec: SecretCodec) -> str:
    try:
        plaintext = codec.decode(stored)
    except Exception as exc:
        msg = "Stored API key could not be decoded"
        raise SecretDecodeError(msg, {"error_type": type(exc).__name__}) from exc

    if not isinstance(plaintext, str):
        msg = "Decoded API key is not text"
        raise SecretDecodeError(msg)
    plaintext = plaintext.strip()
    if len(plaintext) < MIN_API_KEY_LENGTH:
        msg = f"Decoded API key is shorter than {MIN_API_KEY_LENGTH} characters"
        raise SecretDecodeError(msg)
    return plaintext


def resolve_api_key(
    stored: str | None,
    codec: SecretCodec,
    *,
    default_key: str | None = None,
    fallback_on_decode_error: bool = False,
) -> CredentialResult:
    """Resolve the API key to use for one request.

    Args:
        stored: The user's stored, encoded key, if any.
        codec: Decoder for ``stored``.
        default_key: Compiled-in or environment key used when the user has none.
        fallback_on_decode_error: Substitute ``default_key`` when ``stored``
            exists but fails to decode. Off by default because it silently
            changes which account is billed.

    Returns:
        The resolution outcome; never raises for decode failures.
    """
    default = (default_key or "").strip() or None
    if not stored:
        if default is None:
            return CredentialResult(None, CredentialSource.NONE)
        return CredentialResult(default, CredentialSource.DEFAULT)

    try:
        return CredentialResult(_decode(stored, codec), CredentialSource.USER)
    except SecretDecodeError as exc:
        logger.warning("stored_api_key_decode_failed", extra={"error": exc.message})
        if fallback_on_decode_error and default is not None:
            logger.warning("stored_api_key_replaced_by_default")
            return CredentialResult(default, CredentialSource.DEFAULT, error=exc)
        return CredentialResult(None, CredentialSource.NONE, error=exc)


def build_provider_config(
    settings: ProviderSettings,
    credential: CredentialResult,
    *,
    provider_id: str | None = None,
    endpoint: str | None = None,
    model: str | None = None,
) -> ProviderConfig:
    """Combine provider settings and a resolved key into a per-request config.

    Explicit arguments override ``settings``. The endpoint falls back to the
    provider's registered default.

    Raises:
        MissingCredentialsError: No key was resolved.
        SecretDecodeError: The stored key failed to decode and no fallback applied.
        InvalidInputError: No endpoint is known or a value fails validation.
    """
    api_key = credential.unwrap()
    provider = (provider_id or settings.provider_id).strip().lower()
    resolved_endpoint = endpoint or settings.endpoint or default_endpoint(provider)
    if not resolved_endpoint:
        msg = f"No endpoint configured for provider {provider!r}"
        raise InvalidInputError(msg, {"provider_id": provider})

    try:
        return ProviderConfig(
            provider_id=provider,
            endpoint=resolved_endpoint,
            model=model or settings.model,
            api_key=api_key,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            top_p=settings.top_p,
            extra_headers=app_headers(
                provider, http_referer=settings.http_referer, app_title=settings.app_title
            ),
        )
    except ValidationError as exc:
        msg = f"Invalid provider configuration: {exc.errors()[0].get('msg', 'invalid value')}"
        raise InvalidInputError(msg, {"provider_id": provider}) from exc
