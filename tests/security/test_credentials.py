from __future__ import annotations

import pytest

from page_assistant.config import ProviderSettings
from page_assistant.domain.exceptions.domain_exceptions import (
    InvalidInputError,
    MissingCredentialsError,
    SecretDecodeError,
)
from page_assistant.security.credentials import (
    CredentialResult,
    CredentialSource,
    build_provider_config,
    resolve_api_key,
)


class _ReverseCodec:
    def decode(self, stored: str) -> str:
        return stored[::-1]


class _BrokenCodec:
    def decode(self, stored: str) -> str:
        msg = "bad padding"
        raise ValueError(msg)


class TestResolveApiKey:
    def test_stored_key_is_decoded(self) -> None:
        result = resolve_api_key("0987654321-ks", _ReverseCodec(), default_key="default-key-1")

        assert result.api_key == "sk-1234567890"
        assert result.source is CredentialSource.USER

    def test_default_used_without_stored_key(self) -> None:
        result = resolve_api_key(None, _ReverseCodec(), default_key="default-key-1")

        assert result.api_key == "default-key-1"
        assert result.source is CredentialSource.DEFAULT
        assert result.error is None

    def test_nothing_configured(self) -> None:
        result = resolve_api_key("", _ReverseCodec())

        assert not result.ok
        assert result.source is CredentialSource.NONE
        with pytest.raises(MissingCredentialsError):
            result.unwrap()

    def test_decode_failure_is_explicit(self) -> None:
        result = resolve_api_key("garbage", _BrokenCodec(), default_key="default-key-1")

        assert result.api_key is None
        assert isinstance(result.error, SecretDecodeError)
        assert result.error.details == {"error_type": "ValueError"}
        with pytest.raises(SecretDecodeError):
            result.unwrap()

    def test_decode_failure_can_fall_back_to_default(self) -> None:
        result = resolve_api_key(
            "garbage", _BrokenCodec(), default_key="default-key-1", fallback_on_decode_error=True
        )

        assert result.api_key == "default-key-1"
        assert result.source is CredentialSource.DEFAULT
        assert result.error is not None

    def test_short_decoded_key_rejected(self) -> None:
        result = resolve_api_key("trohs", _ReverseCodec())

        assert isinstance(result.error, SecretDecodeError)
        assert "shorter than" in result.error.message


class TestBuildProviderConfig:
    def test_openrouter_gets_default_endpoint_and_app_headers(self) -> None:
        settings = ProviderSettings(
            provider_id="openrouter",
            model="openai/gpt-4o-mini",
            http_referer="https://example.org",
        )
        credential = CredentialResult("or-key-1234567", CredentialSource.USER)

        config = build_provider_config(settings, credential)

        assert config.endpoint == "https://openrouter.ai/api/v1"
        assert config.api_key == "or-key-1234567"
        assert config.extra_headers == {
            "HTTP-Referer": "https://example.org",
            "X-Title": "Page Assistant",
        }

    def test_explicit_arguments_override_settings(self) -> None:
        credential = CredentialResult("sk-key-1234567", CredentialSource.DEFAULT)

        config = build_provider_config(
            ProviderSettings(),
            credential,
            provider_id="Anthropic",
            model="claude-3-5-haiku-20241022",
        )

        assert config.provider_id == "anthropic"
        assert config.endpoint == "https://api.anthropic.com/v1"
        assert config.model == "claude-3-5-haiku-20241022"
        assert config.extra_headers == {}

    def test_custom_provider_requires_endpoint(self) -> None:
        credential = CredentialResult("sk-key-1234567", CredentialSource.USER)

        with pytest.raises(InvalidInputError, match="No endpoint"):
            build_provider_config(ProviderSettings(provider_id="custom"), credential)

    def test_missing_key_raises(self) -> None:
        with pytest.raises(MissingCredentialsError):
            build_provider_config(
                ProviderSettings(), CredentialResult(None, CredentialSource.NONE)
            )

    def test_invalid_endpoint_override(self) -> None:
        credential = CredentialResult("sk-key-1234567", CredentialSource.USER)

        with pytest.raises(InvalidInputError):
            build_provider_config(ProviderSettings(), credential, endpoint="ftp://nope")
