from __future__ import annotations

import pytest

from page_assistant.config import CacheConfig, ProviderSettings, RuntimeConfig, load_config
from page_assistant.config.cache import KeyStrategy, LocalBackend


class TestLoadConfig:
    def test_reads_flat_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHE_STRATEGY", "URL")
        monkeypatch.setenv("CACHE_LOCAL_BACKEND", "redis")
        monkeypatch.setenv("LLM_PROVIDER", " OpenAI ")
        monkeypatch.setenv("DEFAULT_LANGUAGE", "EN")

        config = load_config()

        assert config.cache.strategy is KeyStrategy.URL
        assert config.cache.local_backend is LocalBackend.REDIS
        assert config.provider.provider_id == "openai"
        assert config.runtime.default_language == "en"

    def test_overrides_take_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHE_STRATEGY", "url")

        config = load_config(cache={"CACHE_STRATEGY": "hash"})

        assert config.cache.strategy is KeyStrategy.HASH

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("LLM_MAX_TOKENS", "0"),
            ("LLM_TEMPERATURE", "3"),
            ("LOG_LEVEL", "LOUD"),
            ("DEFAULT_LANGUAGE", "xx"),
            ("CACHE_REMOTE_URL", "not-a-url"),
            ("CACHE_RETENTION_DAYS", "-1"),
            ("CACHE_RETENTION_DAYS", "1e309"),
            ("CACHE_TIER_TIMEOUT_SEC", "nan"),
        ],
    )
    def test_invalid_values_raise(
        self, monkeypatch: pytest.MonkeyPatch, name: str, value: str
    ) -> None:
        monkeypatch.setenv(name, value)

        with pytest.raises(RuntimeError, match="Configuration validation failed"):
            load_config()


class TestSections:
    def test_remote_cache_needs_url_and_key(self) -> None:
        assert not CacheConfig(remote_enabled=True).remote_configured
        assert CacheConfig(
            remote_enabled=True, remote_url="https://db.example.org/", remote_key="anon"
        ).remote_configured

    def test_remote_url_trailing_slash_stripped(self) -> None:
        assert CacheConfig(remote_url="https://db.example.org/").remote_url == (
            "https://db.example.org"
        )

    def test_remote_table_must_be_identifier(self) -> None:
        with pytest.raises(ValueError, match="identifier"):
            CacheConfig(remote_table="content; drop")

    def test_provider_defaults(self) -> None:
        settings = ProviderSettings()

        assert settings.provider_id == "albert"
        assert settings.api_key is None
        assert settings.max_tokens == 500

    def test_api_key_rejects_whitespace(self) -> None:
        with pytest.raises(ValueError, match="invalid characters"):
            ProviderSettings(api_key="abc def ghi jkl")

    def test_model_name_rejects_traversal(self) -> None:
        with pytest.raises(ValueError, match="invalid characters"):
            ProviderSettings(model="../etc/passwd")

    def test_runtime_defaults(self) -> None:
        runtime = RuntimeConfig()

        assert runtime.default_language == "fr"
        assert runtime.allow_missing_content is False
        assert runtime.log_level == "INFO"
