from __future__ import annotations

import pytest

from page_assistant.adapters.llm.protocol import ProviderProtocol
from page_assistant.adapters.llm.registry import (
    PROVIDERS,
    app_headers,
    default_endpoint,
    provider_info,
    resolve_protocol,
)


def test_known_providers_resolve_to_their_protocol() -> None:
    assert resolve_protocol("anthropic").protocol is ProviderProtocol.ANTHROPIC
    assert resolve_protocol("huggingface").protocol is ProviderProtocol.HUGGINGFACE
    for provider_id in ("openrouter", "groq", "albert", "openai", "custom"):
        assert resolve_protocol(provider_id).protocol is ProviderProtocol.OPENAI_COMPATIBLE


def test_unknown_provider_defaults_to_openai_compatible() -> None:
    assert provider_info("mistral-gateway") is None
    assert resolve_protocol("mistral-gateway").protocol is ProviderProtocol.OPENAI_COMPATIBLE


def test_lookup_is_case_insensitive() -> None:
    info = provider_info(" Groq ")

    assert info is not None
    assert info.display_name == "Groq"


def test_default_endpoints() -> None:
    assert default_endpoint("openrouter") == "https://openrouter.ai/api/v1"
    assert default_endpoint("albert") == "https://albert.api.etalab.gouv.fr/v1"
    assert default_endpoint("custom") is None
    assert default_endpoint("unknown") is None


def test_app_headers_only_for_openrouter() -> None:
    assert app_headers(
        "openrouter", http_referer="https://example.org", app_title="Page Assistant"
    ) == {"HTTP-Referer": "https://example.org", "X-Title": "Page Assistant"}
    assert app_headers("openai", http_referer="https://example.org", app_title="X") == {}


def test_registry_is_read_only() -> None:
    assert "openai" in PROVIDERS
    with pytest.raises(TypeError):
        PROVIDERS["new"] = PROVIDERS["openai"]  # type: ignore[index]
