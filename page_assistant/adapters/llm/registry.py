"""Provider table: provider id -> display name, default endpoint and wire protocol.

Adding a provider is a table insertion. Ids that are not in the table are
treated as OpenAI-compatible, since most hosted APIs accept that format.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from page_assistant.adapters.llm.anthropic import ANTHROPIC
from page_assistant.adapters.llm.huggingface import HUGGINGFACE
from page_assistant.adapters.llm.openai_compatible import OPENAI_COMPATIBLE
from page_assistant.adapters.llm.protocol import ProtocolDescriptor, ProviderProtocol

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProviderInfo:
    provider_id: str
    display_name: str
    default_endpoint: str
    protocol: ProviderProtocol
    sends_app_headers: bool = False


PROTOCOLS: Mapping[ProviderProtocol, ProtocolDescriptor] = MappingProxyType(
    {
        ProviderProtocol.OPENAI_COMPATIBLE: OPENAI_COMPATIBLE,
        ProviderProtocol.ANTHROPIC: ANTHROPIC,
        ProviderProtocol.HUGGINGFACE: HUGGINGFACE,
    }
)

PROVIDERS: Mapping[str, ProviderInfo] = MappingProxyType(
    {
        info.provider_id: info
        for info in (
            ProviderInfo(
                "openrouter",
                "OpenRouter",
                "https://openrouter.ai/api/v1",
                ProviderProtocol.OPENAI_COMPATIBLE,
                sends_app_headers=True,
            ),
            ProviderInfo(
                "groq", "Groq", "https://api.groq.com/openai/v1", ProviderProtocol.OPENAI_COMPATIBLE
            ),
            ProviderInfo(
                "huggingface",
                "Hugging Face",
                "https://api-inference.huggingface.co/models",
                ProviderProtocol.HUGGINGFACE,
            ),
            ProviderInfo(
                "albert",
                "Albert",
                "https://albert.api.etalab.gouv.fr/v1",
                ProviderProtocol.OPENAI_COMPATIBLE,
            ),
            ProviderInfo(
                "openai", "OpenAI", "https://api.openai.com/v1", ProviderProtocol.OPENAI_COMPATIBLE
            ),
            ProviderInfo(
                "anthropic", "Anthropic", "https://api.anthropic.com/v1", ProviderProtocol.ANTHROPIC
            ),
            ProviderInfo("custom", "Custom", "", ProviderProtocol.OPENAI_COMPATIBLE),
        )
    }
)


def provider_info(provider_id: str) -> ProviderInfo | None:
    return PROVIDERS.get(str(provider_id or "").strip().lower())


def resolve_protocol(provider_id: str) -> ProtocolDescriptor:
    """Return the protocol descriptor for ``provider_id``; never fails."""
    info = provider_info(provider_id)
    if info is None:
        logger.debug("provider_unknown_defaulting_openai", extra={"provider_id": provider_id})
        return PROTOCOLS[ProviderProtocol.OPENAI_COMPATIBLE]
    return PROTOCOLS[info.protocol]


def default_endpoint(provider_id: str) -> str | None:
    info = provider_info(provider_id)
    return info.default_endpoint if info is not None and info.default_endpoint else None


def app_headers(
    provider_id: str, *, http_referer: str | None = None, app_title: str | None = None
) -> dict[str, str]:
    """Attribution headers some gateways (OpenRouter) expect on every call."""
    info = provider_info(provider_id)
    if info is None or not info.sends_app_headers:
        return {}
    headers: dict[str, str] = {}
    if http_referer:
        headers["HTTP-Referer"] = http_referer
    if app_title:
        headers["X-Title"] = app_title
    return headers
