"""Provider-agnostic LLM dispatch.

Key components:
- ProviderDispatcher: executes one call and classifies failures
- ProtocolDescriptor: request builder + response parser per wire protocol
- PROVIDERS: provider id -> display name, default endpoint, protocol
"""

from page_assistant.adapters.llm.dispatcher import ProviderDispatcher, classify_status
from page_assistant.adapters.llm.protocol import (
    HttpRequestSpec,
    ParsedReply,
    ProtocolDescriptor,
    ProviderProtocol,
)
from page_assistant.adapters.llm.registry import (
    PROTOCOLS,
    PROVIDERS,
    ProviderInfo,
    app_headers,
    default_endpoint,
    provider_info,
    resolve_protocol,
)

__all__ = [
    "PROTOCOLS",
    "PROVIDERS",
    "HttpRequestSpec",
    "ParsedReply",
    "ProtocolDescriptor",
    "ProviderDispatcher",
    "ProviderInfo",
    "ProviderProtocol",
    "app_headers",
    "classify_status",
    "default_endpoint",
    "provider_info",
    "resolve_protocol",
]
