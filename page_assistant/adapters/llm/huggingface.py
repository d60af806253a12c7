"""Hugging Face Inference API text generation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from page_assistant.adapters.llm.protocol import (
    HttpRequestSpec,
    ParsedReply,
    ProtocolDescriptor,
    ProviderProtocol,
)
from page_assistant.domain.exceptions.domain_exceptions import MalformedResponseError

if TYPE_CHECKING:
    from page_assistant.config import ProviderConfig


def build_request(prompt: str, system_prompt: str, config: ProviderConfig) -> HttpRequestSpec:
    """Build a ``POST {endpoint}/{model}`` call with a single ``inputs`` string."""
    inputs = f"{system_prompt}\n\n{prompt}" if system_prompt else prompt
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "Authorization": f"Bearer {config.api_key}",
        **config.extra_headers,
    }
    body = {
        "inputs": inputs,
        "parameters": {
            "max_new_tokens": config.max_tokens,
            "temperature": config.temperature,
            "top_p": config.top_p,
            "return_full_text": False,
        },
    }
    return HttpRequestSpec("POST", f"{config.endpoint}/{config.model}", headers, body)


def parse_response(data: Any) -> ParsedReply:
    """Accept ``[{"generated_text": ...}]`` or ``{"generated_text": ...}``. No usage is reported."""
    item = data[0] if isinstance(data, list) and data else data
    text = item.get("generated_text") if isinstance(item, dict) else None
    if not isinstance(text, str):
        msg = "Response has no generated_text"
        raise MalformedResponseError(msg)
    return ParsedReply(answer=text)


HUGGINGFACE = ProtocolDescriptor(
    protocol=ProviderProtocol.HUGGINGFACE,
    build_request=build_request,
    parse_response=parse_response,
    secret_headers=frozenset({"Authorization"}),
)
