"""Anthropic Messages API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from page_assistant.adapters.llm.protocol import (
    HttpRequestSpec,
    ParsedReply,
    ProtocolDescriptor,
    ProviderProtocol,
    token_count,
)
from page_assistant.domain.exceptions.domain_exceptions import MalformedResponseError
from page_assistant.domain.models.responses import TokenUsage

if TYPE_CHECKING:
    from page_assistant.config import ProviderConfig

ANTHROPIC_VERSION = "2023-06-01"


def build_request(prompt: str, system_prompt: str, config: ProviderConfig) -> HttpRequestSpec:
    """Build a ``/messages`` call.

    The system prompt goes in the top-level ``system`` field instead of the
    messages array, and the key is sent in ``x-api-key`` rather than as a bearer
    token.
    """
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "x-api-key": config.api_key,
        "anthropic-version": ANTHROPIC_VERSION,
        **config.extra_headers,
    }
    body: dict[str, Any] = {
        "model": config.model,
        "messages": [{"role": "user", "content": prompt}],
        "max_tokens": config.max_tokens,
        # Anthropic caps temperature at 1.0
        "temperature": min(config.temperature, 1.0),
        "top_p": config.top_p,
    }
    if system_prompt:
        body["system"] = system_prompt
    return HttpRequestSpec("POST", f"{config.endpoint}/messages", headers, body)


def parse_response(data: Any) -> ParsedReply:
    """Join the ``text`` blocks of ``content`` and read ``usage``."""
    blocks = data.get("content") if isinstance(data, dict) else None
    if not isinstance(blocks, list) or not blocks:
        msg = "Response has no content blocks"
        raise MalformedResponseError(msg)

    texts = [
        block["text"]
        for block in blocks
        if isinstance(block, dict)
        and block.get("type", "text") == "text"
        and isinstance(block.get("text"), str)
    ]
    if not texts:
        msg = "Response has no text content block"
        raise MalformedResponseError(msg, details={"stop_reason": data.get("stop_reason")})

    usage = None
    raw_usage = data.get("usage")
    if isinstance(raw_usage, dict):
        prompt_tokens = token_count(raw_usage.get("input_tokens"))
        completion_tokens = token_count(raw_usage.get("output_tokens"))
        total = (
            prompt_tokens + completion_tokens
            if prompt_tokens is not None and completion_tokens is not None
            else None
        )
        usage = TokenUsage(
            prompt_tokens=prompt_tokens, completion_tokens=completion_tokens, total_tokens=total
        )
    model = data.get("model") if isinstance(data.get("model"), str) else None
    return ParsedReply(answer="".join(texts), usage=usage, model=model)


ANTHROPIC = ProtocolDescriptor(
    protocol=ProviderProtocol.ANTHROPIC,
    build_request=build_request,
    parse_response=parse_response,
    secret_headers=frozenset({"x-api-key"}),
)
