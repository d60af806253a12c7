"""OpenAI-compatible chat completions (OpenAI, OpenRouter, Groq, Albert, custom)."""

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


def build_request(prompt: str, system_prompt: str, config: ProviderConfig) -> HttpRequestSpec:
    messages: list[dict[str, str]] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})

    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "Authorization": f"Bearer {config.api_key}",
        **config.extra_headers,
    }
    body = {
        "model": config.model,
        "messages": messages,
        "max_tokens": config.max_tokens,
        "temperature": config.temperature,
        "top_p": config.top_p,
    }
    return HttpRequestSpec("POST", f"{config.endpoint}/chat/completions", headers, body)


def _message_text(content: Any) -> str | None:
    if isinstance(content, str):
        return content
    # Some gateways return content as a list of typed parts.
    if isinstance(content, list):
        parts = [
            part.get("text")
            for part in content
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ]
        return "".join(parts) if parts else None
    return None


def parse_response(data: Any) -> ParsedReply:
    """Read ``choices[0].message.content`` and the ``usage`` block."""
    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        msg = "Response has no choices"
        raise MalformedResponseError(msg)

    message = choices[0].get("message")
    text = _message_text(message.get("content")) if isinstance(message, dict) else None
    if text is None:
        msg = "Response choice has no message content"
        raise MalformedResponseError(msg, details={"finish_reason": choices[0].get("finish_reason")})

    usage = None
    raw_usage = data.get("usage")
    if isinstance(raw_usage, dict):
        usage = TokenUsage(
            prompt_tokens=token_count(raw_usage.get("prompt_tokens")),
            completion_tokens=token_count(raw_usage.get("completion_tokens")),
            total_tokens=token_count(raw_usage.get("total_tokens")),
        )
    model = data.get("model") if isinstance(data.get("model"), str) else None
    return ParsedReply(answer=text, usage=usage, model=model)


OPENAI_COMPATIBLE = ProtocolDescriptor(
    protocol=ProviderProtocol.OPENAI_COMPATIBLE,
    build_request=build_request,
    parse_response=parse_response,
    secret_headers=frozenset({"Authorization"}),
)
