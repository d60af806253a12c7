"""Provider protocol descriptors.

A protocol is a pure pair of functions: one turns ``(prompt, system_prompt,
config)`` into an HTTP request, the other turns the decoded JSON body back into
answer text plus optional token usage. Descriptors hold no state and are shared
process-wide.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from page_assistant.domain.models.responses import TokenUsage

if TYPE_CHECKING:
    from collections.abc import Callable

    from page_assistant.config import ProviderConfig

REDACTED = "[REDACTED]"


class ProviderProtocol(StrEnum):
    OPENAI_COMPATIBLE = "openai-compatible"
    ANTHROPIC = "anthropic"
    HUGGINGFACE = "huggingface"


@dataclass(frozen=True, slots=True)
class HttpRequestSpec:
    """Everything needed to issue one provider call."""

    method: str
    url: str
    headers: dict[str, str]
    body: dict[str, Any]


@dataclass(frozen=True, slots=True)
class ParsedReply:
    answer: str
    usage: TokenUsage | None = None
    model: str | None = None


@dataclass(frozen=True, slots=True)
class ProtocolDescriptor:
    """Request builder and response parser for one wire protocol.

    ``parse_response`` raises ``MalformedResponseError`` when the body does not
    have the expected shape. ``secret_headers`` lists header names that must be
    redacted before logging.
    """

    protocol: ProviderProtocol
    build_request: Callable[[str, str, ProviderConfig], HttpRequestSpec]
    parse_response: Callable[[Any], ParsedReply]
    secret_headers: frozenset[str] = field(default_factory=frozenset)

    def redact_headers(self, headers: dict[str, str]) -> dict[str, str]:
        secret = {name.lower() for name in self.secret_headers}
        return {
            name: (REDACTED if name.lower() in secret else value)
            for name, value in headers.items()
        }


def token_count(value: Any) -> int | None:
    """Return ``value`` as a non-negative int, or None when it is not a count."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int) and value >= 0:
        return value
    if isinstance(value, float) and value.is_integer() and value >= 0:
        return int(value)
    return None
