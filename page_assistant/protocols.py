"""Protocol definitions for the collaborators of the question pipeline.

The use case depends on these contracts rather than on concrete adapters, so
tests can substitute fakes and hosts can plug in their own storage.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from page_assistant.config import ProviderConfig
    from page_assistant.domain.models.chat_turn import ChatTurn
    from page_assistant.domain.models.responses import ProviderReply


class ContentFetcher(Protocol):
    """Turns a page URL into extracted text."""

    async def fetch(self, url: str) -> str:
        """Fetch page text or raise an ``ExtractionError``."""
        ...


class ContentCache(Protocol):
    """Keyed text cache whose misses and failures both read as None."""

    async def get(self, key: str) -> str | None: ...

    async def put(
        self, key: str, value: str, ttl_seconds: float | None = None, *, url: str | None = None
    ) -> None: ...


class LLMDispatcher(Protocol):
    """Sends one prompt to one provider."""

    async def send(
        self, prompt: str, system_prompt: str, config: ProviderConfig
    ) -> ProviderReply: ...


class ChatHistorySink(Protocol):
    """Receives answered turns for storage elsewhere. Called fire-and-forget."""

    async def record(self, turn: ChatTurn) -> None: ...


class NullChatHistorySink:
    """Sink that drops every turn."""

    async def record(self, turn: ChatTurn) -> None:
        return None
