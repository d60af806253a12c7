"""Use case for answering a question about a web page.

Orchestrates the pipeline from URL to answer:
1. Derive the content-addressed cache key for the page
2. Read the page text from the cache, extracting and caching it on a miss
3. Build the locale- and site-aware prompt
4. Send it to the configured provider
5. Split the reply into answer and follow-up suggestions
6. Hand the turn to the chat history sink in the background
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from page_assistant.adapters.content.content_extractor import ContentExtractor, extract_metadata
from page_assistant.adapters.llm.dispatcher import ProviderDispatcher
from page_assistant.application.services.response_synthesizer import (
    ResponseSynthesizer,
    fallback_suggestions,
)
from page_assistant.core.async_utils import raise_if_cancelled
from page_assistant.core.lang import normalize_locale
from page_assistant.core.site_types import detect_site_type, normalize_site_type
from page_assistant.core.url_utils import hostname_of, validate_absolute_url
from page_assistant.domain.exceptions.domain_exceptions import ExtractionError, InvalidInputError
from page_assistant.domain.models.chat_turn import ChatTurn
from page_assistant.domain.models.page_context import PageContext
from page_assistant.domain.models.responses import AssistantReply
from page_assistant.infrastructure.cache.keys import HashKeyDeriver
from page_assistant.infrastructure.cache.tiered_cache import TieredContentCache
from page_assistant.prompts.builder import PromptBuilder
from page_assistant.protocols import NullChatHistorySink

if TYPE_CHECKING:
    from page_assistant.config import AssistantConfig, ProviderConfig, RuntimeConfig
    from page_assistant.protocols import (
        ChatHistorySink,
        ContentCache,
        ContentFetcher,
        LLMDispatcher,
    )

logger = logging.getLogger(__name__)

MAX_QUESTION_LENGTH = 4000


@dataclass
class AskQuestionCommand:
    """A user's question about the page at ``url``."""

    url: str
    question: str
    title: str = ""
    language: str | None = None
    site_type: str | None = None


@dataclass(frozen=True)
class PageText:
    content: str | None
    cache_hit: bool


class AnswerQuestionUseCase:
    """Answer questions about web pages.

    Collaborators are injected; :meth:`from_config` wires the default adapters
    from an :class:`AssistantConfig`. The instance holds no per-request state
    apart from pending history tasks, so one instance serves concurrent
    requests.
    """

    def __init__(
        self,
        *,
        cache: ContentCache,
        key_deriver: HashKeyDeriver,
        content_fetcher: ContentFetcher,
        dispatcher: LLMDispatcher,
        runtime: RuntimeConfig,
        prompt_builder: PromptBuilder | None = None,
        synthesizer: ResponseSynthesizer | None = None,
        history_sink: ChatHistorySink | None = None,
        sweep_interval_sec: float | None = None,
    ) -> None:
        self._cache = cache
        self._key_deriver = key_deriver
        self._content_fetcher = content_fetcher
        self._dispatcher = dispatcher
        self._runtime = runtime
        self._prompt_builder = prompt_builder or PromptBuilder()
        self._synthesizer = synthesizer or ResponseSynthesizer()
        self._history_sink = history_sink or NullChatHistorySink()
        self._background: set[asyncio.Task[None]] = set()
        self._sweep_interval = sweep_interval_sec
        self._sweep_task: asyncio.Task[None] | None = None

    @classmethod
    def from_config(
        cls, config: AssistantConfig, *, history_sink: ChatHistorySink | None = None
    ) -> AnswerQuestionUseCase:
        runtime = config.runtime
        return cls(
            cache=TieredContentCache.from_config(config.cache),
            key_deriver=HashKeyDeriver(config.cache.strategy),
            content_fetcher=ContentExtractor.from_config(
                config.extraction, debug_payloads=runtime.debug_payloads
            ),
            dispatcher=ProviderDispatcher.from_settings(
                config.provider,
                debug_payloads=runtime.debug_payloads,
                log_truncate_length=runtime.log_truncate_length,
            ),
            runtime=runtime,
            history_sink=history_sink,
            sweep_interval_sec=config.cache.sweep_interval_sec,
        )

    def start_cache_sweep(self) -> None:
        """Start the periodic expiry sweep on the running loop.

        Idempotent. A use case built without ``sweep_interval_sec`` or over a
        cache that cannot sweep never starts one. Called on each page load.
        """
        if self._sweep_interval is None or self._sweep_task is not None:
            return
        run_sweep = getattr(self._cache, "run_periodic_sweep", None)
        if run_sweep is None:
            return
        self._sweep_task = asyncio.create_task(run_sweep(self._sweep_interval))
        logger.info("cache_sweep_started", extra={"interval_sec": self._sweep_interval})

    async def aclose(self) -> None:
        """Stop the cache sweep, wait for pending history writes and close owned clients."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None
        await self.drain()
        for collaborator in (self._cache, self._content_fetcher, self._dispatcher):
            close = getattr(collaborator, "aclose", None)
            if close is not None:
                await close()

    async def drain(self) -> None:
        """Wait until every scheduled history write has finished."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    def _page_context(
        self, url: str, title: str, language: str | None, site_type: str | None
    ) -> PageContext:
        try:
            lang = normalize_locale(language or self._runtime.default_language)
        except ValueError as exc:
            raise InvalidInputError(str(exc), {"locale": str(language)}) from exc
        return PageContext(
            title=(title or "").strip(),
            site_type=normalize_site_type(site_type) if site_type else detect_site_type(url),
            language=lang,
            domain=hostname_of(url),
        )

    @staticmethod
    def _validate_url(url: str) -> str:
        try:
            return validate_absolute_url(url)
        except ValueError as exc:
            raise InvalidInputError(str(exc), {"url": str(url)[:100]}) from exc

    async def load_page_text(self, url: str, title: str = "", *, required: bool = True) -> PageText:
        """Return the page text from the cache, extracting it on a miss.

        Args:
            url: Absolute page URL.
            title: Page title, part of the cache key under the default strategy.
            required: Raise extraction errors instead of returning no content.
                Ignored (treated as False) when ``allow_missing_content`` is set.

        Raises:
            ExtractionError: Both cache tiers missed and extraction failed.
        """
        self.start_cache_sweep()
        key = self._key_deriver.derive(url, title)
        cached = await self._cache.get(key)
        if cached is not None:
            return PageText(cached, cache_hit=True)

        try:
            content = await self._content_fetcher.fetch(url)
        except ExtractionError as exc:
            if required and not self._runtime.allow_missing_content:
                raise
            logger.warning(
                "page_text_unavailable",
                extra={"url": url[:100], "error": exc.message, "error_type": type(exc).__name__},
            )
            return PageText(None, cache_hit=False)

        await self._cache.put(key, content, url=url)
        return PageText(content, cache_hit=False)

    async def execute(
        self, command: AskQuestionCommand, provider_config: ProviderConfig
    ) -> AssistantReply:
        """Answer ``command.question`` about ``command.url``.

        Raises:
            InvalidInputError: Bad URL, locale or empty question; raised before any I/O.
            ExtractionError: Page text unavailable from cache and extraction.
            ProviderError: The provider call failed.
        """
        url = self._validate_url(command.url)
        question = (command.question or "").strip()
        if not question:
            msg = "Question must not be empty"
            raise InvalidInputError(msg)
        if len(question) > MAX_QUESTION_LENGTH:
            msg = f"Question exceeds {MAX_QUESTION_LENGTH} characters"
            raise InvalidInputError(msg)
        context = self._page_context(url, command.title, command.language, command.site_type)

        logger.info(
            "answer_question_started",
            extra={
                "domain": context.domain,
                "language": context.language,
                "site_type": context.site_type,
                "provider_id": provider_config.provider_id,
            },
        )

        page = await self.load_page_text(url, context.title)
        if page.content and not context.title:
            context = PageContext(
                title=extract_metadata(page.content).title,
                site_type=context.site_type,
                language=context.language,
                domain=context.domain,
            )

        prompt = self._prompt_builder.build(question, page.content, context)
        reply = await self._dispatcher.send(prompt.user, prompt.system, provider_config)
        synthesized = self._synthesizer.split(reply.answer, context.language, context.site_type)

        logger.info(
            "answer_question_completed",
            extra={
                "domain": context.domain,
                "cache_hit": page.cache_hit,
                "suggestions": len(synthesized.suggestions),
                "latency_ms": reply.latency_ms,
            },
        )

        self._schedule_history(
            ChatTurn(
                url=url,
                question=question,
                answer=synthesized.answer,
                suggestions=synthesized.suggestions,
                language=context.language,
                site_type=context.site_type,
                provider_id=provider_config.provider_id,
            )
        )
        return AssistantReply(
            answer=synthesized.answer,
            suggestions=synthesized.suggestions,
            site_type=context.site_type,
            language=context.language,
            cache_hit=page.cache_hit,
            usage=reply.usage,
        )

    async def suggest_questions(
        self,
        url: str,
        provider_config: ProviderConfig,
        *,
        title: str = "",
        language: str | None = None,
        site_type: str | None = None,
    ) -> tuple[str, ...]:
        """Ask the provider for four questions specific to the page.

        Page text is optional here: extraction failures are logged and the
        prompt is built from the title alone. Falls back to the static set when
        the reply holds no usable line.
        """
        url = self._validate_url(url)
        context = self._page_context(url, title, language, site_type)
        page = await self.load_page_text(url, context.title, required=False)

        prompt = self._prompt_builder.build_suggestions_prompt(page.content, context)
        reply = await self._dispatcher.send(prompt.user, prompt.system, provider_config)
        suggestions = self._synthesizer.parse_suggestion_lines(reply.answer)
        if not suggestions:
            logger.info("page_suggestions_empty", extra={"domain": context.domain})
            return fallback_suggestions(context.site_type, context.language)
        return suggestions

    def _schedule_history(self, turn: ChatTurn) -> None:
        task = asyncio.create_task(self._record_history(turn))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _record_history(self, turn: ChatTurn) -> None:
        try:
            await self._history_sink.record(turn)
        except Exception as exc:
            raise_if_cancelled(exc)
            logger.warning(
                "chat_history_record_failed",
                exc_info=True,
                extra={"url": turn.url[:100], "error": str(exc)},
            )
