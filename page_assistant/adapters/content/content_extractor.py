"""Page-to-text extraction through a reader service (r.jina.ai style).

The service takes the percent-encoded page URL as its path and answers with the
page rendered as plain markdown text. One request per call; retries are the
caller's business.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx

from page_assistant.core.http_utils import ResponseSizeError, validate_response_size
from page_assistant.core.logging_utils import truncate_log_content
from page_assistant.core.url_utils import validate_absolute_url
from page_assistant.domain.exceptions.domain_exceptions import (
    ExtractionInvalidError,
    ExtractionTimeoutError,
    ExtractionUpstreamError,
    InvalidInputError,
)

if TYPE_CHECKING:
    from page_assistant.config import ExtractionConfig

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_LENGTH = 3000
_LONG_CODE_BLOCK_RE = re.compile(r"```[\s\S]{500,}?```")
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_H1_RE = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_HEADING_RE = re.compile(r"^#+\s+(.+)$", re.MULTILINE)
_CODE_BLOCK_RE = re.compile(r"```[\s\S]*?```")
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

# Characters encodeURIComponent leaves alone besides the unreserved set.
_URL_SAFE_CHARS = "!*'()"


@dataclass(frozen=True, slots=True)
class PageLink:
    text: str
    url: str


@dataclass(frozen=True, slots=True)
class PageMetadata:
    """Structural facts about extracted markdown."""

    title: str = ""
    headings: tuple[str, ...] = ()
    links: tuple[PageLink, ...] = field(default_factory=tuple)
    code_blocks: int = 0
    word_count: int = 0


def extract_metadata(content: str | None) -> PageMetadata:
    """Collect title, headings, links, code block count and word count.

    The title is the first level-one heading, or the first line (up to 100
    characters) when the page has none.
    """
    if not content:
        return PageMetadata()

    title_match = _H1_RE.search(content)
    title = title_match.group(1).strip() if title_match else content.split("\n", 1)[0][:100]

    return PageMetadata(
        title=title,
        headings=tuple(match.group(1).strip() for match in _HEADING_RE.finditer(content)),
        links=tuple(PageLink(text=m.group(1), url=m.group(2)) for m in _LINK_RE.finditer(content)),
        code_blocks=len(_CODE_BLOCK_RE.findall(content)),
        word_count=len(content.split()),
    )


def clean_content(content: str | None, max_length: int = DEFAULT_CONTENT_LENGTH) -> str:
    """Collapse blank-line runs, drop very long code blocks and truncate.

    Code blocks of 500+ characters are replaced by a placeholder only when the
    text is more than twice ``max_length``. Truncated output ends with ``...``.
    """
    if not content:
        return ""
    if max_length <= 0:
        msg = "max_length must be positive"
        raise ValueError(msg)

    cleaned = _BLANK_RUN_RE.sub("\n\n", content)
    if len(cleaned) > max_length * 2:
        cleaned = _LONG_CODE_BLOCK_RE.sub("```\n[Long code block omitted]\n```", cleaned)
    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length] + "..."
    return cleaned


class ContentExtractor:
    """Async client for the reader service."""

    def __init__(
        self,
        base_url: str = "https://r.jina.ai",
        *,
        timeout_sec: float = 30.0,
        user_agent: str = "PageAssistant/1.0",
        max_response_size_mb: int = 20,
        debug_payloads: bool = False,
        log_truncate_length: int = 1000,
    ) -> None:
        if timeout_sec <= 0:
            msg = "timeout_sec must be positive"
            raise ValueError(msg)

        self._base_url = base_url.rstrip("/")
        self._timeout_sec = float(timeout_sec)
        self._max_response_size_bytes = int(max_response_size_mb) * 1024 * 1024
        self._debug_payloads = debug_payloads
        self._log_truncate_length = log_truncate_length
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_sec),
            headers={"Accept": "text/plain", "User-Agent": user_agent},
            follow_redirects=True,
        )

    @classmethod
    def from_config(
        cls, cfg: ExtractionConfig, *, debug_payloads: bool = False
    ) -> ContentExtractor:
        return cls(
            cfg.base_url,
            timeout_sec=cfg.timeout_sec,
            user_agent=cfg.user_agent,
            max_response_size_mb=cfg.max_response_size_mb,
            debug_payloads=debug_payloads,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def request_url(self, url: str) -> str:
        """Return the reader-service URL for ``url``."""
        return f"{self._base_url}/{quote(url, safe=_URL_SAFE_CHARS)}"

    async def fetch(self, url: str) -> str:
        """Fetch ``url`` through the reader service and return its text.

        Raises:
            InvalidInputError: ``url`` is not an absolute http(s) URL.
            ExtractionTimeoutError: No answer within the configured timeout.
            ExtractionUpstreamError: Non-2xx status or transport failure.
            ExtractionInvalidError: Empty, oversized or non-text body.
        """
        try:
            url = validate_absolute_url(url)
        except ValueError as exc:
            raise InvalidInputError(str(exc), {"url": str(url)[:100]}) from exc

        logger.debug("extraction_request", extra={"url": url[:100]})
        started = time.perf_counter()
        try:
            # httpx limits each phase; wait_for bounds the whole request
            response = await asyncio.wait_for(
                self._client.get(self.request_url(url)), timeout=self._timeout_sec
            )
        except (httpx.TimeoutException, TimeoutError) as exc:
            logger.warning("extraction_timeout", extra={"url": url[:100]})
            msg = "Extraction service request timed out"
            raise ExtractionTimeoutError(msg, url=url) from exc
        except httpx.HTTPError as exc:
            logger.warning("extraction_transport_error", extra={"url": url[:100], "error": str(exc)})
            msg = f"Extraction service unreachable: {exc}"
            raise ExtractionUpstreamError(msg, url=url) from exc

        latency_ms = int((time.perf_counter() - started) * 1000)
        if not response.is_success:
            logger.warning(
                "extraction_upstream_error",
                extra={"url": url[:100], "status": response.status_code, "latency_ms": latency_ms},
            )
            msg = f"Extraction service returned HTTP {response.status_code}"
            raise ExtractionUpstreamError(msg, url=url, status_code=response.status_code)

        try:
            validate_response_size(response, self._max_response_size_bytes, "Extraction")
        except ResponseSizeError as exc:
            raise ExtractionInvalidError(str(exc), url=url) from exc

        content_type = response.headers.get("content-type", "").split(";", 1)[0].strip().lower()
        if content_type and not content_type.startswith("text/"):
            msg = f"Extraction service returned non-text content ({content_type})"
            raise ExtractionInvalidError(msg, url=url, content_type=content_type)

        text = response.text
        if not text or not text.strip():
            msg = "Extraction service returned an empty body"
            raise ExtractionInvalidError(msg, url=url)

        logger.info(
            "extraction_success",
            extra={"url": url[:100], "chars": len(text), "latency_ms": latency_ms},
        )
        if self._debug_payloads:
            logger.debug(
                "extraction_payload",
                extra={"preview": truncate_log_content(text, self._log_truncate_length)},
            )
        return text
