"""Content-addressed cache keys for extracted page text."""

from __future__ import annotations

import hashlib
import json
import logging

from page_assistant.config.cache import KeyStrategy
from page_assistant.core.url_utils import normalize_url
from page_assistant.domain.exceptions.domain_exceptions import InvalidInputError

logger = logging.getLogger(__name__)

CACHE_KEY_LENGTH = 64


def _canonical_json(payload: dict[str, str]) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def is_cache_key(value: str) -> bool:
    """Return True when ``value`` looks like a key produced by :class:`HashKeyDeriver`."""
    return (
        isinstance(value, str)
        and len(value) == CACHE_KEY_LENGTH
        and all(ch in "0123456789abcdef" for ch in value)
    )


class HashKeyDeriver:
    """Derive deterministic SHA-256 cache keys from a page identity.

    ``KeyStrategy.HASH`` (the default) hashes the URL together with the page
    title, so a retitled page becomes a cache miss. ``KeyStrategy.URL`` hashes
    the URL alone and collapses title variants into one slot. ``HYBRID`` is
    treated like ``HASH``.
    """

    def __init__(self, strategy: KeyStrategy | str = KeyStrategy.HASH) -> None:
        self._strategy = self._coerce_strategy(strategy)

    @property
    def strategy(self) -> KeyStrategy:
        return self._strategy

    @staticmethod
    def _coerce_strategy(strategy: KeyStrategy | str) -> KeyStrategy:
        try:
            return KeyStrategy(str(strategy).strip().lower())
        except ValueError as exc:
            msg = f"Unknown cache key strategy: {strategy!r}"
            raise InvalidInputError(msg, {"strategy": str(strategy)}) from exc

    def derive(
        self,
        url: str,
        title: str | None = None,
        *,
        strategy: KeyStrategy | str | None = None,
    ) -> str:
        """Return the cache key for ``url`` (and ``title``, depending on strategy).

        Args:
            url: Absolute http(s) URL of the page.
            title: Optional page title.
            strategy: Per-call override of the deriver's strategy.

        Raises:
            InvalidInputError: If ``url`` is not a well-formed absolute http(s) URL.
        """
        effective = self._coerce_strategy(strategy) if strategy is not None else self._strategy
        try:
            normalized = normalize_url(url)
        except ValueError as exc:
            raise InvalidInputError(str(exc), {"url": str(url)[:100]}) from exc

        payload = {"url": normalized}
        if effective is not KeyStrategy.URL:
            payload["title"] = (title or "").strip()

        key = hashlib.sha256(_canonical_json(payload).encode("utf-8")).hexdigest()
        logger.debug(
            "cache_key_derived",
            extra={"url": normalized[:100], "strategy": str(effective), "key": key[:12]},
        )
        return key
