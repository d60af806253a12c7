from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from page_assistant.domain.exceptions.domain_exceptions import (
    CacheTierError,
    ExtractionUpstreamError,
    ProviderError,
    RateLimitedError,
)
from page_assistant.domain.models.cache_entry import CacheEntry
from page_assistant.domain.models.responses import SynthesizedResponse

NOW = datetime(2025, 1, 1, tzinfo=UTC)


class TestCacheEntry:
    def test_valid_until_expiry(self) -> None:
        entry = CacheEntry.create("k", "text", now=NOW, ttl_seconds=30)

        assert entry.expires_at == NOW + timedelta(seconds=30)
        assert entry.is_valid(NOW + timedelta(seconds=29))
        assert not entry.is_valid(NOW + timedelta(seconds=30))

    @pytest.mark.parametrize("ttl", [0, -5])
    def test_rejects_non_positive_ttl(self, ttl: int) -> None:
        with pytest.raises(ValueError, match="ttl_seconds"):
            CacheEntry.create("k", "text", now=NOW, ttl_seconds=ttl)

    def test_rejects_inverted_window(self) -> None:
        with pytest.raises(ValueError, match="expires_at"):
            CacheEntry(key="k", payload="t", created_at=NOW, expires_at=NOW)


class TestSynthesizedResponse:
    def test_at_most_four_suggestions(self) -> None:
        with pytest.raises(ValidationError):
            SynthesizedResponse(answer="a", suggestions=("1?", "2?", "3?", "4?", "5?"))

    def test_blank_suggestions_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SynthesizedResponse(answer="a", suggestions=("ok?", "  "))

    def test_suggestions_trimmed(self) -> None:
        assert SynthesizedResponse(answer="a", suggestions=[" Why? "]).suggestions == ("Why?",)


def test_error_details_are_collected() -> None:
    rate = RateLimitedError(provider_id="groq", retry_after=7)
    upstream = ExtractionUpstreamError("bad", url="https://example.com", status_code=502)
    tier = CacheTierError("down", tier="remote", details={"status_code": 500})

    assert isinstance(rate, ProviderError)
    assert rate.details == {"retry_after": 7, "provider_id": "groq", "status_code": 429}
    assert upstream.details == {"status_code": 502, "url": "https://example.com"}
    assert tier.details == {"tier": "remote", "status_code": 500}
    assert "details" in str(tier)
