"""Property-based tests using Hypothesis.

- URL normalization idempotence
- Cache key determinism
- Suggestion bounds for arbitrary model output
- Repeated suggestion headings never leak into the answer
"""

from __future__ import annotations

from hypothesis import given, settings, strategies as st

from page_assistant.application.services.response_synthesizer import (
    ResponseSynthesizer,
    fallback_suggestions,
)
from page_assistant.core.lang import SUPPORTED_LANGUAGES
from page_assistant.core.site_types import SITE_TYPES
from page_assistant.core.url_utils import normalize_url
from page_assistant.infrastructure.cache.keys import HashKeyDeriver, is_cache_key

hosts = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-", min_size=1, max_size=30).filter(
    lambda x: x[0].isalnum() and x[-1].isalnum()
)
paths = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789/-_.", max_size=60).map(
    lambda p: "/" + p
)
locales = st.sampled_from(sorted(SUPPORTED_LANGUAGES))


class TestKeyProperties:
    @given(scheme=st.sampled_from(["http", "https", "HTTPS"]), host=hosts, path=paths)
    @settings(max_examples=200, deadline=None)
    def test_normalization_is_idempotent(self, scheme: str, host: str, path: str) -> None:
        once = normalize_url(f"{scheme}://{host}.com{path}")

        assert normalize_url(once) == once

    @given(host=hosts, path=paths, title=st.text(max_size=80))
    @settings(max_examples=200, deadline=None)
    def test_keys_are_deterministic(self, host: str, path: str, title: str) -> None:
        url = f"https://{host}.org{path}"
        deriver = HashKeyDeriver()

        key = deriver.derive(url, title)

        assert is_cache_key(key)
        assert key == deriver.derive(url, title)
        assert deriver.derive(f"{url}#fragment", title) == key

    @given(host=hosts, first=st.text(max_size=40), second=st.text(max_size=40))
    @settings(max_examples=100, deadline=None)
    def test_url_strategy_ignores_title(self, host: str, first: str, second: str) -> None:
        deriver = HashKeyDeriver("url")
        url = f"https://{host}.net/"

        assert deriver.derive(url, first) == deriver.derive(url, second)


class TestSuggestionProperties:
    @given(raw=st.text(max_size=500), locale=locales, site=st.sampled_from(sorted(SITE_TYPES)))
    @settings(max_examples=300, deadline=None)
    def test_split_bounds(self, raw: str, locale: str, site: str) -> None:
        result = ResponseSynthesizer().split(raw, locale, site)

        assert raw.startswith(result.answer)
        assert 0 < len(result.suggestions) <= 4

    @given(
        answer=st.text(alphabet="abcdefghij .,", max_size=60),
        fillers=st.lists(st.text(alphabet="abcdefghij .,", max_size=30), min_size=1, max_size=4),
        locale=locales,
    )
    @settings(max_examples=200, deadline=None)
    def test_split_removes_every_copy_of_the_heading(
        self, answer: str, fillers: list[str], locale: str
    ) -> None:
        blocks = "".join(
            f"\n\nSuggested questions:\n1. Item {n}?\n{filler}" for n, filler in enumerate(fillers)
        )

        result = ResponseSynthesizer().split(answer + blocks, locale)

        assert "Suggested questions" not in result.answer
        assert result.suggestions[0] == "Item 0?"

    @given(
        answer=st.text(alphabet=st.characters(exclude_characters="\n?"), max_size=80),
        count=st.integers(min_value=1, max_value=9),
    )
    @settings(max_examples=100, deadline=None)
    def test_numbered_block_capped_at_four(self, answer: str, count: int) -> None:
        items = "\n".join(f"{n}. Question {n}?" for n in range(1, count + 1))

        result = ResponseSynthesizer().split(f"{answer}\n\nSuggested questions:\n{items}", "en")

        assert result.suggestions == tuple(f"Question {n}?" for n in range(1, min(count, 4) + 1))

    @given(locale=locales, site=st.text(max_size=15))
    @settings(max_examples=100, deadline=None)
    def test_fallback_never_exceeds_three(self, locale: str, site: str) -> None:
        assert 0 < len(fallback_suggestions(site, locale)) <= 3

    @given(text=st.text(max_size=300))
    @settings(max_examples=200, deadline=None)
    def test_parsed_lines_end_with_question_mark(self, text: str) -> None:
        suggestions = ResponseSynthesizer.parse_suggestion_lines(text)

        assert len(suggestions) <= 4
        assert all(item[-1] in "?？؟" for item in suggestions)
