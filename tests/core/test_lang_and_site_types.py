from __future__ import annotations

import pytest

from page_assistant.core.lang import language_name, normalize_locale
from page_assistant.core.site_types import detect_site_type, normalize_site_type


@pytest.mark.parametrize(
    ("tag", "code"), [("en", "en"), ("en-US", "en"), ("pt_BR", "pt"), ("ZH-Hant-TW", "zh")]
)
def test_normalize_locale(tag: str, code: str) -> None:
    assert normalize_locale(tag) == code


@pytest.mark.parametrize("tag", [None, "", "x", "xx", "en US", "123"])
def test_normalize_locale_rejects(tag) -> None:
    with pytest.raises(ValueError):
        normalize_locale(tag)


def test_language_name() -> None:
    assert language_name("ja") == "Japanese"
    assert language_name("xx") == "English"
    assert language_name("xx", default="French") == "French"


@pytest.mark.parametrize(
    ("url", "site_type"),
    [
        ("https://github.com/org/repo", "developer"),
        ("https://en.wikipedia.org/wiki/Python", "educational"),
        ("https://www.amazon.com/dp/B00", "ecommerce"),
        ("https://medium.com/@someone/story", "article"),
        ("https://www.youtube.com/watch?v=1", "video"),
        ("https://www.reddit.com/r/python", "social"),
        ("https://example.com/", "general"),
    ],
)
def test_detect_site_type(url: str, site_type: str) -> None:
    assert detect_site_type(url) == site_type


def test_normalize_site_type() -> None:
    assert normalize_site_type("Video") == "video"
    assert normalize_site_type("forum") == "general"
    assert normalize_site_type(None) == "general"
