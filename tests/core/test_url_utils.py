from __future__ import annotations

import pytest

from page_assistant.core.url_utils import hostname_of, normalize_url, validate_absolute_url


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("HTTPS://Example.COM/Path?q=1#frag", "https://example.com/Path?q=1"),
        ("http://example.com:80", "http://example.com/"),
        ("https://example.com:8443/a", "https://example.com:8443/a"),
        ("  https://example.com/a  ", "https://example.com/a"),
        ("https://[::1]:8080/x", "https://[::1]:8080/x"),
    ],
)
def test_normalize_url(raw: str, expected: str) -> None:
    assert normalize_url(raw) == expected


@pytest.mark.parametrize(
    "url",
    [
        "",
        "   ",
        "example.com",
        "mailto:someone@example.com",
        "https://",
        "https://example.com:0/",
        "https://exa mple.com/\x00",
        "https://example.com/" + "a" * 2100,
    ],
)
def test_validate_rejects(url: str) -> None:
    with pytest.raises(ValueError):
        validate_absolute_url(url)


def test_hostname_of() -> None:
    assert hostname_of("https://Docs.Python.org/3/") == "docs.python.org"
    assert hostname_of("not a url") == ""
