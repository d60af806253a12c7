"""Coarse classification of web pages by the kind of site they belong to."""

from __future__ import annotations

from urllib.parse import urlsplit

SITE_GENERAL = "general"

# Checked in order; the first type with a keyword in the host or path wins.
SITE_TYPE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("developer", ("github.com", "gitlab.com", "stackoverflow.com", "bitbucket.org", "codepen.io")),
    ("educational", ("wikipedia.org", ".edu", "coursera.org", "edx.org", "khanacademy.org")),
    ("ecommerce", ("amazon", "ebay", "shopify", "etsy", "alibaba", "shop", "store")),
    ("article", ("medium.com", "blog", "news", "article", "post")),
    ("video", ("youtube.com", "vimeo.com", "dailymotion.com", "twitch.tv")),
    ("social", ("twitter.com", "facebook.com", "linkedin.com", "instagram.com", "reddit.com")),
)

SITE_TYPES: frozenset[str] = frozenset({SITE_GENERAL, *(name for name, _ in SITE_TYPE_KEYWORDS)})


def detect_site_type(url: str) -> str:
    """Guess the site type of ``url`` from its hostname and path."""
    try:
        parts = urlsplit(url.strip())
    except (AttributeError, ValueError):
        return SITE_GENERAL
    host = (parts.hostname or "").lower()
    path = parts.path.lower()

    for site_type, keywords in SITE_TYPE_KEYWORDS:
        if any(keyword in host or keyword in path for keyword in keywords):
            return site_type
    return SITE_GENERAL


def normalize_site_type(site_type: str | None) -> str:
    """Map unknown or empty site types to ``general``."""
    value = str(site_type or "").strip().lower()
    return value if value in SITE_TYPES else SITE_GENERAL
