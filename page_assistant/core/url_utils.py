from __future__ import annotations

import logging
from urllib.parse import urlsplit, urlunsplit

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES: frozenset[str] = frozenset(["http", "https"])
_DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}
MAX_URL_LENGTH = 2048


def validate_absolute_url(url: str) -> str:
    """Validate that ``url`` is a well-formed absolute http(s) URL.

    Args:
        url: URL string to validate

    Returns:
        The URL with surrounding whitespace removed

    Raises:
        ValueError: If the URL is empty, relative, too long, or not http(s)
    """
    if not isinstance(url, str):
        msg = "URL must be a string"
        raise ValueError(msg)

    candidate = url.strip()
    if not candidate:
        msg = "URL cannot be empty"
        raise ValueError(msg)
    if len(candidate) > MAX_URL_LENGTH:
        msg = "URL too long"
        raise ValueError(msg)
    if any(ord(char) < 32 for char in candidate):
        msg = "URL contains control characters"
        raise ValueError(msg)

    try:
        parts = urlsplit(candidate)
        port = parts.port
    except ValueError as exc:
        msg = f"Malformed URL: {exc}"
        raise ValueError(msg) from exc

    if parts.scheme.lower() not in _ALLOWED_SCHEMES:
        msg = f"Unsupported URL scheme: {parts.scheme or '<none>'}. Only http and https are allowed."
        raise ValueError(msg)
    if not parts.hostname:
        msg = "Invalid URL: missing hostname"
        raise ValueError(msg)
    if port == 0:
        msg = "Invalid URL: port 0 is not allowed"
        raise ValueError(msg)

    return candidate


def normalize_url(url: str) -> str:
    """Normalize an absolute http(s) URL for cache addressing.

    - Lowercase scheme & host
    - Drop default ports and the fragment
    - Keep path and query untouched (pages differ by query string)

    Raises:
        ValueError: If the URL is not a valid absolute http(s) URL
    """
    candidate = validate_absolute_url(url)
    parts = urlsplit(candidate)
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if ":" in host:
        host = f"[{host}]"

    netloc = host
    if parts.username or parts.password:
        userinfo = parts.username or ""
        if parts.password:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{host}"
    if parts.port is not None and parts.port != _DEFAULT_PORTS.get(scheme):
        netloc = f"{netloc}:{parts.port}"

    path = parts.path or "/"
    normalized = urlunsplit((scheme, netloc, path, parts.query, ""))
    logger.debug("normalize_url", extra={"url": candidate[:100], "normalized": normalized[:100]})
    return normalized


def hostname_of(url: str) -> str:
    """Return the lowercase hostname of ``url`` or an empty string."""
    try:
        return (urlsplit(url.strip()).hostname or "").lower()
    except ValueError:
        return ""
