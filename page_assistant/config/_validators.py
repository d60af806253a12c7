"""Field checks shared by the configuration sections."""

from __future__ import annotations

import math
import re
from typing import Any
from urllib.parse import urlsplit

MAX_MODEL_NAME_LENGTH = 100
MAX_SECRET_LENGTH = 500
MAX_ENDPOINT_LENGTH = 500

# Provider IDs look like ``org/model:tag`` or ``model-v1.5``
_MODEL_NAME_RE = re.compile(r"[A-Za-z0-9._:/-]+")


def validate_model_name(model: str) -> str:
    if not model:
        msg = "Model name cannot be empty"
        raise ValueError(msg)
    if len(model) > MAX_MODEL_NAME_LENGTH:
        msg = f"Model name is longer than {MAX_MODEL_NAME_LENGTH} characters"
        raise ValueError(msg)
    if ".." in model or not _MODEL_NAME_RE.fullmatch(model):
        msg = f"Model name contains invalid characters: {model!r}"
        raise ValueError(msg)
    return model


def validate_endpoint(value: Any, *, name: str) -> str:
    """Return ``value`` as an absolute http(s) base URL without trailing slash."""
    endpoint = str(value or "").strip()
    if not endpoint:
        msg = f"{name} is required"
        raise ValueError(msg)
    if len(endpoint) > MAX_ENDPOINT_LENGTH:
        msg = f"{name} is longer than {MAX_ENDPOINT_LENGTH} characters"
        raise ValueError(msg)
    parts = urlsplit(endpoint)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        msg = f"{name} must be an absolute http(s) URL"
        raise ValueError(msg)
    return endpoint.rstrip("/")


def validate_api_key(value: Any, *, owner: str) -> str:
    """Strip ``value`` and reject empty, oversized or whitespace-bearing keys."""
    key = str(value or "").strip()
    if not key:
        msg = f"{owner} API key is required"
        raise ValueError(msg)
    if len(key) > MAX_SECRET_LENGTH:
        msg = f"{owner} API key is longer than {MAX_SECRET_LENGTH} characters"
        raise ValueError(msg)
    if re.search(r"\s", key):
        msg = f"{owner} API key contains invalid characters"
        raise ValueError(msg)
    return key


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_int(value: Any, *, default: int, field: str) -> int:
    """Parse an env-style integer, using ``default`` for unset values."""
    if _blank(value):
        return default
    try:
        return int(str(value).strip())
    except ValueError as exc:
        msg = f"{field.replace('_', ' ')} must be a valid integer, got {value!r}"
        raise ValueError(msg) from exc


def coerce_float(value: Any, *, default: float, field: str) -> float:
    """Parse an env-style number, using ``default`` for unset values."""
    if _blank(value):
        return float(default)
    try:
        parsed = float(str(value).strip())
    except ValueError as exc:
        msg = f"{field.replace('_', ' ')} must be a valid number, got {value!r}"
        raise ValueError(msg) from exc
    if not math.isfinite(parsed):
        msg = f"{field.replace('_', ' ')} must be a finite number, got {value!r}"
        raise ValueError(msg)
    return parsed
