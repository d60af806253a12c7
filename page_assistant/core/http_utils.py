from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

MAX_SIZE_LIMIT_BYTES = 1024 * 1024 * 1024


class ResponseSizeError(ValueError):
    """A response body is larger than the caller accepts."""

    def __init__(self, message: str, *, actual_size: int | None = None, max_size: int) -> None:
        super().__init__(message)
        self.actual_size = actual_size
        self.max_size = max_size


def _declared_size(response: httpx.Response, service_name: str) -> int | None:
    raw = response.headers.get("content-length")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(
            "invalid_content_length_header",
            extra={"service": service_name, "content_length": raw},
        )
        return None


def validate_response_size(
    response: httpx.Response,
    max_size_bytes: int,
    service_name: str,
) -> None:
    """Reject ``response`` when its body exceeds ``max_size_bytes``.

    ``Content-Length`` is trusted when present and well-formed; otherwise the
    length of the already-read body is measured.

    Raises:
        ResponseSizeError: The body is too large.
        ValueError: ``max_size_bytes`` is not a positive integer up to 1 GiB.
    """
    if not isinstance(max_size_bytes, int) or not 0 < max_size_bytes <= MAX_SIZE_LIMIT_BYTES:
        msg = f"max_size_bytes must be an integer between 1 and {MAX_SIZE_LIMIT_BYTES}"
        raise ValueError(msg)

    size = _declared_size(response, service_name)
    if size is None:
        body = getattr(response, "content", None)
        size = len(body) if isinstance(body, bytes | bytearray) else None
    if size is None or size <= max_size_bytes:
        return

    logger.error(
        "response_size_exceeded",
        extra={
            "service": service_name,
            "size": size,
            "max_size": max_size_bytes,
            "status": response.status_code,
        },
    )
    msg = f"{service_name} response size ({size} bytes) exceeds limit ({max_size_bytes} bytes)"
    raise ResponseSizeError(msg, actual_size=size, max_size=max_size_bytes)
