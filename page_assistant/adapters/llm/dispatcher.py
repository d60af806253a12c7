"""Single-call LLM dispatch over the provider protocol table."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from page_assistant.adapters.llm.registry import provider_info, resolve_protocol
from page_assistant.core.async_utils import raise_if_cancelled
from page_assistant.core.http_utils import ResponseSizeError, validate_response_size
from page_assistant.core.logging_utils import truncate_log_content
from page_assistant.domain.exceptions.domain_exceptions import (
    InvalidCredentialsError,
    MalformedResponseError,
    ProviderError,
    ProviderRequestError,
    RateLimitedError,
    UnreachableError,
    UpstreamUnavailableError,
)
from page_assistant.domain.models.responses import ProviderReply

if TYPE_CHECKING:
    from page_assistant.adapters.llm.protocol import HttpRequestSpec, ProtocolDescriptor
    from page_assistant.config import ProviderConfig, ProviderSettings

logger = logging.getLogger(__name__)

VALIDATION_PROMPT = "Hi"


def parse_retry_after(value: str | None) -> int | None:
    if not value:
        return None
    try:
        seconds = int(value.strip())
    except ValueError:
        logger.warning("invalid_retry_after_header", extra={"retry_after": value})
        return None
    return seconds if seconds >= 0 else None


def extract_error_message(response: Any) -> str:
    """Best-effort human-readable error text from a failed provider response."""
    try:
        data = response.json()
    except Exception:
        data = None
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
        if isinstance(data.get("message"), str):
            return data["message"]
    text = getattr(response, "text", "") or ""
    return text[:300] if isinstance(text, str) else ""


def classify_status(
    status_code: int,
    *,
    provider_id: str,
    message: str = "",
    retry_after: int | None = None,
) -> ProviderError:
    """Map a non-success HTTP status to the matching provider error."""
    suffix = f": {message}" if message else ""
    if status_code in (401, 403):
        return InvalidCredentialsError(
            f"Provider rejected the API key (HTTP {status_code}){suffix}",
            provider_id=provider_id,
            status_code=status_code,
        )
    if status_code == 429:
        return RateLimitedError(
            f"Rate limit exceeded{suffix}", provider_id=provider_id, retry_after=retry_after
        )
    if status_code >= 500:
        return UpstreamUnavailableError(
            f"Provider unavailable (HTTP {status_code}){suffix}",
            provider_id=provider_id,
            status_code=status_code,
        )
    return ProviderRequestError(
        f"Provider request failed (HTTP {status_code}){suffix}",
        provider_id=provider_id,
        status_code=status_code,
    )


class ProviderDispatcher:
    """Send one prompt to one provider and normalize the answer.

    The dispatcher owns an ``httpx.AsyncClient`` and nothing else; the protocol
    table it consults is immutable. Exactly one HTTP call is made per ``send``
    and failures are never retried.
    """

    def __init__(
        self,
        *,
        timeout_sec: float = 30.0,
        validation_timeout_sec: float = 10.0,
        max_response_size_mb: int = 10,
        debug_payloads: bool = False,
        log_truncate_length: int = 1000,
    ) -> None:
        if timeout_sec <= 0 or validation_timeout_sec <= 0:
            msg = "Provider timeouts must be positive"
            raise ValueError(msg)

        self._timeout_sec = float(timeout_sec)
        self._validation_timeout_sec = float(validation_timeout_sec)
        self._timeout = httpx.Timeout(timeout_sec)
        self._max_response_size_bytes = int(max_response_size_mb) * 1024 * 1024
        self._debug_payloads = debug_payloads
        self._log_truncate_length = log_truncate_length
        self._client = httpx.AsyncClient(timeout=self._timeout)

    @classmethod
    def from_settings(
        cls,
        settings: ProviderSettings,
        *,
        debug_payloads: bool = False,
        log_truncate_length: int = 1000,
    ) -> ProviderDispatcher:
        return cls(
            timeout_sec=settings.timeout_sec,
            validation_timeout_sec=settings.validation_timeout_sec,
            max_response_size_mb=settings.max_response_size_mb,
            debug_payloads=debug_payloads,
            log_truncate_length=log_truncate_length,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ProviderDispatcher:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def send(self, prompt: str, system_prompt: str, config: ProviderConfig) -> ProviderReply:
        """Send ``prompt`` to the provider described by ``config``.

        Args:
            prompt: User prompt.
            system_prompt: System instructions; may be empty.
            config: Per-request provider parameters with a decoded API key.

        Returns:
            The answer text with usage, model and latency when available.

        Raises:
            InvalidCredentialsError: HTTP 401/403.
            RateLimitedError: HTTP 429.
            UpstreamUnavailableError: HTTP 5xx.
            UnreachableError: Timeout or transport failure.
            MalformedResponseError: Non-JSON, oversized or unexpected body.
            ProviderRequestError: Any other non-success status.
        """
        descriptor = resolve_protocol(config.provider_id)
        spec = descriptor.build_request(prompt, system_prompt, config)
        started = time.perf_counter()
        data = await self._execute(spec, descriptor, config, timeout_sec=self._timeout_sec)
        latency_ms = int((time.perf_counter() - started) * 1000)

        try:
            parsed = descriptor.parse_response(data)
        except MalformedResponseError as exc:
            logger.warning(
                "provider_malformed_response",
                extra={"provider_id": config.provider_id, "error": exc.message},
            )
            raise MalformedResponseError(
                exc.message, provider_id=config.provider_id, details=exc.details
            ) from exc

        logger.info(
            "provider_response_ok",
            extra={
                "provider_id": config.provider_id,
                "model": parsed.model or config.model,
                "latency_ms": latency_ms,
                "answer_chars": len(parsed.answer),
                "total_tokens": parsed.usage.total_tokens if parsed.usage else None,
            },
        )
        return ProviderReply(
            answer=parsed.answer,
            usage=parsed.usage,
            model=parsed.model or config.model,
            latency_ms=latency_ms,
        )

    async def validate_credentials(self, config: ProviderConfig) -> bool:
        """Check ``config.api_key`` with a one-token completion.

        Returns False when the provider rejects the key (401/403). Other
        failures propagate so that a caller can tell a bad key from an outage.
        """
        descriptor = resolve_protocol(config.provider_id)
        probe = config.model_copy(update={"max_tokens": 1})
        spec = descriptor.build_request(VALIDATION_PROMPT, "", probe)
        try:
            await self._execute(
                spec, descriptor, config, timeout_sec=self._validation_timeout_sec
            )
        except InvalidCredentialsError:
            logger.info("provider_credentials_rejected", extra={"provider_id": config.provider_id})
            return False
        logger.info("provider_credentials_valid", extra={"provider_id": config.provider_id})
        return True

    async def _execute(
        self,
        spec: HttpRequestSpec,
        descriptor: ProtocolDescriptor,
        config: ProviderConfig,
        *,
        timeout_sec: float,
    ) -> Any:
        """Make the call and return the decoded JSON body.

        ``timeout_sec`` bounds each connection phase and the call as a whole.
        """
        provider_id = config.provider_id
        info = provider_info(provider_id)
        logger.debug(
            "provider_request",
            extra={
                "provider_id": provider_id,
                "provider": info.display_name if info else provider_id,
                "protocol": str(descriptor.protocol),
                "url": spec.url,
                "model": config.model,
            },
        )
        if self._debug_payloads:
            logger.debug(
                "provider_request_payload",
                extra={
                    "headers": descriptor.redact_headers(spec.headers),
                    "body": truncate_log_content(str(spec.body), self._log_truncate_length),
                },
            )

        try:
            response = await asyncio.wait_for(
                self._client.request(
                    spec.method,
                    spec.url,
                    headers=spec.headers,
                    json=spec.body,
                    timeout=httpx.Timeout(timeout_sec),
                ),
                timeout=timeout_sec,
            )
        except (httpx.TimeoutException, TimeoutError) as exc:
            logger.warning("provider_timeout", extra={"provider_id": provider_id})
            msg = "Provider request timed out"
            raise UnreachableError(msg, provider_id=provider_id) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "provider_transport_error", extra={"provider_id": provider_id, "error": str(exc)}
            )
            msg = f"Provider unreachable: {exc}"
            raise UnreachableError(msg, provider_id=provider_id) from exc

        status = response.status_code
        if status < 200 or status >= 300:
            error = classify_status(
                status,
                provider_id=provider_id,
                message=extract_error_message(response),
                retry_after=parse_retry_after(response.headers.get("retry-after")),
            )
            logger.warning(
                "provider_http_error",
                extra={"provider_id": provider_id, "status": status, "error": error.message},
            )
            raise error

        try:
            validate_response_size(response, self._max_response_size_bytes, "LLM provider")
        except ResponseSizeError as exc:
            raise MalformedResponseError(
                str(exc), provider_id=provider_id, status_code=status
            ) from exc

        try:
            data = response.json()
        except Exception as exc:
            raise_if_cancelled(exc)
            msg = "Provider returned a non-JSON body"
            raise MalformedResponseError(msg, provider_id=provider_id, status_code=status) from exc

        if self._debug_payloads:
            logger.debug(
                "provider_response_payload",
                extra={"body": truncate_log_content(str(data), self._log_truncate_length)},
            )
        return data
