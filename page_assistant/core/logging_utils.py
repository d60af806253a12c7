"""Structured logging setup.

Modules log through the standard library (``logging.getLogger(__name__)``) with
snake_case event names and ``extra`` fields. :func:`setup_json_logging` routes
those records either into a serialized loguru sink or through
:class:`JsonLineFormatter` when loguru routing is turned off.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import sys
from typing import Any

from loguru import logger as loguru_logger

# Attributes every LogRecord carries; anything else came from ``extra``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_QUIET_LOGGERS = ("httpx", "httpcore", "hpack")

# Numeric fields grouped under "metrics" in JSON lines
_METRIC_FIELDS = frozenset(
    {"latency_ms", "tokens_prompt", "tokens_completion", "content_length", "ttl_seconds"}
)


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra`` fields attached to ``record``."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


def _fallback(obj: Any) -> str:
    if isinstance(obj, dt.datetime | dt.date):
        return obj.isoformat()
    return repr(obj) if hasattr(obj, "__dict__") else str(obj)


class JsonLineFormatter(logging.Formatter):
    """Render each record as one compact JSON object."""

    def __init__(self, *, include_location: bool = True) -> None:
        super().__init__()
        self.include_location = include_location

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": dt.datetime.fromtimestamp(record.created, tz=dt.UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        if self.include_location:
            line["at"] = f"{record.module}.{record.funcName}:{record.lineno}"

        extras = record_extras(record)
        metrics = {key: extras.pop(key) for key in list(extras) if key in _METRIC_FIELDS}
        if metrics:
            line["metrics"] = metrics
        if extras:
            line["extra"] = extras

        if record.exc_info and record.exc_info[0] is not None:
            line["error"] = {
                "type": record.exc_info[0].__name__,
                "trace": self.formatException(record.exc_info),
            }
        return json.dumps(line, ensure_ascii=False, default=_fallback, separators=(",", ":"))


class LoguruBridge(logging.Handler):
    """Hand standard-library records, with their extras bound, to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: int | str = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        bound = loguru_logger.bind(logger_name=record.name, **record_extras(record))
        bound.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


def setup_json_logging(
    level: str = "INFO",
    *,
    include_location: bool = True,
    use_loguru: bool = True,
) -> None:
    """Send every log record to stdout as JSON.

    Args:
        level: Root level name, e.g. ``"DEBUG"``. Unknown names mean INFO.
        include_location: Add ``module.function:line`` to plain JSON lines.
        use_loguru: Serialize through loguru instead of the stdlib formatter.
    """
    level_name = level.upper()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    if use_loguru:
        loguru_logger.remove()
        loguru_logger.add(sys.stdout, level=level_name, serialize=True, enqueue=True)
        root.addHandler(LoguruBridge())
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonLineFormatter(include_location=include_location))
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "json_logging_initialized", extra={"level": level_name, "use_loguru": use_loguru}
    )


def truncate_log_content(content: str | None, max_length: int = 1000) -> str | None:
    """Shorten ``content`` to ``max_length`` characters for a log field.

    Cut text ends on a word boundary when one is close and is marked with the
    number of characters dropped.
    """
    if not content or len(content) <= max_length:
        return content

    head = content[:max_length]
    boundary = head.rfind(" ")
    if boundary >= max_length * 3 // 4:
        head = head[:boundary]
    return f"{head}... [+{len(content) - len(head)} chars]"


__all__ = [
    "JsonLineFormatter",
    "LoguruBridge",
    "record_extras",
    "setup_json_logging",
    "truncate_log_content",
]
