"""CLI tooling to ask a question about a web page from the terminal."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import TYPE_CHECKING

from page_assistant.application.use_cases.answer_question import (
    AnswerQuestionUseCase,
    AskQuestionCommand,
)
from page_assistant.config import load_config
from page_assistant.core.logging_utils import setup_json_logging
from page_assistant.domain.exceptions.domain_exceptions import AssistantError
from page_assistant.presentation.error_messages import localize_error
from page_assistant.security.credentials import build_provider_config, resolve_api_key

if TYPE_CHECKING:
    from page_assistant.config import AssistantConfig

logger = logging.getLogger(__name__)

__all__ = ["main", "run_ask_cli"]


class PlainTextCodec:
    """Codec for keys that are stored unencoded (environment, CLI flags)."""

    def decode(self, stored: str) -> str:
        return stored


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Ask a question about a web page using the configured LLM provider",
        allow_abbrev=False,
    )
    parser.add_argument("url", help="Absolute http(s) URL of the page.")
    parser.add_argument(
        "question",
        nargs="?",
        help="Question to ask. Omit together with --suggest to get page-specific questions.",
    )
    parser.add_argument("--title", default="", help="Page title (part of the cache key).")
    parser.add_argument("--language", help="Answer language, e.g. 'en' or 'fr-FR'.")
    parser.add_argument("--site-type", help="Override the detected site type.")
    parser.add_argument("--provider", help="Provider id, e.g. 'openai' or 'anthropic'.")
    parser.add_argument("--model", help="Override the configured model.")
    parser.add_argument("--endpoint", help="Override the provider endpoint.")
    parser.add_argument(
        "--suggest",
        action="store_true",
        help="Print page-specific follow-up questions instead of answering.",
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON.")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level for this session.",
    )
    args = parser.parse_args(argv)
    if not args.suggest and not args.question:
        parser.error("a question is required unless --suggest is given")
    return args


async def run_ask_cli(args: argparse.Namespace, config: AssistantConfig | None = None) -> int:
    cfg = config or load_config()
    setup_json_logging(args.log_level or cfg.runtime.log_level)

    credential = resolve_api_key(None, PlainTextCodec(), default_key=cfg.provider.api_key)
    use_case = AnswerQuestionUseCase.from_config(cfg)
    language = args.language or cfg.runtime.default_language
    try:
        provider_config = build_provider_config(
            cfg.provider,
            credential,
            provider_id=args.provider,
            endpoint=args.endpoint,
            model=args.model,
        )
        if args.suggest:
            suggestions = await use_case.suggest_questions(
                args.url,
                provider_config,
                title=args.title,
                language=args.language,
                site_type=args.site_type,
            )
            payload: dict[str, object] = {"suggestions": list(suggestions)}
            text = "\n".join(f"- {item}" for item in suggestions)
        else:
            reply = await use_case.execute(
                AskQuestionCommand(
                    url=args.url,
                    question=args.question,
                    title=args.title,
                    language=args.language,
                    site_type=args.site_type,
                ),
                provider_config,
            )
            payload = reply.model_dump(mode="json")
            text = reply.answer
            if reply.suggestions:
                text += "\n\n" + "\n".join(f"- {item}" for item in reply.suggestions)
    except AssistantError as exc:
        logger.warning("cli_ask_failed", extra={"error_type": type(exc).__name__})
        sys.stderr.write(localize_error(exc, language) + "\n")
        return 2
    finally:
        await use_case.aclose()

    sys.stdout.write((json.dumps(payload, ensure_ascii=False) if args.json else text) + "\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``page-assistant`` and ``python -m page_assistant.cli.ask``."""
    args = parse_args(argv)
    try:
        return asyncio.run(run_ask_cli(args))
    except KeyboardInterrupt:  # pragma: no cover - user cancelled
        return 1
    except RuntimeError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
