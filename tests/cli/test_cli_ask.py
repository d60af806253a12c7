from __future__ import annotations

import json

import pytest

from page_assistant.cli import ask
from page_assistant.config import (
    AssistantConfig,
    CacheConfig,
    ExtractionConfig,
    ProviderSettings,
    RuntimeConfig,
)
from page_assistant.domain.exceptions.domain_exceptions import RateLimitedError
from page_assistant.domain.models.responses import AssistantReply


def _config(api_key: str | None = "sk-test-key-123") -> AssistantConfig:
    return AssistantConfig(
        provider=ProviderSettings(provider_id="openai", model="gpt-4o-mini", api_key=api_key),
        cache=CacheConfig(),
        extraction=ExtractionConfig(),
        runtime=RuntimeConfig(default_language="en"),
    )


class _FakeUseCase:
    def __init__(self, *, error: Exception | None = None) -> None:
        self.error = error
        self.commands: list = []
        self.provider_configs: list = []
        self.closed = False

    async def execute(self, command, provider_config) -> AssistantReply:
        self.commands.append(command)
        self.provider_configs.append(provider_config)
        if self.error is not None:
            raise self.error
        return AssistantReply(
            answer="It is a repo.",
            suggestions=("Who owns it?",),
            site_type="developer",
            language="en",
        )

    async def suggest_questions(self, url, provider_config, **kwargs) -> tuple[str, ...]:
        return ("First?", "Second?")

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_use_case(monkeypatch: pytest.MonkeyPatch) -> _FakeUseCase:
    fake = _FakeUseCase()
    monkeypatch.setattr(ask.AnswerQuestionUseCase, "from_config", lambda cfg: fake)
    monkeypatch.setattr(ask, "setup_json_logging", lambda *args, **kwargs: None)
    return fake


def test_question_required_without_suggest() -> None:
    with pytest.raises(SystemExit):
        ask.parse_args(["https://example.com"])


def test_suggest_needs_no_question() -> None:
    args = ask.parse_args(["https://example.com", "--suggest"])

    assert args.suggest is True
    assert args.question is None


@pytest.mark.asyncio
async def test_prints_answer_and_suggestions(
    fake_use_case: _FakeUseCase, capsys: pytest.CaptureFixture[str]
) -> None:
    args = ask.parse_args(["https://github.com/org/repo", "What is this?"])

    exit_code = await ask.run_ask_cli(args, _config())

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "It is a repo." in out
    assert "- Who owns it?" in out
    assert fake_use_case.closed
    assert fake_use_case.provider_configs[0].endpoint == "https://api.openai.com/v1"


@pytest.mark.asyncio
async def test_json_output(
    fake_use_case: _FakeUseCase, capsys: pytest.CaptureFixture[str]
) -> None:
    args = ask.parse_args(["https://github.com/org/repo", "--suggest", "--json"])

    assert await ask.run_ask_cli(args, _config()) == 0

    assert json.loads(capsys.readouterr().out) == {"suggestions": ["First?", "Second?"]}


@pytest.mark.asyncio
async def test_missing_key_prints_localized_error(
    fake_use_case: _FakeUseCase, capsys: pytest.CaptureFixture[str]
) -> None:
    args = ask.parse_args(["https://example.com", "Why?", "--language", "fr"])

    exit_code = await ask.run_ask_cli(args, _config(api_key=None))

    assert exit_code == 2
    assert "Clé API non configurée" in capsys.readouterr().err
    assert fake_use_case.closed


@pytest.mark.asyncio
async def test_provider_error_exit_code(
    fake_use_case: _FakeUseCase, capsys: pytest.CaptureFixture[str]
) -> None:
    fake_use_case.error = RateLimitedError(provider_id="openai")
    args = ask.parse_args(["https://example.com", "Why?"])

    assert await ask.run_ask_cli(args, _config()) == 2
    assert "Rate limit exceeded" in capsys.readouterr().err
