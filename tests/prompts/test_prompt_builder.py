from __future__ import annotations

from page_assistant.domain.models.page_context import PageContext
from page_assistant.prompts.builder import SITE_CONTEXTS, PromptBuilder


def _context(language: str = "en", site_type: str = "general") -> PageContext:
    return PageContext(
        title="Example Page", site_type=site_type, language=language, domain="example.com"
    )


class TestBuild:
    def test_contains_question_title_and_content(self) -> None:
        prompt = PromptBuilder().build("What is this about?", "Body text", _context())

        assert prompt.system == "You are a helpful AI assistant. Always respond in English only."
        assert 'User Message: "What is this about?"' in prompt.user
        assert "Page Title: Example Page" in prompt.user
        assert "Page Content Summary:\nBody text" in prompt.user
        assert 'under the heading "Suggested questions:"' in prompt.user

    def test_page_content_is_truncated(self) -> None:
        prompt = PromptBuilder().build("q", "x" * 3500, _context())

        assert "x" * 3000 + "..." in prompt.user
        assert "x" * 3001 not in prompt.user

    def test_no_content_section_without_text(self) -> None:
        prompt = PromptBuilder().build("q", None, _context())

        assert "Page Content Summary" not in prompt.user

    def test_localized_site_context_and_heading(self) -> None:
        prompt = PromptBuilder().build("q", "text", _context("fr", "developer"))

        assert f"Context: {SITE_CONTEXTS['fr']['developer']}" in prompt.user
        assert 'under the heading "Questions suggérées:"' in prompt.user
        assert "Respond ONLY in French." in prompt.user
        assert prompt.system.endswith("Always respond in French only.")

    def test_site_context_falls_back_to_english_sentences(self) -> None:
        prompt = PromptBuilder().build("q", "text", _context("it", "video"))

        assert f"Context: {SITE_CONTEXTS['en']['video']}" in prompt.user
        assert "Respond ONLY in Italian." in prompt.user

    def test_unknown_site_type_uses_general_context(self) -> None:
        builder = PromptBuilder()

        assert builder.site_context("forum", "de") == SITE_CONTEXTS["de"]["general"]

    def test_unknown_language_uses_fallback_name(self) -> None:
        builder = PromptBuilder(fallback_language="fr")

        assert builder.system_prompt("xx").endswith("Always respond in French only.")

    def test_is_deterministic(self) -> None:
        builder = PromptBuilder()
        context = _context("es", "article")

        assert builder.build("q", "text", context) == builder.build("q", "text", context)


class TestSuggestionsPrompt:
    def test_lists_requirements_and_truncates_content(self) -> None:
        prompt = PromptBuilder().build_suggestions_prompt("y" * 2500, _context("de", "article"))

        assert "Page Type: article" in prompt.user
        assert "- Questions must be in German" in prompt.user
        assert "y" * 2000 + "..." in prompt.user
        assert "y" * 2001 not in prompt.user
        assert prompt.user.endswith(
            "Generate exactly 4 specific questions about this page in German:"
        )

    def test_without_content(self) -> None:
        prompt = PromptBuilder().build_suggestions_prompt(None, _context())

        assert "Page Content:" not in prompt.user
