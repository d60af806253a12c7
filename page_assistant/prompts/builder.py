"""Locale- and site-aware prompt templates for page questions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from page_assistant.adapters.content.content_extractor import clean_content
from page_assistant.core.lang import LANG_EN, SUGGESTION_HEADERS, language_name
from page_assistant.core.site_types import SITE_GENERAL, normalize_site_type

if TYPE_CHECKING:
    from page_assistant.domain.models.page_context import PageContext

logger = logging.getLogger(__name__)

PAGE_CONTENT_LIMIT = 3000
SUGGESTIONS_CONTENT_LIMIT = 2000
FOLLOW_UP_COUNT = 4

SITE_CONTEXTS: dict[str, dict[str, str]] = {
    "en": {
        "developer": "This is a developer/programming website. Focus on technical aspects.",
        "educational": "This is an educational website. Help with learning.",
        "ecommerce": "This is an e-commerce website. Assist with shopping.",
        "article": "This is an article or blog. Help with understanding content.",
        "video": "This is a video platform. Assist with video content.",
        "social": "This is a social media platform. Help with content discovery.",
        "general": "Help the user with their query about this webpage.",
    },
    "fr": {
        "developer": (
            "Ceci est un site de développement/programmation. "
            "Concentrez-vous sur les aspects techniques."
        ),
        "educational": "Ceci est un site éducatif. Aidez à l'apprentissage.",
        "ecommerce": "Ceci est un site e-commerce. Assistez pour les achats.",
        "article": "Ceci est un article ou blog. Aidez à comprendre le contenu.",
        "video": "Ceci est une plateforme vidéo. Assistez avec le contenu vidéo.",
        "social": "Ceci est un réseau social. Aidez à découvrir le contenu.",
        "general": "Aidez l'utilisateur avec sa question sur cette page web.",
    },
    "es": {
        "developer": (
            "Este es un sitio web de desarrollo/programación. Enfócate en aspectos técnicos."
        ),
        "educational": "Este es un sitio web educativo. Ayuda con el aprendizaje.",
        "ecommerce": "Este es un sitio web de comercio electrónico. Asiste con las compras.",
        "article": "Este es un artículo o blog. Ayuda a entender el contenido.",
        "video": "Esta es una plataforma de video. Asiste con el contenido del video.",
        "social": (
            "Esta es una plataforma de redes sociales. "
            "Ayuda con el descubrimiento de contenido."
        ),
        "general": "Ayuda al usuario con su consulta sobre esta página web.",
    },
    "de": {
        "developer": (
            "Dies ist eine Entwickler-/Programmierwebsite. "
            "Konzentrieren Sie sich auf technische Aspekte."
        ),
        "educational": "Dies ist eine Bildungswebsite. Helfen Sie beim Lernen.",
        "ecommerce": "Dies ist eine E-Commerce-Website. Unterstützen Sie beim Einkaufen.",
        "article": "Dies ist ein Artikel oder Blog. Helfen Sie beim Verstehen des Inhalts.",
        "video": "Dies ist eine Videoplattform. Unterstützen Sie bei Videoinhalten.",
        "social": (
            "Dies ist eine Social-Media-Plattform. Helfen Sie bei der Inhaltsentdeckung."
        ),
        "general": "Helfen Sie dem Benutzer bei seiner Anfrage zu dieser Webseite.",
    },
}


@dataclass(frozen=True, slots=True)
class Prompt:
    system: str
    user: str


class PromptBuilder:
    """Compose the system and user prompts sent to the provider.

    Templates are deterministic: the same inputs always produce the same text.
    Unknown languages fall back to ``fallback_language`` for the target language
    name and to English for the site-context sentence.
    """

    def __init__(self, *, fallback_language: str = LANG_EN) -> None:
        self._fallback_language = fallback_language

    def _target_language(self, code: str) -> str:
        return language_name(code, default=language_name(self._fallback_language))

    def system_prompt(self, language: str) -> str:
        target = self._target_language(language)
        return f"You are a helpful AI assistant. Always respond in {target} only."

    def site_context(self, site_type: str, language: str) -> str:
        contexts = SITE_CONTEXTS.get(language, SITE_CONTEXTS[LANG_EN])
        return contexts.get(normalize_site_type(site_type), contexts[SITE_GENERAL])

    def build(self, user_message: str, page_content: str | None, context: PageContext) -> Prompt:
        """Build the prompt for answering ``user_message`` about the page.

        Args:
            user_message: The user's question.
            page_content: Extracted page text, or None when extraction failed.
            context: Page title, site type and answer language.

        Returns:
            Prompt with system and user parts.
        """
        target = self._target_language(context.language)
        header = SUGGESTION_HEADERS.get(context.language, SUGGESTION_HEADERS[LANG_EN])

        sections = [
            "You are a helpful AI assistant integrated into a web browser. "
            f"Respond ONLY in {target}.",
            f"Context: {self.site_context(context.site_type, context.language)}\n"
            f"Page Title: {context.title}\n\n"
            f'User Message: "{user_message}"',
        ]
        if page_content:
            sections.append(
                f"Page Content Summary:\n{clean_content(page_content, PAGE_CONTENT_LIMIT)}"
            )
        sections.append(f"Provide a helpful, concise response in {target}.")
        sections.append(
            f"At the end, add {FOLLOW_UP_COUNT} short follow-up questions (5-7 words each) "
            f'in {target}, numbered 1. to {FOLLOW_UP_COUNT}., under the heading "{header}:".'
        )

        user = "\n\n".join(sections)
        logger.debug(
            "prompt_built",
            extra={
                "language": context.language,
                "site_type": context.site_type,
                "chars": len(user),
                "has_content": bool(page_content),
            },
        )
        return Prompt(system=self.system_prompt(context.language), user=user)

    def build_suggestions_prompt(self, page_content: str | None, context: PageContext) -> Prompt:
        """Build the prompt asking for four page-specific questions, one per line."""
        target = self._target_language(context.language)
        lines = [
            "You are a helpful AI assistant. Generate exactly 4 specific questions about "
            "the actual content of this webpage.",
            "",
            f"Page Title: {context.title}",
            f"Page Type: {normalize_site_type(context.site_type)}",
            "",
            "Requirements:",
            "- Generate EXACTLY 4 questions that are SPECIFIC to this page's content",
            "- DO NOT generate generic questions (the user already has those)",
            "- Focus on the actual topic/content of the page",
            "- DO NOT ask about cookies, website features, navigation, or technical aspects",
            "- Each question should be 5-10 words maximum",
            f"- Questions must be in {target}",
            "- Format: One question per line, no numbering, no bullets",
            "",
        ]
        if page_content:
            lines.append(
                f"Page Content:\n{clean_content(page_content, SUGGESTIONS_CONTENT_LIMIT)}\n"
            )
        lines.append(f"Generate exactly 4 specific questions about this page in {target}:")
        return Prompt(system=self.system_prompt(context.language), user="\n".join(lines))
