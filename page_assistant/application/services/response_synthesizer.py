"""Split raw model output into a visible answer and follow-up suggestions.

Models are asked to end their answer with a numbered list of questions under a
localized heading. Parsing is best effort: when no heading or no well-formed
question is found, a hand-curated suggestion set for the site type and language
is returned instead.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

from page_assistant.core.lang import LANG_EN, normalize_locale
from page_assistant.core.site_types import SITE_GENERAL, normalize_site_type
from page_assistant.domain.exceptions.domain_exceptions import InvalidInputError
from page_assistant.domain.models.responses import (
    MAX_EXTRACTED_SUGGESTIONS,
    MAX_FALLBACK_SUGGESTIONS,
    SynthesizedResponse,
)

logger = logging.getLogger(__name__)

# Heading alternatives per language. Order within a language is significant.
HEADER_PATTERNS: dict[str, tuple[str, ...]] = {
    "en": (r"Suggested questions?", r"Questions you might want to ask", r"Follow-up questions?"),
    "fr": (r"Questions suggérées", r"Questions? (?:à poser|possibles?)"),
    "es": (r"Preguntas sugeridas",),
    "de": (r"Vorgeschlagene Fragen",),
    "it": (r"Domande suggerite",),
    "pt": (r"Perguntas sugeridas",),
    "nl": (r"Voorgestelde vragen",),
    "pl": (r"Sugerowane pytania",),
    "ru": (r"Предлагаемые вопросы",),
    "zh": (r"建议的问题",),
    "ja": (r"提案された質問",),
    "ko": (r"제안된 질문",),
    "ar": (r"الأسئلة المقترحة",),
}

FALLBACK_SUGGESTIONS: dict[str, dict[str, tuple[str, ...]]] = {
    "en": {
        "developer": ("Explain this code", "Debug tips?", "Best practices?", "Code complexity?"),
        "educational": ("Summarize topic", "Explain simply", "Key concepts?", "Examples?"),
        "ecommerce": ("Compare products", "Good deal?", "Reviews summary?", "Value analysis?"),
        "article": ("Summarize article", "Main points?", "Key takeaways?", "Conclusion?"),
        "video": ("Video summary", "Key moments?", "Similar videos?", "Main message?"),
        "social": ("Trending topics?", "Comments summary", "Related posts?", "Sentiment?"),
        "general": ("Summarize page", "Key points?", "What is this?", "Context?"),
    },
    "fr": {
        "developer": ("Expliquer ce code", "Conseils debug?", "Bonnes pratiques?", "Complexité?"),
        "educational": (
            "Résumer le sujet",
            "Expliquer simplement",
            "Concepts clés?",
            "Exemples?",
        ),
        "ecommerce": ("Comparer produits", "Bonne affaire?", "Résumé avis?", "Analyse valeur?"),
        "article": ("Résumer article", "Points principaux?", "Points clés?", "Conclusion?"),
        "video": ("Résumé vidéo", "Moments clés?", "Vidéos similaires?", "Message principal?"),
        "social": ("Sujets tendance?", "Résumé commentaires", "Posts liés?", "Sentiment?"),
        "general": ("Résumer page", "Points clés?", "C'est quoi?", "Contexte?"),
    },
    "es": {
        "developer": ("Explicar código", "¿Tips debug?", "¿Buenas prácticas?", "¿Complejidad?"),
        "educational": ("Resumir tema", "Explicar simple", "¿Conceptos clave?", "¿Ejemplos?"),
        "ecommerce": (
            "Comparar productos",
            "¿Buena oferta?",
            "¿Resumen reseñas?",
            "¿Análisis valor?",
        ),
        "article": ("Resumir artículo", "¿Puntos principales?", "¿Ideas clave?", "¿Conclusión?"),
        "video": ("Resumen video", "¿Momentos clave?", "¿Videos similares?", "¿Mensaje principal?"),
        "social": (
            "¿Temas tendencia?",
            "Resumen comentarios",
            "¿Posts relacionados?",
            "¿Sentimiento?",
        ),
        "general": ("Resumir página", "¿Puntos clave?", "¿Qué es esto?", "¿Contexto?"),
    },
    "de": {
        "developer": ("Code erklären", "Debug-Tipps?", "Best Practices?", "Komplexität?"),
        "educational": (
            "Thema zusammenfassen",
            "Einfach erklären",
            "Schlüsselkonzepte?",
            "Beispiele?",
        ),
        "ecommerce": ("Produkte vergleichen", "Gutes Angebot?", "Bewertungen?", "Wertanalyse?"),
        "article": ("Artikel zusammenfassen", "Hauptpunkte?", "Kernaussagen?", "Fazit?"),
        "video": (
            "Video-Zusammenfassung",
            "Schlüsselmomente?",
            "Ähnliche Videos?",
            "Hauptbotschaft?",
        ),
        "social": (
            "Trending-Themen?",
            "Kommentare zusammenfassen",
            "Verwandte Posts?",
            "Stimmung?",
        ),
        "general": ("Seite zusammenfassen", "Wichtige Punkte?", "Was ist das?", "Kontext?"),
    },
    "it": {
        "developer": ("Spiega codice", "Suggerimenti debug?", "Best practice?", "Complessità?"),
        "educational": (
            "Riassumi argomento",
            "Spiega semplicemente",
            "Concetti chiave?",
            "Esempi?",
        ),
        "ecommerce": (
            "Confronta prodotti",
            "Buon affare?",
            "Riassunto recensioni?",
            "Analisi valore?",
        ),
        "article": ("Riassumi articolo", "Punti principali?", "Punti chiave?", "Conclusione?"),
        "video": ("Riassunto video", "Momenti chiave?", "Video simili?", "Messaggio principale?"),
        "social": (
            "Argomenti di tendenza?",
            "Riassunto commenti",
            "Post correlati?",
            "Sentimento?",
        ),
        "general": ("Riassumi pagina", "Punti chiave?", "Cos'è questo?", "Contesto?"),
    },
    "pt": {
        "developer": ("Explicar código", "Dicas debug?", "Boas práticas?", "Complexidade?"),
        "educational": (
            "Resumir tópico",
            "Explicar simplesmente",
            "Conceitos-chave?",
            "Exemplos?",
        ),
        "ecommerce": (
            "Comparar produtos",
            "Bom negócio?",
            "Resumo avaliações?",
            "Análise valor?",
        ),
        "article": ("Resumir artigo", "Pontos principais?", "Pontos-chave?", "Conclusão?"),
        "video": ("Resumo vídeo", "Momentos-chave?", "Vídeos similares?", "Mensagem principal?"),
        "social": (
            "Tópicos em alta?",
            "Resumo comentários",
            "Posts relacionados?",
            "Sentimento?",
        ),
        "general": ("Resumir página", "Pontos-chave?", "O que é isto?", "Contexto?"),
    },
    "nl": {
        "developer": ("Leg code uit", "Debug tips?", "Best practices?", "Complexiteit?"),
        "educational": (
            "Vat onderwerp samen",
            "Leg simpel uit",
            "Kernconcepten?",
            "Voorbeelden?",
        ),
        "ecommerce": (
            "Vergelijk producten",
            "Goede deal?",
            "Samenvatting reviews?",
            "Waarde analyse?",
        ),
        "article": ("Vat artikel samen", "Hoofdpunten?", "Kernpunten?", "Conclusie?"),
        "video": (
            "Video samenvatting",
            "Belangrijke momenten?",
            "Vergelijkbare video's?",
            "Hoofdboodschap?",
        ),
        "social": (
            "Trending onderwerpen?",
            "Samenvatting reacties",
            "Gerelateerde posts?",
            "Sentiment?",
        ),
        "general": ("Vat pagina samen", "Kernpunten?", "Wat is dit?", "Context?"),
    },
    "pl": {"general": ("Podsumuj stronę", "Kluczowe punkty?", "Co to jest?", "Kontekst?")},
    "ru": {"general": ("Кратко о странице", "Ключевые моменты?", "Что это такое?", "Контекст?")},
    "zh": {"general": ("总结此页面", "要点是什么？", "这是什么？", "背景是什么？")},
    "ja": {"general": ("このページを要約", "要点は？", "これは何ですか？", "背景は？")},
    "ko": {"general": ("페이지 요약", "핵심 내용은?", "이것은 무엇인가요?", "맥락은?")},
    "ar": {"general": ("لخّص الصفحة", "النقاط الرئيسية؟", "ما هذا؟", "السياق؟")},
}

_QUESTION_MARKS = "?？؟"
# One question per line, optionally wrapped in markdown emphasis
_ITEM_RE = re.compile(
    rf"^[ \t>*_-]*\d+[ \t]*[.)][ \t]*([^{_QUESTION_MARKS}\n]+[{_QUESTION_MARKS}])[*_`\t \r]*$",
    re.MULTILINE,
)
_MARKDOWN_RE = re.compile(r"[*_`]+")
_ENUMERATED_LINE_RE = re.compile(r"^\d+[.)]")


def _compile_header(alternative: str) -> re.Pattern[str]:
    # Searched, so the earliest heading in the text wins.
    return re.compile(
        r"(?P<head>(?:^|\n)[ \t]*[*#_>]*[ \t]*(?:" + alternative + r")"
        r"(?:[ \t]*[*_]*[ \t]*[:：]|[ \t]*[*_]*[ \t]*(?=\r?\n|$)))"
        r"(?P<block>[\s\S]*)$",
        re.IGNORECASE,
    )


@lru_cache(maxsize=len(HEADER_PATTERNS))
def header_patterns_for(locale: str) -> tuple[re.Pattern[str], ...]:
    """Heading patterns in match order: requested language, English, then the rest."""
    order = [locale, LANG_EN, *(code for code in HEADER_PATTERNS if code not in (locale, LANG_EN))]
    return tuple(
        _compile_header(alternative)
        for code in order
        if code in HEADER_PATTERNS
        for alternative in HEADER_PATTERNS[code]
    )


def _clean_item(text: str) -> str:
    return " ".join(_MARKDOWN_RE.sub("", text).split())


def fallback_suggestions(site_type: str, locale: str) -> tuple[str, ...]:
    """Static suggestions for ``(site_type, locale)``, capped at three."""
    site = normalize_site_type(site_type)
    table = FALLBACK_SUGGESTIONS.get(locale) or FALLBACK_SUGGESTIONS[LANG_EN]
    items = table.get(site) or table.get(SITE_GENERAL) or FALLBACK_SUGGESTIONS[LANG_EN][SITE_GENERAL]
    return items[:MAX_FALLBACK_SUGGESTIONS]


class ResponseSynthesizer:
    """Stateless parser for model answers."""

    def split(
        self, raw_text: str, locale: str, site_type: str = SITE_GENERAL
    ) -> SynthesizedResponse:
        """Separate the trailing suggested-questions block from ``raw_text``.

        The first heading pattern that matches wins, trying the requested
        language first, and its earliest occurrence starts the block; the
        answer is everything before it. Up to four ``<n>. <question>?`` lines
        are taken from the block. When no heading matches, or a heading matches
        but holds no question, up to three static suggestions are used. A
        heading without questions is still removed from the answer.

        Raises:
            InvalidInputError: If ``locale`` is malformed or unsupported.
        """
        if not isinstance(raw_text, str):
            msg = "raw_text must be a string"
            raise InvalidInputError(msg)
        try:
            lang = normalize_locale(locale)
        except ValueError as exc:
            raise InvalidInputError(str(exc), {"locale": str(locale)}) from exc

        for pattern in header_patterns_for(lang):
            match = pattern.search(raw_text)
            if match is None:
                continue

            answer = raw_text[: match.start("head")].rstrip()
            items = [_clean_item(item) for item in _ITEM_RE.findall(match.group("block"))]
            suggestions = tuple(item for item in items if item)[:MAX_EXTRACTED_SUGGESTIONS]
            if suggestions:
                logger.debug(
                    "suggestions_extracted", extra={"count": len(suggestions), "locale": lang}
                )
                return SynthesizedResponse(answer=answer, suggestions=suggestions)

            logger.debug("suggestions_header_without_items", extra={"locale": lang})
            return SynthesizedResponse(
                answer=answer, suggestions=fallback_suggestions(site_type, lang)
            )

        logger.debug("suggestions_header_not_found", extra={"locale": lang})
        return SynthesizedResponse(answer=raw_text, suggestions=fallback_suggestions(site_type, lang))

    @staticmethod
    def parse_suggestion_lines(text: str) -> tuple[str, ...]:
        """Read a one-question-per-line reply into at most four questions.

        Numbered and bulleted lines are dropped because the model was asked for
        plain lines; every kept line is made to end with a question mark.
        """
        suggestions: list[str] = []
        for raw_line in (text or "").splitlines():
            line = raw_line.strip()
            if not line or _ENUMERATED_LINE_RE.match(line) or line[0] in "-*":
                continue
            if line[-1] not in _QUESTION_MARKS:
                line = f"{line}?"
            suggestions.append(line)
            if len(suggestions) == MAX_EXTRACTED_SUGGESTIONS:
                break
        return tuple(suggestions)
