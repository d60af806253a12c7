from __future__ import annotations

import re

LANG_EN = "en"
LANG_FR = "fr"

SUPPORTED_LANGUAGES: dict[str, str] = {
    "en": "English",
    "fr": "French",
    "es": "Spanish",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "nl": "Dutch",
    "pl": "Polish",
    "ru": "Russian",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "ar": "Arabic",
}

_LOCALE_RE = re.compile(r"^([A-Za-z]{2,3})(?:[-_][A-Za-z0-9]{2,8})*$")


def normalize_locale(locale: str | None) -> str:
    """Reduce a locale tag such as ``en-US`` or ``pt_BR`` to its supported language code.

    Raises:
        ValueError: If the tag is malformed or the language is not supported.
    """
    raw = str(locale or "").strip()
    match = _LOCALE_RE.match(raw)
    if not match:
        msg = f"Invalid locale: {locale!r}"
        raise ValueError(msg)
    code = match.group(1).lower()
    if code not in SUPPORTED_LANGUAGES:
        msg = f"Unsupported locale: {locale!r}. Must be one of {sorted(SUPPORTED_LANGUAGES)}"
        raise ValueError(msg)
    return code


def language_name(code: str, default: str = "English") -> str:
    """Return the English name of a language code."""
    return SUPPORTED_LANGUAGES.get(code, default)


# Header the model is asked to put above its follow-up questions, per language.
SUGGESTION_HEADERS: dict[str, str] = {
    "en": "Suggested questions",
    "fr": "Questions suggérées",
    "es": "Preguntas sugeridas",
    "de": "Vorgeschlagene Fragen",
    "it": "Domande suggerite",
    "pt": "Perguntas sugeridas",
    "nl": "Voorgestelde vragen",
    "pl": "Sugerowane pytania",
    "ru": "Предлагаемые вопросы",
    "zh": "建议的问题",
    "ja": "提案された質問",
    "ko": "제안된 질문",
    "ar": "الأسئلة المقترحة",
}
