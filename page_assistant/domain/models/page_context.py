from __future__ import annotations

from dataclasses import dataclass

from page_assistant.core.lang import LANG_EN
from page_assistant.core.site_types import SITE_GENERAL


@dataclass(frozen=True)
class PageContext:
    """What the browser knows about the page the user is looking at."""

    title: str = ""
    site_type: str = SITE_GENERAL
    language: str = LANG_EN
    domain: str = ""
