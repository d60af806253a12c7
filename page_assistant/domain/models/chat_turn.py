from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from page_assistant.core.time_utils import utc_now


@dataclass(frozen=True)
class ChatTurn:
    """One answered question, as handed to a chat history sink."""

    url: str
    question: str
    answer: str
    suggestions: tuple[str, ...]
    language: str
    site_type: str
    provider_id: str
    created_at: datetime = field(default_factory=utc_now)
