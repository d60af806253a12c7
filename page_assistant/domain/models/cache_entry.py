from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached payload with an absolute expiry."""

    key: str
    payload: str
    created_at: datetime
    expires_at: datetime

    def __post_init__(self) -> None:
        if self.expires_at <= self.created_at:
            msg = "expires_at must be later than created_at"
            raise ValueError(msg)

    @classmethod
    def create(cls, key: str, payload: str, *, now: datetime, ttl_seconds: float) -> CacheEntry:
        """Build an entry that expires ``ttl_seconds`` after ``now``."""
        if ttl_seconds <= 0:
            msg = "ttl_seconds must be positive"
            raise ValueError(msg)
        return cls(
            key=key,
            payload=payload,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_at
