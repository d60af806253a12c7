"""Cancellation-aware helpers for code that degrades instead of propagating."""

from __future__ import annotations

import asyncio


def raise_if_cancelled(exc: BaseException) -> None:
    """Propagate ``exc`` again when it is a task cancellation.

    Call it first in any broad ``except`` block that logs and carries on, so a
    cancelled request still unwinds.
    """
    if isinstance(exc, asyncio.CancelledError):
        raise exc
