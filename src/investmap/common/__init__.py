from __future__ import annotations

from .retry import (
    BackoffPolicy,
    RetryOutcome,
    RetrySignal,
    RetryStatus,
    call_with_backoff,
)

__all__ = [
    "BackoffPolicy",
    "RetryOutcome",
    "RetrySignal",
    "RetryStatus",
    "call_with_backoff",
]
