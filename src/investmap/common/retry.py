"""Explicit retry loop for calls that signal rate limiting.

HTTP transports retry on their own (see ``adapters.http_resilience``). This loop
exists for SDK calls where the server tells us to slow down and we must honour
its ``retry-after`` hint ourselves.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class BackoffPolicy:
    """Bounded exponential backoff: ``initial_delay * multiplier**n``."""

    max_retries: int = 5
    initial_delay_seconds: float = 2.0
    multiplier: float = 2.0

    def delay_for(self, retry_number: int) -> float:
        return self.initial_delay_seconds * (self.multiplier**retry_number)


@dataclass(slots=True, frozen=True)
class RetrySignal:
    """Returned by an error classifier when an error is worth retrying."""

    retry_after_seconds: float | None = None


class RetryStatus(StrEnum):
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    NON_RETRYABLE = "non_retryable"


@dataclass(slots=True, frozen=True)
class RetryOutcome[T]:
    status: RetryStatus
    attempts: int
    value: T | None = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is RetryStatus.SUCCEEDED


type ErrorClassifier = Callable[[Exception], RetrySignal | None]
type Sleep = Callable[[float], Awaitable[None]]


async def call_with_backoff[T](
    operation: Callable[[], Awaitable[T]],
    *,
    classify_error: ErrorClassifier,
    policy: BackoffPolicy | None = None,
    sleep: Sleep = asyncio.sleep,
    label: str = "operation",
) -> RetryOutcome[T]:
    """Run ``operation`` until it succeeds, fails for good, or retries run out.

    ``classify_error`` returns a ``RetrySignal`` for retryable errors and ``None``
    otherwise. A server-provided delay wins over the computed backoff.
    """

    active_policy = policy or BackoffPolicy()
    attempt = 0
    retries = 0
    while True:
        attempt += 1
        try:
            value = await operation()
        except Exception as exc:  # noqa: BLE001
            signal = classify_error(exc)
            if signal is None:
                return RetryOutcome(status=RetryStatus.NON_RETRYABLE, attempts=attempt, error=exc)
            if retries >= active_policy.max_retries:
                log.error(
                    "Maximum retries (%s) reached for %s", active_policy.max_retries, label
                )
                return RetryOutcome(status=RetryStatus.EXHAUSTED, attempts=attempt, error=exc)
            delay = signal.retry_after_seconds
            if delay is None:
                delay = active_policy.delay_for(retries)
            retries += 1
            log.warning(
                "Rate limit hit for %s. Retrying after %.1f seconds (attempt %s/%s)",
                label,
                delay,
                retries,
                active_policy.max_retries,
            )
            await sleep(delay)
            continue
        return RetryOutcome(status=RetryStatus.SUCCEEDED, attempts=attempt, value=value)
