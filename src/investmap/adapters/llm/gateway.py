"""Thin wrapper over the Anthropic Messages API with an explicit rate-limit loop."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any

import anthropic
from anthropic import AsyncAnthropic

from investmap.common.retry import RetrySignal, RetryStatus, call_with_backoff

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from investmap.config.llm import LlmConfig

log = getLogger(__name__)

type MessageContent = str | list[dict[str, Any]]


def classify_anthropic_error(exc: Exception) -> RetrySignal | None:
    """Retry only when the API asks us to slow down."""

    if not isinstance(exc, anthropic.RateLimitError):
        return None
    header = exc.response.headers.get("retry-after")
    if header is None:
        return RetrySignal()
    try:
        return RetrySignal(retry_after_seconds=float(header))
    except ValueError:
        return RetrySignal()


def response_text(message: Any) -> str | None:
    for block in message.content:
        if getattr(block, "type", None) == "text":
            return block.text
    return None


def document_content(url: str, text: str) -> list[dict[str, Any]]:
    """A user turn carrying a PDF by URL followed by the instructions."""

    return [
        {"type": "document", "source": {"type": "url", "url": url}},
        {"type": "text", "text": text},
    ]


class LlmGateway:
    """Sends one user turn and returns the text answer, or ``None`` on failure."""

    def __init__(
        self,
        *,
        config: LlmConfig,
        client: AsyncAnthropic | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config
        # SDK retries are off; call_with_backoff owns rate-limit handling
        self._client = client or AsyncAnthropic(
            api_key=config.api_key,
            max_retries=0,
            timeout=config.timeout_seconds,
        )
        self._sleep = sleep

    async def complete(
        self,
        *,
        system: str,
        content: MessageContent,
        max_tokens: int,
        label: str,
    ) -> str | None:
        async def operation() -> Any:
            return await self._client.messages.create(
                model=self._config.model,
                max_tokens=max_tokens,
                temperature=0,
                system=system,
                messages=[{"role": "user", "content": content}],
            )

        outcome = await call_with_backoff(
            operation,
            classify_error=classify_anthropic_error,
            policy=self._config.backoff,
            sleep=self._sleep,
            label=label,
        )
        if outcome.status is RetryStatus.EXHAUSTED:
            log.error("Giving up on %s after %s attempts", label, outcome.attempts)
            return None
        if not outcome.succeeded:
            log.error("Error calling the language model for %s: %s", label, outcome.error)
            return None

        text = response_text(outcome.value)
        if text is None:
            log.error("No text content in response for %s", label)
        return text


__all__ = [
    "LlmGateway",
    "MessageContent",
    "classify_anthropic_error",
    "document_content",
    "response_text",
]
