"""Relevance classification of registry candidates."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from investmap.config.reconciliation import DEFAULT_REVISION_KEYWORDS

from .prompts import CLASSIFY_SYSTEM, classification_prompt
from .schema import ParseFailure, parse_code_list

if TYPE_CHECKING:
    from collections.abc import Sequence

    from investmap.config.llm import LlmConfig
    from investmap.domain.model import Candidate

    from .gateway import LlmGateway

log = getLogger(__name__)


class LlmRelevanceClassifier:
    """Implements ``RelevanceClassifier`` with one call for the whole batch."""

    def __init__(
        self,
        *,
        gateway: LlmGateway,
        config: LlmConfig,
        keywords: Sequence[str] = DEFAULT_REVISION_KEYWORDS,
    ) -> None:
        self._gateway = gateway
        self._config = config
        self._keywords = tuple(keywords)

    async def __call__(self, candidates: Sequence[Candidate]) -> list[str]:
        if not candidates:
            return []
        log.info("Filtering %s decisions to find incentive approvals", len(candidates))
        text = await self._gateway.complete(
            system=CLASSIFY_SYSTEM,
            content=classification_prompt(candidates, self._keywords),
            max_tokens=self._config.classify_max_tokens,
            label="relevance classification",
        )
        if text is None:
            return []

        parsed = parse_code_list(text)
        if isinstance(parsed, ParseFailure):
            log.error("Error parsing classification response: %s", parsed.reason)
            log.info("Response was: %s", parsed.raw)
            return []
        return parsed.value
