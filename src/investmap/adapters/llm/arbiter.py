"""Duplicate arbitration between a ministry record and registry records."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from investmap.domain.model import Confidence
from investmap.domain.ports import ArbitrationVerdict

from .prompts import ARBITRATE_SYSTEM, arbitration_prompt
from .schema import ParseFailure, VerdictPayload, parse_model

if TYPE_CHECKING:
    from collections.abc import Sequence

    from investmap.config.llm import LlmConfig
    from investmap.domain.model import Investment

    from .gateway import LlmGateway

log = getLogger(__name__)


def _confidence(value: str) -> Confidence:
    try:
        return Confidence(value)
    except ValueError:
        log.info("Unknown confidence %r, treating it as low", value)
        return Confidence.LOW


class LlmDuplicateArbiter:
    """Implements ``DuplicateArbiter``."""

    def __init__(self, *, gateway: LlmGateway, config: LlmConfig) -> None:
        self._gateway = gateway
        self._config = config

    async def __call__(
        self,
        candidate: Investment,
        shortlist: Sequence[Investment],
    ) -> ArbitrationVerdict | None:
        label = candidate.source_url or candidate.name
        log.info(
            'Comparing ministry investment "%s" with %s potential matches',
            candidate.name,
            len(shortlist),
        )
        text = await self._gateway.complete(
            system=ARBITRATE_SYSTEM,
            content=arbitration_prompt(candidate, shortlist),
            max_tokens=self._config.arbitrate_max_tokens,
            label=f"deduplication of {label}",
        )
        if text is None:
            return None

        parsed = parse_model(text, VerdictPayload)
        if isinstance(parsed, ParseFailure):
            log.error("Error parsing arbitration response for %s: %s", label, parsed.reason)
            log.info("Response was: %s", parsed.raw)
            return None
        verdict = parsed.value
        return ArbitrationVerdict(
            is_duplicate=verdict.is_duplicate,
            matched_code=verdict.matched_ada,
            confidence=_confidence(verdict.confidence),
            explanation=verdict.explanation,
        )
