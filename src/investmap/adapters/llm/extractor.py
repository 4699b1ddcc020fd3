"""Structured record extraction from decision PDFs and project pages."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .gateway import document_content
from .prompts import (
    EXTRACT_DECISION_SYSTEM,
    EXTRACT_PAGE_SYSTEM,
    decision_extraction_prompt,
    page_extraction_prompt,
)
from .schema import InvestmentPayload, ParseFailure, parse_model
from .translator import translate_investment

if TYPE_CHECKING:
    from investmap.config.llm import LlmConfig
    from investmap.domain.model import Candidate, Investment

    from .gateway import LlmGateway, MessageContent

log = getLogger(__name__)


def _short(subject: str, limit: int = 50) -> str:
    if not subject:
        return "No subject"
    return subject if len(subject) <= limit else f"{subject[:limit]}..."


class LlmRecordExtractor:
    """Implements ``RecordExtractor``.

    Registry decisions are read from their PDF, passed by URL. Ministry pages
    are read from the captured HTML, truncated, together with the scraped hint.
    """

    def __init__(self, *, gateway: LlmGateway, config: LlmConfig) -> None:
        self._gateway = gateway
        self._config = config

    async def __call__(self, candidate: Candidate) -> Investment | None:
        request = self._request(candidate)
        if request is None:
            return None
        system, content = request

        text = await self._gateway.complete(
            system=system,
            content=content,
            max_tokens=self._config.extract_max_tokens,
            label=candidate.key,
        )
        if text is None:
            return None

        parsed = parse_model(text, InvestmentPayload)
        if isinstance(parsed, ParseFailure):
            log.error("Error parsing extracted data for %s: %s", candidate.key, parsed.reason)
            log.info("Response was: %s", parsed.raw)
            return None
        return translate_investment(parsed.value, candidate)

    def _request(self, candidate: Candidate) -> tuple[str, MessageContent] | None:
        if candidate.is_primary:
            if not candidate.document_url:
                log.warning("Decision %s has no document URL, cannot extract", candidate.key)
                return None
            log.info("Extracting data [%s]: %r", candidate.key, _short(candidate.subject))
            return EXTRACT_DECISION_SYSTEM, document_content(
                candidate.document_url, decision_extraction_prompt(candidate)
            )

        if not candidate.page_content:
            log.warning("Page %s has no captured content, cannot extract", candidate.key)
            return None
        log.info("Extracting data from ministry URL: %s", candidate.document_url)
        prompt = page_extraction_prompt(candidate, content_limit=self._config.page_content_limit)
        return EXTRACT_PAGE_SYSTEM, prompt
