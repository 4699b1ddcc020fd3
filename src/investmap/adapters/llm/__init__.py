"""Language-model adapters: relevance, extraction and duplicate arbitration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from investmap.config.llm import get_llm_config

from .arbiter import LlmDuplicateArbiter
from .classifier import LlmRelevanceClassifier
from .extractor import LlmRecordExtractor
from .gateway import LlmGateway, classify_anthropic_error

if TYPE_CHECKING:
    from collections.abc import Sequence

    from investmap.config.llm import LlmConfig


def build_llm_services(
    *,
    config: LlmConfig | None = None,
    gateway: LlmGateway | None = None,
    keywords: Sequence[str] | None = None,
) -> tuple[LlmRelevanceClassifier, LlmRecordExtractor, LlmDuplicateArbiter]:
    """Classifier, extractor and arbiter sharing one API client."""

    active = config or get_llm_config()
    shared = gateway or LlmGateway(config=active)
    classifier = (
        LlmRelevanceClassifier(gateway=shared, config=active, keywords=keywords)
        if keywords is not None
        else LlmRelevanceClassifier(gateway=shared, config=active)
    )
    return (
        classifier,
        LlmRecordExtractor(gateway=shared, config=active),
        LlmDuplicateArbiter(gateway=shared, config=active),
    )


__all__ = [
    "LlmDuplicateArbiter",
    "LlmGateway",
    "LlmRecordExtractor",
    "LlmRelevanceClassifier",
    "build_llm_services",
    "classify_anthropic_error",
]
