"""Ports for the classification/extraction service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from investmap.domain.model import Confidence

if TYPE_CHECKING:
    from collections.abc import Sequence

    from investmap.domain.model import Candidate, Investment


@dataclass(frozen=True, slots=True)
class ArbitrationVerdict:
    is_duplicate: bool
    matched_code: str | None = None
    confidence: Confidence = Confidence.LOW
    explanation: str | None = None

    @property
    def accepted_match(self) -> str | None:
        """Matched registry code when the verdict is strong enough to act on."""

        if not self.is_duplicate or not self.matched_code:
            return None
        if self.confidence is Confidence.LOW:
            return None
        return self.matched_code


@runtime_checkable
class RelevanceClassifier(Protocol):
    """Return the keys of the candidates that are in scope.

    Output is advisory: callers must not assume it is self-consistent.
    """

    async def __call__(self, candidates: Sequence[Candidate]) -> list[str]: ...


@runtime_checkable
class RecordExtractor(Protocol):
    """Turn one candidate into a record, or ``None`` when extraction failed."""

    async def __call__(self, candidate: Candidate) -> Investment | None: ...


@runtime_checkable
class DuplicateArbiter(Protocol):
    """Decide whether ``candidate`` duplicates one of ``shortlist``."""

    async def __call__(
        self,
        candidate: Investment,
        shortlist: Sequence[Investment],
    ) -> ArbitrationVerdict | None: ...


__all__ = [
    "ArbitrationVerdict",
    "DuplicateArbiter",
    "RecordExtractor",
    "RelevanceClassifier",
]
