"""Run request, prior state and pipeline states for reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from investmap.domain.time_windows import DateWindow

if TYPE_CHECKING:
    from investmap.domain.model import Candidate, Investment, RevisionEdge, Snapshot


class PipelineState(StrEnum):
    IDLE = "idle"
    LOAD_PRIOR = "load_prior"
    COLLECT_CANDIDATES = "collect_candidates"
    DETECT_REVISIONS = "detect_revisions"
    CLASSIFY_RELEVANCE = "classify_relevance"
    FILTER_SUPERSEDED = "filter_superseded"
    EXTRACT = "extract"
    CROSS_SOURCE_DEDUPE = "cross_source_dedupe"
    MERGE_WITH_PRIOR = "merge_with_prior"
    PERSIST = "persist"
    DONE = "done"
    FAILED = "failed"


class KnownRecordPolicy(StrEnum):
    """What to do with candidates whose identity is already in the prior snapshot."""

    SKIP = "skip"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class RunSettings:
    batch_size: int = 3
    batch_pause_seconds: float = 1.0
    arbitration_pause_seconds: float = 1.0
    geocode_delay_seconds: float = 0.2
    shortlist_limit: int = 20
    known_record_policy: KnownRecordPolicy = KnownRecordPolicy.SKIP


@dataclass(frozen=True, slots=True)
class ReconciliationRequest:
    """Plain configuration of one run; nothing here is read from the environment."""

    window: DateWindow = field(default_factory=DateWindow)
    fresh_start: bool = False
    skip_primary: bool = False
    skip_secondary: bool = False


@dataclass(frozen=True, slots=True)
class PriorState:
    """Immutable view of the previous snapshot, built once per run."""

    investments: tuple[Investment, ...] = ()
    edges: tuple[RevisionEdge, ...] = ()
    known_codes: frozenset[str] = frozenset()
    known_urls: frozenset[str] = frozenset()
    retired_codes: frozenset[str] = frozenset()

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot | None) -> PriorState:
        if snapshot is None:
            return cls()
        investments = snapshot.investments
        edges = snapshot.metadata.revisions_excluded
        return cls(
            investments=investments,
            edges=edges,
            known_codes=frozenset(r.registry_code for r in investments if r.registry_code),
            known_urls=frozenset(r.source_url for r in investments if r.source_url),
            retired_codes=frozenset(edge.original for edge in edges),
        )

    def is_known(self, candidate: Candidate) -> bool:
        if candidate.code and candidate.code in self.known_codes:
            return True
        if not candidate.is_primary and candidate.document_url:
            return candidate.document_url in self.known_urls
        return False

    def is_retired(self, candidate: Candidate) -> bool:
        return bool(candidate.code) and candidate.code in self.retired_codes


__all__ = [
    "KnownRecordPolicy",
    "PipelineState",
    "PriorState",
    "ReconciliationRequest",
    "RunSettings",
]
