"""Outcome of one reconciliation run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .state import PipelineState

if TYPE_CHECKING:
    from investmap.domain.health import WarningType
    from investmap.domain.model import RevisionEdge, Snapshot

    from .merge import InvariantViolation


@dataclass(slots=True)
class ReconciliationResult:
    state: PipelineState = PipelineState.IDLE
    snapshot: Snapshot | None = None
    primary_candidates: int = 0
    secondary_candidates: int = 0
    skipped_known: int = 0
    relevant: int = 0
    superseded_in_batch: int = 0
    extracted: int = 0
    failed_extractions: int = 0
    cross_source_duplicates: int = 0
    applied_edges: tuple[RevisionEdge, ...] = ()
    unresolved_revisions: tuple[str, ...] = ()
    violations: tuple[InvariantViolation, ...] = ()
    warning_counts: dict[WarningType, int] = field(default_factory=dict["WarningType", int])

    @property
    def total_investments(self) -> int:
        return len(self.snapshot.investments) if self.snapshot is not None else 0


__all__ = ["ReconciliationResult"]
