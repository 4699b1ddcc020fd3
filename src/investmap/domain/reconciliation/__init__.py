"""Reconciliation of collected candidates against the persisted snapshot."""

from __future__ import annotations

from .engine import NoCandidatesError, ReconciliationEngine, ReconciliationError
from .merge import (
    InvariantViolation,
    MergeResult,
    ViolationKind,
    find_invariant_violations,
    merge_with_prior,
)
from .result import ReconciliationResult
from .state import (
    KnownRecordPolicy,
    PipelineState,
    PriorState,
    ReconciliationRequest,
    RunSettings,
)

__all__ = [
    "InvariantViolation",
    "KnownRecordPolicy",
    "MergeResult",
    "NoCandidatesError",
    "PipelineState",
    "PriorState",
    "ReconciliationEngine",
    "ReconciliationError",
    "ReconciliationRequest",
    "ReconciliationResult",
    "RunSettings",
    "ViolationKind",
    "find_invariant_violations",
    "merge_with_prior",
]
