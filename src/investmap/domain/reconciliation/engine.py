"""Orchestrator for the reconciliation pipeline.

The engine composes port interfaces but does not prescribe concrete adapters.
One run walks the states in ``PipelineState`` order: load the prior snapshot,
collect candidates from both sources, detect revisions, filter by relevance,
drop superseded candidates, extract, deduplicate across sources, merge with the
prior snapshot and persist. Per-item failures become absences; only fatal
preconditions abort the run, and they do so before anything is written.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from investmap.domain.batching import process_in_batches
from investmap.domain.cross_source import dedupe
from investmap.domain.enrichment import enrich_locations
from investmap.domain.health import log_health_summary
from investmap.domain.model import GenerationMetadata, RevisionEdge, Snapshot
from investmap.domain.revisions import RevisionGraph, remaining_superseded

from .merge import find_invariant_violations, log_violations, merge_with_prior
from .result import ReconciliationResult
from .state import KnownRecordPolicy, PipelineState, PriorState, RunSettings

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Sequence

    from investmap.domain.model import Candidate, Investment
    from investmap.domain.ports import (
        DuplicateArbiter,
        Geocoder,
        PrimarySourceQuery,
        RecordExtractor,
        RelevanceClassifier,
        SecondarySourceFetcher,
        SnapshotStore,
    )
    from investmap.domain.revisions import RevisionDetector, RevisionFinding

    from .state import ReconciliationRequest

log = getLogger(__name__)


class ReconciliationError(RuntimeError):
    """Base class for errors that abort a run."""


class NoCandidatesError(ReconciliationError):
    """Raised when no source produced a single candidate."""


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class _Extraction:
    candidate: Candidate
    record: Investment | None


@dataclass(slots=True)
class ReconciliationEngine:
    """Run the full pipeline from source candidates to a persisted snapshot."""

    store: SnapshotStore
    detector: RevisionDetector
    classify: RelevanceClassifier
    extract: RecordExtractor
    query_primary: PrimarySourceQuery | None = None
    fetch_secondary: SecondarySourceFetcher | None = None
    arbitrate: DuplicateArbiter | None = None
    geocode: Geocoder | None = None
    settings: RunSettings = field(default_factory=RunSettings)
    clock: Callable[[], datetime] = _utcnow
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    state: PipelineState = field(default=PipelineState.IDLE, init=False)

    async def run(self, request: ReconciliationRequest) -> ReconciliationResult:
        """Run one reconciliation. Raises on fatal preconditions, after setting ``FAILED``."""

        result = ReconciliationResult()
        try:
            await self._run(request, result)
        except Exception:
            self._enter(PipelineState.FAILED)
            result.state = self.state
            raise
        self._enter(PipelineState.DONE)
        result.state = self.state
        return result

    async def _run(self, request: ReconciliationRequest, result: ReconciliationResult) -> None:
        self._enter(PipelineState.LOAD_PRIOR)
        prior = self._load_prior(request)

        self._enter(PipelineState.COLLECT_CANDIDATES)
        primary, secondary = await self._collect(request, result)
        primary = self._skip_known(primary, prior, result)
        secondary = self._skip_known(secondary, prior, result)

        self._enter(PipelineState.DETECT_REVISIONS)
        findings = await self.detector.detect_all(primary)
        primary = [_annotate(candidate, findings.get(candidate.key)) for candidate in primary]
        result.unresolved_revisions = tuple(
            key for key, finding in findings.items() if finding.is_unresolved
        )
        graph = RevisionGraph.from_findings(findings)

        self._enter(PipelineState.CLASSIFY_RELEVANCE)
        relevant = await self._classify(primary, graph)
        result.relevant = len(relevant)

        self._enter(PipelineState.FILTER_SUPERSEDED)
        filtered = graph.filter_superseded(relevant)
        result.superseded_in_batch = len(filtered.dropped)
        problems = remaining_superseded(filtered.kept, filtered.dropped)
        if problems:
            log.error("Superseded candidates remain after filtering: %s", ", ".join(problems))
        log.info(
            "After filtering revisions: %s/%s decisions will be processed",
            len(filtered.kept),
            len(relevant),
        )

        self._enter(PipelineState.EXTRACT)
        extractions = await self._extract([*filtered.kept, *secondary])
        new_primary: list[Investment] = []
        new_secondary: list[Investment] = []
        for extraction in extractions:
            if extraction.record is None:
                result.failed_extractions += 1
                continue
            if extraction.candidate.is_primary:
                new_primary.append(extraction.record)
            else:
                new_secondary.append(extraction.record)
        result.extracted = len(new_primary) + len(new_secondary)
        applied = _applied_edges(new_primary, filtered.dropped)

        new_records = new_primary + new_secondary
        if new_secondary and self.arbitrate is not None:
            self._enter(PipelineState.CROSS_SOURCE_DEDUPE)
            new_records = await self._dedupe(
                self.arbitrate, new_primary, new_secondary, prior, applied, result
            )

        self._enter(PipelineState.MERGE_WITH_PRIOR)
        edges = _accumulate(prior.edges, applied)
        merged = merge_with_prior(
            prior.investments,
            new_records,
            retired_codes={edge.original for edge in edges},
        )
        log.info(
            "Merged: kept %s, replaced %s, retired %s, added %s",
            merged.kept_prior,
            merged.replaced_prior,
            merged.retired_prior,
            merged.added,
        )
        investments = merged.investments
        if self.geocode is not None:
            enriched = await enrich_locations(
                investments,
                geocode=self.geocode,
                delay_seconds=self.settings.geocode_delay_seconds,
                sleep=self.sleep,
            )
            investments = enriched.investments
        else:
            log.info("No geocoder configured, skipping geocoding")

        violations = find_invariant_violations(investments, edges)
        log_violations(violations)
        result.violations = tuple(violations)
        result.applied_edges = applied
        result.warning_counts = log_health_summary(investments)

        self._enter(PipelineState.PERSIST)
        snapshot = Snapshot(
            metadata=GenerationMetadata(
                generated_at=self.clock(),
                total_investments=len(investments),
                revisions_excluded=edges,
            ),
            investments=tuple(investments),
        )
        self.store.save(snapshot)
        result.snapshot = snapshot
        log.info("Saved %s investments", len(investments))

    def _enter(self, state: PipelineState) -> None:
        log.debug("Reconciliation state: %s -> %s", self.state, state)
        self.state = state

    def _load_prior(self, request: ReconciliationRequest) -> PriorState:
        if request.fresh_start:
            log.info("Ignoring existing entries: fresh start requested")
            return PriorState()
        prior = PriorState.from_snapshot(self.store.load())
        log.info(
            "Found %s existing investments (%s registry codes, %s revision edges)",
            len(prior.investments),
            len(prior.known_codes),
            len(prior.edges),
        )
        return prior

    async def _collect(
        self,
        request: ReconciliationRequest,
        result: ReconciliationResult,
    ) -> tuple[list[Candidate], list[Candidate]]:
        primary: list[Candidate] = []
        secondary: list[Candidate] = []
        if request.skip_primary or self.query_primary is None:
            log.info("Skipping registry collection")
        else:
            start, end = request.window.resolve()
            primary = await self.query_primary(start=start, end=end)
            log.info("Collected %s registry candidates", len(primary))
        if request.skip_secondary or self.fetch_secondary is None:
            log.info("Skipping ministry website collection")
        else:
            secondary = await self.fetch_secondary()
            log.info("Collected %s ministry candidates", len(secondary))

        result.primary_candidates = len(primary)
        result.secondary_candidates = len(secondary)
        if not primary and not secondary:
            raise NoCandidatesError("No candidates collected from any source")
        return primary, secondary

    def _skip_known(
        self,
        candidates: list[Candidate],
        prior: PriorState,
        result: ReconciliationResult,
    ) -> list[Candidate]:
        refresh = self.settings.known_record_policy is KnownRecordPolicy.REFRESH
        pending: list[Candidate] = []
        for candidate in candidates:
            if prior.is_retired(candidate):
                log.info("Skipping %s: superseded in an earlier run", candidate.key)
                result.skipped_known += 1
            elif not refresh and prior.is_known(candidate):
                result.skipped_known += 1
            else:
                pending.append(candidate)
        skipped = len(candidates) - len(pending)
        if skipped:
            log.info("Skipping %s candidate(s) that already exist in the snapshot", skipped)
        return pending

    async def _classify(
        self,
        candidates: Sequence[Candidate],
        graph: RevisionGraph,
    ) -> list[Candidate]:
        if not candidates:
            return []
        selected_keys = set(await self.classify(candidates))
        relevant = [candidate for candidate in candidates if candidate.key in selected_keys]
        log.info("Found %s relevant decisions about incentive approvals", len(relevant))

        excluded_revisions = [
            candidate
            for candidate in candidates
            if candidate.key not in selected_keys and self._has_revision_marker(candidate)
        ]
        for candidate in excluded_revisions:
            log.info(
                "Classifier excluded possible revision %s: %s",
                candidate.key,
                candidate.subject[:50],
            )

        inconsistent = graph.superseded_among(candidate.key for candidate in relevant)
        if inconsistent:
            log.warning(
                "Classifier selected decisions that other selected decisions revise: %s",
                ", ".join(sorted(inconsistent)),
            )
        return relevant

    def _has_revision_marker(self, candidate: Candidate) -> bool:
        return bool(
            candidate.revises_code
            or candidate.corrected_version_id
            or self.detector.has_revision_keyword(candidate.subject)
        )

    async def _extract(self, candidates: Sequence[Candidate]) -> list[_Extraction]:
        if not candidates:
            return []
        log.info("Starting to extract %s candidates", len(candidates))

        async def worker(candidate: Candidate) -> _Extraction:
            try:
                record = await self.extract(candidate)
            except Exception:  # noqa: BLE001
                log.exception("Extraction failed for %s", candidate.key)
                record = None
            if record is None:
                log.warning("No record extracted for %s", candidate.key)
                return _Extraction(candidate, None)
            return _Extraction(candidate, _attach_reference(record, candidate))

        extractions = await process_in_batches(
            candidates,
            worker,
            batch_size=self.settings.batch_size,
            pause_seconds=self.settings.batch_pause_seconds,
            sleep=self.sleep,
        )
        succeeded = sum(1 for extraction in extractions if extraction.record is not None)
        log.info("Successfully extracted %s/%s candidates", succeeded, len(candidates))
        return extractions

    async def _dedupe(
        self,
        arbitrate: DuplicateArbiter,
        new_primary: list[Investment],
        new_secondary: list[Investment],
        prior: PriorState,
        applied: Iterable[RevisionEdge],
        result: ReconciliationResult,
    ) -> list[Investment]:
        retired = prior.retired_codes | {edge.original for edge in applied}
        new_codes = {record.registry_code for record in new_primary}
        # earlier runs' registry records count as matches too
        reference = new_primary + [
            record
            for record in prior.investments
            if record.registry_code
            and record.registry_code not in retired
            and record.registry_code not in new_codes
        ]
        deduped = await dedupe(
            reference,
            new_secondary,
            arbitrate,
            pause_seconds=self.settings.arbitration_pause_seconds,
            shortlist_limit=self.settings.shortlist_limit,
            sleep=self.sleep,
        )
        result.cross_source_duplicates = len(deduped.duplicates)
        return new_primary + deduped.kept_secondary


def _annotate(candidate: Candidate, finding: RevisionFinding | None) -> Candidate:
    if finding is None or finding.revises_code is None:
        return candidate
    return replace(candidate, revises_code=finding.revises_code)


def _attach_reference(record: Investment, candidate: Candidate) -> Investment:
    """Pin the record to the candidate it came from; extracted content is untouched."""

    reference = record.reference
    if candidate.is_primary:
        reference = replace(reference, registry_code=candidate.code)
        if candidate.revises_code:
            reference = replace(reference, revises_code=candidate.revises_code)
    elif candidate.document_url:
        reference = replace(reference, source_url=candidate.document_url)
    if reference == record.reference:
        return record
    return replace(record, reference=reference)


def _applied_edges(
    extracted: Iterable[Investment],
    dropped: Iterable[RevisionEdge],
) -> tuple[RevisionEdge, ...]:
    """Edges whose superseding record was extracted in this run.

    A dropped decision also counts as replaced when its successor was itself
    retired by an applied edge, so chains like A, B, C retire both A and B.
    """

    settled: set[str] = set()
    edges: list[RevisionEdge] = []
    for record in extracted:
        code = record.registry_code
        if code is None:
            continue
        settled.add(code)
        revises = record.reference.revises_code
        if revises and revises != code:
            edges.append(RevisionEdge(original=revises, replaced_by=code))
            settled.add(revises)

    pending = list(dropped)
    progressed = True
    while progressed:
        progressed = False
        for edge in list(pending):
            if edge.replaced_by in settled:
                edges.append(edge)
                settled.add(edge.original)
                pending.remove(edge)
                progressed = True
    for edge in pending:
        log.warning(
            "Decision %s was dropped for %s, whose extraction failed",
            edge.original,
            edge.replaced_by,
        )
    return _accumulate((), edges)


def _accumulate(
    existing: Iterable[RevisionEdge],
    new: Iterable[RevisionEdge],
) -> tuple[RevisionEdge, ...]:
    seen: set[RevisionEdge] = set()
    edges: list[RevisionEdge] = []
    for edge in (*existing, *new):
        if edge in seen:
            continue
        seen.add(edge)
        edges.append(edge)
    return tuple(edges)


__all__ = ["NoCandidatesError", "ReconciliationEngine", "ReconciliationError"]
