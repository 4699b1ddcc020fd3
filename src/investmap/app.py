"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from investmap.adapters.diavgeia import build_diavgeia_source
from investmap.adapters.geocoding import build_geocoder
from investmap.adapters.llm import build_llm_services
from investmap.adapters.ministry import build_ministry_source
from investmap.adapters.snapshot import JsonSnapshotStore
from investmap.config import get_llm_config, get_reconciliation_config, get_snapshot_path
from investmap.domain.reconciliation import (
    KnownRecordPolicy,
    ReconciliationEngine,
    ReconciliationRequest,
)
from investmap.domain.revisions import RevisionDetector

if TYPE_CHECKING:
    from pathlib import Path

    from investmap.domain.reconciliation import ReconciliationResult


log = getLogger(__name__)


def build_engine(
    *,
    snapshot_path: Path | None = None,
    known_record_policy: KnownRecordPolicy = KnownRecordPolicy.SKIP,
) -> ReconciliationEngine:
    """Wire the engine to the production adapters.

    The language-model credential is checked first so a missing key fails the
    run before any source is contacted or any file is touched.
    """

    llm_config = get_llm_config()
    reconciliation = get_reconciliation_config(known_record_policy=known_record_policy)

    diavgeia = build_diavgeia_source()
    classifier, extractor, arbiter = build_llm_services(
        config=llm_config, keywords=reconciliation.revision_keywords
    )
    detector = RevisionDetector(
        keywords=reconciliation.revision_keywords,
        code_pattern=reconciliation.registry_code_pattern,
        lookup=diavgeia.lookup_revision_target,
    )
    geocoder = build_geocoder()
    if geocoder is None:
        log.info("No GOOGLE_API_KEY configured, geocoding will be skipped")

    return ReconciliationEngine(
        store=JsonSnapshotStore(snapshot_path or get_snapshot_path()),
        detector=detector,
        classify=classifier,
        extract=extractor,
        query_primary=diavgeia,
        fetch_secondary=build_ministry_source(),
        arbitrate=arbiter,
        geocode=geocoder,
        settings=reconciliation.run_settings(),
    )


def collect_investments(
    request: ReconciliationRequest | None = None,
    *,
    engine: ReconciliationEngine | None = None,
    snapshot_path: Path | None = None,
    known_record_policy: KnownRecordPolicy = KnownRecordPolicy.SKIP,
) -> ReconciliationResult:
    """Collect, reconcile and persist investments using the configured adapters."""

    effective_request = request or ReconciliationRequest()
    effective_engine = engine or build_engine(
        snapshot_path=snapshot_path,
        known_record_policy=known_record_policy,
    )
    log.info(
        "Starting collection: window=%s, fresh_start=%s, skip_diavgeia=%s, skip_ministry=%s",
        effective_request.window,
        effective_request.fresh_start,
        effective_request.skip_primary,
        effective_request.skip_secondary,
    )

    result = asyncio.run(effective_engine.run(effective_request))

    log.info(
        f"Finished collection: total={result.total_investments}, "
        f"extracted={result.extracted}, failed={result.failed_extractions}, "
        f"skipped_known={result.skipped_known}, "
        f"cross_source_duplicates={result.cross_source_duplicates}, "
        f"revisions_applied={len(result.applied_edges)}"
    )
    if result.unresolved_revisions:
        log.warning(
            "Revisions with unknown targets: %s", ", ".join(result.unresolved_revisions)
        )
    return result
