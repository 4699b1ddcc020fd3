from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from investmap.domain.model import Confidence, Location, RevisionEdge
from investmap.domain.ports import ArbitrationVerdict, GeoPoint, SnapshotLoadError
from investmap.domain.reconciliation import (
    KnownRecordPolicy,
    NoCandidatesError,
    PipelineState,
    ReconciliationRequest,
)
from tests.helpers.engine import echo_record, prior_snapshot, snapshot_codes
from tests.helpers.fakes import (
    BrokenSnapshotStore,
    FakeArbiter,
    FakeClassifier,
    FakeExtractor,
    FakeGeocoder,
    FakeSecondarySource,
    FakeSnapshotStore,
)
from tests.helpers.records import make_decision, make_investment, make_page

if TYPE_CHECKING:
    from tests.helpers.engine import EngineFactory

PAGE_URL = "https://ependyseis.mindev.gov.gr/el/stratigikes/erga/epsilon"


def test_revision_in_the_same_batch_excludes_the_original(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore()
    extractor = FakeExtractor(default=echo_record)
    engine = engine_factory(
        store,
        primary=[make_decision("ADA1"), make_decision("ADA2", related=("ADA1",))],
        extractor=extractor,
    )

    result = asyncio.run(engine.run(ReconciliationRequest()))

    assert result.state is PipelineState.DONE
    assert extractor.calls == ["ADA2"]
    assert snapshot_codes(store.snapshot) == ["ADA2"]
    assert store.snapshot is not None
    assert store.snapshot.investments[0].reference.revises_code == "ADA1"
    assert store.snapshot.metadata.revisions_excluded == (
        RevisionEdge(original="ADA1", replaced_by="ADA2"),
    )
    assert result.superseded_in_batch == 1


def test_superseded_record_is_never_resurrected(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore(prior_snapshot(make_investment(name="Original", code="ADA1")))

    asyncio.run(
        engine_factory(store, primary=[make_decision("ADA2", related=("ADA1",))]).run(
            ReconciliationRequest()
        )
    )
    assert snapshot_codes(store.snapshot) == ["ADA2"]

    extractor = FakeExtractor(default=echo_record)
    engine = engine_factory(
        store,
        primary=[make_decision("ADA1"), make_decision("ADA2")],
        extractor=extractor,
    )
    result = asyncio.run(engine.run(ReconciliationRequest()))

    assert extractor.calls == []
    assert result.skipped_known == 2
    assert snapshot_codes(store.snapshot) == ["ADA2"]
    assert store.snapshot is not None
    assert store.snapshot.metadata.revisions_excluded == (
        RevisionEdge(original="ADA1", replaced_by="ADA2"),
    )


def test_amendment_replaces_the_prior_decision_and_its_amount(
    engine_factory: EngineFactory,
) -> None:
    store = FakeSnapshotStore(
        prior_snapshot(make_investment(name="Hotel", code="ADA1", total_amount=1_000_000))
    )
    amendment = make_decision(
        "ADA2",
        subject="Τροποποίηση της απόφασης υπαγωγής",
        related=("ADA1",),
    )
    extractor = FakeExtractor({"ADA2": make_investment(name="Hotel", total_amount=1_200_000)})

    asyncio.run(
        engine_factory(store, primary=[amendment], extractor=extractor).run(
            ReconciliationRequest()
        )
    )

    assert snapshot_codes(store.snapshot) == ["ADA2"]
    assert store.snapshot is not None
    assert store.snapshot.investments[0].total_amount == 1_200_000
    assert store.snapshot.investments[0].reference.revises_code == "ADA1"
    assert store.snapshot.metadata.revisions_excluded == (
        RevisionEdge(original="ADA1", replaced_by="ADA2"),
    )


def test_revision_chain_retires_every_earlier_decision(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore()
    candidates = [
        make_decision("ADA1"),
        make_decision("ADA2", related=("ADA1",)),
        make_decision("ADA3", related=("ADA2",)),
    ]
    extractor = FakeExtractor(default=echo_record)

    result = asyncio.run(
        engine_factory(store, primary=candidates, extractor=extractor).run(
            ReconciliationRequest()
        )
    )

    assert extractor.calls == ["ADA3"]
    assert snapshot_codes(store.snapshot) == ["ADA3"]
    assert set(result.applied_edges) == {
        RevisionEdge(original="ADA1", replaced_by="ADA2"),
        RevisionEdge(original="ADA2", replaced_by="ADA3"),
    }
    assert store.snapshot is not None
    assert set(store.snapshot.metadata.revisions_excluded) == set(result.applied_edges)

    extractor = FakeExtractor(default=echo_record)
    asyncio.run(
        engine_factory(store, primary=candidates, extractor=extractor).run(
            ReconciliationRequest()
        )
    )

    assert extractor.calls == []
    assert snapshot_codes(store.snapshot) == ["ADA3"]


def test_revision_chain_with_failed_head_retires_nothing(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore()
    candidates = [
        make_decision("ADA1"),
        make_decision("ADA2", related=("ADA1",)),
        make_decision("ADA3", related=("ADA2",)),
    ]
    extractor = FakeExtractor({"ADA3": None}, default=echo_record)

    result = asyncio.run(
        engine_factory(store, primary=candidates, extractor=extractor).run(
            ReconciliationRequest()
        )
    )

    assert result.applied_edges == ()
    assert store.snapshot is not None
    assert store.snapshot.metadata.revisions_excluded == ()


def test_second_run_with_same_sources_is_idempotent(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore()
    candidates = [make_decision("ADA1"), make_decision("ADA2")]

    asyncio.run(engine_factory(store, primary=candidates).run(ReconciliationRequest()))
    first = store.snapshot
    asyncio.run(engine_factory(store, primary=candidates).run(ReconciliationRequest()))

    assert store.snapshot == first
    assert len(store.saved) == 2


def test_failed_successor_extraction_records_no_edge(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore(prior_snapshot(make_investment(name="Kept", code="ADA0")))
    extractor = FakeExtractor({"ADA2": None}, default=echo_record)
    engine = engine_factory(
        store,
        primary=[make_decision("ADA1"), make_decision("ADA2", related=("ADA1",))],
        extractor=extractor,
    )

    result = asyncio.run(engine.run(ReconciliationRequest()))

    assert result.failed_extractions == 1
    assert result.applied_edges == ()
    assert snapshot_codes(store.snapshot) == ["ADA0"]
    assert store.snapshot is not None
    assert store.snapshot.metadata.revisions_excluded == ()


def test_extractor_exception_becomes_an_absence(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore()
    extractor = FakeExtractor(raises={"ADA1": RuntimeError("boom")}, default=echo_record)
    engine = engine_factory(
        store,
        primary=[make_decision("ADA1"), make_decision("ADA2")],
        extractor=extractor,
    )

    result = asyncio.run(engine.run(ReconciliationRequest()))

    assert result.failed_extractions == 1
    assert snapshot_codes(store.snapshot) == ["ADA2"]


def test_no_candidates_is_fatal_and_writes_nothing(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore()
    engine = engine_factory(store)

    with pytest.raises(NoCandidatesError):
        asyncio.run(engine.run(ReconciliationRequest()))

    assert engine.state is PipelineState.FAILED
    assert store.saved == []


def test_unreadable_snapshot_is_fatal_and_writes_nothing(engine_factory: EngineFactory) -> None:
    store = BrokenSnapshotStore(SnapshotLoadError("corrupt"))
    engine = engine_factory(store, primary=[make_decision("ADA1")])

    with pytest.raises(SnapshotLoadError):
        asyncio.run(engine.run(ReconciliationRequest()))

    assert store.saved == []


def test_fresh_start_ignores_prior_records_and_edges(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore(
        prior_snapshot(
            make_investment(name="Old", code="ADA1"),
            edges=[RevisionEdge(original="ADA0", replaced_by="ADA1")],
        )
    )
    engine = engine_factory(store, primary=[make_decision("ADA0"), make_decision("ADA1")])

    asyncio.run(engine.run(ReconciliationRequest(fresh_start=True)))

    assert snapshot_codes(store.snapshot) == ["ADA0", "ADA1"]
    assert store.snapshot is not None
    assert store.snapshot.metadata.revisions_excluded == ()
    assert store.snapshot.investments[1].name == "Project ADA1"


def test_refresh_policy_replaces_known_records(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore(
        prior_snapshot(
            make_investment(name="Old", code="ADA1"), make_investment(name="B", code="ADA2")
        )
    )
    engine = engine_factory(
        store, primary=[make_decision("ADA1")], policy=KnownRecordPolicy.REFRESH
    )

    asyncio.run(engine.run(ReconciliationRequest()))

    assert store.snapshot is not None
    assert [record.name for record in store.snapshot.investments] == ["B", "Project ADA1"]


def test_classifier_selection_limits_extraction(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore()
    extractor = FakeExtractor(default=echo_record)
    engine = engine_factory(
        store,
        primary=[make_decision("ADA1"), make_decision("ADA2")],
        classifier=FakeClassifier(["ADA2"]),
        extractor=extractor,
    )

    result = asyncio.run(engine.run(ReconciliationRequest()))

    assert extractor.calls == ["ADA2"]
    assert result.relevant == 1


def test_ministry_duplicate_of_registry_record_is_dropped(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore()
    extractor = FakeExtractor(
        {
            "ADA1": make_investment(name="Epsilon Resort Chania", total_amount=100_000_000),
            PAGE_URL: make_investment(name="Epsilon Resort", total_amount=98_000_000),
        }
    )
    arbiter = FakeArbiter(
        {
            PAGE_URL: ArbitrationVerdict(
                is_duplicate=True, matched_code="ADA1", confidence=Confidence.MEDIUM
            )
        }
    )
    engine = engine_factory(
        store,
        primary=[make_decision("ADA1")],
        secondary=[make_page(PAGE_URL)],
        extractor=extractor,
        arbiter=arbiter,
    )

    result = asyncio.run(engine.run(ReconciliationRequest()))

    assert snapshot_codes(store.snapshot) == ["ADA1"]
    assert result.cross_source_duplicates == 1
    assert arbiter.calls == [(PAGE_URL, ["ADA1"])]


def test_ministry_records_are_compared_with_prior_registry_records(
    engine_factory: EngineFactory,
) -> None:
    store = FakeSnapshotStore(
        prior_snapshot(make_investment(name="Epsilon Resort Chania", code="ADA1"))
    )
    arbiter = FakeArbiter(
        {
            PAGE_URL: ArbitrationVerdict(
                is_duplicate=True, matched_code="ADA1", confidence=Confidence.HIGH
            )
        }
    )
    engine = engine_factory(
        store,
        secondary=[make_page(PAGE_URL)],
        extractor=FakeExtractor({PAGE_URL: make_investment(name="Epsilon Resort")}),
        arbiter=arbiter,
    )

    asyncio.run(engine.run(ReconciliationRequest(skip_primary=True)))

    assert snapshot_codes(store.snapshot) == ["ADA1"]


def test_known_ministry_url_is_skipped(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore(prior_snapshot(make_investment(name="Page", url=PAGE_URL)))
    extractor = FakeExtractor(default=echo_record)
    engine = engine_factory(store, secondary=[make_page(PAGE_URL)], extractor=extractor)

    result = asyncio.run(engine.run(ReconciliationRequest()))

    assert extractor.calls == []
    assert result.skipped_known == 1


def test_skipped_sources_are_not_queried(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore()
    engine = engine_factory(
        store, primary=[make_decision("ADA1")], secondary=[make_page(PAGE_URL)]
    )

    asyncio.run(engine.run(ReconciliationRequest(skip_secondary=True)))

    assert isinstance(engine.fetch_secondary, FakeSecondarySource)
    assert engine.fetch_secondary.calls == 0
    assert snapshot_codes(store.snapshot) == ["ADA1"]


def test_geocoder_fills_coordinates_before_persisting(engine_factory: EngineFactory) -> None:
    store = FakeSnapshotStore()
    record = make_investment(locations=(Location("Hotel", text_location="Chania, Greece"),))
    engine = engine_factory(
        store,
        primary=[make_decision("ADA1")],
        extractor=FakeExtractor({"ADA1": record}),
        geocoder=FakeGeocoder({"Chania, Greece": GeoPoint(lat=35.5, lng=24.0)}),
    )

    asyncio.run(engine.run(ReconciliationRequest()))

    assert store.snapshot is not None
    location = store.snapshot.investments[0].locations[0]
    assert (location.lat, location.lon) == (35.5, 24.0)
