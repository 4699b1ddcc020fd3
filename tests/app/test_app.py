from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from investmap.app import build_engine, collect_investments
from investmap.config import MissingConfigurationError
from investmap.config.reconciliation import (
    DEFAULT_REGISTRY_CODE_PATTERN,
    DEFAULT_REVISION_KEYWORDS,
)
from investmap.domain.reconciliation import PipelineState, ReconciliationEngine
from investmap.domain.revisions import RevisionDetector
from tests.helpers.fakes import (
    FakeClassifier,
    FakeExtractor,
    FakePrimarySource,
    FakeSnapshotStore,
    RecordingSleep,
)
from tests.helpers.records import make_decision, make_investment


def test_collect_investments_runs_the_engine() -> None:
    store = FakeSnapshotStore()
    engine = ReconciliationEngine(
        store=store,
        detector=RevisionDetector(
            keywords=DEFAULT_REVISION_KEYWORDS, code_pattern=DEFAULT_REGISTRY_CODE_PATTERN
        ),
        classify=FakeClassifier(),
        extract=FakeExtractor({"ADA1": make_investment()}),
        query_primary=FakePrimarySource([make_decision("ADA1")]),
        clock=lambda: datetime(2025, 1, 1, tzinfo=UTC),
        sleep=RecordingSleep(),
    )

    result = collect_investments(engine=engine)

    assert result.state is PipelineState.DONE
    assert result.total_investments == 1
    assert len(store.saved) == 1


def test_build_engine_fails_fast_without_api_key(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    snapshot = tmp_path / "investments.json"

    with pytest.raises(MissingConfigurationError):
        build_engine(snapshot_path=snapshot)

    assert not snapshot.exists()


def test_build_engine_wires_adapters(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "secret")
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

    engine = build_engine(snapshot_path=tmp_path / "investments.json")

    assert engine.query_primary is not None
    assert engine.fetch_secondary is not None
    assert engine.arbitrate is not None
    assert engine.geocode is None
