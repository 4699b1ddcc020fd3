from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from investmap.config.reconciliation import (
    DEFAULT_REGISTRY_CODE_PATTERN,
    DEFAULT_REVISION_KEYWORDS,
)
from investmap.domain.reconciliation import (
    KnownRecordPolicy,
    ReconciliationEngine,
    RunSettings,
)
from investmap.domain.revisions import RevisionDetector
from tests.helpers.engine import NOW, echo_record
from tests.helpers.fakes import (
    FakeArbiter,
    FakeClassifier,
    FakeExtractor,
    FakeGeocoder,
    FakePrimarySource,
    FakeSecondarySource,
    FakeSnapshotStore,
    RecordingSleep,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from investmap.domain.model import Candidate
    from tests.helpers.engine import EngineFactory


@pytest.fixture
def revision_detector() -> RevisionDetector:
    return RevisionDetector(
        keywords=DEFAULT_REVISION_KEYWORDS,
        code_pattern=DEFAULT_REGISTRY_CODE_PATTERN,
    )


@pytest.fixture
def engine_factory(revision_detector: RevisionDetector) -> EngineFactory:
    def factory(
        store: FakeSnapshotStore,
        *,
        primary: Sequence[Candidate] = (),
        secondary: Sequence[Candidate] = (),
        classifier: FakeClassifier | None = None,
        extractor: FakeExtractor | None = None,
        arbiter: FakeArbiter | None = None,
        geocoder: FakeGeocoder | None = None,
        policy: KnownRecordPolicy = KnownRecordPolicy.SKIP,
    ) -> ReconciliationEngine:
        return ReconciliationEngine(
            store=store,
            detector=revision_detector,
            classify=classifier or FakeClassifier(),
            extract=extractor or FakeExtractor(default=echo_record),
            query_primary=FakePrimarySource(list(primary)),
            fetch_secondary=FakeSecondarySource(list(secondary)),
            arbitrate=arbiter or FakeArbiter(),
            geocode=geocoder,
            settings=RunSettings(known_record_policy=policy),
            clock=lambda: NOW,
            sleep=RecordingSleep(),
        )

    return factory
