"""Reconciliation run tuning and source-language vocabulary."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from investmap.domain.reconciliation.state import KnownRecordPolicy, RunSettings

from .errors import ConfigurationError

# Amendment, correction, revocation, replacement and "correct reiteration".
DEFAULT_REVISION_KEYWORDS: tuple[str, ...] = (
    "Τροποποίηση",
    "τροποποίηση",
    "Διόρθωση",
    "διόρθωση",
    "Ανάκληση",
    "ανάκληση",
    "Αντικατάσταση",
    "αντικατάσταση",
    "Ορθή επανάληψη",
    "ορθή επανάληψη",
)
# Ten Greek uppercase letters or digits.
DEFAULT_REGISTRY_CODE_PATTERN = r"[ΑΒΓΔΕΖΗΘΙΚΛΜΝΞΟΠΡΣΤΥΦΧΨΩ0-9]{10}"


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    batch_size: int = 3
    batch_pause_seconds: float = 1.0
    arbitration_pause_seconds: float = 1.0
    geocode_delay_seconds: float = 0.2
    shortlist_limit: int = 20
    revision_keywords: tuple[str, ...] = field(default_factory=lambda: DEFAULT_REVISION_KEYWORDS)
    registry_code_pattern: str = DEFAULT_REGISTRY_CODE_PATTERN
    known_record_policy: KnownRecordPolicy = KnownRecordPolicy.SKIP

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ConfigurationError("batch_size must be positive")
        if not self.revision_keywords:
            raise ConfigurationError("revision_keywords must not be empty")

    def run_settings(self) -> RunSettings:
        return RunSettings(
            batch_size=self.batch_size,
            batch_pause_seconds=self.batch_pause_seconds,
            arbitration_pause_seconds=self.arbitration_pause_seconds,
            geocode_delay_seconds=self.geocode_delay_seconds,
            shortlist_limit=self.shortlist_limit,
            known_record_policy=self.known_record_policy,
        )


def parse_keywords(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def get_reconciliation_config(
    *, known_record_policy: KnownRecordPolicy = KnownRecordPolicy.SKIP
) -> ReconciliationConfig:
    keywords = DEFAULT_REVISION_KEYWORDS
    raw_keywords = os.getenv("INVESTMAP_REVISION_KEYWORDS")
    if raw_keywords:
        keywords = parse_keywords(raw_keywords) or DEFAULT_REVISION_KEYWORDS
    return ReconciliationConfig(
        revision_keywords=keywords,
        known_record_policy=known_record_policy,
    )
