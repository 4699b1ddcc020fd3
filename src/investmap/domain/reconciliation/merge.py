"""Merge a run's new records into the prior snapshot and verify the result."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from investmap.domain.identity import identify, identity_keys

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Sequence

    from investmap.domain.identity import Identity
    from investmap.domain.model import Investment, RevisionEdge

log = getLogger(__name__)


@dataclass(slots=True)
class MergeResult:
    investments: list[Investment]
    kept_prior: int = 0
    replaced_prior: int = 0
    retired_prior: int = 0
    added: int = 0
    dropped_new: int = 0


def _dedupe_new(records: Sequence[Investment]) -> tuple[list[Investment], int]:
    """Keep the first of any co-arriving records that share an identity key."""

    seen: set[Identity] = set()
    unique: list[Investment] = []
    dropped = 0
    for record in records:
        keys = identity_keys(record)
        if any(key in seen for key in keys):
            log.warning("Dropping co-arriving duplicate %s (%s)", identify(record), record.name)
            dropped += 1
            continue
        seen.update(keys)
        unique.append(record)
    return unique, dropped


def merge_with_prior(
    prior: Sequence[Investment],
    new: Sequence[Investment],
    *,
    retired_codes: Collection[str],
) -> MergeResult:
    """Prior order is preserved; new records follow in the order given.

    A new record replaces every prior record it shares an identity key with.
    Records whose registry code has been superseded are removed, old and new
    alike.
    """

    fresh: list[Investment] = []
    dropped = 0
    for record in new:
        if record.registry_code in retired_codes:
            log.info("Dropping new record %s: superseded", record.registry_code)
            dropped += 1
            continue
        fresh.append(record)
    fresh, co_arriving = _dedupe_new(fresh)

    new_keys = {key for record in fresh for key in identity_keys(record)}
    result = MergeResult(investments=[], dropped_new=dropped + co_arriving)
    for record in prior:
        if record.registry_code in retired_codes:
            log.info("Removing superseded record %s", record.registry_code)
            result.retired_prior += 1
            continue
        if any(key in new_keys for key in identity_keys(record)):
            log.info("Replacing stored record %s with the new extraction", identify(record))
            result.replaced_prior += 1
            continue
        result.investments.append(record)
        result.kept_prior += 1

    result.investments.extend(fresh)
    result.added = len(fresh)
    return result


class ViolationKind(StrEnum):
    DUPLICATE_REGISTRY_CODE = "duplicate_registry_code"
    DUPLICATE_SOURCE_URL = "duplicate_source_url"
    DUPLICATE_IDENTITY = "duplicate_identity"
    SUPERSEDED_RECORD_PRESENT = "superseded_record_present"


@dataclass(frozen=True, slots=True)
class InvariantViolation:
    kind: ViolationKind
    value: str
    detail: str = field(default="")


def find_invariant_violations(
    investments: Iterable[Investment],
    edges: Iterable[RevisionEdge],
) -> list[InvariantViolation]:
    records = list(investments)
    retired = {edge.original for edge in edges}
    violations: list[InvariantViolation] = []

    codes = Counter(record.registry_code for record in records if record.registry_code)
    urls = Counter(record.source_url for record in records if record.source_url)
    identities = Counter(identify(record) for record in records)

    violations.extend(
        InvariantViolation(ViolationKind.DUPLICATE_REGISTRY_CODE, code, f"{count} records")
        for code, count in codes.items()
        if count > 1
    )
    violations.extend(
        InvariantViolation(ViolationKind.DUPLICATE_SOURCE_URL, url, f"{count} records")
        for url, count in urls.items()
        if count > 1
    )
    violations.extend(
        InvariantViolation(ViolationKind.DUPLICATE_IDENTITY, str(identity), f"{count} records")
        for identity, count in identities.items()
        if count > 1 and identity.is_weak
    )
    violations.extend(
        InvariantViolation(ViolationKind.SUPERSEDED_RECORD_PRESENT, code)
        for code in codes
        if code in retired
    )
    return violations


def log_violations(violations: Sequence[InvariantViolation]) -> None:
    for violation in violations:
        log.error(
            "Invariant violated: %s %s %s", violation.kind, violation.value, violation.detail
        )


__all__ = [
    "InvariantViolation",
    "MergeResult",
    "ViolationKind",
    "find_invariant_violations",
    "log_violations",
    "merge_with_prior",
]
