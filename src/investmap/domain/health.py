"""Data health checks run over the reconciled record set."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from investmap.domain.identity import identify

if TYPE_CHECKING:
    from collections.abc import Iterable

    from investmap.domain.model import Investment

log = getLogger(__name__)

AMOUNT_TOLERANCE = 0.0001
PERCENT_TOLERANCE = 0.01


class WarningType(StrEnum):
    MISSING_LOCATION_COORDS = "MISSING_LOCATION_COORDS"
    FUNDING_SOURCES_SUM_MISMATCH = "FUNDING_SOURCES_SUM_MISMATCH"
    AMOUNT_BREAKDOWN_SUM_MISMATCH = "AMOUNT_BREAKDOWN_SUM_MISMATCH"
    TOTAL_AMOUNT_ZERO = "TOTAL_AMOUNT_ZERO"
    MISSING_REGISTRY_CODE = "MISSING_REGISTRY_CODE"
    WEAK_IDENTITY = "WEAK_IDENTITY"


@dataclass(frozen=True, slots=True)
class HealthWarning:
    type: WarningType
    message: str


def _check_locations(record: Investment) -> HealthWarning | None:
    missing = [
        location
        for location in record.locations
        if location.text_location and not location.has_coordinates
    ]
    if not missing:
        return None
    return HealthWarning(
        WarningType.MISSING_LOCATION_COORDS,
        f"{len(missing)}/{len(record.locations)} locations missing coordinates",
    )


def _check_breakdown(record: Investment) -> HealthWarning | None:
    if not record.amount_breakdown or record.total_amount <= 0:
        return None
    breakdown_sum = sum(item.amount for item in record.amount_breakdown)
    if abs(breakdown_sum - record.total_amount) <= record.total_amount * AMOUNT_TOLERANCE:
        return None
    return HealthWarning(
        WarningType.AMOUNT_BREAKDOWN_SUM_MISMATCH,
        f"Amount breakdown sum ({breakdown_sum}) doesn't match total amount "
        f"({record.total_amount})",
    )


def _check_funding(record: Investment) -> HealthWarning | None:
    sources = record.funding_sources
    if not sources or record.total_amount <= 0:
        return None

    if all(source.perc is not None for source in sources):
        perc_sum = sum(source.perc or 0 for source in sources)
        if abs(perc_sum - 1) > PERCENT_TOLERANCE:
            return HealthWarning(
                WarningType.FUNDING_SOURCES_SUM_MISMATCH,
                f"Funding source percentages sum to {perc_sum * 100:.1f}% instead of 100%",
            )
        return None

    if all(source.amount is not None for source in sources):
        amount_sum = sum(source.amount or 0 for source in sources)
        if abs(amount_sum - record.total_amount) > record.total_amount * AMOUNT_TOLERANCE:
            return HealthWarning(
                WarningType.FUNDING_SOURCES_SUM_MISMATCH,
                f"Funding source amounts sum ({amount_sum}) doesn't match total amount "
                f"({record.total_amount})",
            )
    return None


def check_investment_health(record: Investment) -> list[HealthWarning]:
    warnings = [
        warning
        for warning in (
            _check_locations(record),
            _check_breakdown(record),
            _check_funding(record),
        )
        if warning is not None
    ]
    if not record.total_amount:
        warnings.append(
            HealthWarning(WarningType.TOTAL_AMOUNT_ZERO, "Total amount is zero or not specified")
        )
    if not record.registry_code:
        warnings.append(
            HealthWarning(WarningType.MISSING_REGISTRY_CODE, "Registry code is missing or empty")
        )
    if identify(record).is_weak:
        warnings.append(
            HealthWarning(
                WarningType.WEAK_IDENTITY,
                "Record has neither registry code nor source URL; identified by content hash",
            )
        )
    return warnings


def count_warnings_by_type(records: Iterable[Investment]) -> dict[WarningType, int]:
    counts: Counter[WarningType] = Counter({warning_type: 0 for warning_type in WarningType})
    for record in records:
        for warning in check_investment_health(record):
            counts[warning.type] += 1
    return dict(counts)


def log_health_summary(records: Iterable[Investment]) -> dict[WarningType, int]:
    """Log per-record warnings at DEBUG and a per-type summary at INFO."""

    materialized = list(records)
    for index, record in enumerate(materialized, start=1):
        for warning in check_investment_health(record):
            log.debug("Investment %s (%s): %s", index, record.name, warning.message)

    counts = count_warnings_by_type(materialized)
    log.info(
        "Warning summary: missing coordinates=%s, funding sum mismatch=%s, "
        "breakdown sum mismatch=%s, zero total=%s, missing registry code=%s, weak identity=%s",
        counts[WarningType.MISSING_LOCATION_COORDS],
        counts[WarningType.FUNDING_SOURCES_SUM_MISMATCH],
        counts[WarningType.AMOUNT_BREAKDOWN_SUM_MISMATCH],
        counts[WarningType.TOTAL_AMOUNT_ZERO],
        counts[WarningType.MISSING_REGISTRY_CODE],
        counts[WarningType.WEAK_IDENTITY],
    )
    return counts


__all__ = [
    "HealthWarning",
    "WarningType",
    "check_investment_health",
    "count_warnings_by_type",
    "log_health_summary",
]
