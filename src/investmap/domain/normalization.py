"""Post-extraction normalisation of investment records.

Extraction output is loosely shaped; these helpers coerce it into the canonical
form before it reaches reconciliation. None of them alters a value that is
already well formed.
"""

from __future__ import annotations

import re
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from investmap.domain.model import Category, IncentiveType, SourceKind

if TYPE_CHECKING:
    from investmap.domain.model import Amount, Candidate, FundingSource, Investment

log = getLogger(__name__)

UNKNOWN_BENEFICIARY = "Unknown"
UNKNOWN_NAME = "Unknown investment"

_GAZETTE_PREFIX = "ΦΕΚ"
_GAZETTE_PARTS = re.compile(r"ΦΕΚ\s*([^/\s]+)\s*/\s*(\d+)\s*/\s*(.+)")
_WHITESPACE = re.compile(r"\s+")


def coerce_category(value: str | None) -> Category | None:
    if not value:
        return None
    try:
        return Category(value)
    except ValueError:
        log.warning("Invalid category value: %s, clearing it", value)
        return None


def coerce_incentive_type(value: str | None) -> IncentiveType | None:
    if not value:
        return None
    try:
        return IncentiveType(value)
    except ValueError:
        log.info("Unknown incentive type %s, leaving it untagged", value)
        return None


def normalize_gazette(value: str | None) -> str | None:
    """Format gazette citations as ``ΦΕΚ <series> <number>/<date>``."""

    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if not text.startswith(_GAZETTE_PREFIX):
        text = f"{_GAZETTE_PREFIX} {text}"
    text = _WHITESPACE.sub(" ", text)
    text = _GAZETTE_PARTS.sub(r"ΦΕΚ \1 \2/\3", text, count=1)
    return text.strip()


def normalize_funding_source(source: FundingSource) -> FundingSource:
    if source.perc is not None and source.perc > 1:
        log.info(
            "Normalizing funding percentage: %s -> %s for %s",
            source.perc,
            source.perc / 100,
            source.source,
        )
        return replace(source, perc=source.perc / 100)
    return source


def breakdown_total(record: Investment) -> Amount:
    return sum((item.amount for item in record.amount_breakdown), 0)


def normalize_record(record: Investment) -> Investment:
    """Infer a missing total and rescale whole-number funding percentages."""

    total = record.total_amount
    if not total and record.amount_breakdown:
        total = breakdown_total(record)
        log.info("Inferred total amount from breakdown: %s", total)

    funding = tuple(normalize_funding_source(source) for source in record.funding_sources)
    gazette = normalize_gazette(record.reference.gazette)

    return replace(
        record,
        total_amount=total or 0,
        funding_sources=funding,
        reference=replace(record.reference, gazette=gazette),
    )


def fill_defaults(record: Investment, candidate: Candidate) -> Investment:
    """Fill fields the extraction left empty from the candidate's own metadata."""

    hint = candidate.hint
    reference = record.reference
    if candidate.source is SourceKind.PRIMARY:
        if not reference.registry_code and candidate.code:
            reference = replace(reference, registry_code=candidate.code)
    elif not reference.source_url and candidate.document_url:
        reference = replace(reference, source_url=candidate.document_url)
    if not reference.gazette and hint is not None and hint.reference.gazette:
        reference = replace(reference, gazette=hint.reference.gazette)

    name = record.name.strip()
    if not name:
        name = (hint.name if hint is not None and hint.name else candidate.subject) or UNKNOWN_NAME

    beneficiary = record.beneficiary.strip()
    if not beneficiary:
        beneficiary = (hint.beneficiary if hint is not None else "") or UNKNOWN_BENEFICIARY

    date_approved = record.date_approved or candidate.issue_date or None

    total = record.total_amount
    if not total and hint is not None and hint.total_amount:
        total = hint.total_amount

    return replace(
        record,
        name=name,
        beneficiary=beneficiary,
        date_approved=date_approved,
        total_amount=total,
        reference=reference,
    )


__all__ = [
    "UNKNOWN_BENEFICIARY",
    "UNKNOWN_NAME",
    "breakdown_total",
    "coerce_category",
    "coerce_incentive_type",
    "fill_defaults",
    "normalize_funding_source",
    "normalize_gazette",
    "normalize_record",
]
