"""Translate extraction payloads into domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from investmap.domain.model import (
    AmountItem,
    FundingSource,
    Incentive,
    Investment,
    Location,
    Reference,
)
from investmap.domain.normalization import (
    coerce_category,
    coerce_incentive_type,
    fill_defaults,
    normalize_record,
)

if TYPE_CHECKING:
    from investmap.domain.model import Candidate

    from .schema import InvestmentPayload


def translate_investment(payload: InvestmentPayload, candidate: Candidate) -> Investment:
    reference = Reference(
        registry_code=payload.reference.diavgeia_ada,
        source_url=payload.reference.ministry_url,
        gazette=payload.reference.fek,
        revises_code=payload.reference.revises_ada,
    )
    record = Investment(
        name=payload.name,
        beneficiary=payload.beneficiary,
        total_amount=payload.total_amount or 0,
        date_approved=payload.date_approved,
        reference=reference,
        amount_breakdown=tuple(
            AmountItem(amount=item.amount or 0, description=item.description)
            for item in payload.amount_breakdown
        ),
        locations=tuple(
            Location(
                description=location.description,
                text_location=location.text_location,
                lat=location.lat,
                lon=location.lon,
            )
            for location in payload.locations
        ),
        funding_sources=tuple(
            FundingSource(source=source.source, perc=source.perc, amount=source.amount)
            for source in payload.funding_source
        ),
        incentives=tuple(
            Incentive(
                name=incentive.name,
                incentive_type=coerce_incentive_type(incentive.incentive_type),
            )
            for incentive in payload.incentives_approved
            if incentive.name
        ),
        category=coerce_category(payload.category),
    )
    return fill_defaults(normalize_record(record), candidate)
