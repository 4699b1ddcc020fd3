"""Translate between snapshot documents and domain snapshots."""

from __future__ import annotations

from typing import TYPE_CHECKING

from investmap.domain.model import (
    AmountItem,
    FundingSource,
    GenerationMetadata,
    Incentive,
    Investment,
    Location,
    Reference,
    RevisionEdge,
    Snapshot,
)
from investmap.domain.normalization import coerce_category, coerce_incentive_type

from .schema import (
    AmountItemRecord,
    FundingSourceRecord,
    IncentiveRecord,
    InvestmentRecord,
    LocationRecord,
    MetadataRecord,
    ReferenceRecord,
    RevisionEdgeRecord,
    SnapshotDocument,
)

if TYPE_CHECKING:
    from datetime import datetime


def investment_from_record(record: InvestmentRecord) -> Investment:
    return Investment(
        name=record.name,
        beneficiary=record.beneficiary,
        total_amount=record.total_amount,
        date_approved=record.date_approved,
        reference=Reference(
            registry_code=record.reference.diavgeia_ada or None,
            source_url=record.reference.ministry_url or None,
            gazette=record.reference.fek or None,
            revises_code=record.reference.revises_ada or None,
        ),
        amount_breakdown=tuple(
            AmountItem(amount=item.amount, description=item.description)
            for item in record.amount_breakdown
        ),
        locations=tuple(
            Location(
                description=location.description,
                text_location=location.text_location,
                lat=location.lat,
                lon=location.lon,
            )
            for location in record.locations
        ),
        funding_sources=tuple(
            FundingSource(source=source.source, perc=source.perc, amount=source.amount)
            for source in record.funding_source
        ),
        incentives=tuple(
            Incentive(
                name=incentive.name,
                incentive_type=coerce_incentive_type(incentive.incentive_type),
            )
            for incentive in record.incentives_approved
        ),
        category=coerce_category(record.category),
    )


def investment_to_record(investment: Investment) -> InvestmentRecord:
    reference = investment.reference
    return InvestmentRecord(
        date_approved=investment.date_approved,
        beneficiary=investment.beneficiary,
        name=investment.name,
        total_amount=investment.total_amount,
        reference=ReferenceRecord(
            fek=reference.gazette or "",
            diavgeia_ada=reference.registry_code or "",
            ministry_url=reference.source_url,
            revises_ada=reference.revises_code,
        ),
        amount_breakdown=[
            AmountItemRecord(amount=item.amount, description=item.description)
            for item in investment.amount_breakdown
        ],
        locations=[
            LocationRecord(
                description=location.description,
                text_location=location.text_location,
                lat=location.lat,
                lon=location.lon,
            )
            for location in investment.locations
        ],
        funding_source=[
            FundingSourceRecord(source=source.source, perc=source.perc, amount=source.amount)
            for source in investment.funding_sources
        ],
        incentives_approved=[
            IncentiveRecord(
                name=incentive.name,
                incentive_type=(
                    str(incentive.incentive_type) if incentive.incentive_type else None
                ),
            )
            for incentive in investment.incentives
        ],
        category=str(investment.category) if investment.category else None,
    )


def snapshot_from_document(document: SnapshotDocument, *, fallback_time: datetime) -> Snapshot:
    investments = tuple(investment_from_record(record) for record in document.investments)
    metadata = document.metadata
    if metadata is None:
        return Snapshot(
            metadata=GenerationMetadata(
                generated_at=fallback_time, total_investments=len(investments)
            ),
            investments=investments,
        )
    return Snapshot(
        metadata=GenerationMetadata(
            generated_at=metadata.generated_at,
            total_investments=metadata.total_investments,
            revisions_excluded=tuple(
                RevisionEdge(original=edge.original, replaced_by=edge.replaced_by)
                for edge in metadata.revisions_excluded
            ),
        ),
        investments=investments,
    )


def snapshot_to_document(snapshot: Snapshot) -> SnapshotDocument:
    return SnapshotDocument(
        metadata=MetadataRecord(
            generated_at=snapshot.metadata.generated_at,
            total_investments=snapshot.metadata.total_investments,
            revisions_excluded=[
                RevisionEdgeRecord(original=edge.original, replaced_by=edge.replaced_by)
                for edge in snapshot.metadata.revisions_excluded
            ],
        ),
        investments=[investment_to_record(investment) for investment in snapshot.investments],
    )
