"""Pydantic models for the on-disk snapshot document.

Field order here is the key order written to disk. Amounts are typed
``int | float`` so whole numbers round-trip as integers.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

type Number = int | float


class SnapshotBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ReferenceRecord(SnapshotBaseModel):
    fek: str = ""
    diavgeia_ada: str = Field(default="", alias="diavgeiaADA")
    ministry_url: str | None = Field(default=None, alias="ministryUrl")
    revises_ada: str | None = Field(default=None, alias="revisesADA")


class AmountItemRecord(SnapshotBaseModel):
    amount: Number = 0
    description: str = ""


class LocationRecord(SnapshotBaseModel):
    description: str = ""
    text_location: str | None = Field(default=None, alias="textLocation")
    lat: Number | None = None
    lon: Number | None = None


class FundingSourceRecord(SnapshotBaseModel):
    source: str = ""
    perc: Number | None = None
    amount: Number | None = None


class IncentiveRecord(SnapshotBaseModel):
    name: str = ""
    incentive_type: str | None = Field(default=None, alias="incentiveType")


class InvestmentRecord(SnapshotBaseModel):
    date_approved: str | None = Field(default=None, alias="dateApproved")
    beneficiary: str = ""
    name: str = ""
    total_amount: Number = Field(default=0, alias="totalAmount")
    reference: ReferenceRecord = Field(default_factory=ReferenceRecord)
    amount_breakdown: list[AmountItemRecord] = Field(
        default_factory=list["AmountItemRecord"], alias="amountBreakdown"
    )
    locations: list[LocationRecord] = Field(default_factory=list["LocationRecord"])
    funding_source: list[FundingSourceRecord] = Field(
        default_factory=list["FundingSourceRecord"], alias="fundingSource"
    )
    incentives_approved: list[IncentiveRecord] = Field(
        default_factory=list["IncentiveRecord"], alias="incentivesApproved"
    )
    category: str | None = None


class RevisionEdgeRecord(SnapshotBaseModel):
    original: str
    replaced_by: str = Field(alias="replacedBy")


class MetadataRecord(SnapshotBaseModel):
    generated_at: datetime = Field(alias="generatedAt")
    total_investments: int = Field(default=0, alias="totalInvestments")
    revisions_excluded: list[RevisionEdgeRecord] = Field(
        default_factory=list["RevisionEdgeRecord"], alias="revisionsExcluded"
    )


class SnapshotDocument(SnapshotBaseModel):
    metadata: MetadataRecord | None = None
    investments: list[InvestmentRecord] = Field(default_factory=list["InvestmentRecord"])
