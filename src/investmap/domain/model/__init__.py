"""Public domain model surface."""

from __future__ import annotations

from investmap.domain.model.candidate import Candidate
from investmap.domain.model.enums import (
    Category,
    Confidence,
    IdentityKind,
    IncentiveType,
    SourceKind,
)
from investmap.domain.model.investment import (
    Amount,
    AmountItem,
    FundingSource,
    Incentive,
    Investment,
    Location,
    Reference,
)
from investmap.domain.model.snapshot import GenerationMetadata, RevisionEdge, Snapshot

__all__ = [  # noqa: RUF022
    # enums
    "Category",
    "Confidence",
    "IdentityKind",
    "IncentiveType",
    "SourceKind",
    # records
    "Amount",
    "AmountItem",
    "FundingSource",
    "Incentive",
    "Investment",
    "Location",
    "Reference",
    # sources
    "Candidate",
    # persistence
    "GenerationMetadata",
    "RevisionEdge",
    "Snapshot",
]
