"""Investment records and their value objects."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import Category, IncentiveType

type Amount = int | float


@dataclass(frozen=True, slots=True)
class AmountItem:
    """One first-level line of how the money will be spent."""

    amount: Amount
    description: str


@dataclass(frozen=True, slots=True)
class Location:
    description: str
    text_location: str | None = None
    lat: float | None = None
    lon: float | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None


@dataclass(frozen=True, slots=True)
class FundingSource:
    source: str
    perc: float | None = None  # fraction of the total, 0..1
    amount: Amount | None = None


@dataclass(frozen=True, slots=True)
class Incentive:
    name: str
    incentive_type: IncentiveType | None = None


@dataclass(frozen=True, slots=True)
class Reference:
    """Identity-bearing references of a record.

    ``registry_code`` and ``source_url`` carry identity; ``gazette`` is informational.
    """

    registry_code: str | None = None
    source_url: str | None = None
    gazette: str | None = None
    revises_code: str | None = None


@dataclass(frozen=True, slots=True)
class Investment:
    """Canonical investment record."""

    name: str
    beneficiary: str
    total_amount: Amount = 0
    date_approved: str | None = None
    reference: Reference = field(default_factory=Reference)
    amount_breakdown: tuple[AmountItem, ...] = ()
    locations: tuple[Location, ...] = ()
    funding_sources: tuple[FundingSource, ...] = ()
    incentives: tuple[Incentive, ...] = ()
    category: Category | None = None

    @property
    def registry_code(self) -> str | None:
        return self.reference.registry_code or None

    @property
    def source_url(self) -> str | None:
        return self.reference.source_url or None
