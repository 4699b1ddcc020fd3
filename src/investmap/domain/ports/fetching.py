"""Ports for collecting candidates from the two sources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import date

    from investmap.domain.model import Candidate


class RevisionLookupError(RuntimeError):
    """Raised when a corrected-version pointer cannot be resolved."""


@runtime_checkable
class PrimarySourceQuery(Protocol):
    """Search the decision registry for candidates issued within a date range."""

    async def __call__(
        self,
        *,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Candidate]: ...


@runtime_checkable
class SecondarySourceFetcher(Protocol):
    """Scrape every project page from the ministry website."""

    async def __call__(self) -> list[Candidate]: ...


@runtime_checkable
class RevisionTargetLookup(Protocol):
    """Resolve a corrected-version id into the registry code it points at."""

    async def __call__(self, version_id: str) -> str | None: ...


__all__ = [
    "PrimarySourceQuery",
    "RevisionLookupError",
    "RevisionTargetLookup",
    "SecondarySourceFetcher",
]
