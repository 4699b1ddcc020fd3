"""Persisted snapshot and its generation metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from .investment import Investment


@dataclass(frozen=True, slots=True)
class RevisionEdge:
    """``original`` was superseded by ``replaced_by``."""

    original: str
    replaced_by: str


@dataclass(frozen=True, slots=True)
class GenerationMetadata:
    generated_at: datetime
    total_investments: int
    revisions_excluded: tuple[RevisionEdge, ...] = ()


@dataclass(frozen=True, slots=True)
class Snapshot:
    metadata: GenerationMetadata
    investments: tuple[Investment, ...]
