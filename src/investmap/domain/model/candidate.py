"""Raw source metadata before relevance filtering and extraction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .enums import SourceKind

if TYPE_CHECKING:
    from .investment import Investment


@dataclass(frozen=True, slots=True, kw_only=True)
class Candidate:
    """One decision (primary) or project page (secondary) awaiting extraction."""

    source: SourceKind
    code: str | None = None
    subject: str = ""
    document_url: str | None = None
    issue_date: str | None = None
    protocol_number: str | None = None
    organization: str | None = None
    decision_type: str | None = None
    corrected_version_id: str | None = None
    related_decisions: tuple[str, ...] = ()
    revises_code: str | None = None
    page_content: str | None = None
    hint: Investment | None = None

    @property
    def key(self) -> str:
        """Stable per-run key: the registry code, else the document URL."""

        if self.code:
            return self.code
        if self.document_url:
            return self.document_url
        return self.subject

    @property
    def is_primary(self) -> bool:
        return self.source is SourceKind.PRIMARY
