"""Translate Diavgeia payloads into domain candidates."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from investmap.domain.model import Candidate, SourceKind

if TYPE_CHECKING:
    from .schema import DecisionPayload

log = getLogger(__name__)


def format_issue_date(value: int | str | None) -> str | None:
    """Render the issue date as ``YYYY-MM-DD``; unparseable strings pass through."""

    if value is None:
        return None
    if isinstance(value, int):
        return datetime.fromtimestamp(value / 1000, tz=UTC).date().isoformat()
    text = value.strip()
    if not text:
        return None
    if text.isdigit():
        return format_issue_date(int(text))
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        log.debug("Keeping unparseable issue date %r", text)
        return text


def translate_decision(payload: DecisionPayload) -> Candidate:
    organization = payload.organization.label if payload.organization else None
    decision_type = payload.decision_type.label if payload.decision_type else None
    return Candidate(
        source=SourceKind.PRIMARY,
        code=payload.ada,
        subject=payload.subject,
        document_url=payload.document_url,
        issue_date=format_issue_date(payload.issue_date),
        protocol_number=payload.protocol_number,
        organization=organization or payload.organization_id,
        decision_type=decision_type or payload.decision_type_id,
        corrected_version_id=payload.corrected_version_id,
        related_decisions=tuple(payload.related_decisions),
    )
