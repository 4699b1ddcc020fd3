"""Revision detection and superseded-candidate filtering.

A decision can amend, correct, revoke or replace an earlier one. The detector
looks at a single candidate's metadata and reports whether it is a revision and,
where it can tell, which registry code it supersedes. ``RevisionGraph`` then
applies those findings to a relevance-filtered candidate set in two passes:
collect edges first, filter second.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from investmap.domain.model import RevisionEdge
from investmap.domain.ports import RevisionLookupError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from investmap.domain.model import Candidate
    from investmap.domain.ports import RevisionTargetLookup

log = getLogger(__name__)

_PROTOCOL_REFERENCE = re.compile(r"υπ['\s]+(αρ|αριθ|αριθμ)[.\s]+(\d+)", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class RevisionFinding:
    is_revision: bool
    revises_code: str | None = None

    @property
    def is_unresolved(self) -> bool:
        """A revision whose superseded record could not be identified."""

        return self.is_revision and self.revises_code is None


NOT_A_REVISION = RevisionFinding(is_revision=False)


class RevisionDetector:
    """Decide whether a candidate supersedes an earlier decision."""

    def __init__(
        self,
        *,
        keywords: Sequence[str],
        code_pattern: str,
        lookup: RevisionTargetLookup | None = None,
    ) -> None:
        self._keywords = tuple(keywords)
        self._code_pattern = re.compile(code_pattern)
        self._lookup = lookup

    def has_revision_keyword(self, subject: str | None) -> bool:
        if not subject:
            return False
        return any(keyword in subject for keyword in self._keywords)

    def codes_in(self, text: str, *, exclude: str | None = None) -> list[str]:
        return [code for code in self._code_pattern.findall(text) if code != exclude]

    async def detect(self, candidate: Candidate) -> RevisionFinding:
        lexical = self.has_revision_keyword(candidate.subject)
        related = [code for code in candidate.related_decisions if code and code != candidate.code]
        has_pointer = bool(candidate.corrected_version_id)

        if not (lexical or related or has_pointer):
            return NOT_A_REVISION

        revises_code: str | None = related[0] if related else None

        if revises_code is None and lexical:
            codes = self.codes_in(candidate.subject, exclude=candidate.code)
            if codes:
                revises_code = codes[0]
            else:
                _log_protocol_reference(candidate)

        version_id = candidate.corrected_version_id
        if revises_code is None and version_id and self._lookup is not None:
            revises_code = await _resolve_pointer(self._lookup, version_id, candidate.code)

        if revises_code is None:
            log.warning(
                "Decision %s appears to be a revision, "
                "but could not determine which decision it revises",
                candidate.key,
            )
        return RevisionFinding(is_revision=True, revises_code=revises_code)

    async def detect_all(self, candidates: Iterable[Candidate]) -> dict[str, RevisionFinding]:
        """Run detection sequentially and return findings keyed by candidate key."""

        findings: dict[str, RevisionFinding] = {}
        for candidate in candidates:
            finding = await self.detect(candidate)
            findings[candidate.key] = finding
            if finding.revises_code is not None:
                log.info("Decision %s is a revision of %s", candidate.key, finding.revises_code)
        return findings


async def _resolve_pointer(
    lookup: RevisionTargetLookup,
    version_id: str,
    own_code: str | None,
) -> str | None:
    try:
        code = await lookup(version_id)
    except RevisionLookupError as exc:
        log.warning("Could not fetch corrected version for id %s: %s", version_id, exc)
        return None
    if code == own_code:
        return None
    return code


def _log_protocol_reference(candidate: Candidate) -> None:
    match = _PROTOCOL_REFERENCE.search(candidate.subject)
    if match is not None:
        log.info(
            "Found protocol number reference %s in subject of %s, but no registry code",
            match.group(2),
            candidate.key,
        )


@dataclass(slots=True)
class FilterResult:
    kept: list[Candidate]
    dropped: list[RevisionEdge] = field(default_factory=list[RevisionEdge])
    retained_with_absent_successor: list[RevisionEdge] = field(
        default_factory=list[RevisionEdge]
    )


@dataclass(slots=True)
class RevisionGraph:
    """Supersession edges keyed by the superseded registry code."""

    replaced_by: dict[str, str] = field(default_factory=dict[str, str])

    @classmethod
    def from_findings(cls, findings: Mapping[str, RevisionFinding]) -> RevisionGraph:
        graph = cls()
        for key, finding in findings.items():
            if finding.revises_code is None:
                continue
            graph.add(RevisionEdge(original=finding.revises_code, replaced_by=key))
        return graph

    def add(self, edge: RevisionEdge) -> None:
        if edge.original == edge.replaced_by:
            return
        existing = self.replaced_by.get(edge.original)
        if existing is not None and existing != edge.replaced_by:
            log.warning(
                "Decision %s is revised by both %s and %s; keeping %s",
                edge.original,
                existing,
                edge.replaced_by,
                existing,
            )
            return
        self.replaced_by[edge.original] = edge.replaced_by

    def edges(self) -> tuple[RevisionEdge, ...]:
        return tuple(
            RevisionEdge(original=original, replaced_by=replaced_by)
            for original, replaced_by in self.replaced_by.items()
        )

    def superseded_among(self, keys: Iterable[str]) -> list[str]:
        """Keys that are superseded by another key of the same set."""

        present = set(keys)
        return [
            key
            for key in present
            if key in self.replaced_by and self.replaced_by[key] in present
        ]

    def filter_superseded(self, candidates: Sequence[Candidate]) -> FilterResult:
        """Drop candidates whose superseding candidate is also present.

        A candidate is never dropped on an edge whose target is absent from
        ``candidates``; that would lose the record entirely.
        """

        present = {candidate.key for candidate in candidates}

        result = FilterResult(kept=[])
        for candidate in candidates:
            successor = self.replaced_by.get(candidate.key)
            if successor is None:
                result.kept.append(candidate)
                continue
            edge = RevisionEdge(original=candidate.key, replaced_by=successor)
            if successor in present:
                log.info("Disregarding decision %s, replaced by %s", candidate.key, successor)
                result.dropped.append(edge)
            else:
                log.info(
                    "Keeping decision %s: its replacement %s is not in the relevant set",
                    candidate.key,
                    successor,
                )
                result.kept.append(candidate)
                result.retained_with_absent_successor.append(edge)
        return result


def remaining_superseded(
    kept: Iterable[Candidate],
    dropped: Iterable[RevisionEdge],
) -> list[str]:
    """Kept keys that still appear as the original of a dropped edge."""

    originals = {edge.original for edge in dropped}
    return [candidate.key for candidate in kept if candidate.key in originals]


__all__ = [
    "NOT_A_REVISION",
    "FilterResult",
    "RevisionDetector",
    "RevisionFinding",
    "RevisionGraph",
    "remaining_superseded",
]
