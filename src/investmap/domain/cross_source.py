"""Cross-source deduplication of ministry records against registry records.

The ministry website lists many of the same investments the registry publishes,
without the registry code. Each such secondary record gets a cheap shortlist of
plausible primary matches; only when the shortlist is non-empty is the external
arbiter asked for a verdict.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from investmap.domain.model import Investment
    from investmap.domain.ports import DuplicateArbiter

log = getLogger(__name__)

PREFIX_LENGTH = 10
AMOUNT_TOLERANCE = 0.2
SHORTLIST_LIMIT = 20


def _prefix_overlap(left: str | None, right: str | None) -> bool:
    if not left or not right:
        return False
    left_lower = left.lower()
    right_lower = right.lower()
    return left_lower[:PREFIX_LENGTH] in right_lower or right_lower[:PREFIX_LENGTH] in left_lower


def _amounts_close(left: float, right: float) -> bool:
    if left <= 0 or right <= 0:
        return False
    return abs(left - right) / max(left, right) < AMOUNT_TOLERANCE


def is_plausible_match(candidate: Investment, primary: Investment) -> bool:
    return (
        _prefix_overlap(candidate.name, primary.name)
        or _prefix_overlap(candidate.beneficiary, primary.beneficiary)
        or _amounts_close(candidate.total_amount, primary.total_amount)
    )


def build_shortlist(
    candidate: Investment,
    primary: Sequence[Investment],
    *,
    limit: int = SHORTLIST_LIMIT,
) -> list[Investment]:
    shortlist: list[Investment] = []
    for record in primary:
        if is_plausible_match(candidate, record):
            shortlist.append(record)
            if len(shortlist) >= limit:
                break
    return shortlist


@dataclass(slots=True)
class DedupeResult:
    merged: list[Investment]
    kept_secondary: list[Investment] = field(default_factory=list["Investment"])
    duplicates: dict[str, str] = field(default_factory=dict[str, str])
    arbitration_calls: int = 0


async def dedupe(
    primary: Sequence[Investment],
    secondary: Sequence[Investment],
    arbitrate: DuplicateArbiter,
    *,
    pause_seconds: float = 1.0,
    shortlist_limit: int = SHORTLIST_LIMIT,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> DedupeResult:
    """Return the primary set followed by the secondary records that are not duplicates.

    Primary records are never altered or dropped. Secondary records that already
    carry a registry code are never reconsidered.
    """

    primary_codes = {record.registry_code for record in primary if record.registry_code}
    result = DedupeResult(merged=list(primary))

    pending = [record for record in secondary if not record.registry_code]
    passthrough = len(secondary) - len(pending)
    log.info(
        "Starting deduplication: %s primary, %s secondary without registry code, %s passthrough",
        len(primary),
        len(pending),
        passthrough,
    )

    for record in secondary:
        if record.registry_code:
            result.merged.append(record)
            result.kept_secondary.append(record)
            continue

        label = record.source_url or record.name
        shortlist = build_shortlist(record, primary, limit=shortlist_limit)
        if not shortlist:
            log.info("No potential matches found for %s", label)
            result.merged.append(record)
            result.kept_secondary.append(record)
            continue

        if result.arbitration_calls:
            await sleep(pause_seconds)
        result.arbitration_calls += 1
        log.info("Comparing %r with %s potential matches", record.name, len(shortlist))
        verdict = await arbitrate(record, shortlist)

        matched = verdict.accepted_match if verdict is not None else None
        if matched is not None and matched not in primary_codes:
            log.warning(
                "Arbiter matched %s to unknown registry code %s; keeping it", label, matched
            )
            matched = None

        if verdict is None or matched is None:
            log.info("No duplicate found for %s", label)
            result.merged.append(record)
            result.kept_secondary.append(record)
            continue

        log.info(
            "Found duplicate: %s matches %s (confidence: %s)",
            label,
            matched,
            verdict.confidence,
        )
        result.duplicates[label] = matched

    log.info(
        "Deduplication complete: %s duplicates out of %s secondary records",
        len(result.duplicates),
        len(pending),
    )
    return result


__all__ = [
    "AMOUNT_TOLERANCE",
    "PREFIX_LENGTH",
    "SHORTLIST_LIMIT",
    "DedupeResult",
    "build_shortlist",
    "dedupe",
    "is_plausible_match",
]
