"""Utilities for constraining registry queries to specific date windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def __call__(self) -> date: ...


def _today() -> date:
    return datetime.now(UTC).date()


@dataclass(frozen=True)
class DateWindow:
    """Describe the desired date bounds for a collection run."""

    start: date | None = None
    end: date | None = None
    lookback: timedelta | None = None

    def resolve(self, *, clock: Clock = _today) -> tuple[date | None, date | None]:
        """Resolve the window into concrete dates."""

        resolved_start = self.start
        resolved_end = self.end

        if self.lookback is not None:
            if self.lookback < timedelta(0):
                raise ValueError("Lookback duration must be non-negative")
            anchor = resolved_end or clock()
            start_from_lookback = anchor - self.lookback
            if resolved_start is None:
                resolved_start = start_from_lookback
            else:
                resolved_start = max(resolved_start, start_from_lookback)
            if resolved_end is None:
                resolved_end = anchor

        if resolved_start and resolved_end and resolved_start > resolved_end:
            raise ValueError("Date window start must be before end")

        return resolved_start, resolved_end

    def __str__(self) -> str:
        start = self.start.isoformat() if self.start else "open"
        end = self.end.isoformat() if self.end else "today"
        if self.lookback is None:
            return f"{start}..{end}"
        return f"{start}..{end} (lookback {self.lookback.days} days)"


__all__ = ["Clock", "DateWindow"]
