"""Diavgeia (decision registry) adapter."""

from __future__ import annotations

from .client import DiavgeiaAPIError, DiavgeiaClient
from .fetcher import DiavgeiaSource, build_diavgeia_source
from .schema import DecisionPayload, SearchResponse, VersionPayload
from .translator import format_issue_date, translate_decision

__all__ = [
    "DecisionPayload",
    "DiavgeiaAPIError",
    "DiavgeiaClient",
    "DiavgeiaSource",
    "SearchResponse",
    "VersionPayload",
    "build_diavgeia_source",
    "format_issue_date",
    "translate_decision",
]
