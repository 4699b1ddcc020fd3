"""Ministry strategic-investments website (secondary source) adapter."""

from __future__ import annotations

from .client import MinistryClient
from .fetcher import MinistrySource, build_ministry_source
from .parsing import (
    extract_basic_data,
    extract_gazette_links,
    extract_investment_links,
    largest_amount,
    parse_amount,
)

__all__ = [
    "MinistryClient",
    "MinistrySource",
    "build_ministry_source",
    "extract_basic_data",
    "extract_gazette_links",
    "extract_investment_links",
    "largest_amount",
    "parse_amount",
]
