"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Category(StrEnum):
    """Sector an investment belongs to."""

    PRODUCTION_MANUFACTURING = "PRODUCTION_MANUFACTURING"
    TECHNOLOGY_INNOVATION = "TECHNOLOGY_INNOVATION"
    TOURISM_CULTURE = "TOURISM_CULTURE"
    SERVICES_EDUCATION = "SERVICES_EDUCATION"
    HEALTHCARE_WELFARE = "HEALTHCARE_WELFARE"


class IncentiveType(StrEnum):
    FAST_TRACK_LICENSING = "FAST_TRACK_LICENSING"
    SPECIAL_ZONING = "SPECIAL_ZONING"
    TAX_RATE_FREEZE = "TAX_RATE_FREEZE"
    TAX_EXEMPTION = "TAX_EXEMPTION"
    ACCELERATED_DEPRECIATION = "ACCELERATED_DEPRECIATION"
    INVESTMENT_GRANT = "INVESTMENT_GRANT"
    LEASING_SUBSIDY = "LEASING_SUBSIDY"
    EMPLOYMENT_COST_SUBSIDY = "EMPLOYMENT_COST_SUBSIDY"
    AUDITOR_MONITORING = "AUDITOR_MONITORING"
    SHORELINE_USE = "SHORELINE_USE"
    EXPROPRIATION_SUPPORT = "EXPROPRIATION_SUPPORT"


class SourceKind(StrEnum):
    """Where a candidate came from."""

    PRIMARY = "primary"  # decision registry, identified by registry code
    SECONDARY = "secondary"  # ministry website, identified by page URL


class IdentityKind(StrEnum):
    CODE = "code"
    URL = "url"
    HASH = "hash"


class Confidence(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
