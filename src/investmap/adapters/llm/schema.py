"""Pydantic models for the JSON the language model answers with.

Responses are free text that should contain one JSON value; the parsers below
pull the first array or object out of the text and validate it. Failures are
returned, not raised, so callers can log the raw response next to the reason.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_CODE_LIST = TypeAdapter(list[str])


@dataclass(frozen=True, slots=True)
class Parsed[T]:
    value: T


@dataclass(frozen=True, slots=True)
class ParseFailure:
    raw: str
    reason: str


type ParseResult[T] = Parsed[T] | ParseFailure


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _none_to_empty(value: object) -> object:
    return "" if value is None else value


def _none_to_list(value: object) -> object:
    return [] if value is None else value


def _coerce_amount(value: object) -> object:
    """Accept ``"240.802.000 €"``-style strings next to plain numbers."""

    if not isinstance(value, str):
        return value
    text = value.replace("€", "").replace(" ", "").strip()
    if not text:
        return None
    if "," in text or text.count(".") > 1:
        text = text.replace(".", "").replace(",", ".")
    try:
        number = float(text)
    except ValueError:
        return value
    return int(number) if number.is_integer() else number


class LlmBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ReferencePayload(LlmBaseModel):
    fek: str | None = None
    diavgeia_ada: str | None = Field(default=None, alias="diavgeiaADA")
    ministry_url: str | None = Field(default=None, alias="ministryUrl")
    revises_ada: str | None = Field(default=None, alias="revisesADA")

    _normalize_optional = field_validator(
        "fek", "diavgeia_ada", "ministry_url", "revises_ada", mode="before"
    )(_blank_to_none)


class AmountItemPayload(LlmBaseModel):
    amount: int | float | None = 0
    description: str = ""

    _normalize_amount = field_validator("amount", mode="before")(_coerce_amount)
    _normalize_description = field_validator("description", mode="before")(_none_to_empty)

    @field_validator("amount", mode="after")
    @classmethod
    def _missing_is_zero(cls, value: int | float | None) -> int | float:
        return value or 0


class LocationPayload(LlmBaseModel):
    description: str = ""
    text_location: str | None = Field(default=None, alias="textLocation")
    lat: float | None = None
    lon: float | None = None

    _normalize_description = field_validator("description", mode="before")(_none_to_empty)
    _normalize_text_location = field_validator("text_location", mode="before")(_blank_to_none)


class FundingSourcePayload(LlmBaseModel):
    source: str = ""
    perc: float | None = None
    amount: int | float | None = None

    _normalize_source = field_validator("source", mode="before")(_none_to_empty)
    _normalize_amount = field_validator("amount", mode="before")(_coerce_amount)


class IncentivePayload(LlmBaseModel):
    name: str = ""
    incentive_type: str | None = Field(default=None, alias="incentiveType")

    _normalize_name = field_validator("name", mode="before")(_none_to_empty)
    _normalize_type = field_validator("incentive_type", mode="before")(_blank_to_none)


class InvestmentPayload(LlmBaseModel):
    """One extracted record, keyed the way the prompts ask for it."""

    date_approved: str | None = Field(default=None, alias="dateApproved")
    beneficiary: str = ""
    name: str = ""
    total_amount: int | float | None = Field(default=None, alias="totalAmount")
    reference: ReferencePayload = Field(default_factory=ReferencePayload)
    amount_breakdown: list[AmountItemPayload] = Field(
        default_factory=list["AmountItemPayload"], alias="amountBreakdown"
    )
    locations: list[LocationPayload] = Field(default_factory=list["LocationPayload"])
    funding_source: list[FundingSourcePayload] = Field(
        default_factory=list["FundingSourcePayload"], alias="fundingSource"
    )
    incentives_approved: list[IncentivePayload] = Field(
        default_factory=list["IncentivePayload"], alias="incentivesApproved"
    )
    category: str | None = None

    _normalize_optional = field_validator("date_approved", "category", mode="before")(
        _blank_to_none
    )
    _normalize_text = field_validator("beneficiary", "name", mode="before")(_none_to_empty)
    _normalize_amount = field_validator("total_amount", mode="before")(_coerce_amount)
    _normalize_lists = field_validator(
        "amount_breakdown",
        "locations",
        "funding_source",
        "incentives_approved",
        mode="before",
    )(_none_to_list)

    @field_validator("reference", mode="before")
    @classmethod
    def _reference_or_empty(cls, value: object) -> object:
        return {} if value is None else value


class VerdictPayload(LlmBaseModel):
    is_duplicate: bool = Field(default=False, alias="isDuplicate")
    matched_ada: str | None = Field(default=None, alias="matchedADA")
    confidence: str = "low"
    explanation: str | None = None

    _normalize_match = field_validator("matched_ada", mode="before")(_blank_to_none)

    @field_validator("confidence", mode="before")
    @classmethod
    def _lowercase(cls, value: object) -> object:
        if value is None:
            return "low"
        return value.strip().lower() if isinstance(value, str) else value


def parse_code_list(text: str) -> ParseResult[list[str]]:
    """Pull a JSON array of registry codes out of a response."""

    match = _JSON_ARRAY.search(text)
    if match is None:
        return ParseFailure(raw=text, reason="No JSON array found in response")
    try:
        codes = _CODE_LIST.validate_json(match.group(0))
    except ValidationError as exc:
        return ParseFailure(raw=text, reason=str(exc))
    return Parsed([code.strip() for code in codes if code.strip()])


def parse_model[M: BaseModel](text: str, model: type[M]) -> ParseResult[M]:
    """Pull a JSON object out of a response and validate it as ``model``."""

    match = _JSON_OBJECT.search(text)
    if match is None:
        return ParseFailure(raw=text, reason="No JSON object found in response")
    try:
        return Parsed(model.model_validate_json(match.group(0)))
    except ValidationError as exc:
        return ParseFailure(raw=text, reason=str(exc))


__all__ = [
    "AmountItemPayload",
    "FundingSourcePayload",
    "IncentivePayload",
    "InvestmentPayload",
    "LocationPayload",
    "ParseFailure",
    "ParseResult",
    "Parsed",
    "ReferencePayload",
    "VerdictPayload",
    "parse_code_list",
    "parse_model",
]
