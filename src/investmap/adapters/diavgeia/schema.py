"""Pydantic models describing the Diavgeia search API payloads."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class DiavgeiaBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LabelledPayload(DiavgeiaBaseModel):
    uid: str | None = None
    label: str | None = None


class ExtraFieldValues(DiavgeiaBaseModel):
    related_decisions: list[str] = Field(default_factory=list, alias="relatedDecisions")

    @field_validator("related_decisions", mode="before")
    @classmethod
    def _flatten_related(cls, value: object) -> list[str]:
        # entries are either bare codes or objects carrying an ``ada`` key
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        if not isinstance(value, Sequence):
            return []
        codes: list[str] = []
        for entry in cast(Sequence[object], value):
            if isinstance(entry, str) and entry.strip():
                codes.append(entry.strip())
            elif isinstance(entry, Mapping):
                ada = cast(Mapping[str, object], entry).get("ada")
                if isinstance(ada, str) and ada.strip():
                    codes.append(ada.strip())
        return codes


class DecisionPayload(DiavgeiaBaseModel):
    ada: str
    subject: str = ""
    protocol_number: str | None = Field(default=None, alias="protocolNumber")
    document_url: str | None = Field(default=None, alias="documentUrl")
    issue_date: int | str | None = Field(default=None, alias="issueDate")
    organization_id: str | None = Field(default=None, alias="organizationId")
    organization: LabelledPayload | None = None
    decision_type_id: str | None = Field(default=None, alias="decisionTypeId")
    decision_type: LabelledPayload | None = Field(default=None, alias="decisionType")
    corrected_version_id: str | None = Field(default=None, alias="correctedVersionId")
    version_id: str | None = Field(default=None, alias="versionId")
    extra_field_values: ExtraFieldValues | None = Field(default=None, alias="extraFieldValues")

    _normalize_optional = field_validator(
        "protocol_number", "document_url", "corrected_version_id", mode="before"
    )(_blank_to_none)

    @field_validator("subject", mode="before")
    @classmethod
    def _subject_or_empty(cls, value: object) -> object:
        return "" if value is None else value

    @property
    def related_decisions(self) -> list[str]:
        if self.extra_field_values is None:
            return []
        return self.extra_field_values.related_decisions


class SearchInfo(DiavgeiaBaseModel):
    query: str | None = None
    page: int = 0
    size: int = 0
    actual_size: int | None = Field(default=None, alias="actualSize")
    total: int = 0


class SearchResponse(DiavgeiaBaseModel):
    decisions: list[DecisionPayload] = Field(default_factory=list["DecisionPayload"])
    info: SearchInfo = Field(default_factory=SearchInfo)


class VersionPayload(DiavgeiaBaseModel):
    ada: str | None = None
    version_id: str | None = Field(default=None, alias="versionId")

    _normalize_ada = field_validator("ada", mode="before")(_blank_to_none)
