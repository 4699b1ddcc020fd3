from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from typing import Any

import anthropic
import httpx
import pytest

from investmap.adapters.llm import (
    LlmDuplicateArbiter,
    LlmGateway,
    LlmRecordExtractor,
    LlmRelevanceClassifier,
    build_llm_services,
    classify_anthropic_error,
)
from investmap.adapters.llm.prompts import EXTRACT_DECISION_SYSTEM, EXTRACT_PAGE_SYSTEM
from investmap.adapters.llm.schema import (
    InvestmentPayload,
    ParseFailure,
    Parsed,
    VerdictPayload,
    parse_code_list,
    parse_model,
)
from investmap.common.retry import BackoffPolicy
from investmap.config.llm import LlmConfig
from investmap.domain.model import Candidate, Category, Confidence, IncentiveType, SourceKind
from tests.helpers.fakes import RecordingSleep
from tests.helpers.records import make_decision, make_investment, make_page

EXTRACTION = {
    "dateApproved": "2024-03-01",
    "beneficiary": "Epsilon SA",
    "name": "Epsilon Resort",
    "totalAmount": "240.802.000 €",
    "reference": {"fek": "Β 1234/12.03.2024", "diavgeiaADA": "", "revisesADA": None},
    "amountBreakdown": [
        {"amount": 200000000, "description": "Buildings"},
        {"amount": None, "description": None},
    ],
    "locations": [{"description": "Hotel", "textLocation": "Chania"}],
    "fundingSource": [{"source": "Own funds", "perc": 25}],
    "incentivesApproved": [
        {"name": "Fast track", "incentiveType": "FAST_TRACK_LICENSING"},
        {"name": "", "incentiveType": "SOMETHING_ELSE"},
    ],
    "category": "TOURISM_CULTURE",
}


def _rate_limit_error(retry_after: str | None = None) -> anthropic.RateLimitError:
    headers = {"retry-after": retry_after} if retry_after is not None else {}
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    response = httpx.Response(429, headers=headers, request=request)
    return anthropic.RateLimitError("rate limited", response=response, body=None)


def _message(text: str) -> SimpleNamespace:
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


class FakeMessages:
    def __init__(self, outcomes: list[Any]) -> None:
        self.outcomes = outcomes
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return _message(outcome)


class FakeAnthropic:
    def __init__(self, *outcomes: Any) -> None:
        self.messages = FakeMessages(list(outcomes))


class FakeGateway:
    def __init__(self, text: str | None) -> None:
        self.text = text
        self.calls: list[dict[str, Any]] = []

    async def complete(self, **kwargs: Any) -> str | None:
        self.calls.append(kwargs)
        return self.text


def _config(**overrides: Any) -> LlmConfig:
    return LlmConfig(api_key="test-key", **overrides)


def _gateway(client: FakeAnthropic, sleep: RecordingSleep, **overrides: Any) -> LlmGateway:
    return LlmGateway(config=_config(**overrides), client=client, sleep=sleep)  # type: ignore[arg-type]


def test_parse_code_list_finds_array_in_prose() -> None:
    result = parse_code_list('The relevant ones are:\n["ADA1", " ADA2 ", ""]\nDone.')

    assert result == Parsed(["ADA1", "ADA2"])


def test_parse_code_list_reports_missing_array() -> None:
    result = parse_code_list("none of them")

    assert isinstance(result, ParseFailure)
    assert result.raw == "none of them"


def test_parse_model_reports_invalid_json() -> None:
    result = parse_model('{"isDuplicate": tru}', VerdictPayload)

    assert isinstance(result, ParseFailure)


def test_investment_payload_tolerates_nulls() -> None:
    result = parse_model(
        json.dumps({"name": None, "locations": None, "reference": None, "totalAmount": ""}),
        InvestmentPayload,
    )

    assert isinstance(result, Parsed)
    payload = result.value
    assert payload.name == ""
    assert payload.locations == []
    assert payload.reference.diavgeia_ada is None
    assert payload.total_amount is None


def test_verdict_payload_normalises_confidence() -> None:
    result = parse_model(
        '{"isDuplicate": true, "matchedADA": "ADA1", "confidence": "HIGH"}', VerdictPayload
    )

    assert isinstance(result, Parsed)
    assert result.value.confidence == "high"
    assert result.value.matched_ada == "ADA1"


def test_classify_error_honours_retry_after() -> None:
    hinted = classify_anthropic_error(_rate_limit_error("3"))
    unhinted = classify_anthropic_error(_rate_limit_error())

    assert hinted is not None
    assert hinted.retry_after_seconds == 3.0
    assert unhinted is not None
    assert unhinted.retry_after_seconds is None
    assert classify_anthropic_error(ValueError("bad")) is None


def test_gateway_retries_after_rate_limit() -> None:
    client = FakeAnthropic(_rate_limit_error("3"), "answer")
    sleep = RecordingSleep()

    text = asyncio.run(
        _gateway(client, sleep).complete(system="sys", content="hi", max_tokens=10, label="t")
    )

    assert text == "answer"
    assert sleep.delays == [3.0]
    assert len(client.messages.calls) == 2
    call = client.messages.calls[0]
    assert call["temperature"] == 0
    assert call["system"] == "sys"
    assert call["messages"] == [{"role": "user", "content": "hi"}]


def test_gateway_gives_up_after_max_retries() -> None:
    client = FakeAnthropic(_rate_limit_error())
    sleep = RecordingSleep()
    gateway = _gateway(client, sleep, backoff=BackoffPolicy(max_retries=2))

    text = asyncio.run(gateway.complete(system="s", content="c", max_tokens=10, label="t"))

    assert text is None
    assert sleep.delays == [2.0, 4.0]
    assert len(client.messages.calls) == 3


def test_gateway_does_not_retry_other_errors() -> None:
    client = FakeAnthropic(RuntimeError("boom"))
    sleep = RecordingSleep()

    text = asyncio.run(
        _gateway(client, sleep).complete(system="s", content="c", max_tokens=10, label="t")
    )

    assert text is None
    assert sleep.delays == []
    assert len(client.messages.calls) == 1


def test_classifier_returns_selected_codes() -> None:
    gateway = FakeGateway('["ADA2"]')
    classifier = LlmRelevanceClassifier(gateway=gateway, config=_config())  # type: ignore[arg-type]

    selected = asyncio.run(classifier([make_decision("ADA1"), make_decision("ADA2")]))

    assert selected == ["ADA2"]
    prompt = gateway.calls[0]["content"]
    assert "ADA1" in prompt
    assert "Τροποποίηση" in prompt


@pytest.mark.parametrize("text", [None, "I could not decide"])
def test_classifier_failure_selects_nothing(text: str | None) -> None:
    classifier = LlmRelevanceClassifier(gateway=FakeGateway(text), config=_config())  # type: ignore[arg-type]

    assert asyncio.run(classifier([make_decision("ADA1")])) == []


def test_extractor_reads_decision_document() -> None:
    gateway = FakeGateway(f"Here you go:\n```json\n{json.dumps(EXTRACTION)}\n```")
    extractor = LlmRecordExtractor(gateway=gateway, config=_config())  # type: ignore[arg-type]

    record = asyncio.run(extractor(make_decision("ADA1")))

    assert record is not None
    assert record.registry_code == "ADA1"
    assert record.total_amount == 240_802_000
    assert record.reference.gazette == "ΦΕΚ Β 1234/12.03.2024"
    assert [item.amount for item in record.amount_breakdown] == [200_000_000, 0]
    assert record.funding_sources[0].perc == 0.25
    assert [incentive.incentive_type for incentive in record.incentives] == [
        IncentiveType.FAST_TRACK_LICENSING
    ]
    assert record.category is Category.TOURISM_CULTURE

    call = gateway.calls[0]
    assert call["system"] == EXTRACT_DECISION_SYSTEM
    assert call["content"][0] == {
        "type": "document",
        "source": {"type": "url", "url": "https://diavgeia.gov.gr/doc/ADA1"},
    }


def test_extractor_reads_truncated_page_content() -> None:
    gateway = FakeGateway(json.dumps({"name": "", "beneficiary": "Epsilon SA"}))
    extractor = LlmRecordExtractor(gateway=gateway, config=_config(page_content_limit=20))  # type: ignore[arg-type]
    hint = make_investment(name="Epsilon Resort", total_amount=5_000_000)
    page = make_page("https://ministry.test/el/stratigikes/erga/epsilon", hint=hint)

    record = asyncio.run(extractor(page))

    assert record is not None
    assert record.name == "Epsilon Resort"
    assert record.total_amount == 5_000_000
    assert record.source_url == "https://ministry.test/el/stratigikes/erga/epsilon"
    call = gateway.calls[0]
    assert call["system"] == EXTRACT_PAGE_SYSTEM
    assert "Project page" not in call["content"]


def test_extractor_skips_candidates_without_content() -> None:
    gateway = FakeGateway("{}")
    extractor = LlmRecordExtractor(gateway=gateway, config=_config())  # type: ignore[arg-type]
    empty_page = Candidate(source=SourceKind.SECONDARY, document_url="https://ministry.test/p")

    assert asyncio.run(extractor(empty_page)) is None
    assert gateway.calls == []


def test_extractor_returns_none_for_unparseable_answer() -> None:
    extractor = LlmRecordExtractor(gateway=FakeGateway("sorry"), config=_config())  # type: ignore[arg-type]

    assert asyncio.run(extractor(make_decision("ADA1"))) is None


def test_arbiter_builds_verdict() -> None:
    gateway = FakeGateway(
        '{"isDuplicate": true, "matchedADA": "ADA1", "confidence": "Medium", '
        '"explanation": "Same hotel"}'
    )
    arbiter = LlmDuplicateArbiter(gateway=gateway, config=_config())  # type: ignore[arg-type]

    verdict = asyncio.run(
        arbiter(make_investment(url="https://ministry.test/p"), [make_investment(code="ADA1")])
    )

    assert verdict is not None
    assert verdict.accepted_match == "ADA1"
    assert verdict.confidence is Confidence.MEDIUM
    assert verdict.explanation == "Same hotel"


def test_arbiter_treats_unknown_confidence_as_low() -> None:
    gateway = FakeGateway('{"isDuplicate": true, "matchedADA": "ADA1", "confidence": "maybe"}')
    arbiter = LlmDuplicateArbiter(gateway=gateway, config=_config())  # type: ignore[arg-type]

    verdict = asyncio.run(arbiter(make_investment(), [make_investment(code="ADA1")]))

    assert verdict is not None
    assert verdict.confidence is Confidence.LOW
    assert verdict.accepted_match is None


def test_build_llm_services_share_one_gateway() -> None:
    gateway = FakeGateway(None)

    classifier, extractor, arbiter = build_llm_services(
        config=_config(), gateway=gateway  # type: ignore[arg-type]
    )

    assert classifier._gateway is gateway  # noqa: SLF001  # type: ignore[reportPrivateUsage]
    assert extractor._gateway is gateway  # noqa: SLF001  # type: ignore[reportPrivateUsage]
    assert arbiter._gateway is gateway  # noqa: SLF001  # type: ignore[reportPrivateUsage]
