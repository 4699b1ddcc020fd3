from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path

import pytest

from investmap.domain.reconciliation import (
    KnownRecordPolicy,
    ReconciliationRequest,
    ReconciliationResult,
)
from investmap.ui import cli as main_module


def _capture(monkeypatch: pytest.MonkeyPatch) -> dict[str, object]:
    captured: dict[str, object] = {}

    def fake_collect(request: ReconciliationRequest, **kwargs: object) -> ReconciliationResult:
        captured["request"] = request
        captured.update(kwargs)
        return ReconciliationResult()

    monkeypatch.setattr(main_module, "collect_investments", fake_collect)
    return captured


def test_main_cli_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture(monkeypatch)

    main_module.main(["collect"])

    request = captured["request"]
    assert isinstance(request, ReconciliationRequest)
    assert request.window.start is None
    assert request.window.end is None
    assert request.window.lookback is None
    assert request.fresh_start is False
    assert request.skip_primary is False
    assert request.skip_secondary is False
    assert captured["snapshot_path"] is None
    assert captured["known_record_policy"] is KnownRecordPolicy.SKIP


def test_main_cli_with_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture(monkeypatch)

    main_module.main(
        [
            "collect",
            "--start-date",
            "2024-01-01",
            "--end-date",
            "2024-06-30",
            "--lookback-days",
            "30",
            "--ignore-existing",
            "--skip-ministry",
            "--refresh-known",
            "--snapshot",
            "out/investments.json",
        ]
    )

    request = captured["request"]
    assert isinstance(request, ReconciliationRequest)
    assert request.window.start == date(2024, 1, 1)
    assert request.window.end == date(2024, 6, 30)
    assert request.window.lookback == timedelta(days=30)
    assert request.fresh_start is True
    assert request.skip_primary is False
    assert request.skip_secondary is True
    assert captured["snapshot_path"] == Path("out/investments.json")
    assert captured["known_record_policy"] is KnownRecordPolicy.REFRESH


@pytest.mark.parametrize(
    "argv",
    [
        ["collect", "--start-date", "not-a-date"],
        ["collect", "--start-date", "2024-06-30", "--end-date", "2024-01-01"],
        ["collect", "--lookback-days", "-1"],
        ["collect", "--skip-diavgeia", "--skip-ministry"],
    ],
)
def test_main_cli_invalid_arguments(monkeypatch: pytest.MonkeyPatch, argv: list[str]) -> None:
    captured = _capture(monkeypatch)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(argv)

    assert excinfo.value.code == 2
    assert captured == {}


def test_main_cli_requires_a_command(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture(monkeypatch)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main([])

    assert excinfo.value.code == 2


def test_main_cli_fatal_error_exits_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_collect(*_: object, **__: object) -> ReconciliationResult:
        raise RuntimeError("no candidates")

    monkeypatch.setattr(main_module, "collect_investments", failing_collect)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["collect"])

    assert excinfo.value.code == 1
