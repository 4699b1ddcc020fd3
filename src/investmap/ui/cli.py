from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from investmap.app import collect_investments
from investmap.config import configure_logging
from investmap.domain.reconciliation import KnownRecordPolicy, ReconciliationRequest
from investmap.domain.time_windows import DateWindow

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Collect strategic investment approvals")
    subparsers = parser.add_subparsers(dest="command", required=True)

    collect = subparsers.add_parser(
        "collect",
        help="Collect, reconcile and persist investments from Diavgeia and the ministry",
    )
    collect.add_argument(
        "--start-date",
        type=str,
        help="ISO-8601 date (YYYY-MM-DD) marking the inclusive start of the registry window",
    )
    collect.add_argument(
        "--end-date",
        type=str,
        help="ISO-8601 date (YYYY-MM-DD) marking the inclusive end of the registry window",
    )
    collect.add_argument(
        "--lookback-days",
        type=int,
        help="Relative lookback window in days (overrides start if later)",
    )
    collect.add_argument(
        "--ignore-existing",
        action="store_true",
        help="Start fresh instead of merging with the existing snapshot",
    )
    collect.add_argument(
        "--skip-diavgeia",
        action="store_true",
        help="Do not query the Diavgeia registry",
    )
    collect.add_argument(
        "--skip-ministry",
        action="store_true",
        help="Do not scrape the ministry website",
    )
    collect.add_argument(
        "--refresh-known",
        action="store_true",
        help="Re-extract candidates that already exist in the snapshot",
    )
    collect.add_argument(
        "--snapshot",
        type=Path,
        help="Snapshot file to read and write (defaults to config)",
    )
    collect.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )

    return parser.parse_args(list(argv))


def _parse_iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid ISO date: {value}") from exc


def _build_window(args: argparse.Namespace) -> DateWindow:
    start = _parse_iso_date(args.start_date) if args.start_date else None
    end = _parse_iso_date(args.end_date) if args.end_date else None

    lookback: timedelta | None = None
    if args.lookback_days is not None:
        if args.lookback_days < 0:
            raise ValueError("Lookback days must be non-negative")
        lookback = timedelta(days=args.lookback_days)

    if start and end and start > end:
        raise ValueError("Date window start must be before end")
    return DateWindow(start=start, end=end, lookback=lookback)


def _build_request(args: argparse.Namespace) -> ReconciliationRequest:
    if args.skip_diavgeia and args.skip_ministry:
        raise ValueError("Nothing to collect: both sources are skipped")
    return ReconciliationRequest(
        window=_build_window(args),
        fresh_start=args.ignore_existing,
        skip_primary=args.skip_diavgeia,
        skip_secondary=args.skip_ministry,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    configure_logging()
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(level=logging.DEBUG, force=True)
        request = _build_request(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    policy = KnownRecordPolicy.REFRESH if parsed_args.refresh_known else KnownRecordPolicy.SKIP
    try:
        result = collect_investments(
            request,
            snapshot_path=parsed_args.snapshot,
            known_record_policy=policy,
        )
    except Exception:
        log.exception("Fatal error during collection")
        sys.exit(1)

    log.info(
        "Collection finished: %s investments saved, %s warnings",
        result.total_investments,
        sum(result.warning_counts.values()),
    )


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
