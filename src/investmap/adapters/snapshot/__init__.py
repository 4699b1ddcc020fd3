"""Snapshot persistence adapter."""

from __future__ import annotations

from .json_store import JsonSnapshotStore, render_snapshot
from .translator import (
    investment_from_record,
    investment_to_record,
    snapshot_from_document,
    snapshot_to_document,
)

__all__ = [
    "JsonSnapshotStore",
    "investment_from_record",
    "investment_to_record",
    "render_snapshot",
    "snapshot_from_document",
    "snapshot_to_document",
]
