"""Single-file JSON snapshot store with atomic replacement."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from investmap.domain.ports import SnapshotLoadError

from .schema import SnapshotDocument
from .translator import snapshot_from_document, snapshot_to_document

if TYPE_CHECKING:
    from pathlib import Path

    from investmap.domain.model import Snapshot

log = getLogger(__name__)


def render_snapshot(snapshot: Snapshot) -> str:
    document = snapshot_to_document(snapshot)
    payload = document.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(payload, indent=2, ensure_ascii=False)


class JsonSnapshotStore:
    """Implements ``SnapshotStore`` over one JSON document on disk."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> Snapshot | None:
        if not self.path.exists():
            log.info("No existing snapshot at %s", self.path)
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
            document = SnapshotDocument.model_validate_json(raw)
        except (OSError, ValidationError) as exc:
            raise SnapshotLoadError(f"Cannot read snapshot {self.path}: {exc}") from exc
        modified = datetime.fromtimestamp(self.path.stat().st_mtime, tz=UTC)
        return snapshot_from_document(document, fallback_time=modified)

    def save(self, snapshot: Snapshot) -> None:
        """Write the snapshot; readers see either the old or the new file, never a mix."""

        text = render_snapshot(snapshot)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, self.path)
        except BaseException:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise
        log.info("Snapshot written to %s", self.path)
