"""Ports for persisting the reconciled snapshot."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from investmap.domain.model import Snapshot


class SnapshotLoadError(RuntimeError):
    """Raised when a prior snapshot exists but cannot be read."""


@runtime_checkable
class SnapshotStore(Protocol):
    """Single-document store, replaced atomically on every save."""

    def load(self) -> Snapshot | None: ...

    def save(self, snapshot: Snapshot) -> None: ...


__all__ = ["SnapshotLoadError", "SnapshotStore"]
