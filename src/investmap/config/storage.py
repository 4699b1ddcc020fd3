"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DEFAULT_DATA_DIR: Final[str] = "data"
SNAPSHOT_FILENAME: Final[str] = "investments.json"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    snapshot_filename: str = SNAPSHOT_FILENAME
    http_cache_filename: str = HTTP_CACHE_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def snapshot_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.snapshot_filename

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.http_cache_filename


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("INVESTMAP_DATA_DIR")
    data_dir = Path(env_dir) if env_dir else Path(DEFAULT_DATA_DIR)
    return StorageConfig(data_dir=data_dir)


def get_snapshot_path(*, storage: StorageConfig | None = None) -> Path:
    env_path = os.getenv("INVESTMAP_SNAPSHOT_PATH")
    if env_path:
        return Path(env_path).expanduser().resolve()
    storage_config = storage or get_storage_config()
    return storage_config.snapshot_path()
