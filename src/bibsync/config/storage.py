"""Data storage configuration helpers."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "bibsync"
BASELINE_DIR_NAME: Final[str] = "baselines"
DATA_DIR_ENV: Final[str] = "BIBSYNC_DATA_DIR"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    baseline_dir_name: str = BASELINE_DIR_NAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def baseline_path(self, document: Path, *, ensure: bool = True) -> Path:
        """Where the baseline snapshot of ``document`` is kept.

        Baselines are keyed by the document's resolved path, so two files with the
        same name in different directories do not share one.
        """

        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        resolved = document.expanduser().resolve()
        digest = hashlib.sha1(str(resolved).encode("utf-8"), usedforsecurity=False).hexdigest()
        directory = base / self.baseline_dir_name
        if ensure:
            directory.mkdir(parents=True, exist_ok=True)
        return directory / f"{resolved.stem}-{digest[:12]}.bib"


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv(DATA_DIR_ENV)
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    return StorageConfig(data_dir=data_dir)
