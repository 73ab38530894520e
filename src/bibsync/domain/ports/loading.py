"""Port for reading a document from storage into a snapshot."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from bibsync.domain.model import Snapshot, SnapshotKind


class LoadError(RuntimeError):
    """Raised when a source file cannot be read or parsed."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not load {path}: {reason}")


@runtime_checkable
class SnapshotLoader(Protocol):
    """Parse one file into a snapshot's constituent parts."""

    def load(self, path: Path, *, kind: SnapshotKind) -> Snapshot: ...


__all__ = ["LoadError", "SnapshotLoader"]
