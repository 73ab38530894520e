"""Port for persisting a snapshot to storage."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from bibsync.domain.model import Snapshot


class WriteError(RuntimeError):
    """Raised when a snapshot cannot be written to its destination."""

    def __init__(self, destination: Path, reason: str) -> None:
        self.destination = destination
        self.reason = reason
        super().__init__(f"Could not write {destination}: {reason}")


@runtime_checkable
class SnapshotWriter(Protocol):
    """Serialize a snapshot to ``destination``."""

    def save(self, snapshot: Snapshot, destination: Path) -> None: ...


__all__ = ["SnapshotWriter", "WriteError"]
