"""Port for applying accepted changes to the live document."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from bibsync.domain.reconciliation.changes import Change


@runtime_checkable
class ChangeEditor(Protocol):
    """Apply one accepted change onto the in-memory document."""

    def apply(self, change: Change) -> None: ...


__all__ = ["ChangeEditor"]
