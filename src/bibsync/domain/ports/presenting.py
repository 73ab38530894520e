"""Port for surfacing a changeset to a user."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from bibsync.domain.reconciliation.changes import Changeset


@runtime_checkable
class ChangesetPresenter(Protocol):
    """Show ``changeset`` and return whether the user accepted it."""

    def show(self, changeset: Changeset) -> bool: ...


__all__ = ["ChangesetPresenter"]
