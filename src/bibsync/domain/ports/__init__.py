"""Ports connecting the reconciliation core to storage and user interaction."""

from __future__ import annotations

from .editing import ChangeEditor
from .loading import LoadError, SnapshotLoader
from .presenting import ChangesetPresenter
from .writing import SnapshotWriter, WriteError

__all__ = [
    "ChangeEditor",
    "ChangesetPresenter",
    "LoadError",
    "SnapshotLoader",
    "SnapshotWriter",
    "WriteError",
]
