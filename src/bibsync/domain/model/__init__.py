"""Public domain model surface."""

from __future__ import annotations

from bibsync.domain.model.enums import SnapshotKind, StandardField
from bibsync.domain.model.metadata import ALL_ENTRIES_GROUP, GroupNode, Metadata
from bibsync.domain.model.primitives import (
    DEFAULT_ENTRY_TYPE,
    CitationKey,
    EntryType,
    FieldName,
)
from bibsync.domain.model.record import Definition, Record, new_id
from bibsync.domain.model.snapshot import Snapshot

__all__ = [  # noqa: RUF022
    # values
    "Record",
    "Definition",
    "Metadata",
    "GroupNode",
    "Snapshot",
    "new_id",
    # enums
    "SnapshotKind",
    "StandardField",
    # primitives
    "CitationKey",
    "EntryType",
    "FieldName",
    "ALL_ENTRIES_GROUP",
    "DEFAULT_ENTRY_TYPE",
]
