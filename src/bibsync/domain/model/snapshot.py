"""Snapshots: one versioned view of a whole document."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from bibsync.domain.model.metadata import Metadata

if TYPE_CHECKING:
    from collections.abc import Iterable

    from bibsync.domain.model.enums import SnapshotKind
    from bibsync.domain.model.metadata import GroupNode
    from bibsync.domain.model.record import Definition, Record


@dataclass(frozen=True, slots=True, kw_only=True)
class Snapshot:
    """Read-only view of records, definitions, preamble and metadata.

    ``comments`` holds plain comment bodies. They never take part in a scan and
    are only carried through so that rewriting a document keeps them.
    """

    kind: SnapshotKind
    records: tuple[Record, ...] = ()
    definitions: tuple[Definition, ...] = ()
    preamble: str | None = None
    metadata: Metadata = field(default_factory=Metadata)
    comments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", tuple(self.records))
        object.__setattr__(self, "definitions", tuple(self.definitions))
        object.__setattr__(self, "comments", tuple(self.comments))

    @property
    def groups(self) -> GroupNode | None:
        return self.metadata.groups

    def definition_named(self, name: str) -> Definition | None:
        for definition in self.definitions:
            if definition.name == name:
                return definition
        return None

    def as_kind(self, kind: SnapshotKind) -> Snapshot:
        """Return the same content labelled as another snapshot kind."""

        return replace(self, kind=kind)

    def with_records(self, records: Iterable[Record]) -> Snapshot:
        return replace(self, records=tuple(records))
