"""Apply accepted changes to a memory snapshot.

``SnapshotEditor`` keeps record positions of the original memory snapshot stable
while changes are applied, so every change of one changeset can be applied in a
single pass regardless of order. Removed records leave a hole that is compacted
when the resulting snapshot is built.
"""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from bibsync.domain.model import Definition, Record

from .changes import (
    DefinitionAdded,
    DefinitionContentChanged,
    DefinitionRemoved,
    DefinitionRenamed,
    GroupingChanged,
    MetadataChange,
    PreambleChange,
    RecordAdded,
    RecordModified,
    RecordRemoved,
)
from .errors import ChangeNotApplicableError, InvariantViolationError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from bibsync.domain.model import Snapshot

    from .changes import Change


log = getLogger(__name__)


def patch_record(memory: Record, baseline: Record, external: Record) -> Record:
    """Carry every baseline→external difference over to ``memory``.

    Fields the external side dropped are removed; fields that did not change
    between baseline and external keep their memory value.
    """

    fields = dict(memory.fields)
    names = [*baseline.fields, *(name for name in external.fields if name not in baseline.fields)]
    for name in names:
        before, after = baseline.get(name), external.get(name)
        if before == after:
            continue
        if after is None:
            fields.pop(name, None)
        else:
            fields[name] = after
    entry_type = (
        external.entry_type if baseline.entry_type != external.entry_type else memory.entry_type
    )
    key = external.key if baseline.key != external.key else memory.key
    return Record(entry_type=entry_type, key=key, fields=fields)


class SnapshotEditor:
    """Editor that applies changes onto an in-memory copy of a snapshot."""

    def __init__(self, memory: Snapshot) -> None:
        self._origin = memory
        self._records: list[Record | None] = list(memory.records)
        self._definitions: list[Definition] = list(memory.definitions)
        self._preamble = memory.preamble
        self._metadata = memory.metadata
        self.applied = 0

    @property
    def snapshot(self) -> Snapshot:
        return replace(
            self._origin,
            records=tuple(record for record in self._records if record is not None),
            definitions=tuple(self._definitions),
            preamble=self._preamble,
            metadata=self._metadata,
        )

    def apply(self, change: Change) -> None:  # noqa: C901, PLR0912
        if isinstance(change, MetadataChange):
            self._metadata = change.external
        elif isinstance(change, PreambleChange):
            self._preamble = change.external
        elif isinstance(change, GroupingChanged):
            self._metadata = replace(self._metadata, groups=change.external)
        elif isinstance(change, RecordAdded):
            self._records.append(change.external)
        elif isinstance(change, RecordRemoved):
            index = self._memory_record_index(change.memory, change.memory_index)
            self._records[index] = None
        elif isinstance(change, RecordModified):
            index = self._memory_record_index(change.memory, change.memory_index)
            current = self._records[index]
            if current is None:  # pragma: no cover - guarded by _memory_record_index
                raise ChangeNotApplicableError("memory record was removed")
            self._records[index] = patch_record(current, change.baseline, change.external)
        elif isinstance(change, DefinitionAdded):
            self._add_definition(change.external.name, change.external.content)
        elif isinstance(change, DefinitionRemoved):
            del self._definitions[self._definition_position(change.memory.id)]
        elif isinstance(change, DefinitionRenamed):
            if change.memory is None:
                raise ChangeNotApplicableError(
                    f"No memory definition to rename to {change.new_name!r}"
                )
            position = self._definition_position(change.memory.id)
            self._definitions[position] = replace(self._definitions[position], name=change.new_name)
        elif isinstance(change, DefinitionContentChanged):
            if change.memory is None:
                self._add_definition(change.name, change.external.content)
            else:
                position = self._definition_position(change.memory.id)
                self._definitions[position] = replace(
                    self._definitions[position], content=change.external.content
                )
        else:  # pragma: no cover - exhaustive over Change
            raise TypeError(f"Unsupported change: {change!r}")
        self.applied += 1

    def _memory_record_index(self, expected: Record | None, index: int | None) -> int:
        if expected is None or index is None:
            raise ChangeNotApplicableError("Change has no memory counterpart to apply to")
        if not 0 <= index < len(self._records):
            raise InvariantViolationError(f"Memory record index {index} is out of range")
        current = self._records[index]
        if current is None:
            raise ChangeNotApplicableError(f"Memory record {index} was already removed")
        if self._origin.records[index] != expected:
            raise InvariantViolationError(
                f"Memory record {index} does not match the record the change was resolved against"
            )
        return index

    def _definition_position(self, definition_id: UUID) -> int:
        matches = [
            position
            for position, definition in enumerate(self._definitions)
            if definition.id == definition_id
        ]
        if not matches:
            raise ChangeNotApplicableError(f"Memory definition {definition_id} no longer exists")
        if len(matches) > 1:
            raise InvariantViolationError(f"Memory definition id {definition_id} is not unique")
        return matches[0]

    def _add_definition(self, name: str, content: str) -> None:
        if any(definition.name == name for definition in self._definitions):
            raise ChangeNotApplicableError(f"Memory already defines a string named {name!r}")
        self._definitions.append(Definition(name=name, content=content))


def apply_changes(
    memory: Snapshot,
    changes: Iterable[Change],
    *,
    skip_inapplicable: bool = False,
) -> Snapshot:
    """Return ``memory`` with ``changes`` applied.

    With ``skip_inapplicable`` set, changes that cannot be applied are logged and
    skipped instead of aborting.
    """

    editor = SnapshotEditor(memory)
    for change in changes:
        try:
            editor.apply(change)
        except ChangeNotApplicableError as exc:
            if not skip_inapplicable:
                raise
            log.warning("Skipping %s change: %s", change.kind, exc)
    return editor.snapshot
