"""Change variants and the ordered changeset.

Every change carries the external value(s), the baseline value(s) and, where one
could be resolved, the memory-side counterpart an editor needs to apply it. A
``None`` memory reference means the change cannot be applied automatically.

Record changes also carry positions into their snapshot's ``records`` tuple so
that callers can tell which concrete record a change refers to.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final, Literal

if TYPE_CHECKING:
    from collections.abc import Iterator

    from bibsync.domain.model import Definition, GroupNode, Metadata, Record


class ChangeKind(StrEnum):
    METADATA = "metadata"
    PREAMBLE = "preamble"
    DEFINITION_ADDED = "definition_added"
    DEFINITION_REMOVED = "definition_removed"
    DEFINITION_RENAMED = "definition_renamed"
    DEFINITION_CONTENT_CHANGED = "definition_content_changed"
    RECORD_ADDED = "record_added"
    RECORD_REMOVED = "record_removed"
    RECORD_MODIFIED = "record_modified"
    GROUPING = "grouping"


class ChangeSection(StrEnum):
    """Sections of a changeset, declared in scan order."""

    METADATA = "metadata"
    PREAMBLE = "preamble"
    DEFINITIONS = "definitions"
    RECORDS = "records"
    GROUPS = "groups"


SECTION_BY_KIND: Final[dict[ChangeKind, ChangeSection]] = {
    ChangeKind.METADATA: ChangeSection.METADATA,
    ChangeKind.PREAMBLE: ChangeSection.PREAMBLE,
    ChangeKind.DEFINITION_ADDED: ChangeSection.DEFINITIONS,
    ChangeKind.DEFINITION_REMOVED: ChangeSection.DEFINITIONS,
    ChangeKind.DEFINITION_RENAMED: ChangeSection.DEFINITIONS,
    ChangeKind.DEFINITION_CONTENT_CHANGED: ChangeSection.DEFINITIONS,
    ChangeKind.RECORD_ADDED: ChangeSection.RECORDS,
    ChangeKind.RECORD_REMOVED: ChangeSection.RECORDS,
    ChangeKind.RECORD_MODIFIED: ChangeSection.RECORDS,
    ChangeKind.GROUPING: ChangeSection.GROUPS,
}


@dataclass(frozen=True, slots=True, kw_only=True)
class MetadataChange:
    """Metadata block differs; memory is replaced by external on apply."""

    memory: Metadata
    baseline: Metadata
    external: Metadata
    kind: Literal[ChangeKind.METADATA] = ChangeKind.METADATA


@dataclass(frozen=True, slots=True, kw_only=True)
class PreambleChange:
    memory: str | None
    baseline: str | None
    external: str | None
    kind: Literal[ChangeKind.PREAMBLE] = ChangeKind.PREAMBLE


@dataclass(frozen=True, slots=True, kw_only=True)
class DefinitionAdded:
    external: Definition
    kind: Literal[ChangeKind.DEFINITION_ADDED] = ChangeKind.DEFINITION_ADDED


@dataclass(frozen=True, slots=True, kw_only=True)
class DefinitionRemoved:
    baseline: Definition
    memory: Definition
    kind: Literal[ChangeKind.DEFINITION_REMOVED] = ChangeKind.DEFINITION_REMOVED


@dataclass(frozen=True, slots=True, kw_only=True)
class DefinitionRenamed:
    """Same content under a new name."""

    baseline: Definition
    external: Definition
    memory: Definition | None = None
    kind: Literal[ChangeKind.DEFINITION_RENAMED] = ChangeKind.DEFINITION_RENAMED

    @property
    def old_name(self) -> str:
        return self.baseline.name

    @property
    def new_name(self) -> str:
        return self.external.name


@dataclass(frozen=True, slots=True, kw_only=True)
class DefinitionContentChanged:
    """Same name, different content."""

    baseline: Definition
    external: Definition
    memory: Definition | None = None
    kind: Literal[ChangeKind.DEFINITION_CONTENT_CHANGED] = ChangeKind.DEFINITION_CONTENT_CHANGED

    @property
    def name(self) -> str:
        return self.baseline.name


@dataclass(frozen=True, slots=True, kw_only=True)
class RecordAdded:
    external: Record
    external_index: int
    kind: Literal[ChangeKind.RECORD_ADDED] = ChangeKind.RECORD_ADDED


@dataclass(frozen=True, slots=True, kw_only=True)
class RecordRemoved:
    baseline: Record
    baseline_index: int
    memory: Record | None = None
    memory_index: int | None = None
    kind: Literal[ChangeKind.RECORD_REMOVED] = ChangeKind.RECORD_REMOVED


@dataclass(frozen=True, slots=True, kw_only=True)
class RecordModified:
    baseline: Record
    baseline_index: int
    external: Record
    external_index: int
    score: float
    memory: Record | None = None
    memory_index: int | None = None
    kind: Literal[ChangeKind.RECORD_MODIFIED] = ChangeKind.RECORD_MODIFIED


@dataclass(frozen=True, slots=True, kw_only=True)
class GroupingChanged:
    """Grouping trees differ; ``None`` stands for the empty side."""

    external: GroupNode | None
    baseline: GroupNode | None
    kind: Literal[ChangeKind.GROUPING] = ChangeKind.GROUPING


type DefinitionChange = (
    DefinitionAdded | DefinitionRemoved | DefinitionRenamed | DefinitionContentChanged
)
type RecordChange = RecordAdded | RecordRemoved | RecordModified
type Change = MetadataChange | PreambleChange | DefinitionChange | RecordChange | GroupingChanged


def section_of(change: Change) -> ChangeSection:
    return SECTION_BY_KIND[change.kind]


@dataclass(frozen=True, slots=True)
class Changeset:
    """Ordered, immutable result of one scan."""

    changes: tuple[Change, ...] = ()

    def __iter__(self) -> Iterator[Change]:
        return iter(self.changes)

    def __len__(self) -> int:
        return len(self.changes)

    def __bool__(self) -> bool:
        return bool(self.changes)

    @property
    def is_empty(self) -> bool:
        return not self.changes

    def sections(self) -> dict[ChangeSection, tuple[Change, ...]]:
        """Group changes by section, keeping section and change order."""

        grouped: dict[ChangeSection, list[Change]] = {}
        for change in self.changes:
            grouped.setdefault(section_of(change), []).append(change)
        return {
            section: tuple(grouped[section]) for section in ChangeSection if section in grouped
        }

    def of_kind(self, kind: ChangeKind) -> tuple[Change, ...]:
        return tuple(change for change in self.changes if change.kind is kind)
