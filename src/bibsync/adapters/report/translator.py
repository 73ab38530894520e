"""Translate changesets into report payloads and one-line summaries."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from bibsync.domain.reconciliation.changes import (
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
    section_of,
)

from .schema import (
    ChangePayload,
    ChangesetReport,
    DefinitionPayload,
    GroupPayload,
    MetadataPayload,
    RecordPayload,
    TextPayload,
)

if TYPE_CHECKING:
    from bibsync.domain.model import Definition, GroupNode, Metadata, Record
    from bibsync.domain.reconciliation.changes import Change, Changeset

    from .schema import ValuePayload


def record_label(record: Record) -> str:
    if record.key:
        return record.key
    title = record.get("title")
    if title:
        return f'"{title}"'
    return f"untitled {record.entry_type}"


def describe(change: Change) -> str:  # noqa: C901, PLR0911
    """One-line, human readable summary of ``change``."""

    if isinstance(change, MetadataChange):
        return "Metadata changed"
    if isinstance(change, PreambleChange):
        if change.external is None:
            return "Preamble removed"
        return "Preamble changed"
    if isinstance(change, DefinitionAdded):
        return f"Added string '{change.external.name}'"
    if isinstance(change, DefinitionRemoved):
        return f"Removed string '{change.baseline.name}'"
    if isinstance(change, DefinitionRenamed):
        return f"Renamed string '{change.old_name}' to '{change.new_name}'"
    if isinstance(change, DefinitionContentChanged):
        return f"Modified string '{change.name}'"
    if isinstance(change, RecordAdded):
        return f"Added entry {record_label(change.external)}"
    if isinstance(change, RecordRemoved):
        return f"Deleted entry {record_label(change.baseline)}"
    if isinstance(change, RecordModified):
        return f"Modified entry {record_label(change.baseline)} ({change.score:.0%} similar)"
    if isinstance(change, GroupingChanged):
        return "Modified groups tree"
    raise TypeError(f"Unsupported change: {change!r}")  # pragma: no cover


def is_applicable(change: Change) -> bool:
    """Whether an editor can apply ``change`` without a missing memory counterpart."""

    if isinstance(change, (RecordRemoved, RecordModified, DefinitionRenamed)):
        return change.memory is not None
    return True


def change_payload(change: Change) -> ChangePayload:  # noqa: C901, PLR0912
    baseline: ValuePayload | None = None
    external: ValuePayload | None = None
    memory: ValuePayload | None = None
    score: float | None = None
    if isinstance(change, MetadataChange):
        baseline = _metadata_payload(change.baseline)
        external = _metadata_payload(change.external)
        memory = _metadata_payload(change.memory)
    elif isinstance(change, PreambleChange):
        baseline = TextPayload(text=change.baseline)
        external = TextPayload(text=change.external)
        memory = TextPayload(text=change.memory)
    elif isinstance(change, GroupingChanged):
        baseline = _group_payload(change.baseline) if change.baseline else None
        external = _group_payload(change.external) if change.external else None
    elif isinstance(change, DefinitionAdded):
        external = _definition_payload(change.external)
    elif isinstance(change, DefinitionRemoved):
        baseline = _definition_payload(change.baseline)
        memory = _definition_payload(change.memory)
    elif isinstance(change, (DefinitionRenamed, DefinitionContentChanged)):
        baseline = _definition_payload(change.baseline)
        external = _definition_payload(change.external)
        memory = _definition_payload(change.memory) if change.memory else None
    elif isinstance(change, RecordAdded):
        external = _record_payload(change.external, change.external_index)
    elif isinstance(change, RecordRemoved):
        baseline = _record_payload(change.baseline, change.baseline_index)
        memory = _record_payload(change.memory, change.memory_index) if change.memory else None
    elif isinstance(change, RecordModified):
        score = change.score
        baseline = _record_payload(change.baseline, change.baseline_index)
        external = _record_payload(change.external, change.external_index)
        memory = _record_payload(change.memory, change.memory_index) if change.memory else None

    return ChangePayload(
        kind=change.kind,
        section=section_of(change),
        summary=describe(change),
        applicable=is_applicable(change),
        score=score,
        baseline=baseline,
        external=external,
        memory=memory,
    )


def report_from_changeset(
    changeset: Changeset,
    *,
    document: str | None = None,
    generated_at: datetime | None = None,
) -> ChangesetReport:
    changes = [change_payload(change) for change in changeset]
    return ChangesetReport(
        generated_at=generated_at or datetime.now(UTC),
        document=document,
        change_count=len(changes),
        changes=changes,
    )


def _record_payload(record: Record, index: int | None) -> RecordPayload:
    return RecordPayload(
        entry_type=record.entry_type,
        key=record.key,
        fields=dict(record.fields),
        index=index,
    )


def _definition_payload(definition: Definition) -> DefinitionPayload:
    return DefinitionPayload(name=definition.name, content=definition.content)


def _group_payload(node: GroupNode) -> GroupPayload:
    return GroupPayload(
        name=node.name,
        kind=node.kind,
        children=[_group_payload(child) for child in node.children],
    )


def _metadata_payload(metadata: Metadata) -> MetadataPayload:
    return MetadataPayload(
        values=dict(metadata.values),
        groups=_group_payload(metadata.groups) if metadata.groups else None,
    )
