"""Tri-state diff rules for document-level singletons.

Preamble and metadata are compared against different sources on purpose: the
preamble rule compares baseline with external, while a non-empty baseline
metadata block is bypassed and memory is compared with external directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .changes import GroupingChanged, MetadataChange, PreambleChange

if TYPE_CHECKING:
    from bibsync.domain.model import GroupNode, Metadata


def reconcile_preamble(
    memory: str | None,
    baseline: str | None,
    external: str | None,
) -> PreambleChange | None:
    if baseline is not None:
        changed = baseline != external
    else:
        changed = external is not None
    if not changed:
        return None
    return PreambleChange(memory=memory, baseline=baseline, external=external)


def reconcile_metadata(
    memory: Metadata,
    baseline: Metadata,
    external: Metadata,
) -> MetadataChange | None:
    changed = not external.is_empty if baseline.is_empty else memory != external
    if not changed:
        return None
    return MetadataChange(memory=memory, baseline=baseline, external=external)


def reconcile_groups(
    baseline: GroupNode | None,
    external: GroupNode | None,
) -> GroupingChanged | None:
    """Report a grouping change without diffing the tree structure."""

    if baseline is None and external is None:
        return None
    if baseline == external:
        return None
    return GroupingChanged(external=external, baseline=baseline)
