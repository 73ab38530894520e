"""String definition (``@string``) matching.

Definitions are paired by name first; the leftovers are paired by content to
detect renames. Each external and each memory definition backs at most one
change, tracked with flags parallel to each list.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .changes import (
    DefinitionAdded,
    DefinitionContentChanged,
    DefinitionRemoved,
    DefinitionRenamed,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from bibsync.domain.model import Definition

    from .changes import DefinitionChange


log = getLogger(__name__)


def reconcile_definitions(
    memory: Sequence[Definition],
    baseline: Sequence[Definition],
    external: Sequence[Definition],
) -> list[DefinitionChange]:
    """Classify baseline→external definition differences, resolved against memory."""

    if not baseline and not external:
        return []

    changes: list[DefinitionChange] = []
    external_used = [False] * len(external)
    memory_used = [False] * len(memory)

    unmatched: list[Definition] = []
    for definition in baseline:
        index = _first_unused(external, external_used, lambda other: other.name == definition.name)
        if index is None:
            unmatched.append(definition)
            continue
        external_used[index] = True
        counterpart = external[index]
        if counterpart.content != definition.content:
            changes.append(
                DefinitionContentChanged(
                    baseline=definition,
                    external=counterpart,
                    memory=_claim(memory, memory_used, lambda other: other.name == definition.name),
                )
            )

    removed: list[Definition] = []
    for definition in unmatched:
        index = _first_unused(
            external, external_used, lambda other: other.content == definition.content
        )
        if index is None:
            removed.append(definition)
            continue
        external_used[index] = True
        counterpart = external[index]
        changes.append(
            DefinitionRenamed(
                baseline=definition,
                external=counterpart,
                memory=_claim(
                    memory, memory_used, lambda other: other.content == counterpart.content
                ),
            )
        )

    for definition in removed:
        in_memory = _claim(memory, memory_used, lambda other: other.name == definition.name)
        if in_memory is None:
            log.debug("Definition %r already gone from memory, not reported", definition.name)
            continue
        changes.append(DefinitionRemoved(baseline=definition, memory=in_memory))

    changes.extend(
        DefinitionAdded(external=definition)
        for definition, used in zip(external, external_used, strict=True)
        if not used
    )
    return changes


def _first_unused(
    definitions: Sequence[Definition],
    used: list[bool],
    predicate: Callable[[Definition], bool],
) -> int | None:
    for index, definition in enumerate(definitions):
        if not used[index] and predicate(definition):
            return index
    return None


def _claim(
    definitions: Sequence[Definition],
    used: list[bool],
    predicate: Callable[[Definition], bool],
) -> Definition | None:
    index = _first_unused(definitions, used, predicate)
    if index is None:
        return None
    used[index] = True
    return definitions[index]
