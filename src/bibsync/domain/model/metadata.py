"""Document-level metadata and the grouping tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping


ALL_ENTRIES_GROUP = "AllEntriesGroup"


@dataclass(frozen=True, slots=True, kw_only=True)
class GroupNode:
    """One node of the grouping tree.

    ``payload`` keeps the serialized group definition verbatim; trees are only ever
    compared as a whole.
    """

    name: str
    kind: str = "StaticGroup"
    payload: str = ""
    children: tuple[GroupNode, ...] = ()

    def walk(self) -> Iterator[tuple[int, GroupNode]]:
        """Yield ``(depth, node)`` pairs in pre-order."""

        stack: list[tuple[int, GroupNode]] = [(0, self)]
        while stack:
            depth, node = stack.pop()
            yield depth, node
            stack.extend((depth + 1, child) for child in reversed(node.children))

    @property
    def size(self) -> int:
        return sum(1 for _ in self.walk())


@dataclass(frozen=True, slots=True, kw_only=True)
class Metadata:
    """Key/value metadata block with an optional grouping tree."""

    values: Mapping[str, str] = field(default_factory=dict[str, str])
    groups: GroupNode | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @property
    def is_empty(self) -> bool:
        return not self.values and self.groups is None

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def __repr__(self) -> str:
        return f"Metadata(values={dict(self.values)!r}, groups={self.groups!r})"
