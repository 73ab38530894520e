"""Bibliographic records and string definitions.

Records carry no identity beyond their content: two records are equal when their
type, citation key and fields are equal. Definitions (``@string`` macros) carry a
snapshot-local id that is never compared across snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from bibsync.domain.model.primitives import DEFAULT_ENTRY_TYPE

if TYPE_CHECKING:
    from collections.abc import Mapping

    from bibsync.domain.model.primitives import CitationKey, EntryType, FieldName


def new_id() -> UUID:
    return uuid4()


@dataclass(frozen=True, slots=True, kw_only=True)
class Record:
    """One bibliographic entry."""

    entry_type: EntryType = DEFAULT_ENTRY_TYPE
    key: CitationKey | None = None
    fields: Mapping[FieldName, str] = field(default_factory=dict[str, str])

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def get(self, name: FieldName) -> str | None:
        return self.fields.get(name)

    @property
    def field_names(self) -> frozenset[FieldName]:
        return frozenset(self.fields)

    def with_fields(self, updates: Mapping[FieldName, str | None]) -> Record:
        """Return a copy with ``updates`` applied; ``None`` removes a field."""

        fields = dict(self.fields)
        for name, value in updates.items():
            if value is None:
                fields.pop(name, None)
            else:
                fields[name] = value
        return replace(self, fields=fields)

    def __hash__(self) -> int:
        return hash((self.entry_type, self.key, frozenset(self.fields.items())))

    def __repr__(self) -> str:
        return f"Record(entry_type={self.entry_type!r}, key={self.key!r}, fields={dict(self.fields)!r})"


@dataclass(frozen=True, slots=True, kw_only=True)
class Definition:
    """Named reusable text macro (a BibTeX ``@string``)."""

    name: str
    content: str
    id: UUID = field(default_factory=new_id, compare=False)

    def content_equals(self, other: Definition) -> bool:
        return self.content == other.content

    def name_equals(self, other: Definition) -> bool:
        return self.name == other.name
