"""Pydantic models describing the changeset report."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 # needed at runtime by pydantic
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from bibsync.domain.reconciliation.changes import ChangeKind, ChangeSection  # noqa: TC001


class ReportBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class TextPayload(ReportBaseModel):
    type: Literal["text"] = "text"
    text: str | None = None


class RecordPayload(ReportBaseModel):
    type: Literal["record"] = "record"
    entry_type: str
    key: str | None = None
    fields: dict[str, str] = Field(default_factory=dict)
    index: int | None = None


class DefinitionPayload(ReportBaseModel):
    type: Literal["definition"] = "definition"
    name: str
    content: str


class GroupPayload(ReportBaseModel):
    type: Literal["group"] = "group"
    name: str
    kind: str
    children: list[GroupPayload] = Field(default_factory=list["GroupPayload"])


class MetadataPayload(ReportBaseModel):
    type: Literal["metadata"] = "metadata"
    values: dict[str, str] = Field(default_factory=dict)
    groups: GroupPayload | None = None


ValuePayload = Annotated[
    TextPayload | RecordPayload | DefinitionPayload | GroupPayload | MetadataPayload,
    Field(discriminator="type"),
]


class ChangePayload(ReportBaseModel):
    kind: ChangeKind
    section: ChangeSection
    summary: str
    applicable: bool
    score: float | None = None
    baseline: ValuePayload | None = None
    external: ValuePayload | None = None
    memory: ValuePayload | None = None


class ChangesetReport(ReportBaseModel):
    generated_at: datetime
    document: str | None = None
    change_count: int
    changes: list[ChangePayload] = Field(default_factory=list["ChangePayload"])

    @property
    def is_empty(self) -> bool:
        return not self.changes
