"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class SnapshotKind(StrEnum):
    """Which version of a document a snapshot represents."""

    MEMORY = "memory"
    BASELINE = "baseline"
    EXTERNAL = "external"


class StandardField(StrEnum):
    YEAR = "year"
    AUTHOR = "author"
    TITLE = "title"
