"""Reconciliation core: detect external changes to a bibliography file.

Flow of one scan:
1) load the baseline and external snapshots
2) sort the record lists of memory, baseline and external with one comparator
3) run the metadata, preamble, definition, record and grouping passes in order
4) hand the ordered changeset to a presenter; accepted changes go to an editor
"""

from __future__ import annotations

from .apply import SnapshotEditor, apply_changes, patch_record
from .changes import (
    Change,
    ChangeKind,
    ChangeSection,
    Changeset,
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
from .engine import ChangeScanner, ScanResult
from .errors import ChangeNotApplicableError, InvariantViolationError
from .similarity import (
    DEFAULT_MATCH_THRESHOLD,
    CheckedSimilarity,
    Similarity,
    compare_strictly,
    compare_tokens,
)

__all__ = [
    "DEFAULT_MATCH_THRESHOLD",
    "Change",
    "ChangeKind",
    "ChangeNotApplicableError",
    "ChangeScanner",
    "ChangeSection",
    "Changeset",
    "CheckedSimilarity",
    "DefinitionAdded",
    "DefinitionContentChanged",
    "DefinitionRemoved",
    "DefinitionRenamed",
    "GroupingChanged",
    "InvariantViolationError",
    "MetadataChange",
    "PreambleChange",
    "RecordAdded",
    "RecordModified",
    "RecordRemoved",
    "ScanResult",
    "Similarity",
    "SnapshotEditor",
    "apply_changes",
    "compare_strictly",
    "compare_tokens",
    "patch_record",
]
