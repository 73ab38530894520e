"""Orchestrator for the reconciliation passes.

The scanner loads the baseline and external snapshots, sorts the record lists of
all three snapshots with one comparator and runs the passes in a fixed order:
metadata, preamble, string definitions, records, grouping tree. Detected changes
are appended to one ordered changeset.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from bibsync.domain.model import SnapshotKind

from .changes import Changeset
from .definitions import reconcile_definitions
from .ordering import SORT_FIELDS
from .records import SortedRecords, reconcile_records
from .similarity import DEFAULT_MATCH_THRESHOLD, CheckedSimilarity
from .singletons import reconcile_groups, reconcile_metadata, reconcile_preamble

if TYPE_CHECKING:
    from pathlib import Path

    from bibsync.domain.model import FieldName, Snapshot
    from bibsync.domain.ports import SnapshotLoader

    from .changes import Change


log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class ScanResult:
    """Changeset of one scan together with the snapshots it was computed from."""

    memory: Snapshot
    baseline: Snapshot
    external: Snapshot
    changeset: Changeset

    @property
    def changes_found(self) -> bool:
        return not self.changeset.is_empty


@dataclass(slots=True, kw_only=True)
class ChangeScanner:
    """Detect baseline→external changes, resolved against the memory snapshot."""

    similarity: CheckedSimilarity = field(default_factory=CheckedSimilarity)
    threshold: float = DEFAULT_MATCH_THRESHOLD
    sort_fields: tuple[FieldName, ...] = SORT_FIELDS

    def __post_init__(self) -> None:
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"Match threshold must be within [0, 1], got {self.threshold}")

    def scan(
        self,
        memory: Snapshot | None,
        *,
        loader: SnapshotLoader,
        baseline_path: Path,
        external_path: Path,
    ) -> ScanResult:
        """Load baseline and external from storage and reconcile them with ``memory``.

        Without a memory snapshot the baseline stands in for it, as if the document
        had not been edited since it was last synchronized.
        """

        baseline = loader.load(baseline_path, kind=SnapshotKind.BASELINE)
        external = loader.load(external_path, kind=SnapshotKind.EXTERNAL)
        if memory is None:
            memory = baseline.as_kind(SnapshotKind.MEMORY)
        changeset = self.reconcile(memory, baseline, external)
        return ScanResult(memory=memory, baseline=baseline, external=external, changeset=changeset)

    def reconcile(self, memory: Snapshot, baseline: Snapshot, external: Snapshot) -> Changeset:
        """Run all reconciliation passes in their fixed order."""

        log.info(
            "Scanning for external changes: memory=%s, baseline=%s, external=%s records",
            len(memory.records),
            len(baseline.records),
            len(external.records),
        )
        changes: list[Change] = []

        metadata_change = reconcile_metadata(memory.metadata, baseline.metadata, external.metadata)
        if metadata_change is not None:
            changes.append(metadata_change)

        preamble_change = reconcile_preamble(memory.preamble, baseline.preamble, external.preamble)
        if preamble_change is not None:
            changes.append(preamble_change)

        definition_changes = reconcile_definitions(
            memory.definitions, baseline.definitions, external.definitions
        )
        log.debug("Definition pass found %s change(s)", len(definition_changes))
        changes.extend(definition_changes)

        records = reconcile_records(
            SortedRecords.of(memory.records, fields=self.sort_fields),
            SortedRecords.of(baseline.records, fields=self.sort_fields),
            SortedRecords.of(external.records, fields=self.sort_fields),
            similarity=self.similarity,
            threshold=self.threshold,
        )
        log.debug(
            "Record pass found %s change(s), %s exact match(es), %s suppressed duplicate(s)",
            len(records.changes),
            len(records.exact_matches),
            len(records.suppressed),
        )
        changes.extend(records.changes)

        groups_change = reconcile_groups(baseline.groups, external.groups)
        if groups_change is not None:
            changes.append(groups_change)

        changeset = Changeset(tuple(changes))
        log.info("Finished scan: %s change(s) found", len(changeset))
        return changeset
