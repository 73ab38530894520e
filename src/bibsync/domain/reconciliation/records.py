"""Record matching between baseline and external snapshots.

Records have no identity across snapshots, so baseline records are paired with
external records by content similarity in three phases:

1) exact pass: a cursor walks the external list; the record under the cursor is
   tried first, then every later un-consumed record. Only a match at the cursor
   advances it.
2) fuzzy pass: baseline records left over from the exact pass (in baseline
   order) take the best-scoring un-consumed external record from the cursor on.
   A best score above the threshold is a modification, anything else a removal.
3) addition pass: external records never consumed are additions, unless memory
   already holds an identical record.

Matching must finish the exact pass before any fuzzy matching so that an exact
match cannot be taken by a merely similar record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .changes import RecordAdded, RecordModified, RecordRemoved
from .ordering import SORT_FIELDS, sorted_order
from .similarity import DEFAULT_MATCH_THRESHOLD, EXACT_MATCH_SENTINEL, CheckedSimilarity

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bibsync.domain.model import FieldName, Record

    from .changes import RecordChange


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SortedRecords:
    """Records of one snapshot viewed in comparator order.

    ``order[i]`` is the position in ``records`` of the i-th record in sorted order.
    """

    records: tuple[Record, ...]
    order: tuple[int, ...]

    @classmethod
    def of(
        cls,
        records: Sequence[Record],
        *,
        fields: Sequence[FieldName] = SORT_FIELDS,
    ) -> SortedRecords:
        return cls(records=tuple(records), order=tuple(sorted_order(records, fields=fields)))

    def __len__(self) -> int:
        return len(self.order)

    def at(self, position: int) -> Record:
        return self.records[self.order[position]]

    def origin(self, position: int) -> int:
        return self.order[position]


@dataclass(slots=True)
class RecordReconciliation:
    """Changes found by the record reconciler plus the pairs it matched exactly.

    Indices are positions in the snapshots' ``records`` tuples.
    """

    changes: list[RecordChange] = field(default_factory=list["RecordChange"])
    exact_matches: dict[int, int] = field(default_factory=dict[int, int])
    suppressed: list[int] = field(default_factory=list[int])


def reconcile_records(
    memory: SortedRecords,
    baseline: SortedRecords,
    external: SortedRecords,
    *,
    similarity: CheckedSimilarity | None = None,
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> RecordReconciliation:
    """Classify baseline→external record differences, resolved against memory."""

    check = similarity or CheckedSimilarity()
    result = RecordReconciliation()
    consumed = [False] * len(external)
    cursor = 0
    deferred: list[int] = []

    for position in range(len(baseline)):
        match = _find_exact_match(baseline.at(position), external, consumed, cursor, check)
        if match is None:
            deferred.append(position)
            continue
        consumed[match] = True
        result.exact_matches[baseline.origin(position)] = external.origin(match)
        if match == cursor:
            cursor += 1

    log.debug(
        "Exact record pass: matched=%s, deferred=%s, cursor=%s",
        len(result.exact_matches),
        len(deferred),
        cursor,
    )

    for position in deferred:
        result.changes.append(
            _fuzzy_change(position, memory, baseline, external, consumed, cursor, check, threshold)
        )

    for index in range(len(external)):
        if consumed[index]:
            continue
        candidate = external.at(index)
        if _memory_has_duplicate(candidate, memory, check):
            result.suppressed.append(external.origin(index))
            continue
        result.changes.append(RecordAdded(external=candidate, external_index=external.origin(index)))

    return result


def _find_exact_match(
    record: Record,
    external: SortedRecords,
    consumed: list[bool],
    cursor: int,
    check: CheckedSimilarity,
) -> int | None:
    if cursor < len(external) and not consumed[cursor] and check.is_exact(record, external.at(cursor)):
        return cursor
    for index in range(cursor + 1, len(external)):
        if not consumed[index] and check.is_exact(record, external.at(index)):
            return index
    return None


def _fuzzy_change(  # noqa: PLR0913
    position: int,
    memory: SortedRecords,
    baseline: SortedRecords,
    external: SortedRecords,
    consumed: list[bool],
    cursor: int,
    check: CheckedSimilarity,
    threshold: float,
) -> RecordChange:
    record = baseline.at(position)
    best_index: int | None = None
    best_score = -1.0
    for index in range(cursor, len(external)):
        if consumed[index]:
            continue
        score = check.compare(record, external.at(index))
        if score > best_score:
            best_score = score
            best_index = index

    memory_position = best_fit(record, memory, check)
    memory_record = memory.at(memory_position) if memory_position is not None else None
    memory_index = memory.origin(memory_position) if memory_position is not None else None

    if best_index is not None and best_score > threshold:
        consumed[best_index] = True
        return RecordModified(
            baseline=record,
            baseline_index=baseline.origin(position),
            external=external.at(best_index),
            external_index=external.origin(best_index),
            score=best_score,
            memory=memory_record,
            memory_index=memory_index,
        )
    return RecordRemoved(
        baseline=record,
        baseline_index=baseline.origin(position),
        memory=memory_record,
        memory_index=memory_index,
    )


def best_fit(record: Record, candidates: SortedRecords, check: CheckedSimilarity) -> int | None:
    """Position of the candidate most similar to ``record``.

    The first candidate with the highest score wins; the scan stops at the first
    exact match. Returns ``None`` only when there are no candidates.
    """

    best_position: int | None = None
    best_score = -1.0
    for position in range(len(candidates)):
        score = check.compare(record, candidates.at(position))
        if score > best_score:
            best_score = score
            best_position = position
        if best_score > EXACT_MATCH_SENTINEL:
            break
    return best_position


def _memory_has_duplicate(record: Record, memory: SortedRecords, check: CheckedSimilarity) -> bool:
    return any(check.is_duplicate(memory.at(position), record) for position in range(len(memory)))
