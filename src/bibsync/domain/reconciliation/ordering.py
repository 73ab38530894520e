"""Shared record ordering.

All snapshots are sorted with the same composite comparator before matching. The
order only biases the matcher toward nearby positions; it is not an alignment.
"""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import TYPE_CHECKING, Final

from bibsync.domain.model import StandardField

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bibsync.domain.model import FieldName, Record

SORT_FIELDS: Final[tuple[FieldName, ...]] = (
    StandardField.YEAR,
    StandardField.AUTHOR,
    StandardField.TITLE,
)

_BRACES = re.compile(r"[{}]")
_WHITESPACE = re.compile(r"\s+")


def _sort_text(value: str) -> str:
    return _WHITESPACE.sub(" ", _BRACES.sub("", value)).strip().lower()


def _compare_values(name: FieldName, left: str, right: str) -> int:
    if name == StandardField.YEAR:
        try:
            left_year, right_year = int(left.strip()), int(right.strip())
        except ValueError:
            pass
        else:
            return (left_year > right_year) - (left_year < right_year)
    left_key, right_key = _sort_text(left), _sort_text(right)
    return (left_key > right_key) - (left_key < right_key)


def compare_records(
    one: Record,
    two: Record,
    *,
    fields: Sequence[FieldName] = SORT_FIELDS,
    descending: bool = True,
) -> int:
    """Compare two records field by field, case-insensitively.

    A record lacking a field sorts after one that has it, whatever the direction.
    """

    for name in fields:
        left, right = one.get(name), two.get(name)
        if left is None and right is None:
            continue
        if left is None:
            return 1
        if right is None:
            return -1
        result = _compare_values(name, left, right)
        if result:
            return -result if descending else result
    return 0


def sorted_order(
    records: Sequence[Record],
    *,
    fields: Sequence[FieldName] = SORT_FIELDS,
) -> list[int]:
    """Return indices into ``records`` in comparator order (stable on ties)."""

    def compare_positions(left: int, right: int) -> int:
        return compare_records(records[left], records[right], fields=fields)

    return sorted(range(len(records)), key=cmp_to_key(compare_positions))
