"""Similarity oracles used by record matching.

An oracle compares two records and returns a scalar score:
- ``score > EXACT_MATCH_SENTINEL`` means the relevant content is identical
- ``0 <= score <= 1`` is the partial-overlap range used for fuzzy ranking

Oracles must be total and deterministic; they need not be symmetric.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from rapidfuzz.fuzz import token_sort_ratio

from .errors import InvariantViolationError

if TYPE_CHECKING:
    from bibsync.domain.model import FieldName, Record

EXACT_MATCH_SENTINEL: Final[float] = 1.0
IDENTICAL_SCORE: Final[float] = 1.01
DEFAULT_MATCH_THRESHOLD: Final[float] = 0.4
DUPLICATE_SCORE: Final[float] = 1.0

ENTRY_TYPE_FIELD: Final[str] = "@type"
CITATION_KEY_FIELD: Final[str] = "@key"

type Similarity = Callable[[Record, Record], float]


def _comparable_fields(record: Record) -> dict[FieldName, str | None]:
    values: dict[FieldName, str | None] = dict(record.fields)
    values[ENTRY_TYPE_FIELD] = record.entry_type
    values[CITATION_KEY_FIELD] = record.key
    return values


def compare_strictly(one: Record, two: Record) -> float:
    """Share of fields with identical values; ``IDENTICAL_SCORE`` when all match.

    Entry type and citation key take part in the comparison like ordinary fields.
    """

    left = _comparable_fields(one)
    right = _comparable_fields(two)
    names = left.keys() | right.keys()
    score = sum(1 for name in names if left.get(name) == right.get(name))
    if score == len(names):
        return IDENTICAL_SCORE
    return score / len(names)


def compare_tokens(one: Record, two: Record) -> float:
    """Token-sorted fuzzy ratio averaged over all fields, capped at 1.0."""

    left = _comparable_fields(one)
    right = _comparable_fields(two)
    if left == right:
        return IDENTICAL_SCORE
    names = left.keys() | right.keys()
    total = 0.0
    for name in names:
        left_value = left.get(name)
        right_value = right.get(name)
        if left_value is None or right_value is None:
            total += left_value == right_value
            continue
        total += token_sort_ratio(left_value, right_value) / 100
    return min(total / len(names), 1.0)


ORACLES: Final[dict[str, Similarity]] = {
    "strict": compare_strictly,
    "tokens": compare_tokens,
}


@dataclass(frozen=True, slots=True)
class CheckedSimilarity:
    """Typed wrapper that enforces the oracle contract on every score."""

    oracle: Similarity = compare_strictly

    def __call__(self, one: Record, two: Record) -> float:
        return self.compare(one, two)

    def compare(self, one: Record, two: Record) -> float:
        score = self.oracle(one, two)
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise InvariantViolationError(
                f"Similarity oracle returned a non-numeric score: {score!r}"
            )
        if math.isnan(score) or math.isinf(score) or score < 0:
            raise InvariantViolationError(f"Similarity oracle returned an invalid score: {score!r}")
        return float(score)

    def is_exact(self, one: Record, two: Record) -> bool:
        return self.compare(one, two) > EXACT_MATCH_SENTINEL

    def is_duplicate(self, one: Record, two: Record) -> bool:
        return self.compare(one, two) >= DUPLICATE_SCORE


def oracle_named(name: str) -> Similarity:
    """Return the built-in oracle registered under ``name``."""

    try:
        return ORACLES[name]
    except KeyError as exc:
        known = ", ".join(sorted(ORACLES))
        raise ValueError(f"Unknown similarity oracle {name!r} (expected one of: {known})") from exc
