from __future__ import annotations

from bibsync.domain.reconciliation.ordering import compare_records, sorted_order
from tests.helpers.bibliography import make_record


def test_newer_years_sort_first() -> None:
    records = [
        make_record("A", year="1999"),
        make_record("B", year="2021"),
        make_record("C", year="2005"),
    ]

    assert sorted_order(records) == [1, 2, 0]


def test_years_compare_numerically() -> None:
    assert compare_records(make_record(year="998"), make_record(year="1998")) > 0


def test_missing_fields_sort_last() -> None:
    records = [make_record("A"), make_record("B", year="2000")]

    assert sorted_order(records) == [1, 0]


def test_author_and_title_break_ties_case_insensitively() -> None:
    records = [
        make_record("alpha", year="2020", author="smith"),
        make_record("Beta", year="2020", author="{Smith}"),
        make_record("gamma", year="2020", author="Adams"),
    ]

    assert sorted_order(records) == [1, 0, 2]


def test_sort_is_stable_for_equal_records() -> None:
    records = [make_record("A", key="first"), make_record("A", key="second")]

    assert sorted_order(records) == [0, 1]


def test_ascending_direction() -> None:
    older = make_record(year="1999")
    newer = make_record(year="2020")

    assert compare_records(older, newer, descending=False) < 0
    assert compare_records(older, newer) > 0
