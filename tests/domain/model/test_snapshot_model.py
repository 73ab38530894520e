from __future__ import annotations

import pytest

from bibsync.domain.model import (
    ALL_ENTRIES_GROUP,
    Definition,
    GroupNode,
    Metadata,
    Record,
    Snapshot,
    SnapshotKind,
)


def test_records_compare_by_content() -> None:
    one = Record(entry_type="article", key="a", fields={"title": "A"})
    two = Record(entry_type="article", key="a", fields={"title": "A"})

    assert one == two
    assert one != Record(entry_type="book", key="a", fields={"title": "A"})


def test_equal_records_hash_alike() -> None:
    one = Record(entry_type="article", key="a", fields={"title": "A", "year": "2020"})
    two = Record(entry_type="article", key="a", fields={"year": "2020", "title": "A"})

    assert hash(one) == hash(two)
    assert len({one, two, Record(key="b", fields={"title": "A"})}) == 2


def test_record_fields_are_read_only() -> None:
    record = Record(fields={"title": "A"})

    with pytest.raises(TypeError):
        record.fields["title"] = "B"  # type: ignore[index]


def test_with_fields_sets_and_removes_values() -> None:
    record = Record(fields={"title": "A", "year": "2020"})

    updated = record.with_fields({"title": "B", "year": None, "note": "new"})

    assert dict(updated.fields) == {"title": "B", "note": "new"}
    assert dict(record.fields) == {"title": "A", "year": "2020"}


def test_definition_identity_is_not_compared() -> None:
    one = Definition(name="x", content="1")
    two = Definition(name="x", content="1")

    assert one.id != two.id
    assert one == two
    assert one.content_equals(Definition(name="y", content="1"))
    assert not one.name_equals(Definition(name="y", content="1"))


def test_group_walk_is_pre_order_with_depths() -> None:
    tree = GroupNode(
        name="All Entries",
        kind=ALL_ENTRIES_GROUP,
        children=(
            GroupNode(name="A", children=(GroupNode(name="A1"),)),
            GroupNode(name="B"),
        ),
    )

    assert [(depth, node.name) for depth, node in tree.walk()] == [
        (0, "All Entries"),
        (1, "A"),
        (2, "A1"),
        (1, "B"),
    ]
    assert tree.size == 4


def test_metadata_emptiness_considers_groups() -> None:
    assert Metadata().is_empty
    assert not Metadata(values={"databaseType": "bibtex;"}).is_empty
    assert not Metadata(groups=GroupNode(name="All Entries")).is_empty


def test_snapshot_helpers() -> None:
    jcp = Definition(name="jcp", content="Journal of Chemical Physics")
    snapshot = Snapshot(kind=SnapshotKind.EXTERNAL, records=[Record()], definitions=[jcp])

    assert isinstance(snapshot.records, tuple)
    assert snapshot.definition_named("jcp") is jcp
    assert snapshot.definition_named("missing") is None
    assert snapshot.groups is None

    relabelled = snapshot.as_kind(SnapshotKind.BASELINE)
    assert relabelled.kind is SnapshotKind.BASELINE
    assert relabelled.records == snapshot.records
    assert snapshot.with_records([]).records == ()
