from __future__ import annotations

import pytest

from bibsync.adapters.bibtex import MetadataFormatError, parse_group_tree, serialize_group_tree
from bibsync.adapters.bibtex.metadata import metadata_comments, parse_metadata
from bibsync.domain.model import ALL_ENTRIES_GROUP, GroupNode, Metadata

GROUPING = (
    "\n0 AllEntriesGroup:;"
    "\n1 StaticGroup:Reading\\;0\\;1\\;\\;\\;\\;;"
    "\n2 StaticGroup:Later\\;0\\;1\\;\\;\\;\\;;"
    "\n1 StaticGroup:Done\\;0\\;1\\;\\;\\;\\;;\n"
)


def test_parse_group_tree_builds_nested_nodes() -> None:
    tree = parse_group_tree(GROUPING)

    assert tree is not None
    assert tree.kind == ALL_ENTRIES_GROUP
    assert tree.name == "All Entries"
    assert [(depth, node.name) for depth, node in tree.walk()] == [
        (0, "All Entries"),
        (1, "Reading"),
        (2, "Later"),
        (1, "Done"),
    ]
    assert tree.children[0].payload == "Reading\\;0\\;1\\;\\;\\;\\;"


def test_group_tree_serializes_to_the_same_text() -> None:
    tree = parse_group_tree(GROUPING)

    assert tree is not None
    assert serialize_group_tree(tree) == GROUPING
    assert parse_group_tree(serialize_group_tree(tree)) == tree


def test_group_built_in_code_serializes_its_name() -> None:
    tree = GroupNode(name="All Entries", kind=ALL_ENTRIES_GROUP, children=(GroupNode(name="Mine"),))

    reparsed = parse_group_tree(serialize_group_tree(tree))

    assert reparsed is not None
    assert [node.name for _, node in reparsed.walk()] == ["All Entries", "Mine"]


def test_empty_grouping_has_no_tree() -> None:
    assert parse_group_tree("\n") is None


@pytest.mark.parametrize(
    "value",
    [
        "1 StaticGroup:Orphan;",
        "0 AllEntriesGroup:;\n0 AllEntriesGroup:;",
        "0 AllEntriesGroup:;\n2 StaticGroup:TooDeep;",
        "not a group;",
    ],
)
def test_malformed_group_trees_are_rejected(value: str) -> None:
    with pytest.raises(MetadataFormatError):
        parse_group_tree(value)


def test_parse_metadata_separates_plain_comments() -> None:
    metadata, plain = parse_metadata(
        [
            "jabref-meta: databaseType:bibtex;",
            "just a note",
            "jabref-meta: grouping:" + GROUPING,
        ]
    )

    assert dict(metadata.values) == {"databaseType": "bibtex;"}
    assert metadata.groups is not None
    assert plain == ["just a note"]


def test_parse_metadata_rejects_entries_without_value() -> None:
    with pytest.raises(MetadataFormatError):
        parse_metadata(["jabref-meta: broken"])


def test_metadata_comments_are_sorted_with_grouping_last() -> None:
    metadata = Metadata(
        values={"saveOrder": "x;", "databaseType": "bibtex;"},
        groups=GroupNode(name="All Entries", kind=ALL_ENTRIES_GROUP),
    )

    assert metadata_comments(metadata) == [
        "jabref-meta: databaseType:bibtex;",
        "jabref-meta: saveOrder:x;",
        "jabref-meta: grouping:\n0 AllEntriesGroup:;\n",
    ]
