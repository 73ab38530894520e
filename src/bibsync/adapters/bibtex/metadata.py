"""Metadata blocks stored as ``@comment{jabref-meta: key:value}`` entries.

Values are kept verbatim (still escaped) except for the ``grouping`` key, which
is parsed into a ``GroupNode`` tree. A grouping value is a list of items such as
``1 StaticGroup:Name\\;0\\;1\\;\\;\\;\\;;`` where the leading number is the depth
of the node, inner separators are escaped and each item ends with ``;``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from bibsync.domain.model import ALL_ENTRIES_GROUP, GroupNode, Metadata

if TYPE_CHECKING:
    from collections.abc import Iterable

META_PREFIX: Final[str] = "jabref-meta:"
GROUPING_KEY: Final[str] = "grouping"
ALL_ENTRIES_NAME: Final[str] = "All Entries"

_ITEM_SEPARATOR = re.compile(r"(?<!\\);")
_GROUP_ITEM = re.compile(r"^(?P<depth>\d+)\s+(?P<kind>[A-Za-z]+):(?P<payload>.*)$", re.DOTALL)


class MetadataFormatError(ValueError):
    """Raised when a metadata comment cannot be interpreted."""


def parse_metadata(comments: Iterable[str]) -> tuple[Metadata, list[str]]:
    """Split ``comments`` into a metadata block and the remaining plain comments."""

    values: dict[str, str] = {}
    groups: GroupNode | None = None
    plain: list[str] = []
    for comment in comments:
        text = comment.strip()
        if not text.startswith(META_PREFIX):
            plain.append(comment)
            continue
        key, separator, value = text[len(META_PREFIX) :].strip().partition(":")
        if not separator or not key:
            raise MetadataFormatError(f"Malformed metadata comment: {text!r}")
        if key == GROUPING_KEY:
            groups = parse_group_tree(value)
        else:
            values[key] = value.strip()
    return Metadata(values=values, groups=groups), plain


def metadata_comments(metadata: Metadata) -> list[str]:
    """Serialize ``metadata`` to comment bodies, keys in sorted order."""

    comments = [f"{META_PREFIX} {key}:{metadata.values[key]}" for key in sorted(metadata.values)]
    if metadata.groups is not None:
        comments.append(f"{META_PREFIX} {GROUPING_KEY}:{serialize_group_tree(metadata.groups)}")
    return comments


def parse_group_tree(value: str) -> GroupNode | None:
    items = [item.strip() for item in _ITEM_SEPARATOR.split(value)]
    parsed = [_parse_group_item(item) for item in items if item]
    if not parsed:
        return None

    # each stack entry holds a node's fields and the children collected so far
    stack: list[tuple[str, str, str, list[GroupNode]]] = []

    def close_deepest() -> GroupNode:
        name, kind, payload, children = stack.pop()
        node = GroupNode(name=name, kind=kind, payload=payload, children=tuple(children))
        if stack:
            stack[-1][3].append(node)
        return node

    for depth, kind, payload in parsed:
        if depth > len(stack) or (depth == 0 and stack):
            raise MetadataFormatError(f"Unexpected group depth {depth}")
        while len(stack) > depth:
            close_deepest()
        stack.append((_group_name(kind, payload), kind, payload, []))

    root = close_deepest()
    while stack:
        root = close_deepest()
    return root


def serialize_group_tree(root: GroupNode) -> str:
    lines = [f"{depth} {node.kind}:{_payload(node)};" for depth, node in root.walk()]
    return "\n" + "\n".join(lines) + "\n"


def _parse_group_item(item: str) -> tuple[int, str, str]:
    match = _GROUP_ITEM.match(item)
    if match is None:
        raise MetadataFormatError(f"Malformed group entry: {item!r}")
    return int(match["depth"]), match["kind"], match["payload"]


def _group_name(kind: str, payload: str) -> str:
    name = payload.split("\\;", 1)[0]
    if not name and kind == ALL_ENTRIES_GROUP:
        return ALL_ENTRIES_NAME
    return name.replace("\\\\", "\\")


def _payload(node: GroupNode) -> str:
    if node.payload or node.kind == ALL_ENTRIES_GROUP:
        return node.payload
    return _escape(node.name)


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace(";", "\\;")
