"""Translate between bibtexparser databases and domain snapshots.

String references are kept unexpanded. In the domain they are written inline as
``#name#`` (e.g. ``journal = {#jcp#}``), which keeps record comparison independent
of the definitions' current content.
"""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING, Final

from bibtexparser.bibdatabase import BibDatabase, BibDataString, BibDataStringExpression

from bibsync.domain.model import DEFAULT_ENTRY_TYPE, Definition, Record, Snapshot

from .metadata import metadata_comments, parse_metadata

if TYPE_CHECKING:
    from bibsync.domain.model import SnapshotKind

ENTRY_TYPE_KEY: Final[str] = "ENTRYTYPE"
ENTRY_ID_KEY: Final[str] = "ID"

_REFERENCE = re.compile(r"#([^#\s]+)#")

log = getLogger(__name__)


def raw_text(value: object) -> str:
    """Render a parsed value, writing string references as ``#name#``."""

    if isinstance(value, BibDataStringExpression):
        return "".join(raw_text(part) for part in value.expr)
    if isinstance(value, BibDataString):
        return f"#{value.name}#"
    return str(value)


def bibtex_value(text: str, database: BibDatabase) -> str | BibDataStringExpression:
    """Inverse of ``raw_text``: turn inline references back into an expression."""

    parts = _REFERENCE.split(text)
    if len(parts) == 1:
        return text
    expression: list[str | BibDataString] = []
    for position, part in enumerate(parts):
        if position % 2:
            expression.append(BibDataString(database, part))
        elif part:
            expression.append(part)
    return BibDataStringExpression(expression)


def record_from_entry(entry: dict[str, object]) -> Record:
    entry_type = str(entry.get(ENTRY_TYPE_KEY) or DEFAULT_ENTRY_TYPE).lower()
    key = entry.get(ENTRY_ID_KEY)
    fields = {
        name.lower(): raw_text(value)
        for name, value in entry.items()
        if name not in (ENTRY_TYPE_KEY, ENTRY_ID_KEY)
    }
    return Record(entry_type=entry_type, key=str(key) if key else None, fields=fields)


def snapshot_from_database(database: BibDatabase, *, kind: SnapshotKind) -> Snapshot:
    """Build a snapshot from a parsed database."""

    records = tuple(record_from_entry(entry) for entry in database.entries)
    definitions = tuple(
        Definition(name=name, content=raw_text(value)) for name, value in database.strings.items()
    )
    preambles = [raw_text(preamble) for preamble in database.preambles]
    metadata, plain_comments = parse_metadata(database.comments)
    if len(preambles) > 1:
        log.warning("Found %s preambles, joining them into one", len(preambles))
    return Snapshot(
        kind=kind,
        records=records,
        definitions=definitions,
        preamble="\n".join(preambles) if preambles else None,
        metadata=metadata,
        comments=tuple(comment for comment in plain_comments if comment.strip()),
    )


def database_from_snapshot(snapshot: Snapshot) -> BibDatabase:
    """Build a bibtexparser database ready to be written."""

    database = BibDatabase()
    database.entries = [_entry_from_record(record, database) for record in snapshot.records]
    for definition in snapshot.definitions:
        database.strings[definition.name] = bibtex_value(definition.content, database)
    if snapshot.preamble is not None:
        database.preambles = [snapshot.preamble]
    database.comments = [*snapshot.comments, *metadata_comments(snapshot.metadata)]
    return database


def _entry_from_record(record: Record, database: BibDatabase) -> dict[str, object]:
    entry: dict[str, object] = {name: bibtex_value(value, database) for name, value in record.fields.items()}
    entry[ENTRY_TYPE_KEY] = record.entry_type
    entry[ENTRY_ID_KEY] = record.key or ""
    return entry
