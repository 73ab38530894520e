"""Read BibTeX files into snapshots."""

from __future__ import annotations

import re
from collections import Counter
from logging import getLogger
from typing import TYPE_CHECKING

import bibtexparser
from bibtexparser.bparser import BibTexParser

from bibsync.domain.ports import LoadError

from .metadata import MetadataFormatError
from .translator import snapshot_from_database

if TYPE_CHECKING:
    from pathlib import Path

    from bibsync.domain.model import Snapshot, SnapshotKind


# bibtexparser lowercases string names and keeps only the last definition
_STRING_NAME = re.compile(r"@\s*string\s*[{(]\s*([^\s=,{}()]+)\s*=", re.IGNORECASE)

log = getLogger(__name__)


def duplicate_string_names(text: str) -> list[str]:
    counts = Counter(name.lower() for name in _STRING_NAME.findall(text))
    return sorted(name for name, count in counts.items() if count > 1)


def _new_parser() -> BibTexParser:
    # parsers accumulate state, so every load gets a fresh one
    return BibTexParser(
        ignore_nonstandard_types=False,
        interpolate_strings=False,
        common_strings=False,
    )


class BibtexLoader:
    """Snapshot loader backed by bibtexparser."""

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def load(self, path: Path, *, kind: SnapshotKind) -> Snapshot:
        try:
            text = path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise LoadError(path, str(exc)) from exc
        snapshot = self.loads(text, kind=kind, origin=path)
        log.debug(
            "Loaded %s snapshot from %s: %s records, %s strings",
            kind,
            path,
            len(snapshot.records),
            len(snapshot.definitions),
        )
        return snapshot

    def loads(self, text: str, *, kind: SnapshotKind, origin: Path | None = None) -> Snapshot:
        """Parse BibTeX ``text``; ``origin`` is only used in error messages."""

        source: Path | str = origin if origin is not None else "<string>"
        duplicates = duplicate_string_names(text)
        if duplicates:
            raise LoadError(source, f"duplicate @string name(s): {', '.join(duplicates)}")
        try:
            database = bibtexparser.loads(text, parser=_new_parser())
        except Exception as exc:  # noqa: BLE001
            raise LoadError(source, f"invalid BibTeX: {exc}") from exc
        try:
            return snapshot_from_database(database, kind=kind)
        except MetadataFormatError as exc:
            raise LoadError(source, str(exc)) from exc
