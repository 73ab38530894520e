"""Write snapshots as BibTeX files."""

from __future__ import annotations

import os
import tempfile
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

import bibtexparser
from bibtexparser.bwriter import BibTexWriter as LibraryWriter

from bibsync.domain.ports import WriteError

from .translator import database_from_snapshot

if TYPE_CHECKING:
    from bibsync.domain.model import Snapshot


log = getLogger(__name__)


def _new_writer() -> LibraryWriter:
    writer = LibraryWriter()
    writer.order_entries_by = None
    writer.contents = ["preambles", "strings", "entries", "comments"]
    writer.indent = "  "
    return writer


def dumps(snapshot: Snapshot) -> str:
    """Render ``snapshot`` as BibTeX text."""

    return bibtexparser.dumps(database_from_snapshot(snapshot), writer=_new_writer())


class BibtexWriter:
    """Snapshot writer backed by bibtexparser.

    The file is written to a temporary sibling first and moved into place, so a
    failed write never leaves a truncated destination behind.
    """

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def save(self, snapshot: Snapshot, destination: Path) -> None:
        text = dumps(snapshot)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            descriptor, temp_name = tempfile.mkstemp(
                prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
            )
            temp_path = Path(temp_name)
            try:
                with os.fdopen(descriptor, "w", encoding=self.encoding) as handle:
                    handle.write(text)
                temp_path.replace(destination)
            except BaseException:
                temp_path.unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise WriteError(destination, str(exc)) from exc
        log.debug("Wrote %s records to %s", len(snapshot.records), destination)
