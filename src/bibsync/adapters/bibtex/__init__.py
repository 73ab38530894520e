"""BibTeX file adapter built on bibtexparser."""

from __future__ import annotations

from .loader import BibtexLoader
from .metadata import MetadataFormatError, parse_group_tree, serialize_group_tree
from .translator import database_from_snapshot, snapshot_from_database
from .writer import BibtexWriter, dumps

__all__ = [
    "BibtexLoader",
    "BibtexWriter",
    "MetadataFormatError",
    "database_from_snapshot",
    "dumps",
    "parse_group_tree",
    "serialize_group_tree",
    "snapshot_from_database",
]
