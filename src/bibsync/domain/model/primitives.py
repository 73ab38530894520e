"""Domain primitives: scalar aliases.

Scalar aliases may be promoted to proper value objects later without changing imports.
"""

from __future__ import annotations

type FieldName = str
type CitationKey = str
type EntryType = str

DEFAULT_ENTRY_TYPE: EntryType = "misc"
