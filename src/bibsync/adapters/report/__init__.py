"""Changeset reporting: pydantic report schema and presenters."""

from __future__ import annotations

from .presenter import (
    NO_CHANGES_MESSAGE,
    CompositePresenter,
    ConsolePresenter,
    JsonReportPresenter,
)
from .schema import ChangePayload, ChangesetReport
from .translator import change_payload, describe, is_applicable, report_from_changeset

__all__ = [
    "NO_CHANGES_MESSAGE",
    "ChangePayload",
    "ChangesetReport",
    "CompositePresenter",
    "ConsolePresenter",
    "JsonReportPresenter",
    "change_payload",
    "describe",
    "is_applicable",
    "report_from_changeset",
]
