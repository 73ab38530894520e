"""Presenters that surface a changeset on the console or as a JSON report."""

from __future__ import annotations

import sys
from logging import getLogger
from typing import TYPE_CHECKING, TextIO

from .translator import describe, is_applicable, report_from_changeset

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from bibsync.domain.reconciliation.changes import Changeset


log = getLogger(__name__)

NO_CHANGES_MESSAGE = "No actual changes found."
_YES = frozenset({"y", "yes"})


class ConsolePresenter:
    """Print the changeset grouped by section and optionally ask for acceptance.

    Without a ``confirm`` callable and without ``assume_yes`` the changeset is only
    shown and never accepted.
    """

    def __init__(
        self,
        *,
        stream: TextIO | None = None,
        confirm: Callable[[str], str] | None = None,
        assume_yes: bool = False,
    ) -> None:
        self.stream = stream or sys.stdout
        self.confirm = confirm
        self.assume_yes = assume_yes

    def show(self, changeset: Changeset) -> bool:
        if changeset.is_empty:
            print(NO_CHANGES_MESSAGE, file=self.stream)
            return True

        print(f"External changes ({len(changeset)}):", file=self.stream)
        for section, changes in changeset.sections().items():
            print(f"  [{section}]", file=self.stream)
            for change in changes:
                marker = "" if is_applicable(change) else "  (cannot be applied automatically)"
                print(f"    - {describe(change)}{marker}", file=self.stream)

        if self.assume_yes:
            return True
        if self.confirm is None:
            return False
        answer = self.confirm("Accept these changes? [y/N] ")
        return answer.strip().lower() in _YES


class JsonReportPresenter:
    """Write the changeset as a JSON report; acceptance is fixed up front."""

    def __init__(self, destination: Path, *, document: str | None = None, accept: bool = False) -> None:
        self.destination = destination
        self.document = document
        self.accept = accept

    def show(self, changeset: Changeset) -> bool:
        report = report_from_changeset(changeset, document=self.document)
        self.destination.parent.mkdir(parents=True, exist_ok=True)
        self.destination.write_text(report.model_dump_json(indent=2), encoding="utf-8")
        log.info("Wrote changeset report with %s change(s) to %s", report.change_count, self.destination)
        return self.accept


class CompositePresenter:
    """Show a changeset through several presenters; the last one decides."""

    def __init__(self, *presenters: ConsolePresenter | JsonReportPresenter) -> None:
        if not presenters:
            raise ValueError("CompositePresenter needs at least one presenter")
        self.presenters = presenters

    def show(self, changeset: Changeset) -> bool:
        accepted = False
        for presenter in self.presenters:
            accepted = presenter.show(changeset)
        return accepted
