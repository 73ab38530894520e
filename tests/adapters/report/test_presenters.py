from __future__ import annotations

import io
import json
from typing import TYPE_CHECKING

import pytest

from bibsync.adapters.report import (
    NO_CHANGES_MESSAGE,
    CompositePresenter,
    ConsolePresenter,
    JsonReportPresenter,
)
from bibsync.domain.reconciliation import Changeset, PreambleChange, RecordRemoved
from tests.helpers.bibliography import make_record

if TYPE_CHECKING:
    from pathlib import Path

CHANGESET = Changeset(
    (
        PreambleChange(memory="old", baseline="old", external="new"),
        RecordRemoved(baseline=make_record("A", key="a"), baseline_index=0),
    )
)


def test_console_presenter_reports_no_changes() -> None:
    stream = io.StringIO()

    assert ConsolePresenter(stream=stream).show(Changeset())
    assert stream.getvalue().strip() == NO_CHANGES_MESSAGE


def test_console_presenter_lists_changes_by_section() -> None:
    stream = io.StringIO()

    accepted = ConsolePresenter(stream=stream).show(CHANGESET)

    assert not accepted
    assert stream.getvalue().splitlines() == [
        "External changes (2):",
        "  [preamble]",
        "    - Preamble changed",
        "  [records]",
        "    - Deleted entry a  (cannot be applied automatically)",
    ]


@pytest.mark.parametrize(("answer", "expected"), [("y", True), ("YES", True), ("", False), ("n", False)])
def test_console_presenter_asks_for_acceptance(answer: str, expected: bool) -> None:
    prompts: list[str] = []

    def confirm(prompt: str) -> str:
        prompts.append(prompt)
        return answer

    presenter = ConsolePresenter(stream=io.StringIO(), confirm=confirm)

    assert presenter.show(CHANGESET) is expected
    assert prompts == ["Accept these changes? [y/N] "]


def test_console_presenter_assume_yes_skips_prompt() -> None:
    def confirm(_prompt: str) -> str:
        raise AssertionError("should not prompt")

    presenter = ConsolePresenter(stream=io.StringIO(), confirm=confirm, assume_yes=True)

    assert presenter.show(CHANGESET)


def test_json_presenter_writes_report(tmp_path: Path) -> None:
    destination = tmp_path / "reports" / "changes.json"

    accepted = JsonReportPresenter(destination, document="library.bib").show(CHANGESET)

    assert not accepted
    payload = json.loads(destination.read_text(encoding="utf-8"))
    assert payload["document"] == "library.bib"
    assert payload["change_count"] == 2
    assert [change["kind"] for change in payload["changes"]] == ["preamble", "record_removed"]


def test_composite_presenter_lets_the_last_one_decide(tmp_path: Path) -> None:
    presenter = CompositePresenter(
        ConsolePresenter(stream=io.StringIO(), assume_yes=True),
        JsonReportPresenter(tmp_path / "changes.json"),
    )

    assert not presenter.show(CHANGESET)
    assert (tmp_path / "changes.json").exists()


def test_composite_presenter_needs_presenters() -> None:
    with pytest.raises(ValueError, match="at least one"):
        CompositePresenter()
