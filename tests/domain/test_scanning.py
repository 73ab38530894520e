from __future__ import annotations

import logging
import threading
from pathlib import Path

import pytest

from bibsync.domain.model import SnapshotKind
from bibsync.domain.ports import LoadError
from bibsync.domain.reconciliation import Changeset
from bibsync.domain.scanning import (
    ScanInProgressError,
    ScanOutcome,
    ScanRequest,
    ScanService,
)
from tests.helpers.bibliography import (
    FakePresenter,
    FakeSnapshotLoader,
    FakeSnapshotWriter,
    make_record,
    make_snapshot,
)

DOCUMENT = Path("library.bib")
BASELINE = Path("baseline.bib")
MEMORY = Path("memory.bib")


def _loader(*, external: list[str], baseline: list[str], memory: list[str] | None = None) -> FakeSnapshotLoader:
    snapshots = {
        DOCUMENT: make_snapshot(SnapshotKind.EXTERNAL, [make_record(t, key=t) for t in external]),
        BASELINE: make_snapshot(SnapshotKind.BASELINE, [make_record(t, key=t) for t in baseline]),
    }
    if memory is not None:
        snapshots[MEMORY] = make_snapshot(SnapshotKind.MEMORY, [make_record(t, key=t) for t in memory])
    return FakeSnapshotLoader(snapshots)


def _request(*, memory: bool = False) -> ScanRequest:
    return ScanRequest(document=DOCUMENT, baseline_path=BASELINE, memory_path=MEMORY if memory else None)


def test_unchanged_document_has_no_changes() -> None:
    presenter = FakePresenter()
    writer = FakeSnapshotWriter()

    with ScanService(loader=_loader(external=["A"], baseline=["A"]), writer=writer, presenter=presenter) as service:
        report = service.run(_request())
        service.wait_for_writes()

    assert report.outcome is ScanOutcome.NO_CHANGES
    assert presenter.shown == [Changeset()]
    assert writer.saved == []


def test_failed_load_is_a_failed_scan(caplog: pytest.LogCaptureFixture) -> None:
    presenter = FakePresenter()
    loader = FakeSnapshotLoader({DOCUMENT: make_snapshot(SnapshotKind.EXTERNAL)})

    with (
        caplog.at_level(logging.ERROR),
        ScanService(loader=loader, writer=FakeSnapshotWriter(), presenter=presenter) as service,
    ):
        report = service.run(_request())

    assert report.outcome is ScanOutcome.FAILED
    assert report.failed
    assert isinstance(report.error, LoadError)
    assert presenter.shown == []
    assert "Scan of library.bib failed" in caplog.text


def test_accepted_changes_are_applied_and_external_becomes_baseline() -> None:
    writer = FakeSnapshotWriter()
    loader = _loader(external=["A", "B"], baseline=["A"], memory=["A", "Local"])

    with ScanService(loader=loader, writer=writer, presenter=FakePresenter(accept=True)) as service:
        report = service.run(_request(memory=True))
        service.wait_for_writes()

    assert report.outcome is ScanOutcome.ACCEPTED
    assert report.applied == 1
    assert report.memory is not None
    assert [record.key for record in report.memory.records] == ["A", "Local", "B"]
    ((saved, destination),) = writer.saved
    assert destination == BASELINE
    assert saved.kind is SnapshotKind.BASELINE
    assert [record.key for record in saved.records] == ["A", "B"]
    assert (MEMORY, SnapshotKind.MEMORY) in loader.calls


def test_rejected_changes_leave_everything_untouched() -> None:
    writer = FakeSnapshotWriter()

    with ScanService(
        loader=_loader(external=["A", "B"], baseline=["A"]),
        writer=writer,
        presenter=FakePresenter(accept=False),
    ) as service:
        report = service.run(_request())
        service.wait_for_writes()

    assert report.outcome is ScanOutcome.REJECTED
    assert report.memory is None
    assert report.result is not None
    assert len(report.result.changeset) == 1
    assert writer.saved == []


def test_inapplicable_changes_are_skipped() -> None:
    loader = _loader(external=[], baseline=["A"], memory=[])

    with ScanService(loader=loader, writer=FakeSnapshotWriter(), presenter=FakePresenter()) as service:
        report = service.run(_request(memory=True))

    assert report.outcome is ScanOutcome.ACCEPTED
    assert (report.applied, report.skipped) == (0, 1)


def test_baseline_write_failure_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    writer = FakeSnapshotWriter(fail_with="disk full")

    with (
        caplog.at_level(logging.WARNING),
        ScanService(
            loader=_loader(external=["A", "B"], baseline=["A"]),
            writer=writer,
            presenter=FakePresenter(),
        ) as service,
    ):
        report = service.run(_request())
        service.wait_for_writes()

    assert report.outcome is ScanOutcome.ACCEPTED
    assert "Could not persist baseline" in caplog.text
    assert "disk full" in caplog.text


def test_concurrent_scans_of_one_document_are_rejected() -> None:
    started = threading.Event()
    release = threading.Event()

    class BlockingPresenter:
        def show(self, changeset: Changeset) -> bool:
            started.set()
            release.wait(timeout=5)
            return False

    with ScanService(
        loader=_loader(external=["A", "B"], baseline=["A"]),
        writer=FakeSnapshotWriter(),
        presenter=BlockingPresenter(),
    ) as service:
        first = service.submit(_request())
        assert started.wait(timeout=5)

        with pytest.raises(ScanInProgressError):
            service.submit(_request())

        release.set()
        assert first.result(timeout=5).outcome is ScanOutcome.REJECTED
        assert service.run(_request()).outcome is ScanOutcome.REJECTED


def test_baseline_write_survives_shutdown_during_a_scan() -> None:
    started = threading.Event()
    release = threading.Event()

    class SlowPresenter:
        def show(self, changeset: Changeset) -> bool:
            started.set()
            release.wait(timeout=5)
            return True

    writer = FakeSnapshotWriter()
    with ScanService(
        loader=_loader(external=["A", "B"], baseline=["A"]),
        writer=writer,
        presenter=SlowPresenter(),
    ) as service:
        future = service.submit(_request())
        assert started.wait(timeout=5)
        threading.Timer(0.1, release.set).start()

    assert future.result(timeout=5).outcome is ScanOutcome.ACCEPTED
    ((saved, destination),) = writer.saved
    assert destination == BASELINE
    assert [record.key for record in saved.records] == ["A", "B"]
