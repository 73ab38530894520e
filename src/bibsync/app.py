"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from bibsync.adapters.bibtex import BibtexLoader, BibtexWriter
from bibsync.adapters.report import CompositePresenter, ConsolePresenter, JsonReportPresenter
from bibsync.config import get_scan_config, get_storage_config
from bibsync.domain.model import SnapshotKind
from bibsync.domain.ports import LoadError
from bibsync.domain.reconciliation import ChangeScanner
from bibsync.domain.scanning import ScanOutcome, ScanReport, ScanRequest, ScanService

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path
    from typing import TextIO

    from bibsync.config import ScanConfig, StorageConfig
    from bibsync.domain.ports import ChangesetPresenter


log = getLogger(__name__)


def build_scanner(config: ScanConfig | None = None, *, threshold: float | None = None) -> ChangeScanner:
    effective = config or get_scan_config()
    return ChangeScanner(
        similarity=effective.build_similarity(),
        threshold=effective.match_threshold if threshold is None else threshold,
    )


def record_baseline(document: Path, *, storage: StorageConfig | None = None) -> Path:
    """Store ``document`` as the baseline for future scans and return where it went."""

    effective_storage = storage or get_storage_config()
    destination = effective_storage.baseline_path(document)
    snapshot = BibtexLoader().load(document, kind=SnapshotKind.BASELINE)
    BibtexWriter().save(snapshot, destination)
    log.info(
        "Recorded baseline for %s (%s records) at %s",
        document,
        len(snapshot.records),
        destination,
    )
    return destination


def scan_document(
    document: Path,
    *,
    memory_path: Path | None = None,
    baseline_path: Path | None = None,
    report_path: Path | None = None,
    threshold: float | None = None,
    stream: TextIO | None = None,
    storage: StorageConfig | None = None,
) -> ScanReport:
    """Show the external changes of ``document`` without applying them."""

    presenter: ChangesetPresenter = ConsolePresenter(stream=stream)
    if report_path is not None:
        presenter = CompositePresenter(
            JsonReportPresenter(report_path, document=str(document)),
            ConsolePresenter(stream=stream),
        )
    request = ScanRequest(
        document=document,
        baseline_path=_baseline_for(document, baseline_path, storage),
        memory_path=memory_path,
    )
    with _service(presenter, threshold=threshold) as service:
        report = service.run(request)
    log.info("Scan of %s finished: %s", document, report.outcome)
    return report


def merge_document(
    document: Path,
    *,
    memory_path: Path,
    output_path: Path | None = None,
    assume_yes: bool = False,
    confirm: Callable[[str], str] | None = input,
    threshold: float | None = None,
    stream: TextIO | None = None,
    storage: StorageConfig | None = None,
) -> ScanReport:
    """Scan ``document`` and merge accepted changes into the memory copy.

    The merged memory snapshot is written to ``output_path`` (the memory file by
    default) and the document itself becomes the new baseline.
    """

    presenter = ConsolePresenter(stream=stream, confirm=confirm, assume_yes=assume_yes)
    request = ScanRequest(
        document=document,
        baseline_path=_baseline_for(document, None, storage),
        memory_path=memory_path,
    )
    with _service(presenter, threshold=threshold) as service:
        report = service.run(request)
        if report.outcome is ScanOutcome.ACCEPTED and report.memory is not None:
            destination = output_path or memory_path
            service.writer.save(report.memory, destination)
            log.info(
                "Merged %s change(s) into %s (%s skipped)",
                report.applied,
                destination,
                report.skipped,
            )
        service.wait_for_writes()
    return report


def _service(presenter: ChangesetPresenter, *, threshold: float | None) -> ScanService:
    return ScanService(
        loader=BibtexLoader(),
        writer=BibtexWriter(),
        presenter=presenter,
        scanner=build_scanner(threshold=threshold),
    )


def _baseline_for(document: Path, explicit: Path | None, storage: StorageConfig | None) -> Path:
    if explicit is not None:
        return explicit
    effective_storage = storage or get_storage_config()
    baseline = effective_storage.baseline_path(document, ensure=False)
    if not baseline.exists():
        raise LoadError(baseline, f"no baseline recorded for {document}; run 'bibsync baseline' first")
    return baseline
