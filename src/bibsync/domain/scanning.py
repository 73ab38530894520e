"""Application service running external-change scans in the background.

One scan (loading, sorting and the reconciliation passes) runs as a single unit
on the service's executor. Once the changeset is accepted, the changes are applied
to the memory snapshot and the external snapshot is written as the new baseline
in a separate submission whose failure is only logged.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Self

from bibsync.domain.model import SnapshotKind
from bibsync.domain.ports import LoadError, WriteError
from bibsync.domain.reconciliation import (
    ChangeNotApplicableError,
    ChangeScanner,
    InvariantViolationError,
    SnapshotEditor,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from concurrent.futures import Future
    from pathlib import Path
    from types import TracebackType

    from bibsync.domain.model import Snapshot
    from bibsync.domain.ports import ChangesetPresenter, SnapshotLoader, SnapshotWriter
    from bibsync.domain.reconciliation import ScanResult

DEFAULT_MAX_WORKERS = 2

log = getLogger(__name__)


class ScanInProgressError(RuntimeError):
    """Raised when a scan is requested for a document that is already being scanned."""

    def __init__(self, document: Path) -> None:
        self.document = document
        super().__init__(f"A scan of {document} is already in progress")


class ScanOutcome(StrEnum):
    NO_CHANGES = "no_changes"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(slots=True, kw_only=True)
class ScanRequest:
    """What to scan.

    ``document`` is the file on disk (the external snapshot) and ``baseline_path``
    the snapshot recorded at the last synchronization. ``memory_path`` points at
    the caller's working copy; without it the baseline is used.
    """

    document: Path
    baseline_path: Path
    memory_path: Path | None = None


@dataclass(slots=True, kw_only=True)
class ScanReport:
    """Outcome of one scan."""

    outcome: ScanOutcome
    document: Path
    result: ScanResult | None = None
    memory: Snapshot | None = None
    applied: int = 0
    skipped: int = 0
    error: Exception | None = None

    @property
    def failed(self) -> bool:
        return self.outcome is ScanOutcome.FAILED


@dataclass(slots=True)
class _InFlight:
    documents: set[Path] = field(default_factory=set)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def claim(self, document: Path) -> None:
        with self.lock:
            if document in self.documents:
                raise ScanInProgressError(document)
            self.documents.add(document)

    def release(self, document: Path) -> None:
        with self.lock:
            self.documents.discard(document)


class ScanService:
    """Run scans on a thread pool and resolve them through a presenter."""

    def __init__(
        self,
        *,
        loader: SnapshotLoader,
        writer: SnapshotWriter,
        presenter: ChangesetPresenter,
        scanner: ChangeScanner | None = None,
        editor_factory: Callable[[Snapshot], SnapshotEditor] = SnapshotEditor,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self.loader = loader
        self.writer = writer
        self.presenter = presenter
        self.scanner = scanner or ChangeScanner()
        self.editor_factory = editor_factory
        self._executor = executor or ThreadPoolExecutor(
            max_workers=DEFAULT_MAX_WORKERS, thread_name_prefix="bibsync-scan"
        )
        # baseline writes run on their own pool, shut down after the scan pool
        self._write_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="bibsync-baseline")
        self._in_flight = _InFlight()
        self._pending_writes: list[Future[None]] = []
        self._writes_lock = threading.Lock()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.shutdown()

    def submit(self, request: ScanRequest) -> Future[ScanReport]:
        """Schedule a scan; raises ``ScanInProgressError`` if the document is busy."""

        document = request.document.resolve()
        self._in_flight.claim(document)
        try:
            return self._executor.submit(self._run_claimed, request, document)
        except RuntimeError:
            self._in_flight.release(document)
            raise

    def run(self, request: ScanRequest) -> ScanReport:
        """Scan and wait for the outcome."""

        return self.submit(request).result()

    def wait_for_writes(self) -> None:
        """Block until scheduled baseline writes have finished."""

        with self._writes_lock:
            pending, self._pending_writes = self._pending_writes, []
        for future in pending:
            future.result()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
        self._write_executor.shutdown(wait=True)

    def _run_claimed(self, request: ScanRequest, document: Path) -> ScanReport:
        try:
            return self._run(request)
        finally:
            self._in_flight.release(document)

    def _run(self, request: ScanRequest) -> ScanReport:
        try:
            memory = (
                self.loader.load(request.memory_path, kind=SnapshotKind.MEMORY)
                if request.memory_path is not None
                else None
            )
            result = self.scanner.scan(
                memory,
                loader=self.loader,
                baseline_path=request.baseline_path,
                external_path=request.document,
            )
        except (LoadError, InvariantViolationError) as exc:
            log.exception("Scan of %s failed", request.document)
            return ScanReport(outcome=ScanOutcome.FAILED, document=request.document, error=exc)

        accepted = self.presenter.show(result.changeset)
        if not result.changes_found:
            return ScanReport(
                outcome=ScanOutcome.NO_CHANGES,
                document=request.document,
                result=result,
                memory=result.memory,
            )
        if not accepted:
            log.info("Changes in %s were not accepted", request.document)
            return ScanReport(outcome=ScanOutcome.REJECTED, document=request.document, result=result)

        editor = self.editor_factory(result.memory)
        skipped = 0
        for change in result.changeset:
            try:
                editor.apply(change)
            except ChangeNotApplicableError as exc:
                log.warning("Skipping %s change: %s", change.kind, exc)
                skipped += 1
        self._schedule_baseline_write(result.external, request.baseline_path)
        log.info("Applied %s change(s) to %s, skipped %s", editor.applied, request.document, skipped)
        return ScanReport(
            outcome=ScanOutcome.ACCEPTED,
            document=request.document,
            result=result,
            memory=editor.snapshot,
            applied=editor.applied,
            skipped=skipped,
        )

    def _schedule_baseline_write(self, external: Snapshot, destination: Path) -> None:
        baseline = external.as_kind(SnapshotKind.BASELINE)
        try:
            future = self._write_executor.submit(self._write_baseline, baseline, destination)
        except RuntimeError as exc:
            log.warning("Could not persist baseline %s: %s", destination, exc)
            return
        with self._writes_lock:
            self._pending_writes.append(future)

    def _write_baseline(self, baseline: Snapshot, destination: Path) -> None:
        try:
            self.writer.save(baseline, destination)
        except WriteError as exc:
            log.warning("Could not persist baseline %s: %s", destination, exc)
            return
        log.debug("Persisted baseline %s", destination)
