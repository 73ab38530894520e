from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from bibsync.app import merge_document, record_baseline, scan_document
from bibsync.config import ConfigurationError, configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from bibsync.domain.scanning import ScanReport

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detect external changes to BibTeX files")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log debug output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    baseline = subparsers.add_parser("baseline", help="Record a file as the baseline for scans")
    baseline.add_argument("file", type=Path, help="BibTeX file to record")

    scan = subparsers.add_parser("scan", help="Show changes made to a file since its baseline")
    scan.add_argument("file", type=Path, help="BibTeX file to scan")
    scan.add_argument(
        "--memory",
        type=Path,
        help="Working copy to resolve changes against (defaults to the baseline)",
    )
    scan.add_argument(
        "--baseline",
        type=Path,
        help="Baseline file to compare with (defaults to the recorded baseline)",
    )
    scan.add_argument(
        "--json",
        type=Path,
        dest="report",
        help="Also write the changeset as a JSON report to this path",
    )
    scan.add_argument(
        "--threshold",
        type=float,
        help="Minimum similarity for a fuzzy match, within [0, 1] (defaults to config)",
    )

    merge = subparsers.add_parser("merge", help="Merge changes made to a file into a working copy")
    merge.add_argument("file", type=Path, help="BibTeX file that was changed")
    merge.add_argument(
        "--memory",
        type=Path,
        required=True,
        help="Working copy the changes are merged into",
    )
    merge.add_argument(
        "--output",
        type=Path,
        help="Where to write the merged working copy (defaults to --memory)",
    )
    merge.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Accept the changes without asking",
    )
    merge.add_argument(
        "--threshold",
        type=float,
        help="Minimum similarity for a fuzzy match, within [0, 1] (defaults to config)",
    )

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace) -> None:
    threshold = getattr(args, "threshold", None)
    if threshold is not None and not 0.0 <= threshold <= 1.0:
        raise ValueError(f"Threshold must be within [0, 1], got {threshold}")


def _run_command(args: argparse.Namespace) -> ScanReport | None:
    if args.command == "baseline":
        destination = record_baseline(args.file)
        log.info("Baseline stored at %s", destination)
        return None
    if args.command == "scan":
        return scan_document(
            args.file,
            memory_path=args.memory,
            baseline_path=args.baseline,
            report_path=args.report,
            threshold=args.threshold,
        )
    if args.command == "merge":
        return merge_document(
            args.file,
            memory_path=args.memory,
            output_path=args.output,
            assume_yes=args.yes,
            threshold=args.threshold,
        )
    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        report = _run_command(parsed_args)
    except ConfigurationError:
        log.exception("Invalid configuration")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    if report is not None and report.failed:
        log.error("Scan of %s failed: %s", report.document, report.error)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    main()
