"""
Console and JSON output for discovery and verification runs.

Keeps the orchestrators free of formatting. Lines written from worker
threads go through emit(), which writes each line as one unit.
"""

from __future__ import annotations

import json
import sys
import threading
from pathlib import Path

from tqdm import tqdm

from linkcheck.config import SiteConfig
from linkcheck.prober import Outcome

from .verification import LinkResult, VerificationReport


_emit_lock = threading.Lock()


def emit(line: str, stream=None, progress: tqdm | None = None) -> None:
    """Write one complete line to stream (stdout by default)."""
    stream = stream or sys.stdout
    with _emit_lock:
        if progress is not None:
            tqdm.write(line, file=stream)
        else:
            stream.write(line + "\n")
            stream.flush()


def format_invalid_link(result: LinkResult) -> str:
    return (f"The URL {result.link} from the original site was not found "
            f"in the local site: {result.target}")


def format_summary(report: VerificationReport) -> list[str]:
    lines = [f"Found {report.found} good links and {report.not_found} invalid links."]
    if report.remote_skipped:
        lines.append(f"  [verify] {report.remote_skipped} links skipped (broken on the remote site)")
    if report.malformed:
        counted = " (counted as invalid)" if report.malformed_policy == "count" else ""
        lines.append(f"  [verify] {report.malformed} malformed links{counted}")
    if report.transport_errors:
        lines.append(f"  [verify] {report.transport_errors} requests could not be completed")
    return lines


class ConsoleReporter:
    """Per-link callback for verify_links: diagnostics plus optional progress bar."""

    def __init__(self, progress: tqdm | None = None, verbose: bool = False):
        self.progress = progress
        self.verbose = verbose

    def __call__(self, result: LinkResult) -> None:
        if result.outcome is Outcome.NOT_FOUND:
            line = format_invalid_link(result)
            if result.transport_error:
                line += f" ({result.error})"
            emit(line, sys.stderr, self.progress)
        elif result.outcome is Outcome.MALFORMED:
            emit(f"  [verify] malformed link {result.link}: {result.error}", sys.stderr, self.progress)
        elif result.outcome is Outcome.REMOTE_BROKEN:
            if self.verbose or result.transport_error:
                detail = result.error if result.transport_error else f"status {result.remote_status}"
                emit(f"  [verify] remote link broken, skipped: {result.link} ({detail})",
                     sys.stderr, self.progress)
        elif self.verbose:
            emit(f"  [verify] {result.status_code} {result.target}", sys.stdout, self.progress)

        if self.progress is not None:
            self.progress.update(1)


def print_summary(report: VerificationReport) -> None:
    for line in format_summary(report):
        emit(line)


def build_report_data(report: VerificationReport, site: SiteConfig, link_file: str | None = None) -> dict:
    return {
        "link_file": link_file,
        "site": {
            "remote": site.remote,
            "local": site.local,
            "aliases": list(site.aliases),
            "ignore": list(site.ignore),
        },
        "started_at": report.started_at,
        "finished_at": report.finished_at,
        "malformed_policy": report.malformed_policy,
        "stats": {
            "total": report.total,
            "found": report.found,
            "not_found": report.not_found,
            "remote_skipped": report.remote_skipped,
            "malformed": report.malformed,
            "transport_errors": report.transport_errors,
        },
        "results": [
            {
                "link": r.link,
                "target": r.target,
                "outcome": r.outcome.value,
                "status_code": r.status_code,
                "remote_status": r.remote_status,
                "error": r.error,
            }
            for r in report.results
        ],
    }


def write_report_json(report_data: dict, path: Path | str) -> Path:
    report_file = Path(path)
    report_file.parent.mkdir(parents=True, exist_ok=True)
    with open(report_file, "w", encoding="utf-8") as f:
        json.dump(report_data, f, indent=2)
    return report_file


__all__ = [
    "ConsoleReporter",
    "build_report_data",
    "emit",
    "format_invalid_link",
    "format_summary",
    "print_summary",
    "write_report_json",
]
