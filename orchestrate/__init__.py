"""
Orchestration for the discovery and verification pipelines.

The CLI lives in orchestrate.cli; this package exposes the pipelines for
programmatic use.
"""

from .config import (
    apply_run_config,
    load_run_config,
    provided_flag_names,
)
from .discovery import discover_links, run_discovery
from .presenter import (
    ConsoleReporter,
    build_report_data,
    format_summary,
    print_summary,
    write_report_json,
)
from .verification import (
    LinkResult,
    VerificationReport,
    check_link,
    verify_links,
)

__all__ = [
    "apply_run_config",
    "load_run_config",
    "provided_flag_names",
    "discover_links",
    "run_discovery",
    "ConsoleReporter",
    "build_report_data",
    "format_summary",
    "print_summary",
    "write_report_json",
    "LinkResult",
    "VerificationReport",
    "check_link",
    "verify_links",
]
