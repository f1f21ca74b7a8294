"""
Two-stage link verification: optional remote check, then local check.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Sequence

from linkcheck.config import SiteConfig
from linkcheck.prober import Outcome, Prober, TransportError, classify_status
from linkcheck.rewrite import MalformedLinkError, rewrite_link


MALFORMED_POLICIES = ("skip", "count")
TRANSPORT_POLICIES = ("count", "abort")


@dataclass
class LinkResult:
    """Outcome of verifying one link from the link file."""
    index: int
    link: str
    target: str | None
    outcome: Outcome
    status_code: int | None = None
    remote_status: int | None = None
    error: str | None = None
    transport_error: bool = False


@dataclass
class VerificationReport:
    """Aggregate counts for a verification run."""
    found: int = 0
    not_found: int = 0
    remote_skipped: int = 0
    malformed: int = 0
    transport_errors: int = 0
    results: list[LinkResult] = field(default_factory=list)
    started_at: str | None = None
    finished_at: str | None = None
    malformed_policy: str = "skip"
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def total(self) -> int:
        return len(self.results)

    def record(self, result: LinkResult) -> None:
        """Add one result; safe to call from several workers."""
        with self._lock:
            self.results.append(result)
            if result.outcome is Outcome.FOUND:
                self.found += 1
            elif result.outcome is Outcome.NOT_FOUND:
                self.not_found += 1
            elif result.outcome is Outcome.REMOTE_BROKEN:
                self.remote_skipped += 1
            elif result.outcome is Outcome.MALFORMED:
                self.malformed += 1
                if self.malformed_policy == "count":
                    self.not_found += 1
            if result.transport_error:
                self.transport_errors += 1


def check_link(
    index: int,
    link: str,
    site: SiteConfig,
    prober: Prober,
    verify_remote: bool = False,
    transport_policy: str = "count",
) -> LinkResult:
    """
    Verify a single link.

    The remote probe (if enabled) always completes before the local probe
    is issued. A remote status other than exactly 200 means the link is
    already broken upstream and the local site is not checked.

    Raises:
        TransportError: a probe failed and transport_policy is "abort"
    """
    try:
        target = rewrite_link(link, site.remote, site.local, site.aliases)
    except MalformedLinkError as exc:
        return LinkResult(index, link, exc.transformed, Outcome.MALFORMED, error=exc.reason)

    remote_status = None
    if verify_remote:
        try:
            remote_status = prober.probe(link)
        except TransportError as exc:
            if transport_policy == "abort":
                raise
            return LinkResult(index, link, target, Outcome.REMOTE_BROKEN,
                              error=str(exc), transport_error=True)
        if remote_status != 200:
            return LinkResult(index, link, target, Outcome.REMOTE_BROKEN, remote_status=remote_status)

    try:
        status = prober.probe(target)
    except TransportError as exc:
        if transport_policy == "abort":
            raise
        return LinkResult(index, link, target, Outcome.NOT_FOUND, remote_status=remote_status,
                          error=str(exc), transport_error=True)

    return LinkResult(index, link, target, classify_status(status),
                      status_code=status, remote_status=remote_status)


def verify_links(
    links: Sequence[str],
    site: SiteConfig,
    prober: Prober,
    verify_remote: bool = False,
    workers: int = 1,
    malformed_policy: str = "skip",
    transport_policy: str = "count",
    on_result: Callable[[LinkResult], None] | None = None,
) -> VerificationReport:
    """
    Verify every link against the local site.

    Args:
        links: Remote-origin links in file order
        site: Normalized origins (local must be set)
        prober: Shared prober for the run
        verify_remote: Check each link on the remote site first
        workers: Links verified concurrently (1 = sequential)
        malformed_policy: "skip" excludes malformed links from not_found,
            "count" adds them to it
        transport_policy: "count" treats failed probes as not found and
            continues, "abort" re-raises the first TransportError
        on_result: Called once per link as soon as it is verified

    Returns:
        VerificationReport with results in file order

    Raises:
        TransportError: only when transport_policy is "abort"
    """
    if malformed_policy not in MALFORMED_POLICIES:
        raise ValueError(f"Unknown malformed policy: {malformed_policy}")
    if transport_policy not in TRANSPORT_POLICIES:
        raise ValueError(f"Unknown transport policy: {transport_policy}")
    if not site.local:
        raise ValueError("SiteConfig.local is required for verification")

    report = VerificationReport(
        started_at=datetime.now(timezone.utc).isoformat(),
        malformed_policy=malformed_policy,
    )

    def _done(result: LinkResult) -> None:
        report.record(result)
        if on_result:
            on_result(result)

    if workers <= 1:
        for i, link in enumerate(links):
            _done(check_link(i, link, site, prober, verify_remote, transport_policy))
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(check_link, i, link, site, prober, verify_remote, transport_policy)
                for i, link in enumerate(links)
            ]
            try:
                for future in as_completed(futures):
                    _done(future.result())
            except TransportError:
                executor.shutdown(wait=True, cancel_futures=True)
                raise

    report.results.sort(key=lambda r: r.index)
    report.finished_at = datetime.now(timezone.utc).isoformat()
    return report
