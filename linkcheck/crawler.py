"""
Multi-threaded crawl engine used by link discovery.

The engine knows nothing about which links matter. Callers inject two
callbacks:

    should_visit(referring_url, candidate_url) -> bool
        decides whether a discovered URL is scheduled for fetching
    visit(page)
        called once per fetched HTML page, with page.outgoing_urls

Usage:
    crawler = SiteCrawler(CrawlSettings(), should_visit, visit)
    crawler.add_seed("https://example.com/")
    crawler.start()  # blocks until the frontier drains
"""

import json
import queue
import sys
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable
from urllib.parse import urldefrag, urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from .config import CrawlSettings, DEFAULT_HEADERS, canonicalize_url
from .robots import RobotsChecker


# Tags and attributes that carry outgoing links
LINK_ATTRIBUTES = (
    ('a', 'href'),
    ('area', 'href'),
    ('link', 'href'),
    ('iframe', 'src'),
    ('frame', 'src'),
    ('img', 'src'),
    ('script', 'src'),
)

STATUS_FILE = "crawl_status.json"


@dataclass
class Page:
    """A fetched HTML page."""
    url: str
    final_url: str
    status_code: int
    depth: int
    outgoing_urls: list[str] = field(default_factory=list)


class DiscoveredLinks:
    """Set of discovered URLs, safe for insertion from crawl workers."""

    def __init__(self):
        self._links: set[str] = set()
        self._lock = threading.Lock()

    def add(self, url: str) -> bool:
        """Add url; True if it was not already present."""
        with self._lock:
            if url in self._links:
                return False
            self._links.add(url)
            return True

    def __contains__(self, url: str) -> bool:
        with self._lock:
            return url in self._links

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)

    def sorted(self) -> list[str]:
        """Lexicographically sorted snapshot."""
        with self._lock:
            return sorted(self._links)


def extract_links(html: str, base_url: str) -> list[str]:
    """
    Collect absolute http(s) link targets from an HTML document.

    Relative references are resolved against <base href> if present,
    otherwise base_url. Fragments are dropped and scheme/host canonicalized;
    order of first appearance is kept and duplicates removed.
    """
    soup = BeautifulSoup(html, "lxml")

    base_tag = soup.find('base', href=True)
    if base_tag:
        base_url = urljoin(base_url, base_tag['href'].strip())

    links = []
    for tag_name, attr in LINK_ATTRIBUTES:
        for tag in soup.find_all(tag_name, attrs={attr: True}):
            href = (tag.get(attr) or '').strip()
            if not href:
                continue
            try:
                absolute, _ = urldefrag(urljoin(base_url, href))
            except ValueError:
                continue
            if urlparse(absolute).scheme in ('http', 'https'):
                links.append(canonicalize_url(absolute))

    return list(dict.fromkeys(links))


class SiteCrawler:
    """
    Worker-pool crawler with a shared frontier.

    Each URL is scheduled at most once. The controller thread (the caller
    of start()) snapshots progress every monitor_interval seconds and stops
    the workers once no scheduled URL is left and the frontier has stayed
    idle for cleanup_delay seconds.
    """

    def __init__(
        self,
        settings: CrawlSettings,
        should_visit: Callable[[str | None, str], bool],
        visit: Callable[[Page], None],
        session: requests.Session | None = None,
    ):
        self.settings = settings
        self.should_visit = should_visit
        self.visit = visit

        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)
        self.session.headers['User-Agent'] = settings.user_agent

        self._frontier: queue.Queue = queue.Queue()
        self._seen: set[str] = set()
        self._queued = 0
        self._pending = 0
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._host_next_slot: dict[str, float] = {}
        self._host_lock = threading.Lock()
        self._failure: BaseException | None = None

        self.seeds: list[str] = []
        self.pages_fetched = 0
        self.pages_failed = 0
        self.started_at: str | None = None

    def add_seed(self, url: str) -> None:
        self.seeds.append(url)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _robots(self, url: str) -> RobotsChecker | None:
        if not self.settings.respect_robots:
            return None
        return RobotsChecker.fetch(url, self.settings.user_agent, session=self.session)

    def _schedule(self, url: str, depth: int) -> bool:
        max_depth = self.settings.max_depth
        if max_depth >= 0 and depth > max_depth:
            return False

        max_pages = self.settings.max_pages
        with self._lock:
            if url in self._seen:
                return False
            if max_pages >= 0 and self._queued >= max_pages:
                return False
            self._seen.add(url)

        robots = self._robots(url)
        if robots and not robots.is_allowed(url):
            if self.settings.verbose:
                print(f"  [robots] disallowed: {url}")
            return False

        with self._lock:
            if max_pages >= 0 and self._queued >= max_pages:
                return False
            self._queued += 1
            self._pending += 1

        self._frontier.put((url, depth))
        return True

    def _wait_politely(self, url: str) -> None:
        """Space out requests to the same host."""
        host = urlparse(url).netloc
        delay = self.settings.politeness_delay / 1000.0
        robots = self._robots(url)
        if robots:
            delay = max(delay, robots.get_delay(0.0))

        with self._host_lock:
            now = time.monotonic()
            slot = max(now, self._host_next_slot.get(host, now))
            self._host_next_slot[host] = slot + delay

        wait = slot - now
        if wait > 0:
            time.sleep(wait)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def fetch_page(self, url: str, depth: int) -> Page | None:
        """
        Fetch url and parse outgoing links.

        Returns:
            Page for 2xx HTML responses, None otherwise
        """
        self._wait_politely(url)
        try:
            resp = self.session.get(url, timeout=self.settings.timeout, allow_redirects=True)
        except requests.RequestException as exc:
            with self._lock:
                self.pages_failed += 1
            print(f"  [crawl] fetch failed: {url} ({type(exc).__name__})", file=sys.stderr)
            return None

        with resp:
            if not 200 <= resp.status_code < 300:
                with self._lock:
                    self.pages_failed += 1
                if self.settings.verbose:
                    print(f"  [crawl] {resp.status_code} {url}")
                return None

            content_type = resp.headers.get('Content-Type', '').lower()
            if 'text/html' not in content_type and 'application/xhtml' not in content_type:
                return None

            final_url = resp.url or url
            return Page(
                url=url,
                final_url=final_url,
                status_code=resp.status_code,
                depth=depth,
                outgoing_urls=extract_links(resp.text, final_url),
            )

    def _process(self, url: str, depth: int) -> None:
        page = self.fetch_page(url, depth)
        if page is None:
            return

        with self._lock:
            self.pages_fetched += 1

        self.visit(page)

        for link in page.outgoing_urls:
            if self._stop.is_set():
                break
            if self.should_visit(page.url, link):
                self._schedule(link, depth + 1)

    def _worker(self) -> None:
        while not self._stop.is_set():
            try:
                url, depth = self._frontier.get(timeout=0.1)
            except queue.Empty:
                continue

            try:
                self._process(url, depth)
            except Exception as exc:
                with self._lock:
                    if self._failure is None:
                        self._failure = exc
                self._stop.set()
            finally:
                with self._lock:
                    self._pending -= 1

    # ------------------------------------------------------------------
    # Controller
    # ------------------------------------------------------------------

    def _idle(self) -> bool:
        with self._lock:
            return self._pending == 0

    def status(self) -> dict:
        with self._lock:
            return {
                "seeds": list(self.seeds),
                "started": self.started_at,
                "updated": datetime.now(timezone.utc).isoformat(),
                "scheduled": self._queued,
                "pending": self._pending,
                "pages_fetched": self.pages_fetched,
                "pages_failed": self.pages_failed,
            }

    def _write_status(self) -> None:
        storage_dir = Path(self.settings.storage_dir)
        storage_dir.mkdir(parents=True, exist_ok=True)
        (storage_dir / STATUS_FILE).write_text(json.dumps(self.status(), indent=2), encoding="utf-8")

    def start(self) -> None:
        """
        Crawl from the seeds until no scheduled URL remains.

        Raises:
            Exception: the first exception raised by a visit/should_visit
                callback, after the workers have stopped
        """
        if not self.seeds:
            raise ValueError("No seed URLs added")

        self.started_at = datetime.now(timezone.utc).isoformat()
        self._stop.clear()

        for seed in self.seeds:
            self._schedule(seed, 0)

        workers = [
            threading.Thread(target=self._worker, name=f"crawler-{i}", daemon=True)
            for i in range(max(1, self.settings.workers))
        ]
        for w in workers:
            w.start()

        try:
            while not self._stop.is_set():
                self._stop.wait(self.settings.monitor_interval)
                self._write_status()
                if self.settings.verbose:
                    s = self.status()
                    print(f"  [crawl] fetched={s['pages_fetched']} pending={s['pending']}")
                if self._idle():
                    # Give in-flight scheduling a chance before declaring the crawl done
                    time.sleep(self.settings.cleanup_delay)
                    if self._idle():
                        break
        finally:
            self._stop.set()
            for w in workers:
                w.join()
            self._write_status()

        if self._failure is not None:
            raise self._failure
