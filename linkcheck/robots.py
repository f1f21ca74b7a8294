"""
Robots.txt compliance for discovery crawls.

Usage:
    from linkcheck.robots import RobotsChecker

    robots = RobotsChecker.fetch("https://example.com/", user_agent)
    if robots.is_allowed("https://example.com/some/path"):
        # schedule it
    delay = robots.crawl_delay  # seconds, or None
"""

import threading
from urllib.parse import urlparse, urljoin
from urllib.robotparser import RobotFileParser

import requests


REQUEST_TIMEOUT = 10


class RobotsChecker:
    """
    Per-host robots.txt checker with a process-wide cache.

    Uses Python's RobotFileParser for rule matching. A missing robots.txt
    (404/403/410) or a fetch failure allows everything.
    """

    _cache: dict[str, 'RobotsChecker'] = {}  # netloc -> checker
    _cache_lock = threading.Lock()

    def __init__(self, base_url: str, user_agent: str):
        parsed = urlparse(base_url)
        self.base_url = f"{parsed.scheme}://{parsed.netloc}"
        self.robots_url = urljoin(self.base_url, '/robots.txt')
        self.user_agent = user_agent

        self._parser = RobotFileParser()
        self._parser.set_url(self.robots_url)

        self.found = False
        self.crawl_delay: float | None = None
        self.error: str | None = None

    @classmethod
    def fetch(
        cls,
        base_url: str,
        user_agent: str,
        session: requests.Session | None = None,
        use_cache: bool = True,
    ) -> 'RobotsChecker':
        """
        Fetch and parse robots.txt for the host of base_url.

        Args:
            base_url: Any URL on the host
            user_agent: Agent name matched against robots.txt sections
            session: Optional session to reuse connections
            use_cache: Return the cached checker for this host if present
        """
        netloc = urlparse(base_url).netloc

        if use_cache:
            with cls._cache_lock:
                if netloc in cls._cache:
                    return cls._cache[netloc]

        checker = cls(base_url, user_agent)
        checker._fetch_and_parse(session)

        if use_cache:
            with cls._cache_lock:
                checker = cls._cache.setdefault(netloc, checker)

        return checker

    @classmethod
    def clear_cache(cls):
        """Clear the robots.txt cache."""
        with cls._cache_lock:
            cls._cache.clear()

    def _fetch_and_parse(self, session: requests.Session | None = None):
        """Fetch robots.txt and parse it."""
        getter = session.get if session is not None else requests.get
        try:
            resp = getter(
                self.robots_url,
                timeout=REQUEST_TIMEOUT,
                headers={'User-Agent': self.user_agent},
                allow_redirects=True,
            )

            if resp.status_code == 200:
                self.found = True
                self._parser.parse(resp.text.splitlines())
                delay = self._parser.crawl_delay(self.user_agent)
                self.crawl_delay = float(delay) if delay is not None else None

            elif resp.status_code in (404, 403, 410):
                # No robots.txt = everything allowed
                self.found = False
            else:
                self.error = f"Unexpected status: {resp.status_code}"

        except requests.RequestException as e:
            self.error = str(e)

    def is_allowed(self, url_or_path: str) -> bool:
        """True if the URL (or host-relative path) may be crawled."""
        if not self.found:
            return True

        if url_or_path.startswith('http'):
            url = url_or_path
        else:
            url = urljoin(self.base_url, url_or_path)

        return self._parser.can_fetch(self.user_agent, url)

    def get_delay(self, default: float = 0.0) -> float:
        """Crawl delay in seconds, falling back to default."""
        if self.crawl_delay is not None:
            return self.crawl_delay
        return default
