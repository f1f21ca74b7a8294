"""
HTTP status prober.

One GET per link, redirects followed, body discarded:

    with Prober(ProbeSettings()) as prober:
        status = prober.probe("http://localhost:8080/docs/")
        outcome = classify_status(status)
"""

from enum import Enum

import requests
from requests.adapters import HTTPAdapter

from .config import ProbeSettings


class Outcome(str, Enum):
    """Per-link verification outcome."""
    FOUND = 'found'
    NOT_FOUND = 'not_found'
    REMOTE_BROKEN = 'remote_broken'
    MALFORMED = 'malformed'


class TransportError(Exception):
    """Raised when a probe request could not be completed."""

    def __init__(self, url: str, cause: Exception):
        self.url = url
        self.cause = cause
        super().__init__(f"{url}: {type(cause).__name__}: {cause}")


def classify_status(status_code: int) -> Outcome:
    """200-399 inclusive is FOUND, anything else NOT_FOUND."""
    if 200 <= status_code <= 399:
        return Outcome.FOUND
    return Outcome.NOT_FOUND


class Prober:
    """
    Stateless status checker backed by one requests.Session per run.

    The session's connection pool is shared by every probe in the run and
    released by close() (or leaving the with-block).
    """

    def __init__(self, settings: ProbeSettings | None = None):
        self.settings = settings or ProbeSettings()
        self.session = requests.Session()
        self.session.headers.update({'User-Agent': self.settings.user_agent})
        self.session.headers.update(self.settings.headers)

        # No retries: each probe is attempted exactly once
        adapter = HTTPAdapter(
            pool_connections=self.settings.pool_size,
            pool_maxsize=self.settings.pool_size,
            max_retries=0,
        )
        self.session.mount('http://', adapter)
        self.session.mount('https://', adapter)

    @property
    def timeout(self) -> tuple[float, float | None]:
        return (self.settings.connect_timeout, self.settings.read_timeout)

    def probe(self, url: str) -> int:
        """
        GET url and return the status code of the final response.

        The body is read in full so the connection goes back to the
        session's pool for the next probe.

        Raises:
            TransportError: DNS failure, refused connection, timeout,
                redirect loop, or any other request failure
        """
        try:
            resp = self.session.get(
                url,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            raise TransportError(url, exc) from exc

        try:
            return resp.status_code
        finally:
            resp.close()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> 'Prober':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
