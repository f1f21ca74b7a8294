"""
Configuration and defaults for link discovery and verification.
"""

from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit


USER_AGENT = "LinkVerifierBot/1.0 (+link-verifier)"

# Crawl defaults
DEFAULT_CRAWLERS = 7
DEFAULT_STORAGE_DIR = Path("target/data/crawl/root")
DEFAULT_LINK_FILE = "links.txt"

# Probe defaults
CONNECT_TIMEOUT = 2.0  # seconds
READ_TIMEOUT = 30.0

# Request headers for crawl fetches
DEFAULT_HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'Connection': 'keep-alive',
}

DEFAULT_PORTS = {'http': 80, 'https': 443}


class ConfigurationError(ValueError):
    """Raised when a required origin is missing or empty."""
    pass


def normalize_origin(origin: str) -> str:
    """Return origin with a trailing slash, unchanged if it already has one."""
    return origin if origin.endswith('/') else origin + '/'


def canonicalize_url(url: str) -> str:
    """
    Lower-case the scheme and host and drop the scheme's default port.

    Path, query and fragment keep their case. Anything that is not an
    absolute URL with a host is returned unchanged.
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return url
    if not parts.scheme or not parts.hostname:
        return url

    scheme = parts.scheme.lower()
    host = parts.hostname
    if ':' in host:
        host = f"[{host}]"
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"
    userinfo, at, _ = parts.netloc.rpartition('@')
    netloc = f"{userinfo}@{host}" if at else host

    return urlunsplit((scheme, netloc, parts.path, parts.query, parts.fragment))


@dataclass(frozen=True)
class SiteConfig:
    """Origins shared by the discovery and verification pipelines."""

    remote: str
    local: str | None = None
    aliases: tuple[str, ...] = ()
    ignore: tuple[str, ...] = ()


@dataclass
class CrawlSettings:
    """Pass-through settings for the crawl engine."""

    workers: int = DEFAULT_CRAWLERS
    storage_dir: Path = DEFAULT_STORAGE_DIR
    politeness_delay: int = 5  # milliseconds between requests to one host
    cleanup_delay: float = 5.0  # seconds to wait on an idle frontier before stopping
    monitor_interval: float = 5.0  # seconds between status snapshots
    max_depth: int = -1  # -1 = unlimited
    max_pages: int = -1  # -1 = unlimited
    respect_robots: bool = True
    timeout: float = 15.0
    user_agent: str = USER_AGENT
    verbose: bool = False


@dataclass
class ProbeSettings:
    """Settings for the HTTP status prober."""

    connect_timeout: float = CONNECT_TIMEOUT
    read_timeout: float | None = READ_TIMEOUT
    user_agent: str = USER_AGENT
    pool_size: int = 10
    headers: dict = field(default_factory=dict)


def resolve_site_config(
    remote: str | None,
    local: str | None = None,
    aliases: list[str] | None = None,
    ignore: list[str] | None = None,
    require_local: bool = False,
) -> SiteConfig:
    """
    Validate and normalize origins into a SiteConfig.

    Args:
        remote: Remote (production) origin
        local: Local (development) origin
        aliases: Alternate origins serving the remote content
        ignore: Path fragments, relative to remote, to skip during discovery
        require_local: Whether the local origin is mandatory (verification)

    Returns:
        SiteConfig with every origin canonicalized and ending in '/'

    Raises:
        ConfigurationError: remote missing, or local missing when required
    """
    remote = (remote or '').strip()
    if not remote:
        raise ConfigurationError("A remote origin is required (--remote)")

    local = (local or '').strip() or None
    if require_local and not local:
        raise ConfigurationError("A local origin is required to verify links (--local)")

    return SiteConfig(
        remote=normalize_origin(canonicalize_url(remote)),
        local=normalize_origin(canonicalize_url(local)) if local else None,
        aliases=tuple(
            normalize_origin(canonicalize_url(a.strip())) for a in (aliases or []) if a and a.strip()
        ),
        ignore=tuple(p.strip().lstrip('/') for p in (ignore or []) if p and p.strip()),
    )
