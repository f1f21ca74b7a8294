"""
Link transformation, filtering and probing for remote/local site checks.

Primary interface:
    from linkcheck import resolve_site_config, VisitFilter, rewrite_link, Prober

    site = resolve_site_config("https://example.com", "http://localhost:8080",
                               aliases=["https://www.example.com"], require_local=True)

    accept = VisitFilter(site.remote, site.aliases, site.ignore)
    target = rewrite_link("https://www.example.com/docs/", site.remote, site.local, site.aliases)
    # -> "http://localhost:8080/docs/"

    with Prober() as prober:
        outcome = classify_status(prober.probe(target))
"""

from .config import (
    ConfigurationError,
    CrawlSettings,
    ProbeSettings,
    SiteConfig,
    canonicalize_url,
    normalize_origin,
    resolve_site_config,
)
from .crawler import DiscoveredLinks, Page, SiteCrawler
from .filters import VisitFilter
from .linkfile import InvalidLinkFileError, MissingLinkFileError, read_link_file, write_link_file
from .prober import Outcome, Prober, TransportError, classify_status
from .rewrite import MalformedLinkError, rewrite_link


__all__ = [
    'ConfigurationError',
    'CrawlSettings',
    'ProbeSettings',
    'SiteConfig',
    'canonicalize_url',
    'normalize_origin',
    'resolve_site_config',
    'DiscoveredLinks',
    'Page',
    'SiteCrawler',
    'VisitFilter',
    'InvalidLinkFileError',
    'MissingLinkFileError',
    'read_link_file',
    'write_link_file',
    'Outcome',
    'Prober',
    'TransportError',
    'classify_status',
    'MalformedLinkError',
    'rewrite_link',
]
