"""
Link discovery: crawl the remote site and persist accepted links.
"""

from __future__ import annotations

from pathlib import Path

from linkcheck.config import CrawlSettings, SiteConfig
from linkcheck.crawler import DiscoveredLinks, Page, SiteCrawler
from linkcheck.filters import VisitFilter
from linkcheck.linkfile import write_link_file

from .presenter import emit


def discover_links(
    site: SiteConfig,
    settings: CrawlSettings | None = None,
    strict_suffix: bool = False,
    crawler_factory=SiteCrawler,
) -> list[str]:
    """
    Crawl from the remote origin and return accepted links, sorted.

    Every outgoing link of every fetched page is run through the visit
    filter; accepted ones are both recorded and crawled further.
    """
    settings = settings or CrawlSettings()
    accept = VisitFilter(site.remote, site.aliases, site.ignore, strict_suffix=strict_suffix)
    links = DiscoveredLinks()

    def visit(page: Page) -> None:
        if settings.verbose:
            emit(f"URL: {page.url}")
        for url in page.outgoing_urls:
            if accept.should_visit(page.url, url) and links.add(url) and settings.verbose:
                emit(f"  Found a good URL ({url}) in {page.url}")
        if settings.verbose:
            emit(f"Total links found: {len(links)}")

    crawler = crawler_factory(settings, accept.should_visit, visit)
    crawler.add_seed(site.remote)
    crawler.start()

    return links.sorted()


def run_discovery(
    site: SiteConfig,
    output_path: Path | str,
    settings: CrawlSettings | None = None,
    strict_suffix: bool = False,
) -> Path:
    """Crawl the remote site and write the link file (truncating it)."""
    settings = settings or CrawlSettings()
    print(f"[crawl] {site.remote} (crawlers={settings.workers}, storage={settings.storage_dir})")

    links = discover_links(site, settings, strict_suffix=strict_suffix)
    path = write_link_file(output_path, links)

    print(f"[crawl] {len(links)} links written to {path}")
    return path
