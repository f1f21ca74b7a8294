"""
Visit policy for discovery crawls.

Decides which discovered URLs belong to the site under test:

    from linkcheck.filters import VisitFilter

    accept = VisitFilter(site.remote, site.aliases, site.ignore)
    if accept("https://example.com/docs/page.html"):
        ...
"""

import re
from typing import Iterable


# Suffix policy (strict mode only)
ACCEPT_SUFFIX = re.compile(r".*(\.html|/)$")
MEDIA_SUFFIX = re.compile(r".*\.(jbig2|tiff|jpeg2000|gif|jpg|png|mp3|mp4|zip|gz)$")


def has_page_suffix(url: str) -> bool:
    """True if url looks like a page: ends in .html or '/', and is not media."""
    if MEDIA_SUFFIX.match(url):
        return False
    return ACCEPT_SUFFIX.match(url) is not None


class VisitFilter:
    """
    Accept/reject policy for URLs found while crawling the remote site.

    A URL is accepted when it starts with the remote origin or an alias,
    and does not start with remote + any ignored fragment. Ignored
    fragments are always resolved against the remote origin, even for
    URLs surfaced through an alias.
    """

    def __init__(
        self,
        remote: str,
        aliases: Iterable[str] = (),
        ignore: Iterable[str] = (),
        strict_suffix: bool = False,
    ):
        self.remote = remote.lower()
        self.aliases = tuple(a.lower() for a in aliases)
        self.ignored_prefixes = tuple(self.remote + p.lower() for p in ignore)
        self.strict_suffix = strict_suffix

    def __call__(self, url: str) -> bool:
        if not isinstance(url, str) or not url:
            return False

        href = url.lower()
        if self.strict_suffix and not has_page_suffix(href):
            return False

        in_site = href.startswith(self.remote) or any(href.startswith(a) for a in self.aliases)
        if not in_site:
            return False
        return not any(href.startswith(prefix) for prefix in self.ignored_prefixes)

    def should_visit(self, referring_url: str | None, url: str) -> bool:
        """Crawl-engine callback: referring page is not part of the decision."""
        return self(url)
