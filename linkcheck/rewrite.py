"""
Remote-to-local link rewriting.
"""

from typing import Sequence
from urllib.parse import urlsplit

from .config import canonicalize_url


class MalformedLinkError(ValueError):
    """Raised when a rewritten link is not a valid absolute URL."""

    def __init__(self, link: str, transformed: str, reason: str):
        self.link = link
        self.transformed = transformed
        self.reason = reason
        super().__init__(f"Malformed link {link!r} -> {transformed!r}: {reason}")


def _has_prefix(url: str, origin: str) -> bool:
    return url.lower().startswith(origin.lower())


def _validate_absolute_url(link: str, transformed: str) -> None:
    if any(ch.isspace() for ch in transformed):
        raise MalformedLinkError(link, transformed, "contains whitespace")
    try:
        parts = urlsplit(transformed)
        # Accessing .port validates the port component
        parts.port
    except ValueError as exc:
        raise MalformedLinkError(link, transformed, str(exc)) from exc
    if parts.scheme not in ('http', 'https'):
        raise MalformedLinkError(link, transformed, f"unsupported scheme {parts.scheme!r}")
    if not parts.hostname:
        raise MalformedLinkError(link, transformed, "missing host")


def rewrite_link(link: str, remote: str, local: str, aliases: Sequence[str] = ()) -> str:
    """
    Map a link captured on the remote site to the same path on the local site.

    The link's scheme and host are canonicalized, then the remote origin is
    substituted. Links captured through an alias (e.g. a www. host) survive
    that step untouched, so the first alias the result starts with is
    substituted as well. Prefix checks ignore case, matching the visit
    filter, so every link discovery accepts is mapped to the local site.

    Args:
        link: Absolute URL from the link-list file
        remote: Normalized remote origin
        local: Normalized local origin
        aliases: Normalized alias origins, in configuration order

    Returns:
        Absolute local URL

    Raises:
        MalformedLinkError: result is not a valid absolute http(s) URL
    """
    canonical = canonicalize_url(link)
    transformed = canonical.replace(remote, local)
    if transformed == canonical and _has_prefix(canonical, remote):
        transformed = local + canonical[len(remote):]

    alias = next((a for a in aliases if _has_prefix(transformed, a)), None)
    if alias is not None:
        transformed = local + transformed[len(alias):].replace(alias, local)

    _validate_absolute_url(link, transformed)
    return transformed
