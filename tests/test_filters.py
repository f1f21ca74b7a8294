"""
Tests for linkcheck/filters.py (discovery visit policy).
"""

import pytest

from linkcheck.filters import VisitFilter, has_page_suffix


REMOTE = "https://example.com/"
ALIAS = "https://www.example.com/"


@pytest.fixture
def accept():
    return VisitFilter(REMOTE, aliases=[ALIAS], ignore=["docs/old"])


class TestOriginMembership:

    def test_remote_accepted(self, accept):
        assert accept("https://example.com/docs/new/page.html") is True

    def test_alias_accepted(self, accept):
        assert accept("https://www.example.com/about/") is True

    def test_foreign_host_rejected(self, accept):
        assert accept("https://other.com/page.html") is False

    def test_prefix_lookalike_rejected(self):
        accept = VisitFilter("https://example.com/")
        assert accept("https://example.com2/page") is False
        assert accept("https://example.com.evil.net/") is False

    def test_case_insensitive(self, accept):
        assert accept("HTTPS://EXAMPLE.COM/Docs/Page.HTML") is True

    def test_uppercase_configured_origin(self):
        accept = VisitFilter("https://Example.com/", ignore=["Docs/Old"])
        assert accept("https://example.com/x") is True
        assert accept("https://example.com/docs/old/x") is False


class TestIgnoredPaths:

    def test_ignored_fragment_rejected(self, accept):
        assert accept("https://example.com/docs/old/page.html") is False

    def test_sibling_path_accepted(self, accept):
        assert accept("https://example.com/docs/new/page.html") is True

    def test_ignore_resolved_against_remote_only(self, accept):
        # Same path under the alias is not ignored
        assert accept("https://www.example.com/docs/old/page.html") is True

    def test_multiple_fragments(self):
        accept = VisitFilter(REMOTE, ignore=["a/", "b/"])
        assert accept("https://example.com/a/x") is False
        assert accept("https://example.com/b/x") is False
        assert accept("https://example.com/c/x") is True


class TestSuffixPolicy:

    @pytest.mark.parametrize("url,expected", [
        ("https://example.com/page.html", True),
        ("https://example.com/dir/", True),
        ("https://example.com/photo.png", False),
        ("https://example.com/archive.tar.gz", False),
        ("https://example.com/song.mp3", False),
        ("https://example.com/api/data.json", False),
        ("https://example.com/page", False),
    ])
    def test_strict_suffix(self, url, expected):
        accept = VisitFilter(REMOTE, strict_suffix=True)
        assert accept(url) is expected

    def test_lenient_by_default(self):
        accept = VisitFilter(REMOTE)
        assert accept("https://example.com/photo.png") is True
        assert accept("https://example.com/page") is True

    def test_has_page_suffix(self):
        assert has_page_suffix("https://example.com/") is True
        assert has_page_suffix("https://example.com/a.gif") is False


class TestCallbackContract:

    def test_should_visit_ignores_referrer(self, accept):
        url = "https://example.com/docs/new/page.html"
        assert accept.should_visit(None, url) is True
        assert accept.should_visit("https://other.com/", url) is True

    @pytest.mark.parametrize("url", [None, "", 42])
    def test_unusable_input_excluded(self, accept, url):
        assert accept(url) is False


@pytest.mark.parametrize("url,expected", [
    ("https://example.com/", True),
    ("https://www.example.com/x", True),
    ("https://example.com/docs/old", False),
    ("https://example.com/docs/older", False),
    ("https://example.com/docs/ol", True),
    ("http://example.com/", False),
])
def test_decision_table(accept, url, expected):
    """Accepted iff under remote/alias and not under remote + ignored fragment."""
    assert accept(url) is expected
