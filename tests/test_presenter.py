"""
Tests for orchestrate/presenter.py.
"""

import io
import json
from unittest.mock import MagicMock

from linkcheck.config import resolve_site_config
from linkcheck.prober import Outcome
from orchestrate.presenter import (
    ConsoleReporter,
    build_report_data,
    emit,
    format_invalid_link,
    format_summary,
    write_report_json,
)
from orchestrate.verification import LinkResult, VerificationReport


def _report(**counts) -> VerificationReport:
    report = VerificationReport()
    for name, value in counts.items():
        setattr(report, name, value)
    return report


class TestFormatSummary:

    def test_plain_summary(self):
        assert format_summary(_report(found=3, not_found=2)) == ["Found 3 good links and 2 invalid links."]

    def test_extra_counters(self):
        lines = format_summary(_report(found=1, remote_skipped=2, malformed=1, transport_errors=4))
        assert lines[0] == "Found 1 good links and 0 invalid links."
        assert any("2 links skipped" in line for line in lines)
        assert any("1 malformed links" in line and "counted" not in line for line in lines)
        assert any("4 requests could not be completed" in line for line in lines)

    def test_counted_malformed(self):
        lines = format_summary(_report(not_found=1, malformed=1, malformed_policy="count"))
        assert "1 malformed links (counted as invalid)" in lines[1]


class TestConsoleReporter:

    def test_invalid_link_goes_to_stderr(self, capsys):
        result = LinkResult(0, "https://example.com/b", "http://localhost/b", Outcome.NOT_FOUND, status_code=404)
        ConsoleReporter()(result)
        out, err = capsys.readouterr()
        assert out == ""
        assert err.strip() == format_invalid_link(result)
        assert err.strip() == ("The URL https://example.com/b from the original site was not found "
                               "in the local site: http://localhost/b")

    def test_found_is_silent_unless_verbose(self, capsys):
        result = LinkResult(0, "https://example.com/a", "http://localhost/a", Outcome.FOUND, status_code=200)
        ConsoleReporter()(result)
        assert capsys.readouterr().out == ""

        ConsoleReporter(verbose=True)(result)
        assert "200 http://localhost/a" in capsys.readouterr().out

    def test_remote_broken_silent_unless_verbose(self, capsys):
        result = LinkResult(0, "https://example.com/a", "http://localhost/a", Outcome.REMOTE_BROKEN,
                            remote_status=404)
        ConsoleReporter()(result)
        assert capsys.readouterr().err == ""

        ConsoleReporter(verbose=True)(result)
        assert "status 404" in capsys.readouterr().err

    def test_transport_error_detail(self, capsys):
        result = LinkResult(0, "https://example.com/a", "http://localhost/a", Outcome.NOT_FOUND,
                            error="ConnectionError: refused", transport_error=True)
        ConsoleReporter()(result)
        assert "(ConnectionError: refused)" in capsys.readouterr().err

    def test_progress_updated(self):
        progress = MagicMock()
        reporter = ConsoleReporter(progress)
        reporter(LinkResult(0, "a", "b", Outcome.FOUND, status_code=200))
        progress.update.assert_called_once_with(1)


class TestEmit:

    def test_writes_whole_line(self):
        stream = io.StringIO()
        emit("hello", stream)
        assert stream.getvalue() == "hello\n"


class TestReportJson:

    def test_build_and_write(self, tmp_path):
        site = resolve_site_config("https://example.com", "http://localhost", aliases=["https://www.example.com"])
        report = VerificationReport()
        report.record(LinkResult(0, "https://example.com/a", "http://localhost/a", Outcome.FOUND, status_code=200))
        report.record(LinkResult(1, "https://example.com/a b", None, Outcome.MALFORMED, error="whitespace"))

        data = build_report_data(report, site, "links.txt")
        assert data["link_file"] == "links.txt"
        assert data["site"]["aliases"] == ["https://www.example.com/"]
        assert data["stats"] == {
            "total": 2,
            "found": 1,
            "not_found": 0,
            "remote_skipped": 0,
            "malformed": 1,
            "transport_errors": 0,
        }

        path = write_report_json(data, tmp_path / "nested" / "report.json")
        loaded = json.loads(path.read_text(encoding="utf-8"))
        assert loaded["results"][1]["outcome"] == "malformed"
        assert loaded["results"][1]["target"] is None
