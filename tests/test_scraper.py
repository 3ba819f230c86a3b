# tests/test_scraper.py
"""
Tests for the page fetchers, debug sink and anchor validation.

Nothing here touches the network. The live browser test is skipped
unless RUN_WEB_TESTS env var is set.
"""

import os
import subprocess
import unittest
from io import BytesIO
from urllib.error import HTTPError, URLError

import pytest

import psnprofile.scraper.core as core_module
from psnprofile.config import ScrapeConfig
from psnprofile.extractor import ProfileExtractor
from psnprofile.scraper import (
    USER_AGENT,
    CurlFetcher,
    FetchError,
    FileDiagnosticSink,
    HttpFetcher,
    NullDiagnosticSink,
    build_fetcher,
    has_user_bar,
    snapshot_warnings,
)
from tests.helpers import PROFILE_URL, read_fixture


class RecordingSink(NullDiagnosticSink):
    wants_screenshot = True

    def __init__(self):
        self.html = []
        self.screenshots = []

    def save_html(self, html):
        self.html.append(html)

    def save_screenshot(self, png):
        self.screenshots.append(png)


class TestCurlFetcher:

    def test_command_follows_redirects_with_user_agent(self):
        cmd = CurlFetcher(timeout_seconds=15).build_command(PROFILE_URL)
        assert cmd[0] == "curl"
        assert "-L" in cmd
        assert cmd[cmd.index("-A") + 1] == USER_AGENT
        assert cmd[cmd.index("--max-time") + 1] == "15"
        assert cmd[-1] == PROFILE_URL

    def test_returns_stdout_and_feeds_sink(self, monkeypatch):
        sink = RecordingSink()

        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 0, stdout=b"<html>ok</html>", stderr=b"")

        monkeypatch.setattr(core_module.subprocess, "run", fake_run)
        html = CurlFetcher(sink).fetch(PROFILE_URL)

        assert html == "<html>ok</html>"
        assert sink.html == ["<html>ok</html>"]

    def test_non_zero_exit_raises(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 6, stdout=b"", stderr=b"Could not resolve host")

        monkeypatch.setattr(core_module.subprocess, "run", fake_run)
        with pytest.raises(FetchError, match="code 6"):
            CurlFetcher().fetch(PROFILE_URL)

    def test_missing_binary_raises(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr(core_module.subprocess, "run", fake_run)
        with pytest.raises(FetchError, match="curl not found"):
            CurlFetcher().fetch(PROFILE_URL)

    def test_timeout_raises(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout"))

        monkeypatch.setattr(core_module.subprocess, "run", fake_run)
        with pytest.raises(FetchError, match="timed out"):
            CurlFetcher(timeout_seconds=1).fetch(PROFILE_URL)


class TestHttpFetcher:

    def test_sends_browser_headers(self, monkeypatch):
        seen = {}

        def fake_urlopen(req, timeout=30):
            seen["ua"] = req.get_header("User-agent")
            seen["timeout"] = timeout
            return BytesIO(b"<html><div id='user-bar'></div></html>")

        monkeypatch.setattr(core_module, "urlopen", fake_urlopen)
        html = HttpFetcher(timeout_seconds=12).fetch(PROFILE_URL)

        assert "user-bar" in html
        assert seen == {"ua": USER_AGENT, "timeout": 12}

    def test_http_error_with_body_is_returned(self, monkeypatch):
        def fake_urlopen(req, timeout=30):
            raise HTTPError(req.full_url, 403, "Forbidden", hdrs=None, fp=BytesIO(b"<title>Just a moment...</title>"))

        monkeypatch.setattr(core_module, "urlopen", fake_urlopen)
        html = HttpFetcher().fetch(PROFILE_URL)
        assert "Just a moment" in html

    def test_http_error_without_body_raises(self, monkeypatch):
        def fake_urlopen(req, timeout=30):
            raise HTTPError(req.full_url, 502, "Bad Gateway", hdrs=None, fp=BytesIO(b""))

        monkeypatch.setattr(core_module, "urlopen", fake_urlopen)
        with pytest.raises(FetchError, match="HTTP 502"):
            HttpFetcher().fetch(PROFILE_URL)

    def test_network_error_raises(self, monkeypatch):
        def fake_urlopen(req, timeout=30):
            raise URLError("Name or service not known")

        monkeypatch.setattr(core_module, "urlopen", fake_urlopen)
        with pytest.raises(FetchError):
            HttpFetcher().fetch(PROFILE_URL)


class TestBuildFetcher:

    def test_curl(self):
        fetcher = build_fetcher(ScrapeConfig(fetcher="curl", http_timeout_seconds=7))
        assert isinstance(fetcher, CurlFetcher)
        assert fetcher.timeout_seconds == 7

    def test_http_uses_given_sink(self):
        sink = RecordingSink()
        fetcher = build_fetcher(ScrapeConfig(fetcher="http"), sink)
        assert isinstance(fetcher, HttpFetcher)
        assert fetcher.diagnostics is sink

    def test_browser(self):
        fetcher = build_fetcher(ScrapeConfig(fetcher="browser", settle_ms=0, block_resources=False))
        assert fetcher.name == "browser"
        assert fetcher.settle_ms == 0
        assert fetcher.block_resources is False

    def test_unknown_kind(self):
        config = ScrapeConfig()
        config.fetcher = "telnet"
        with pytest.raises(ValueError):
            build_fetcher(config)


class TestDiagnostics(unittest.TestCase):
    """Debug artifacts are best effort."""

    def test_file_sink_overwrites(self):
        import tempfile

        with tempfile.TemporaryDirectory() as tmp:
            html_path = os.path.join(tmp, "debug.html")
            png_path = os.path.join(tmp, "debug.png")
            sink = FileDiagnosticSink(html_path, png_path)

            sink.save_html("<html>first</html>")
            sink.save_html("<html>second</html>")
            sink.save_screenshot(b"\x89PNG")

            with open(html_path, encoding="utf-8") as f:
                self.assertEqual(f.read(), "<html>second</html>")
            with open(png_path, "rb") as f:
                self.assertEqual(f.read(), b"\x89PNG")

    def test_file_sink_swallows_write_errors(self):
        sink = FileDiagnosticSink("/nonexistent-dir/debug.html", "/nonexistent-dir/debug.png")
        sink.save_html("<html></html>")
        sink.save_screenshot(b"png")

    def test_file_sink_swallows_unencodable_html(self):
        import tempfile

        with tempfile.TemporaryDirectory() as tmp:
            sink = FileDiagnosticSink(os.path.join(tmp, "debug.html"), None)
            sink.save_html("<div id='user-bar'>\ud800</div>")

    def test_screenshot_disabled_without_path(self):
        self.assertFalse(FileDiagnosticSink("debug.html", None).wants_screenshot)
        self.assertFalse(NullDiagnosticSink().wants_screenshot)


class TestValidation(unittest.TestCase):
    """Anchor detection and snapshot sanity checks."""

    def test_has_user_bar(self):
        soup = ProfileExtractor.parse_html(read_fixture("profile_page.html"))
        self.assertTrue(has_user_bar(soup))

    def test_blocked_page_has_no_user_bar(self):
        soup = ProfileExtractor.parse_html(read_fixture("blocked_page.html"))
        self.assertFalse(has_user_bar(soup))

    def test_full_snapshot_has_no_warnings(self):
        snapshot = ProfileExtractor(PROFILE_URL).extract(read_fixture("profile_page.html"))
        self.assertEqual(snapshot_warnings(snapshot), [])

    def test_sparse_snapshot_warns(self):
        snapshot = ProfileExtractor(PROFILE_URL).extract('<div id="user-bar"></div>')
        warnings = snapshot_warnings(snapshot)
        self.assertTrue(any('username' in w for w in warnings))
        self.assertTrue(any('total trophy count' in w for w in warnings))
        self.assertIn("no recent games found", warnings)


@unittest.skipUnless(os.getenv('RUN_WEB_TESTS'), "Skipping web integration test")
class TestWebIntegration(unittest.TestCase):
    """
    Live browser fetch (skipped by default).

    Run with: RUN_WEB_TESTS=1 pytest tests/test_scraper.py
    """

    def test_fetch_live_profile(self):
        fetcher = build_fetcher(ScrapeConfig(fetcher="browser"))
        html = fetcher.fetch(PROFILE_URL)
        self.assertIn("<html", html.lower())
