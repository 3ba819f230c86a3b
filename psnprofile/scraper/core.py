from __future__ import annotations

import logging
import socket
import subprocess
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from .diagnostics import DiagnosticSink, NullDiagnosticSink

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/121.0.0.0 Safari/537.36"
)


class ScrapeError(Exception):
    """Base class for profile scraping failures."""


class FetchError(ScrapeError):
    """Raised when the profile page could not be retrieved at all."""


class ProfileBlockedError(ScrapeError):
    """Raised when fetched HTML is not a rendered profile page (bot wall, interstitial)."""


class PageFetcher:
    """Retrieve raw HTML for a URL. Subclasses pick the transport."""

    name = "base"

    def __init__(self, diagnostics: Optional[DiagnosticSink] = None):
        self.diagnostics = diagnostics or NullDiagnosticSink()

    def fetch(self, url: str) -> str:
        raise NotImplementedError


class CurlFetcher(PageFetcher):
    """Shell out to curl, following redirects with a browser user agent."""

    name = "curl"

    def __init__(
        self,
        diagnostics: Optional[DiagnosticSink] = None,
        timeout_seconds: int = 30,
        curl_binary: str = "curl",
    ):
        super().__init__(diagnostics)
        self.timeout_seconds = timeout_seconds
        self.curl_binary = curl_binary

    def build_command(self, url: str) -> list:
        return [
            self.curl_binary,
            "-L",
            "-s",
            "-A", USER_AGENT,
            "--max-time", str(self.timeout_seconds),
            url,
        ]

    def fetch(self, url: str) -> str:
        cmd = self.build_command(url)
        logger.debug("Running %s", " ".join(cmd[:-1]))
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                timeout=self.timeout_seconds + 5,
                check=False,
            )
        except FileNotFoundError as exc:
            raise FetchError(f"curl not found: {self.curl_binary}") from exc
        except subprocess.TimeoutExpired as exc:
            raise FetchError(f"curl timed out after {self.timeout_seconds}s") from exc

        if proc.returncode != 0:
            stderr = (proc.stderr or b"").decode("utf-8", errors="replace").strip()
            raise FetchError(f"curl exited with code {proc.returncode}: {stderr or 'no output'}")

        html = (proc.stdout or b"").decode("utf-8", errors="replace")
        self.diagnostics.save_html(html)
        return html


class HttpFetcher(PageFetcher):
    """Plain HTTP GET via urllib (redirects are followed by the opener)."""

    name = "http"
    HEADERS = {
        "User-Agent": USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }

    def __init__(self, diagnostics: Optional[DiagnosticSink] = None, timeout_seconds: int = 30):
        super().__init__(diagnostics)
        self.timeout_seconds = timeout_seconds

    @staticmethod
    def _decode(raw: bytes, charset: Optional[str]) -> str:
        return raw.decode(charset or "utf-8", errors="replace")

    def fetch(self, url: str) -> str:
        req = Request(url, headers=self.HEADERS, method="GET")
        try:
            with urlopen(req, timeout=self.timeout_seconds) as resp:
                charset = resp.headers.get_content_charset() if getattr(resp, "headers", None) else None
                html = self._decode(resp.read(), charset)
        except HTTPError as exc:
            # Bot walls answer 403/503 with an HTML body; let the anchor check judge it.
            body = exc.read() if exc.fp is not None else b""
            if not body:
                raise FetchError(f"HTTP {exc.code} from {url}") from exc
            logger.warning("HTTP %s from %s, keeping response body", exc.code, url)
            html = self._decode(body, None)
        except (URLError, socket.timeout) as exc:
            raise FetchError(f"Request to {url} failed: {exc}") from exc

        self.diagnostics.save_html(html)
        return html


def build_fetcher(config, diagnostics: Optional[DiagnosticSink] = None) -> PageFetcher:
    """Create the fetcher named by ``config.fetcher``."""
    kind = (config.fetcher or "").lower()
    if kind == "curl":
        return CurlFetcher(diagnostics, timeout_seconds=config.http_timeout_seconds)
    if kind == "http":
        return HttpFetcher(diagnostics, timeout_seconds=config.http_timeout_seconds)
    if kind == "browser":
        try:
            from .session import BrowserFetcher
        except ImportError as exc:
            raise FetchError(
                "Playwright is not installed. Install with: pip install playwright; playwright install chromium"
            ) from exc

        return BrowserFetcher(
            diagnostics,
            headless=config.headless,
            block_resources=config.block_resources,
            nav_timeout_ms=config.nav_timeout_ms,
            settle_ms=config.settle_ms,
        )
    raise ValueError(f"Unknown fetcher '{config.fetcher}' (expected curl, http or browser)")
