# psnprofile/scraper/diagnostics.py
"""
Debug artifacts for troubleshooting blocked or half-rendered pages.

Fetchers hand raw HTML (and, for the browser, a screenshot) to a sink.
Writing these files is best effort and never affects the scrape result.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class DiagnosticSink:
    """Receives raw page artifacts. The default implementation discards them."""

    wants_screenshot = False

    def save_html(self, html: str) -> None:
        pass

    def save_screenshot(self, png: bytes) -> None:
        pass


class NullDiagnosticSink(DiagnosticSink):
    """Explicit no-op sink."""


class FileDiagnosticSink(DiagnosticSink):
    """
    Overwrite fixed debug files on every run.

    Args:
        html_path: Where to write the raw HTML (e.g. debug.html)
        screenshot_path: Where to write the full-page PNG, or None to skip
    """

    def __init__(self, html_path: str = "debug.html", screenshot_path: str = "debug.png"):
        self.html_path = Path(html_path) if html_path else None
        self.screenshot_path = Path(screenshot_path) if screenshot_path else None

    @property
    def wants_screenshot(self) -> bool:
        return self.screenshot_path is not None

    def save_html(self, html: str) -> None:
        if self.html_path is None:
            return
        try:
            self.html_path.write_text(html, encoding="utf-8")
            logger.debug("Saved raw HTML -> %s", self.html_path)
        except (OSError, ValueError) as exc:
            logger.debug("Could not write %s: %s", self.html_path, exc)

    def save_screenshot(self, png: bytes) -> None:
        if self.screenshot_path is None:
            return
        try:
            self.screenshot_path.write_bytes(png)
            logger.debug("Saved screenshot -> %s", self.screenshot_path)
        except (OSError, ValueError) as exc:
            logger.debug("Could not write %s: %s", self.screenshot_path, exc)
