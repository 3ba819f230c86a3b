# psnprofile/scraper/session.py
"""
Headless-browser page fetching with Playwright.

Handles browser lifecycle, optional sub-resource blocking, and bounded
navigation waits so client-rendered profile pages come back fully built.
"""

import logging
import time
from typing import Optional

from .core import USER_AGENT, FetchError, PageFetcher
from .diagnostics import DiagnosticSink

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

logger = logging.getLogger(__name__)

# Only text and link attributes are read downstream.
BLOCKED_RESOURCE_TYPES = {"image", "font", "media"}


def block_heavy_resources(route, request) -> None:
    """Route handler aborting image/font/media requests."""
    if request.resource_type in BLOCKED_RESOURCE_TYPES:
        route.abort()
    else:
        route.continue_()


class BrowserFetcher(PageFetcher):
    """Render the page in headless Chromium and return the final DOM."""

    name = "browser"
    VIEWPORT = {"width": 1280, "height": 720}

    def __init__(
        self,
        diagnostics: Optional[DiagnosticSink] = None,
        headless: bool = True,
        block_resources: bool = True,
        nav_timeout_ms: int = 60000,
        settle_ms: int = 3000,
    ):
        super().__init__(diagnostics)
        self.headless = headless
        self.block_resources = block_resources
        self.nav_timeout_ms = nav_timeout_ms
        self.settle_ms = settle_ms
        self._playwright = None
        self.browser = None
        self.context = None
        self.page = None

    def fetch(self, url: str) -> str:
        self._launch_browser()
        try:
            self._navigate(self.page, url)
            html = self.page.content()
            self.diagnostics.save_html(html)
            self._capture_screenshot(self.page)
            return html
        except PlaywrightError as exc:
            raise FetchError(f"Could not read rendered page: {exc}") from exc
        finally:
            self._close_browser()

    # --- Internal helpers ---

    def _launch_browser(self) -> None:
        if self.browser:
            return
        try:
            self._playwright = sync_playwright().start()
            self.browser = self._playwright.chromium.launch(headless=self.headless)
            self.context = self.browser.new_context(
                user_agent=USER_AGENT,
                viewport=self.VIEWPORT,
                locale="en-US",
            )
            if self.block_resources:
                self.context.route("**/*", block_heavy_resources)
            self.page = self.context.new_page()
        except PlaywrightError as exc:
            self._close_browser()
            raise FetchError(f"Failed to launch browser: {exc}") from exc

    def _navigate(self, page, url: str) -> None:
        """
        Load the page within one nav_timeout_ms budget, then settle.

        Timeouts and navigation errors keep whatever has rendered so far;
        the anchor check downstream decides whether it is a real profile.
        """
        deadline = time.monotonic() + self.nav_timeout_ms / 1000.0
        try:
            page.goto(url, wait_until="domcontentloaded", timeout=self.nav_timeout_ms)
        except PlaywrightTimeoutError:
            logger.warning("Navigation to %s timed out after %sms, using partial page", url, self.nav_timeout_ms)
            deadline = time.monotonic()
        except PlaywrightError as exc:
            logger.warning("Navigation to %s failed (%s), using partial page", url, exc)
            deadline = time.monotonic()

        remaining_ms = int((deadline - time.monotonic()) * 1000)
        if remaining_ms > 0:
            try:
                page.wait_for_load_state("networkidle", timeout=remaining_ms)
            except PlaywrightTimeoutError:
                logger.info("Network never went idle within %sms, continuing", remaining_ms)
            except PlaywrightError as exc:
                logger.info("Stopped waiting for network idle: %s", exc)

        page.wait_for_timeout(self.settle_ms)

    def _capture_screenshot(self, page) -> None:
        if not self.diagnostics.wants_screenshot:
            return
        try:
            png = page.screenshot(full_page=True)
        except Exception as exc:
            logger.debug("Screenshot failed: %s", exc)
            return
        self.diagnostics.save_screenshot(png)

    def _close_browser(self) -> None:
        """Tear down page context, browser and driver in that order."""
        for handle, closer in ((self.context, "close"), (self.browser, "close"), (self._playwright, "stop")):
            if handle is None:
                continue
            try:
                getattr(handle, closer)()
            except Exception as exc:
                logger.debug("Ignoring %s.%s() failure: %s", type(handle).__name__, closer, exc)

        self._playwright = self.browser = self.context = self.page = None
