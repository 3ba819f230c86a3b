# psnprofile/runner.py
"""
Single-pass profile scrape: Fetch -> Check -> Extract -> Write.

A failed run (fetch error or bot-blocked page) never replaces a result
file that already exists; a placeholder is written only when there is
nothing on disk yet.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from psnprofile.extractor import ProfileExtractor
from psnprofile.models import ProfileSnapshot
from psnprofile.scraper.core import PageFetcher
from psnprofile.scraper.validation import snapshot_warnings
from psnprofile.store import ResultStore

logger = logging.getLogger(__name__)

BLOCKED_MESSAGE = "Blocked by bot protection (no #user-bar found)."


class RunState(Enum):
    FETCHING = "fetching"
    CHECKING = "checking"
    EXTRACTING = "extracting"
    WRITING = "writing"
    DONE = "done"
    BLOCKED_FALLBACK = "blocked_fallback"
    ERROR_FALLBACK = "error_fallback"


@dataclass
class RunOutcome:
    state: RunState
    snapshot: Optional[ProfileSnapshot] = None
    written: bool = False
    preserved: bool = False
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.DONE


class ProfileScraper:
    """Compose a fetcher, extractor and store into one scrape run."""

    def __init__(
        self,
        profile_url: str,
        fetcher: PageFetcher,
        store: ResultStore,
        extractor: Optional[ProfileExtractor] = None,
    ):
        self.profile_url = profile_url
        self.fetcher = fetcher
        self.store = store
        self.extractor = extractor or ProfileExtractor(profile_url)
        self.state = RunState.FETCHING

    def _enter(self, state: RunState) -> None:
        logger.debug("State %s -> %s", self.state.value, state.value)
        self.state = state

    def run(self) -> RunOutcome:
        """
        Execute one scrape.

        Returns:
            RunOutcome describing which exit was taken

        Raises:
            OSError: Only if the result file itself cannot be written
        """
        self.state = RunState.FETCHING
        logger.info("Fetching %s via %s", self.profile_url, self.fetcher.name)
        try:
            html = self.fetcher.fetch(self.profile_url)
        except Exception as exc:
            logger.error("Fetch failed: %s", exc)
            return self._fallback(RunState.ERROR_FALLBACK, str(exc) or exc.__class__.__name__)

        self._enter(RunState.CHECKING)
        soup = self.extractor.parse_html(html)
        if not self.extractor.is_profile_page(soup):
            logger.error("Could not find #user-bar. Likely bot protection / interstitial page.")
            return self._fallback(RunState.BLOCKED_FALLBACK, BLOCKED_MESSAGE)

        self._enter(RunState.EXTRACTING)
        try:
            snapshot = self.extractor.extract(soup)
        except Exception as exc:
            logger.error("Extraction failed: %s", exc)
            return self._fallback(RunState.ERROR_FALLBACK, str(exc) or exc.__class__.__name__)

        for warning in snapshot_warnings(snapshot):
            logger.warning("Snapshot check: %s", warning)

        self._enter(RunState.WRITING)
        self.store.save(snapshot)
        self._enter(RunState.DONE)
        logger.info("Wrote %s", self.store.path)
        return RunOutcome(state=RunState.DONE, snapshot=snapshot, written=True)

    def _fallback(self, state: RunState, message: str) -> RunOutcome:
        self._enter(state)
        previous = self.store.load_previous()
        if previous is not None:
            logger.info("Keeping previous %s (did not overwrite).", self.store.path)
            return RunOutcome(state=state, snapshot=previous, preserved=True, message=message)

        placeholder = ProfileSnapshot.placeholder(self.profile_url, message)
        self.store.save(placeholder)
        logger.info("No previous result; wrote placeholder to %s", self.store.path)
        return RunOutcome(state=state, snapshot=placeholder, written=True, message=message)
