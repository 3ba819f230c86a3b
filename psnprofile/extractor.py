# psnprofile/extractor.py

from __future__ import annotations

import re
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, Comment

from psnprofile.models import (
    TROPHY_GRADES,
    ProfileSnapshot,
    RecentGame,
    RecentTrophy,
    TrophyCounts,
    utc_timestamp,
)
from psnprofile.scraper.core import ProfileBlockedError
from psnprofile.scraper.validation import ANCHOR_SELECTOR, has_user_bar

BASE_URL = "https://psnprofiles.com"
MAX_RECENT_ITEMS = 5
EARNED_SEPARATOR = " in "

_WHITESPACE_RE = re.compile(r"\s+")
_COUNT_RE = re.compile(r"\d[\d,]*")
_PROGRESS_RE = re.compile(r"(\d+)\s+of\s+(\d+)\s+Trophies", re.I)
_COMPLETED_RE = re.compile(r"All\s+(\d+)\s+Trophies", re.I)


def clean_text(text: Optional[str]) -> str:
    """Collapse whitespace runs to a single space and trim."""
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def parse_count(text: Optional[str]) -> Optional[int]:
    """First digit run in text, thousands separators allowed. None when no digits."""
    match = _COUNT_RE.search(_WHITESPACE_RE.sub("", text or ""))
    if not match:
        return None
    return int(match.group(0).replace(",", ""))


def parse_game_progress(text: Optional[str]) -> Tuple[Optional[int], Optional[int]]:
    """Parse '12 of 46 Trophies' -> (12, 46) and 'All 55 Trophies' -> (55, 55)."""
    text = text or ""
    match = _PROGRESS_RE.search(text)
    if match:
        return (int(match.group(1)), int(match.group(2)))
    match = _COMPLETED_RE.search(text)
    if match:
        total = int(match.group(1))
        return (total, total)
    return (None, None)


def split_earned_line(line: str) -> Tuple[str, str]:
    """
    Split '3 hours ago in Final Fantasy VII Remake' into (earned text, game).

    Only the first separator counts, so game titles that contain ' in '
    themselves survive intact.
    """
    line = clean_text(line)
    if EARNED_SEPARATOR not in line:
        return (line, "")
    earned, game = line.split(EARNED_SEPARATOR, 1)
    return (earned.strip(), game.strip())


def own_text(element) -> str:
    """Text directly inside element, ignoring every nested tag."""
    if element is None:
        return ""
    parts = [
        str(node) for node in element.find_all(string=True, recursive=False)
        if not isinstance(node, Comment)
    ]
    return clean_text("".join(parts))


def absolute_url(href: Optional[str], base_url: str = BASE_URL) -> str:
    href = (href or "").strip()
    if not href:
        return ""
    if href.startswith(("http://", "https://")):
        return href
    if href.startswith("//"):
        return "https:" + href
    return base_url.rstrip("/") + "/" + href.lstrip("/")


class ProfileExtractor:
    """
    Pull profile fields out of a rendered PSNProfiles page.

    Selectors are tied to the site's markup. Each field degrades to
    empty/zero/None on its own, so one drifted selector never blocks
    the rest of the snapshot.
    """

    AVATAR_SELECTORS = ("#user-bar img.avatar", "#user-bar img", "img.avatar")
    STAT_SELECTOR = ".stats span.stat"
    RANK_SELECTORS = {
        "World Rank": ".stats .rank a",
        "Country Rank": ".stats .country-rank a",
    }
    RECENT_TROPHY_SELECTOR = "#recent-trophies > li"
    GAMES_TABLE_SELECTOR = "#gamesTable"

    def __init__(
        self,
        source_url: str,
        base_url: str = BASE_URL,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.source_url = source_url
        self.base_url = base_url
        self.clock = clock

    @staticmethod
    def parse_html(html: str) -> BeautifulSoup:
        return BeautifulSoup(html or "", "html.parser")

    def is_profile_page(self, soup: BeautifulSoup) -> bool:
        return has_user_bar(soup)

    def extract(self, document: Union[str, BeautifulSoup]) -> ProfileSnapshot:
        """
        Build a snapshot from HTML text or an already-parsed document.

        Raises:
            ProfileBlockedError: If the #user-bar anchor is missing
        """
        soup = self.parse_html(document) if isinstance(document, str) else document
        if not self.is_profile_page(soup):
            raise ProfileBlockedError(f"No {ANCHOR_SELECTOR} element on page")

        user_bar = soup.select_one(ANCHOR_SELECTOR)
        return ProfileSnapshot(
            source=self.source_url,
            updated=utc_timestamp(self.clock() if self.clock else None),
            username=self._text(user_bar.select_one(".username")),
            level=self._parse_level(user_bar),
            profile_image=self._extract_profile_image(soup),
            trophy_counts=self._extract_trophy_counts(user_bar),
            stats=self._extract_stats(soup),
            recent_trophies=tuple(self._extract_recent_trophies(soup)),
            recent_games=tuple(self._extract_recent_games(soup)),
        )

    # --- Field helpers ---

    @staticmethod
    def _text(element) -> str:
        return clean_text(element.get_text()) if element is not None else ""

    def _parse_level(self, user_bar) -> int:
        return parse_count(self._text(user_bar.select_one(".level-box span"))) or 0

    def _extract_profile_image(self, soup) -> str:
        for selector in self.AVATAR_SELECTORS:
            img = soup.select_one(selector)
            src = (img.get("src") or "").strip() if img is not None else ""
            if src.startswith("http"):
                return src
        return ""

    def _extract_trophy_counts(self, user_bar) -> TrophyCounts:
        counts = {}
        for grade in TROPHY_GRADES:
            counts[grade] = parse_count(self._text(user_bar.select_one(f"li.{grade}")))
        return TrophyCounts(**counts)

    def _extract_stats(self, soup) -> Dict[str, str]:
        stats: Dict[str, str] = {}
        for el in soup.select(self.STAT_SELECTOR):
            labels = el.find_all("span")
            label = self._text(labels[-1]) if labels else ""
            if label:
                stats[label] = own_text(el)

        for key, selector in self.RANK_SELECTORS.items():
            value = own_text(soup.select_one(selector))
            if value:
                stats[key] = value
        return stats

    def _parse_trophy_row(self, li) -> RecentTrophy:
        title = li.select_one("a.title")
        earned_text, game = split_earned_line(self._text(li.select_one(".small_info_green")))

        descriptions = li.select("span.small-info")
        description = self._text(descriptions[1]) if len(descriptions) > 1 else ""

        images = li.find_all("img")
        trophy_type = clean_text(images[-1].get("alt")) if images else ""
        icon = li.select_one("img.trophy") or (images[0] if images else None)
        image_url = absolute_url(icon.get("src"), self.base_url) if icon is not None else ""

        return RecentTrophy(
            trophy_name=self._text(title),
            game=game,
            rarity_label=self._text(li.select_one(".typo-bottom nobr")),
            description=description,
            earned_text=earned_text,
            rarity_percent=self._text(li.select_one(".typo-top")),
            trophy_type=trophy_type,
            trophy_url=absolute_url(title.get("href"), self.base_url) if title is not None else "",
            image_url=image_url,
        )

    def _extract_recent_trophies(self, soup) -> List[RecentTrophy]:
        rows = soup.select(self.RECENT_TROPHY_SELECTOR)[:MAX_RECENT_ITEMS]
        return [self._parse_trophy_row(li) for li in rows]

    def _parse_game_row(self, row) -> RecentGame:
        earned, total = parse_game_progress(self._text(row.select_one("div.small-info")))
        return RecentGame(
            title=self._text(row.select_one("a.title")),
            trophies_earned=earned,
            trophies_total=total,
        )

    def _extract_recent_games(self, soup) -> List[RecentGame]:
        table = soup.select_one(self.GAMES_TABLE_SELECTOR)
        if table is None:
            return []
        rows = table.select(":scope > tbody > tr") or table.select(":scope > tr")
        return [self._parse_game_row(row) for row in rows[:MAX_RECENT_ITEMS]]
