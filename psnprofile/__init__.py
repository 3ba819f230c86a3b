# psnprofile/__init__.py
"""
PSNProfiles profile scraper.

Fetches one profile page, extracts trophy data, and keeps the last good
JSON result when a run gets blocked or fails.
"""

from .config import ScrapeConfig
from .extractor import ProfileExtractor
from .models import ProfileSnapshot, RecentGame, RecentTrophy, TrophyCounts
from .runner import ProfileScraper, RunOutcome, RunState
from .store import ResultStore

__version__ = "0.3.0"

__all__ = [
    'ScrapeConfig',
    'ProfileExtractor',
    'ProfileSnapshot',
    'RecentGame',
    'RecentTrophy',
    'TrophyCounts',
    'ProfileScraper',
    'RunOutcome',
    'RunState',
    'ResultStore',
]
