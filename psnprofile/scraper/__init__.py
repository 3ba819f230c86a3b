# psnprofile/scraper/__init__.py
"""
Page retrieval for the PSNProfiles scraper.

Interchangeable fetchers (curl, urllib, Playwright) behind PageFetcher,
plus the anchor check and optional debug artifact sink.
"""

from .core import (
    USER_AGENT,
    CurlFetcher,
    FetchError,
    HttpFetcher,
    PageFetcher,
    ProfileBlockedError,
    ScrapeError,
    build_fetcher,
)
from .diagnostics import DiagnosticSink, FileDiagnosticSink, NullDiagnosticSink
from .validation import has_user_bar, snapshot_warnings

__all__ = [
    'USER_AGENT',
    'PageFetcher',
    'CurlFetcher',
    'HttpFetcher',
    'build_fetcher',
    'ScrapeError',
    'FetchError',
    'ProfileBlockedError',
    'DiagnosticSink',
    'FileDiagnosticSink',
    'NullDiagnosticSink',
    'snapshot_warnings',
    'has_user_bar',
]
