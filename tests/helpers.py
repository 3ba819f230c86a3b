# tests/helpers.py

import os

from psnprofile.scraper.core import FetchError, PageFetcher

PROFILE_URL = "https://psnprofiles.com/OSullivanJA"


def fixture_path(filename: str) -> str:
    path = os.path.join(os.path.dirname(__file__), "fixtures", filename)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Fixture not found: {filename}")
    return path


def read_fixture(filename: str) -> str:
    with open(fixture_path(filename), "r", encoding="utf-8") as f:
        return f.read()


class StaticFetcher(PageFetcher):
    """Returns canned HTML and records requested URLs."""

    name = "static"

    def __init__(self, html: str):
        super().__init__()
        self.html = html
        self.calls = []

    def fetch(self, url: str) -> str:
        self.calls.append(url)
        return self.html


class FailingFetcher(PageFetcher):
    """Always raises the given exception."""

    name = "failing"

    def __init__(self, exc: Exception = None):
        super().__init__()
        self.exc = exc or FetchError("connection reset by peer")

    def fetch(self, url: str) -> str:
        raise self.exc
