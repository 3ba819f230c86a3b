# psnprofile/config.py

from __future__ import annotations

import os
from dataclasses import dataclass

from psnprofile.scraper.diagnostics import DiagnosticSink, FileDiagnosticSink, NullDiagnosticSink

DEFAULT_PROFILE_URL = "https://psnprofiles.com/OSullivanJA"
DEFAULT_OUTPUT_PATH = "psnprofiles.json"
FETCHER_CHOICES = ("curl", "http", "browser")


@dataclass
class ScrapeConfig:
    profile_url: str = DEFAULT_PROFILE_URL
    output_path: str = DEFAULT_OUTPUT_PATH
    fetcher: str = "browser"
    block_resources: bool = True
    headless: bool = True
    nav_timeout_ms: int = 60000
    settle_ms: int = 3000
    http_timeout_seconds: int = 30
    dump_debug: bool = False
    debug_html_path: str = "debug.html"
    screenshot_path: str = "debug.png"
    verbose: bool = False

    def __post_init__(self):
        if self.fetcher not in FETCHER_CHOICES:
            raise ValueError(f"fetcher must be one of {', '.join(FETCHER_CHOICES)}, got '{self.fetcher}'")
        if self.nav_timeout_ms <= 0:
            raise ValueError("nav_timeout_ms must be positive")
        if self.settle_ms < 0:
            raise ValueError("settle_ms cannot be negative")

    @classmethod
    def from_args(cls, args) -> "ScrapeConfig":
        """Build config from parsed CLI args; PSNPROFILE_URL fills in a missing --url."""
        profile_url = args.url or os.getenv("PSNPROFILE_URL") or DEFAULT_PROFILE_URL
        return cls(
            profile_url=profile_url,
            output_path=args.output,
            fetcher=args.fetcher,
            block_resources=not args.no_block_resources,
            headless=not args.headed,
            nav_timeout_ms=args.timeout_ms,
            settle_ms=args.settle_ms,
            http_timeout_seconds=max(1, args.timeout_ms // 1000),
            dump_debug=args.dump_debug,
            debug_html_path=args.debug_html,
            screenshot_path=args.screenshot,
            verbose=args.verbose,
        )

    def make_diagnostics(self) -> DiagnosticSink:
        if not self.dump_debug:
            return NullDiagnosticSink()
        return FileDiagnosticSink(self.debug_html_path, self.screenshot_path)
