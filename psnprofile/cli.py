#!/usr/bin/env python3
# psnprofile/cli.py
"""
CLI for scraping a PSNProfiles profile into a JSON file.

Usage:
    psnprofile
    psnprofile --url https://psnprofiles.com/SomeUser --output data/profile.json
    psnprofile --fetcher http --dump-debug --verbose
"""

import argparse
import logging
import sys

from psnprofile.config import DEFAULT_OUTPUT_PATH, FETCHER_CHOICES, ScrapeConfig
from psnprofile.runner import ProfileScraper, RunOutcome, RunState
from psnprofile.scraper.core import ScrapeError, build_fetcher
from psnprofile.store import ResultStore

logger = logging.getLogger(__name__)


def _safe_print(message: str) -> None:
    """Print with Unicode fallback for restricted terminal encodings."""
    try:
        print(message)
    except UnicodeEncodeError:
        fallback = (
            message.replace("✅", "[OK]")
            .replace("⚠️", "[WARN]")
            .replace("❌", "[ERROR]")
        )
        print(fallback)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Scrape a PSNProfiles profile page into a JSON file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  psnprofile --url https://psnprofiles.com/OSullivanJA
  psnprofile --fetcher curl --output psnprofiles.json
  psnprofile --headed --no-block-resources --dump-debug
        """
    )
    parser.add_argument('--url', default=None, help='Profile URL (default: $PSNPROFILE_URL or built-in profile)')
    parser.add_argument(
        '--output',
        default=DEFAULT_OUTPUT_PATH,
        help=f'Result JSON path (default: {DEFAULT_OUTPUT_PATH})'
    )
    parser.add_argument(
        '--fetcher',
        default='browser',
        choices=list(FETCHER_CHOICES),
        help='Page fetch strategy (default: browser)'
    )
    parser.add_argument('--headed', action='store_true', help='Show the browser window')
    parser.add_argument(
        '--no-block-resources',
        action='store_true',
        help='Let the browser load images, fonts and media'
    )
    parser.add_argument(
        '--timeout-ms',
        type=int,
        default=60000,
        help='Navigation / request timeout in milliseconds (default: 60000)'
    )
    parser.add_argument(
        '--settle-ms',
        type=int,
        default=3000,
        help='Extra wait after page load for client-side rendering (default: 3000)'
    )
    parser.add_argument('--dump-debug', action='store_true', help='Write raw HTML and screenshot debug files')
    parser.add_argument('--debug-html', default='debug.html', help='Raw HTML debug path (default: debug.html)')
    parser.add_argument('--screenshot', default='debug.png', help='Screenshot debug path (default: debug.png)')
    parser.add_argument('--verbose', action='store_true', help='Verbose logging')
    return parser


def print_summary(outcome: RunOutcome, output_path: str) -> None:
    snapshot = outcome.snapshot

    if outcome.state is RunState.DONE:
        _safe_print(f"✅ Wrote {output_path}")
        counts = snapshot.trophy_counts
        _safe_print(f"User: {snapshot.username} | Level: {snapshot.level}")
        _safe_print(
            f"Trophies: {counts.total} total | {counts.platinum} platinum | {counts.gold} gold"
            f" | {counts.silver} silver | {counts.bronze} bronze"
        )
        _safe_print(
            f"Recent trophies: {len(snapshot.recent_trophies)} | Recent games: {len(snapshot.recent_games)}"
        )
        return

    _safe_print(f"❌ {outcome.message}")
    if outcome.preserved:
        _safe_print(f"✅ Keeping previous {output_path} (did not overwrite).")
    else:
        _safe_print(f"⚠️ Wrote placeholder {output_path} with error set.")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = ScrapeConfig.from_args(args)
    except ValueError as exc:
        _safe_print(f"❌ Invalid configuration: {exc}")
        return 2

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        fetcher = build_fetcher(config, config.make_diagnostics())
    except ScrapeError as exc:
        _safe_print(f"❌ {exc}")
        return 1

    scraper = ProfileScraper(config.profile_url, fetcher, ResultStore(config.output_path))
    try:
        outcome = scraper.run()
    except Exception as exc:
        logger.exception("Unhandled error while writing %s", config.output_path)
        _safe_print(f"❌ Error: {exc}")
        return 1

    print_summary(outcome, config.output_path)
    return 0


if __name__ == '__main__':
    sys.exit(main())
