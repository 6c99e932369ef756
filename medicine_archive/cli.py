#!/usr/bin/env python3
"""
NHS medicine scraper CLI.

Usage:
    medicine-archive                      # all medicines
    medicine-archive --test               # first 10 medicines
    medicine-archive --limit 25 --concurrency 5 --delay 500
    medicine-archive --output data/medicines.json
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from .browser_pool import PlaywrightProvider
from .config import ScrapeOptions, TEST_MODE_LIMIT
from .errors import MedicineArchiveError
from .logger import LoggingEventSink, info, error, print_summary, setup_logging
from .pipeline import MedicineScraper
from .storage import JsonResultSaver


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="medicine-archive",
        description="Scrape the NHS Medicines A to Z into a JSON file",
    )
    parser.add_argument("--test", action="store_true",
                        help=f"Test mode: only process the first {TEST_MODE_LIMIT} medicines")
    parser.add_argument("--limit", type=int, help="Maximum number of medicines to process")
    parser.add_argument("-o", "--output", help="Output JSON file (default: nhs-medicines.json)")
    parser.add_argument("-c", "--concurrency", type=int, help="Medicines processed in parallel (default: 3)")
    parser.add_argument("-d", "--delay", type=int, help="Delay in ms after each medicine (default: 1000)")
    parser.add_argument("--timeout", type=int, help="Page timeout in ms (default: 30000)")
    parser.add_argument("--word-list", help="Word list used for text reconstruction")
    parser.add_argument("--log-dir", help="Directory for log files (default: logs)")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--env-file", help="Load settings from this .env file")
    return parser


def options_from_args(args: argparse.Namespace) -> ScrapeOptions:
    return ScrapeOptions.from_env(
        env_file=args.env_file,
        test_mode=True if args.test else None,
        limit=args.limit,
        output_path=args.output,
        concurrency=args.concurrency,
        delay_ms=args.delay,
        timeout_ms=args.timeout,
        word_list_path=args.word_list,
        log_dir=args.log_dir,
        headless=False if args.headed else None,
    )


async def run(options: ScrapeOptions):
    saver = JsonResultSaver(options.output_path)
    provider = PlaywrightProvider(headless=options.headless)
    scraper = MedicineScraper(options, provider, sink=LoggingEventSink(), saver=saver)
    result = await scraper.run()
    print_summary(result, output_path=str(saver.saved_to or options.output_path))
    return result


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = options_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    log_file = setup_logging(options.log_dir)
    if log_file:
        info(f"Logging to: {log_file}")

    if options.processing_cap:
        info(f"Running in LIMITED MODE (first {options.processing_cap} medicines)")
    else:
        info("Running in FULL MODE (all medicines)")

    try:
        asyncio.run(run(options))
    except MedicineArchiveError as e:
        error(f"Scraping failed: {e}")
        return 1
    except KeyboardInterrupt:
        error("Interrupted")
        return 130

    if log_file:
        info(f"Log saved to: {log_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
