#!/usr/bin/env python3
"""CLI that scrapes a paginated product listing into a JSON file."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from core.scraper_engine import ListingScraper
from utils.config_loader import load_settings
from utils.error_handling import ScraperError
from utils.export_writers import write_products_json
from utils.logger import log_scraping_step, setup_logger

console = Console()
error_console = Console(stderr=True)


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scrape a product listing into JSON")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config/settings.json"),
        help="Path to scraper settings JSON",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Override output.path from the settings",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log.level from the settings",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the page progress bar",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    started = time.monotonic()

    try:
        settings = load_settings(str(args.config))
        level = getattr(logging, args.log_level or settings.log_level, logging.INFO)
        # handlers live on the root logger so module loggers propagate to them
        setup_logger("", level, settings.log_file)

        log_scraping_step("Training classifiers")
        with ListingScraper.from_settings(
            settings, show_progress=not args.no_progress
        ) as scraper:
            log_scraping_step("Scraping listing", settings.base_url)
            products = scraper.run()

        output = write_products_json(products, args.output or settings.output_path)
    except ScraperError as exc:
        error_console.print(Text(f"Scrape failed: {exc}", style="bold red"))
        return 1

    summary = scraper.error_reporter.generate_report()
    retries = sum(scraper.fetcher.retry_manager.get_failure_stats().values())

    table = Table(title="Scrape Summary", box=box.SIMPLE_HEAD, show_edge=False)
    table.add_column("Metric", no_wrap=True)
    table.add_column("Value")
    table.add_row("Products", str(len(products)))
    table.add_row(
        "Skipped products",
        Text(str(summary["total_errors"]), style="red" if summary["total_errors"] else "green"),
    )
    table.add_row("Failed fetch attempts", str(retries))
    table.add_row("Output", str(output))
    table.add_row("Run duration", f"{time.monotonic() - started:.1f}s")
    console.print(table)
    return 0


if __name__ == "__main__":
    sys.exit(main())
