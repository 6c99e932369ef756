"""
Logging configuration for medicine extraction.

Everything is logged under the 'medicine_archive' logger. setup_logging()
attaches a console handler and a timestamped file handler; the scraping
core itself only emits ProgressEvents, which LoggingEventSink turns into
log lines.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from .events import EventKind, ProgressEvent
from .models import RunResult

# Create logger
logger = logging.getLogger('medicine_archive')
logger.setLevel(logging.DEBUG)
logger.addHandler(logging.NullHandler())

formatter = logging.Formatter(
    '%(asctime)s | %(levelname)-5s | %(name)s | %(message)s',
    datefmt='%H:%M:%S'
)


def setup_logging(log_dir: Optional[str] = "logs", level: int = logging.INFO) -> Optional[Path]:
    """
    Attach console and file handlers to the package logger.

    Safe to call more than once; handlers from a previous call are replaced.

    Returns:
        Path of the log file, or None when log_dir is empty.
    """
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()

    # Console handler with formatting
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if not log_dir:
        return None

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / f"scrape_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
    return log_file


# Convenience functions
def info(msg): logger.info(msg)
def error(msg): logger.error(msg)


def get_logger(name):
    """Get a child logger for a specific component."""
    return logger.getChild(name)


def fmt_duration(secs: float) -> str:
    secs = max(0, secs)
    if secs < 60:
        return f"{secs:.0f}s"
    m, s = divmod(int(secs), 60)
    if m < 60:
        return f"{m}m {s:02d}s"
    h, m = divmod(m, 60)
    return f"{h}h {m:02d}m"


def progress_bar(processed: int, total: int, width: int = 20) -> str:
    pct = processed / max(total, 1)
    filled = min(width, int(width * pct))
    return "█" * filled + "░" * (width - filled)


class LoggingEventSink:
    """Renders ProgressEvents as log lines on the package logger."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or get_logger('run')

    def __call__(self, event: ProgressEvent) -> None:
        kind = event.kind

        if kind is EventKind.RUN_STARTED:
            self.log.info(f"Starting scrape of {event.url}")
        elif kind is EventKind.CATALOG_BUILT:
            cap = event.details.get("cap")
            suffix = f" (processing first {cap})" if cap else ""
            self.log.info(f"Found {event.total} medicines{suffix}")
        elif kind is EventKind.ITEM_STARTED:
            self.log.debug(f"Scraping {event.name} -> {event.url}")
        elif kind in (EventKind.ITEM_SUCCEEDED, EventKind.ITEM_FAILED):
            bar = progress_bar(event.processed, event.total)
            eta = fmt_duration(event.eta_seconds) if event.eta_seconds is not None else "--"
            line = (
                f"[{bar}] {event.processed}/{event.total} "
                f"({event.percent:.1f}%) ETA {eta} | {event.name}"
            )
            if kind is EventKind.ITEM_FAILED:
                self.log.warning(f"{line} FAILED: {event.error} ({event.url})")
            else:
                self.log.info(line)
        elif kind is EventKind.SECTION_FAILED:
            section = event.details.get("section", "?")
            self.log.warning(f"{event.name}: section {section} failed: {event.error} ({event.url})")
        elif kind is EventKind.SECTION_LINKS_FAILED:
            self.log.warning(f"{event.name}: section links unavailable: {event.error} ({event.url})")
        elif kind is EventKind.TASK_ERROR:
            self.log.error(f"Unhandled error in task for {event.name}: {event.error} ({event.url})")
        elif kind is EventKind.RUN_COMPLETED:
            elapsed = event.details.get("elapsed")
            took = f" in {fmt_duration(elapsed)}" if elapsed is not None else ""
            self.log.info(
                f"Run complete{took}: {event.details.get('succeeded', 0)} scraped, "
                f"{event.details.get('failed', 0)} failed"
            )


def print_summary(result: RunResult, output_path: Optional[str] = None, console: Optional[Console] = None):
    """Print a summary table for a finished run."""
    console = console or Console()

    table = Table(title="Medicine Scrape Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Medicines found", str(result.total_found))
    table.add_row("Attempted", str(result.attempted))
    table.add_row("Scraped", f"[green]{result.succeeded}[/green]")
    table.add_row("Failed", f"[red]{len(result.failed_names)}[/red]" if result.failed_names else "0")
    table.add_row("Success rate", f"{result.success_rate():.1f}%")
    if output_path:
        table.add_row("Output", output_path)

    console.print(table)

    if result.failed_names:
        console.print("[bold red]Failed medicines:[/bold red]")
        for name in result.failed_names:
            console.print(f"  - {name}")
