"""Selenium scraper for paginated catalog listings.

Workflow:

- Read the last completed page from ``progress.txt`` (page 1 when absent)
  and open the batch workbook that page belongs to.
- Load the listing at the resume page, dismiss the cookie banner and read
  the total page count from ``#topPaging``.
- For every page up to the total: roll over to the next batch workbook at
  batch boundaries, load ``{base_url}?page=N``, wait for ``#sidebarLogo``,
  extract every table row with at least four cells, skip part numbers
  already written in this batch session, then save the workbook and the
  checkpoint.

Any failure other than the cookie banner aborts the run. The checkpoint
still names the last finished page, so rerunning picks up from there.
"""

from __future__ import annotations

import argparse
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from selenium.common.exceptions import WebDriverException
from selenium.webdriver.remote.webdriver import WebDriver

from . import config
from .batches import Batch, BatchFileManager, should_rollover
from .config_validation import validate_runtime_config
from .error_codes import ErrorCode, ScrapeError
from .extractor import extract_page
from .logging_utils import _scraper_event
from .selenium_client import (
    WaitResult,
    accept_cookie_consent,
    make_driver,
    page_url,
    quit_driver,
    read_total_pages,
    wait_for_ready,
)
from .state import ProgressStore
from .utils import ensure_dirs, log_line, save_json_file, setup_run_logger, timed


@dataclass
class PageStats:
    page: int
    rows_seen: int = 0
    rows_written: int = 0
    duplicates: int = 0
    rows_dropped: int = 0


@dataclass
class RunContext:
    """Everything one scrape run owns, passed explicitly between steps."""

    driver: WebDriver
    progress: ProgressStore
    batches: BatchFileManager
    base_url: str
    start_page: int
    batch: Batch
    total_pages: Optional[int] = None
    last_page: Optional[int] = None
    pages_completed: int = 0
    rows_written: int = 0
    duplicates_skipped: int = 0
    rows_dropped: int = 0

    def record_page(self, stats: PageStats) -> None:
        self.last_page = stats.page
        self.pages_completed += 1
        self.rows_written += stats.rows_written
        self.duplicates_skipped += stats.duplicates
        self.rows_dropped += stats.rows_dropped


def _now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def _short_error_message(exc: BaseException, max_length: int = 200) -> str:
    message = str(exc) or exc.__class__.__name__
    if len(message) > max_length:
        return message[: max_length - 3] + "..."
    return message


def _error_code_for(exc: BaseException) -> str:
    if isinstance(exc, ScrapeError):
        return exc.error_code
    if isinstance(exc, WebDriverException):
        return ErrorCode.NAVIGATION
    if isinstance(exc, OSError):
        return ErrorCode.STORAGE
    return ErrorCode.INTERNAL


def build_context(
    driver: WebDriver,
    *,
    progress_path: Path,
    batch_dir: Path,
    pages_per_batch: int,
    base_url: str,
) -> RunContext:
    """Resolve the resume page and open its batch workbook."""

    progress = ProgressStore(progress_path)
    resuming = progress.path.exists()
    start_page = progress.read_checkpoint()
    if resuming:
        log_line(f"Resuming from page: {start_page}")

    batches = BatchFileManager(batch_dir, pages_per_batch)
    batch = batches.load_or_create(batches.index_for(start_page))
    _scraper_event(
        "state",
        phase="init",
        start_page=start_page,
        batch_index=batch.index,
        next_row=batch.next_row,
        pages_per_batch=pages_per_batch,
    )
    return RunContext(
        driver=driver,
        progress=progress,
        batches=batches,
        base_url=base_url,
        start_page=start_page,
        batch=batch,
    )


def navigate(ctx: RunContext, page: int) -> None:
    url = page_url(ctx.base_url, page)
    log_line(f"Navigating to URL: {url}")
    with timed(f"page {page} navigation"):
        ctx.driver.get(url)


def await_page_ready(ctx: RunContext, page: int) -> None:
    """Wait for the ready marker, reloading the page for each configured retry."""

    attempts = 1 + max(0, config.READY_WAIT_RETRIES)
    for attempt in range(1, attempts + 1):
        log_line("Waiting for table to load...")
        with timed(f"waiting for the table on page {page}"):
            result = wait_for_ready(ctx.driver)
        if result is WaitResult.READY:
            return

        _scraper_event(
            "error",
            phase="wait",
            step="ready_marker_timeout",
            page=page,
            attempt=attempt,
            max_attempts=attempts,
        )
        if attempt < attempts:
            log_line(f"[RUN][WARN] Page {page} not ready; reloading (attempt {attempt + 1}/{attempts}).")
            navigate(ctx, page)

    raise ScrapeError(
        ErrorCode.READY_TIMEOUT,
        f"Page {page} did not show #{config.READY_MARKER_ID} after {attempts} attempt(s)",
    )


def rotate_batch(ctx: RunContext, page: int) -> None:
    previous = ctx.batch.index
    ctx.batch = ctx.batches.rotate(ctx.batch)
    _scraper_event(
        "batch",
        kind="rollover",
        page=page,
        from_batch=previous,
        to_batch=ctx.batch.index,
        next_row=ctx.batch.next_row,
    )


def process_page(ctx: RunContext, page: int) -> PageStats:
    """Scrape one listing page into the open batch and checkpoint it."""

    page_started = time.monotonic()
    log_line(f"Starting page {page}")

    if should_rollover(page, ctx.start_page, ctx.batches.pages_per_batch):
        rotate_batch(ctx, page)

    navigate(ctx, page)
    await_page_ready(ctx, page)

    stats = PageStats(page=page)
    log_line("Extracting data from the page...")
    with timed(f"extracting data from page {page}"):
        extraction = extract_page(ctx.driver)
        stats.rows_seen = extraction.rows_seen
        stats.rows_dropped = extraction.rows_dropped
        for record in extraction.records:
            if ctx.batch.append(record):
                stats.rows_written += 1
            else:
                stats.duplicates += 1

    log_line("Saving progress...")
    with timed(f"saving data for page {page}"):
        # Workbook first: a crash in between reprocesses the page instead of losing it.
        ctx.batches.save(ctx.batch)
        ctx.progress.write_checkpoint(page)

    ctx.record_page(stats)
    _scraper_event(
        "page",
        page=page,
        batch_index=ctx.batch.index,
        rows_seen=stats.rows_seen,
        rows_written=stats.rows_written,
        duplicates=stats.duplicates,
        rows_dropped=stats.rows_dropped,
    )
    log_line(f"Total time for page {page}: {time.monotonic() - page_started:.2f} seconds")
    return stats


def scrape_pages(ctx: RunContext) -> int:
    """Walk every page from the resume point to the last one; return the page total."""

    log_line(f"Navigating to the initial page {ctx.start_page}...")
    navigate(ctx, ctx.start_page)
    log_line("Page navigation completed.")

    log_line("Accepting cookie consent...")
    with timed("handling cookies"):
        accept_cookie_consent(ctx.driver)

    log_line("Fetching total number of pages...")
    with timed("fetching total pages"):
        total_pages = read_total_pages(ctx.driver)
    ctx.total_pages = total_pages
    log_line(f"Total pages: {total_pages}")

    if ctx.start_page > total_pages:
        log_line(f"Resume page {ctx.start_page} is past the last page {total_pages}; nothing to do.")

    for page in range(ctx.start_page, total_pages + 1):
        process_page(ctx, page)
    return total_pages


def run_scrape(
    driver: Optional[WebDriver] = None,
    *,
    data_dir: Optional[Path] = None,
    pages_per_batch: Optional[int] = None,
    base_url: Optional[str] = None,
    server_url: Optional[str] = None,
) -> Dict[str, Any]:
    """Public entrypoint: run one scrape and return its summary.

    The browser session is always quit, including when ``driver`` was
    supplied by the caller.
    """

    if data_dir is not None:
        config.use_data_dir(data_dir)
    ensure_dirs()
    log_path = setup_run_logger()

    summary: Dict[str, Any] = {
        "status": "running",
        "started_at": _now_iso(),
        "log_path": str(log_path),
        "error": None,
        "error_code": None,
    }
    ctx: Optional[RunContext] = None
    try:
        if driver is None:
            driver = make_driver(server_url)
        ctx = build_context(
            driver,
            progress_path=config.PROGRESS_FILE,
            batch_dir=config.DATA_DIR,
            pages_per_batch=config.PAGES_PER_BATCH if pages_per_batch is None else pages_per_batch,
            base_url=(base_url or config.TARGET_SITE_BASE_URL).strip(),
        )
        scrape_pages(ctx)
        summary["status"] = "completed"
    except Exception as exc:  # noqa: BLE001
        error_code = _error_code_for(exc)
        log_line(f"An error occurred: {_short_error_message(exc)}")
        _scraper_event(
            "error",
            phase="run",
            error_code=error_code,
            error=_short_error_message(exc),
            last_page=ctx.last_page if ctx else None,
        )
        summary["status"] = "failed"
        summary["error"] = _short_error_message(exc)
        summary["error_code"] = error_code
    finally:
        quit_driver(driver)

    if ctx is not None:
        summary.update(
            {
                "start_page": ctx.start_page,
                "last_page": ctx.last_page,
                "total_pages": ctx.total_pages,
                "pages_completed": ctx.pages_completed,
                "rows_written": ctx.rows_written,
                "duplicates_skipped": ctx.duplicates_skipped,
                "rows_dropped": ctx.rows_dropped,
                "batch_index": ctx.batch.index,
            }
        )
    summary["finished_at"] = _now_iso()

    if summary["status"] == "completed":
        log_line("Scraping complete. Data saved to multiple batch files.")
    else:
        log_line("Scraping stopped early; rerun to resume from the last saved page.")

    try:
        save_json_file(config.SUMMARY_FILE, summary)
    except OSError as exc:
        log_line(f"[RUN][WARN] Unable to write run summary: {exc}")
    return summary


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scrape the catalog listing into batched Excel files")
    parser.add_argument("--base-url", default=None, help="Listing URL without the ?page= query.")
    parser.add_argument("--pages-per-batch", type=int, default=None)
    parser.add_argument(
        "--server-url",
        default=None,
        help="Remote WebDriver URL; pass an empty string to start a local Chrome.",
    )
    parser.add_argument("--data-dir", type=Path, default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.data_dir is not None:
        config.use_data_dir(args.data_dir)
    if args.pages_per_batch is not None:
        config.PAGES_PER_BATCH = args.pages_per_batch
    if args.base_url is not None:
        config.TARGET_SITE_BASE_URL = args.base_url

    try:
        validate_runtime_config("cli")
    except ValueError as exc:
        log_line(f"Configuration error: {exc}")
        return 2

    try:
        summary = run_scrape(server_url=args.server_url)
    except KeyboardInterrupt:
        log_line("Interrupted by user")
        return 130
    return 0 if summary["status"] == "completed" else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

__all__ = [
    "PageStats",
    "RunContext",
    "build_context",
    "main",
    "process_page",
    "run_scrape",
    "scrape_pages",
]
