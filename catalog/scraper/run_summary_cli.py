from __future__ import annotations

"""CLI helper for printing the checkpoint and batch workbook row counts."""

import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from openpyxl import load_workbook

from . import config
from .batches import FIRST_DATA_ROW, BatchFileManager
from .error_codes import ScrapeError
from .state import ProgressStore
from .utils import load_json_file


@dataclass
class BatchSummary:
    checkpoint: Optional[int]
    rows_by_batch: Dict[int, int] = field(default_factory=dict)
    # Raw progress.txt content when it does not hold a page number.
    unreadable_checkpoint: Optional[str] = None
    last_run: Optional[Dict[str, Any]] = None

    @property
    def total_rows(self) -> int:
        return sum(self.rows_by_batch.values())


def _data_rows(path: Path) -> int:
    sheet = load_workbook(path).active
    return max(0, sheet.max_row - (FIRST_DATA_ROW - 1))


def summarise(data_dir: Path) -> BatchSummary:
    data_dir = Path(data_dir)
    progress = ProgressStore(data_dir / config.PROGRESS_FILE.name)
    summary = BatchSummary(checkpoint=None)
    if progress.path.exists():
        try:
            summary.checkpoint = progress.read_checkpoint()
        except ScrapeError:
            summary.unreadable_checkpoint = progress.path.read_text(encoding="utf-8").strip()

    last_run = load_json_file(data_dir / config.SUMMARY_FILE.name)
    if isinstance(last_run, dict):
        summary.last_run = last_run

    # Listing files only; pages_per_batch does not matter here.
    manager = BatchFileManager(data_dir, pages_per_batch=1)
    for index, path in manager.existing_batches():
        summary.rows_by_batch[index] = _data_rows(path)
    return summary


def _build_parser() -> argparse.ArgumentParser:
    """Return an argument parser for the batch summary CLI."""

    parser = argparse.ArgumentParser(
        description="Show the scrape checkpoint and rows per batch workbook.",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding progress.txt and the batch workbooks.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the batch summary CLI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    summary = summarise(args.data_dir or config.DATA_DIR)

    if summary.unreadable_checkpoint is not None:
        print(f"Checkpoint: unreadable (progress.txt holds {summary.unreadable_checkpoint!r})")
    elif summary.checkpoint is None:
        print("Checkpoint: none (next run starts at page 1)")
    else:
        print(f"Checkpoint: page {summary.checkpoint}")

    if summary.last_run:
        line = f"Last run: {summary.last_run.get('status', 'unknown')}"
        if summary.last_run.get("error_code"):
            line += f" ({summary.last_run['error_code']}: {summary.last_run.get('error')})"
        print(line)

    if not summary.rows_by_batch:
        print("No batch files found.")
        return 0

    print("\nBatches:")
    for index, rows in sorted(summary.rows_by_batch.items()):
        print(f"  batch {index}: {rows} rows")
    print(f"\nTotal rows: {summary.total_rows}")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
