"""Batch workbook management.

Consecutive pages are grouped into batches of ``pages_per_batch`` pages.
Each batch owns one ``scraped_data_batch_{index}.xlsx`` workbook with a
``Part No | Description | Quantity`` header in row 1.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from . import config
from .dedup import Deduplicator
from .extractor import Record
from .utils import log_line

HEADER_ROW = 1
FIRST_DATA_ROW = HEADER_ROW + 1

_BATCH_FILE_RE = re.compile(r"^scraped_data_batch_(\d+)\.xlsx$")


def batch_index_for(page: int, pages_per_batch: int) -> int:
    """Return the 1-based batch index that ``page`` belongs to."""

    if pages_per_batch < 1:
        raise ValueError("pages_per_batch must be at least 1")
    if page < 1:
        raise ValueError("page must be at least 1")
    return (page - 1) // pages_per_batch + 1


def batch_file_name(index: int) -> str:
    return f"scraped_data_batch_{index}.xlsx"


def should_rollover(page: int, start_page: int, pages_per_batch: int) -> bool:
    """Return True when ``page`` opens a new batch after the run's first page."""

    return (page - 1) % pages_per_batch == 0 and page > start_page


def append_row(sheet: Worksheet, row: int, part_no: str, description: str, quantity: str) -> int:
    """Write one data row and return the next writable row."""

    sheet.cell(row=row, column=1).value = part_no
    sheet.cell(row=row, column=2).value = description
    sheet.cell(row=row, column=3).value = quantity
    return row + 1


@dataclass
class Batch:
    index: int
    path: Path
    workbook: Workbook
    sheet: Worksheet
    next_row: int
    dedup: Deduplicator = field(default_factory=Deduplicator)

    def append(self, record: Record) -> bool:
        """Write ``record`` unless its part number was already written this session."""

        if self.dedup.seen(record.part_no):
            return False
        self.next_row = append_row(
            self.sheet, self.next_row, record.part_no, record.description, record.quantity
        )
        self.dedup.mark_seen(record.part_no)
        return True


class BatchFileManager:
    def __init__(self, directory: Path, pages_per_batch: int) -> None:
        if pages_per_batch < 1:
            raise ValueError("pages_per_batch must be at least 1")
        self.directory = Path(directory)
        self.pages_per_batch = pages_per_batch

    def path_for(self, index: int) -> Path:
        return self.directory / batch_file_name(index)

    def index_for(self, page: int) -> int:
        return batch_index_for(page, self.pages_per_batch)

    def load_or_create(self, index: int) -> Batch:
        path = self.path_for(index)

        if path.exists():
            log_line(f"Loading existing batch file: {path.name}")
            workbook = load_workbook(path)
            sheet = workbook.active
            next_row = max(sheet.max_row + 1, FIRST_DATA_ROW)
        else:
            log_line(f"Creating new batch file: {path.name}")
            workbook = Workbook()
            sheet = workbook.active
            sheet.title = config.SHEET_TITLE
            for col_idx, title in enumerate(config.SHEET_HEADERS, start=1):
                sheet.cell(row=HEADER_ROW, column=col_idx).value = title
            next_row = FIRST_DATA_ROW

        return Batch(index=index, path=path, workbook=workbook, sheet=sheet, next_row=next_row)

    def save(self, batch: Batch) -> None:
        """Write the batch workbook, replacing the previous file in one step."""

        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = batch.path.with_name(batch.path.name + ".tmp")
        batch.workbook.save(tmp_path)
        os.replace(tmp_path, batch.path)

    def rotate(self, batch: Batch) -> Batch:
        """Save ``batch`` and open the one after it."""

        self.save(batch)
        return self.load_or_create(batch.index + 1)

    def existing_batches(self) -> List[Tuple[int, Path]]:
        if not self.directory.is_dir():
            return []
        found = []
        for path in self.directory.iterdir():
            match = _BATCH_FILE_RE.match(path.name)
            if match and path.is_file():
                found.append((int(match.group(1)), path))
        return sorted(found)


__all__ = [
    "Batch",
    "BatchFileManager",
    "FIRST_DATA_ROW",
    "append_row",
    "batch_file_name",
    "batch_index_for",
    "should_rollover",
]
