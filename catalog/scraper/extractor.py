"""Table row extraction from a loaded catalog page."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from selenium.common.exceptions import WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver

from . import config
from .utils import log_line

MIN_CELLS = 4


@dataclass(frozen=True)
class Record:
    """Cell texts of one table row, in column order."""

    cells: Tuple[str, ...]

    @property
    def is_valid(self) -> bool:
        return len(self.cells) >= MIN_CELLS

    @property
    def part_no(self) -> str:
        return self.cells[0]

    @property
    def description(self) -> str:
        return self.cells[1]

    # Column 2 is not exported.
    @property
    def quantity(self) -> str:
        return self.cells[3]


@dataclass
class ExtractionResult:
    records: List[Record] = field(default_factory=list)
    rows_seen: int = 0
    rows_dropped: int = 0


def _row_cells(row) -> Tuple[str, ...]:
    return tuple(cell.text for cell in row.find_elements(By.TAG_NAME, "td"))


def extract_page(driver: WebDriver) -> ExtractionResult:
    """Collect valid records from every table row on the current page.

    Rows with fewer than four cells are dropped. A row whose cells cannot
    be read (stale or detached elements) is skipped on its own; the rest of
    the page is still extracted.
    """

    result = ExtractionResult()
    for table in driver.find_elements(By.TAG_NAME, "table"):
        for row in table.find_elements(By.TAG_NAME, "tr"):
            result.rows_seen += 1
            try:
                cells = _row_cells(row)
            except WebDriverException as exc:
                result.rows_dropped += 1
                log_line(f"[EXTRACT] Skipping unreadable row: {exc.__class__.__name__}: {exc.msg}")
                continue

            if config.LOG_ROW_DATA:
                log_line("Row Data: " + ", ".join(cells))

            record = Record(cells)
            if not record.is_valid:
                result.rows_dropped += 1
                continue
            result.records.append(record)
    return result


def extract_records(driver: WebDriver) -> List[Record]:
    return extract_page(driver).records


__all__ = ["ExtractionResult", "MIN_CELLS", "Record", "extract_page", "extract_records"]
