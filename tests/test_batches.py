from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import load_workbook

from catalog.scraper import batches
from catalog.scraper.batches import BatchFileManager, batch_index_for, should_rollover
from catalog.scraper.extractor import Record


def _record(part_no: str, quantity: str = "1") -> Record:
    return Record((part_no, f"{part_no} desc", "skipped", quantity))


@pytest.mark.parametrize("pages_per_batch", [1, 2, 3, 7, 2000])
def test_batch_index_steps_once_per_batch(pages_per_batch: int) -> None:
    previous = batch_index_for(1, pages_per_batch)
    assert previous == 1
    for page in range(2, 3 * pages_per_batch + 2):
        current = batch_index_for(page, pages_per_batch)
        assert current >= previous
        if (page - 1) % pages_per_batch == 0:
            assert current == previous + 1
        else:
            assert current == previous
        previous = current


def test_batch_index_boundaries() -> None:
    assert batch_index_for(2000, 2000) == 1
    assert batch_index_for(2001, 2000) == 2
    assert batch_index_for(4001, 2000) == 3


@pytest.mark.parametrize("page, pages_per_batch", [(0, 10), (1, 0), (-3, 5)])
def test_batch_index_rejects_invalid_input(page: int, pages_per_batch: int) -> None:
    with pytest.raises(ValueError):
        batch_index_for(page, pages_per_batch)


def test_batch_file_names_are_distinct() -> None:
    names = {batches.batch_file_name(index) for index in range(1, 50)}
    assert len(names) == 49
    assert batches.batch_file_name(3) == "scraped_data_batch_3.xlsx"


@pytest.mark.parametrize(
    "page, start_page, expected",
    [
        (2001, 1, True),
        (2001, 2000, True),
        (2001, 2001, False),
        (2000, 1, False),
        (1, 1, False),
        (4001, 2500, True),
    ],
)
def test_should_rollover(page: int, start_page: int, expected: bool) -> None:
    assert should_rollover(page, start_page, 2000) is expected


def test_new_batch_gets_header_and_starts_at_row_two(tmp_path: Path) -> None:
    manager = BatchFileManager(tmp_path, pages_per_batch=10)
    batch = manager.load_or_create(1)

    assert batch.next_row == 2
    assert batch.sheet.title == "Scraped Data"
    assert [cell.value for cell in batch.sheet[1]] == ["Part No", "Description", "Quantity"]
    assert not batch.path.exists()


def test_append_row_returns_next_cursor(tmp_path: Path) -> None:
    batch = BatchFileManager(tmp_path, 10).load_or_create(1)

    assert batches.append_row(batch.sheet, 2, "P-1", "Pump", "4") == 3
    assert [cell.value for cell in batch.sheet[2]] == ["P-1", "Pump", "4"]


def test_append_skips_part_numbers_already_in_session(tmp_path: Path) -> None:
    batch = BatchFileManager(tmp_path, 10).load_or_create(1)

    assert batch.append(_record("A1", "3")) is True
    assert batch.append(_record("A2")) is True
    assert batch.append(_record("A1", "9")) is False

    assert batch.next_row == 4
    assert batch.sheet["A2"].value == "A1"
    assert batch.sheet["C2"].value == "3"
    assert batch.sheet["A3"].value == "A2"
    assert batch.sheet["A4"].value is None


def test_save_and_reload_appends_after_highest_row(tmp_path: Path) -> None:
    manager = BatchFileManager(tmp_path, 10)
    batch = manager.load_or_create(2)
    batch.append(_record("A1"))
    batch.append(_record("A2"))
    manager.save(batch)

    assert batch.path == tmp_path / "scraped_data_batch_2.xlsx"
    assert not (tmp_path / "scraped_data_batch_2.xlsx.tmp").exists()

    reloaded = manager.load_or_create(2)
    assert reloaded.next_row == 4
    # Keys written by an earlier session are not remembered.
    assert len(reloaded.dedup) == 0
    assert reloaded.append(_record("A1")) is True
    manager.save(reloaded)

    sheet = load_workbook(batch.path).active
    assert [row[0] for row in sheet.iter_rows(min_row=2, values_only=True)] == ["A1", "A2", "A1"]


def test_rotate_saves_and_opens_fresh_batch(tmp_path: Path) -> None:
    manager = BatchFileManager(tmp_path, 10)
    first = manager.load_or_create(1)
    first.append(_record("A1"))

    second = manager.rotate(first)

    assert first.path.exists()
    assert second.index == 2
    assert second.next_row == 2
    assert second.append(_record("A1")) is True


def test_existing_batches_sorted_by_index(tmp_path: Path) -> None:
    manager = BatchFileManager(tmp_path, 10)
    for index in (10, 2, 1):
        manager.save(manager.load_or_create(index))
    (tmp_path / "notes.xlsx").write_text("x", encoding="utf-8")

    assert [index for index, _ in manager.existing_batches()] == [1, 2, 10]


def test_manager_rejects_zero_pages_per_batch(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        BatchFileManager(tmp_path, 0)
