"""Helpers for persisting and restoring the page checkpoint."""

from __future__ import annotations

import os
from pathlib import Path

from .error_codes import ErrorCode, ScrapeError
from .utils import log_line

DEFAULT_START_PAGE = 1


class ProgressStore:
    """Store the last fully processed page as plain text.

    The file holds a single integer. Writes go through a temporary file and
    ``os.replace`` so a crash leaves either the previous or the new value.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read_checkpoint(self) -> int:
        if not self.path.exists():
            return DEFAULT_START_PAGE

        raw = self.path.read_text(encoding="utf-8").strip()
        try:
            page = int(raw)
        except ValueError as exc:
            raise ScrapeError(
                ErrorCode.STORAGE,
                f"Progress file {self.path} holds {raw!r}, expected a page number",
            ) from exc

        if page < DEFAULT_START_PAGE:
            log_line(f"[STATE] Checkpoint {page} below {DEFAULT_START_PAGE}; starting from page 1.")
            return DEFAULT_START_PAGE
        return page

    def write_checkpoint(self, page: int) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            handle.write(str(int(page)))
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, self.path)

    def clear(self) -> None:
        """Remove the progress file if it exists."""

        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass


__all__ = ["ProgressStore", "DEFAULT_START_PAGE"]
