from __future__ import annotations

"""Error code taxonomy for scraper failures.

Codes end up in the run summary and in structured log lines so an operator
can tell why a run stopped without reading the traceback.
"""


class ErrorCode:
    PAGE_COUNT = "page_count_unparseable"
    READY_TIMEOUT = "ready_marker_timeout"
    NAVIGATION = "navigation_error"
    STORAGE = "storage_error"
    SITE_STRUCTURE = "site_structure_changed"
    INTERNAL = "internal_error"


class ScrapeError(Exception):
    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(message)
        self.error_code = error_code

    def __str__(self) -> str:  # pragma: no cover - inherited behaviour
        return str(self.args[0]) if self.args else ""


__all__ = ["ErrorCode", "ScrapeError"]
