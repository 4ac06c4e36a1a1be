from __future__ import annotations

from typing import Any

from .utils import log_line


def _format_fields(fields: dict[str, Any]) -> str:
    return ", ".join(f"{key}={value!r}" for key, value in sorted(fields.items()))


def _scraper_event(label: str = "", *, phase: str | None = None, **fields: Any) -> None:
    """Log one ``[SCRAPER][LABEL] key=value, ...`` line for a run step.

    Without a label the phase becomes the tag; with both, the phase is kept
    in the payload. Formatting problems are dropped so a page is never lost
    to a log line.
    """

    tag = (label or phase or "event").upper()
    if label and phase:
        fields.setdefault("phase", phase)
    try:
        message = f"[SCRAPER][{tag}] {_format_fields(fields)}"
    except Exception:  # noqa: BLE001
        message = f"[SCRAPER][{tag}] <unformattable fields: {sorted(fields)}>"
    log_line(message)


__all__ = ["_scraper_event"]
