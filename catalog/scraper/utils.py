from __future__ import annotations

import json
import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Optional

from . import config

LOGGER = logging.getLogger("catalog")
_LOGGER_INITIALISED = False


def _configure_logger(log_path: Optional[Path]) -> None:
    """Configure the shared application logger.

    Lines always go to stdout; when ``log_path`` is given they are also
    written to that file.
    """

    global _LOGGER_INITIALISED

    for handler in list(LOGGER.handlers):
        LOGGER.removeHandler(handler)
        try:
            handler.close()
        except Exception:  # noqa: BLE001
            continue

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    LOGGER.addHandler(stream_handler)

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        LOGGER.addHandler(file_handler)

    LOGGER.setLevel(logging.INFO)
    LOGGER.propagate = False

    _LOGGER_INITIALISED = True


def _ensure_logger() -> None:
    """Initialise a stdout-only logger lazily."""

    if _LOGGER_INITIALISED:
        return
    _configure_logger(None)


def setup_run_logger() -> Path:
    """Rotate to a fresh timestamped log file for the current run."""

    timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
    log_path = config.LOG_DIR / f"scrape_{timestamp}.log"
    _configure_logger(log_path)
    LOGGER.info("Logging to %s", log_path)
    return log_path


def ensure_dirs() -> None:
    """Ensure that the data and log directories exist."""

    config.DATA_DIR.mkdir(parents=True, exist_ok=True)
    config.LOG_DIR.mkdir(parents=True, exist_ok=True)


def log_line(message: str) -> None:
    """Write a timestamped log line to stdout and the active log file."""

    _ensure_logger()
    LOGGER.info(message)


@contextmanager
def timed(label: str) -> Iterator[None]:
    """Log how long the wrapped block took, even when it raises."""

    started = time.monotonic()
    try:
        yield
    finally:
        log_line(f"Time taken for {label}: {time.monotonic() - started:.2f} seconds")


def load_json_file(path: Path, default: Any = None) -> Any:
    """Load JSON from ``path``; return ``default`` when missing or invalid."""

    try:
        with Path(path).open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except (json.JSONDecodeError, FileNotFoundError):
        return default


def save_json_file(path: Path, payload: Any) -> None:
    """Persist ``payload`` as JSON atomically."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")

    with tmp_path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)

    tmp_path.replace(path)


__all__ = [
    "LOGGER",
    "ensure_dirs",
    "load_json_file",
    "log_line",
    "save_json_file",
    "setup_run_logger",
    "timed",
]
