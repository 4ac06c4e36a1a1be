"""Configuration constants for the catalog scraper."""
from __future__ import annotations

import os
from pathlib import Path


def _env_flag(env_var: str, default: str = "0") -> bool:
    return os.getenv(env_var, default).strip().lower() not in {"", "0", "false", "no"}


def _parse_timeout_seconds(env_var: str, default: float, *, minimum: float = 0.1) -> float:
    """Parse a timeout value in seconds from the environment with bounds."""

    try:
        value = float(os.getenv(env_var, str(default)))
    except ValueError:
        return default
    return max(minimum, value)


DATA_DIR: Path = Path(os.getenv("CATALOG_DATA_DIR", "."))
LOG_DIR: Path = DATA_DIR / "logs"
PROGRESS_FILE: Path = DATA_DIR / "progress.txt"
SUMMARY_FILE: Path = DATA_DIR / "last_summary.json"

# Remote WebDriver endpoint; an empty value starts a local Chrome instead.
SERVER_URL: str = os.getenv("SELENIUM_SERVER_URL", "http://localhost:4444/").strip()
TARGET_SITE_BASE_URL: str = os.getenv(
    "CATALOG_BASE_URL", "https://catalog.locatory.com/BrooksandMaldiniCorporation"
).strip()

PAGES_PER_BATCH: int = int(os.getenv("PAGES_PER_BATCH", "2000"))

# Ready-marker wait after each navigation.
READY_WAIT_TIMEOUT_SECONDS: float = _parse_timeout_seconds("READY_WAIT_TIMEOUT_SECONDS", 2)
READY_WAIT_POLL_MS: int = int(os.getenv("READY_WAIT_POLL_MS", "200"))
# Extra attempts after a ready-marker timeout. 0 keeps a timeout fatal.
READY_WAIT_RETRIES: int = int(os.getenv("READY_WAIT_RETRIES", "0"))

PAGE_LOAD_TIMEOUT_SECONDS: float = _parse_timeout_seconds("PAGE_LOAD_TIMEOUT_SECONDS", 45)
BROWSER_WINDOW_SIZE: str = os.getenv("BROWSER_WINDOW_SIZE", "1024,768")
BROWSER_HEADLESS: bool = _env_flag("BROWSER_HEADLESS")

LOG_ROW_DATA: bool = _env_flag("LOG_ROW_DATA")

# Fixed locators on the catalog site.
COOKIE_CONSENT_BUTTON_ID: str = "CybotCookiebotDialogBodyLevelButtonLevelOptinAllowallSelection"
PAGE_COUNT_SELECTOR: str = "#topPaging > div:nth-child(1) > span"
READY_MARKER_ID: str = "sidebarLogo"

SHEET_TITLE: str = "Scraped Data"
SHEET_HEADERS: tuple[str, str, str] = ("Part No", "Description", "Quantity")


def use_data_dir(data_dir: Path | str) -> None:
    """Point every data-dependent path at ``data_dir``."""

    global DATA_DIR, LOG_DIR, PROGRESS_FILE, SUMMARY_FILE

    DATA_DIR = Path(data_dir)
    LOG_DIR = DATA_DIR / "logs"
    PROGRESS_FILE = DATA_DIR / "progress.txt"
    SUMMARY_FILE = DATA_DIR / "last_summary.json"
