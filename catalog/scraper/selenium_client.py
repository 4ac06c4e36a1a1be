"""Selenium client helpers for interacting with the catalog website."""
from __future__ import annotations

import re
from enum import Enum
from typing import Any, Callable, Optional

from selenium import webdriver
from selenium.common.exceptions import (
    NoSuchElementException,
    TimeoutException,
    WebDriverException,
)
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from . import config
from .error_codes import ErrorCode, ScrapeError
from .logging_utils import _scraper_event
from .utils import log_line

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


class WaitResult(str, Enum):
    READY = "ready"
    TIMED_OUT = "timed_out"


class ConsentResult(str, Enum):
    CLICKED = "clicked"
    NOT_FOUND = "not_found"
    ERROR = "error"


def make_driver(server_url: Optional[str] = None) -> WebDriver:
    """Start a Chrome session, remote when ``server_url`` is set."""

    chrome_options = Options()
    if config.BROWSER_HEADLESS:
        chrome_options.add_argument("--headless=new")
    chrome_options.add_argument(f"--window-size={config.BROWSER_WINDOW_SIZE}")

    url = config.SERVER_URL if server_url is None else server_url
    if url:
        log_line(f"Connecting to remote WebDriver at {url}")
        driver = webdriver.Remote(command_executor=url, options=chrome_options)
    else:
        log_line("Starting local Chrome WebDriver")
        chrome_options.add_argument("--no-sandbox")
        chrome_options.add_argument("--disable-dev-shm-usage")
        driver = webdriver.Chrome(options=chrome_options)
    driver.set_page_load_timeout(config.PAGE_LOAD_TIMEOUT_SECONDS)
    return driver


def page_url(base_url: str, page: int) -> str:
    return f"{base_url}?page={page}"


def await_condition(
    driver: WebDriver,
    condition: Callable[[Any], Any],
    timeout: float,
    poll_interval: float,
) -> WaitResult:
    """Poll ``condition`` until it is truthy or ``timeout`` seconds pass."""

    try:
        WebDriverWait(driver, timeout, poll_frequency=poll_interval).until(condition)
    except TimeoutException:
        return WaitResult.TIMED_OUT
    return WaitResult.READY


def wait_for_ready(
    driver: WebDriver,
    marker_id: Optional[str] = None,
    *,
    timeout: Optional[float] = None,
    poll_interval: Optional[float] = None,
) -> WaitResult:
    """Wait for the element that marks a fully rendered listing page."""

    locator = (By.ID, marker_id or config.READY_MARKER_ID)
    return await_condition(
        driver,
        EC.presence_of_element_located(locator),
        config.READY_WAIT_TIMEOUT_SECONDS if timeout is None else timeout,
        config.READY_WAIT_POLL_MS / 1000.0 if poll_interval is None else poll_interval,
    )


def accept_cookie_consent(driver: WebDriver, element_id: Optional[str] = None) -> ConsentResult:
    """Best-effort click on the cookie consent button. Never raises."""

    try:
        driver.find_element(By.ID, element_id or config.COOKIE_CONSENT_BUTTON_ID).click()
    except NoSuchElementException:
        log_line("Cookie consent already handled or not required.")
        return ConsentResult.NOT_FOUND
    except WebDriverException as exc:
        log_line(f"[CONSENT][WARN] Cookie consent click failed: {exc.__class__.__name__}: {exc.msg}")
        _scraper_event("error", phase="consent", error=exc.__class__.__name__)
        return ConsentResult.ERROR
    except Exception as exc:  # noqa: BLE001
        log_line(f"[CONSENT][WARN] Cookie consent click raised: {exc.__class__.__name__}: {exc}")
        _scraper_event("error", phase="consent", error=exc.__class__.__name__)
        return ConsentResult.ERROR
    log_line("Cookie consent accepted.")
    return ConsentResult.CLICKED


def parse_page_count(text: str) -> int:
    """Parse the leading integer of the page-count label.

    Raises ``ScrapeError`` when the text does not start with a number.
    """

    match = _LEADING_INT_RE.match(text or "")
    if not match:
        raise ScrapeError(ErrorCode.PAGE_COUNT, f"Cannot parse total page count from {text!r}")
    return max(0, int(match.group(1)))


def read_total_pages(driver: WebDriver, selector: Optional[str] = None) -> int:
    css = selector or config.PAGE_COUNT_SELECTOR
    try:
        text = driver.find_element(By.CSS_SELECTOR, css).text
    except NoSuchElementException as exc:
        raise ScrapeError(
            ErrorCode.SITE_STRUCTURE, f"Page count element {css!r} not found"
        ) from exc
    return parse_page_count(text)


def quit_driver(driver: Optional[WebDriver]) -> None:
    if driver is None:
        return
    try:
        driver.quit()
    except Exception as exc:  # noqa: BLE001
        log_line(f"[RUN][WARN] Failed to quit WebDriver: {exc}")


__all__ = [
    "ConsentResult",
    "WaitResult",
    "accept_cookie_consent",
    "await_condition",
    "make_driver",
    "page_url",
    "parse_page_count",
    "quit_driver",
    "read_total_pages",
    "wait_for_ready",
]
