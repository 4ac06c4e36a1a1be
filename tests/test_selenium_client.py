from __future__ import annotations

import pytest
from selenium.common.exceptions import ElementClickInterceptedException

from catalog.scraper import selenium_client
from catalog.scraper.error_codes import ErrorCode, ScrapeError
from catalog.scraper.selenium_client import (
    ConsentResult,
    WaitResult,
    accept_cookie_consent,
    await_condition,
    page_url,
    parse_page_count,
    read_total_pages,
    wait_for_ready,
)
from tests.fake_browser import FakeDriver


def test_page_url() -> None:
    assert page_url("https://catalog.example.com/Vendor", 7) == "https://catalog.example.com/Vendor?page=7"


@pytest.mark.parametrize(
    "text, expected",
    [("12", 12), (" 345 ", 345), ("7 pages", 7), ("0", 0)],
)
def test_parse_page_count(text: str, expected: int) -> None:
    assert parse_page_count(text) == expected


@pytest.mark.parametrize("text", ["", "pages: 12", "n/a", None])
def test_parse_page_count_rejects_non_numeric(text) -> None:
    with pytest.raises(ScrapeError) as excinfo:
        parse_page_count(text)
    assert excinfo.value.error_code == ErrorCode.PAGE_COUNT


def test_read_total_pages_from_fixed_element() -> None:
    assert read_total_pages(FakeDriver(total_pages_text="1532")) == 1532


def test_read_total_pages_missing_element() -> None:
    with pytest.raises(ScrapeError) as excinfo:
        read_total_pages(FakeDriver(), selector="#nowhere")
    assert excinfo.value.error_code == ErrorCode.SITE_STRUCTURE


def test_consent_clicked() -> None:
    driver = FakeDriver()
    assert accept_cookie_consent(driver) is ConsentResult.CLICKED
    assert driver.consent_button.clicks == 1


def test_consent_not_found_is_not_an_error() -> None:
    assert accept_cookie_consent(FakeDriver(consent_present=False)) is ConsentResult.NOT_FOUND


def test_consent_click_failure_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    events: list[tuple[str, dict]] = []
    monkeypatch.setattr(
        selenium_client, "_scraper_event", lambda label, **fields: events.append((label, fields))
    )
    driver = FakeDriver()

    def _intercepted() -> None:
        raise ElementClickInterceptedException("overlay in the way")

    driver.consent_button.click = _intercepted

    assert accept_cookie_consent(driver) is ConsentResult.ERROR
    assert events and events[0][0] == "error"
    assert events[0][1]["phase"] == "consent"


def test_wait_for_ready_marker_present() -> None:
    driver = FakeDriver()
    driver.get("https://example.com/?page=1")
    assert wait_for_ready(driver, timeout=0.05, poll_interval=0.01) is WaitResult.READY


def test_wait_for_ready_times_out() -> None:
    driver = FakeDriver(not_ready_pages={1})
    driver.get("https://example.com/?page=1")
    assert wait_for_ready(driver, timeout=0.05, poll_interval=0.01) is WaitResult.TIMED_OUT


def test_await_condition_polls_until_truthy() -> None:
    calls: list[int] = []

    def _third_time(_driver) -> bool:
        calls.append(1)
        return len(calls) >= 3

    assert await_condition(FakeDriver(), _third_time, 1, 0.01) is WaitResult.READY
    assert len(calls) == 3


def test_quit_driver_swallows_errors() -> None:
    class _Broken:
        def quit(self) -> None:
            raise RuntimeError("session already gone")

    selenium_client.quit_driver(_Broken())
    selenium_client.quit_driver(None)


def test_consent_unexpected_exception_is_reported() -> None:
    driver = FakeDriver()

    def _boom() -> None:
        raise ConnectionResetError("remote end closed connection")

    driver.consent_button.click = _boom

    assert accept_cookie_consent(driver) is ConsentResult.ERROR
