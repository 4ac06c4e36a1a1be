from __future__ import annotations

from typing import Literal

from . import config
from .logging_utils import _scraper_event
from .utils import log_line

Entrypoint = Literal["cli", "tests"]


def _raise_config_error(message: str, *, entrypoint: Entrypoint, error: str) -> None:
    _scraper_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ValueError(message)


def validate_runtime_config(entrypoint: Entrypoint) -> None:
    """Validate runtime configuration for the given entrypoint.

    Raises ``ValueError`` when a blocking misconfiguration is detected.
    Non-fatal adjustments (e.g. clamping the retry count) are logged but do
    not raise.
    """

    if config.PAGES_PER_BATCH < 1:
        _raise_config_error(
            "PAGES_PER_BATCH must be at least 1.",
            entrypoint=entrypoint,
            error="pages_per_batch_invalid",
        )

    if not (config.TARGET_SITE_BASE_URL or "").strip():
        _raise_config_error(
            "CATALOG_BASE_URL must not be empty.",
            entrypoint=entrypoint,
            error="base_url_missing",
        )

    if config.READY_WAIT_RETRIES < 0:
        adjusted = 0
        _scraper_event(
            "state",
            phase="config",
            context="runtime_validation",
            kind="config_adjustment",
            field="READY_WAIT_RETRIES",
            value=config.READY_WAIT_RETRIES,
            adjusted=adjusted,
            entrypoint=entrypoint,
        )
        log_line("[CONFIG] READY_WAIT_RETRIES < 0; clamping to 0.")
        config.READY_WAIT_RETRIES = adjusted

    timeout_fields = [
        ("READY_WAIT_TIMEOUT_SECONDS", config.READY_WAIT_TIMEOUT_SECONDS),
        ("READY_WAIT_POLL_MS", config.READY_WAIT_POLL_MS),
        ("PAGE_LOAD_TIMEOUT_SECONDS", config.PAGE_LOAD_TIMEOUT_SECONDS),
    ]

    for field_name, value in timeout_fields:
        if value <= 0:
            _raise_config_error(
                f"{field_name} must be greater than zero.",
                entrypoint=entrypoint,
                error="invalid_timeout",
            )


__all__ = ["validate_runtime_config", "Entrypoint"]
