from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


ENDPOINT_URL = "http://192.168.4.2:5000/api/dados"
POLL_INTERVAL_SECONDS = 3.0
REQUEST_TIMEOUT_SECONDS = 10.0
CHART_WINDOW_SIZE = 6

_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    endpoint_url: str
    poll_interval: float
    request_timeout: float
    chart_window: int
    log_level: str


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        endpoint_url=ENDPOINT_URL,
        poll_interval=POLL_INTERVAL_SECONDS,
        request_timeout=REQUEST_TIMEOUT_SECONDS,
        chart_window=CHART_WINDOW_SIZE,
        log_level=_read_log_level("INFO"),
    )
