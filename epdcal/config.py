"""Configuration for the calendar page server."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .calendar_grid import WeekStart, normalize_week_start
from .calendar_view import DEFAULT_DISPLAY_TIMEZONE
from .i18n import DEFAULT_LOCALE, resolve_locale
from .utils import parse_float, parse_int, split_csv, strip_or_none

DEFAULT_BIND_ADDRESS = "127.0.0.1"
DEFAULT_PORT = 8090
DEFAULT_API_BASE_URL = "http://127.0.0.1:8080"
DEFAULT_RENDER_WAIT_SECONDS = 20.0
DEFAULT_PREVIEW_PATH = Path("/var/lib/epdcal/preview.png")
# Share of the render wait a backend request may use, so it settles before the deadline.
FETCH_TIMEOUT_SHARE = 0.8

LOGGER = logging.getLogger("epdcal.config")


@dataclass(frozen=True)
class CalendarViewConfig:
    """Fully resolved settings; nothing downstream handles missing values."""

    bind_address: str
    port: int
    api_base_url: str
    locale: str
    week_start: WeekStart
    display_timezone: str
    fetch_timeout: float | None
    render_wait_seconds: float
    preview_path: Path
    allowed_origins: tuple[str, ...] = ("*",)

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> CalendarViewConfig:
        source = env if env is not None else os.environ
        port = parse_int(source.get("EPDCAL_PORT"), DEFAULT_PORT)
        if not 0 < port < 65536:
            port = DEFAULT_PORT
        fetch_timeout = parse_float(strip_or_none(source.get("EPDCAL_FETCH_TIMEOUT")), None)
        if fetch_timeout is not None and fetch_timeout <= 0:
            fetch_timeout = None
        render_wait = parse_float(source.get("EPDCAL_RENDER_WAIT_SECONDS"), DEFAULT_RENDER_WAIT_SECONDS)
        render_wait = max(1.0, render_wait or DEFAULT_RENDER_WAIT_SECONDS)
        if fetch_timeout is not None and fetch_timeout > render_wait * FETCH_TIMEOUT_SHARE:
            clamped = render_wait * FETCH_TIMEOUT_SHARE
            LOGGER.warning(
                "EPDCAL_FETCH_TIMEOUT=%s exceeds the render wait of %ss; clamping to %.1fs",
                fetch_timeout,
                render_wait,
                clamped,
            )
            fetch_timeout = clamped
        preview_path = strip_or_none(source.get("EPDCAL_PREVIEW_PATH"))
        origins = tuple(split_csv(source.get("EPDCAL_ALLOWED_ORIGINS"))) or ("*",)
        return CalendarViewConfig(
            bind_address=strip_or_none(source.get("EPDCAL_BIND_ADDRESS")) or DEFAULT_BIND_ADDRESS,
            port=port,
            api_base_url=(strip_or_none(source.get("EPDCAL_API_BASE_URL")) or DEFAULT_API_BASE_URL).rstrip("/"),
            locale=resolve_locale(source.get("EPDCAL_LOCALE"), DEFAULT_LOCALE),
            week_start=normalize_week_start(source.get("EPDCAL_WEEK_START")),
            display_timezone=strip_or_none(source.get("EPDCAL_DISPLAY_TIMEZONE")) or DEFAULT_DISPLAY_TIMEZONE,
            fetch_timeout=fetch_timeout,
            render_wait_seconds=render_wait,
            preview_path=Path(preview_path) if preview_path else DEFAULT_PREVIEW_PATH,
            allowed_origins=origins,
        )
