"""Message catalogs for the calendar page.

Catalogs are plain dicts loaded at import time, one per supported locale.
Every locale must carry the same key set; the test suite enforces that.
"""

from __future__ import annotations

import logging
from typing import Literal

Locale = Literal["ko", "en"]

DEFAULT_LOCALE: Locale = "en"
SUPPORTED_LOCALES: tuple[Locale, ...] = ("ko", "en")

LOGGER = logging.getLogger("epdcal.i18n")

_KO: dict[str, str] = {
    "calendar.today": "오늘",
    "calendar.no_events": "일정 없음",
    "calendar.all_day_prefix": "종일 · ",
    "calendar.last_updated_prefix": "마지막 업데이트:",
    "calendar.error.load": "데이터를 불러오는 중 오류가 발생했습니다.",
    "calendar.loading": "로딩 중...",
    "calendar.no_title": "(제목 없음)",
    "calendar.battery": "배터리",
    "calendar.title": "캘린더",
}

_EN: dict[str, str] = {
    "calendar.today": "Today",
    "calendar.no_events": "No events",
    "calendar.all_day_prefix": "All-day · ",
    "calendar.last_updated_prefix": "Last updated:",
    "calendar.error.load": "An error occurred while loading data.",
    "calendar.loading": "Loading...",
    "calendar.no_title": "(No title)",
    "calendar.battery": "Battery",
    "calendar.title": "Calendar",
}

MESSAGES: dict[Locale, dict[str, str]] = {
    "ko": _KO,
    "en": _EN,
}


def normalize_locale(raw: str | None) -> Locale | None:
    """Map a loose language tag (``ko-KR``, ``en_US``) onto a supported locale."""
    if not raw:
        return None
    value = raw.strip().lower()
    if value.startswith("ko"):
        return "ko"
    if value.startswith("en"):
        return "en"
    return None


def resolve_locale(raw: str | None, default: Locale = DEFAULT_LOCALE) -> Locale:
    return normalize_locale(raw) or default


def translate(locale: str, key: str) -> str:
    """Return the message for ``key``; unknown locales use the default catalog."""
    messages = MESSAGES.get(locale) or MESSAGES[DEFAULT_LOCALE]  # type: ignore[call-overload]
    message = messages.get(key)
    if message is None:
        LOGGER.warning("Missing message key %s for locale %s", key, locale)
        return key
    return message
