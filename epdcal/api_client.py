"""Async client for the calendar backend's events and battery endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

from .battery import clamp_battery_percent
from .calendar_grid import WeekStart, normalize_week_start
from .occurrences import OccurrencePayloadError, OccurrenceRecord, parse_instant, parse_occurrences

LOGGER = logging.getLogger("epdcal.api_client")

EVENTS_PATH = "/api/events"
BATTERY_PATH = "/api/battery"


class CalendarSourceError(RuntimeError):
    """Generic data-source failure."""


class NetworkFailure(CalendarSourceError):
    """The request could not complete."""


class HttpStatusFailure(CalendarSourceError):
    """The backend answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class PayloadFailure(CalendarSourceError):
    """The response body was not well-formed."""


@dataclass(frozen=True)
class EventsPayload:
    range_start: datetime | None
    range_end: datetime | None
    display_timezone: str | None
    week_start: WeekStart
    occurrences: list[OccurrenceRecord] = field(default_factory=list)


@dataclass(frozen=True)
class BatteryPayload:
    percent: float | None


def create_http_client(base_url: str, *, timeout: float | None = None) -> httpx.AsyncClient:
    kwargs: dict[str, Any] = {"base_url": base_url.rstrip("/"), "follow_redirects": True}
    if timeout is not None:
        kwargs["timeout"] = timeout
    return httpx.AsyncClient(**kwargs)


def parse_events_payload(data: Any) -> EventsPayload:
    if not isinstance(data, dict):
        raise PayloadFailure("events payload must be a JSON object")
    raw_occurrences = data.get("occurrences")
    if raw_occurrences is not None and not isinstance(raw_occurrences, list):
        raise PayloadFailure("events payload 'occurrences' must be a list")
    try:
        occurrences = parse_occurrences(raw_occurrences)
    except OccurrencePayloadError as exc:
        raise PayloadFailure(f"malformed occurrence: {exc}") from exc
    timezone_name = data.get("display_timezone")
    return EventsPayload(
        range_start=parse_instant(data.get("range_start")),
        range_end=parse_instant(data.get("range_end")),
        display_timezone=(timezone_name.strip() or None) if isinstance(timezone_name, str) else None,
        week_start=normalize_week_start(data.get("week_start")),
        occurrences=occurrences,
    )


def parse_battery_payload(data: Any) -> BatteryPayload:
    if not isinstance(data, dict):
        raise PayloadFailure("battery payload must be a JSON object")
    return BatteryPayload(percent=clamp_battery_percent(data.get("percent")))


class CalendarApiClient:
    """Fetch the two page data sources over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        events_path: str = EVENTS_PATH,
        battery_path: str = BATTERY_PATH,
    ) -> None:
        self._client = client
        self.events_path = events_path
        self.battery_path = battery_path

    async def fetch_events(self) -> EventsPayload:
        return parse_events_payload(await self._get_json(self.events_path))

    async def fetch_battery(self) -> BatteryPayload:
        return parse_battery_payload(await self._get_json(self.battery_path))

    async def _get_json(self, path: str) -> Any:
        try:
            response = await self._client.get(path)
        except httpx.RequestError as exc:
            raise NetworkFailure(f"request to {path} failed: {exc}") from exc
        if not response.is_success:
            raise HttpStatusFailure(f"HTTP {response.status_code} from {path}", response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise PayloadFailure(f"invalid JSON from {path}: {exc}") from exc
