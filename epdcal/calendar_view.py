"""Calendar page instance: concurrent data loading and render-ready state.

A ``CalendarView`` corresponds to one page load. ``mount()`` starts the events
and battery fetches concurrently; each completion is applied only while the
view is still mounted, and each settles its source on the readiness
coordinator whether it succeeded or failed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, tzinfo

from .api_client import BatteryPayload, CalendarApiClient, CalendarSourceError, EventsPayload
from .calendar_grid import CalendarDay, WeekStart, build_five_week_grid
from .i18n import DEFAULT_LOCALE
from .locale_format import LocaleFormatter
from .occurrences import OccurrenceIndex, OccurrenceRecord, index_occurrences
from .readiness import DataReadinessCoordinator, DataSource, ReadinessState, pending_sources

LOGGER = logging.getLogger("epdcal.calendar_view")

DEFAULT_DISPLAY_TIMEZONE = "Asia/Seoul"


def _now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class CalendarSnapshot:
    """Immutable view of the page state for rendering."""

    locale: str
    today: datetime
    week_start: WeekStart
    display_timezone: str
    days: tuple[CalendarDay, ...]
    events_by_date: dict[str, list[OccurrenceRecord]]
    battery_percent: float | None
    error: str | None
    last_updated_at: datetime | None
    readiness: ReadinessState
    ready: bool


class CalendarView:
    """Own the per-page state and drive the two data-source fetches."""

    def __init__(
        self,
        api: CalendarApiClient,
        *,
        locale: str = DEFAULT_LOCALE,
        week_start: WeekStart = WeekStart.MONDAY,
        display_timezone: str = DEFAULT_DISPLAY_TIMEZONE,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._api = api
        self._tz = tz
        self._clock = clock or _now
        self._logger = logger or LOGGER
        self.formatter = LocaleFormatter(locale, tz)
        self._today = self.formatter.localize(self._clock())
        self._week_start = week_start
        self._display_timezone = display_timezone
        self._events_by_date: OccurrenceIndex = {}
        self._events_failed = False
        self._battery_percent: float | None = None
        self._last_updated_at: datetime | None = None
        self._mounted = False
        self._tasks: tuple[asyncio.Task, ...] = ()
        self._grid_key: tuple | None = None
        self._grid: tuple[CalendarDay, ...] = ()
        self.readiness = DataReadinessCoordinator(logger=self._logger)

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def ready(self) -> bool:
        return self.readiness.ready

    @property
    def today(self) -> datetime:
        return self._today

    @property
    def week_start(self) -> WeekStart:
        return self._week_start

    @property
    def days(self) -> tuple[CalendarDay, ...]:
        key = (self._today.date(), self._week_start, self.formatter.identifier)
        if key != self._grid_key:
            self._grid = build_five_week_grid(self._today.date(), self._week_start, self.formatter)
            self._grid_key = key
        return self._grid

    def set_locale(self, locale: str) -> None:
        self.formatter = LocaleFormatter(locale, self._tz)

    def mount(self) -> None:
        """Start both fetches; must be called from a running event loop, once."""
        if self._tasks:
            raise RuntimeError("CalendarView can only be mounted once")
        self._mounted = True
        self._tasks = (
            asyncio.create_task(self._load_events(), name="epdcal-events"),
            asyncio.create_task(self._load_battery(), name="epdcal-battery"),
        )

    def unmount(self) -> None:
        if not self._mounted:
            return
        self._mounted = False
        pending = pending_sources(self.readiness.state)
        if pending:
            self._logger.info(
                "Calendar view torn down before %s settled",
                ", ".join(source.value for source in pending),
            )
        self.readiness.teardown()

    async def wait_ready(self) -> None:
        await self.readiness.wait_ready()

    @property
    def pending_tasks(self) -> tuple[asyncio.Task, ...]:
        return tuple(task for task in self._tasks if not task.done())

    async def wait_settled(self) -> None:
        """Wait for both fetch tasks to finish, mounted or not."""
        if self._tasks:
            await asyncio.gather(*self._tasks)

    def snapshot(self) -> CalendarSnapshot:
        return CalendarSnapshot(
            locale=self.formatter.locale,
            today=self._today,
            week_start=self._week_start,
            display_timezone=self._display_timezone,
            days=self.days,
            events_by_date={key: list(records) for key, records in self._events_by_date.items()},
            battery_percent=self._battery_percent,
            error=self.formatter.t("calendar.error.load") if self._events_failed else None,
            last_updated_at=self._last_updated_at,
            readiness=self.readiness.state,
            ready=self.readiness.ready,
        )

    async def _load_events(self) -> None:
        try:
            payload = await self._api.fetch_events()
            if not self._mounted:
                return
            self._apply_events(payload)
        except CalendarSourceError as exc:
            if self._mounted:
                self._logger.warning("Calendar events fetch failed: %s", exc)
                self._events_failed = True
                self.readiness.fail(DataSource.EVENTS)
            return
        except Exception:  # pylint: disable=broad-except
            if self._mounted:
                self._logger.exception("Calendar events load crashed")
                self._events_failed = True
                self.readiness.fail(DataSource.EVENTS)
            return
        self.readiness.succeed(DataSource.EVENTS)

    async def _load_battery(self) -> None:
        try:
            payload = await self._api.fetch_battery()
            if not self._mounted:
                return
            self._apply_battery(payload)
        except CalendarSourceError as exc:
            if self._mounted:
                self._logger.debug("Battery fetch failed: %s", exc)
                self.readiness.fail(DataSource.BATTERY)
            return
        except Exception:  # pylint: disable=broad-except
            if self._mounted:
                self._logger.exception("Battery load crashed")
                self.readiness.fail(DataSource.BATTERY)
            return
        self.readiness.succeed(DataSource.BATTERY)

    def _apply_events(self, payload: EventsPayload) -> None:
        # Index first so a bad payload leaves the previous state untouched.
        events_by_date = index_occurrences(payload.occurrences, self._tz)
        self._week_start = payload.week_start
        if payload.display_timezone:
            self._display_timezone = payload.display_timezone
        self._events_by_date = events_by_date
        self._last_updated_at = self.formatter.localize(self._clock())
        self._events_failed = False
        self._logger.debug(
            "Indexed %d occurrence(s) across %d day(s)",
            len(payload.occurrences),
            len(self._events_by_date),
        )

    def _apply_battery(self, payload: BatteryPayload) -> None:
        self._battery_percent = payload.percent
