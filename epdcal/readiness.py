"""Aggregate capture-readiness across independently fetched data sources.

Each source settles exactly once, either succeeded or failed. The page is
ready once every source has settled; readiness is latched and never reverts
for the lifetime of the coordinator.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum

LOGGER = logging.getLogger("epdcal.readiness")


class DataSource(StrEnum):
    EVENTS = "events"
    BATTERY = "battery"


class SourceStatus(StrEnum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def settled(self) -> bool:
        return self is not SourceStatus.PENDING


@dataclass(frozen=True)
class ReadinessState:
    """Immutable view of per-source settlement."""

    events: SourceStatus = SourceStatus.PENDING
    battery: SourceStatus = SourceStatus.PENDING

    def status(self, source: DataSource) -> SourceStatus:
        return getattr(self, source.value)

    @property
    def settled_sources(self) -> tuple[DataSource, ...]:
        return tuple(source for source in DataSource if self.status(source).settled)

    @property
    def all_settled(self) -> bool:
        return self.events.settled and self.battery.settled


@dataclass(frozen=True)
class ReadinessChange:
    """Result metadata from a settlement event."""

    changed: bool
    ready: bool
    source: DataSource


class DataReadinessCoordinator:
    """Own the per-source flags for one page instance and latch the ready signal."""

    def __init__(
        self,
        *,
        on_ready: Callable[[], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._state = ReadinessState()
        self._ready = False
        self._torn_down = False
        self._on_ready = on_ready
        self._logger = logger or LOGGER
        self._ready_event: asyncio.Event | None = None

    @property
    def state(self) -> ReadinessState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def succeed(self, source: DataSource) -> ReadinessChange:
        return self.settle(source, succeeded=True)

    def fail(self, source: DataSource) -> ReadinessChange:
        return self.settle(source, succeeded=False)

    def settle(self, source: DataSource, *, succeeded: bool) -> ReadinessChange:
        if self._torn_down:
            self._logger.debug("Discarding %s settlement after teardown", source)
            return ReadinessChange(False, self._ready, source)
        if self._state.status(source).settled:
            self._logger.warning("Ignoring repeated settlement for %s source", source)
            return ReadinessChange(False, self._ready, source)
        status = SourceStatus.SUCCEEDED if succeeded else SourceStatus.FAILED
        if source is DataSource.EVENTS:
            self._state = ReadinessState(events=status, battery=self._state.battery)
        else:
            self._state = ReadinessState(events=self._state.events, battery=status)
        if not self._ready and self._state.all_settled:
            self._latch_ready()
        return ReadinessChange(True, self._ready, source)

    def teardown(self) -> None:
        """Mark the owning page instance destroyed; later settlements are dropped."""
        self._torn_down = True

    async def wait_ready(self) -> None:
        if self._ready:
            return
        if self._ready_event is None:
            self._ready_event = asyncio.Event()
        await self._ready_event.wait()

    def _latch_ready(self) -> None:
        self._ready = True
        self._logger.debug("All sources settled (events=%s, battery=%s)", self._state.events, self._state.battery)
        if self._ready_event is not None:
            self._ready_event.set()
        if self._on_ready:
            try:
                self._on_ready()
            except Exception:  # pylint: disable=broad-except
                self._logger.exception("Readiness callback failed")


def pending_sources(state: ReadinessState, sources: Iterable[DataSource] = tuple(DataSource)) -> list[DataSource]:
    return [source for source in sources if not state.status(source).settled]
