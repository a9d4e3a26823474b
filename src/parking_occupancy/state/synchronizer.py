"""Periodic occupancy refresh with per-consumer cadence and connectivity tracking."""

import asyncio
import logging
import time
from datetime import datetime
from typing import Generic, Optional, TypeVar

from ..gateway.client import Direction, OccupancyGateway, TransportError
from ..layout.partitioner import (
    BASEMENTS,
    SECTION_SIZE,
    BasementLayout,
    ExpandedSectionSet,
    build_basement_layout,
    zone_token,
)
from ..metrics import record_refresh, record_refresh_result, update_spot_counts
from .models import (
    ConnectivityState,
    DirectionalCounts,
    OccupancySnapshot,
    RefreshPhase,
)

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Failed to connect to parking system"
ZONES = tuple(zone_token(b) for b in BASEMENTS)

T = TypeVar("T")


class PollingConsumer(Generic[T]):
    """
    Keeps one view's data in sync with the backend on its own timer.

    Refresh lifecycle: idle -> refreshing -> success | failed.

    - Only operator-initiated refreshes raise is_refreshing; timer ticks
      are silent.
    - On success the data and connectivity are replaced together and the
      error is cleared.
    - On failure the consumer goes offline with a message and keeps the
      previous data.

    Responses to requests started before stop() or a selector change are
    discarded. Otherwise the last response to complete wins.
    """

    name = "consumer"

    def __init__(self, gateway: OccupancyGateway, interval_seconds: float):
        """
        Initialize the consumer.

        Args:
            gateway: Backend gateway to fetch from
            interval_seconds: Time between background refreshes
        """
        self.gateway = gateway
        self.interval_seconds = interval_seconds

        self.data: Optional[T] = None
        self.connectivity = ConnectivityState()
        self.phase = RefreshPhase.IDLE
        self.is_refreshing = False
        self.last_updated: Optional[datetime] = None

        self._generation = 0
        self._timer_task: Optional[asyncio.Task] = None
        self._pending: set[asyncio.Task] = set()

    async def _fetch(self) -> T:
        raise NotImplementedError

    def _on_success(self, data: T) -> None:
        """Hook for subclasses after new data is applied."""

    @property
    def has_data(self) -> bool:
        """False until the first successful fetch; callers render a no-data state."""
        return self.data is not None

    @property
    def is_running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    async def refresh(self, manual: bool = False) -> bool:
        """
        Fetch fresh data and update state.

        Errors are captured into the connectivity state and never raised.

        Args:
            manual: True for operator-initiated refreshes (shows a spinner)

        Returns:
            True if the fetch succeeded and was applied
        """
        generation = self._generation
        record_refresh(self.name, manual)

        if manual:
            self.is_refreshing = True
        self.phase = RefreshPhase.REFRESHING
        started = time.monotonic()

        try:
            data = await self._fetch()
        except TransportError as e:
            if generation != self._generation:
                logger.debug(f"Discarding failed {self.name} response from a superseded request")
                return False

            logger.error(f"Failed to refresh {self.name}: {e}")
            self.connectivity = ConnectivityState.offline(FAILURE_MESSAGE)
            self.phase = RefreshPhase.FAILED
            record_refresh_result(self.name, False, time.monotonic() - started)
            return False
        finally:
            if manual:
                self.is_refreshing = False

        if generation != self._generation:
            logger.debug(f"Discarding {self.name} response from a superseded request")
            return False

        self.data = data
        self.connectivity = ConnectivityState.online()
        self.last_updated = datetime.now()
        self.phase = RefreshPhase.SUCCESS

        record_refresh_result(self.name, True, time.monotonic() - started)
        self._on_success(data)
        return True

    async def retry(self) -> bool:
        """Re-run the fetch as an operator-initiated refresh."""
        return await self.refresh(manual=True)

    def _spawn_refresh(self, manual: bool) -> asyncio.Task:
        task = asyncio.create_task(self.refresh(manual))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run_timer(self) -> None:
        logger.info(f"Starting {self.name} refresh loop (interval: {self.interval_seconds}s)")

        while True:
            await asyncio.sleep(self.interval_seconds)
            self._spawn_refresh(manual=False)

    def start(self, manual: bool = True) -> asyncio.Task:
        """
        Fetch immediately and start the periodic timer.

        Args:
            manual: Whether the immediate fetch shows a spinner

        Returns:
            The task running the immediate fetch
        """
        if not self.is_running:
            self._timer_task = asyncio.create_task(self._run_timer())
        return self._spawn_refresh(manual)

    async def stop(self) -> None:
        """Cancel the timer; responses to requests already in flight are ignored."""
        self._generation += 1
        self.phase = RefreshPhase.IDLE

        if self._timer_task:
            self._timer_task.cancel()
            try:
                await self._timer_task
            except asyncio.CancelledError:
                pass
            self._timer_task = None
            logger.info(f"Stopped {self.name} refresh loop")

    async def restart(self) -> asyncio.Task:
        """Drop in-flight results and re-fetch now, restarting the timer if it was running."""
        was_running = self.is_running
        await self.stop()
        if was_running:
            return self.start(manual=False)
        return self._spawn_refresh(manual=False)

    async def wait_pending(self) -> None:
        """Wait for refreshes already in flight to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


class SummarySynchronizer(PollingConsumer[OccupancySnapshot]):
    """Facility-wide availability for the home summary."""

    name = "summary"

    async def _fetch(self) -> OccupancySnapshot:
        return await self.gateway.fetch_stats()

    def _on_success(self, data: OccupancySnapshot) -> None:
        update_spot_counts(self.name, total=data.total, available=data.available)

    @property
    def snapshot(self) -> Optional[OccupancySnapshot]:
        return self.data


class MapSynchronizer(PollingConsumer[OccupancySnapshot]):
    """Spot-level detail for the live map, scoped to a selected basement."""

    name = "map"

    def __init__(
        self,
        gateway: OccupancyGateway,
        interval_seconds: float,
        basement: int = 1,
        section_names: Optional[dict[int, list[str]]] = None,
        section_size: int = SECTION_SIZE,
    ):
        """
        Initialize the map consumer.

        Args:
            gateway: Backend gateway to fetch from
            interval_seconds: Time between background refreshes
            basement: Initially selected basement (1 or 2)
            section_names: Per-basement ordered section name tables
            section_size: Spots per section
        """
        super().__init__(gateway, interval_seconds)
        self.basement = _validate_basement(basement)
        self.section_names = section_names or {}
        self.section_size = section_size
        self.expanded_sections = ExpandedSectionSet()

    async def _fetch(self) -> OccupancySnapshot:
        return await self.gateway.fetch_stats()

    def _on_success(self, data: OccupancySnapshot) -> None:
        update_spot_counts(self.name, total=data.total, available=data.available)

    @property
    def snapshot(self) -> Optional[OccupancySnapshot]:
        return self.data

    async def select_basement(self, basement: int) -> None:
        """Switch basement, re-fetching immediately and restarting the timer."""
        basement = _validate_basement(basement)
        if basement == self.basement:
            return

        logger.info(f"Map basement changed: B{self.basement} -> B{basement}")
        self.basement = basement
        await self.restart()

    def layout(self) -> BasementLayout:
        """Sections for the selected basement, rebuilt from the current snapshot."""
        spots = self.data.spots if self.data else []
        return build_basement_layout(spots, self.basement, self.section_names, self.section_size)


class DirectionalCountSynchronizer(PollingConsumer[DirectionalCounts]):
    """Per-direction free-spot counts for the selected zone."""

    name = "directions"

    def __init__(self, gateway: OccupancyGateway, interval_seconds: float, zone: str = "Zone B1"):
        super().__init__(gateway, interval_seconds)
        self.zone = _validate_zone(zone)

    async def _fetch(self) -> DirectionalCounts:
        zone = self.zone
        results = await asyncio.gather(
            *(self.gateway.fetch_directional_count(d, zone) for d in Direction),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException):
                raise result

        counts = dict(zip((d.value for d in Direction), results))
        return DirectionalCounts(zone=zone, fetched_at=datetime.now(), **counts)

    @property
    def counts(self) -> Optional[DirectionalCounts]:
        return self.data

    async def select_zone(self, zone: str) -> None:
        """Switch zone, re-fetching immediately and restarting the timer."""
        zone = _validate_zone(zone)
        if zone == self.zone:
            return

        logger.info(f"Directional zone changed: {self.zone} -> {zone}")
        self.zone = zone
        await self.restart()


def _validate_basement(basement: int) -> int:
    if basement not in BASEMENTS:
        raise ValueError(f"Unknown basement {basement}; expected one of {BASEMENTS}")
    return basement


def _validate_zone(zone: str) -> str:
    if zone not in ZONES:
        raise ValueError(f"Unknown zone '{zone}'; expected one of {ZONES}")
    return zone
