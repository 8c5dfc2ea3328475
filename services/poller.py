"""Fixed-interval polling of the readings endpoint and dashboard state."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from functools import lru_cache
from typing import Callable, List, Optional, Set, Tuple

from models.records import Reading
from services.client import FETCH_ERROR_MESSAGE, FetchError, ReadingsClient
from services.projector import DashboardSummary, Projector
from settings import get_settings

logger = logging.getLogger(__name__)

StateListener = Callable[["DashboardState"], None]


@dataclass(frozen=True)
class DashboardState:
    """Immutable snapshot of everything the dashboard displays."""

    readings: Tuple[Reading, ...] = ()
    loading: bool = False
    initial_loading: bool = True
    error: Optional[str] = None
    last_refresh: datetime = field(default_factory=datetime.now)

    def summary(self, projector: Optional[Projector] = None) -> DashboardSummary:
        return (projector or Projector()).project(self.readings)


class ReadingsPoller:
    """Refreshes the dashboard state from the endpoint on a fixed cadence.

    Every tick starts a new refresh without waiting for the previous one, so
    refreshes overlap when the endpoint is slower than the interval.
    """

    def __init__(self, client: ReadingsClient, interval: float) -> None:
        self.client = client
        self.interval = interval
        self._state = DashboardState()
        self._listeners: List[StateListener] = []
        self._timer: Optional[asyncio.Task[None]] = None
        self._in_flight: Set[asyncio.Task[DashboardState]] = set()

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def _set_state(self, state: DashboardState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Dashboard state listener failed")

    async def refresh(self) -> DashboardState:
        """Run one fetch cycle and return the resulting state."""
        self._set_state(replace(self._state, loading=True))
        state: Optional[DashboardState] = None
        try:
            readings = await self.client.fetch_readings()
        except FetchError as exc:
            state = replace(
                self._state,
                loading=False,
                initial_loading=False,
                error=str(exc),
            )
        else:
            state = replace(
                self._state,
                readings=tuple(readings),
                loading=False,
                initial_loading=False,
                error=None,
                last_refresh=datetime.now(),
            )
        finally:
            if state is None:
                # Unexpected failure or cancellation; the exception propagates.
                state = replace(
                    self._state,
                    loading=False,
                    initial_loading=False,
                    error=FETCH_ERROR_MESSAGE,
                )
            self._set_state(state)
        return state

    def start(self) -> None:
        """Refresh now and then every ``interval`` seconds on the running loop."""
        if self.running:
            return
        self._timer = asyncio.get_running_loop().create_task(self._run())
        logger.info("Readings poller started", extra={"endpoint": self.client.endpoint_url})

    async def stop(self) -> None:
        """Clear the timer, let in-flight refreshes finish and close the client."""
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                pass
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)
        await self.client.close()
        logger.info("Readings poller stopped", extra={"endpoint": self.client.endpoint_url})

    async def _run(self) -> None:
        while True:
            self._spawn_refresh()
            await asyncio.sleep(self.interval)

    def _spawn_refresh(self) -> None:
        if self._in_flight:
            logger.debug(
                "Starting refresh while previous requests are pending",
                extra={"in_flight": len(self._in_flight)},
            )
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        task.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(task: asyncio.Task[DashboardState]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Refresh failed unexpectedly", exc_info=exc, extra={"reason": type(exc).__name__})


@lru_cache
def build_default_poller() -> ReadingsPoller:
    """Factory that wires the poller with the fixed endpoint and cadence."""
    settings = get_settings()
    client = ReadingsClient(settings.endpoint_url, timeout=settings.request_timeout)
    return ReadingsPoller(client=client, interval=settings.poll_interval)
