"""Per-node polling of the ventilation level."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from .api import DucoApi
from .const import POLL_INTERVAL_PER_CONTROLLER
from .exceptions import DucoError, DucoNoDataYetError
from .models import (
    POLLER_UNKNOWN,
    DeviceClassification,
    DeviceEndpoint,
    DeviceType,
    NodeInfo,
    PollerState,
    PollerStatus,
    VentilationLevel,
    level_from_overrule,
    overrule_from_level,
)
from .registry import ControllerRegistry

_LOGGER = logging.getLogger(__name__)


class DeviceListener(Protocol):
    """Receiver of the values a controller reads from its node."""

    def set_on(self, value: bool) -> None: ...

    def set_rotation_speed(self, value: int) -> None: ...

    def set_carbon_dioxide_level(self, value: int) -> None: ...

    def set_current_relative_humidity(self, value: int) -> None: ...

    def flag_as_not_responding(self) -> None: ...


class RepeatingTimer:
    """Runs ``action`` every ``interval`` seconds until cancelled.

    The next delay is only armed after the previous run has settled, so
    runs never overlap. Rescheduling during a run takes effect when that
    run finishes.
    """

    def __init__(self, action: Callable[[], Awaitable[None]]) -> None:
        self._action = action
        self._interval: float | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopped = True

    @property
    def interval(self) -> float | None:
        return self._interval

    @property
    def scheduled(self) -> bool:
        """Whether a future run is armed."""
        return self._handle is not None

    @property
    def running(self) -> bool:
        return self._task is not None

    def reschedule(self, interval: float, delay: float | None = None) -> None:
        """Restart the countdown with a new interval.

        ``delay`` overrides the wait before the first run only.
        """
        self._stopped = False
        self._interval = interval
        self._cancel_handle()
        if self._task is None:
            self._arm(interval if delay is None else delay)

    def cancel(self) -> None:
        """Stop future runs; a run already in progress is left to finish."""
        self._stopped = True
        self._cancel_handle()

    def _arm(self, delay: float) -> None:
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(delay, self._fire)

    def _cancel_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        try:
            await self._action()
        except Exception:
            _LOGGER.exception("Unexpected error in scheduled run")
        finally:
            self._task = None
            if not self._stopped and self._handle is None:
                self._arm(self._interval)


class DucoController:
    """Tracks the ventilation level of a single node.

    The poll interval grows with the number of active controllers so the
    communication print's read queue is never flooded.
    """

    def __init__(
        self,
        api: DucoApi,
        registry: ControllerRegistry,
        endpoint: DeviceEndpoint,
        classification: DeviceClassification,
        listener: DeviceListener,
        initially_on: bool | None = None,
    ) -> None:
        self._api = api
        self._registry = registry
        self._endpoint = endpoint
        self._classification = classification
        self._listener = listener
        self._initially_on = initially_on

        self._state: PollerState = POLLER_UNKNOWN
        self._interval_based_on_count = 0
        self._timer = RepeatingTimer(self.async_refresh)
        self._closed = False

    @property
    def endpoint(self) -> DeviceEndpoint:
        return self._endpoint

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def level(self) -> VentilationLevel | None:
        return self._state.level

    @property
    def interval(self) -> float | None:
        """Seconds between polls as currently scheduled."""
        return self._timer.interval

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Poll immediately, then keep polling on the computed interval."""
        if self._closed:
            return
        self._timer.reschedule(self._compute_interval(), delay=0)

    def cleanup(self) -> None:
        """Stop polling. Safe to call more than once."""
        self._closed = True
        self._timer.cancel()

    # ------------------------------------------------------------------
    #  Polling
    # ------------------------------------------------------------------

    async def async_refresh(self) -> None:
        """Read the node once and push what changed to the listener."""
        if self._closed:
            return

        if self._registry.count != self._interval_based_on_count:
            self._restart_timer()

        try:
            info = await self._api.async_get_node_info(self._endpoint.node)
        except DucoError as err:
            if not self._closed:
                self._handle_failure(err)
            return

        if not self._closed:
            self._handle_node_info(info)

    def _handle_node_info(self, info: NodeInfo) -> None:
        observation = info.observation

        # Continuous values are pushed on every successful poll.
        self._listener.set_rotation_speed(observation.actual_speed)
        device_type = self._classification.type
        if device_type is DeviceType.VLVCO2 and observation.co2 is not None:
            self._listener.set_carbon_dioxide_level(observation.co2)
        elif (
            device_type is DeviceType.VLVRH
            and observation.relative_humidity is not None
        ):
            self._listener.set_current_relative_humidity(
                observation.relative_humidity
            )

        level = level_from_overrule(observation.overrule)
        if level is None:
            _LOGGER.warning(
                "[%s] Ignoring unknown overrule value %s",
                self._endpoint,
                observation.overrule,
            )
            # A successful read ends the degraded state.
            if self._state.status is PollerStatus.DEGRADED:
                self._state = PollerState(PollerStatus.SYNCED, self._state.level)
            return

        previous = self._state
        self._state = PollerState(PollerStatus.SYNCED, level)

        if level is previous.level:
            _LOGGER.info(
                "[%s] Ventilation level is still %s", self._endpoint, level
            )
        elif previous.status is PollerStatus.UNKNOWN:
            _LOGGER.info(
                "[%s] Ventilation level after startup = %s",
                self._endpoint,
                level,
            )
        else:
            _LOGGER.info(
                "[%s] New ventilation level = %s", self._endpoint, level
            )
            self._listener.set_on(level is VentilationLevel.HIGH)

    def _handle_failure(self, err: DucoError) -> None:
        if self._state.status is PollerStatus.UNKNOWN:
            _LOGGER.error(
                "[%s] Could not read ventilation level and no fallback "
                "is available: %s",
                self._endpoint,
                err,
            )
        else:
            self._state = PollerState(PollerStatus.DEGRADED, self._state.level)
            _LOGGER.info(
                "[%s] Could not read ventilation level, falling back to "
                "%s which may be out of date: %s",
                self._endpoint,
                self._state.level,
                err,
            )

        self._listener.flag_as_not_responding()

    # ------------------------------------------------------------------
    #  Reads / writes from the host
    # ------------------------------------------------------------------

    def is_on(self) -> bool:
        """Whether the node is boosted (HIGH).

        Raises :class:`DucoNoDataYetError` when nothing was read yet and
        no initial value was supplied.
        """
        if self._state.status is PollerStatus.UNKNOWN:
            if self._initially_on is not None:
                return self._initially_on
            raise DucoNoDataYetError(
                f"No ventilation level available yet for {self._endpoint}"
            )
        return self._state.level is VentilationLevel.HIGH

    async def async_set_on(self, on: bool) -> None:
        """Boost the node (HIGH) or hand it back to AUTO."""
        level = VentilationLevel.HIGH if on else VentilationLevel.AUTO
        value = overrule_from_level(level)

        _LOGGER.info(
            "[%s] Setting ventilation level to '%s'", self._endpoint, level
        )

        try:
            await self._api.async_set_overrule(self._endpoint.node, value)
        except DucoError:
            _LOGGER.error(
                "[%s] Could not set ventilation level to '%s'",
                self._endpoint,
                level,
            )
            raise

        self._state = PollerState(PollerStatus.SYNCED, level)
        _LOGGER.info(
            "[%s] Ventilation level set to '%s' (%s)",
            self._endpoint,
            level,
            value,
        )

        # No point reading back a value we just wrote.
        if not self._closed:
            self._restart_timer()

    # ------------------------------------------------------------------
    #  Interval
    # ------------------------------------------------------------------

    def _compute_interval(self) -> float:
        self._interval_based_on_count = self._registry.count
        return max(self._interval_based_on_count, 1) * POLL_INTERVAL_PER_CONTROLLER

    def _restart_timer(self) -> None:
        self._timer.reschedule(self._compute_interval())
