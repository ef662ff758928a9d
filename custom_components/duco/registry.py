"""Count of active node controllers, shared by every poller."""

from __future__ import annotations

import logging

_LOGGER = logging.getLogger(__name__)


class ControllerRegistry:
    """Number of node controllers currently polling.

    Pollers only read :attr:`count` to size their interval; the
    reconciler is the only writer.
    """

    def __init__(self) -> None:
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    def register(self) -> None:
        self._count += 1
        _LOGGER.debug("Controller registered, %s active", self._count)

    def unregister(self) -> None:
        if self._count == 0:
            raise ValueError("No controller is registered")
        self._count -= 1
        _LOGGER.debug("Controller unregistered, %s active", self._count)
