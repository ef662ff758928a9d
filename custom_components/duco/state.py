"""Per-node values pushed by a controller and read by entities."""

from __future__ import annotations

from collections.abc import Callable


class DucoNodeState:
    """Host-side record of a node, fed by its controller.

    Values survive controller replacement, so a node that moves to a new
    address keeps its last known state.
    """

    def __init__(
        self, is_on: bool = False, rotation_speed: int | None = None
    ) -> None:
        self.is_on = is_on
        self.rotation_speed = rotation_speed
        self.carbon_dioxide_level: int | None = None
        self.relative_humidity: int | None = None
        self.responding = True
        self._listeners: list[Callable[[], None]] = []

    def async_add_listener(
        self, update_callback: Callable[[], None]
    ) -> Callable[[], None]:
        """Listen for updates; returns a function that removes the listener."""
        self._listeners.append(update_callback)

        def remove_listener() -> None:
            if update_callback in self._listeners:
                self._listeners.remove(update_callback)

        return remove_listener

    def set_on(self, value: bool) -> None:
        self.is_on = value
        self._mark_responding()

    def assume_on(self, value: bool) -> None:
        """Record a written on/off value without claiming the node answered."""
        self.is_on = value
        self._notify()

    def set_rotation_speed(self, value: int) -> None:
        self.rotation_speed = value
        self._mark_responding()

    def set_carbon_dioxide_level(self, value: int) -> None:
        self.carbon_dioxide_level = value
        self._mark_responding()

    def set_current_relative_humidity(self, value: int) -> None:
        self.relative_humidity = value
        self._mark_responding()

    def flag_as_not_responding(self) -> None:
        self.responding = False
        self._notify()

    def _mark_responding(self) -> None:
        self.responding = True
        self._notify()

    def _notify(self) -> None:
        for update_callback in list(self._listeners):
            update_callback()
