"""Support for DUCO ventilation boost switches."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from homeassistant.components.switch import SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN, SIGNAL_NODE_ADDED
from .entity import DucoEntity
from .exceptions import DucoError, DucoNoDataYetError
from .reconciler import DucoNode, DucoReconciler

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up DUCO switches from a config entry."""
    reconciler: DucoReconciler = hass.data[DOMAIN][config_entry.entry_id]

    @callback
    def async_add_node(node: DucoNode) -> None:
        _LOGGER.debug("Adding ventilation switch for %s", node.name)
        async_add_entities([DucoVentilationSwitch(node)])

    config_entry.async_on_unload(
        async_dispatcher_connect(
            hass, SIGNAL_NODE_ADDED.format(config_entry.entry_id), async_add_node
        )
    )

    async_add_entities(
        DucoVentilationSwitch(node) for node in reconciler.nodes.values()
    )


class DucoVentilationSwitch(DucoEntity, SwitchEntity):
    """Boost switch: on is HIGH ventilation, off hands control back to AUTO."""

    _key = "ventilation"
    _attr_icon = "mdi:fan"

    @property
    def name(self) -> str:
        return f"{self._node.name} Ventilation"

    @property
    def available(self) -> bool:
        return self.is_on is not None

    @property
    def is_on(self) -> bool | None:
        controller = self._node.controller
        if controller is None:
            return self._node.state.is_on
        try:
            return controller.is_on()
        except DucoNoDataYetError:
            return None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        node = self._node
        attrs: dict[str, Any] = {
            "host": node.endpoint.host,
            "node": node.endpoint.node,
            "responding": node.state.responding,
        }
        if node.controller is not None:
            attrs["poller_state"] = node.controller.state.status.value
        attrs.update(
            (f"config_{name}", value)
            for name, value in dataclasses.asdict(node.config).items()
            if name not in ("node", "location")
        )
        return attrs

    async def async_turn_on(self, **kwargs: Any) -> None:
        await self._async_set_on(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        await self._async_set_on(False)

    async def _async_set_on(self, value: bool) -> None:
        controller = self._node.controller
        if controller is None:
            raise HomeAssistantError(f"{self._node.name} is not being tracked")
        try:
            await controller.async_set_on(value)
        except DucoError as err:
            raise HomeAssistantError(
                f"Could not change ventilation of {self._node.name}: {err}"
            ) from err
        self._node.state.assume_on(value)
