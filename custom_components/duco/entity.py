"""Base entity for the DUCO integration."""

from __future__ import annotations

from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity import Entity

from .const import DOMAIN, MANUFACTURER
from .reconciler import DucoNode


class DucoEntity(Entity):
    """Base class for all DUCO entities.

    Provides shared plumbing: unique_id, device_info, should_poll (False)
    and listener registration on the node state. The node's controller
    pushes values, so nothing is polled by Home Assistant itself.
    """

    _attr_has_entity_name = False
    _attr_should_poll = False

    # Suffix for unique_id and name, set by subclasses.
    _key: str = ""

    def __init__(self, node: DucoNode) -> None:
        """Initialise the entity."""
        self._node = node

    async def async_added_to_hass(self) -> None:
        self.async_on_remove(
            self._node.state.async_add_listener(self.async_write_ha_state)
        )

    # -- common properties ------------------------------------------------

    @property
    def unique_id(self) -> str:
        return f"{self._node.identity}_{self._key}"

    @property
    def device_info(self) -> DeviceInfo:
        node = self._node
        return DeviceInfo(
            identifiers={(DOMAIN, node.identity)},
            name=node.name,
            manufacturer=MANUFACTURER,
            model=node.type_label,
            serial_number=node.serial,
            sw_version=node.software_version,
            suggested_area=node.classification.location,
        )
