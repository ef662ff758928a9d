"""Support for DUCO fan speed, CO2 and humidity sensors."""

from __future__ import annotations

import logging

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONCENTRATION_PARTS_PER_MILLION, PERCENTAGE
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN, SIGNAL_NODE_ADDED
from .entity import DucoEntity
from .models import DeviceType
from .reconciler import DucoNode, DucoReconciler

_LOGGER = logging.getLogger(__name__)


def _sensors_for(node: DucoNode) -> list[DucoSensor]:
    """Fan speed for every node, plus the valve's own measurement."""
    sensors: list[DucoSensor] = [DucoRotationSpeedSensor(node)]
    if node.classification.type is DeviceType.VLVCO2:
        sensors.append(DucoCarbonDioxideSensor(node))
    elif node.classification.type is DeviceType.VLVRH:
        sensors.append(DucoHumiditySensor(node))
    return sensors


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up DUCO sensors from a config entry."""
    reconciler: DucoReconciler = hass.data[DOMAIN][config_entry.entry_id]

    @callback
    def async_add_node(node: DucoNode) -> None:
        _LOGGER.debug("Adding sensors for %s", node.name)
        async_add_entities(_sensors_for(node))

    config_entry.async_on_unload(
        async_dispatcher_connect(
            hass, SIGNAL_NODE_ADDED.format(config_entry.entry_id), async_add_node
        )
    )

    async_add_entities(
        sensor
        for node in reconciler.nodes.values()
        for sensor in _sensors_for(node)
    )


class DucoSensor(DucoEntity, SensorEntity):
    """Base for a value pushed into the node state."""

    _attr_state_class = SensorStateClass.MEASUREMENT
    _label: str = ""

    @property
    def name(self) -> str:
        return f"{self._node.name} {self._label}"

    @property
    def available(self) -> bool:
        return self.native_value is not None


class DucoRotationSpeedSensor(DucoSensor):
    """Actual fan speed in percent."""

    _key = "rotation_speed"
    _label = "Fan Speed"
    _attr_icon = "mdi:fan"
    _attr_native_unit_of_measurement = PERCENTAGE

    @property
    def native_value(self) -> int | None:
        return self._node.state.rotation_speed


class DucoCarbonDioxideSensor(DucoSensor):
    _key = "carbon_dioxide"
    _label = "CO2"
    _attr_device_class = SensorDeviceClass.CO2
    _attr_native_unit_of_measurement = CONCENTRATION_PARTS_PER_MILLION

    @property
    def native_value(self) -> int | None:
        return self._node.state.carbon_dioxide_level


class DucoHumiditySensor(DucoSensor):
    _key = "humidity"
    _label = "Humidity"
    _attr_device_class = SensorDeviceClass.HUMIDITY
    _attr_native_unit_of_measurement = PERCENTAGE

    @property
    def native_value(self) -> int | None:
        return self._node.state.relative_humidity
