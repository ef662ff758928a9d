"""Tests for the DUCO sensor entities."""

from __future__ import annotations

from unittest.mock import MagicMock

from homeassistant.components.sensor import SensorDeviceClass, SensorStateClass
from homeassistant.const import CONCENTRATION_PARTS_PER_MILLION, PERCENTAGE
from homeassistant.helpers.dispatcher import async_dispatcher_send
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.duco.const import DOMAIN, SIGNAL_NODE_ADDED
from custom_components.duco.models import DeviceClassification, DeviceType
from custom_components.duco.sensor import (
    DucoCarbonDioxideSensor,
    DucoHumiditySensor,
    DucoRotationSpeedSensor,
    _sensors_for,
    async_setup_entry,
)


class TestSensorsForNode:
    """Test which sensors a node gets."""

    def test_humidity_valve(self, rh_node):
        sensors = _sensors_for(rh_node)

        assert [type(s) for s in sensors] == [
            DucoRotationSpeedSensor,
            DucoHumiditySensor,
        ]

    def test_co2_valve(self, co2_node):
        sensors = _sensors_for(co2_node)

        assert [type(s) for s in sensors] == [
            DucoRotationSpeedSensor,
            DucoCarbonDioxideSensor,
        ]

    def test_box(self, rh_node, box_config):
        rh_node.classification = DeviceClassification(DeviceType.BOX, "Attic")
        rh_node.config = box_config

        assert [type(s) for s in _sensors_for(rh_node)] == [DucoRotationSpeedSensor]


class TestRotationSpeedSensor:
    def test_value(self, rh_node):
        sensor = DucoRotationSpeedSensor(rh_node)
        assert sensor.native_value == 20
        assert sensor.native_unit_of_measurement == PERCENTAGE
        assert sensor.state_class == SensorStateClass.MEASUREMENT

    def test_name_and_unique_id(self, rh_node):
        sensor = DucoRotationSpeedSensor(rh_node)
        assert sensor.name == "Bathroom Humidity Control Valve Fan Speed"
        assert sensor.unique_id == f"{rh_node.identity}_rotation_speed"

    def test_follows_pushed_value(self, rh_node):
        rh_node.state.set_rotation_speed(65)
        assert DucoRotationSpeedSensor(rh_node).native_value == 65

    def test_unavailable_without_value(self, rh_node):
        rh_node.state.rotation_speed = None
        assert DucoRotationSpeedSensor(rh_node).available is False


class TestHumiditySensor:
    def test_unavailable_until_first_reading(self, rh_node):
        sensor = DucoHumiditySensor(rh_node)
        assert sensor.native_value is None
        assert sensor.available is False

    def test_value(self, rh_node):
        rh_node.state.set_current_relative_humidity(58)
        sensor = DucoHumiditySensor(rh_node)

        assert sensor.native_value == 58
        assert sensor.available is True
        assert sensor.device_class == SensorDeviceClass.HUMIDITY
        assert sensor.name == "Bathroom Humidity Control Valve Humidity"

    def test_keeps_last_value_when_not_responding(self, rh_node):
        rh_node.state.set_current_relative_humidity(58)
        rh_node.state.flag_as_not_responding()

        assert DucoHumiditySensor(rh_node).native_value == 58


class TestCarbonDioxideSensor:
    def test_value(self, co2_node):
        co2_node.state.set_carbon_dioxide_level(920)
        sensor = DucoCarbonDioxideSensor(co2_node)

        assert sensor.native_value == 920
        assert sensor.device_class == SensorDeviceClass.CO2
        assert sensor.native_unit_of_measurement == CONCENTRATION_PARTS_PER_MILLION
        assert sensor.unique_id == f"{co2_node.identity}_carbon_dioxide"


class TestSensorPlatformSetup:
    async def test_adds_sensors_for_known_and_discovered_nodes(
        self, hass, rh_node, co2_node
    ):
        entry = MockConfigEntry(domain=DOMAIN, data={})
        entry.add_to_hass(hass)
        reconciler = MagicMock()
        reconciler.nodes = {rh_node.identity: rh_node}
        hass.data[DOMAIN] = {entry.entry_id: reconciler}
        add_entities = MagicMock()

        await async_setup_entry(hass, entry, add_entities)

        known = list(add_entities.call_args.args[0])
        assert [type(s) for s in known] == [
            DucoRotationSpeedSensor,
            DucoHumiditySensor,
        ]

        async_dispatcher_send(hass, SIGNAL_NODE_ADDED.format(entry.entry_id), co2_node)
        await hass.async_block_till_done()

        added = add_entities.call_args.args[0]
        assert [type(s) for s in added] == [
            DucoRotationSpeedSensor,
            DucoCarbonDioxideSensor,
        ]
