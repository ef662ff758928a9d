"""Shared fixtures for DUCO tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from custom_components.duco.models import (
    CarbonDioxideValveConfig,
    DeviceClassification,
    DeviceEndpoint,
    DeviceType,
    HumidityValveConfig,
    NodeConfig,
    PollerState,
    PollerStatus,
    VentilationLevel,
)
from custom_components.duco.reconciler import DucoNode, device_identity
from custom_components.duco.state import DucoNodeState


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    """Enable custom integrations for all tests."""
    yield


@pytest.fixture
def box_config() -> NodeConfig:
    return NodeConfig(
        node=1,
        auto_min=10,
        auto_max=80,
        capacity=325,
        manual1=50,
        manual2=75,
        manual3=100,
        manual_timeout=15,
        location="Attic",
    )


@pytest.fixture
def rh_config() -> HumidityValveConfig:
    return HumidityValveConfig(
        node=2,
        auto_min=10,
        auto_max=80,
        capacity=325,
        manual1=50,
        manual2=75,
        manual3=100,
        manual_timeout=15,
        location="Bathroom",
        setpoint=65,
        delta=10,
    )


@pytest.fixture
def co2_config() -> CarbonDioxideValveConfig:
    return CarbonDioxideValveConfig(
        node=3,
        auto_min=10,
        auto_max=80,
        capacity=325,
        manual1=50,
        manual2=75,
        manual3=100,
        manual_timeout=15,
        location="Bedroom",
        setpoint=850,
        temp_dependent=0,
    )


@pytest.fixture
def rh_node(rh_config) -> DucoNode:
    """Return a tracked humidity valve with a mocked controller."""
    controller = MagicMock()
    controller.is_on = MagicMock(return_value=False)
    controller.state = PollerState(PollerStatus.SYNCED, VentilationLevel.AUTO)
    return DucoNode(
        identity=device_identity("RS1521003412"),
        serial="RS1521003412",
        software_version="16036.13.3.0",
        endpoint=DeviceEndpoint("192.168.1.10", 2),
        classification=DeviceClassification(DeviceType.VLVRH, "Bathroom"),
        config=rh_config,
        state=DucoNodeState(is_on=False, rotation_speed=20),
        controller=controller,
    )


@pytest.fixture
def co2_node(co2_config) -> DucoNode:
    """Return a tracked CO2 valve with a mocked controller."""
    controller = MagicMock()
    controller.is_on = MagicMock(return_value=True)
    controller.state = PollerState(PollerStatus.SYNCED, VentilationLevel.HIGH)
    return DucoNode(
        identity=device_identity("RS1521009999"),
        serial="RS1521009999",
        software_version="16036.13.3.0",
        endpoint=DeviceEndpoint("192.168.1.10", 3),
        classification=DeviceClassification(DeviceType.VLVCO2, "Bedroom"),
        config=co2_config,
        state=DucoNodeState(is_on=True, rotation_speed=100),
        controller=controller,
    )
