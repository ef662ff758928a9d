"""Data models for DUCO devices."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import ClassVar


class DeviceType(StrEnum):
    """Node types that can be tracked."""

    BOX = "BOX"
    VLVRH = "VLVRH"
    VLVCO2 = "VLVCO2"


class VentilationLevel(StrEnum):
    """Semantic ventilation level derived from an overrule code."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    AUTO = "AUTO"


VENTILATION_LEVELS: dict[int, VentilationLevel] = {
    100: VentilationLevel.HIGH,
    50: VentilationLevel.MEDIUM,
    0: VentilationLevel.LOW,
    255: VentilationLevel.AUTO,
}

OVERRULE_CODES: dict[VentilationLevel, int] = {
    level: code for code, level in VENTILATION_LEVELS.items()
}


def level_from_overrule(overrule: int) -> VentilationLevel | None:
    """Map a raw overrule code to a level, ``None`` for unknown codes."""
    return VENTILATION_LEVELS.get(overrule)


def overrule_from_level(level: VentilationLevel) -> int:
    return OVERRULE_CODES[level]


class PollerStatus(Enum):
    """Lifecycle of a node poller."""

    UNKNOWN = "unknown"
    SYNCED = "synced"
    DEGRADED = "degraded"


@dataclass(frozen=True, slots=True)
class PollerState:
    """Poller status plus the last ventilation level it knows about."""

    status: PollerStatus
    level: VentilationLevel | None = None


POLLER_UNKNOWN = PollerState(PollerStatus.UNKNOWN)


@dataclass(frozen=True, slots=True)
class BoardInfo:
    """Communication print identity and health."""

    serial: str
    uptime: int
    software_version: str
    mac: str
    ip: str


@dataclass(frozen=True, slots=True)
class Observation:
    """Values produced by a single poll of a node."""

    overrule: int
    actual_speed: int
    co2: int | None = None
    relative_humidity: int | None = None


@dataclass(frozen=True, slots=True)
class NodeInfo:
    """Live node information as reported by ``/nodeinfoget``."""

    node: int
    type: str
    overrule: int
    serial: str
    software_version: str
    location: str
    co2: int | None
    relative_humidity: int | None
    mode: str
    actual_speed: int

    @property
    def observation(self) -> Observation:
        return Observation(
            overrule=self.overrule,
            actual_speed=self.actual_speed,
            co2=self.co2,
            relative_humidity=self.relative_humidity,
        )


@dataclass(frozen=True, slots=True)
class NodeConfig:
    """Static node configuration; plain form is the DucoBox shape."""

    device_type: ClassVar[DeviceType] = DeviceType.BOX

    node: int
    auto_min: int
    auto_max: int
    capacity: int
    manual1: int
    manual2: int
    manual3: int
    manual_timeout: int
    location: str


@dataclass(frozen=True, slots=True)
class HumidityValveConfig(NodeConfig):
    """Configuration of a humidity controlled valve."""

    device_type: ClassVar[DeviceType] = DeviceType.VLVRH

    setpoint: int = 0
    delta: int = 0


@dataclass(frozen=True, slots=True)
class CarbonDioxideValveConfig(NodeConfig):
    """Configuration of a CO2 controlled valve."""

    device_type: ClassVar[DeviceType] = DeviceType.VLVCO2

    setpoint: int = 0
    temp_dependent: int = 0


@dataclass(frozen=True, slots=True)
class DeviceEndpoint:
    """Where a node can currently be reached."""

    host: str
    node: int

    def __str__(self) -> str:
        return f"{self.host}#{self.node}"


@dataclass(frozen=True, slots=True)
class DeviceClassification:
    """Type and location of a tracked node."""

    type: DeviceType
    location: str


CONFIG_TYPES: dict[DeviceType, type[NodeConfig]] = {
    config_type.device_type: config_type
    for config_type in (NodeConfig, HumidityValveConfig, CarbonDioxideValveConfig)
}
