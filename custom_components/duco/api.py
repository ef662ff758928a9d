"""Typed operations against the DUCO communication print HTTP API."""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from .const import WRITE_SUCCESS
from .exceptions import DucoInvalidResponseError, DucoWriteRejectedError
from .gateway import DucoRequestGateway
from .models import (
    BoardInfo,
    CarbonDioxideValveConfig,
    HumidityValveConfig,
    NodeConfig,
    NodeInfo,
)

_LOGGER = logging.getLogger(__name__)


class DucoApi:
    """Client for one communication print, sharing a request gateway.

    Errors from the gateway propagate unchanged; retrying is left to the
    caller.
    """

    def __init__(self, gateway: DucoRequestGateway, host: str) -> None:
        self._gateway = gateway
        self._host = host

    @property
    def host(self) -> str:
        return self._host

    async def async_list_nodes(self) -> list[int]:
        data = await self._read_json(f"/nodelist?t={_cache_buster()}")
        try:
            return [int(node) for node in data["nodelist"]]
        except (KeyError, TypeError, ValueError) as exc:
            raise DucoInvalidResponseError(
                f"Unexpected node list from {self._host}: {data!r}"
            ) from exc

    async def async_get_board_info(self) -> BoardInfo:
        data = await self._read_json(f"/board_info?t={_cache_buster()}")
        try:
            return BoardInfo(
                serial=data["serial"],
                uptime=data["uptime"],
                software_version=data["swversion"],
                mac=data["mac"],
                ip=data["ip"],
            )
        except (KeyError, TypeError) as exc:
            raise DucoInvalidResponseError(
                f"Unexpected board info from {self._host}: {data!r}"
            ) from exc

    async def async_get_node_info(self, node: int) -> NodeInfo:
        data = await self._read_json(f"/nodeinfoget?node={node}")
        try:
            return NodeInfo(
                node=data.get("node", node),
                # New device types may appear, so keep the raw string.
                type=data["devtype"],
                overrule=data["ovrl"],
                serial=data["serialnb"],
                software_version=data.get("swversion", ""),
                location=data.get("location", ""),
                co2=data.get("co2"),
                relative_humidity=data.get("rh"),
                mode=data.get("mode", ""),
                actual_speed=data["actl"],
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise DucoInvalidResponseError(
                f"Unexpected node info for {self._host}#{node}: {data!r}"
            ) from exc

    async def async_get_node_config(self, node: int) -> NodeConfig:
        data = await self._read_json(f"/nodeconfigget?node={node}")
        try:
            return parse_node_config(data)
        except (KeyError, TypeError, AttributeError) as exc:
            raise DucoInvalidResponseError(
                f"Unexpected node config for {self._host}#{node}: {data!r}"
            ) from exc

    async def async_set_overrule(self, node: int, value: int) -> None:
        """Write an overrule code; anything but ``SUCCESS`` is a rejection."""
        _LOGGER.debug("Setting overrule of %s#%s to %s", self._host, node, value)
        body = await self._gateway.async_write(
            self._host, f"/nodesetoverrule?node={node}&value={value}"
        )
        if body != WRITE_SUCCESS:
            raise DucoWriteRejectedError(
                f"Could not set overrule to value '{value}' on "
                f"'{self._host}#{node}' because response was '{body}'",
                body=body,
            )

    async def _read_json(self, path: str) -> Any:
        body = await self._gateway.async_read(self._host, path)
        try:
            return json.loads(body)
        except json.JSONDecodeError as exc:
            raise DucoInvalidResponseError(
                f"Invalid JSON from {self._host}{path}"
            ) from exc


def parse_node_config(data: dict[str, Any]) -> NodeConfig:
    """Decode a node config; the shape is told apart by its setpoint fields."""
    base: dict[str, Any] = {
        "node": data["node"],
        "auto_min": _val(data, "AutoMin"),
        "auto_max": _val(data, "AutoMax"),
        "capacity": _val(data, "Capacity"),
        "manual1": _val(data, "Manual1"),
        "manual2": _val(data, "Manual2"),
        "manual3": _val(data, "Manual3"),
        "manual_timeout": _val(data, "ManualTimeout"),
        "location": _val(data, "Location", ""),
    }
    if data.get("RHSetpoint"):
        return HumidityValveConfig(
            **base,
            setpoint=_val(data, "RHSetpoint"),
            delta=_val(data, "RHDelta"),
        )
    if data.get("CO2Setpoint"):
        return CarbonDioxideValveConfig(
            **base,
            setpoint=_val(data, "CO2Setpoint"),
            temp_dependent=_val(data, "TempDependent"),
        )
    return NodeConfig(**base)


_MISSING = object()


def _val(data: dict[str, Any], key: str, default: Any = _MISSING) -> Any:
    """Unwrap a ``{"Val": ...}`` config parameter."""
    if default is not _MISSING and key not in data:
        return default
    raw = data[key]
    if isinstance(raw, dict):
        return raw["Val"]
    return raw


def _cache_buster() -> int:
    return int(time.time() * 1000)
