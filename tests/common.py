"""Payloads and builders shared by the DUCO tests."""

from __future__ import annotations

import json
from typing import Any

from custom_components.duco.models import NodeInfo

# ---------------------------------------------------------------------------
#  Raw API payloads
# ---------------------------------------------------------------------------


def node_info_payload(**overrides: Any) -> dict[str, Any]:
    """Return a /nodeinfoget body for a humidity valve."""
    payload = {
        "node": 2,
        "devtype": "VLVRH",
        "subtype": 0,
        "netw": "RF",
        "addr": 1,
        "sub": 1,
        "prnt": 1,
        "asso": 0,
        "location": "Bathroom",
        "state": "AUTO",
        "cntdwn": 0,
        "endtime": 0,
        "mode": "AUTO",
        "trgt": 20,
        "actl": 20,
        "ovrl": 255,
        "snsr": 0,
        "cerr": 0,
        "swversion": "16036.13.3.0",
        "serialnb": "RS1521003412",
        "temp": 21,
        "co2": 0,
        "rh": 54,
        "error": "W.00.00.00",
        "show": 0,
        "link": 0,
    }
    payload.update(overrides)
    return payload


BOX_CONFIG_PAYLOAD: dict[str, Any] = {
    "node": 1,
    "AutoMin": {"Val": 10, "Min": 0, "Max": 100},
    "AutoMax": {"Val": 80, "Min": 0, "Max": 100},
    "Capacity": {"Val": 325, "Min": 0, "Max": 500},
    "Manual1": {"Val": 50, "Min": 0, "Max": 100},
    "Manual2": {"Val": 75, "Min": 0, "Max": 100},
    "Manual3": {"Val": 100, "Min": 0, "Max": 100},
    "ManualTimeout": {"Val": 15, "Min": 1, "Max": 120},
    "Location": {"Val": "Attic"},
}

RH_CONFIG_PAYLOAD: dict[str, Any] = {
    **BOX_CONFIG_PAYLOAD,
    "node": 2,
    "Location": {"Val": "Bathroom"},
    "RHSetpoint": {"Val": 65, "Min": 50, "Max": 95},
    "RHDelta": {"Val": 10, "Min": 0, "Max": 20},
}

CO2_CONFIG_PAYLOAD: dict[str, Any] = {
    **BOX_CONFIG_PAYLOAD,
    "node": 3,
    "Location": {"Val": "Bedroom"},
    "CO2Setpoint": {"Val": 850, "Min": 500, "Max": 2000},
    "TempDependent": {"Val": 0, "Min": 0, "Max": 1},
}

BOARD_INFO_PAYLOAD: dict[str, Any] = {
    "serial": "PS2113001384",
    "uptime": 123456,
    "swversion": "16056.10.4.0",
    "mac": "00:11:22:33:44:55",
    "ip": "192.168.1.10",
}


def as_body(payload: Any) -> str:
    return json.dumps(payload)


# ---------------------------------------------------------------------------
#  Models
# ---------------------------------------------------------------------------


def make_node_info(**overrides: Any) -> NodeInfo:
    values: dict[str, Any] = {
        "node": 2,
        "type": "VLVRH",
        "overrule": 255,
        "serial": "RS1521003412",
        "software_version": "16036.13.3.0",
        "location": "Bathroom",
        "co2": 0,
        "relative_humidity": 54,
        "mode": "AUTO",
        "actual_speed": 20,
    }
    values.update(overrides)
    return NodeInfo(**values)
