"""Constants for the DUCO ventilation integration and device library."""

from __future__ import annotations

# ── Home Assistant integration ──────────────────────────────────────
DOMAIN = "duco"
MANUFACTURER = "DUCO"

CONF_FLOW_TYPE = "config_flow_device"
CONF_USER = "user"
CONF_ZEROCONF = "zeroconf"
DEFAULT_NAME = "DUCO Ventilation"

SERVICE_REDISCOVER = "rediscover"

# Dispatcher signal, formatted with the config entry id
SIGNAL_NODE_ADDED = "duco_node_added_{}"

# ── Network discovery ──────────────────────────────────────────────
SERVICE_TYPE = "_http._tcp.local."
SERVICE_NAME_PREFIX = "DUCO "
ZEROCONF_BROWSE_TIMEOUT = 5  # seconds
ZEROCONF_RESOLVE_TIMEOUT = 3000  # milliseconds

DISCOVERY_RETRY_DELAY = 30  # seconds

# ── Storage of tracked nodes ───────────────────────────────────────
STORAGE_VERSION = 1
STORAGE_SAVE_DELAY = 10  # seconds

# ── Communication print limits ─────────────────────────────────────
# The communication print cannot handle more than two concurrent reads.
MAX_CONCURRENT_READS = 2
REQUEST_TIMEOUT = 10  # seconds

# Every tracked node adds this much to each node's poll interval.
POLL_INTERVAL_PER_CONTROLLER = 4  # seconds

WRITE_SUCCESS = "SUCCESS"

# ── Device types ───────────────────────────────────────────────────
DEVICE_TYPE_LABELS: dict[str, str] = {
    "BOX": "DucoBox",
    "VLVRH": "Humidity Control Valve",
    "VLVCO2": "CO2 Control Valve",
}
