"""Discovery of DUCO nodes and reconciliation with tracked nodes."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from .api import DucoApi
from .const import DEVICE_TYPE_LABELS, DISCOVERY_RETRY_DELAY
from .controller import DucoController
from .discovery import ServiceLocator
from .exceptions import (
    DucoError,
    DucoMissingLocationError,
    DucoNoDataYetError,
    DucoUnsupportedDeviceTypeError,
)
from .gateway import DucoRequestGateway
from .models import (
    CONFIG_TYPES,
    DeviceClassification,
    DeviceEndpoint,
    DeviceType,
    NodeConfig,
    NodeInfo,
    VentilationLevel,
    level_from_overrule,
)
from .registry import ControllerRegistry
from .state import DucoNodeState

_LOGGER = logging.getLogger(__name__)


def device_identity(serial: str) -> str:
    """Stable identity of a node, independent of its address."""
    return str(uuid.uuid5(uuid.NAMESPACE_OID, serial))


@dataclass(slots=True)
class DucoNode:
    """A tracked node and everything known about it."""

    identity: str
    serial: str
    software_version: str
    endpoint: DeviceEndpoint
    classification: DeviceClassification
    config: NodeConfig
    state: DucoNodeState
    controller: DucoController | None = field(default=None, repr=False)

    @property
    def type_label(self) -> str:
        return DEVICE_TYPE_LABELS[self.classification.type]

    @property
    def name(self) -> str:
        return f"{self.classification.location} {self.type_label}"

    def as_dict(self) -> dict[str, Any]:
        """Serialize what is needed to resume tracking after a restart."""
        return {
            "identity": self.identity,
            "serial": self.serial,
            "software_version": self.software_version,
            "host": self.endpoint.host,
            "node": self.endpoint.node,
            "type": self.classification.type.value,
            "location": self.classification.location,
            "config_type": self.config.device_type.value,
            "config": asdict(self.config),
            "is_on": self.state.is_on,
            "rotation_speed": self.state.rotation_speed,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DucoNode:
        """Rebuild a node saved by :meth:`as_dict`, without a controller."""
        config_type = CONFIG_TYPES[DeviceType(data["config_type"])]
        return cls(
            identity=data["identity"],
            serial=data["serial"],
            software_version=data["software_version"],
            endpoint=DeviceEndpoint(data["host"], int(data["node"])),
            classification=DeviceClassification(
                type=DeviceType(data["type"]), location=data["location"]
            ),
            config=config_type(**data["config"]),
            state=DucoNodeState(
                is_on=bool(data["is_on"]),
                rotation_speed=data.get("rotation_speed"),
            ),
        )


class DucoReconciler:
    """Finds the communication print and keeps one controller per node."""

    def __init__(
        self,
        gateway: DucoRequestGateway,
        locator: ServiceLocator,
        registry: ControllerRegistry,
        on_node_added: Callable[[DucoNode], None] | None = None,
        on_nodes_changed: Callable[[], None] | None = None,
        retry_delay: float = DISCOVERY_RETRY_DELAY,
    ) -> None:
        self._gateway = gateway
        self._locator = locator
        self._registry = registry
        self._on_node_added = on_node_added
        self._on_nodes_changed = on_nodes_changed
        self._retry_delay = retry_delay

        self._nodes: dict[str, DucoNode] = {}
        self._lock = asyncio.Lock()
        self._retry_handle: asyncio.TimerHandle | None = None
        self._retry_task: asyncio.Task[None] | None = None
        self._shutdown = False

    @property
    def nodes(self) -> dict[str, DucoNode]:
        return self._nodes

    @property
    def registry(self) -> ControllerRegistry:
        return self._registry

    @property
    def retry_scheduled(self) -> bool:
        return self._retry_handle is not None

    # ------------------------------------------------------------------
    #  Persistence
    # ------------------------------------------------------------------

    def export_nodes(self) -> list[dict[str, Any]]:
        """Return every tracked node in a JSON-serializable form."""
        return [tracked.as_dict() for tracked in self._nodes.values()]

    def restore_nodes(self, records: Iterable[Mapping[str, Any]]) -> None:
        """Resume tracking of nodes saved before a restart.

        Each restored node starts polling right away, with its saved on/off
        value as fallback. The next discovery pass treats it like any other
        tracked node.
        """
        for record in records:
            try:
                tracked = DucoNode.from_dict(record)
            except (KeyError, TypeError, ValueError) as err:
                _LOGGER.warning(
                    "Dropping saved DUCO node %s because it is invalid: %s",
                    record.get("serial", "?"),
                    err,
                )
                continue

            if self._shutdown or tracked.identity in self._nodes:
                continue

            _LOGGER.info(
                "Loading %s (%s %s) from storage",
                tracked.name,
                tracked.endpoint,
                tracked.state.is_on,
            )
            self._start_controller(tracked, tracked.state.is_on)
            self._nodes[tracked.identity] = tracked

    # ------------------------------------------------------------------
    #  Discovery
    # ------------------------------------------------------------------

    async def async_discover(self) -> None:
        """Run one discovery pass.

        Not finding the communication print schedules a retry. A failing
        board info request is raised to the caller.
        """
        self.cancel_retry()

        async with self._lock:
            if self._shutdown:
                return

            _LOGGER.info("Searching for DUCO instance")
            host = await self._locator.async_find_host()

            if host is None:
                _LOGGER.warning(
                    "Could not find any DUCO instance on your local network. "
                    "Going to retry in %s seconds",
                    self._retry_delay,
                )
                self._schedule_retry()
                return

            api = DucoApi(self._gateway, host)

            board = await api.async_get_board_info()
            _LOGGER.debug(
                "Found DUCO instance %s at %s (firmware %s)",
                board.serial,
                host,
                board.software_version,
            )

            for node in await api.async_list_nodes():
                try:
                    await self._async_reconcile_node(api, node)
                except DucoUnsupportedDeviceTypeError as err:
                    _LOGGER.debug("Ignoring node %s: %s", node, err)
                except DucoMissingLocationError:
                    _LOGGER.info(
                        "Ignoring node %s because it does not have a location "
                        "set. Configure a location first using the DUCO "
                        "communication print, it will appear after the next "
                        "discovery",
                        node,
                    )
                except Exception:
                    _LOGGER.exception(
                        "Not adding DUCO node #%s because of a failure", node
                    )

    async def async_discover_with_retry(self) -> None:
        """Run discovery, scheduling a retry instead of raising."""
        try:
            await self.async_discover()
        except DucoError as err:
            _LOGGER.error(
                "DUCO discovery failed, retrying in %s seconds: %s",
                self._retry_delay,
                err,
            )
            self._schedule_retry()

    def cancel_retry(self) -> None:
        if self._retry_handle is not None:
            self._retry_handle.cancel()
            self._retry_handle = None

    def _schedule_retry(self) -> None:
        if self._shutdown:
            return
        self.cancel_retry()
        loop = asyncio.get_running_loop()
        self._retry_handle = loop.call_later(self._retry_delay, self._fire_retry)

    def _fire_retry(self) -> None:
        self._retry_handle = None
        self._retry_task = asyncio.get_running_loop().create_task(
            self.async_discover_with_retry()
        )

    # ------------------------------------------------------------------
    #  Reconciliation
    # ------------------------------------------------------------------

    async def _async_reconcile_node(self, api: DucoApi, node: int) -> None:
        info = await api.async_get_node_info(node)
        classification = self._classify(info)
        config = await api.async_get_node_config(node)

        identity = device_identity(info.serial)
        endpoint = DeviceEndpoint(api.host, node)
        tracked = self._nodes.get(identity)

        if tracked is not None:
            if tracked.endpoint == endpoint:
                return

            _LOGGER.info(
                "Node %s moved from %s to %s", info.serial, tracked.endpoint, endpoint
            )
            initially_on = self._last_known_on(tracked)
            self._teardown(tracked)

            tracked.endpoint = endpoint
            tracked.classification = classification
            tracked.config = config
            tracked.software_version = info.software_version
            self._start_controller(tracked, initially_on)
            self._notify_nodes_changed()
            return

        is_on = level_from_overrule(info.overrule) is VentilationLevel.HIGH
        tracked = DucoNode(
            identity=identity,
            serial=info.serial,
            software_version=info.software_version,
            endpoint=endpoint,
            classification=classification,
            config=config,
            state=DucoNodeState(is_on=is_on, rotation_speed=info.actual_speed),
        )
        _LOGGER.info("Adding %s (%s)", tracked.name, endpoint)
        self._start_controller(tracked, is_on)
        self._nodes[identity] = tracked

        if self._on_node_added is not None:
            self._on_node_added(tracked)
        self._notify_nodes_changed()

    def _notify_nodes_changed(self) -> None:
        if self._on_nodes_changed is not None:
            self._on_nodes_changed()

    @staticmethod
    def _classify(info: NodeInfo) -> DeviceClassification:
        try:
            device_type = DeviceType(info.type)
        except ValueError as exc:
            raise DucoUnsupportedDeviceTypeError(info.type) from exc

        # Nodes without a location make for unusable names and areas.
        if not info.location:
            raise DucoMissingLocationError(f"Node {info.node} has no location")

        return DeviceClassification(type=device_type, location=info.location)

    @staticmethod
    def _last_known_on(tracked: DucoNode) -> bool:
        if tracked.controller is not None:
            try:
                return tracked.controller.is_on()
            except DucoNoDataYetError:
                pass
        return tracked.state.is_on

    def _start_controller(self, tracked: DucoNode, initially_on: bool) -> None:
        self._registry.register()
        controller = DucoController(
            DucoApi(self._gateway, tracked.endpoint.host),
            self._registry,
            tracked.endpoint,
            tracked.classification,
            tracked.state,
            initially_on=initially_on,
        )
        tracked.controller = controller
        controller.start()

    def _teardown(self, tracked: DucoNode) -> None:
        if tracked.controller is None:
            return
        tracked.controller.cleanup()
        tracked.controller = None
        self._registry.unregister()

    # ------------------------------------------------------------------
    #  Lifecycle
    # ------------------------------------------------------------------

    async def async_shutdown(self) -> None:
        """Cancel pending discovery and stop every controller."""
        self._shutdown = True
        self.cancel_retry()
        if self._retry_task is not None and not self._retry_task.done():
            self._retry_task.cancel()
            try:
                await self._retry_task
            except asyncio.CancelledError:
                pass
        self._retry_task = None

        for tracked in self._nodes.values():
            self._teardown(tracked)
