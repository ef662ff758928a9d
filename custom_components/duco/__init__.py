"""Support for DUCO ventilation systems."""

from __future__ import annotations

import logging

from homeassistant import config_entries, core
from homeassistant.components import zeroconf
from homeassistant.const import CONF_HOST, EVENT_HOMEASSISTANT_STOP
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.config_validation import config_entry_only_config_schema
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.helpers.storage import Store

from .const import (
    DOMAIN,
    SERVICE_REDISCOVER,
    SIGNAL_NODE_ADDED,
    STORAGE_SAVE_DELAY,
    STORAGE_VERSION,
)
from .discovery import ServiceLocator, StaticLocator, ZeroconfLocator
from .gateway import DucoRequestGateway
from .reconciler import DucoNode, DucoReconciler
from .registry import ControllerRegistry

_LOGGER = logging.getLogger(__name__)

CONFIG_SCHEMA = config_entry_only_config_schema(DOMAIN)

PLATFORMS = ["switch", "sensor"]


def _async_get_store(hass: core.HomeAssistant, entry_id: str) -> Store:
    return Store(hass, STORAGE_VERSION, f"{DOMAIN}.{entry_id}")


async def async_setup(hass: core.HomeAssistant, config: dict) -> bool:
    """Set up the DUCO component."""

    async def async_rediscover(call: core.ServiceCall) -> None:
        for reconciler in list(hass.data.get(DOMAIN, {}).values()):
            await reconciler.async_discover_with_retry()

    hass.services.async_register(DOMAIN, SERVICE_REDISCOVER, async_rediscover)
    return True


async def async_setup_entry(
    hass: core.HomeAssistant, entry: config_entries.ConfigEntry
) -> bool:
    """Set up a DUCO installation from a config entry."""
    hass.data.setdefault(DOMAIN, {})

    locator: ServiceLocator
    if host := entry.data.get(CONF_HOST):
        locator = StaticLocator(host)
    else:
        aiozc = await zeroconf.async_get_async_instance(hass)
        locator = ZeroconfLocator(aiozc)

    gateway = DucoRequestGateway(session=async_get_clientsession(hass))
    signal = SIGNAL_NODE_ADDED.format(entry.entry_id)

    @core.callback
    def async_node_added(node: DucoNode) -> None:
        async_dispatcher_send(hass, signal, node)

    store = _async_get_store(hass, entry.entry_id)
    reconciler: DucoReconciler

    @core.callback
    def async_nodes_data() -> dict:
        return {"nodes": reconciler.export_nodes()}

    @core.callback
    def async_nodes_changed() -> None:
        store.async_delay_save(async_nodes_data, STORAGE_SAVE_DELAY)

    reconciler = DucoReconciler(
        gateway,
        locator,
        ControllerRegistry(),
        on_node_added=async_node_added,
        on_nodes_changed=async_nodes_changed,
    )

    # Resume polling known nodes before discovery has found anything.
    if (stored := await store.async_load()) is not None:
        reconciler.restore_nodes(stored.get("nodes", []))

    hass.data[DOMAIN][entry.entry_id] = reconciler

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    async def async_stop(event: core.Event) -> None:
        await store.async_save(async_nodes_data())
        await reconciler.async_shutdown()

    entry.async_on_unload(
        hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, async_stop)
    )

    # Platforms are listening now, so discovered nodes get entities.
    await reconciler.async_discover_with_retry()

    return True


async def async_unload_entry(
    hass: core.HomeAssistant,
    config_entry: config_entries.ConfigEntry,
) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(
        config_entry, PLATFORMS
    )

    if unload_ok:
        reconciler: DucoReconciler | None = hass.data[DOMAIN].pop(
            config_entry.entry_id, None
        )
        if reconciler is not None:
            await _async_get_store(hass, config_entry.entry_id).async_save(
                {"nodes": reconciler.export_nodes()}
            )
            await reconciler.async_shutdown()

    return unload_ok


async def async_remove_entry(
    hass: core.HomeAssistant, config_entry: config_entries.ConfigEntry
) -> None:
    """Forget the saved nodes of a removed config entry."""
    await _async_get_store(hass, config_entry.entry_id).async_remove()
