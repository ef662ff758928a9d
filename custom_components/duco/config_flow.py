"""Config flow to configure the DUCO component."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.components import zeroconf
from homeassistant.const import CONF_HOST, CONF_NAME
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.service_info.zeroconf import ZeroconfServiceInfo

from .api import DucoApi
from .const import (
    CONF_FLOW_TYPE,
    CONF_USER,
    CONF_ZEROCONF,
    DEFAULT_NAME,
    DOMAIN,
    SERVICE_NAME_PREFIX,
)
from .discovery import StaticLocator, ZeroconfLocator
from .exceptions import DucoDiscoveryNotFoundError, DucoError
from .gateway import DucoRequestGateway
from .models import BoardInfo

_LOGGER = logging.getLogger(__name__)

DEVICE_SETTINGS = {
    vol.Optional(CONF_HOST): str,
    vol.Optional(CONF_NAME, default=DEFAULT_NAME): str,
}


class DucoFlowHandler(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a DUCO config flow."""

    VERSION = 1
    CONNECTION_CLASS = config_entries.CONN_CLASS_LOCAL_POLL

    def __init__(self) -> None:
        self._discovered_host: str | None = None
        self._discovered_name: str | None = None

    async def _async_fetch_board(self, host: str | None) -> tuple[str, BoardInfo]:
        """Locate (when no host is given) and verify the communication print."""
        if host:
            locator = StaticLocator(host)
        else:
            aiozc = await zeroconf.async_get_async_instance(self.hass)
            locator = ZeroconfLocator(aiozc)

        found = await locator.async_find_host()
        if found is None:
            raise DucoDiscoveryNotFoundError("No DUCO instance found")

        gateway = DucoRequestGateway(session=async_get_clientsession(self.hass))
        board = await DucoApi(gateway, found).async_get_board_info()
        return found, board

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Handle a flow initialized by the user."""
        errors: dict[str, str] = {}

        if user_input is not None:
            host = (user_input.get(CONF_HOST) or "").strip()
            try:
                found, board = await self._async_fetch_board(host or None)
            except DucoDiscoveryNotFoundError:
                errors["base"] = "not_found"
            except DucoError as err:
                _LOGGER.debug("Could not verify DUCO instance: %s", err)
                errors["base"] = "cannot_connect"
            else:
                await self.async_set_unique_id(board.mac)
                self._abort_if_unique_id_configured()
                data: dict[str, Any] = {CONF_FLOW_TYPE: CONF_USER, "mac": board.mac}
                if host:
                    data[CONF_HOST] = found
                return self.async_create_entry(
                    title=user_input.get(CONF_NAME, DEFAULT_NAME), data=data
                )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(DEVICE_SETTINGS),
            errors=errors,
        )

    async def async_step_zeroconf(
        self, discovery_info: ZeroconfServiceInfo
    ) -> config_entries.ConfigFlowResult:
        """Handle a communication print announced over mDNS."""
        if not discovery_info.name.startswith(SERVICE_NAME_PREFIX):
            return self.async_abort(reason="not_duco_device")

        host = discovery_info.host
        if discovery_info.port and discovery_info.port != 80:
            host = f"{host}:{discovery_info.port}"

        try:
            _, board = await self._async_fetch_board(host)
        except DucoError:
            return self.async_abort(reason="cannot_connect")

        await self.async_set_unique_id(board.mac)
        self._abort_if_unique_id_configured()

        self._discovered_host = host
        self._discovered_name = discovery_info.name.split(".")[0]
        self.context["title_placeholders"] = {"name": self._discovered_name}
        return await self.async_step_zeroconf_confirm()

    async def async_step_zeroconf_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Confirm adding a discovered communication print."""
        if user_input is not None:
            # No fixed host: the address is resolved on every discovery.
            return self.async_create_entry(
                title=self._discovered_name or DEFAULT_NAME,
                data={CONF_FLOW_TYPE: CONF_ZEROCONF, "mac": self.unique_id},
            )

        return self.async_show_form(
            step_id="zeroconf_confirm",
            description_placeholders={
                "name": self._discovered_name,
                "host": self._discovered_host,
            },
        )
