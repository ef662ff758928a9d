"""Locating the DUCO communication print on the local network."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from zeroconf import IPVersion, ServiceStateChange, Zeroconf
from zeroconf.asyncio import AsyncServiceBrowser, AsyncServiceInfo, AsyncZeroconf

from .const import (
    SERVICE_NAME_PREFIX,
    SERVICE_TYPE,
    ZEROCONF_BROWSE_TIMEOUT,
    ZEROCONF_RESOLVE_TIMEOUT,
)

_LOGGER = logging.getLogger(__name__)


class ServiceLocator(Protocol):
    """Finds the host of the communication print."""

    async def async_find_host(self) -> str | None: ...


class StaticLocator:
    """Locator for a host configured by the user."""

    def __init__(self, host: str) -> None:
        self._host = host

    async def async_find_host(self) -> str | None:
        return self._host


class ZeroconfLocator:
    """Browse mDNS for the first service whose name starts with a prefix."""

    def __init__(
        self,
        aiozc: AsyncZeroconf,
        service_type: str = SERVICE_TYPE,
        name_prefix: str = SERVICE_NAME_PREFIX,
        browse_timeout: float = ZEROCONF_BROWSE_TIMEOUT,
    ) -> None:
        self._aiozc = aiozc
        self._service_type = service_type
        self._name_prefix = name_prefix
        self._browse_timeout = browse_timeout

    async def async_find_host(self) -> str | None:
        name = await self._async_browse()
        if name is None:
            return None

        info = AsyncServiceInfo(self._service_type, name)
        if not await info.async_request(
            self._aiozc.zeroconf, ZEROCONF_RESOLVE_TIMEOUT
        ):
            _LOGGER.warning("Could not resolve mDNS service %s", name)
            return None

        addresses = info.parsed_addresses(IPVersion.V4Only)
        if not addresses:
            _LOGGER.warning("mDNS service %s has no IPv4 address", name)
            return None

        host = addresses[0]
        if info.port and info.port != 80:
            host = f"{host}:{info.port}"
        _LOGGER.debug("Resolved %s to %s", name, host)
        return host

    async def _async_browse(self) -> str | None:
        found: list[str] = []
        detected = asyncio.Event()

        def on_service_state_change(
            zeroconf: Zeroconf,
            service_type: str,
            name: str,
            state_change: ServiceStateChange,
        ) -> None:
            if state_change is not ServiceStateChange.Added:
                return
            if name.startswith(self._name_prefix) and not detected.is_set():
                found.append(name)
                detected.set()

        browser = AsyncServiceBrowser(
            self._aiozc.zeroconf,
            self._service_type,
            handlers=[on_service_state_change],
        )
        try:
            async with asyncio.timeout(self._browse_timeout):
                await detected.wait()
        except TimeoutError:
            _LOGGER.debug(
                "No %s service starting with '%s' within %ss",
                self._service_type,
                self._name_prefix,
                self._browse_timeout,
            )
            return None
        finally:
            await browser.async_cancel()

        return found[0]
