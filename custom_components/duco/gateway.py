"""Concurrency-bounded HTTP access to the DUCO communication print."""

from __future__ import annotations

import asyncio
import contextlib
import logging

import aiohttp
from aiohttp import client_exceptions

from .const import MAX_CONCURRENT_READS, REQUEST_TIMEOUT
from .exceptions import DucoHttpError

_LOGGER = logging.getLogger(__name__)


class DucoRequestGateway:
    """Shared HTTP gateway for every node poller.

    Reads share a fixed number of slots and queue in arrival order once
    the slots are taken. Writes skip the queue entirely so a user command
    never waits behind a backlog of polls.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        request_timeout: int = REQUEST_TIMEOUT,
        max_concurrent_reads: int = MAX_CONCURRENT_READS,
        debug: bool = False,
    ) -> None:
        self._session = session
        self._close_session = False
        self._request_timeout = request_timeout
        self._read_slots = asyncio.Semaphore(max_concurrent_reads)
        self._debug = debug

    async def async_read(self, host: str, path: str) -> str:
        """GET ``path`` once a read slot is free and return the body.

        The timeout covers the wait for a slot as well as the request.
        """
        return await self._make_request(host, path, self._read_slots)

    async def async_write(self, host: str, path: str) -> str:
        """GET ``path`` immediately, bypassing the read queue."""
        return await self._make_request(host, path, contextlib.nullcontext())

    # ------------------------------------------------------------------
    #  HTTP transport
    # ------------------------------------------------------------------

    async def _make_request(
        self, host: str, path: str, slot: contextlib.AbstractAsyncContextManager
    ) -> str:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._close_session = True

        url = f"http://{host}{path}"

        if self._debug:
            _LOGGER.debug("Device request: GET %s", url)

        try:
            async with asyncio.timeout(self._request_timeout), slot:
                async with self._session.get(url) as resp:
                    body = await resp.text()
                    if not 200 <= resp.status < 300:
                        raise DucoHttpError(
                            f"Received invalid HTTP response {resp.status} "
                            f"when calling {url}",
                            status=resp.status,
                            url=url,
                        )
        except TimeoutError as exc:
            raise DucoHttpError(
                f"Timeout after {self._request_timeout}s when calling {url}",
                timeout=True,
                url=url,
            ) from exc
        except client_exceptions.ClientError as exc:
            raise DucoHttpError(
                f"Cannot reach {url}: {exc}", url=url
            ) from exc

        if self._debug:
            _LOGGER.debug("Device response from %s:\n%s", url, body)

        return body

    # ------------------------------------------------------------------
    #  Session lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the HTTP session if we own it."""
        if self._session and self._close_session:
            await self._session.close()

    async def __aenter__(self) -> DucoRequestGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
