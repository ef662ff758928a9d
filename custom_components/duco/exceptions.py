"""Exceptions for DUCO communication print communication."""

from __future__ import annotations


class DucoError(Exception):
    """Base DUCO exception."""


class DucoHttpError(DucoError):
    """HTTP-level failure (unreachable, timeout or non-success status)."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        timeout: bool = False,
        url: str = "",
    ) -> None:
        self.status = status
        self.timeout = timeout
        self.url = url
        super().__init__(message)


class DucoInvalidResponseError(DucoError):
    """Response body could not be decoded into the expected shape."""


class DucoWriteRejectedError(DucoError):
    """The device answered a write with something other than SUCCESS."""

    def __init__(self, message: str, *, body: str) -> None:
        self.body = body
        super().__init__(message)


class DucoUnsupportedDeviceTypeError(DucoError):
    """Node type is not one we know how to track."""

    def __init__(self, device_type: str) -> None:
        self.device_type = device_type
        super().__init__(f"Unsupported device type '{device_type}'")


class DucoMissingLocationError(DucoError):
    """Node has no location configured on the communication print."""


class DucoNoDataYetError(DucoError):
    """Read before any successful poll and without a fallback value."""


class DucoDiscoveryNotFoundError(DucoError):
    """No DUCO instance could be located on the network."""
