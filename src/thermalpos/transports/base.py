"""Abstract base class for printer transports."""

from abc import ABC, abstractmethod
from typing import Protocol

from thermalpos.models.device import Device


class ByteStream(Protocol):
    """An open, writable connection to a printer."""

    @property
    def is_open(self) -> bool: ...

    def write(self, data: bytes) -> int | None: ...

    def flush(self) -> None: ...

    def close(self) -> None: ...


class BaseTransport(ABC):
    """Platform access to printers: discovery, permissions and raw streams.

    All methods are blocking; callers run them off the event loop.
    """

    # Whether open(..., fallback=True) does something different
    supports_fallback: bool = False

    def has_permission(self) -> bool:
        """Check that the process may use this transport at all."""
        return True

    def cancel_discovery(self) -> None:
        """Stop any device scan in progress before connecting."""
        return None

    @abstractmethod
    def paired_devices(self) -> list[Device]:
        """List known/paired devices."""

    def lookup(self, address: str) -> Device | None:
        """Resolve an address to a device, or None if unknown."""
        for device in self.paired_devices():
            if device.address == address:
                return device
        return None

    @abstractmethod
    def open(self, address: str, *, fallback: bool = False) -> ByteStream:
        """Open a stream to the device.

        Args:
            address: Device address as reported by paired_devices().
            fallback: Use the alternate fixed-channel connect path.

        Raises:
            PermissionError: If the OS denies access to the device.
            OSError: If the connection cannot be established.
        """
