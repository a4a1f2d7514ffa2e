"""Bluetooth RFCOMM transport (PyBluez).

The standard connect path asks the printer's SDP server for its Serial Port
Profile channel. The fallback path skips the query and connects to a fixed
channel, which is what older printers without a usable SDP record expect.
"""

import logging
import re
import socket

import bluetooth

from thermalpos.models.device import Device
from thermalpos.models.transport import RfcommTransportConfig
from thermalpos.transports.base import BaseTransport

logger = logging.getLogger(__name__)

MAC_RE = re.compile(r"^[0-9A-F]{2}(:[0-9A-F]{2}){5}$")


def rfcomm_channel(services: list[dict]) -> int | None:
    """Pick the RFCOMM channel from ``bluetooth.find_service`` results."""
    for service in services:
        if service.get("protocol") == "RFCOMM" and service.get("port"):
            return int(service["port"])
    return None


class SocketStream:
    """ByteStream over a connected RFCOMM socket."""

    def __init__(self, sock: bluetooth.BluetoothSocket) -> None:
        self._sock = sock
        self._closed = False

    @property
    def is_open(self) -> bool:
        return not self._closed

    def write(self, data: bytes) -> None:
        self._sock.sendall(data)

    def flush(self) -> None:
        # sendall() returns once the kernel has the data
        return None

    def close(self) -> None:
        self._closed = True
        self._sock.close()


class RfcommTransport(BaseTransport):
    """Direct RFCOMM sockets to Bluetooth printers."""

    supports_fallback = True

    def __init__(self, config: RfcommTransportConfig | None = None) -> None:
        self.config = config or RfcommTransportConfig()

    def has_permission(self) -> bool:
        # Python must be built with Bluetooth socket support
        return hasattr(socket, "AF_BLUETOOTH")

    def paired_devices(self) -> list[Device]:
        logger.info(f"Scanning for Bluetooth devices ({self.config.discovery_seconds}s)...")
        found = bluetooth.discover_devices(
            duration=self.config.discovery_seconds,
            lookup_names=True,
            flush_cache=True,
        )
        devices = [Device(address=addr.upper(), name=name or "Unknown") for addr, name in found]
        logger.info(f"Found {len(devices)} Bluetooth devices")
        return devices

    def lookup(self, address: str) -> Device | None:
        address = address.upper()
        if not MAC_RE.match(address):
            return None
        name = bluetooth.lookup_name(address, timeout=self.config.name_timeout)
        return Device(address=address, name=name or "Unknown")

    def _sdp_channel(self, address: str) -> int:
        try:
            services = bluetooth.find_service(uuid=bluetooth.SERIAL_PORT_CLASS, address=address)
        except bluetooth.BluetoothError as e:
            raise ConnectionError(f"Service discovery on {address} failed: {e}") from e
        channel = rfcomm_channel(services)
        if channel is None:
            raise ConnectionError(f"No Serial Port Profile service advertised by {address}")
        return channel

    def open(self, address: str, *, fallback: bool = False) -> SocketStream:
        address = address.upper()
        channel = self.config.fallback_channel if fallback else self._sdp_channel(address)

        logger.debug(f"Opening RFCOMM socket to {address} channel {channel}")
        sock = bluetooth.BluetoothSocket(bluetooth.RFCOMM)
        sock.settimeout(self.config.timeout)
        try:
            sock.connect((address, channel))
        except PermissionError:
            sock.close()
            raise
        except OSError as e:
            sock.close()
            raise ConnectionError(f"Failed to connect to {address} channel {channel}: {e}") from e
        return SocketStream(sock)
