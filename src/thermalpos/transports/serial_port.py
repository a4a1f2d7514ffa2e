"""Serial port transport (pyserial)."""

import errno
import logging
from pathlib import Path

import serial
import serial.tools.list_ports

from thermalpos.models.device import Device
from thermalpos.models.transport import SerialTransportConfig
from thermalpos.transports.base import BaseTransport, ByteStream

logger = logging.getLogger(__name__)


class SerialTransport(BaseTransport):
    """Printers attached as serial ports, including OS-bound Bluetooth SPP ports.

    The OS performs RFCOMM channel negotiation when it binds the port, so there
    is no separate fallback path.
    """

    supports_fallback = False

    def __init__(self, config: SerialTransportConfig | None = None) -> None:
        self.config = config or SerialTransportConfig()

    def paired_devices(self) -> list[Device]:
        devices = []
        for port in serial.tools.list_ports.comports():
            name = port.description if port.description and port.description != "n/a" else port.name
            devices.append(Device(address=port.device, name=name or "Unknown"))
        return devices

    def lookup(self, address: str) -> Device | None:
        device = super().lookup(address)
        if device is None and Path(address).exists():
            # Bound ports (e.g. /dev/rfcomm0) are not always enumerated
            device = Device(address=address, name=Path(address).name)
        return device

    def open(self, address: str, *, fallback: bool = False) -> ByteStream:
        try:
            return serial.Serial(
                port=address,
                baudrate=self.config.baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self.config.timeout,
                write_timeout=self.config.write_timeout,
            )
        except serial.SerialException as e:
            if e.errno == errno.EACCES:
                raise PermissionError(f"Permission denied opening serial port {address}") from e
            raise ConnectionError(f"Failed to open serial port {address}: {e}") from e
