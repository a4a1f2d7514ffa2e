"""Printer transports for thermalpos."""

from thermalpos.models.transport import RfcommTransportConfig, SerialTransportConfig, TransportConfig
from thermalpos.transports.base import BaseTransport, ByteStream
from thermalpos.transports.rfcomm import RfcommTransport
from thermalpos.transports.serial_port import SerialTransport

__all__ = [
    "BaseTransport",
    "ByteStream",
    "RfcommTransport",
    "SerialTransport",
    "create_transport",
]


def create_transport(config: TransportConfig) -> BaseTransport:
    """Factory function to create a transport instance from config."""
    if isinstance(config, SerialTransportConfig):
        return SerialTransport(config)
    if isinstance(config, RfcommTransportConfig):
        return RfcommTransport(config)
    raise ValueError(f"Unknown transport type: {type(config)}")
