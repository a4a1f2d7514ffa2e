"""Pydantic models for thermalpos."""

from thermalpos.models.device import (
    Connected,
    Connecting,
    ConnectionState,
    Device,
    Disconnected,
    SavedPrinter,
)
from thermalpos.models.receipt import Receipt, ReceiptDesign, ReceiptItem
from thermalpos.models.result import PrintResult
from thermalpos.models.transport import (
    ConnectionPolicy,
    RfcommTransportConfig,
    SerialTransportConfig,
    TransportConfig,
)

__all__ = [
    "Connected",
    "ConnectionPolicy",
    "Connecting",
    "ConnectionState",
    "Device",
    "Disconnected",
    "PrintResult",
    "Receipt",
    "ReceiptDesign",
    "ReceiptItem",
    "RfcommTransportConfig",
    "SavedPrinter",
    "SerialTransportConfig",
    "TransportConfig",
]
