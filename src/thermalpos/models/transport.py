"""Transport and connection policy configuration models."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class SerialTransportConfig(BaseModel):
    """Serial port transport.

    Bluetooth SPP printers bound by the OS show up as serial ports
    (``/dev/rfcomm0`` on Linux, ``COMn`` on Windows).
    """

    type: Literal["serial"] = "serial"
    baudrate: int = 9600
    timeout: float = 5.0
    write_timeout: float = 10.0


class RfcommTransportConfig(BaseModel):
    """Direct Bluetooth RFCOMM sockets (PyBluez)."""

    type: Literal["rfcomm"] = "rfcomm"
    # Inquiry scan length used when listing devices
    discovery_seconds: int = Field(default=8, ge=1)
    name_timeout: int = 10
    fallback_channel: int = Field(default=1, ge=1, le=30)
    timeout: float = 10.0


TransportConfig = Annotated[
    SerialTransportConfig | RfcommTransportConfig,
    Field(discriminator="type"),
]


class ConnectionPolicy(BaseModel):
    """Retry and staleness tuning for a printer connection."""

    # Idle time after which an open connection is no longer trusted
    staleness_seconds: float = 300.0
    # One entry per connect attempt: seconds to wait before that attempt
    attempt_delays: list[float] = Field(default_factory=lambda: [0.3, 0.5, 0.5], min_length=1)
    # First attempt (1-based) that uses the transport's fallback connect path
    fallback_attempt: int = Field(default=3, ge=1)
    # Passes of ensure-connected + write before send_raw gives up
    send_attempts: int = Field(default=2, ge=1)

    @property
    def connect_attempts(self) -> int:
        return len(self.attempt_delays)
