"""Device and connection state models."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class Device(BaseModel):
    """A known or paired printer, as reported by the transport."""

    address: str
    name: str = "Unknown"
    is_saved: bool = False


class SavedPrinter(BaseModel):
    """The printer the user last chose; persisted across restarts."""

    address: str
    name: str


class Disconnected(BaseModel):
    status: Literal["disconnected"] = "disconnected"


class Connecting(BaseModel):
    status: Literal["connecting"] = "connecting"
    address: str


class Connected(BaseModel):
    """An open connection.

    ``last_activity_at`` is a ``time.monotonic()`` timestamp of the last
    successful connect or write.
    """

    status: Literal["connected"] = "connected"
    device: Device
    last_activity_at: float


ConnectionState = Annotated[
    Disconnected | Connecting | Connected,
    Field(discriminator="status"),
]
