"""Pytest configuration and fixtures."""

import pytest

from thermalpos.connection import TransportConnection
from thermalpos.models.device import Device
from thermalpos.models.transport import ConnectionPolicy
from thermalpos.storage import MemoryStore
from thermalpos.transports.base import BaseTransport

PRINTER_ADDRESS = "66:22:B3:1C:7E:01"
PRINTER_NAME = "RPP02N"


class FakeStream:
    """In-memory ByteStream that records writes."""

    def __init__(self, fail_writes: int = 0, fail_close: bool = False) -> None:
        self.written: list[bytes] = []
        self.flushes = 0
        self.closed = False
        self._fail_writes = fail_writes
        self._fail_close = fail_close

    @property
    def is_open(self) -> bool:
        return not self.closed

    def write(self, data: bytes) -> None:
        if self._fail_writes:
            self._fail_writes -= 1
            raise BrokenPipeError("Broken pipe")
        self.written.append(data)

    def flush(self) -> None:
        self.flushes += 1

    def close(self) -> None:
        self.closed = True
        if self._fail_close:
            raise OSError("close failed")


class FakeTransport(BaseTransport):
    """Transport double with scripted open() outcomes.

    Args:
        devices: Devices reported as paired.
        open_errors: Errors raised by successive open() calls; None entries succeed.
        fail_with: If set, every open() raises this error.
        streams: Streams handed out by successive successful open() calls.
        discovery_error: If set, listing or looking up devices raises this error.
    """

    def __init__(
        self,
        devices: list[Device] | None = None,
        *,
        supports_fallback: bool = True,
        permission: bool = True,
        open_errors: list[Exception | None] | None = None,
        fail_with: Exception | None = None,
        streams: list[FakeStream] | None = None,
        discovery_error: Exception | None = None,
    ) -> None:
        self.devices = devices if devices is not None else [Device(address=PRINTER_ADDRESS, name=PRINTER_NAME)]
        self.supports_fallback = supports_fallback
        self.permission = permission
        self.open_errors = list(open_errors or [])
        self.fail_with = fail_with
        self.streams = list(streams or [])
        self.discovery_error = discovery_error
        self.open_calls: list[tuple[str, bool]] = []
        self.opened: list[FakeStream] = []
        self.discovery_cancelled = 0

    def has_permission(self) -> bool:
        return self.permission

    def cancel_discovery(self) -> None:
        self.discovery_cancelled += 1

    def paired_devices(self) -> list[Device]:
        if self.discovery_error is not None:
            raise self.discovery_error
        return list(self.devices)

    def open(self, address: str, *, fallback: bool = False) -> FakeStream:
        self.open_calls.append((address, fallback))
        if self.fail_with is not None:
            raise self.fail_with
        if self.open_errors:
            error = self.open_errors.pop(0)
            if error is not None:
                raise error
        stream = self.streams.pop(0) if self.streams else FakeStream()
        self.opened.append(stream)
        return stream


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def fast_policy() -> ConnectionPolicy:
    """Connection policy without retry delays."""
    return ConnectionPolicy(attempt_delays=[0.0, 0.0, 0.0])


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def connection(transport: FakeTransport, store: MemoryStore, fast_policy: ConnectionPolicy) -> TransportConnection:
    return TransportConnection(transport, store, fast_policy)
