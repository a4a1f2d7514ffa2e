"""Connection management for a single thermal printer.

TransportConnection owns at most one open stream. Public methods are
coroutines that never raise for printer failures; they return a PrintResult.
Blocking transport calls run in the default executor, and an asyncio lock
keeps connect, write and send operations from interleaving on the stream.
"""

import asyncio
import logging
import time
from functools import partial

from thermalpos.errors import (
    AllAttemptsExhaustedError,
    ConnectFailedError,
    ConnectionLostError,
    DeviceNotFoundError,
    NoSavedDeviceError,
    NotConnectedError,
    PermissionDeniedError,
    PrinterError,
)
from thermalpos.models.device import (
    Connected,
    Connecting,
    ConnectionState,
    Device,
    Disconnected,
    SavedPrinter,
)
from thermalpos.models.result import PrintResult
from thermalpos.models.transport import ConnectionPolicy
from thermalpos.storage import KeyValueStore, clear_saved_printer, load_saved_printer, save_saved_printer
from thermalpos.transports.base import BaseTransport, ByteStream

logger = logging.getLogger(__name__)


class TransportConnection:
    """Connection lifecycle, saved-printer persistence and retrying writes."""

    def __init__(
        self,
        transport: BaseTransport,
        store: KeyValueStore,
        policy: ConnectionPolicy | None = None,
    ) -> None:
        self.transport = transport
        self.policy = policy or ConnectionPolicy()
        self._store = store
        self._saved = load_saved_printer(store)
        self._state: ConnectionState = Disconnected()
        self._stream: ByteStream | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return isinstance(self._state, Connected)

    @property
    def connected_device(self) -> Device | None:
        return self._state.device if isinstance(self._state, Connected) else None

    # ===== Saved printer =====

    @property
    def saved_printer(self) -> SavedPrinter | None:
        return self._saved

    def save_printer(self, address: str, name: str) -> None:
        self._saved = SavedPrinter(address=address, name=name)
        save_saved_printer(self._store, self._saved)
        logger.info(f"Saved printer {name} ({address})")

    def clear_saved_printer(self) -> None:
        self._saved = None
        clear_saved_printer(self._store)
        logger.info("Cleared saved printer")

    # ===== Discovery =====

    async def list_devices(self) -> list[Device]:
        """List paired devices, the saved printer first."""
        if not self.transport.has_permission():
            logger.warning("No permission to list printers")
            return []

        loop = asyncio.get_running_loop()
        try:
            devices = await loop.run_in_executor(None, self.transport.paired_devices)
        except OSError as e:
            logger.warning(f"Failed to list printers: {e}")
            return []
        saved_address = self._saved.address if self._saved else None
        devices = [device.model_copy(update={"is_saved": device.address == saved_address}) for device in devices]
        # sorted() is stable, so the transport's order is kept otherwise
        return sorted(devices, key=lambda device: not device.is_saved)

    # ===== Public operations =====

    async def connect(self, address: str) -> PrintResult:
        """Connect to a device, retrying per the connection policy."""
        async with self._lock:
            return await self._as_result(self._connect(address))

    async def connect_and_save(self, address: str, name: str) -> PrintResult:
        """Connect, and remember the device as the saved printer on success."""
        result = await self.connect(address)
        if result.ok:
            self.save_printer(address, name)
        return result

    async def disconnect(self) -> None:
        """Close the connection. Never raises."""
        async with self._lock:
            await self._disconnect()

    async def ensure_connected(self) -> PrintResult:
        """Make sure a fresh connection to the saved printer is open."""
        async with self._lock:
            return await self._as_result(self._ensure_connected())

    async def write(self, data: bytes) -> PrintResult:
        """Write to the open connection without reconnecting."""
        async with self._lock:
            return await self._as_result(self._write(data))

    async def send_raw(self, data: bytes) -> PrintResult:
        """Connect to the saved printer if needed and send data.

        The whole connect-and-write path is retried, since the first failure
        is often a stale socket that the retry replaces.
        """
        async with self._lock:
            errors: list[PrinterError] = []
            for attempt in range(1, self.policy.send_attempts + 1):
                try:
                    await self._ensure_connected()
                    await self._write(data)
                    return PrintResult.success()
                except PrinterError as e:
                    errors.append(e)
                    if attempt < self.policy.send_attempts:
                        logger.info(f"Send attempt {attempt} failed ({e.message}), retrying")

            error = AllAttemptsExhaustedError(errors)
            logger.error(f"{error.message} Last error: {errors[-1].message}")
            return PrintResult.failure(error)

    # ===== Internals (caller holds the lock) =====

    @staticmethod
    async def _as_result(operation) -> PrintResult:
        try:
            await operation
        except PrinterError as e:
            return PrintResult.failure(e)
        return PrintResult.success()

    async def _connect(self, address: str) -> None:
        if not self.transport.has_permission():
            raise PermissionDeniedError("Bluetooth permission not granted")

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.transport.cancel_discovery)
            device = await loop.run_in_executor(None, self.transport.lookup, address)
        except PermissionError as e:
            raise PermissionDeniedError(f"Bluetooth permission denied: {e}", e) from e
        except OSError as e:
            raise DeviceNotFoundError(address, e) from e
        if device is None:
            raise DeviceNotFoundError(address)

        last_error: BaseException | None = None
        attempts = self.policy.connect_attempts
        for attempt, delay in enumerate(self.policy.attempt_delays, start=1):
            await asyncio.sleep(delay)
            await self._disconnect()

            fallback = self.transport.supports_fallback and attempt >= self.policy.fallback_attempt
            self._state = Connecting(address=device.address)
            try:
                stream = await loop.run_in_executor(
                    None, partial(self.transport.open, device.address, fallback=fallback)
                )
            except PermissionError as e:
                self._state = Disconnected()
                raise PermissionDeniedError(f"Permission denied connecting to {device.address}", e) from e
            except OSError as e:
                last_error = e
                logger.debug(f"Connect attempt {attempt}/{attempts} to {device.address} failed: {e}")
                continue

            self._stream = stream
            self._state = Connected(device=device, last_activity_at=time.monotonic())
            logger.info(f"Connected to {device.name} ({device.address}) on attempt {attempt}")
            return

        self._state = Disconnected()
        logger.warning(f"Giving up on {device.address} after {attempts} attempts: {last_error}")
        raise ConnectFailedError(device.address, attempts, last_error)

    async def _disconnect(self) -> None:
        stream = self._stream
        self._stream = None
        self._state = Disconnected()
        if stream is None:
            return

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, stream.close)
        except Exception as e:
            # Nothing to recover; the handle is dropped either way
            logger.debug(f"Ignoring error while closing printer stream: {e}")

    async def _ensure_connected(self) -> None:
        state = self._state
        if isinstance(state, Connected):
            idle = time.monotonic() - state.last_activity_at
            if idle > self.policy.staleness_seconds:
                logger.info(f"Connection idle for {idle:.0f}s, reconnecting")
                await self._disconnect()
            elif self._stream is None or not self._stream.is_open:
                logger.info("Connection dropped, reconnecting")
                await self._disconnect()

        if not isinstance(self._state, Connected):
            if self._saved is None:
                raise NoSavedDeviceError()
            await self._connect(self._saved.address)

        self._touch()

    async def _write(self, data: bytes) -> None:
        stream = self._stream
        if not isinstance(self._state, Connected) or stream is None:
            raise NotConnectedError()

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, stream.write, data)
            await loop.run_in_executor(None, stream.flush)
        except OSError as e:
            logger.warning(f"Write to printer failed: {e}")
            await self._disconnect()
            raise ConnectionLostError(f"Connection to printer lost: {e}", e) from e

        self._touch()
        logger.debug(f"Wrote {len(data)} bytes to printer")

    def _touch(self) -> None:
        if isinstance(self._state, Connected):
            self._state = self._state.model_copy(update={"last_activity_at": time.monotonic()})
