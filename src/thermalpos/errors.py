"""Printer error hierarchy.

Internal code raises these; the public connection methods hand them back to
callers wrapped in a PrintResult instead of raising.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Categories of printing failures."""

    PERMISSION_DENIED = "permission_denied"
    NO_SAVED_DEVICE = "no_saved_device"
    DEVICE_NOT_FOUND = "device_not_found"
    CONNECT_FAILED = "connect_failed"
    NOT_CONNECTED = "not_connected"
    CONNECTION_LOST = "connection_lost"
    ALL_ATTEMPTS_EXHAUSTED = "all_attempts_exhausted"


class PrinterError(Exception):
    """Base exception for printer-related errors."""

    kind: ErrorKind = ErrorKind.CONNECTION_LOST

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class PermissionDeniedError(PrinterError):
    kind = ErrorKind.PERMISSION_DENIED


class NoSavedDeviceError(PrinterError):
    kind = ErrorKind.NO_SAVED_DEVICE

    def __init__(self) -> None:
        super().__init__("No saved printer. Choose a printer in settings first.")


class DeviceNotFoundError(PrinterError):
    kind = ErrorKind.DEVICE_NOT_FOUND

    def __init__(self, address: str, cause: BaseException | None = None) -> None:
        super().__init__(f"Device not found: {address}", cause)
        self.address = address


class ConnectFailedError(PrinterError):
    """Raised when every connect attempt failed; carries the last cause."""

    kind = ErrorKind.CONNECT_FAILED

    def __init__(self, address: str, attempts: int, cause: BaseException | None) -> None:
        super().__init__(f"Failed to connect to {address} after {attempts} attempt(s): {cause}", cause)
        self.address = address
        self.attempts = attempts


class NotConnectedError(PrinterError):
    kind = ErrorKind.NOT_CONNECTED

    def __init__(self) -> None:
        super().__init__("Not connected to printer")


class ConnectionLostError(PrinterError):
    kind = ErrorKind.CONNECTION_LOST


class AllAttemptsExhaustedError(PrinterError):
    """Raised when every send pass failed.

    The message is meant for end users and intentionally differs from the
    individual causes, which are kept in ``errors``.
    """

    kind = ErrorKind.ALL_ATTEMPTS_EXHAUSTED

    def __init__(self, errors: list[PrinterError]) -> None:
        super().__init__(
            f"Printing failed after {len(errors)} attempts. Try reconnecting the printer in settings.",
            errors[-1] if errors else None,
        )
        self.errors = errors
