"""Outcome of a printing operation."""

from dataclasses import dataclass

from thermalpos.errors import ErrorKind, PrinterError


@dataclass(frozen=True)
class PrintResult:
    """Success, or a failure carrying a categorized PrinterError."""

    error: PrinterError | None = None

    @classmethod
    def success(cls) -> "PrintResult":
        return cls()

    @classmethod
    def failure(cls, error: PrinterError) -> "PrintResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> ErrorKind | None:
        return self.error.kind if self.error else None

    @property
    def message(self) -> str:
        return self.error.message if self.error else "OK"

    def __bool__(self) -> bool:
        return self.ok
