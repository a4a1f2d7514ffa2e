"""Durable key-value storage for the saved printer and receipt design."""

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from thermalpos.models.device import SavedPrinter
from thermalpos.models.receipt import ReceiptDesign

logger = logging.getLogger(__name__)

SAVED_PRINTER_KEY = "saved_printer"
RECEIPT_DESIGN_KEY = "receipt_design"


class KeyValueStore(ABC):
    """Minimal key-value store. Values must be YAML/JSON-serializable."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the value stored under key, or None."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def clear(self, key: str) -> None:
        """Remove key. Removing a missing key is not an error."""


class MemoryStore(KeyValueStore):
    """In-process store; nothing survives a restart."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class YamlFileStore(KeyValueStore):
    """Store backed by a single YAML file, rewritten on every change."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path) as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            if data is not None:
                logger.warning(f"Ignoring malformed state file {self.path}")
            return {}
        return data

    def _dump(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            yaml.safe_dump(data, f, sort_keys=True)
        tmp_path.replace(self.path)

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._dump(data)

    def clear(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._dump(data)


def load_saved_printer(store: KeyValueStore) -> SavedPrinter | None:
    """Load the saved printer, or None if there is none (or it is unreadable)."""
    value = store.get(SAVED_PRINTER_KEY)
    if value is None:
        return None
    try:
        return SavedPrinter.model_validate(value)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid saved printer record: {e}")
        return None


def save_saved_printer(store: KeyValueStore, printer: SavedPrinter) -> None:
    store.set(SAVED_PRINTER_KEY, printer.model_dump())


def clear_saved_printer(store: KeyValueStore) -> None:
    store.clear(SAVED_PRINTER_KEY)


def load_receipt_design(store: KeyValueStore) -> ReceiptDesign:
    """Load the receipt design, falling back to defaults if missing or invalid."""
    value = store.get(RECEIPT_DESIGN_KEY)
    if value is None:
        return ReceiptDesign()
    try:
        return ReceiptDesign.model_validate(value)
    except ValidationError as e:
        logger.warning(f"Stored receipt design is invalid, using defaults: {e}")
        return ReceiptDesign()


def save_receipt_design(store: KeyValueStore, design: ReceiptDesign) -> None:
    store.set(RECEIPT_DESIGN_KEY, design.model_dump())
