"""REST API routes for thermalpos."""

import secrets
from typing import Any

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from thermalpos.connection import TransportConnection
from thermalpos.errors import ErrorKind
from thermalpos.models.device import Device, SavedPrinter
from thermalpos.models.receipt import Receipt, ReceiptDesign
from thermalpos.models.result import PrintResult
from thermalpos.printing import ReceiptPrinter
from thermalpos.storage import KeyValueStore, load_receipt_design, save_receipt_design

router = APIRouter(prefix="/api/v1", tags=["api"])

# These will be set by the app during startup
_app_state: dict[str, Any] = {}

ERROR_STATUS = {
    ErrorKind.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NO_SAVED_DEVICE: status.HTTP_409_CONFLICT,
    ErrorKind.DEVICE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONNECT_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.NOT_CONNECTED: status.HTTP_409_CONFLICT,
    ErrorKind.CONNECTION_LOST: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.ALL_ATTEMPTS_EXHAUSTED: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def set_app_state(
    connection: TransportConnection | None,
    printer: ReceiptPrinter | None,
    store: KeyValueStore | None,
    api_key: str | None = None,
) -> None:
    """Set application state references for the routes."""
    _app_state["connection"] = connection
    _app_state["printer"] = printer
    _app_state["store"] = store
    _app_state["api_key"] = api_key


async def verify_api_key(request: Request) -> None:
    """Verify API key if configured.

    API key can be provided via:
    - X-API-Key header
    - Authorization: Bearer <key> header

    If no API key is configured, all requests are allowed.
    """
    configured_key = _app_state.get("api_key")
    if not configured_key:
        return

    provided_key = request.headers.get("X-API-Key")
    if provided_key is None:
        auth = request.headers.get("Authorization", "")
        if auth.startswith("Bearer "):
            provided_key = auth[7:]

    if not provided_key or not secrets.compare_digest(provided_key, configured_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "Bearer"},
        )


def _require(key: str) -> Any:
    value = _app_state.get(key)
    if value is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Printer service not initialized")
    return value


def _check(result: PrintResult) -> None:
    if result.error is not None:
        raise HTTPException(status_code=ERROR_STATUS[result.error.kind], detail=result.error.message)


# Request/response models


class PrinterStatus(BaseModel):
    """Printer connection status response."""

    connected: bool
    device: Device | None = None
    saved_printer: SavedPrinter | None = None


class ConnectRequest(BaseModel):
    """Connect request body."""

    address: str
    name: str | None = None
    save: bool = True


class PrintRequest(BaseModel):
    """Receipt print/preview request body. Uses the stored design when omitted."""

    receipt: Receipt
    design: ReceiptDesign | None = None


class ActionResponse(BaseModel):
    status: str = "ok"
    message: str = "OK"


def _design_for(request: PrintRequest) -> ReceiptDesign:
    if request.design is not None:
        return request.design
    return load_receipt_design(_require("store"))


# Endpoints


@router.get("/devices", response_model=list[Device])
async def list_devices() -> list[Device]:
    """List paired printers, the saved printer first."""
    connection: TransportConnection = _require("connection")
    return await connection.list_devices()


@router.get("/printer", response_model=PrinterStatus)
async def get_printer() -> PrinterStatus:
    """Get the current connection status."""
    connection: TransportConnection = _require("connection")
    return PrinterStatus(
        connected=connection.is_connected,
        device=connection.connected_device,
        saved_printer=connection.saved_printer,
    )


@router.post("/printer/connect", response_model=ActionResponse)
async def connect_printer(request: ConnectRequest) -> ActionResponse:
    """Connect to a printer, optionally saving it as the default."""
    connection: TransportConnection = _require("connection")
    if request.save:
        result = await connection.connect_and_save(request.address, request.name or request.address)
    else:
        result = await connection.connect(request.address)
    _check(result)
    return ActionResponse(message=f"Connected to {request.name or request.address}")


@router.post("/printer/disconnect", response_model=ActionResponse)
async def disconnect_printer() -> ActionResponse:
    connection: TransportConnection = _require("connection")
    await connection.disconnect()
    return ActionResponse(message="Printer disconnected")


@router.delete("/printer/saved", response_model=ActionResponse)
async def clear_saved_printer() -> ActionResponse:
    connection: TransportConnection = _require("connection")
    connection.clear_saved_printer()
    return ActionResponse(message="Saved printer cleared")


@router.post("/printer/test", response_model=ActionResponse)
async def test_print() -> ActionResponse:
    """Print a short test page on the saved printer."""
    printer: ReceiptPrinter = _require("printer")
    design = load_receipt_design(_require("store"))
    _check(await printer.test_print(design.paper_width))
    return ActionResponse(message="Test print sent")


@router.get("/design", response_model=ReceiptDesign)
async def get_design() -> ReceiptDesign:
    return load_receipt_design(_require("store"))


@router.put("/design", response_model=ReceiptDesign)
async def update_design(design: ReceiptDesign) -> ReceiptDesign:
    save_receipt_design(_require("store"), design)
    return design


@router.post("/receipts/preview", response_class=PlainTextResponse)
async def preview_receipt(request: PrintRequest) -> str:
    """Render the on-screen text preview of a receipt."""
    printer: ReceiptPrinter = _require("printer")
    return printer.preview(request.receipt, _design_for(request))


@router.post("/receipts/print", response_model=ActionResponse)
async def print_receipt(request: PrintRequest) -> ActionResponse:
    """Print a receipt on the saved printer."""
    printer: ReceiptPrinter = _require("printer")
    _check(await printer.print_receipt(request.receipt, _design_for(request)))
    return ActionResponse(message=f"Receipt {request.receipt.id} printed")
