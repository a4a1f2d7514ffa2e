"""Tests for API routes."""

from datetime import timezone

import pytest
from conftest import PRINTER_ADDRESS, PRINTER_NAME, FakeStream, FakeTransport
from fastapi.testclient import TestClient

from thermalpos.api import routes as api_routes
from thermalpos.app import create_app
from thermalpos.connection import TransportConnection
from thermalpos.errors import ErrorKind
from thermalpos.models.device import SavedPrinter
from thermalpos.models.receipt import ReceiptDesign
from thermalpos.models.transport import ConnectionPolicy
from thermalpos.printing import ReceiptPrinter
from thermalpos.renderer import ReceiptRenderer
from thermalpos.storage import MemoryStore, load_receipt_design

RECEIPT = {
    "id": "r-1",
    "timestamp_millis": 1705314600000,
    "kasir": "Budi",
    "items": [{"name": "Indomie Goreng", "price": 3500, "quantity": 3}],
    "total": 10500,
}


@pytest.fixture
def service(transport: FakeTransport, store: MemoryStore, fast_policy: ConnectionPolicy):
    """Wire a connection and printer into the route state, restoring it afterwards."""
    connection = TransportConnection(transport, store, fast_policy)
    printer = ReceiptPrinter(connection, ReceiptRenderer(tz=timezone.utc))
    saved_state = dict(api_routes._app_state)
    api_routes.set_app_state(connection, printer, store)
    yield connection
    api_routes._app_state.clear()
    api_routes._app_state.update(saved_state)


@pytest.fixture
def client(service) -> TestClient:
    # No context manager: the lifespan handler would load the real config
    return TestClient(create_app())


class TestPrinterRoutes:
    """Tests for printer connection routes."""

    def test_list_devices(self, client: TestClient):
        response = client.get("/api/v1/devices")
        assert response.status_code == 200
        assert response.json() == [{"address": PRINTER_ADDRESS, "name": PRINTER_NAME, "is_saved": False}]

    def test_list_devices_discovery_failure(self, client: TestClient, transport: FakeTransport):
        transport.discovery_error = OSError("Bluetooth adapter is off")
        response = client.get("/api/v1/devices")
        assert response.status_code == 200
        assert response.json() == []

    def test_status_disconnected(self, client: TestClient):
        response = client.get("/api/v1/printer")
        assert response.status_code == 200
        assert response.json() == {"connected": False, "device": None, "saved_printer": None}

    def test_connect_and_save(self, client: TestClient, service: TransportConnection):
        response = client.post("/api/v1/printer/connect", json={"address": PRINTER_ADDRESS, "name": PRINTER_NAME})

        assert response.status_code == 200
        assert service.saved_printer == SavedPrinter(address=PRINTER_ADDRESS, name=PRINTER_NAME)

        status = client.get("/api/v1/printer").json()
        assert status["connected"] is True
        assert status["device"]["address"] == PRINTER_ADDRESS

    def test_connect_without_saving(self, client: TestClient, service: TransportConnection):
        response = client.post("/api/v1/printer/connect", json={"address": PRINTER_ADDRESS, "save": False})
        assert response.status_code == 200
        assert service.saved_printer is None

    def test_connect_unknown_device(self, client: TestClient):
        response = client.post("/api/v1/printer/connect", json={"address": "00:00:00:00:00:00"})
        assert response.status_code == 404
        assert "00:00:00:00:00:00" in response.json()["detail"]

    def test_connect_failure(self, client: TestClient, transport: FakeTransport):
        transport.fail_with = ConnectionError("refused")
        response = client.post("/api/v1/printer/connect", json={"address": PRINTER_ADDRESS})
        assert response.status_code == 502

    def test_connect_lookup_permission_error(self, client: TestClient, transport: FakeTransport):
        transport.discovery_error = PermissionError("EACCES")
        response = client.post("/api/v1/printer/connect", json={"address": PRINTER_ADDRESS})
        assert response.status_code == 403

    def test_every_error_kind_has_status(self):
        assert set(api_routes.ERROR_STATUS) == set(ErrorKind)

    def test_disconnect(self, client: TestClient, service: TransportConnection):
        client.post("/api/v1/printer/connect", json={"address": PRINTER_ADDRESS})
        response = client.post("/api/v1/printer/disconnect")
        assert response.status_code == 200
        assert not service.is_connected

    def test_clear_saved(self, client: TestClient, service: TransportConnection):
        service.save_printer(PRINTER_ADDRESS, PRINTER_NAME)
        response = client.delete("/api/v1/printer/saved")
        assert response.status_code == 200
        assert service.saved_printer is None

    def test_test_print_without_saved_printer(self, client: TestClient):
        response = client.post("/api/v1/printer/test")
        assert response.status_code == 503
        assert "Try reconnecting" in response.json()["detail"]


class TestDesignRoutes:
    """Tests for receipt design routes."""

    def test_get_default_design(self, client: TestClient):
        response = client.get("/api/v1/design")
        assert response.status_code == 200
        assert response.json()["paper_width"] == 32

    def test_update_design(self, client: TestClient, store: MemoryStore):
        design = ReceiptDesign(store_name="TOKO MAJU", paper_width=48).model_dump()
        response = client.put("/api/v1/design", json=design)
        assert response.status_code == 200
        assert load_receipt_design(store).store_name == "TOKO MAJU"

    def test_invalid_design(self, client: TestClient):
        response = client.put("/api/v1/design", json={"paper_width": 2})
        assert response.status_code == 422


class TestReceiptRoutes:
    """Tests for receipt routes."""

    def test_preview(self, client: TestClient):
        response = client.post("/api/v1/receipts/preview", json={"receipt": RECEIPT})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "INDOMIE GORENG" in response.text
        assert "Rp10.500" in response.text

    def test_preview_with_design_override(self, client: TestClient):
        response = client.post(
            "/api/v1/receipts/preview",
            json={"receipt": RECEIPT, "design": {"store_name": "TOKO MAJU", "paper_width": 48}},
        )
        assert "★ TOKO MAJU ★" in response.text
        assert "╔" + "═" * 46 + "╗" in response.text

    def test_print(self, client: TestClient, service: TransportConnection, transport: FakeTransport):
        service.save_printer(PRINTER_ADDRESS, PRINTER_NAME)
        stream = FakeStream()
        transport.streams = [stream]

        response = client.post("/api/v1/receipts/print", json={"receipt": RECEIPT})

        assert response.status_code == 200
        assert b"INDOMIE GORENG" in stream.written[0]

    def test_print_without_saved_printer(self, client: TestClient):
        response = client.post("/api/v1/receipts/print", json={"receipt": RECEIPT})
        assert response.status_code == 503


class TestServiceState:
    """Tests for uninitialized state and API key checks."""

    def test_not_initialized(self):
        saved_state = dict(api_routes._app_state)
        api_routes._app_state.clear()
        try:
            response = TestClient(create_app()).get("/api/v1/printer")
            assert response.status_code == 503
        finally:
            api_routes._app_state.update(saved_state)

    def test_api_key_required(self, client: TestClient):
        api_routes._app_state["api_key"] = "secret"

        assert client.get("/api/v1/printer").status_code == 401
        assert client.get("/api/v1/printer", headers={"X-API-Key": "wrong"}).status_code == 401
        assert client.get("/api/v1/printer", headers={"X-API-Key": "secret"}).status_code == 200
        assert client.get("/api/v1/printer", headers={"Authorization": "Bearer secret"}).status_code == 200
