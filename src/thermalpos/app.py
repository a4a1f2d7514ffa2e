"""FastAPI application factory for thermalpos."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from thermalpos.api import routes as api_routes
from thermalpos.config import load_config, settings
from thermalpos.connection import TransportConnection
from thermalpos.printing import ReceiptPrinter
from thermalpos.storage import YamlFileStore
from thermalpos.transports import create_transport

logger = logging.getLogger(__name__)

# Application state
_connection: TransportConnection | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    global _connection

    logger.info(f"Loading configuration from {settings.config_file}")
    config = load_config(settings.config_file)

    store = YamlFileStore(config.state_file)
    transport = create_transport(config.transport)
    _connection = TransportConnection(transport, store, config.connection)
    printer = ReceiptPrinter(_connection)
    logger.info(f"Using {config.transport.type} transport, state in {config.state_file}")

    saved = _connection.saved_printer
    if saved:
        logger.info(f"Saved printer: {saved.name} ({saved.address})")

    api_routes.set_app_state(_connection, printer, store, api_key=config.api_key)
    logger.info("thermalpos startup complete")

    yield

    logger.info("thermalpos shutting down")
    if _connection:
        await _connection.disconnect()
    logger.info("thermalpos shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="thermalpos",
        description="Thermal receipt printing service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(
        api_routes.router,
        dependencies=[Depends(api_routes.verify_api_key)],
    )
    return app


# Default app instance for uvicorn
app = create_app()
