"""Receipt printing on top of a printer connection."""

import logging

from thermalpos.connection import TransportConnection
from thermalpos.models.receipt import Receipt, ReceiptDesign
from thermalpos.models.result import PrintResult
from thermalpos.renderer import ReceiptRenderer

logger = logging.getLogger(__name__)


class ReceiptPrinter:
    """Render receipts and send them to the saved printer."""

    def __init__(self, connection: TransportConnection, renderer: ReceiptRenderer | None = None) -> None:
        self.connection = connection
        self.renderer = renderer or ReceiptRenderer()

    async def print_receipt(self, receipt: Receipt, design: ReceiptDesign) -> PrintResult:
        data = self.renderer.render_bytes(receipt, design)
        result = await self.connection.send_raw(data)
        if result.ok:
            logger.info(f"Printed receipt {receipt.id} ({receipt.item_count} items, {len(data)} bytes)")
        else:
            logger.error(f"Failed to print receipt {receipt.id}: {result.message}")
        return result

    def preview(self, receipt: Receipt, design: ReceiptDesign) -> str:
        return self.renderer.render_preview(receipt, design)

    async def test_print(self, paper_width: int = 32) -> PrintResult:
        result = await self.connection.send_raw(self.renderer.render_test_page(paper_width))
        if not result.ok:
            logger.error(f"Test print failed: {result.message}")
        return result
