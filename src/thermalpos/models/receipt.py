"""Receipt and receipt design models."""

import time
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field

from thermalpos.escpos.layout import format_rupiah


def _now_millis() -> int:
    return int(time.time() * 1000)


class ReceiptItem(BaseModel):
    """A line item; a snapshot of the product at time of sale."""

    name: str
    sku: str = ""
    price: int
    quantity: int
    unit: str = "pcs"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def subtotal(self) -> int:
        return self.price * self.quantity


class Receipt(BaseModel):
    """A completed sale."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp_millis: int = Field(default_factory=_now_millis)
    kasir: str = "Kasir"
    store_name: str = "WARMA STORE"
    items: list[ReceiptItem]
    total: int
    lembar_ke: int = 1  # Sheet number, for receipts printed in multiple copies
    keterangan: str = ""  # Free-form note printed next to the sheet number

    @classmethod
    def from_items(cls, items: list[ReceiptItem], **kwargs) -> "Receipt":
        """Build a receipt whose total is the sum of the item subtotals."""
        return cls(items=items, total=sum(item.subtotal for item in items), **kwargs)

    @property
    def item_count(self) -> int:
        return len(self.items)

    def formatted_total(self) -> str:
        return format_rupiah(self.total)


class ReceiptDesign(BaseModel):
    """User-editable layout settings for printed receipts."""

    store_name: str = "WARMA STORE"
    store_address: str = ""
    store_phone: str = ""
    header_text: str = ""
    footer_text: str = "Terima Kasih!"
    show_date_time: bool = True
    show_kasir: bool = True
    # Characters per line: 32 for 58mm paper, 48 for 80mm
    paper_width: int = Field(default=32, ge=8)
