"""Receipt rendering: ESC/POS bytes for printing, box-drawn text for preview."""

from datetime import datetime, tzinfo

from thermalpos.escpos.encoder import CommandEncoder
from thermalpos.escpos.layout import (
    center,
    format_number,
    format_rupiah,
    pair_columns,
    sanitize,
    truncate_with_ellipsis,
)
from thermalpos.models.receipt import Receipt, ReceiptDesign, ReceiptItem

# Line spacing (dots) used between item rows for readability
ITEM_LINE_SPACING = 32

# Box-drawing glyphs for the preview
BOX_TOP = ("╔", "═", "╗")
BOX_MIDDLE = ("╠", "═", "╣")
BOX_BOTTOM = ("╚", "═", "╝")
BOX_SIDE = "║"


class ReceiptRenderer:
    """Render receipts for the printer and for on-screen preview.

    Args:
        tz: Timezone for receipt timestamps. None means local time.
    """

    def __init__(self, tz: tzinfo | None = None) -> None:
        self.tz = tz

    def _timestamp(self, receipt: Receipt) -> datetime:
        return datetime.fromtimestamp(receipt.timestamp_millis / 1000, tz=self.tz)

    @staticmethod
    def _sheet_line(receipt: Receipt) -> tuple[str, str]:
        sheet = f"Lembar ke: {receipt.lembar_ke}"
        note = f"Ket: {receipt.keterangan}" if receipt.keterangan.strip() else ""
        return sheet, note

    @staticmethod
    def _item_name(item: ReceiptItem, width: int) -> str:
        return truncate_with_ellipsis(item.name.upper(), width)

    def render_bytes(self, receipt: Receipt, design: ReceiptDesign) -> bytes:
        """Build the full command sequence for a receipt."""
        width = design.paper_width
        enc = CommandEncoder(paper_width=width)

        enc.init()
        enc.feed(2)

        sheet, note = self._sheet_line(receipt)
        enc.align_left()
        if note:
            enc.print_double_column(sanitize(sheet), sanitize(note))
        else:
            enc.print_line(sanitize(sheet))
        enc.separator()

        if design.header_text.strip():
            enc.align_center()
            enc.print_line(sanitize(design.header_text))

        enc.align_center()
        enc.bold(True).double_size(True)
        enc.print_line(sanitize(design.store_name))
        enc.double_size(False).bold(False)

        if design.store_address.strip():
            enc.print_line(sanitize(design.store_address))
        if design.store_phone.strip():
            enc.print_line(sanitize(design.store_phone))

        if design.show_date_time:
            enc.print_line(self._timestamp(receipt).strftime("%d/%m/%Y %H:%M"))
        if design.show_kasir:
            enc.print_line(sanitize(f"Kasir: {receipt.kasir}"))

        enc.align_left()
        enc.double_separator()

        enc.set_line_spacing(ITEM_LINE_SPACING)
        for item in receipt.items:
            enc.bold(True)
            enc.print_line(sanitize(self._item_name(item, width)))
            enc.bold(False)

            detail = sanitize(f"  {item.quantity} x {format_number(item.price)}")
            subtotal = format_rupiah(item.subtotal)
            line = pair_columns(detail, subtotal, width)
            # Everything before the subtotal is printed plain, the subtotal bold
            enc.print(line[: len(line) - len(subtotal)])
            enc.bold(True)
            enc.print_line(subtotal)
            enc.bold(False)
        enc.reset_line_spacing()

        enc.double_separator()
        enc.bold(True)
        enc.print_double_column("TOTAL", format_rupiah(receipt.total))
        enc.bold(False)
        enc.separator()

        enc.align_center()
        enc.print_line(sanitize(design.footer_text))

        enc.feed(3)
        enc.cut()
        return enc.build()

    def render_preview(self, receipt: Receipt, design: ReceiptDesign) -> str:
        """Render a decorative text version of the receipt for display.

        Fields appear in the same order as on paper; the glyphs differ.
        """
        width = design.paper_width
        inner = width - 2
        lines: list[str] = ["", ""]

        def rule(glyphs: tuple[str, str, str]) -> str:
            left, fill, right = glyphs
            return left + fill * inner + right

        def boxed(text: str) -> str:
            return BOX_SIDE + text[:inner].ljust(inner) + BOX_SIDE

        def centered(text: str) -> str:
            return boxed(center(text, inner))

        sheet, note = self._sheet_line(receipt)
        lines.append(pair_columns(sheet, note, width) if note else sheet)

        lines.append(rule(BOX_TOP))
        if design.header_text.strip():
            lines.append(centered(design.header_text))
        lines.append(centered(f"★ {design.store_name} ★"))
        if design.store_address.strip():
            lines.append(centered(design.store_address))
        if design.store_phone.strip():
            lines.append(centered(f"☎ {design.store_phone}"))

        if design.show_date_time or design.show_kasir:
            lines.append(rule(BOX_MIDDLE))
        if design.show_date_time:
            lines.append(centered(self._timestamp(receipt).strftime("%d %b %Y  %H:%M")))
        if design.show_kasir:
            lines.append(centered(f"Kasir: {receipt.kasir}"))

        lines.append(rule(BOX_MIDDLE))
        lines.append(centered("--- DAFTAR BELANJA ---"))
        lines.append(boxed(""))
        for item in receipt.items:
            lines.append(boxed(f" • {self._item_name(item, inner - 3)}"))
            detail = f"   {item.quantity}x @{format_number(item.price)}"
            lines.append(boxed(pair_columns(detail, format_rupiah(item.subtotal), inner)))

        lines.append(rule(BOX_MIDDLE))
        total_label = f"  TOTAL ({receipt.item_count} item)"
        lines.append(boxed(pair_columns(total_label, format_rupiah(receipt.total), inner)))
        lines.append(rule(BOX_MIDDLE))

        lines.append(centered(design.footer_text))
        lines.append(centered("Terima Kasih"))
        lines.append(rule(BOX_BOTTOM))

        return "\n".join(lines)

    def render_test_page(self, paper_width: int = 32, now: datetime | None = None) -> bytes:
        """Build a short page to check that the printer responds."""
        now = now or datetime.now(tz=self.tz)
        return (
            CommandEncoder(paper_width=paper_width)
            .init()
            .align_center()
            .print_line("=== TEST PRINT ===")
            .print_line("Printer OK!")
            .print_line(now.strftime("%H:%M:%S"))
            .feed(3)
            .cut()
            .build()
        )
