"""ESC/POS command encoding and fixed-width layout."""

from thermalpos.escpos.encoder import CommandEncoder
from thermalpos.escpos.layout import (
    center,
    format_number,
    format_rupiah,
    pair_columns,
    sanitize,
    truncate_with_ellipsis,
)

__all__ = [
    "CommandEncoder",
    "center",
    "format_number",
    "format_rupiah",
    "pair_columns",
    "sanitize",
    "truncate_with_ellipsis",
]
