"""Fixed-width text layout helpers for receipt lines.

All functions are pure and work in characters, not dots: one character is one
cell on the printer's character grid.
"""

CURRENCY_PREFIX = "Rp"


def center(text: str, width: int) -> str:
    """Left-pad text so it sits in the middle of a line of ``width`` characters.

    Text wider than ``width`` is returned unchanged (never truncated).
    """
    pad = (width - len(text)) // 2
    if pad > 0:
        return " " * pad + text
    return text


def pair_columns(left: str, right: str, width: int) -> str:
    """Join two strings flush against opposite edges of a ``width`` line.

    When both fit, the gap is filled with spaces so the result is exactly
    ``width`` long. Otherwise ``left`` is truncated to leave room for a single
    space and ``right``; ``right`` is never truncated, so an over-long right
    side yields a line wider than ``width``.
    """
    gap = width - len(left) - len(right)
    if gap > 0:
        return left + " " * gap + right
    keep = max(width - len(right) - 1, 0)
    return left[:keep] + " " + right


def truncate_with_ellipsis(text: str, width: int) -> str:
    """Cut text to ``width`` characters, marking the cut with ``...``."""
    if len(text) <= width:
        return text
    # No room for the marker below three columns
    if width < 3:
        return text[: max(width, 0)]
    return text[: width - 3] + "..."


def format_number(value: int) -> str:
    """Group thousands with dots: ``30000 -> "30.000"``."""
    return f"{value:,d}".replace(",", ".")


def format_rupiah(value: int) -> str:
    """Format an amount as ``Rp30.000``."""
    return f"{CURRENCY_PREFIX}{format_number(value)}"


def sanitize(text: str) -> str:
    """Replace characters the printer's single-byte charset cannot encode."""
    return text.encode("latin-1", errors="replace").decode("latin-1")
