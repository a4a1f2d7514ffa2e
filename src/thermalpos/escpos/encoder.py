"""ESC/POS command encoder for thermal receipt printers.

Builds an ordered byte buffer from formatting calls. Every method appends a
fixed opcode sequence (or encoded text) and returns the encoder, so calls can
be chained::

    data = CommandEncoder(paper_width=32).init().align_center().print_line("Hi").cut().build()

Command reference (hex):

    ESC @         1B 40          initialize
    ESC SP n      1B 20 n        right-side character spacing
    ESC M n       1B 4D n        select font A/B
    DC2 # n       12 23 n        print density and break time
    ESC a n       1B 61 n        justification
    ESC E n       1B 45 n        emphasized (bold)
    ESC ! n       1B 21 n        print mode (0x30 = double height + width)
    ESC 3 n       1B 33 n        line spacing in dots
    ESC 2         1B 32          default line spacing
    GS V m        1D 56 m        cut (0 = full, 1 = partial)
"""

from thermalpos.escpos.layout import pair_columns

ESC = 0x1B
GS = 0x1D
DC2 = 0x12

INITIALIZE = bytes([ESC, 0x40])
ALIGN_LEFT = bytes([ESC, 0x61, 0x00])
ALIGN_CENTER = bytes([ESC, 0x61, 0x01])
ALIGN_RIGHT = bytes([ESC, 0x61, 0x02])
BOLD_ON = bytes([ESC, 0x45, 0x01])
BOLD_OFF = bytes([ESC, 0x45, 0x00])
DOUBLE_SIZE_ON = bytes([ESC, 0x21, 0x30])
DOUBLE_SIZE_OFF = bytes([ESC, 0x21, 0x00])
RESET_LINE_SPACING = bytes([ESC, 0x32])
CUT_FULL = bytes([GS, 0x56, 0x00])
CUT_PARTIAL = bytes([GS, 0x56, 0x01])
NEWLINE = 0x0A

# Text encoding supported by the printer's built-in code page
TEXT_ENCODING = "latin-1"

DEFAULT_CHARACTER_SPACING = 1
DEFAULT_PAPER_WIDTH = 32


def _byte(name: str, value: int) -> int:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be between 0 and 255, got {value}")
    return value


class CommandEncoder:
    """Fluent ESC/POS byte buffer builder."""

    def __init__(self, paper_width: int = DEFAULT_PAPER_WIDTH) -> None:
        self.paper_width = paper_width
        self._buffer = bytearray()

    def init(self) -> "CommandEncoder":
        """Reset the printer and apply the default 1-dot character spacing."""
        self._buffer += INITIALIZE
        return self.set_character_spacing(DEFAULT_CHARACTER_SPACING)

    def set_character_spacing(self, dots: int) -> "CommandEncoder":
        self._buffer += bytes([ESC, 0x20, _byte("dots", dots)])
        return self

    def select_font(self, use_alternate: bool) -> "CommandEncoder":
        """Select font A (standard) or font B (alternate, smaller)."""
        self._buffer += bytes([ESC, 0x4D, 0x01 if use_alternate else 0x00])
        return self

    def set_print_density(self, heating: int, break_time: int) -> "CommandEncoder":
        """Set print density.

        Args:
            heating: Density level, low 5 bits are used.
            break_time: Heating break time, low 3 bits are used.
        """
        value = ((break_time & 0x07) << 5) | (heating & 0x1F)
        self._buffer += bytes([DC2, 0x23, value])
        return self

    def align_left(self) -> "CommandEncoder":
        self._buffer += ALIGN_LEFT
        return self

    def align_center(self) -> "CommandEncoder":
        self._buffer += ALIGN_CENTER
        return self

    def align_right(self) -> "CommandEncoder":
        self._buffer += ALIGN_RIGHT
        return self

    def bold(self, enabled: bool) -> "CommandEncoder":
        self._buffer += BOLD_ON if enabled else BOLD_OFF
        return self

    def double_size(self, enabled: bool) -> "CommandEncoder":
        self._buffer += DOUBLE_SIZE_ON if enabled else DOUBLE_SIZE_OFF
        return self

    def set_line_spacing(self, dots: int) -> "CommandEncoder":
        self._buffer += bytes([ESC, 0x33, _byte("dots", dots)])
        return self

    def reset_line_spacing(self) -> "CommandEncoder":
        self._buffer += RESET_LINE_SPACING
        return self

    def print(self, text: str) -> "CommandEncoder":
        """Append text without a line break.

        Raises:
            UnicodeEncodeError: If text contains characters outside Latin-1.
                Sanitize user input before printing.
        """
        self._buffer += text.encode(TEXT_ENCODING)
        return self

    def print_line(self, text: str = "") -> "CommandEncoder":
        self.print(text)
        self._buffer.append(NEWLINE)
        return self

    def print_double_column(self, left: str, right: str) -> "CommandEncoder":
        """Print ``left`` and ``right`` flush to opposite edges of the paper."""
        return self.print_line(pair_columns(left, right, self.paper_width))

    def separator(self, char: str = "-") -> "CommandEncoder":
        return self.print_line(char * self.paper_width)

    def double_separator(self) -> "CommandEncoder":
        return self.separator("=")

    def feed(self, lines: int = 1) -> "CommandEncoder":
        if lines < 0:
            raise ValueError(f"lines must not be negative, got {lines}")
        self._buffer += bytes([NEWLINE]) * lines
        return self

    def cut(self, partial: bool = True) -> "CommandEncoder":
        self._buffer += CUT_PARTIAL if partial else CUT_FULL
        return self

    def build(self) -> bytes:
        """Return the commands accumulated so far."""
        return bytes(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)
