"""Thermal receipt printing: ESC/POS encoding, receipt rendering and printer connections."""

__version__ = "0.1.0"
