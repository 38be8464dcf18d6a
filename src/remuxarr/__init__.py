"""remuxarr - strip, extract and OCR tracks of Matroska containers."""

__version__ = "0.1.0"
