"""Output module for printable rosters."""

from storeshift.output.pdf_generator import PDFGenerator

__all__ = ["PDFGenerator"]
