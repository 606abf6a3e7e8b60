"""
Input Handler Module for Invoice Extraction System.

Turns invoice files and uploads into text tagged with its source mode.

Classes:
    InputHandler: Main input handling interface
    SourceText: Recovered text and its mode
    PDFProcessor: PDF text-layer extraction
    ImageProcessor: Image loading for OCR
"""

from .handler import InputHandler, SourceText
from .pdf_processor import PDFProcessor
from .image_processor import ImageProcessor

__all__ = ['InputHandler', 'SourceText', 'PDFProcessor', 'ImageProcessor']
