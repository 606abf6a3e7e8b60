"""
OCR Engine Module for Invoice Extraction System.

Text recognition for image invoices, with a per-call timeout.

Classes:
    OCREngine: Main OCR interface
    TesseractBackend: Tesseract OCR implementation
"""

from .engine import OCREngine
from .tesseract_backend import TesseractBackend

__all__ = ['OCREngine', 'TesseractBackend']
