"""
Invoice Extraction System - Source Package.

This package recovers six fields (order identifier, date, total price,
item name, delivery address, delivery state) from invoice PDFs and
photos, and logs them to an Excel workbook.

Modules:
    - input_handler: PDF text layer and image loading
    - ocr_engine: Text recognition with a timeout
    - extraction: Rule-based field extraction engine
    - output_handler: Workbook logging and daily report
    - processor: File/upload -> ExtractionOutcome
    - utils: Logging, exceptions, helpers

Architecture:
    Input → (PDF text layer | OCR) → Extraction → Acceptance gate → Output
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

__all__ = [
    'input_handler',
    'ocr_engine',
    'extraction',
    'output_handler',
    'processor',
    'utils'
]
