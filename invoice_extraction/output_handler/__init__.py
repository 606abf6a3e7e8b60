"""
Output Handler Module for Invoice Extraction System.

This module provides functionality for:
    - Logging invoices to an Excel workbook (openpyxl)
    - Sales counters and revenue transaction log
    - Daily CSV report

Author: ML Engineering Team
"""

from .handler import OutputHandler
from .excel_exporter import InvoiceWorkbook
from .report import DailyReport

__all__ = ['OutputHandler', 'InvoiceWorkbook', 'DailyReport']
