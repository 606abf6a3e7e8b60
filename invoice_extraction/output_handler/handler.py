"""
Main Output Handler Module.

This module provides the OutputHandler class that coordinates the output
side of the system: logging successful extractions to the invoice
workbook and producing the daily report.

Author: ML Engineering Team
"""

from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from config import get_config
from invoice_extraction.extraction.invoice_record import ExtractionOutcome
from invoice_extraction.utils.logger import get_logger
from .excel_exporter import InvoiceWorkbook
from .report import DailyReport

# Initialize module logger
logger = get_logger(__name__)


class OutputHandler:
    """
    Unified output handler for extraction outcomes.

    Attributes:
        workbook_enabled: Whether successful records are logged
        workbook: InvoiceWorkbook instance

    Example:
        >>> handler = OutputHandler()
        >>> handler.save(outcomes)
        {'logged': 3, 'skipped': 1, 'workbook_path': 'outputs/invoices.xlsx'}
        >>> handler.daily_report()
    """

    def __init__(
        self,
        workbook_path: Optional[Union[str, Path]] = None,
        workbook_enabled: Optional[bool] = None,
        workbook: Optional[InvoiceWorkbook] = None
    ) -> None:
        """
        Initialize the output handler.

        Args:
            workbook_path: Override the configured workbook file.
            workbook_enabled: Override config for workbook output.
            workbook: Ready-made workbook (takes precedence over the path).
        """
        self.workbook_enabled = workbook_enabled if workbook_enabled is not None else \
            get_config("output.workbook.enabled", True)

        self._workbook_path = workbook_path
        self._workbook = workbook

        logger.info(f"OutputHandler initialized (workbook={self.workbook_enabled})")

    @property
    def workbook(self) -> InvoiceWorkbook:
        """Get or create the invoice workbook."""
        if self._workbook is None:
            self._workbook = InvoiceWorkbook(self._workbook_path)
        return self._workbook

    def save(
        self,
        outcomes: Union[ExtractionOutcome, List[ExtractionOutcome]]
    ) -> Dict[str, Any]:
        """
        Log every successful outcome to the workbook.

        Failed outcomes are skipped.

        Args:
            outcomes: Single outcome or list of outcomes.

        Returns:
            Dictionary with 'logged' and 'skipped' counts and the
            workbook path (None when the workbook is disabled).

        Raises:
            WorkbookError: If the workbook cannot be saved.
        """
        if isinstance(outcomes, ExtractionOutcome):
            outcomes = [outcomes]

        output_info = {'logged': 0, 'skipped': 0, 'workbook_path': None}
        if not self.workbook_enabled:
            output_info['skipped'] = len(outcomes)
            return output_info

        for outcome in outcomes:
            if not outcome.success:
                output_info['skipped'] += 1
                continue
            self.workbook.append(outcome.record)
            output_info['logged'] += 1

        output_info['workbook_path'] = str(self.workbook.path)
        return output_info

    def daily_report(
        self,
        report_date: Optional[date] = None,
        output_dir: Optional[Union[str, Path]] = None
    ) -> Optional[Path]:
        """
        Write the daily CSV report.

        Args:
            report_date: Day to report (default: yesterday).
            output_dir: Override the configured report directory.

        Returns:
            Path to the CSV, or None when nothing was logged that day.
        """
        report = DailyReport(workbook=self.workbook, output_dir=output_dir)
        return report.generate(report_date)
