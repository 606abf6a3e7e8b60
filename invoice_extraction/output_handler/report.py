"""
Daily Report Module.

Builds a CSV of the invoices logged on one calendar day. The day is taken
in the configured timezone (Asia/Kolkata by default), so a report run just
after midnight IST covers the previous IST day even though log timestamps
are stored in UTC.

Author: ML Engineering Team
"""

import csv
import io
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, List, Optional, Union

from dateutil import tz
from dateutil.parser import isoparse

from config import get_config
from invoice_extraction.utils.logger import get_logger
from invoice_extraction.utils.helpers import ensure_directory
from invoice_extraction.utils.exceptions import ConfigurationError, ReportError
from .excel_exporter import InvoiceWorkbook

# Initialize module logger
logger = get_logger(__name__)


class DailyReport:
    """
    CSV report of one day's invoice log.

    Attributes:
        workbook: InvoiceWorkbook the rows are read from
        output_dir: Directory the CSV is written to
        timezone: tzinfo used to decide which day a row belongs to

    Example:
        >>> report = DailyReport()
        >>> path = report.generate()  # yesterday, IST
        >>> if path is None:
        ...     print("No invoices logged yesterday.")
    """

    LOGGED_AT_COLUMN = 'Logged At'

    def __init__(
        self,
        workbook: Optional[InvoiceWorkbook] = None,
        output_dir: Optional[Union[str, Path]] = None,
        timezone: Optional[str] = None,
        filename_pattern: Optional[str] = None
    ) -> None:
        self.workbook = workbook or InvoiceWorkbook()
        self.output_dir = Path(output_dir or get_config("paths.report_dir", "outputs/reports"))
        self.timezone_name = timezone or get_config("output.report.timezone", "Asia/Kolkata")
        self.filename_pattern = filename_pattern or get_config(
            "output.report.filename_pattern", "invoices-{date}.csv"
        )

        self.timezone = tz.gettz(self.timezone_name)
        if self.timezone is None:
            raise ConfigurationError("output.report.timezone", f"unknown timezone '{self.timezone_name}'")

        logger.debug(f"DailyReport initialized (timezone: {self.timezone_name})")

    def default_report_date(self, now: Optional[datetime] = None) -> date:
        """Yesterday in the report timezone."""
        now = now or datetime.now(tz.tzutc())
        return now.astimezone(self.timezone).date() - timedelta(days=1)

    def local_date(self, logged_at: Any) -> Optional[date]:
        """
        Day a log timestamp falls on in the report timezone.

        Naive timestamps are taken as UTC. Unparseable values give None.
        """
        if logged_at is None:
            return None
        if isinstance(logged_at, datetime):
            moment = logged_at
        else:
            try:
                moment = isoparse(str(logged_at).strip())
            except ValueError:
                logger.debug(f"Skipping row with unreadable timestamp: {logged_at}")
                return None
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=tz.tzutc())
        return moment.astimezone(self.timezone).date()

    def select_rows(self, header: List[Any], rows: List[List[Any]], report_date: date) -> List[List[Any]]:
        """Rows whose log timestamp falls on ``report_date``."""
        if self.LOGGED_AT_COLUMN in header:
            index = header.index(self.LOGGED_AT_COLUMN)
        else:
            index = len(InvoiceWorkbook.INVOICE_COLUMNS) - 1

        return [
            row for row in rows
            if len(row) > index and self.local_date(row[index]) == report_date
        ]

    @staticmethod
    def to_csv(header: List[Any], rows: List[List[Any]]) -> str:
        """Render rows as CSV with every cell quoted."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
        writer.writerow(['' if cell is None else cell for cell in header])
        for row in rows:
            writer.writerow(['' if cell is None else cell for cell in row])
        return buffer.getvalue()

    def generate(self, report_date: Optional[date] = None) -> Optional[Path]:
        """
        Write the report for one day.

        Args:
            report_date: Day to report (default: yesterday).

        Returns:
            Path of the written CSV, or None when no invoice was logged
            that day.

        Raises:
            ReportError: If the report file cannot be written.
        """
        report_date = report_date or self.default_report_date()
        logger.info(f"Generating daily report for {report_date.isoformat()} ({self.timezone_name})")

        logs = self.workbook.read_invoice_rows()
        if len(logs) < 2:
            logger.info("No data found to report.")
            return None

        header, data_rows = logs[0], logs[1:]
        daily_rows = self.select_rows(header, data_rows, report_date)

        if not daily_rows:
            logger.info(f"No invoices logged on {report_date.isoformat()}.")
            return None

        filepath = self.output_dir / self.filename_pattern.format(date=report_date.isoformat())
        try:
            ensure_directory(self.output_dir)
            filepath.write_text(self.to_csv(header, daily_rows), encoding='utf-8')
        except OSError as e:
            raise ReportError(f"cannot write {filepath}: {e}")

        logger.info(f"Daily report saved: {filepath} ({len(daily_rows)} invoices)")
        return filepath
