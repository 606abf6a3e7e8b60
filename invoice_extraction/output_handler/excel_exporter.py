"""
Invoice Workbook Module.

This module persists extracted invoices to an Excel workbook with openpyxl.
The workbook holds four sheets:

    - Invoices: one row per logged invoice
    - Sales: running count of items sold per product
    - Settlements: settlement amount (net revenue) per product, seeded
      with the configured product list
    - Revenue: transaction log with a grand-total formula in row 1

Author: ML Engineering Team
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dateutil import tz
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from config import get_config
from invoice_extraction.extraction.invoice_record import SENTINEL, InvoiceRecord
from invoice_extraction.utils.logger import get_logger
from invoice_extraction.utils.helpers import ensure_directory
from invoice_extraction.utils.exceptions import WorkbookError

# Initialize module logger
logger = get_logger(__name__)

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center")
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)


def _fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


class InvoiceWorkbook:
    """
    Excel workbook log for extracted invoices.

    Every call opens the workbook from disk, applies its change and saves
    it again, so several processes can take turns on the same file.

    Attributes:
        path: Workbook file path
        settlement_products: Products seeded into the Settlements sheet

    Example:
        >>> workbook = InvoiceWorkbook("outputs/invoices.xlsx")
        >>> row = workbook.append(outcome.record)
        >>> print(row["Total Sold"])
    """

    INVOICE_COLUMNS = [
        'Order ID', 'Date', 'Price', 'Item Name',
        'Delivery Address', 'State', 'Total Sold', 'Logged At',
    ]
    SALES_COLUMNS = ['Product Name', 'Total Items Sold', 'Last Updated']
    SETTLEMENT_COLUMNS = ['Product Name', 'Settlement Amount (Net Revenue)']
    REVENUE_COLUMNS = [
        'Order ID', 'Date', 'Product Name',
        'Selling Price', 'Settlement Price', 'Net Revenue',
    ]

    GRAND_TOTAL_LABEL = 'GRAND TOTAL NET REVENUE'
    GRAND_TOTAL_FORMULA = '=SUM(F3:F1048576)'

    # Header colours per sheet
    INVOICE_COLOR = "4472C4"
    SALES_COLOR = "548235"
    SETTLEMENT_COLOR = "C65911"
    REVENUE_COLOR = "7030A0"

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        invoice_sheet: Optional[str] = None,
        sales_sheet: Optional[str] = None,
        settlements_sheet: Optional[str] = None,
        revenue_sheet: Optional[str] = None,
        settlement_products: Optional[List[str]] = None
    ) -> None:
        """
        Initialize the workbook with configuration.

        Args:
            path: Workbook file. If None, ``paths.output_dir`` joined with
                ``output.workbook.filename``.
            invoice_sheet: Invoice log sheet name.
            sales_sheet: Sales counter sheet name.
            settlements_sheet: Settlements sheet name.
            revenue_sheet: Revenue log sheet name.
            settlement_products: Products seeded with a zero settlement.
        """
        if path is None:
            path = Path(get_config("paths.output_dir", "outputs")) / \
                get_config("output.workbook.filename", "invoices.xlsx")
        self.path = Path(path)

        self.invoice_sheet = invoice_sheet or get_config("output.workbook.invoice_sheet", "Invoices")
        self.sales_sheet = sales_sheet or get_config("output.workbook.sales_sheet", "Sales")
        self.settlements_sheet = settlements_sheet or get_config("output.workbook.settlements_sheet", "Settlements")
        self.revenue_sheet = revenue_sheet or get_config("output.workbook.revenue_sheet", "Revenue")
        if settlement_products is None:
            settlement_products = get_config("output.workbook.settlement_products", [])
        self.settlement_products = list(settlement_products)

        logger.debug(f"InvoiceWorkbook initialized (path: {self.path})")

    # -------------------------------------------------------------------------
    # Workbook I/O
    # -------------------------------------------------------------------------

    def _open(self) -> Workbook:
        if not self.path.exists():
            workbook = Workbook()
            workbook.active.title = self.invoice_sheet
            return workbook
        try:
            return load_workbook(self.path)
        except Exception as e:
            logger.error(f"Failed to open workbook {self.path}: {e}")
            raise WorkbookError(str(self.path), str(e))

    def _save(self, workbook: Workbook) -> None:
        try:
            ensure_directory(self.path.parent)
            workbook.save(self.path)
        except Exception as e:
            logger.error(f"Failed to save workbook {self.path}: {e}")
            raise WorkbookError(str(self.path), str(e))

    def _style_header(self, sheet, row: int, columns: List[str], color: str) -> None:
        fill = _fill(color)
        for col, header in enumerate(columns, 1):
            cell = sheet.cell(row=row, column=col, value=header)
            cell.font = HEADER_FONT
            cell.fill = fill
            cell.alignment = HEADER_ALIGNMENT
            cell.border = THIN_BORDER
            column_letter = get_column_letter(col)
            sheet.column_dimensions[column_letter].width = min(max(len(header) + 4, 14), 50)

    def _sheet(self, workbook: Workbook, name: str):
        if name in workbook.sheetnames:
            return workbook[name]
        return workbook.create_sheet(title=name)

    def _invoices(self, workbook: Workbook):
        sheet = self._sheet(workbook, self.invoice_sheet)
        if sheet.max_row == 1 and sheet.cell(row=1, column=1).value is None:
            self._style_header(sheet, 1, self.INVOICE_COLUMNS, self.INVOICE_COLOR)
            sheet.freeze_panes = 'A2'
        return sheet

    def _sales(self, workbook: Workbook):
        sheet = self._sheet(workbook, self.sales_sheet)
        if sheet.max_row == 1 and sheet.cell(row=1, column=1).value is None:
            self._style_header(sheet, 1, self.SALES_COLUMNS, self.SALES_COLOR)
            sheet.freeze_panes = 'A2'
        return sheet

    def _settlements(self, workbook: Workbook):
        sheet = self._sheet(workbook, self.settlements_sheet)
        if sheet.max_row == 1 and sheet.cell(row=1, column=1).value is None:
            self._style_header(sheet, 1, self.SETTLEMENT_COLUMNS, self.SETTLEMENT_COLOR)
            for product in self.settlement_products:
                sheet.append([product, 0])
            sheet.freeze_panes = 'A2'
            logger.info(f"Seeded {len(self.settlement_products)} products into {self.settlements_sheet}")
        return sheet

    def _revenue(self, workbook: Workbook):
        sheet = self._sheet(workbook, self.revenue_sheet)
        if sheet.max_row == 1 and sheet.cell(row=1, column=1).value is None:
            sheet.cell(row=1, column=1, value=self.GRAND_TOTAL_LABEL).font = Font(bold=True)
            sheet.cell(row=1, column=6, value=self.GRAND_TOTAL_FORMULA).font = Font(bold=True)
            self._style_header(sheet, 2, self.REVENUE_COLUMNS, self.REVENUE_COLOR)
            sheet.freeze_panes = 'A3'
        return sheet

    def initialize(self) -> Path:
        """
        Create any missing sheet (with headers) and save the workbook.

        Returns:
            Path to the workbook.
        """
        workbook = self._open()
        self._invoices(workbook)
        self._sales(workbook)
        self._settlements(workbook)
        self._revenue(workbook)
        self._save(workbook)
        return self.path

    # -------------------------------------------------------------------------
    # Logging invoices
    # -------------------------------------------------------------------------

    def append(
        self,
        record: InvoiceRecord,
        logged_at: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Log one invoice, updating the sales counter and revenue log.

        Failures while updating the sales counter or the revenue log are
        logged and do not stop the invoice row from being written.

        Args:
            record: Successfully extracted invoice.
            logged_at: Log timestamp (default: now, UTC).

        Returns:
            The written invoice row keyed by column name.

        Raises:
            WorkbookError: If the workbook cannot be opened or saved.
        """
        logged_at = logged_at or datetime.now(tz.tzutc())
        timestamp = logged_at.isoformat()

        workbook = self._open()
        sheet = self._invoices(workbook)

        total_sold = SENTINEL
        if record.item_name != SENTINEL:
            try:
                total_sold = str(self._increment_sales(workbook, record.item_name, timestamp))
            except Exception as e:
                logger.error(f"Failed to update sales count for '{record.item_name}': {e}")

            try:
                settlement = self._settlement_price(workbook, record.item_name)
                self._log_revenue(workbook, record, settlement)
            except Exception as e:
                logger.error(f"Failed to log revenue transaction for {record.order_id}: {e}")

        row = [
            record.order_id,
            record.date,
            record.price,
            record.item_name,
            record.delivery_address,
            record.delivery_state,
            total_sold,
            timestamp,
        ]
        sheet.append(row)
        for cell in sheet[sheet.max_row]:
            cell.border = THIN_BORDER

        self._save(workbook)
        logger.info(f"Logged invoice {record.order_id} to {self.path.name}")
        return dict(zip(self.INVOICE_COLUMNS, row))

    def _increment_sales(self, workbook: Workbook, product: str, timestamp: str) -> int:
        sheet = self._sales(workbook)
        wanted = product.lower()

        for row in sheet.iter_rows(min_row=2):
            name = row[0].value
            if name is not None and str(name).lower() == wanted:
                count = int(row[1].value or 0) + 1
                row[1].value = count
                row[2].value = timestamp
                logger.debug(f"Sales count for '{product}' is now {count}")
                return count

        sheet.append([product, 1, timestamp])
        logger.debug(f"Started sales count for '{product}'")
        return 1

    def _settlement_price(self, workbook: Workbook, product: str) -> float:
        sheet = self._settlements(workbook)
        wanted = product.lower()

        for name, amount in sheet.iter_rows(min_row=2, max_col=2, values_only=True):
            if name is not None and str(name).lower() == wanted:
                digits = re.sub(r'[^0-9.]', '', str(amount if amount is not None else ''))
                try:
                    return float(digits) if digits else 0.0
                except ValueError:
                    logger.warning(f"Unreadable settlement amount for '{product}': {amount}")
                    return 0.0

        logger.debug(f"No settlement amount for '{product}', using 0")
        return 0.0

    def _log_revenue(self, workbook: Workbook, record: InvoiceRecord, settlement: float) -> None:
        sheet = self._revenue(workbook)
        # Net revenue is the settlement received for the product
        net_revenue = settlement
        sheet.append([
            record.order_id,
            record.date,
            record.item_name,
            record.price,
            settlement,
            net_revenue,
        ])

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def read_invoice_rows(self) -> List[List[Any]]:
        """
        Read the invoice log, header row first.

        Returns:
            List of rows (empty when the workbook does not exist yet).
        """
        if not self.path.exists():
            return []
        workbook = self._open()
        if self.invoice_sheet not in workbook.sheetnames:
            return []
        sheet = workbook[self.invoice_sheet]
        return [
            list(row) for row in sheet.iter_rows(values_only=True)
            if any(value is not None for value in row)
        ]

    def get_sales_count(self, product: str) -> Optional[int]:
        """Current sales count for a product (case-insensitive), or None."""
        if not self.path.exists():
            return None
        workbook = self._open()
        if self.sales_sheet not in workbook.sheetnames:
            return None
        for name, count, _ in workbook[self.sales_sheet].iter_rows(min_row=2, max_col=3, values_only=True):
            if name is not None and str(name).lower() == product.lower():
                return int(count or 0)
        return None

    def get_settlement_price(self, product: str) -> float:
        """Settlement amount for a product (case-insensitive), 0 when unknown."""
        workbook = self._open()
        return self._settlement_price(workbook, product)
