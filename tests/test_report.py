"""Tests for the daily CSV report."""

import csv
import io
from datetime import date, datetime

import pytest
from dateutil import tz

from invoice_extraction.extraction import InvoiceRecord
from invoice_extraction.output_handler import DailyReport, InvoiceWorkbook, OutputHandler
from invoice_extraction.utils.exceptions import ConfigurationError


UTC = tz.tzutc()


def _record(order_id, item_name="Voeux-Ambient"):
    return InvoiceRecord(order_id=order_id, date="12-01-2026", price="₹1499.00", item_name=item_name)


@pytest.fixture
def workbook(tmp_path):
    workbook = InvoiceWorkbook(tmp_path / "invoices.xlsx", settlement_products=[])
    # 01:30 IST on the 12th, 22:30 IST on the 12th, 00:30 IST on the 13th
    workbook.append(_record("OD000000000000000001"), logged_at=datetime(2026, 1, 11, 20, 0, tzinfo=UTC))
    workbook.append(_record("OD000000000000000002", 'Speaker "Pro" 40W'),
                    logged_at=datetime(2026, 1, 12, 17, 0, tzinfo=UTC))
    workbook.append(_record("OD000000000000000003"), logged_at=datetime(2026, 1, 12, 19, 0, tzinfo=UTC))
    return workbook


@pytest.fixture
def report(workbook, tmp_path):
    return DailyReport(workbook=workbook, output_dir=tmp_path / "reports")


class TestDaySelection:
    """Rows are assigned to days in the report timezone."""

    def test_ist_day_boundaries(self, report):
        path = report.generate(date(2026, 1, 12))

        rows = list(csv.reader(io.StringIO(path.read_text(encoding="utf-8"))))
        assert rows[0] == InvoiceWorkbook.INVOICE_COLUMNS
        assert [row[0] for row in rows[1:]] == ["OD000000000000000001", "OD000000000000000002"]

    def test_filename_uses_report_date(self, report):
        path = report.generate(date(2026, 1, 13))
        assert path.name == "invoices-2026-01-13.csv"

    def test_no_rows_for_day(self, report, tmp_path):
        assert report.generate(date(2026, 2, 1)) is None
        assert not (tmp_path / "reports").exists()

    def test_empty_workbook(self, tmp_path):
        report = DailyReport(workbook=InvoiceWorkbook(tmp_path / "none.xlsx"), output_dir=tmp_path)
        assert report.generate(date(2026, 1, 12)) is None

    def test_default_is_yesterday_in_ist(self, report):
        # 00:30 IST on the 13th
        now = datetime(2026, 1, 12, 19, 0, tzinfo=UTC)
        assert report.default_report_date(now) == date(2026, 1, 12)

    def test_naive_timestamps_are_utc(self, report):
        assert report.local_date("2026-01-12T19:00:00") == date(2026, 1, 13)

    def test_unreadable_timestamp(self, report):
        assert report.local_date("yesterday-ish") is None
        assert report.local_date(None) is None


class TestCSVFormat:
    """Every cell is quoted."""

    def test_all_cells_quoted(self, report):
        text = report.generate(date(2026, 1, 12)).read_text(encoding="utf-8")
        first_line = text.splitlines()[0]
        assert first_line == ",".join(f'"{column}"' for column in InvoiceWorkbook.INVOICE_COLUMNS)

    def test_embedded_quotes_doubled(self, report):
        text = report.generate(date(2026, 1, 12)).read_text(encoding="utf-8")
        assert '"Speaker ""Pro"" 40W"' in text

    def test_empty_cells(self):
        assert DailyReport.to_csv(["a", "b"], [[None, 1]]) == '"a","b"\n"","1"\n'


def test_unknown_timezone_rejected(workbook):
    with pytest.raises(ConfigurationError):
        DailyReport(workbook=workbook, timezone="Mars/Olympus_Mons")


def test_output_handler_report(workbook, tmp_path):
    path = OutputHandler(workbook=workbook).daily_report(date(2026, 1, 12), output_dir=tmp_path / "out")
    assert path.parent == tmp_path / "out"
