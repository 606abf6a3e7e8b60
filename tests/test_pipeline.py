"""
Tests for the extraction pipeline.

Covers both source modes end to end, the two engine-level failure
reasons, and the record-level guarantees: every field is a value or the
sentinel, and success depends only on the order identifier.
"""

import pytest

from invoice_extraction.extraction import (
    SENTINEL,
    ExtractionPipeline,
    FailureReason,
    InvoiceRecord,
    SourceMode,
)

LAYOUT_ORDER_ONLY = "O D 4 3 6 5 0 6 3 1 2 3 2 9 4 8 6 1 0 0"

LAYOUT_INVOICE = (
    "Tax Invoice Order ID: OD436506312329486100 Order Date: 12-01-2026 "
    "Voeux Ambient Speaker | Qty 1 Total ₹ 1,499.00 "
    "Shipping ADDRESS Name: Ravi Kumar, Hojai, Nagaon IN-AS 782435"
)

NO_ORDER_ID = (
    "Tax Invoice Date: 12-01-2026 Total: ₹1,499.00 "
    "Description: Voeux Bluetooth Speaker "
    "Shipping Address Name: John Doe, Hojai, Assam, 782435"
)


class TestOCRExtraction:
    """Normally spaced OCR text."""

    def test_full_invoice(self, pipeline, ocr_invoice):
        outcome = pipeline.extract(ocr_invoice, SourceMode.OCR)

        assert outcome.success
        assert outcome.record.to_dict() == {
            "orderId": "OD123456789012345678",
            "date": "12-01-2026",
            "price": "₹1499.00",
            "itemName": "Voeux Bluetooth Speaker",
            "deliveryAddress": "John Doe, Hojai, Assam, 782435",
            "deliveryState": "Assam",
        }

    def test_whitespace_runs_do_not_matter(self, pipeline, ocr_invoice):
        noisy = ocr_invoice.replace(" ", "  \n ")
        assert pipeline.extract(noisy, "ocr").record == pipeline.extract(ocr_invoice, "ocr").record

    def test_missing_fields_degrade_to_sentinel(self, pipeline):
        outcome = pipeline.extract("Order ID: OD123456789012345678", SourceMode.OCR)

        assert outcome.success
        assert outcome.record.order_id == "OD123456789012345678"
        assert outcome.record.missing_fields == [
            "date", "price", "item_name", "delivery_address", "delivery_state"
        ]


class TestLayoutExtraction:
    """Character-spaced PDF text."""

    def test_order_id_only(self, pipeline):
        outcome = pipeline.extract(LAYOUT_ORDER_ONLY, SourceMode.LAYOUT)

        assert outcome.success
        assert outcome.record == InvoiceRecord(order_id="OD436506312329486100")

    def test_full_invoice(self, pipeline, to_layout):
        outcome = pipeline.extract(to_layout(LAYOUT_INVOICE), SourceMode.LAYOUT)

        assert outcome.success
        assert outcome.record.to_dict() == {
            "orderId": "OD436506312329486100",
            "date": "12-01-2026",
            "price": "₹1499.00",
            "itemName": "VoeuxAmbientSpeaker",
            "deliveryAddress": "RaviKumar, Hojai, Nagaon",
            "deliveryState": "Assam",
        }

    def test_layout_text_not_collapsed(self, pipeline):
        spread = "O  D\n4 3 6 5 0 6 3 1 2 3 2 9 4 8 6 1 0 0"
        assert pipeline.extract(spread, "layout").record.order_id == "OD436506312329486100"

    def test_multi_word_state_run_together(self, pipeline, to_layout):
        text = to_layout("OD436506312329486100 Name: Ravi, Salt Lake, West Bengal IN-WB 700091")
        record = pipeline.extract(text, SourceMode.LAYOUT).record

        assert record.delivery_address == "Ravi, SaltLake, WestBengal"
        assert record.delivery_state == "WestBengal"

    def test_address_without_region_marker(self, pipeline, to_layout):
        text = to_layout("OD436506312329486100 Name: Ravi Kumar, Hojai, Nagaon")
        record = pipeline.extract(text, SourceMode.LAYOUT).record

        assert record.delivery_address == "RaviKumar, Hojai, Nagaon"
        assert record.delivery_state == "Assam"


class TestFailures:
    """The two failure reasons raised inside the engine."""

    @pytest.mark.parametrize("text", ["", "   ", "OD123", None, "  short \n  "])
    def test_insufficient_text(self, pipeline, text):
        outcome = pipeline.extract(text, SourceMode.OCR)

        assert not outcome.success
        assert outcome.reason == FailureReason.INSUFFICIENT_TEXT
        assert "No text could be extracted" in outcome.message

    def test_missing_order_identifier(self, pipeline):
        outcome = pipeline.extract(NO_ORDER_ID, SourceMode.OCR)

        assert not outcome.success
        assert outcome.reason == FailureReason.MISSING_ORDER_IDENTIFIER
        assert outcome.to_dict() == {
            "success": False,
            "reason": "MissingOrderIdentifier",
            "error": outcome.message,
        }

    def test_layout_order_id_needs_eighteen_digits(self, pipeline, to_layout):
        text = to_layout("Order ID: OD43650631232948610 Total ₹ 1,499.00")
        outcome = pipeline.extract(text, SourceMode.LAYOUT)

        assert not outcome.success
        assert outcome.reason == FailureReason.MISSING_ORDER_IDENTIFIER

    def test_other_fields_still_extracted_without_order_id(self, pipeline):
        record = pipeline.extract_record(NO_ORDER_ID, SourceMode.OCR)
        assert record.order_id == SENTINEL
        assert record.price == "₹1499.00"
        assert record.delivery_state == "Assam"

    def test_minimum_length_is_configurable(self, ocr_invoice):
        outcome = ExtractionPipeline(min_text_length=500).extract(ocr_invoice, SourceMode.OCR)
        assert outcome.reason == FailureReason.INSUFFICIENT_TEXT


class TestRecordGuarantees:
    """Properties that hold for every input."""

    TEXTS = [
        ("Order ID: OD123456789012345678", SourceMode.OCR),
        (NO_ORDER_ID, SourceMode.OCR),
        (LAYOUT_ORDER_ONLY, SourceMode.LAYOUT),
        ("T o t a l 2 4 9 . 0 0 N a m e : nothing useful here", SourceMode.LAYOUT),
        ("random words without any invoice content at all", SourceMode.OCR),
    ]

    @pytest.mark.parametrize("text,mode", TEXTS)
    def test_no_empty_fields(self, pipeline, text, mode):
        record = pipeline.extract_record(text, mode)
        assert all(value and value.strip() for value in record.to_dict().values())

    @pytest.mark.parametrize("text,mode", TEXTS)
    def test_success_iff_order_id(self, pipeline, text, mode):
        outcome = pipeline.extract(text, mode)
        assert outcome.success == pipeline.extract_record(text, mode).has_order_id

    @pytest.mark.parametrize("text,mode", TEXTS)
    def test_idempotent(self, pipeline, text, mode):
        first = pipeline.extract(text, mode)
        second = pipeline.extract(text, mode)
        assert first.success == second.success
        assert first.record == second.record
        assert first.reason == second.reason

    def test_prices_carry_currency_prefix(self, pipeline, ocr_invoice, to_layout):
        ocr = pipeline.extract(ocr_invoice, SourceMode.OCR).record
        layout = pipeline.extract(to_layout(LAYOUT_INVOICE), SourceMode.LAYOUT).record
        assert ocr.price.startswith("₹")
        assert layout.price.startswith("₹")
