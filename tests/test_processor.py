"""Tests for the processing seam between collaborators and the engine."""

import pytest
from PIL import Image

from invoice_extraction.extraction import FailureReason, SourceMode
from invoice_extraction.input_handler import InputHandler, SourceText
from invoice_extraction.processor import InvoiceProcessor
from invoice_extraction.utils.exceptions import OCRTimeoutError


@pytest.fixture
def png_file(tmp_path):
    path = tmp_path / "photo.png"
    Image.new("RGB", (10, 10), "white").save(path)
    return path


class TimingOutOCR:
    def extract_text(self, image, source="image"):
        raise OCRTimeoutError(60)


class StubInputHandler:
    """Returns a fixed SourceText for every input."""

    def __init__(self, text, mode=SourceMode.OCR):
        self.text = text
        self.mode = mode

    def load(self, filepath):
        return SourceText(text=self.text, mode=self.mode, source=str(filepath))

    def load_bytes(self, data, mime_type, filename=None):
        return SourceText(text=self.text, mode=self.mode, source=filename or mime_type)


class TestProcessor:
    """Collaborator errors become UpstreamFailure outcomes."""

    def test_successful_upload(self, ocr_invoice):
        processor = InvoiceProcessor(input_handler=StubInputHandler(ocr_invoice))
        outcome = processor.process_bytes(b"jpeg", "image/jpeg", filename="photo.jpg")

        assert outcome.success
        assert outcome.source == "photo.jpg"
        assert outcome.record.order_id == "OD123456789012345678"

    def test_ocr_timeout(self, png_file):
        handler = InputHandler(ocr_engine=TimingOutOCR())
        outcome = InvoiceProcessor(input_handler=handler).process_file(png_file)

        assert not outcome.success
        assert outcome.reason == FailureReason.UPSTREAM_FAILURE
        assert outcome.message == "OCR timeout after 60 seconds"

    def test_unsupported_upload(self):
        outcome = InvoiceProcessor(input_handler=InputHandler()).process_bytes(b"x", "text/plain")
        assert outcome.reason == FailureReason.UPSTREAM_FAILURE

    def test_empty_upload(self):
        outcome = InvoiceProcessor(input_handler=InputHandler()).process_bytes(b"", "application/pdf")
        assert outcome.reason == FailureReason.UPSTREAM_FAILURE
        assert outcome.message == "No file uploaded"

    def test_missing_file(self, tmp_path):
        outcome = InvoiceProcessor(input_handler=InputHandler()).process_file(tmp_path / "gone.pdf")
        assert outcome.reason == FailureReason.UPSTREAM_FAILURE
        assert "gone.pdf" in outcome.message

    def test_engine_failures_pass_through(self):
        processor = InvoiceProcessor(input_handler=StubInputHandler("  "))
        outcome = processor.process_file("blank.pdf")
        assert outcome.reason == FailureReason.INSUFFICIENT_TEXT

    def test_directory(self, tmp_path, ocr_invoice):
        for name in ("a.pdf", "b.png"):
            (tmp_path / name).write_bytes(b"x")

        handler = InputHandler()
        handler.load = StubInputHandler(ocr_invoice).load
        outcomes = InvoiceProcessor(input_handler=handler).process_directory(tmp_path)

        assert [outcome.success for outcome in outcomes] == [True, True]
