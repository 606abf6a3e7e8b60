"""Tests for the OCR engine timeout race and error mapping."""

import threading
import time

import pytest
import pytesseract
from PIL import Image

from invoice_extraction.ocr_engine import OCREngine, TesseractBackend
from invoice_extraction.utils.exceptions import (
    OCREngineNotAvailableError,
    OCRProcessingError,
    OCRTimeoutError,
)


class StaticBackend:
    name = "static"

    def __init__(self, text):
        self.text = text

    def get_raw_text(self, image, source="image"):
        return self.text


class BlockingBackend:
    """Blocks until released, then returns text."""

    name = "blocking"

    def __init__(self):
        self.release = threading.Event()
        self.finished = threading.Event()

    def get_raw_text(self, image, source="image"):
        self.release.wait(timeout=5)
        self.finished.set()
        return "late text"


class FailingBackend:
    name = "failing"

    def __init__(self, error):
        self.error = error

    def get_raw_text(self, image, source="image"):
        raise self.error


@pytest.fixture
def image():
    return Image.new("RGB", (20, 20), "white")


class TestOCREngine:
    """OCREngine.extract_text behavior."""

    def test_returns_backend_text(self, image):
        engine = OCREngine(backend=StaticBackend("Order ID: OD1"), timeout=1)
        assert engine.extract_text(image) == "Order ID: OD1"

    def test_none_text_becomes_empty(self, image):
        engine = OCREngine(backend=StaticBackend(None), timeout=1)
        assert engine.extract_text(image) == ""

    def test_timeout_raises_without_waiting_for_backend(self, image):
        """The caller regains control at the timeout, not when OCR ends."""
        backend = BlockingBackend()
        engine = OCREngine(backend=backend, timeout=0.05)

        started = time.monotonic()
        try:
            with pytest.raises(OCRTimeoutError) as exc_info:
                engine.extract_text(image)
            elapsed = time.monotonic() - started
        finally:
            backend.release.set()

        assert elapsed < 2
        assert "OCR timeout" in str(exc_info.value)

    def test_late_result_is_discarded(self, image):
        backend = BlockingBackend()
        engine = OCREngine(backend=backend, timeout=0.05)

        with pytest.raises(OCRTimeoutError):
            engine.extract_text(image)

        backend.release.set()
        assert backend.finished.wait(timeout=5)
        deadline = time.monotonic() + 5
        while engine.late_results == 0 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert engine.late_results == 1

        # The next call gets its own result, never the abandoned one
        engine.backend = StaticBackend("fresh text")
        assert engine.extract_text(image) == "fresh text"
        assert engine.late_results == 1

    def test_abandoned_worker_does_not_block_exit(self, image):
        backend = BlockingBackend()
        engine = OCREngine(backend=backend, timeout=0.05)

        try:
            with pytest.raises(OCRTimeoutError):
                engine.extract_text(image, source="slow.jpg")
            workers = [t for t in threading.enumerate() if t.name == "ocr-slow.jpg"]
            assert workers and all(t.daemon for t in workers)
        finally:
            backend.release.set()

    def test_backend_exception_becomes_processing_error(self, image):
        engine = OCREngine(backend=FailingBackend(RuntimeError("bad image")), timeout=1)
        with pytest.raises(OCRProcessingError) as exc_info:
            engine.extract_text(image, source="photo.jpg")
        assert "bad image" in str(exc_info.value)

    def test_ocr_errors_propagate_unchanged(self, image):
        error = OCRProcessingError("photo.jpg", "engine crashed")
        engine = OCREngine(backend=FailingBackend(error), timeout=1)
        with pytest.raises(OCRProcessingError) as exc_info:
            engine.extract_text(image)
        assert exc_info.value is error


class TestOCREngineConfiguration:
    """Backend selection and timeout defaults."""

    def test_default_timeout_from_config(self):
        engine = OCREngine(backend=StaticBackend(""))
        assert engine.timeout == 60.0

    def test_backend_name_from_instance(self):
        engine = OCREngine(backend=StaticBackend(""))
        assert engine.backend_name == "static"

    def test_unknown_backend_rejected(self):
        with pytest.raises(OCREngineNotAvailableError):
            OCREngine(backend="cuneiform")


class TestTesseractBackend:
    """Error labelling in the pytesseract backend."""

    @pytest.fixture
    def backend(self, monkeypatch):
        monkeypatch.setattr(pytesseract, "get_tesseract_version", lambda: "5.3.0")
        return TesseractBackend()

    def test_failure_names_the_source(self, backend, image, monkeypatch):
        def fail(*args, **kwargs):
            raise pytesseract.TesseractError(1, "image too small")

        monkeypatch.setattr(pytesseract, "image_to_string", fail)

        with pytest.raises(OCRProcessingError) as exc_info:
            backend.get_raw_text(image, "receipt_0112.jpg")
        assert "receipt_0112.jpg" in str(exc_info.value)
        assert exc_info.value.details["source"] == "receipt_0112.jpg"

    def test_engine_keeps_source_label(self, backend, image, monkeypatch):
        def fail(*args, **kwargs):
            raise pytesseract.TesseractError(1, "image too small")

        monkeypatch.setattr(pytesseract, "image_to_string", fail)
        engine = OCREngine(backend=backend, timeout=5)

        with pytest.raises(OCRProcessingError) as exc_info:
            engine.extract_text(image, source="receipt_0112.jpg")
        assert "receipt_0112.jpg" in str(exc_info.value)
