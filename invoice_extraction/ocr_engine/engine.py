"""
Main OCR Engine Module.

This module provides the OCREngine class, the unified interface the rest
of the system uses to turn an invoice image into text. Every recognition
call races a fixed timeout: whichever settles first decides the outcome.
A call that times out is not cancelled; it keeps running in a daemon
worker thread, so it never holds up interpreter exit, and its eventual
result is discarded.

Usage:
    from invoice_extraction.ocr_engine import OCREngine

    engine = OCREngine(timeout=60)
    text = engine.extract_text(image)

Author: ML Engineering Team
"""

import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Optional, Union

from PIL import Image

from config import get_config
from invoice_extraction.utils.logger import get_logger
from invoice_extraction.utils.exceptions import (
    OCREngineNotAvailableError,
    OCRError,
    OCRProcessingError,
    OCRTimeoutError,
)
from .tesseract_backend import TesseractBackend

# Initialize module logger
logger = get_logger(__name__)


class OCREngine:
    """
    OCR engine with a per-call timeout.

    A backend is any object with a ``get_raw_text(image, source) -> str``
    method.

    Supported Backends:
        - tesseract: Tesseract OCR via pytesseract (default)

    Attributes:
        backend_name: Name of the active OCR backend
        backend: The active OCR backend instance
        timeout: Seconds to wait for a recognition call
        late_results: Results discarded because they arrived after the timeout

    Example:
        >>> engine = OCREngine()
        >>> text = engine.extract_text(image)
    """

    SUPPORTED_BACKENDS = ['tesseract']
    DEFAULT_TIMEOUT = 60

    def __init__(
        self,
        backend: Union[str, object, None] = None,
        timeout: Optional[float] = None
    ) -> None:
        """
        Initialize the OCR engine.

        Args:
            backend: Backend name or backend instance. If None, uses
                    configuration or falls back to tesseract.
            timeout: Seconds before a recognition call is abandoned.
                    If None, uses configuration.
        """
        if backend is None or isinstance(backend, str):
            self.backend_name = backend or get_config("ocr.engine", "pytesseract")
            if self.backend_name == "pytesseract":
                self.backend_name = "tesseract"
            self.backend = self._initialize_backend()
        else:
            self.backend = backend
            self.backend_name = getattr(backend, "name", type(backend).__name__)

        if timeout is None:
            timeout = get_config("ocr.timeout_seconds", self.DEFAULT_TIMEOUT)
        self.timeout = float(timeout)
        self.late_results = 0

        logger.info(f"OCR Engine initialized with backend: {self.backend_name} (timeout {self.timeout:g}s)")

    def _initialize_backend(self):
        """
        Initialize the selected OCR backend.

        Raises:
            OCREngineNotAvailableError: If the backend is unknown or missing.
        """
        if self.backend_name == "tesseract":
            return TesseractBackend()
        raise OCREngineNotAvailableError(self.backend_name)

    def extract_text(self, image: Image.Image, source: str = "image") -> str:
        """
        Recognize the text of an image within the timeout.

        Args:
            image: PIL Image to process.
            source: Label used in error messages.

        Returns:
            Recognized text.

        Raises:
            OCRTimeoutError: If recognition did not finish in time.
            OCRProcessingError: If the backend failed.
        """
        future: Future = Future()
        future.set_running_or_notify_cancel()
        worker = threading.Thread(
            target=self._recognize,
            args=(future, image, source),
            name=f"ocr-{source}",
            daemon=True
        )
        worker.start()

        logger.debug(f"Running OCR on {source} using {self.backend_name} backend")
        try:
            text = future.result(timeout=self.timeout)
        except FuturesTimeoutError:
            future.add_done_callback(self._discard_late_result)
            logger.error(f"OCR timeout after {self.timeout:g}s for {source}")
            raise OCRTimeoutError(self.timeout)
        except OCRError:
            raise
        except Exception as e:
            logger.error(f"OCR failed for {source}: {e}")
            raise OCRProcessingError(source, str(e))

        text = text or ""
        logger.info(f"OCR extracted {len(text)} characters from {source}")
        return text

    def _recognize(self, future: Future, image: Image.Image, source: str) -> None:
        # Runs in the worker thread; the outcome reaches the caller via the future
        try:
            future.set_result(self.backend.get_raw_text(image, source))
        except Exception as e:
            future.set_exception(e)

    def _discard_late_result(self, future: Future) -> None:
        self.late_results += 1
        logger.debug("Discarding OCR result that arrived after the timeout")
