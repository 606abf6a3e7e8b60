"""
Tesseract OCR Backend.

This module provides OCR text recognition using Tesseract (pytesseract).
Only the recognized text is needed by the extraction engine, so the
backend returns plain text rather than word boxes.

Requirements:
    - Tesseract OCR installed on the system
    - pytesseract Python package

Author: ML Engineering Team
"""

from typing import Optional

import pytesseract
from PIL import Image

from config import get_config
from invoice_extraction.utils.logger import get_logger
from invoice_extraction.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError

# Initialize module logger
logger = get_logger(__name__)


class TesseractBackend:
    """
    Tesseract OCR backend implementation.

    Attributes:
        language: Tesseract language code (e.g., "eng")
        psm: Page Segmentation Mode (1-13)
        oem: OCR Engine Mode (0-3)
        extra_config: Additional Tesseract command-line configuration

    Example:
        >>> backend = TesseractBackend()
        >>> text = backend.get_raw_text(image, "invoice.jpg")
    """

    name = "tesseract"

    def __init__(
        self,
        language: Optional[str] = None,
        psm: Optional[int] = None,
        oem: Optional[int] = None,
        extra_config: Optional[str] = None
    ) -> None:
        """Initialize the Tesseract backend with configuration."""
        self.language = language or get_config("ocr.tesseract.lang", "eng")
        self.psm = psm if psm is not None else get_config("ocr.tesseract.psm", 3)
        self.oem = oem if oem is not None else get_config("ocr.tesseract.oem", 3)
        self.extra_config = extra_config if extra_config is not None else get_config("ocr.tesseract.config", "")

        self._check_dependencies()

        logger.debug(
            f"TesseractBackend initialized (lang={self.language}, "
            f"psm={self.psm}, oem={self.oem})"
        )

    def _check_dependencies(self) -> None:
        """
        Check that the Tesseract binary is reachable.

        Raises:
            OCREngineNotAvailableError: If Tesseract is not installed.
        """
        try:
            version = pytesseract.get_tesseract_version()
            logger.info(f"Tesseract version: {version}")
        except pytesseract.TesseractNotFoundError as e:
            raise OCREngineNotAvailableError(
                f"Tesseract OCR (not installed or not in PATH): {e}"
            )

    def _build_config(self) -> str:
        """
        Build Tesseract configuration string.

        Returns:
            Configuration string for Tesseract.
        """
        config_parts = [
            f"--psm {self.psm}",
            f"--oem {self.oem}"
        ]

        if self.extra_config:
            config_parts.append(self.extra_config)

        return ' '.join(config_parts)

    def get_raw_text(self, image: Image.Image, source: str = "image") -> str:
        """
        Recognize the text of an image.

        Args:
            image: PIL Image to process.
            source: Label used in error messages.

        Returns:
            Recognized text, line breaks preserved.

        Raises:
            OCRProcessingError: If Tesseract fails.
        """
        if image.mode != 'RGB':
            image = image.convert('RGB')

        config = self._build_config()
        logger.debug(f"Running Tesseract OCR (config: {config})")

        try:
            return pytesseract.image_to_string(image, lang=self.language, config=config)
        except pytesseract.TesseractError as e:
            raise OCRProcessingError(source, str(e))
