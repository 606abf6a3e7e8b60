"""
Main Input Handler Module.

This module provides the InputHandler class, the single entry point that
turns an invoice file (or uploaded bytes) into a text buffer tagged with
its source mode. PDFs go through the text-layer extractor (layout text);
images go through the OCR engine (OCR text).

Usage:
    from invoice_extraction.input_handler import InputHandler

    handler = InputHandler()
    source = handler.load("invoice.pdf")
    print(source.mode, len(source.text))

    # Uploaded bytes with a MIME type
    source = handler.load_bytes(data, "image/jpeg", filename="photo.jpg")

Classes:
    SourceText: Recovered text plus its mode
    InputHandler: Main class for file input handling
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from config import get_config
from invoice_extraction.extraction.normalizer import SourceMode
from invoice_extraction.utils.logger import get_logger
from invoice_extraction.utils.helpers import get_file_extension
from invoice_extraction.utils.exceptions import (
    CorruptedFileError,
    InputError,
    InputFileNotFoundError,
    UnsupportedFileTypeError,
)

from .pdf_processor import PDFProcessor
from .image_processor import ImageProcessor


# Initialize module logger
logger = get_logger(__name__)


@dataclass
class SourceText:
    """
    Text recovered from one invoice file.

    Attributes:
        text: Raw text from the PDF text layer or the OCR engine
        mode: SourceMode.LAYOUT for PDFs, SourceMode.OCR for images
        source: Original filename
        metadata: Additional file metadata
    """
    text: str
    mode: SourceMode
    source: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"SourceText(source='{self.source}', "
            f"mode='{self.mode.value}', "
            f"chars={len(self.text)})"
        )


class InputHandler:
    """
    Main input handler for invoice files.

    Detects the file type from the extension (files) or MIME type (uploads)
    and delegates to the PDF or image path.

    Attributes:
        supported_extensions: Set of supported file extensions
        supported_mime_types: Mapping of MIME type to 'pdf' or 'image'
        pdf_processor: PDFProcessor instance for PDF files
        image_processor: ImageProcessor instance for image files

    Example:
        >>> handler = InputHandler()
        >>> source = handler.load("invoice.pdf")
        >>> source.mode
        <SourceMode.LAYOUT: 'layout'>
    """

    PDF_EXTENSIONS = {'.pdf'}
    IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png'}

    DEFAULT_MIME_TYPES = {
        'application/pdf': 'pdf',
        'image/png': 'image',
        'image/jpeg': 'image',
        'image/jpg': 'image',
    }

    def __init__(
        self,
        pdf_processor: Optional[PDFProcessor] = None,
        image_processor: Optional[ImageProcessor] = None,
        ocr_engine=None
    ) -> None:
        """
        Initialize the InputHandler.

        Args:
            pdf_processor: PDF text extractor.
            image_processor: Image loader.
            ocr_engine: Object with ``extract_text(image, source)``. Created
                on first use when not given, so PDF-only runs do not need
                Tesseract installed.
        """
        self.supported_extensions = {
            ext.lower() for ext in get_config(
                "input.supported_extensions",
                sorted(self.PDF_EXTENSIONS | self.IMAGE_EXTENSIONS)
            )
        }
        self.supported_mime_types = {
            mime.lower(): kind for mime, kind in
            get_config("input.supported_mime_types", self.DEFAULT_MIME_TYPES).items()
        }

        self.pdf_processor = pdf_processor or PDFProcessor()
        self.image_processor = image_processor or ImageProcessor()
        self._ocr_engine = ocr_engine

        logger.info(f"InputHandler initialized with extensions: {sorted(self.supported_extensions)}")

    @property
    def ocr_engine(self):
        if self._ocr_engine is None:
            from invoice_extraction.ocr_engine import OCREngine
            self._ocr_engine = OCREngine()
        return self._ocr_engine

    def detect_file_type(self, filepath: Union[str, Path]) -> str:
        """
        Detect the type of an input file from its extension.

        Returns:
            File type string: 'pdf' or 'image'.

        Raises:
            UnsupportedFileTypeError: If file type is not supported.
        """
        extension = get_file_extension(filepath)

        if extension in self.supported_extensions and extension in self.PDF_EXTENSIONS:
            logger.debug(f"Detected PDF file: {filepath}")
            return 'pdf'
        elif extension in self.supported_extensions and extension in self.IMAGE_EXTENSIONS:
            logger.debug(f"Detected image file: {filepath}")
            return 'image'
        else:
            raise UnsupportedFileTypeError(extension or "(none)", sorted(self.supported_extensions))

    def detect_mime_type(self, mime_type: str) -> str:
        """
        Map an upload MIME type to 'pdf' or 'image'.

        Raises:
            UnsupportedFileTypeError: If the MIME type is not supported.
        """
        kind = self.supported_mime_types.get((mime_type or '').split(';')[0].strip().lower())
        if kind is None:
            raise UnsupportedFileTypeError(mime_type or "(none)", sorted(self.supported_mime_types))
        return kind

    def validate_file(self, filepath: Union[str, Path]) -> Path:
        """
        Validate that a file exists, is supported and is not empty.

        Returns:
            Path object pointing to the validated file.

        Raises:
            InputFileNotFoundError: If file doesn't exist.
            UnsupportedFileTypeError: If file type is not supported.
            CorruptedFileError: If the file is empty.
        """
        path = Path(filepath)

        if not path.exists():
            raise InputFileNotFoundError(str(filepath))

        if not path.is_file():
            raise InputError(f"Path is not a file: {filepath}")

        self.detect_file_type(path)

        if path.stat().st_size == 0:
            raise CorruptedFileError(str(filepath), "File is empty")

        logger.debug(f"File validated: {filepath}")
        return path

    def load(self, filepath: Union[str, Path]) -> SourceText:
        """
        Recover the text of an invoice file.

        Args:
            filepath: Path to the invoice file.

        Returns:
            SourceText with the recovered text and its mode.

        Raises:
            InputError: If the file is missing, unsupported or unreadable.
            OCRError: If OCR fails or times out.
        """
        path = self.validate_file(filepath)
        logger.info(f"Loading file: {path}")

        if self.detect_file_type(path) == 'pdf':
            return self._from_pdf(path, path.name)
        return self._from_image(path, path.name)

    def load_bytes(
        self,
        data: bytes,
        mime_type: str,
        filename: Optional[str] = None
    ) -> SourceText:
        """
        Recover the text of an uploaded invoice.

        Args:
            data: Raw file bytes.
            mime_type: Upload MIME type (e.g. "application/pdf").
            filename: Original filename, used for labels only.

        Returns:
            SourceText with the recovered text and its mode.

        Raises:
            InputError: If no data was sent or the type is unsupported.
            OCRError: If OCR fails or times out.
        """
        if not data:
            raise InputError("No file uploaded")

        kind = self.detect_mime_type(mime_type)
        name = filename or f"upload ({mime_type})"
        logger.info(f"Loading upload: {name} ({len(data)} bytes)")

        if kind == 'pdf':
            return self._from_pdf(data, name)
        return self._from_image(data, name)

    def collect_files(self, directory: Union[str, Path], recursive: bool = False) -> List[Path]:
        """
        List all supported files in a directory.

        Args:
            directory: Path to directory containing invoice files.
            recursive: Whether to search subdirectories.

        Returns:
            Sorted list of file paths.
        """
        directory = Path(directory)

        if not directory.exists():
            raise InputFileNotFoundError(str(directory))

        if not directory.is_dir():
            raise InputError(f"Path is not a directory: {directory}")

        pattern = "**/*" if recursive else "*"
        files = sorted(
            path for path in directory.glob(pattern)
            if path.is_file() and get_file_extension(path) in self.supported_extensions
        )

        logger.info(f"Found {len(files)} files to process in {directory}")
        return files

    def _from_pdf(self, source, name: str) -> SourceText:
        text, metadata = self.pdf_processor.extract_text(source, name=name)
        return SourceText(text=text, mode=SourceMode.LAYOUT, source=name, metadata=metadata)

    def _from_image(self, source, name: str) -> SourceText:
        image, metadata = self.image_processor.load(source, name=name)
        text = self.ocr_engine.extract_text(image, source=name)
        return SourceText(text=text, mode=SourceMode.OCR, source=name, metadata=metadata)
