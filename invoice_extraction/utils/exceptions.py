"""
Custom Exceptions Module.

This module defines the exceptions raised by the collaborators around the
extraction engine (file input, OCR, PDF text, workbook output). The engine
itself never raises for partially extracted invoices; collaborator errors are
turned into failure outcomes at the processing seam.

Exception Hierarchy:
    InvoiceExtractionError (base)
    ├── ConfigurationError
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   ├── InputFileNotFoundError
    │   └── CorruptedFileError
    ├── OCRError
    │   ├── OCREngineNotAvailableError
    │   ├── OCRProcessingError
    │   └── OCRTimeoutError
    └── OutputError
        ├── WorkbookError
        └── ReportError
"""


class InvoiceExtractionError(Exception):
    """
    Base exception for all invoice extraction errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ConfigurationError(InvoiceExtractionError):
    """Raised when a configuration value is missing or invalid."""

    def __init__(self, key: str, reason: str = None):
        message = f"Invalid configuration value: {key}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, {"key": key, "reason": reason})


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(InvoiceExtractionError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when an unsupported file or MIME type is provided.

    Example:
        >>> raise UnsupportedFileTypeError(".doc", [".pdf", ".jpg"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = (
            f"Unsupported file type: '{file_type}'. "
            f"Please upload a PDF or image file ({', '.join(supported_types)})"
        )
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class InputFileNotFoundError(InputError):
    """Raised when an input file cannot be found."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        super().__init__(message, {"filepath": filepath})


class CorruptedFileError(InputError):
    """Raised when a file appears to be corrupted or unreadable."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to read {filepath}: {reason or 'unreadable file'}"
        super().__init__(message, {"filepath": filepath, "reason": reason})


# =============================================================================
# OCR ERRORS
# =============================================================================

class OCRError(InvoiceExtractionError):
    """Base exception for OCR-related errors."""
    pass


class OCREngineNotAvailableError(OCRError):
    """Raised when the configured OCR engine is not available."""

    def __init__(self, engine_name: str):
        message = f"OCR engine not available: {engine_name}"
        super().__init__(message, {"engine": engine_name})


class OCRProcessingError(OCRError):
    """Raised when OCR processing fails."""

    def __init__(self, source: str, reason: str = None):
        message = f"Failed to process image {source}: {reason or 'Unknown error'}"
        super().__init__(message, {"source": source, "reason": reason})


class OCRTimeoutError(OCRError):
    """Raised when the OCR call does not settle before its deadline."""

    def __init__(self, timeout: float):
        message = f"OCR timeout after {timeout:g} seconds"
        super().__init__(message, {"timeout": timeout})


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(InvoiceExtractionError):
    """Base exception for output handling errors."""
    pass


class WorkbookError(OutputError):
    """Raised when the invoice workbook cannot be read or saved."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to write invoice workbook: {filepath}"
        super().__init__(message, {"filepath": filepath, "reason": reason})


class ReportError(OutputError):
    """Raised when the daily report cannot be produced."""

    def __init__(self, reason: str):
        super().__init__(f"Daily report failed: {reason}", {"reason": reason})


__all__ = [
    'InvoiceExtractionError',
    'ConfigurationError',
    'InputError',
    'UnsupportedFileTypeError',
    'InputFileNotFoundError',
    'CorruptedFileError',
    'OCRError',
    'OCREngineNotAvailableError',
    'OCRProcessingError',
    'OCRTimeoutError',
    'OutputError',
    'WorkbookError',
    'ReportError',
]
