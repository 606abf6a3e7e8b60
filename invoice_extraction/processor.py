"""
Invoice Processor Module.

The processing seam between the collaborators (file input, OCR, PDF text
layer) and the extraction engine. Collaborator errors never escape from
here: they become an UpstreamFailure outcome carrying the error message.

Usage:
    from invoice_extraction.processor import InvoiceProcessor

    processor = InvoiceProcessor()
    outcome = processor.process_file("invoice.pdf")
    print(outcome.to_json())
"""

from pathlib import Path
from typing import List, Optional, Union

from invoice_extraction.extraction import ExtractionOutcome, ExtractionPipeline, FailureReason
from invoice_extraction.input_handler import InputHandler
from invoice_extraction.utils.logger import get_logger
from invoice_extraction.utils.exceptions import InvoiceExtractionError

logger = get_logger(__name__)


class InvoiceProcessor:
    """
    File/upload -> text -> ExtractionOutcome.

    Example:
        >>> processor = InvoiceProcessor()
        >>> outcome = processor.process_bytes(data, "application/pdf")
        >>> outcome.success
        True
    """

    def __init__(
        self,
        input_handler: Optional[InputHandler] = None,
        pipeline: Optional[ExtractionPipeline] = None
    ) -> None:
        self.input_handler = input_handler or InputHandler()
        self.pipeline = pipeline or ExtractionPipeline()

    def process_file(self, filepath: Union[str, Path]) -> ExtractionOutcome:
        """
        Extract an invoice from a file.

        Args:
            filepath: PDF or image file.

        Returns:
            ExtractionOutcome; collaborator errors give UpstreamFailure.
        """
        name = Path(filepath).name
        try:
            source = self.input_handler.load(filepath)
        except InvoiceExtractionError as e:
            logger.error(f"Failed to read {name}: {e}")
            return ExtractionOutcome.fail(FailureReason.UPSTREAM_FAILURE, str(e), source=name)

        return self.pipeline.extract(source.text, source.mode, source=source.source)

    def process_bytes(
        self,
        data: bytes,
        mime_type: str,
        filename: Optional[str] = None
    ) -> ExtractionOutcome:
        """
        Extract an invoice from uploaded bytes.

        Args:
            data: Raw file bytes.
            mime_type: Upload MIME type.
            filename: Original filename, used for labels only.

        Returns:
            ExtractionOutcome; collaborator errors give UpstreamFailure.
        """
        try:
            source = self.input_handler.load_bytes(data, mime_type, filename=filename)
        except InvoiceExtractionError as e:
            logger.error(f"Failed to read upload {filename or mime_type}: {e}")
            return ExtractionOutcome.fail(FailureReason.UPSTREAM_FAILURE, str(e), source=filename)

        return self.pipeline.extract(source.text, source.mode, source=source.source)

    def process_directory(self, directory: Union[str, Path], recursive: bool = False) -> List[ExtractionOutcome]:
        """
        Extract every supported invoice in a directory.

        Returns:
            One outcome per file, in file-name order.
        """
        files = self.input_handler.collect_files(directory, recursive=recursive)

        outcomes = []
        for i, filepath in enumerate(files, 1):
            logger.info(f"Processing file {i}/{len(files)}: {filepath.name}")
            outcomes.append(self.process_file(filepath))

        successful = sum(1 for outcome in outcomes if outcome.success)
        logger.info(f"Batch processing complete: {successful} successful, {len(outcomes) - successful} failed")
        return outcomes
