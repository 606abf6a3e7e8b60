"""
Extraction Pipeline Module.

Orchestrates field extraction for one text buffer:

    raw text -> TextNormalizer -> per-field rule trials -> InvoiceRecord
             -> order-identifier gate -> ExtractionOutcome

The pipeline is stateless and performs no I/O. Only two conditions fail an
extraction from inside the engine: text shorter than the minimum length, and
an unresolved order identifier. Every other field degrades to "N/A".

Author: ML Engineering Team
"""

from typing import Optional, Union

from config import get_config
from invoice_extraction.utils.logger import get_logger
from .field_extractor import FieldExtractor, FieldMatch
from .invoice_record import ExtractionOutcome, FailureReason, InvoiceRecord
from .normalizer import SourceMode, TextNormalizer
from .patterns import LAYOUT_RULES, OCR_RULES, PatternRuleSet
from .price_selector import PriceCandidateSelector
from .state_resolver import (
    AddressStateResolver,
    layout_state_resolver,
    ocr_state_resolver,
)

logger = get_logger(__name__)


def _value(match: Optional[FieldMatch]) -> Optional[str]:
    return match.value if match is not None else None


class ExtractionPipeline:
    """
    Invoice field-extraction engine.

    All collaborators and thresholds are fixed at construction time;
    ``extract`` itself reads no configuration or environment.

    Attributes:
        min_text_length: Shortest text (after trimming) worth extracting.
        ocr_rules: Rule set for normally spaced OCR text.
        layout_rules: Rule set for character-spaced layout text.

    Example:
        >>> pipeline = ExtractionPipeline()
        >>> outcome = pipeline.extract(text, SourceMode.OCR)
        >>> if outcome.success:
        ...     print(outcome.record.order_id)
    """

    DEFAULT_MIN_TEXT_LENGTH = 10

    def __init__(
        self,
        min_text_length: Optional[int] = None,
        normalizer: Optional[TextNormalizer] = None,
        field_extractor: Optional[FieldExtractor] = None,
        ocr_rules: Optional[PatternRuleSet] = None,
        layout_rules: Optional[PatternRuleSet] = None,
        price_selector: Optional[PriceCandidateSelector] = None,
        ocr_states: Optional[AddressStateResolver] = None,
        layout_states: Optional[AddressStateResolver] = None
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            min_text_length: Minimum text length. If None, uses config.
            normalizer: Text normalizer.
            field_extractor: Generic rule trial extractor.
            ocr_rules: OCR rule set (default: OCR_RULES).
            layout_rules: Layout rule set (default: LAYOUT_RULES).
            price_selector: Layout price selector.
            ocr_states: State resolver for OCR text.
            layout_states: State resolver for layout text.
        """
        if min_text_length is None:
            min_text_length = get_config("extraction.min_text_length", self.DEFAULT_MIN_TEXT_LENGTH)
        self.min_text_length = int(min_text_length)

        self.normalizer = normalizer or TextNormalizer()
        self.field_extractor = field_extractor or FieldExtractor()
        self.ocr_rules = ocr_rules or OCR_RULES
        self.layout_rules = layout_rules or LAYOUT_RULES
        self.price_selector = price_selector or PriceCandidateSelector(
            keyword_rules=self.layout_rules.price,
            field_extractor=self.field_extractor
        )
        self.ocr_states = ocr_states or ocr_state_resolver()
        self.layout_states = layout_states or layout_state_resolver()

        logger.debug(f"ExtractionPipeline initialized (min_text_length={self.min_text_length})")

    def extract(
        self,
        text: Optional[str],
        mode: Union[SourceMode, str],
        source: Optional[str] = None
    ) -> ExtractionOutcome:
        """
        Extract an invoice record and apply the acceptance gate.

        Args:
            text: Raw text from the OCR engine or the PDF text layer.
            mode: Source mode of the text.
            source: Optional source label carried into the outcome.

        Returns:
            Success with the record, or Failure with InsufficientText or
            MissingOrderIdentifier.
        """
        mode = SourceMode(mode)
        length = len(text.strip()) if text else 0

        if length < self.min_text_length:
            logger.warning(
                f"Insufficient text from {source or 'input'}: "
                f"{length} characters (minimum {self.min_text_length})"
            )
            return ExtractionOutcome.fail(
                FailureReason.INSUFFICIENT_TEXT,
                "No text could be extracted from the invoice. "
                "The file might be blank, image-based or corrupted.",
                source=source
            )

        record = self.extract_record(text, mode)

        if not record.has_order_id:
            logger.warning(f"No order identifier found in {source or 'input'}")
            return ExtractionOutcome.fail(
                FailureReason.MISSING_ORDER_IDENTIFIER,
                "Could not extract order ID from the invoice. "
                "Please ensure the file is a valid invoice.",
                source=source
            )

        logger.info(
            f"Extracted {record.order_id} ({mode.value}): "
            f"{6 - len(record.missing_fields)}/6 fields"
        )
        return ExtractionOutcome.ok(record, source=source)

    def extract_record(self, text: str, mode: Union[SourceMode, str]) -> InvoiceRecord:
        """
        Extract all six fields without applying the acceptance gate.

        Args:
            text: Raw source text.
            mode: Source mode of the text.

        Returns:
            InvoiceRecord with sentinels for unresolved fields.
        """
        mode = SourceMode(mode)
        normalized = self.normalizer.normalize(text, mode)

        if mode is SourceMode.OCR:
            return self._extract_ocr(normalized)
        return self._extract_layout(normalized)

    def _extract_ocr(self, text: str) -> InvoiceRecord:
        rules = self.ocr_rules
        extract = self.field_extractor.extract

        address = extract(text, rules.delivery_address, "delivery_address")
        state = self.ocr_states.resolve(address.raw if address else None, text)

        return InvoiceRecord(
            order_id=_value(extract(text, rules.order_identifier, "order_id")),
            date=_value(extract(text, rules.date, "date")),
            price=_value(extract(text, rules.price, "price")),
            item_name=_value(extract(text, rules.item_name, "item_name")),
            delivery_address=_value(address),
            delivery_state=state,
        )

    def _extract_layout(self, text: str) -> InvoiceRecord:
        rules = self.layout_rules
        extract = self.field_extractor.extract

        address = extract(text, rules.delivery_address, "delivery_address")
        state = self.layout_states.resolve(address.raw if address else None, text)

        return InvoiceRecord(
            order_id=_value(extract(text, rules.order_identifier, "order_id")),
            date=_value(extract(text, rules.date, "date")),
            price=_value(self.price_selector.select(text)),
            item_name=_value(extract(text, rules.item_name, "item_name")),
            delivery_address=_value(address),
            delivery_state=state,
        )
