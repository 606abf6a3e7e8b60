"""
Extraction Module for Invoice Extraction System.

Rule-based field extraction from OCR text and PDF layout text.

Classes:
    ExtractionPipeline: Orchestrates extraction and the acceptance gate
    InvoiceRecord: Six-field invoice record
    ExtractionOutcome: Success/failure wrapper
    SourceMode: OCR or LAYOUT text
"""

from .invoice_record import (
    CURRENCY_SYMBOL,
    SENTINEL,
    ExtractionOutcome,
    FailureReason,
    InvoiceRecord,
)
from .normalizer import SourceMode, TextNormalizer
from .patterns import LAYOUT_RULES, OCR_RULES, PatternRuleSet, Rule, spaced
from .field_extractor import FieldExtractor, FieldMatch, first_accepted
from .price_selector import PriceCandidateSelector
from .state_resolver import AddressStateResolver, StateLexicon
from .pipeline import ExtractionPipeline

__all__ = [
    'CURRENCY_SYMBOL',
    'SENTINEL',
    'ExtractionOutcome',
    'FailureReason',
    'InvoiceRecord',
    'SourceMode',
    'TextNormalizer',
    'LAYOUT_RULES',
    'OCR_RULES',
    'PatternRuleSet',
    'Rule',
    'spaced',
    'FieldExtractor',
    'FieldMatch',
    'first_accepted',
    'PriceCandidateSelector',
    'AddressStateResolver',
    'StateLexicon',
    'ExtractionPipeline',
]
