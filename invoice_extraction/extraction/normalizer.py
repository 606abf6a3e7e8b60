"""
Text Normalizer Module.

Prepares raw source text for the field rules. OCR text has roughly correct
word spacing, so whitespace runs are collapsed. Layout text from a PDF text
layer is emitted glyph by glyph; its spacing is left untouched and every
layout rule is written to tolerate whitespace between characters.
"""

import re
from enum import Enum
from typing import Union

_WHITESPACE_RUN = re.compile(r'\s+')


class SourceMode(str, Enum):
    """Shape of the text handed to the extraction engine."""

    OCR = "ocr"
    LAYOUT = "layout"


class TextNormalizer:
    """
    Mode-aware text normalizer.

    Example:
        >>> normalizer = TextNormalizer()
        >>> normalizer.normalize("  Order   ID:\\n OD12 ", SourceMode.OCR)
        'Order ID: OD12'
        >>> normalizer.normalize("O D 1 2", SourceMode.LAYOUT)
        'O D 1 2'
    """

    def normalize(self, text: str, mode: Union[SourceMode, str]) -> str:
        """
        Normalize text for the given source mode.

        Args:
            text: Raw text recovered by OCR or the PDF text layer.
            mode: SourceMode (or its string value).

        Returns:
            Collapsed and trimmed text for OCR, the unchanged text for layout.
        """
        if text is None:
            return ""
        if SourceMode(mode) is SourceMode.OCR:
            return _WHITESPACE_RUN.sub(' ', text).strip()
        return text
