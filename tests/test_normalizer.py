"""Tests for the mode-aware text normalizer."""

import pytest

from invoice_extraction.extraction import SourceMode, TextNormalizer


@pytest.fixture
def normalizer():
    return TextNormalizer()


class TestOCRMode:
    """OCR text has whitespace runs collapsed."""

    def test_collapses_runs_and_trims(self, normalizer):
        text = "  Order   ID:\n\tOD123   \n"
        assert normalizer.normalize(text, SourceMode.OCR) == "Order ID: OD123"

    def test_accepts_mode_value(self, normalizer):
        assert normalizer.normalize("a \n b", "ocr") == "a b"


class TestLayoutMode:
    """Layout text keeps its spacing."""

    def test_returns_text_unchanged(self, normalizer):
        text = "O D  4 3\n6 5 "
        assert normalizer.normalize(text, SourceMode.LAYOUT) == text

    def test_none_becomes_empty(self, normalizer):
        assert normalizer.normalize(None, SourceMode.LAYOUT) == ""


def test_unknown_mode_rejected(normalizer):
    with pytest.raises(ValueError):
        normalizer.normalize("text", "handwriting")
