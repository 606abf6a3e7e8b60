"""Shared fixtures for the invoice extraction tests."""

import pytest

from config import CONFIG_ENV_VAR, ConfigurationManager
from invoice_extraction.extraction import ExtractionPipeline


OCR_INVOICE = (
    "Order ID: OD123456789012345678 Invoice Date: 12-01-2026 "
    "Total: ₹1,499.00 Description: Voeux Bluetooth Speaker "
    "Shipping Address Name: John Doe, Hojai, Assam, 782435"
)


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Every test starts from the bundled settings.yaml."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture
def pipeline():
    return ExtractionPipeline()


@pytest.fixture
def ocr_invoice():
    return OCR_INVOICE


@pytest.fixture
def to_layout():
    """Render text the way a glyph-by-glyph PDF text layer emits it."""
    def render(text: str) -> str:
        return " ".join(ch for ch in text if not ch.isspace())
    return render
