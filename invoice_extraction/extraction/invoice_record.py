"""
Invoice Record Data Classes.

This module defines the data structures produced by the extraction engine:
the six-field InvoiceRecord and the tagged ExtractionOutcome that wraps it.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, Optional
import json

# Placeholder for any field that could not be validated
SENTINEL = "N/A"

# Prefix carried by every extracted price
CURRENCY_SYMBOL = "₹"


class FailureReason:
    """Reasons an extraction can fail."""

    UPSTREAM_FAILURE = "UpstreamFailure"
    INSUFFICIENT_TEXT = "InsufficientText"
    MISSING_ORDER_IDENTIFIER = "MissingOrderIdentifier"


@dataclass
class InvoiceRecord:
    """
    The six semantic fields recovered from one invoice.

    Every field is either a non-empty extracted value or the sentinel
    ``"N/A"``. Empty strings and None passed in are replaced by the
    sentinel, so a record is always ready to display verbatim.

    Attributes:
        order_id: Order identifier (e.g. "OD123456789012345678")
        date: Invoice date as printed (e.g. "12-01-2026")
        price: Total price with currency prefix (e.g. "₹1499.00")
        item_name: Product description
        delivery_address: Shipping address
        delivery_state: Canonical state name (e.g. "Assam")

    Example:
        >>> record = InvoiceRecord(order_id="OD123456789012345678")
        >>> record.price
        'N/A'
        >>> record.to_dict()["orderId"]
        'OD123456789012345678'
    """
    order_id: str = SENTINEL
    date: str = SENTINEL
    price: str = SENTINEL
    item_name: str = SENTINEL
    delivery_address: str = SENTINEL
    delivery_state: str = SENTINEL

    # Attribute name -> external key
    KEY_MAP = {
        'order_id': 'orderId',
        'date': 'date',
        'price': 'price',
        'item_name': 'itemName',
        'delivery_address': 'deliveryAddress',
        'delivery_state': 'deliveryState',
    }

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or not str(value).strip():
                setattr(self, f.name, SENTINEL)

    @property
    def has_order_id(self) -> bool:
        return self.order_id != SENTINEL

    @property
    def missing_fields(self) -> list:
        """Names of the fields that hold the sentinel."""
        return [f.name for f in fields(self) if getattr(self, f.name) == SENTINEL]

    def to_dict(self) -> Dict[str, str]:
        """
        Convert to the external (camelCase) dictionary format.

        Returns:
            Dictionary with keys orderId, date, price, itemName,
            deliveryAddress and deliveryState.
        """
        return {key: getattr(self, attr) for attr, key in self.KEY_MAP.items()}

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InvoiceRecord':
        """
        Create a record from either camelCase or snake_case keys.

        Args:
            data: Dictionary with record fields.

        Returns:
            InvoiceRecord instance.
        """
        values = {}
        for attr, key in cls.KEY_MAP.items():
            if key in data:
                values[attr] = data[key]
            elif attr in data:
                values[attr] = data[attr]
        return cls(**values)


@dataclass
class ExtractionOutcome:
    """
    Tagged result of one extraction call.

    A successful outcome carries an InvoiceRecord; a failed one carries a
    machine-readable reason and a human-readable message.

    Example:
        >>> outcome = ExtractionOutcome.fail(
        ...     FailureReason.INSUFFICIENT_TEXT, "No text could be extracted"
        ... )
        >>> outcome.success
        False
    """
    record: Optional[InvoiceRecord] = None
    reason: Optional[str] = None
    message: Optional[str] = None
    source: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def success(self) -> bool:
        return self.record is not None and self.reason is None

    @classmethod
    def ok(cls, record: InvoiceRecord, source: Optional[str] = None) -> 'ExtractionOutcome':
        return cls(record=record, source=source)

    @classmethod
    def fail(
        cls,
        reason: str,
        message: Optional[str] = None,
        source: Optional[str] = None
    ) -> 'ExtractionOutcome':
        return cls(reason=reason, message=message or reason, source=source)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the response dictionary format.

        Returns:
            ``{"success": True, "data": {...}}`` or
            ``{"success": False, "reason": ..., "error": ...}``.
        """
        result: Dict[str, Any] = {'success': self.success}
        if self.success:
            result['data'] = self.record.to_dict()
        else:
            result['reason'] = self.reason
            result['error'] = self.message
        if self.source:
            result['source'] = self.source
        return result

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def __str__(self) -> str:
        if self.success:
            return f"Success({self.record.order_id})"
        return f"Failure({self.reason}: {self.message})"
