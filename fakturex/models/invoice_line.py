"""InvoiceLine data model representing a product row of the item table."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from .extracted_field import FieldProvenance


@dataclass(frozen=True)
class InvoiceLine:
    """Represents a product row on an invoice.

    A row of the item table becomes an InvoiceLine only when it carries a
    net or gross amount (rule: a row with an amount is a product row).

    Attributes:
        line_number: Ordinal from the "Lp" column, or position in table (1-based)
        description: Product/service description
        quantity: Optional quantity
        unit: Optional unit (e.g. "szt.", "godz.", "kg")
        unit_price: Optional net unit price
        vat_rate: Normalized VAT rate key or None
        net: Net value of the line
        vat: VAT amount of the line
        gross: Gross value of the line
        confidence: Geometric mean of contributing token confidences
        provenance: Source region and tokens
    """

    line_number: int
    description: str
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None
    unit_price: Optional[Decimal] = None
    vat_rate: Optional[str] = None
    net: Optional[Decimal] = None
    vat: Optional[Decimal] = None
    gross: Optional[Decimal] = None
    confidence: float = 0.0
    provenance: FieldProvenance = FieldProvenance()

    def __post_init__(self):
        """Validate that the line carries an amount."""
        if self.net is None and self.gross is None:
            raise ValueError("InvoiceLine must have a net or gross amount")

        if self.line_number < 1:
            raise ValueError(f"line_number must be >= 1, got {self.line_number}")

        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"confidence must be between 0.0 and 1.0, got {self.confidence}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line_number": self.line_number,
            "description": self.description,
            "quantity": self.quantity,
            "unit": self.unit,
            "unit_price": self.unit_price,
            "vat_rate": self.vat_rate,
            "net": self.net,
            "vat": self.vat,
            "gross": self.gross,
        }
