"""VAT summary data models: per-rate buckets and document totals."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from .extracted_field import ExtractedField, FieldProvenance

SUMMARY_RATES = ("23", "8", "5", "0", "zw", "np")
PAYMENT_METHODS = ("transfer", "cash", "card", "compensation", "other")


@dataclass(frozen=True)
class VatBucket:
    """Net/VAT/gross amounts for one VAT rate.

    Attributes:
        rate: One of "23", "8", "5", "0", "zw", "np"
        net: Net amount (2-decimal scale)
        vat: VAT amount (2-decimal scale)
        gross: Gross amount (2-decimal scale)
        confidence: Bucket confidence 0.0-1.0
        consistent: None until validated; False when gross != net + vat
            beyond tolerance
        provenance: Source table region and tokens
    """

    rate: str
    net: Decimal
    vat: Decimal
    gross: Decimal
    confidence: float = 0.0
    consistent: Optional[bool] = None
    provenance: FieldProvenance = FieldProvenance()

    def __post_init__(self):
        """Validate rate key and confidence range."""
        if self.rate not in SUMMARY_RATES:
            raise ValueError(
                f"rate must be one of {', '.join(SUMMARY_RATES)}, got '{self.rate}'"
            )

        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"confidence must be between 0.0 and 1.0, got {self.confidence}"
            )

    def to_dict(self) -> Dict[str, Decimal]:
        return {"net": self.net, "vat": self.vat, "gross": self.gross}


@dataclass(frozen=True)
class InvoiceSummary:
    """VAT-rate keyed summary table plus document totals.

    buckets keeps insertion order (order of first appearance) and rate
    keys are unique.

    Attributes:
        buckets: VatBucket per rate, in order of first appearance
        total_net: Total net amount
        total_vat: Total VAT amount
        total_gross: Total gross amount
        amount_due: Amount to pay (do zapłaty)
        payment_method: One of transfer/cash/card/compensation/other
    """

    buckets: Tuple[VatBucket, ...] = ()
    total_net: ExtractedField[Decimal] = field(default_factory=ExtractedField)
    total_vat: ExtractedField[Decimal] = field(default_factory=ExtractedField)
    total_gross: ExtractedField[Decimal] = field(default_factory=ExtractedField)
    amount_due: ExtractedField[Decimal] = field(default_factory=ExtractedField)
    payment_method: ExtractedField[str] = field(default_factory=ExtractedField)

    def __post_init__(self):
        """Validate that rate keys are unique."""
        rates = [b.rate for b in self.buckets]
        if len(rates) != len(set(rates)):
            raise ValueError(f"VAT bucket rates must be unique, got {rates}")

    def by_rate(self) -> "OrderedDict[str, VatBucket]":
        return OrderedDict((b.rate, b) for b in self.buckets)

    @property
    def inconsistent_rates(self) -> Tuple[str, ...]:
        return tuple(b.rate for b in self.buckets if b.consistent is False)

    def fields(self) -> Dict[str, ExtractedField]:
        return {
            "total_net": self.total_net,
            "total_vat": self.total_vat,
            "total_gross": self.total_gross,
            "amount_due": self.amount_due,
            "payment_method": self.payment_method,
        }

    def to_dict(self) -> Dict[str, Any]:
        return OrderedDict((b.rate, b.to_dict()) for b in self.buckets)
