"""InvoiceHeader data model representing extracted header data from invoice."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict

from .extracted_field import ExtractedField

INVOICE_TYPES = ("standard", "correction", "advance", "final", "proforma", "margin")


@dataclass(frozen=True)
class InvoiceHeader:
    """Represents extracted header data from invoice.

    Required fields (invoice_number, issue_date) may still be unset; an
    unset field has confidence 0 and is reported in metadata.missing_fields.

    Attributes:
        invoice_number: Invoice number (e.g. "FV/001/2024")
        issue_date: Date of issue (data wystawienia)
        sale_date: Date of sale or delivery (data sprzedaży)
        due_date: Payment due date (termin płatności)
        currency: ISO currency code, PLN when no code token is found
        invoice_type: One of standard/correction/advance/final/proforma/margin
        correction_of: Number of the corrected invoice (correction invoices only)
    """

    invoice_number: ExtractedField[str] = field(default_factory=ExtractedField)
    issue_date: ExtractedField[date] = field(default_factory=ExtractedField)
    sale_date: ExtractedField[date] = field(default_factory=ExtractedField)
    due_date: ExtractedField[date] = field(default_factory=ExtractedField)
    currency: ExtractedField[str] = field(default_factory=ExtractedField)
    invoice_type: ExtractedField[str] = field(default_factory=ExtractedField)
    correction_of: ExtractedField[str] = field(default_factory=ExtractedField)

    def __post_init__(self):
        if self.invoice_type.is_set and self.invoice_type.value not in INVOICE_TYPES:
            raise ValueError(
                f"invoice_type must be one of {INVOICE_TYPES}, got {self.invoice_type.value!r}"
            )

    def fields(self) -> Dict[str, ExtractedField]:
        return {
            "invoice_number": self.invoice_number,
            "issue_date": self.issue_date,
            "sale_date": self.sale_date,
            "due_date": self.due_date,
            "currency": self.currency,
            "invoice_type": self.invoice_type,
            "correction_of": self.correction_of,
        }
