"""InvoiceRecord data model: terminal artifact of processing one document."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Tuple

from .extracted_field import ExtractedField
from .invoice_header import InvoiceHeader
from .invoice_line import InvoiceLine
from .invoice_summary import InvoiceSummary
from .party import Address, Party

SOURCE_TYPES = ("text_pdf", "scanned_image")


@dataclass(frozen=True)
class ExtractionMetadata:
    """Document-level extraction metadata.

    Attributes:
        confidence: Overall document confidence 0.0-1.0
        source_type: "text_pdf" or "scanned_image" (informational only)
        warnings: Data-quality issues found during extraction/validation
        missing_fields: Dotted names of required fields that are unset
    """

    confidence: float = 0.0
    source_type: str = "scanned_image"
    warnings: Tuple[str, ...] = ()
    missing_fields: Tuple[str, ...] = ()

    def __post_init__(self):
        """Validate confidence range and source type."""
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"confidence must be between 0.0 and 1.0, got {self.confidence}"
            )

        if self.source_type not in SOURCE_TYPES:
            raise ValueError(
                f"source_type must be 'text_pdf' or 'scanned_image', got '{self.source_type}'"
            )


def _plain(value: Any) -> Any:
    """Field value as a serialization-ready object (dates ISO, Address as dict)."""
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Address):
        return value.to_dict()
    return value


@dataclass(frozen=True)
class InvoiceRecord:
    """Structured invoice extracted from one document.

    Immutable once returned by the document pipeline.

    Attributes:
        header: Invoice number, dates, currency, type
        issuer: Seller block
        receiver: Buyer block
        summary: VAT-rate keyed summary table and totals
        line_items: Rows of the item table (may be empty)
        metadata: Confidence, source type, warnings
    """

    header: InvoiceHeader = field(default_factory=InvoiceHeader)
    issuer: Party = field(default_factory=Party)
    receiver: Party = field(default_factory=Party)
    summary: InvoiceSummary = field(default_factory=InvoiceSummary)
    line_items: Tuple[InvoiceLine, ...] = ()
    metadata: ExtractionMetadata = field(default_factory=ExtractionMetadata)

    def iter_fields(self) -> Dict[str, ExtractedField]:
        """All extracted fields keyed by dotted name (e.g. "issuer.nip")."""
        result: Dict[str, ExtractedField] = {}
        for section, fields in (
            ("header", self.header.fields()),
            ("issuer", self.issuer.fields()),
            ("receiver", self.receiver.fields()),
            ("summary", self.summary.fields()),
        ):
            for name, extracted in fields.items():
                result[f"{section}.{name}"] = extracted
        return result

    def field_confidences(self) -> Dict[str, float]:
        """Confidence of every set field, keyed by dotted name."""
        confidences = {
            name: extracted.confidence
            for name, extracted in self.iter_fields().items()
            if extracted.is_set
        }
        for bucket in self.summary.buckets:
            confidences[f"summary.{bucket.rate}"] = bucket.confidence
        return confidences

    def validation_map(self) -> Dict[str, str]:
        """Validation status of every checked field and VAT bucket."""
        statuses = {
            name: str(extracted.validation)
            for name, extracted in self.iter_fields().items()
            if extracted.validation.status != "unchecked"
        }
        for bucket in self.summary.buckets:
            if bucket.consistent is not None:
                statuses[f"summary.{bucket.rate}"] = (
                    "valid" if bucket.consistent else "invalid(Inconsistent)"
                )
        return statuses

    def _section(self, fields: Dict[str, ExtractedField]) -> Dict[str, Any]:
        return {name: _plain(extracted.value) for name, extracted in fields.items()}

    def to_dict(self) -> Dict[str, Any]:
        """Serialization-ready dict in the downstream JSON shape.

        Amounts stay Decimal (2-decimal scale) so the serializer decides
        how to render them; dates are ISO strings.
        """
        summary: Dict[str, Any] = {
            rate: bucket.to_dict() for rate, bucket in self.summary.by_rate().items()
        }
        totals = self._section(self.summary.fields())
        return {
            "header": self._section(self.header.fields()),
            "issuer": self._section(self.issuer.fields()),
            "receiver": self._section(self.receiver.fields()),
            "summary": summary,
            "totals": totals,
            "line_items": [line.to_dict() for line in self.line_items],
            "metadata": {
                "confidence": self.metadata.confidence,
                "source_type": self.metadata.source_type,
                "warnings": list(self.metadata.warnings),
                "missing_fields": list(self.metadata.missing_fields),
                "inconsistent_rates": list(self.summary.inconsistent_rates),
                "field_confidence": self.field_confidences(),
                "validation": self.validation_map(),
            },
        }
