"""Field extraction: run all extractors over a normalized layout."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..config.profile_loader import ExtractionProfile
from ..config.profile_manager import get_profile
from ..models.invoice_header import InvoiceHeader
from ..models.invoice_line import InvoiceLine
from ..models.invoice_summary import InvoiceSummary
from ..models.layout import NormalizedLayout
from ..models.party import Party
from .header_extractor import extract_header
from .line_item_extractor import extract_line_items
from .party_extractor import extract_parties
from .summary_extractor import extract_summary
from .table_mapping import find_tables

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionResult:
    """Fields located in one document, before and after validation.

    Attributes:
        header: Header fields
        issuer: Seller block
        receiver: Buyer block
        summary: VAT buckets and totals
        line_items: Item table rows
        warnings: Data-quality warnings, in the order they were found
        missing_fields: Required fields that are unset (filled by validation)
    """

    header: InvoiceHeader = field(default_factory=InvoiceHeader)
    issuer: Party = field(default_factory=Party)
    receiver: Party = field(default_factory=Party)
    summary: InvoiceSummary = field(default_factory=InvoiceSummary)
    line_items: Tuple[InvoiceLine, ...] = ()
    warnings: Tuple[str, ...] = ()
    missing_fields: Tuple[str, ...] = ()


def extract_fields(
    layout: NormalizedLayout,
    profile: Optional[ExtractionProfile] = None,
) -> ExtractionResult:
    """Locate and type every invoice field.

    Never fails on missing structure: a field that cannot be located is
    left unset with confidence 0 and the gap shows up as a warning.
    Pure function of (layout, profile).
    """
    profile = profile or get_profile()
    warnings = []

    summary_table, item_table = find_tables(layout)
    line_items = extract_line_items(item_table, profile, warnings)
    summary = extract_summary(layout, summary_table, line_items, profile, warnings)
    header = extract_header(layout, profile, warnings)
    issuer, receiver = extract_parties(layout, profile, warnings)

    result = ExtractionResult(
        header=header,
        issuer=issuer,
        receiver=receiver,
        summary=summary,
        line_items=tuple(line_items),
        warnings=tuple(warnings),
    )
    logger.debug(
        "Extracted: invoice_number=%r, %d buckets, %d line items, %d warnings",
        header.invoice_number.value,
        len(summary.buckets),
        len(line_items),
        len(warnings),
    )
    return result
