"""Line item extraction from the item table grid."""

import logging
import re
from typing import Any, Dict, List, Optional

from ..config.profile_loader import ExtractionProfile
from ..models.extracted_field import FieldProvenance
from ..models.invoice_line import InvoiceLine
from .confidence_scoring import score_tokens
from .locale_parsers import parse_amount, parse_decimal
from .patterns import TOTALS_LABEL
from .summary_extractor import normalize_vat_rate
from .table_mapping import MappedTable

logger = logging.getLogger(__name__)

_LINE_NUMBER = re.compile(r"(\d{1,4})\.?")


def _optional_amount(table: MappedTable, row: int, field: str):
    result = parse_amount(table.cell_text(row, field))
    return result.value if result.ok else None


def extract_line_items(
    table: Optional[MappedTable],
    profile: ExtractionProfile,
    warnings: List[str],
) -> List[InvoiceLine]:
    """Extract product rows from the item table.

    Rules:
    - A row with a net or gross amount is a product row
    - A row without amounts but with description text continues the
      previous product's description (wrapped text)
    - The table ends at the first totals row (Razem/Suma)

    Returns:
        InvoiceLine list in table order (empty without an item table)
    """
    if table is None:
        return []

    grid = table.region.grid
    drafts: List[Dict[str, Any]] = []

    for row in table.data_rows:
        line = grid.lines[row]
        if TOTALS_LABEL.search(line.text):
            break

        net = _optional_amount(table, row, "net")
        gross = _optional_amount(table, row, "gross")
        description = table.cell_text(row, "description").strip()

        if net is None and gross is None:
            if drafts and description:
                drafts[-1]["description"] = f"{drafts[-1]['description']} {description}".strip()
                drafts[-1]["tokens"].extend(line.tokens)
                drafts[-1]["token_indices"].extend(line.token_indices)
            continue

        lp_match = _LINE_NUMBER.fullmatch(table.cell_text(row, "lp").strip())
        quantity = parse_decimal(table.cell_text(row, "quantity"))
        rate_text = table.cell_text(row, "rate")
        vat_rate = normalize_vat_rate(rate_text)
        if rate_text.strip() and vat_rate is None:
            warnings.append(f"line_items: unrecognized VAT rate {rate_text!r}")

        drafts.append({
            "line_number": int(lp_match.group(1)) if lp_match and int(lp_match.group(1)) > 0 else len(drafts) + 1,
            "description": description,
            "quantity": quantity.value if quantity.ok else None,
            "unit": table.cell_text(row, "unit").strip() or None,
            "unit_price": _optional_amount(table, row, "unit_price"),
            "vat_rate": vat_rate,
            "net": net,
            "vat": _optional_amount(table, row, "vat"),
            "gross": gross,
            "tokens": list(line.tokens),
            "token_indices": list(line.token_indices),
        })

    items = []
    for draft in drafts:
        tokens = draft.pop("tokens")
        token_indices = draft.pop("token_indices")
        items.append(
            InvoiceLine(
                confidence=score_tokens(tokens, "label", profile),
                provenance=FieldProvenance(
                    region_index=table.region.index,
                    token_indices=tuple(token_indices),
                ),
                **draft,
            )
        )

    logger.debug("Extracted %d line items from region %d", len(items), table.region.index)
    return items
