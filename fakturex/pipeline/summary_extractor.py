"""Summary extraction: VAT-rate buckets, totals, amount due and payment method."""

import logging
import re
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from ..config.profile_loader import ExtractionProfile
from ..models.extracted_field import ExtractedField, FieldProvenance
from ..models.invoice_line import InvoiceLine
from ..models.invoice_summary import SUMMARY_RATES, InvoiceSummary, VatBucket
from ..models.layout import NormalizedLayout
from ..models.parse_result import ParseResult
from ..models.table_grid import TableCell
from .confidence_scoring import score_tokens
from .locale_parsers import find_amounts, parse_amount
from .matchers import Match, first_match, label_matcher
from .patterns import AMOUNT_DUE_LABEL, PAYMENT_KEYWORDS, PAYMENT_LABEL, TOTALS_LABEL
from .table_mapping import MappedTable

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

_ZERO_VAT_RATES = ("0", "zw", "np", "oo")
_RATE_NUMBER = re.compile(r"(\d{1,2})(?:[.,]0{1,2})?")


def normalize_vat_rate(text: Optional[str]) -> Optional[str]:
    """Normalize a VAT-rate cell to its key.

    "23%", "23", "23,00 %" -> "23"; "zw", "zw." -> "zw"; "np", "np." -> "np";
    "oo" -> "oo" (reverse charge). Other integer percentages map to
    themselves; anything else returns None.
    """
    if not text:
        return None
    cleaned = text.strip().lower().replace(" ", "").replace("%", "").rstrip(".")
    if cleaned in ("zw", "zwol", "zwolniony", "zwolnione"):
        return "zw"
    if cleaned in ("np", "n.p", "niepodlega"):
        return "np"
    if cleaned in ("oo", "o.o"):
        return "oo"
    match = _RATE_NUMBER.fullmatch(cleaned)
    if match:
        return str(int(match.group(1)))
    return None


def _cell_tokens(cells: Sequence[Optional[TableCell]]):
    return [t for cell in cells if cell is not None for t in cell.tokens]


def _cell_indices(cells: Sequence[Optional[TableCell]]) -> Tuple[int, ...]:
    return tuple(i for cell in cells if cell is not None for i in cell.token_indices)


def _parse_cell(table: MappedTable, row: int, field: str) -> ParseResult:
    return parse_amount(table.cell_text(row, field))


def _bucket_from_row(
    table: MappedTable,
    row: int,
    rate: str,
    profile: ExtractionProfile,
    warnings: List[str],
) -> Optional[VatBucket]:
    net = _parse_cell(table, row, "net")
    if not net.ok:
        warnings.append(f"summary.{rate}: net amount {net.error} ({net.message})")
        return None

    vat = _parse_cell(table, row, "vat")
    gross = _parse_cell(table, row, "gross")
    computed = False

    if not vat.ok and rate in _ZERO_VAT_RATES:
        vat = ParseResult.success(ZERO)
    if vat.ok and not gross.ok:
        gross = ParseResult.success(net.value + vat.value)
        computed = True
    elif gross.ok and not vat.ok:
        vat = ParseResult.success(gross.value - net.value)
        computed = True
    elif not vat.ok and not gross.ok:
        warnings.append(f"summary.{rate}: neither VAT nor gross amount could be read")
        return None

    cells = [table.cell(row, f) for f in ("rate", "net", "vat", "gross")]
    rule = "computed" if computed else "label"
    return VatBucket(
        rate=rate,
        net=net.value,
        vat=vat.value,
        gross=gross.value,
        confidence=score_tokens(_cell_tokens(cells), rule, profile),
        provenance=FieldProvenance(region_index=table.region.index, token_indices=_cell_indices(cells)),
    )


def _merge_buckets(first: VatBucket, second: VatBucket) -> VatBucket:
    """Sum a duplicate rate row into the first bucket of that rate."""
    return VatBucket(
        rate=first.rate,
        net=first.net + second.net,
        vat=first.vat + second.vat,
        gross=first.gross + second.gross,
        confidence=min(first.confidence, second.confidence),
        provenance=FieldProvenance(
            region_index=first.provenance.region_index,
            token_indices=first.provenance.token_indices + second.provenance.token_indices,
        ),
    )


def _totals_from_row(
    table: MappedTable, row: int, profile: ExtractionProfile
) -> Dict[str, ExtractedField]:
    totals = {}
    for field, name in (("net", "total_net"), ("vat", "total_vat"), ("gross", "total_gross")):
        result = _parse_cell(table, row, field)
        cell = table.cell(row, field)
        if result.ok and cell is not None:
            totals[name] = ExtractedField(
                value=result.value,
                confidence=score_tokens(cell.tokens, "label", profile),
                provenance=FieldProvenance(
                    region_index=table.region.index,
                    token_indices=tuple(cell.token_indices),
                ),
                rule="label",
            )
    return totals


def buckets_from_table(
    table: MappedTable,
    profile: ExtractionProfile,
    warnings: List[str],
) -> Tuple[List[VatBucket], Dict[str, ExtractedField]]:
    """Read one bucket per data row of the summary table, plus its totals row."""
    buckets: "OrderedDict[str, VatBucket]" = OrderedDict()
    totals: Dict[str, ExtractedField] = {}

    for row in table.data_rows:
        line = table.region.grid.lines[row]
        if TOTALS_LABEL.search(line.text):
            totals = _totals_from_row(table, row, profile)
            continue

        rate_text = table.cell_text(row, "rate")
        rate = normalize_vat_rate(rate_text)
        if rate is None:
            if find_amounts(line.text):
                warnings.append(f"summary: unrecognized VAT rate {rate_text!r} in row {line.text!r}")
            continue
        if rate not in SUMMARY_RATES:
            warnings.append(f"summary: VAT rate {rate!r} is not a summary bucket key, row skipped")
            continue

        bucket = _bucket_from_row(table, row, rate, profile, warnings)
        if bucket is None:
            continue
        if rate in buckets:
            warnings.append(f"summary.{rate}: duplicate rate row summed into first bucket")
            buckets[rate] = _merge_buckets(buckets[rate], bucket)
        else:
            buckets[rate] = bucket

    return list(buckets.values()), totals


def buckets_from_line_items(
    line_items: Sequence[InvoiceLine], profile: ExtractionProfile
) -> List[VatBucket]:
    """Sum item rows per VAT rate when the document has no summary table."""
    sums: "OrderedDict[str, List[InvoiceLine]]" = OrderedDict()
    for item in line_items:
        if item.vat_rate in SUMMARY_RATES and item.net is not None:
            sums.setdefault(item.vat_rate, []).append(item)

    buckets = []
    for rate, items in sums.items():
        net = sum((i.net for i in items), ZERO)
        if all(i.vat is not None for i in items):
            vat = sum((i.vat for i in items), ZERO)
        elif all(i.gross is not None for i in items):
            vat = sum((i.gross for i in items), ZERO) - net
        elif rate in _ZERO_VAT_RATES:
            vat = ZERO
        else:
            continue
        if all(i.gross is not None for i in items):
            gross = sum((i.gross for i in items), ZERO)
        else:
            gross = net + vat
        buckets.append(
            VatBucket(
                rate=rate,
                net=net,
                vat=vat,
                gross=gross,
                confidence=min(i.confidence for i in items) * profile.positional_factor,
                provenance=FieldProvenance(
                    region_index=items[0].provenance.region_index,
                    token_indices=tuple(t for i in items for t in i.provenance.token_indices),
                ),
            )
        )
    return buckets


def _computed_totals(buckets: Sequence[VatBucket], profile: ExtractionProfile) -> Dict[str, ExtractedField]:
    if not buckets:
        return {}
    confidence = min(b.confidence for b in buckets) * profile.positional_factor
    region_index = buckets[0].provenance.region_index
    return {
        name: ExtractedField(
            value=sum((getattr(b, attr) for b in buckets), ZERO),
            confidence=confidence,
            provenance=FieldProvenance(region_index=region_index),
            rule="computed",
        )
        for name, attr in (("total_net", "net"), ("total_vat", "vat"), ("total_gross", "gross"))
    }


def _amount_finder(text: str):
    amounts = find_amounts(text)
    if not amounts:
        return None
    value, start, end = amounts[0]
    return ParseResult.success(value), start, end


def _payment_finder(allow_other: bool):
    def find(text: str):
        hits = []
        for method, keyword in PAYMENT_KEYWORDS:
            hit = keyword.search(text)
            if hit:
                hits.append((hit.start(), hit.end(), method))
        if hits:
            start, end, method = min(hits)
            return ParseResult.success(method), start, end
        if allow_other:
            word = re.search(r"\w+", text)
            if word:
                return ParseResult.success("other"), word.start(), word.end()
        return None

    return find


AMOUNT_DUE_MATCHERS = (label_matcher(AMOUNT_DUE_LABEL, _amount_finder),)


def _payment_keyword_matcher(lines) -> Optional[Match]:
    finder = _payment_finder(allow_other=False)
    for line in lines:
        found = finder(line.text)
        if found:
            result, start, end = found
            return Match(
                result=result,
                line=line,
                positions=tuple(line.positions_in_span(start, end)),
                rule="positional",
            )
    return None


PAYMENT_MATCHERS = (
    label_matcher(PAYMENT_LABEL, _payment_finder(allow_other=True)),
    _payment_keyword_matcher,
)


def _text_totals(layout: NormalizedLayout, profile: ExtractionProfile) -> Dict[str, ExtractedField]:
    """Totals from a "Razem" line outside tables: three amounts or one gross amount."""
    for line in layout.lines("text", "title", "unknown"):
        hit = TOTALS_LABEL.search(line.text)
        if not hit or AMOUNT_DUE_LABEL.search(line.text):
            continue
        amounts = find_amounts(line.text[hit.end():])
        if len(amounts) == 3:
            names = ("total_net", "total_vat", "total_gross")
        elif len(amounts) == 1:
            names = ("total_gross",)
        else:
            continue
        totals = {}
        for name, (value, start, end) in zip(names, amounts):
            match = Match(
                result=ParseResult.success(value),
                line=line,
                positions=tuple(line.positions_in_span(hit.end() + start, hit.end() + end)),
                rule="label",
            )
            totals[name] = match.to_field(profile)
        return totals
    return {}


def extract_summary(
    layout: NormalizedLayout,
    summary_table: Optional[MappedTable],
    line_items: Sequence[InvoiceLine],
    profile: ExtractionProfile,
    warnings: List[str],
) -> InvoiceSummary:
    """Build the VAT summary.

    Buckets come from the summary table (net/rate/VAT/gross headers). Without
    one, item rows are summed per rate; without either, the summary is empty
    and reported as a warning. Totals come from the table's totals row, a
    labelled text line, or the bucket sums (in that order).
    """
    if summary_table is not None:
        buckets, totals = buckets_from_table(summary_table, profile, warnings)
    else:
        buckets = buckets_from_line_items(line_items, profile)
        totals = {}
        if buckets:
            warnings.append("summary: no VAT summary table, buckets summed from line items")
        else:
            warnings.append("summary: no VAT summary table found")

    if not totals:
        totals = _text_totals(layout, profile) or _computed_totals(buckets, profile)

    all_lines = layout.lines()
    amount_due = first_match(AMOUNT_DUE_MATCHERS, all_lines)
    payment = first_match(PAYMENT_MATCHERS, all_lines)

    summary = InvoiceSummary(
        buckets=tuple(buckets),
        amount_due=amount_due.to_field(profile) if amount_due else ExtractedField.missing(),
        payment_method=payment.to_field(profile) if payment else ExtractedField.missing(),
        **totals,
    )
    logger.debug(
        "Summary: %d buckets (%s), total_gross=%r",
        len(buckets),
        ", ".join(b.rate for b in buckets),
        summary.total_gross.value,
    )
    return summary
