"""Header extraction: invoice number, dates, currency and invoice type."""

import logging
import re
from typing import List, Optional, Tuple

from ..config.profile_loader import ExtractionProfile
from ..models.extracted_field import ExtractedField
from ..models.invoice_header import InvoiceHeader
from ..models.layout import NormalizedLayout
from ..models.line import Line
from ..models.parse_result import ParseResult
from .locale_parsers import find_dates
from .matchers import Match, first_match, label_matcher, positional_matcher, regex_finder
from .patterns import (
    CORRECTION_OF_LABEL,
    CURRENCY_CODE,
    DUE_DATE_LABEL,
    INVOICE_NUMBER_LABEL,
    INVOICE_NUMBER_STANDALONE,
    INVOICE_NUMBER_VALUE,
    INVOICE_TITLE,
    INVOICE_TYPE_KEYWORDS,
    ISSUE_DATE_LABEL,
    SALE_DATE_LABEL,
)

logger = logging.getLogger(__name__)

HEADER_REGION_KINDS = ("title", "text", "unknown")

_OTHER_DATE_LABELS = re.compile(
    "|".join(p.pattern.replace("(?i)", "") for p in (SALE_DATE_LABEL, DUE_DATE_LABEL)),
    re.IGNORECASE,
)


def header_lines(layout: NormalizedLayout, profile: ExtractionProfile) -> List[Line]:
    """Lines scanned for header fields: first page, header zone first.

    Only title/text/unknown regions of the first page are scanned. Lines
    starting inside the top header_zone fraction of the page come first
    (in reading order), the rest of the page follows.
    """
    page = layout.first_page
    if page is None:
        return []
    zone_limit = layout.page_heights.get(page, 0.0) * float(profile.zones["header_zone"])
    lines = [line for line in layout.lines(*HEADER_REGION_KINDS) if line.page == page]
    in_zone = [line for line in lines if line.y_min < zone_limit]
    below = [line for line in lines if line.y_min >= zone_limit]
    return in_zone + below


def _invoice_number_finder(text: str) -> Optional[Tuple[ParseResult, int, int]]:
    hit = INVOICE_NUMBER_VALUE.search(text)
    if hit is None:
        return None
    value = hit.group(0).rstrip("./-_")
    if not value:
        return None
    return ParseResult.success(value), hit.start(), hit.start() + len(value)


def _date_finder(text: str) -> Optional[Tuple[ParseResult, int, int]]:
    dates = find_dates(text)
    return dates[0] if dates else None


INVOICE_NUMBER_MATCHERS = (
    label_matcher(INVOICE_NUMBER_LABEL, _invoice_number_finder),
    positional_matcher(regex_finder(INVOICE_NUMBER_STANDALONE)),
)

ISSUE_DATE_MATCHERS = (
    label_matcher(ISSUE_DATE_LABEL, _date_finder),
    positional_matcher(_date_finder, exclude=_OTHER_DATE_LABELS),
)

SALE_DATE_MATCHERS = (label_matcher(SALE_DATE_LABEL, _date_finder),)

DUE_DATE_MATCHERS = (label_matcher(DUE_DATE_LABEL, _date_finder),)

CORRECTION_OF_MATCHERS = (label_matcher(CORRECTION_OF_LABEL, _invoice_number_finder),)


def _currency_matcher(lines: List[Line]) -> Optional[Match]:
    """Explicit currency code token; an exact code counts as a label match."""
    for line in lines:
        hit = CURRENCY_CODE.search(line.text)
        if hit:
            return Match(
                result=ParseResult.success(hit.group(1)),
                line=line,
                positions=tuple(line.positions_in_span(hit.start(1), hit.end(1))),
                rule="label",
            )
    return None


CURRENCY_MATCHERS = (_currency_matcher,)


def _locate(
    name: str,
    matchers,
    lines: List[Line],
    profile: ExtractionProfile,
    warnings: List[str],
) -> ExtractedField:
    """Run ordered matchers; parse failures become warnings, never errors."""
    rejected: List[Match] = []
    found = first_match(matchers, lines, rejected)
    for failure in rejected:
        message = f"header.{name}: {failure.result.error} ({failure.result.message})"
        if message not in warnings:
            warnings.append(message)
    if found is None:
        return ExtractedField.missing()
    logger.debug("header.%s = %r via %s rule", name, found.result.value, found.rule)
    return found.to_field(profile)


def _currency_field(lines: List[Line], all_lines: List[Line], profile: ExtractionProfile) -> ExtractedField:
    """Explicit code token (header first, then whole document), else PLN."""
    found = first_match(CURRENCY_MATCHERS, lines) or first_match(CURRENCY_MATCHERS, all_lines)
    if found is not None:
        return found.to_field(profile)
    return ExtractedField(value="PLN", confidence=profile.positional_factor, rule="default")


def _invoice_type_field(lines: List[Line], profile: ExtractionProfile) -> ExtractedField:
    """Invoice type from the document title line."""
    title_lines = [
        line for line in lines
        if line.region_kind == "title" or INVOICE_TITLE.search(line.text)
    ]
    for line in title_lines:
        for invoice_type, keyword in INVOICE_TYPE_KEYWORDS:
            hit = keyword.search(line.text)
            if hit:
                match = Match(
                    result=ParseResult.success(invoice_type),
                    line=line,
                    positions=tuple(line.positions_in_span(hit.start(), hit.end())),
                    rule="label",
                )
                return match.to_field(profile)

    for line in title_lines:
        hit = INVOICE_TITLE.search(line.text)
        if hit:
            match = Match(
                result=ParseResult.success("standard"),
                line=line,
                positions=tuple(line.positions_in_span(hit.start(), hit.end())),
                rule="label",
            )
            return match.to_field(profile)

    return ExtractedField(value="standard", confidence=profile.positional_factor, rule="default")


def extract_header(
    layout: NormalizedLayout,
    profile: ExtractionProfile,
    warnings: List[str],
) -> InvoiceHeader:
    """Extract header fields from the first page.

    The corrected invoice's number is only looked for on correction invoices.

    Args:
        layout: Normalized layout
        profile: Extraction profile (rule factors, header zone)
        warnings: Collector for data-quality warnings

    Returns:
        InvoiceHeader; fields that cannot be located are unset with confidence 0
    """
    lines = header_lines(layout, profile)
    invoice_type = _invoice_type_field(lines, profile)

    correction_of = ExtractedField.missing()
    if invoice_type.value == "correction":
        correction_of = _locate("correction_of", CORRECTION_OF_MATCHERS, lines, profile, warnings)

    header = InvoiceHeader(
        invoice_number=_locate("invoice_number", INVOICE_NUMBER_MATCHERS, lines, profile, warnings),
        issue_date=_locate("issue_date", ISSUE_DATE_MATCHERS, lines, profile, warnings),
        sale_date=_locate("sale_date", SALE_DATE_MATCHERS, lines, profile, warnings),
        due_date=_locate("due_date", DUE_DATE_MATCHERS, lines, profile, warnings),
        currency=_currency_field(lines, layout.lines(), profile),
        invoice_type=invoice_type,
        correction_of=correction_of,
    )
    return header
