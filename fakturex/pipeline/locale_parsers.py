"""Utilities for parsing Polish-formatted amounts and dates.

All parsers are pure and total: they return a ParseResult instead of
raising, and every call site branches on ``result.ok``.
"""

import calendar
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from ..models.parse_result import ParseResult

TWO_PLACES = Decimal("0.01")

_CURRENCY_PATTERN = re.compile(r"(?i)pln|eur|usd|gbp|zł|zl|€|\$|£")

# Forms accepted after whitespace removal
_PLAIN_INTEGER = re.compile(r"\d+")
_SINGLE_SEPARATOR = re.compile(r"(\d+)[.,](\d{1,2})")
_DOT_THOUSANDS = re.compile(r"\d{1,3}(?:\.\d{3})+")
_DOT_THOUSANDS_COMMA_DECIMAL = re.compile(r"(\d{1,3}(?:\.\d{3})+),(\d{1,2})")
_COMMA_THOUSANDS_DOT_DECIMAL = re.compile(r"(\d{1,3}(?:,\d{3})+)\.(\d{1,2})")

# Amount candidates inside free text
_AMOUNT_IN_TEXT = re.compile(
    r"(?<![\d,.])-?(?:\d{1,3}(?:[ \u00a0.]\d{3})+|\d+)[.,]\d{2}(?!\d|[.,]\d)"
)

POLISH_MONTHS = {
    "stycznia": 1, "lutego": 2, "marca": 3, "kwietnia": 4,
    "maja": 5, "czerwca": 6, "lipca": 7, "sierpnia": 8,
    "września": 9, "wrzesnia": 9, "października": 10, "pazdziernika": 10,
    "listopada": 11, "grudnia": 12,
}

_MONTH_ALTERNATION = "|".join(sorted(POLISH_MONTHS, key=len, reverse=True))

_DATE_ISO = re.compile(r"(\d{4})([.\-/])(\d{1,2})\2(\d{1,2})")
_DATE_DMY = re.compile(r"(\d{1,2})([.\-/])(\d{1,2})\2(\d{4}|\d{2})")
_DATE_LONG = re.compile(r"(\d{1,2})\s+(" + _MONTH_ALTERNATION + r")\s+(\d{4})", re.IGNORECASE)
_YEAR_SUFFIX = re.compile(r"\s*(?:r\.?|roku)$", re.IGNORECASE)

_DATE_IN_TEXT = re.compile(
    r"(?<!\d)(?:\d{4}([.\-/])\d{1,2}\1\d{1,2}"
    r"|\d{1,2}([.\-/])\d{1,2}\2(?:\d{4}|\d{2})"
    r"|\d{1,2}\s+(?:" + _MONTH_ALTERNATION + r")\s+\d{4})(?!\d)",
    re.IGNORECASE,
)

MIN_YEAR = 1900
MAX_YEAR = 2100


def quantize_amount(value: Decimal) -> Decimal:
    """Round to 2-decimal currency scale."""
    return value.quantize(TWO_PLACES)


def _strip_sign(raw: str) -> Tuple[str, bool]:
    negative = False
    if raw.startswith("-"):
        negative = True
        raw = raw[1:].strip()
    if raw.endswith("-"):
        negative = True
        raw = raw[:-1].strip()
    return raw, negative


def _join_space_groups(cleaned: str) -> Optional[str]:
    """Remove space thousands separators, checking that groups are 3 digits wide."""
    groups = cleaned.split()
    if len(groups) == 1:
        return groups[0]
    if not re.fullmatch(r"\d{1,3}", groups[0]):
        return None
    for group in groups[1:-1]:
        if not re.fullmatch(r"\d{3}", group):
            return None
    if not re.fullmatch(r"\d{3}(?:[.,]\d+)?", groups[-1]):
        return None
    return "".join(groups)


def parse_amount(text: Optional[str]) -> ParseResult:
    """Parse a Polish or plain currency amount to a 2-decimal Decimal.

    Rules:
    - Trim whitespace, strip currency codes/symbols (zł, PLN, EUR, ...)
    - Spaces (including non-breaking) are thousands separators
    - A lone comma or dot followed by 1-2 digits is the decimal separator
    - Dots followed by 3-digit groups are thousands separators ("1.234")
    - Both separator types are accepted only in the unambiguous forms
      "1.234,56" and "1,234.56"
    - Leading or trailing '-' marks a negative amount

    Returns:
        ParseResult with Decimal value, or EmptyInput/UnrecognizedFormat
    """
    if text is None or not text.strip():
        return ParseResult.failure("EmptyInput", "amount text is empty")

    raw, negative = _strip_sign(text.strip())
    cleaned = _CURRENCY_PATTERN.sub("", raw).strip()
    if not cleaned:
        return ParseResult.failure("UnrecognizedFormat", f"no numeric content in {text!r}")

    joined = _join_space_groups(cleaned)
    if joined is None:
        return ParseResult.failure("UnrecognizedFormat", f"bad digit grouping in {text!r}")

    normalized = None
    if _PLAIN_INTEGER.fullmatch(joined):
        normalized = joined
    elif _SINGLE_SEPARATOR.fullmatch(joined):
        match = _SINGLE_SEPARATOR.fullmatch(joined)
        normalized = f"{match.group(1)}.{match.group(2)}"
    elif _DOT_THOUSANDS.fullmatch(joined):
        normalized = joined.replace(".", "")
    elif _DOT_THOUSANDS_COMMA_DECIMAL.fullmatch(joined):
        match = _DOT_THOUSANDS_COMMA_DECIMAL.fullmatch(joined)
        normalized = f"{match.group(1).replace('.', '')}.{match.group(2)}"
    elif _COMMA_THOUSANDS_DOT_DECIMAL.fullmatch(joined):
        match = _COMMA_THOUSANDS_DOT_DECIMAL.fullmatch(joined)
        normalized = f"{match.group(1).replace(',', '')}.{match.group(2)}"

    if normalized is None:
        return ParseResult.failure("UnrecognizedFormat", f"invalid amount format: {text!r}")

    try:
        value = quantize_amount(Decimal(normalized))
    except InvalidOperation:
        return ParseResult.failure("UnrecognizedFormat", f"invalid amount format: {text!r}")

    return ParseResult.success(-value if negative else value)


def parse_decimal(text: Optional[str]) -> ParseResult:
    """Parse a quantity or rate ("1,5", "2", "0.25") without fixing the scale."""
    if text is None or not text.strip():
        return ParseResult.failure("EmptyInput", "number text is empty")

    raw, negative = _strip_sign(text.strip())
    joined = _join_space_groups(raw)
    if joined is None or not re.fullmatch(r"\d+(?:[.,]\d+)?", joined):
        return ParseResult.failure("UnrecognizedFormat", f"invalid number format: {text!r}")

    value = Decimal(joined.replace(",", "."))
    return ParseResult.success(-value if negative else value)


def _expand_year(year_text: str) -> int:
    year = int(year_text)
    if len(year_text) == 2:
        return 2000 + year if year <= 50 else 1900 + year
    return year


def _build_date(year: int, month: int, day: int, text: str) -> ParseResult:
    if not MIN_YEAR <= year <= MAX_YEAR:
        return ParseResult.failure("MalformedDate", f"year {year} out of range in {text!r}")
    if not 1 <= month <= 12:
        return ParseResult.failure("MalformedDate", f"month {month} out of range in {text!r}")
    days_in_month = calendar.monthrange(year, month)[1]
    if not 1 <= day <= days_in_month:
        return ParseResult.failure(
            "MalformedDate", f"day {day} out of range (1-{days_in_month}) in {text!r}"
        )
    return ParseResult.success(date(year, month, day))


def parse_date(text: Optional[str]) -> ParseResult:
    """Parse an ISO or Polish-formatted date.

    Accepted forms: YYYY-MM-DD (also with '.' or '/'), DD.MM.YYYY,
    DD-MM-YYYY, DD/MM/YYYY, DD.MM.YY and "15 stycznia 2024". A trailing
    "r." is ignored. The separator must be the same throughout.

    Returns:
        ParseResult with date value, or EmptyInput/UnrecognizedFormat/MalformedDate
    """
    if text is None or not text.strip():
        return ParseResult.failure("EmptyInput", "date text is empty")

    cleaned = _YEAR_SUFFIX.sub("", text.strip())

    match = _DATE_ISO.fullmatch(cleaned)
    if match:
        return _build_date(int(match.group(1)), int(match.group(3)), int(match.group(4)), text)

    match = _DATE_DMY.fullmatch(cleaned)
    if match:
        return _build_date(
            _expand_year(match.group(4)), int(match.group(3)), int(match.group(1)), text
        )

    match = _DATE_LONG.fullmatch(cleaned)
    if match:
        month = POLISH_MONTHS[match.group(2).lower()]
        return _build_date(int(match.group(3)), month, int(match.group(1)), text)

    return ParseResult.failure("UnrecognizedFormat", f"unrecognized date format: {text!r}")


def find_amounts(text: str) -> List[Tuple[Decimal, int, int]]:
    """Locate all amount candidates in free text.

    Returns:
        List of (value, start, end) for every candidate that parses
    """
    found = []
    for match in _AMOUNT_IN_TEXT.finditer(text or ""):
        result = parse_amount(match.group(0))
        if result.ok:
            found.append((result.value, match.start(), match.end()))
    return found


def find_dates(text: str) -> List[Tuple[ParseResult, int, int]]:
    """Locate all date-like substrings in free text.

    Malformed candidates are returned too (with a MalformedDate result) so
    callers can report them instead of silently skipping.
    """
    return [
        (parse_date(match.group(0)), match.start(), match.end())
        for match in _DATE_IN_TEXT.finditer(text or "")
    ]


def format_polish_amount(amount: Decimal) -> str:
    """Format a Decimal as "1 234,56"."""
    value = quantize_amount(amount)
    sign = "-" if value < 0 else ""
    integer_part, decimal_part = f"{abs(value):.2f}".split(".")
    groups = []
    while integer_part:
        groups.insert(0, integer_part[-3:])
        integer_part = integer_part[:-3]
    return f"{sign}{' '.join(groups)},{decimal_part}"


def strip_separators(text: Optional[str]) -> str:
    """Remove spaces and hyphens used to group identifier digits."""
    return re.sub(r"[\s\-]+", "", text or "")
