"""Validation stage: identifier checksums, amount cross-checks, party completeness, required fields."""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple

from ..config.profile_loader import ExtractionProfile
from ..config.profile_manager import get_profile
from ..models.extracted_field import ExtractedField
from ..models.invoice_line import InvoiceLine
from ..models.invoice_summary import InvoiceSummary, VatBucket
from ..models.party import Party
from ..models.validation_result import ValidationResult
from .field_extraction import ExtractionResult
from .identifiers import validate_iban, validate_nip, validate_regon

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("header.invoice_number", "header.issue_date")

PARTY_VALIDATORS: Dict[str, Callable[[Optional[str]], ValidationResult]] = {
    "nip": validate_nip,
    "regon": validate_regon,
    "bank_account": validate_iban,
}


def within_tolerance(difference: Decimal, tolerance: Decimal) -> bool:
    """A difference of a whole tolerance unit (one grosz by default) is a mismatch."""
    difference = abs(difference)
    return difference == 0 or difference < tolerance


def bucket_is_consistent(bucket: VatBucket, tolerance: Decimal) -> bool:
    """gross == net + vat within tolerance."""
    return within_tolerance(bucket.gross - (bucket.net + bucket.vat), tolerance)


def validate_party(party: Party, section: str, warnings: List[str]) -> Party:
    """Annotate the party's identifiers with their checksum status."""
    values = party.fields()
    for name, validator in PARTY_VALIDATORS.items():
        extracted: ExtractedField = values[name]
        if not extracted.is_set:
            continue
        result = validator(extracted.value)
        values[name] = extracted.annotate(result)
        if result.is_invalid:
            warnings.append(f"{section}.{name}: {result.reason} ({extracted.value})")
            logger.warning("%s.%s %r is invalid: %s", section, name, extracted.value, result.reason)
    return Party(**values)


def validate_summary(
    summary: InvoiceSummary, tolerance: Decimal, warnings: List[str]
) -> InvoiceSummary:
    """Flag each VAT bucket consistent/inconsistent and compare totals."""
    buckets = []
    for bucket in summary.buckets:
        consistent = bucket_is_consistent(bucket, tolerance)
        if not consistent:
            warnings.append(
                f"summary.{bucket.rate}: gross {bucket.gross} != net {bucket.net} + vat {bucket.vat}"
            )
            logger.warning("VAT bucket %s inconsistent", bucket.rate)
        buckets.append(replace(bucket, consistent=consistent))

    if buckets and summary.total_gross.is_set and summary.total_gross.rule != "computed":
        bucket_gross = sum((b.gross for b in buckets), Decimal("0.00"))
        if not within_tolerance(summary.total_gross.value - bucket_gross, tolerance):
            warnings.append(
                f"summary.total_gross: {summary.total_gross.value} != sum of buckets {bucket_gross}"
            )

    return replace(summary, buckets=tuple(buckets))


def validate_line_items(
    line_items: Tuple[InvoiceLine, ...], tolerance: Decimal, warnings: List[str]
) -> None:
    """Warn about item rows whose amounts do not add up (rows are kept)."""
    for line in line_items:
        if line.net is None or line.vat is None or line.gross is None:
            continue
        if not within_tolerance(line.gross - (line.net + line.vat), tolerance):
            warnings.append(
                f"line_items[{line.line_number}]: gross {line.gross} != net {line.net} + vat {line.vat}"
            )


def validate_line_totals(
    line_items: Tuple[InvoiceLine, ...],
    summary: InvoiceSummary,
    tolerance: Decimal,
    warnings: List[str],
) -> None:
    """Compare item net/gross sums with the summary totals.

    A sum is skipped when any item lacks that amount.
    """
    if not line_items:
        return
    for name in ("net", "gross"):
        total = getattr(summary, f"total_{name}")
        amounts = [getattr(line, name) for line in line_items]
        if not total.is_set or any(amount is None for amount in amounts):
            continue
        calculated = sum(amounts, Decimal("0.00"))
        if not within_tolerance(calculated - total.value, tolerance):
            warnings.append(
                f"line_items: {name} sum {calculated} != summary.total_{name} {total.value}"
            )
            logger.warning("Line item %s sum %s differs from summary %s", name, calculated, total.value)


def validate_parties_complete(issuer: Party, receiver: Party, warnings: List[str]) -> None:
    if not issuer.name.is_set:
        warnings.append("issuer.name: missing issuer name")
    if not issuer.nip.is_set:
        warnings.append("issuer.nip: missing issuer NIP")
    if not receiver.name.is_set and not receiver.nip.is_set:
        warnings.append("receiver: missing receiver name and NIP")


def find_missing_fields(result: ExtractionResult) -> Tuple[str, ...]:
    sections = {
        "header": result.header.fields(),
        "issuer": result.issuer.fields(),
        "receiver": result.receiver.fields(),
        "summary": result.summary.fields(),
    }
    missing = []
    for dotted in REQUIRED_FIELDS:
        section, name = dotted.split(".")
        if not sections[section][name].is_set:
            missing.append(dotted)
    return tuple(missing)


def validate_extraction(
    result: ExtractionResult,
    profile: Optional[ExtractionProfile] = None,
) -> ExtractionResult:
    """Annotate extracted fields once with their validation status.

    Validation issues are never fatal: they are recorded on the fields,
    the buckets and in the warnings.

    Returns:
        New ExtractionResult with annotated fields, warnings and missing fields
    """
    profile = profile or get_profile()
    tolerance = profile.amount_tolerance
    warnings = list(result.warnings)

    issuer = validate_party(result.issuer, "issuer", warnings)
    receiver = validate_party(result.receiver, "receiver", warnings)
    summary = validate_summary(result.summary, tolerance, warnings)
    validate_line_items(result.line_items, tolerance, warnings)
    validate_line_totals(result.line_items, summary, tolerance, warnings)
    validate_parties_complete(issuer, receiver, warnings)

    missing = find_missing_fields(result)
    for dotted in missing:
        warnings.append(f"{dotted}: required field not found")
        logger.warning("Required field %s not found", dotted)

    return replace(
        result,
        issuer=issuer,
        receiver=receiver,
        summary=summary,
        warnings=tuple(warnings),
        missing_fields=missing,
    )
