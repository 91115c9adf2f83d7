"""Checksum and format validation for Polish tax, statistical and bank identifiers.

Validators are pure and never raise: malformed input yields
``invalid(InvalidFormat)``.

Note on the checksum-equals-10 edge case: a NIP whose weighted sum mod 11
is 10 is invalid (no check-digit substitution), while for REGON a result
of 10 is treated as check digit 0. Both follow the published algorithms
as commonly implemented; some registries disagree on the NIP case.
"""

import re
from typing import Optional

from ..models.validation_result import ValidationResult
from .locale_parsers import strip_separators

NIP_WEIGHTS = (6, 5, 7, 2, 3, 4, 5, 6, 7)
REGON9_WEIGHTS = (8, 9, 2, 3, 4, 5, 6, 7)
REGON14_WEIGHTS = (2, 4, 8, 5, 0, 9, 7, 3, 6, 1, 2, 4, 8)

_POLISH_IBAN = re.compile(r"PL[0-9]{26}")
_ASCII_DIGITS = re.compile(r"[0-9]+")


def _weighted_mod11(digits: str, weights) -> int:
    return sum(int(d) * w for d, w in zip(digits, weights)) % 11


def normalize_nip(text: Optional[str]) -> str:
    """Strip spaces, hyphens and an EU "PL" prefix from a NIP."""
    cleaned = strip_separators(text).upper()
    if cleaned.startswith("PL"):
        cleaned = cleaned[2:]
    return cleaned


def format_nip(nip: str) -> str:
    """Format a 10-digit NIP as XXX-XXX-XX-XX."""
    digits = normalize_nip(nip)
    if len(digits) != 10:
        return nip
    return f"{digits[:3]}-{digits[3:6]}-{digits[6:8]}-{digits[8:]}"


def validate_nip(text: Optional[str]) -> ValidationResult:
    """Validate a NIP (10 digits, weighted mod-11 check digit).

    Returns:
        valid, or invalid with InvalidFormat/InvalidLength/ChecksumMismatch
    """
    digits = normalize_nip(text)
    if not _ASCII_DIGITS.fullmatch(digits):
        return ValidationResult.invalid("InvalidFormat", f"NIP must contain only digits: {text!r}")

    if len(digits) != 10:
        return ValidationResult.invalid(
            "InvalidLength", f"NIP must have 10 digits, got {len(digits)}"
        )

    checksum = _weighted_mod11(digits[:9], NIP_WEIGHTS)
    if checksum == 10:
        return ValidationResult.invalid(
            "ChecksumMismatch", "NIP checksum is 10, which no check digit can match"
        )

    if checksum != int(digits[9]):
        return ValidationResult.invalid(
            "ChecksumMismatch", f"NIP check digit {digits[9]} != expected {checksum}"
        )

    return ValidationResult.valid()


def validate_regon(text: Optional[str]) -> ValidationResult:
    """Validate a 9- or 14-digit REGON.

    The 14-digit form must carry a valid 9-digit prefix plus its own
    check digit computed over digits 1-13.
    """
    digits = strip_separators(text)
    if not _ASCII_DIGITS.fullmatch(digits):
        return ValidationResult.invalid("InvalidFormat", f"REGON must contain only digits: {text!r}")

    if len(digits) not in (9, 14):
        return ValidationResult.invalid(
            "InvalidLength", f"REGON must have 9 or 14 digits, got {len(digits)}"
        )

    checksum9 = _weighted_mod11(digits[:8], REGON9_WEIGHTS) % 10
    if checksum9 != int(digits[8]):
        return ValidationResult.invalid(
            "ChecksumMismatch", f"REGON check digit {digits[8]} != expected {checksum9}"
        )

    if len(digits) == 14:
        checksum14 = _weighted_mod11(digits[:13], REGON14_WEIGHTS) % 10
        if checksum14 != int(digits[13]):
            return ValidationResult.invalid(
                "ChecksumMismatch",
                f"REGON-14 check digit {digits[13]} != expected {checksum14}",
            )

    return ValidationResult.valid()


def normalize_iban(text: Optional[str]) -> str:
    """Uppercase and drop spaces/hyphens; bare 26-digit accounts get a "PL" prefix."""
    cleaned = strip_separators(text).upper()
    if cleaned.startswith("IBAN"):
        cleaned = cleaned[4:].lstrip(":")
    if len(cleaned) == 26 and _ASCII_DIGITS.fullmatch(cleaned):
        cleaned = "PL" + cleaned
    return cleaned


def format_iban(iban: str) -> str:
    """Group an IBAN in blocks of four characters."""
    cleaned = strip_separators(iban).upper()
    return " ".join(cleaned[i:i + 4] for i in range(0, len(cleaned), 4))


def validate_iban(text: Optional[str]) -> ValidationResult:
    """Validate a Polish IBAN ("PL" + 26 digits, ISO 13616 mod-97 check).

    Spaces between digit groups are ignored.
    """
    cleaned = strip_separators(text).upper()
    if not _POLISH_IBAN.fullmatch(cleaned):
        return ValidationResult.invalid(
            "InvalidFormat", f"IBAN must be 'PL' followed by 26 digits: {text!r}"
        )

    rearranged = cleaned[4:] + cleaned[:4]
    numeral = "".join(
        str(ord(ch) - ord("A") + 10) if ch.isalpha() else ch for ch in rearranged
    )
    if int(numeral) % 97 != 1:
        return ValidationResult.invalid("ChecksumMismatch", "IBAN mod-97 check failed")

    return ValidationResult.valid()
