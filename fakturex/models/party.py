"""Party and Address data models for issuer (seller) and receiver (buyer) blocks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .extracted_field import ExtractedField


@dataclass(frozen=True)
class Address:
    """Postal address split on the Polish postal-code pattern.

    Attributes:
        street: Text before the postal code (street and number)
        postal_code: "NN-NNN" postal code
        city: Text after the postal code
        raw: All address lines joined with ", "
    """

    street: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    raw: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.street or self.postal_code or self.city or self.raw)

    def format(self) -> str:
        """Single-line representation, "street, postal city" when split."""
        parts = []
        if self.street:
            parts.append(self.street)
        if self.postal_code and self.city:
            parts.append(f"{self.postal_code} {self.city}")
        elif self.postal_code or self.city:
            parts.append(self.postal_code or self.city)
        if parts:
            return ", ".join(parts)
        return self.raw or ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "street": self.street,
            "postal_code": self.postal_code,
            "city": self.city,
            "raw": self.raw,
        }


@dataclass(frozen=True)
class Party:
    """Issuer or receiver block.

    Attributes:
        name: Company or person name (first non-label line of the block)
        nip: Tax identifier (10 digits, normalized)
        regon: Statistical identifier (9 or 14 digits), optional
        address: Address split into street/postal code/city
        bank_account: Polish IBAN, normalized "PL" + 26 digits
        email: E-mail address
        phone: Phone number
    """

    name: ExtractedField[str] = field(default_factory=ExtractedField)
    nip: ExtractedField[str] = field(default_factory=ExtractedField)
    regon: ExtractedField[str] = field(default_factory=ExtractedField)
    address: ExtractedField[Address] = field(default_factory=ExtractedField)
    bank_account: ExtractedField[str] = field(default_factory=ExtractedField)
    email: ExtractedField[str] = field(default_factory=ExtractedField)
    phone: ExtractedField[str] = field(default_factory=ExtractedField)

    def fields(self) -> Dict[str, ExtractedField]:
        return {
            "name": self.name,
            "nip": self.nip,
            "regon": self.regon,
            "address": self.address,
            "bank_account": self.bank_account,
            "email": self.email,
            "phone": self.phone,
        }

    def is_empty(self) -> bool:
        return not any(f.is_set for f in self.fields().values())
