"""ValidationResult data model representing the outcome of an identifier check."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

VALIDATION_STATUSES = ("unchecked", "valid", "invalid")
INVALID_REASONS = ("InvalidLength", "InvalidFormat", "ChecksumMismatch")


@dataclass(frozen=True)
class ValidationResult:
    """Tri-state validation status for an extracted field.

    Attributes:
        status: "unchecked", "valid", or "invalid"
        reason: One of InvalidLength/InvalidFormat/ChecksumMismatch when invalid
        detail: Optional human-readable explanation
    """

    status: str = "unchecked"
    reason: Optional[str] = None
    detail: Optional[str] = None

    def __post_init__(self):
        """Validate status/reason combination."""
        if self.status not in VALIDATION_STATUSES:
            raise ValueError(
                f"status must be 'unchecked', 'valid', or 'invalid', got '{self.status}'"
            )

        if self.status == "invalid" and self.reason not in INVALID_REASONS:
            raise ValueError(
                f"invalid status requires a reason in {INVALID_REASONS}, got {self.reason!r}"
            )

        if self.status != "invalid" and self.reason is not None:
            raise ValueError(f"reason is only allowed for invalid status, got {self.reason!r}")

    @classmethod
    def valid(cls) -> ValidationResult:
        return cls(status="valid")

    @classmethod
    def invalid(cls, reason: str, detail: Optional[str] = None) -> ValidationResult:
        return cls(status="invalid", reason=reason, detail=detail)

    @property
    def is_valid(self) -> bool:
        return self.status == "valid"

    @property
    def is_invalid(self) -> bool:
        return self.status == "invalid"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"status": self.status}
        if self.reason:
            data["reason"] = self.reason
        if self.detail:
            data["detail"] = self.detail
        return data

    def __str__(self) -> str:
        if self.status == "invalid":
            return f"invalid({self.reason})"
        return self.status


UNCHECKED = ValidationResult()
