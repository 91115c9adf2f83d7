"""ExtractedField data model: a typed value with provenance, confidence and validation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

from .validation_result import UNCHECKED, ValidationResult

T = TypeVar("T")

FIELD_RULES = ("label", "positional", "default", "computed", "missing")


@dataclass(frozen=True)
class FieldProvenance:
    """Where a field value came from.

    Attributes:
        region_index: Index of the normalized region holding the value (None if not located)
        token_indices: Indices of contributing tokens in the document token list
    """

    region_index: Optional[int] = None
    token_indices: Tuple[int, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "region_index": self.region_index,
            "token_indices": list(self.token_indices),
        }


@dataclass(frozen=True)
class ExtractedField(Generic[T]):
    """A located and typed invoice field.

    Created once by field extraction, annotated once by validation, never
    mutated afterward: annotation returns a new instance.

    Attributes:
        value: Typed value (str, Decimal, date, Address) or None when unset
        confidence: Field confidence 0.0-1.0 (0.0 when unset)
        provenance: Source region and contributing token indices
        validation: Validation status (unchecked until annotated)
        rule: Matching rule that produced the value
    """

    value: Optional[T] = None
    confidence: float = 0.0
    provenance: FieldProvenance = field(default_factory=FieldProvenance)
    validation: ValidationResult = UNCHECKED
    rule: str = "missing"

    def __post_init__(self):
        """Validate confidence range and rule name."""
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"confidence must be between 0.0 and 1.0, got {self.confidence}"
            )

        if self.rule not in FIELD_RULES:
            raise ValueError(f"rule must be one of {FIELD_RULES}, got '{self.rule}'")

        if self.value is None and self.confidence != 0.0:
            raise ValueError("An unset field must have confidence 0.0")

    @classmethod
    def missing(cls) -> ExtractedField:
        return cls()

    @property
    def is_set(self) -> bool:
        return self.value is not None

    def annotate(self, validation: ValidationResult) -> ExtractedField[T]:
        """Return a copy carrying the given validation status."""
        if self.validation.status != "unchecked":
            raise ValueError("ExtractedField has already been annotated")
        return replace(self, validation=validation)
