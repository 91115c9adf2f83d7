"""ParseResult data model: value-or-error outcome of locale parsing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

PARSE_ERRORS = ("EmptyInput", "UnrecognizedFormat", "MalformedDate")


@dataclass(frozen=True)
class ParseResult:
    """Outcome of a locale parser call.

    Exactly one of value/error is set. Parsers never raise for bad text;
    callers branch on ok.

    Attributes:
        value: Parsed value (Decimal or date) when successful
        error: One of EmptyInput/UnrecognizedFormat/MalformedDate on failure
        message: Human-readable failure description
    """

    value: Any = None
    error: Optional[str] = None
    message: str = ""

    def __post_init__(self):
        """Validate error kind."""
        if self.error is not None and self.error not in PARSE_ERRORS:
            raise ValueError(f"error must be one of {PARSE_ERRORS}, got {self.error!r}")

        if self.error is None and self.value is None:
            raise ValueError("ParseResult requires either a value or an error")

    @classmethod
    def success(cls, value: Any) -> ParseResult:
        return cls(value=value)

    @classmethod
    def failure(cls, error: str, message: str = "") -> ParseResult:
        return cls(error=error, message=message)

    @property
    def ok(self) -> bool:
        return self.error is None
