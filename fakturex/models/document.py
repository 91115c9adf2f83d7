"""Document data model: recognition output for one invoice document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from .invoice_record import SOURCE_TYPES
from .layout_region import LayoutRegion
from .token import TextToken


@dataclass(frozen=True)
class Document:
    """Represents one document as produced by the recognition collaborator.

    The document owns its tokens; regions reference tokens by geometry.

    Attributes:
        document_id: Caller-supplied identifier (e.g. a file path)
        tokens: Recognized text tokens, in recognition order
        regions: Layout regions, in recognition order
        source_type: "text_pdf" or "scanned_image"
        metadata: Optional additional metadata from the collaborator
    """

    document_id: str
    tokens: Tuple[TextToken, ...] = ()
    regions: Tuple[LayoutRegion, ...] = ()
    source_type: str = "scanned_image"
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        """Validate source type."""
        if self.source_type not in SOURCE_TYPES:
            raise ValueError(
                f"source_type must be 'text_pdf' or 'scanned_image', got '{self.source_type}'"
            )

    @property
    def page_count(self) -> int:
        pages = {t.page for t in self.tokens} | {r.page for r in self.regions}
        return max(pages) + 1 if pages else 0
