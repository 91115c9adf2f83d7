"""Line data model representing tokens sharing a horizontal band within one region."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from .token import TextToken


@dataclass
class Line:
    """Represents an ordered sequence of tokens on one visual line.

    Important: tokens is the source of truth for provenance.
    text is CONVENIENCE only - it is the tokens joined with single spaces,
    and token_spans maps each token to its character range in text.

    Lines are transient: rebuilt on every run, never persisted.

    Attributes:
        tokens: Tokens in left-to-right order
        token_indices: Index of each token in the document token list
        region_index: Index of the owning region in the normalized layout
        region_kind: Kind of the owning region
        page: Page index (0-based)
        text: Concatenated token text (CONVENIENCE only)
        token_spans: (start, end) character range of each token in text
    """

    tokens: List[TextToken]
    token_indices: List[int]
    region_index: int
    region_kind: str
    page: int
    text: str = ""
    token_spans: List[Tuple[int, int]] = field(default_factory=list)

    def __post_init__(self):
        """Validate that line has tokens and build text/spans."""
        if not self.tokens:
            raise ValueError("Line must have at least one token")

        if len(self.tokens) != len(self.token_indices):
            raise ValueError(
                f"Line token_indices length ({len(self.token_indices)}) must match "
                f"tokens length ({len(self.tokens)})"
            )

        if not self.text:
            spans = []
            cursor = 0
            for token in self.tokens:
                spans.append((cursor, cursor + len(token.text)))
                cursor += len(token.text) + 1
            self.text = " ".join(t.text for t in self.tokens)
            self.token_spans = spans

    @property
    def y_min(self) -> float:
        return min(t.y_min for t in self.tokens)

    @property
    def y_max(self) -> float:
        return max(t.y_max for t in self.tokens)

    @property
    def x_min(self) -> float:
        return min(t.x_min for t in self.tokens)

    @property
    def x_max(self) -> float:
        return max(t.x_max for t in self.tokens)

    def positions_in_span(self, start: int, end: int) -> List[int]:
        """Return positions (within this line) of tokens overlapping text[start:end]."""
        return [
            pos for pos, (s, e) in enumerate(self.token_spans)
            if s < end and e > start
        ]

    def subset(self, positions: List[int]) -> Line:
        """Build a new Line from a subset of this line's token positions."""
        positions = sorted(positions)
        return Line(
            tokens=[self.tokens[p] for p in positions],
            token_indices=[self.token_indices[p] for p in positions],
            region_index=self.region_index,
            region_kind=self.region_kind,
            page=self.page,
        )
