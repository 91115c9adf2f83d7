"""TableGrid data model representing a table region as rows x columns of cells."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .line import Line
from .token import TextToken


@dataclass
class TableCell:
    """One grid cell: the tokens of one line that fall into one column."""

    tokens: List[TextToken] = field(default_factory=list)
    token_indices: List[int] = field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join(t.text for t in self.tokens)

    @property
    def is_empty(self) -> bool:
        return not self.tokens


@dataclass
class TableGrid:
    """Row x column grid inferred for a table region.

    Attributes:
        column_centers: Column center X-positions, left to right
        boundaries: Column boundaries (len = len(column_centers) + 1)
        rows: One list of cells per line, each of length len(column_centers)
        lines: Source lines, parallel to rows
    """

    column_centers: List[float]
    boundaries: List[float]
    rows: List[List[TableCell]]
    lines: List[Line]

    def __post_init__(self):
        """Validate grid shape."""
        if len(self.boundaries) != len(self.column_centers) + 1:
            raise ValueError(
                f"boundaries must have {len(self.column_centers) + 1} entries, "
                f"got {len(self.boundaries)}"
            )

        for row in self.rows:
            if len(row) != len(self.column_centers):
                raise ValueError(
                    f"Every grid row must have {len(self.column_centers)} cells, "
                    f"got {len(row)}"
                )

    @property
    def column_count(self) -> int:
        return len(self.column_centers)

    def cell(self, row_index: int, column_index: Optional[int]) -> Optional[TableCell]:
        """Return a cell or None when the column is unmapped."""
        if column_index is None:
            return None
        return self.rows[row_index][column_index]
