"""LayoutRegion data model representing a classified rectangular area of a page."""

from __future__ import annotations

from dataclasses import dataclass

REGION_KINDS = ("title", "text", "table", "figure", "unknown")


@dataclass(frozen=True)
class Box:
    """Axis-aligned rectangle (top-left corner plus size)."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        """Validate box dimensions are non-negative."""
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Box dimensions must be non-negative: "
                f"width={self.width}, height={self.height}"
            )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains(self, px: float, py: float) -> bool:
        """Return True if the point lies inside the box (edges inclusive)."""
        return self.x <= px <= self.right and self.y <= py <= self.bottom


@dataclass(frozen=True)
class LayoutRegion:
    """Represents a classified region produced by layout analysis.

    The region references tokens by centroid containment; that association
    is computed by the layout normalizer, the region itself only carries
    geometry and classification.

    Attributes:
        box: Bounding box of the region
        kind: One of "title", "text", "table", "figure", "unknown"
        page: Page index (0-based)
    """

    box: Box
    kind: str
    page: int = 0

    def __post_init__(self):
        """Validate region kind and page index."""
        if self.kind not in REGION_KINDS:
            raise ValueError(
                f"kind must be one of {', '.join(REGION_KINDS)}, got '{self.kind}'"
            )

        if self.page < 0:
            raise ValueError(f"page must be >= 0, got {self.page}")
