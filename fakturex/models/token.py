"""TextToken data model representing a recognized text fragment with spatial information."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

Point = Tuple[float, float]


@dataclass(frozen=True)
class TextToken:
    """Represents a recognized text fragment with its bounding polygon.

    Coordinate system:
    - Origin (0, 0) is top-left corner
    - X increases rightward
    - Y increases downward

    Tokens are immutable once produced by the recognition collaborator and
    are owned by the Document for its lifetime.

    Attributes:
        text: The text content
        polygon: Four (x, y) corner points, clockwise from top-left
        confidence: Recognition confidence 0.0-1.0
        page: Page index (0-based)
    """

    text: str
    polygon: Tuple[Point, Point, Point, Point]
    confidence: float
    page: int = 0

    def __post_init__(self):
        """Validate polygon shape, confidence range and page index."""
        if len(self.polygon) != 4:
            raise ValueError(
                f"Token polygon must have exactly 4 points, got {len(self.polygon)}"
            )

        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"confidence must be between 0.0 and 1.0, got {self.confidence}"
            )

        if self.page < 0:
            raise ValueError(f"page must be >= 0, got {self.page}")

    @classmethod
    def from_box(
        cls,
        text: str,
        x: float,
        y: float,
        width: float,
        height: float,
        confidence: float = 1.0,
        page: int = 0
    ) -> TextToken:
        """Create an axis-aligned token from a top-left corner and size.

        Text-layer PDF extraction yields rectangles rather than polygons;
        this builds the equivalent 4-point polygon.
        """
        if width < 0 or height < 0:
            raise ValueError(
                f"Token dimensions must be non-negative: "
                f"width={width}, height={height}"
            )
        polygon = (
            (x, y),
            (x + width, y),
            (x + width, y + height),
            (x, y + height),
        )
        return cls(text=text, polygon=polygon, confidence=confidence, page=page)

    @property
    def x_min(self) -> float:
        return min(p[0] for p in self.polygon)

    @property
    def x_max(self) -> float:
        return max(p[0] for p in self.polygon)

    @property
    def y_min(self) -> float:
        return min(p[1] for p in self.polygon)

    @property
    def y_max(self) -> float:
        return max(p[1] for p in self.polygon)

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def centroid(self) -> Point:
        """Mean of the four polygon corners."""
        xs = [p[0] for p in self.polygon]
        ys = [p[1] for p in self.polygon]
        return (sum(xs) / 4.0, sum(ys) / 4.0)
