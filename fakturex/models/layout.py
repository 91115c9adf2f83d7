"""Normalized layout data model: regions with their lines and table grids."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .layout_region import LayoutRegion
from .line import Line
from .table_grid import TableGrid


@dataclass
class NormalizedRegion:
    """A layout region after token assignment, line building and grid inference.

    Attributes:
        index: Region index (input regions first, synthetic regions after)
        region: Source LayoutRegion (synthetic for tokens outside any region)
        token_indices: Indices of tokens whose centroid falls in this region
        lines: Lines ordered top-to-bottom
        grid: Row/column grid (table regions only)
        synthetic: True for the page-covering "unknown" region
    """

    index: int
    region: LayoutRegion
    token_indices: List[int] = field(default_factory=list)
    lines: List[Line] = field(default_factory=list)
    grid: Optional[TableGrid] = None
    synthetic: bool = False

    @property
    def kind(self) -> str:
        return self.region.kind

    @property
    def page(self) -> int:
        return self.region.page


@dataclass
class NormalizedLayout:
    """All normalized regions of one document plus page extents.

    Attributes:
        regions: Regions ordered by page, then top-to-bottom, then left-to-right
        page_heights: Lowest token/region bottom edge seen per page
    """

    regions: List[NormalizedRegion]
    page_heights: Dict[int, float] = field(default_factory=dict)

    @property
    def first_page(self) -> Optional[int]:
        pages = [r.page for r in self.regions if r.lines]
        return min(pages) if pages else None

    def regions_of_kind(self, *kinds: str) -> List[NormalizedRegion]:
        return [r for r in self.regions if r.kind in kinds]

    def lines(self, *kinds: str) -> List[Line]:
        """All lines in reading order, optionally restricted to region kinds."""
        result: List[Line] = []
        for region in self.regions:
            if kinds and region.kind not in kinds:
                continue
            result.extend(region.lines)
        return result

    def region(self, index: int) -> NormalizedRegion:
        for region in self.regions:
            if region.index == index:
                return region
        raise KeyError(f"No region with index {index}")
