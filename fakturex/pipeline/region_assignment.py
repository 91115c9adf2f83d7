"""Token-to-region assignment by centroid containment."""

import logging
from typing import Dict, List, Sequence, Tuple

from ..models.layout_region import Box, LayoutRegion
from ..models.token import TextToken

logger = logging.getLogger(__name__)


def assign_tokens_to_regions(
    tokens: Sequence[TextToken],
    regions: Sequence[LayoutRegion],
) -> Tuple[Dict[int, List[int]], Dict[int, List[int]]]:
    """Assign every token to the smallest region containing its centroid.

    Args:
        tokens: Document tokens
        regions: Document layout regions

    Returns:
        (assigned, orphans): assigned maps region index -> token indices
        (every region present, possibly empty); orphans maps page index ->
        indices of tokens outside every region of that page

    Ties in area resolve to the lower region index.
    """
    assigned: Dict[int, List[int]] = {i: [] for i in range(len(regions))}
    orphans: Dict[int, List[int]] = {}

    for token_index, token in enumerate(tokens):
        cx, cy = token.centroid
        best = None
        for region_index, region in enumerate(regions):
            if region.page != token.page or not region.box.contains(cx, cy):
                continue
            if best is None or region.box.area < regions[best].box.area:
                best = region_index
        if best is None:
            orphans.setdefault(token.page, []).append(token_index)
        else:
            assigned[best].append(token_index)

    if orphans:
        logger.debug(
            "%d tokens outside any region on pages %s",
            sum(len(v) for v in orphans.values()),
            sorted(orphans),
        )
    return assigned, orphans


def page_extent(
    page: int,
    tokens: Sequence[TextToken],
    regions: Sequence[LayoutRegion],
) -> Tuple[float, float]:
    """Rightmost and lowest coordinate seen on a page (tokens and regions)."""
    right = 0.0
    bottom = 0.0
    for token in tokens:
        if token.page == page:
            right = max(right, token.x_max)
            bottom = max(bottom, token.y_max)
    for region in regions:
        if region.page == page:
            right = max(right, region.box.right)
            bottom = max(bottom, region.box.bottom)
    return right, bottom


def synthetic_page_region(
    page: int,
    tokens: Sequence[TextToken],
    regions: Sequence[LayoutRegion],
) -> LayoutRegion:
    """Build the "unknown" region covering the whole page."""
    right, bottom = page_extent(page, tokens, regions)
    return LayoutRegion(box=Box(0.0, 0.0, right, bottom), kind="unknown", page=page)
