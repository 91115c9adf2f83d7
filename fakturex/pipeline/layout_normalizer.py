"""Layout normalization: tokens -> regions -> lines (and grids for tables)."""

import logging
from typing import Dict, List, Optional

from ..config.profile_loader import ExtractionProfile
from ..config.profile_manager import get_profile
from ..models.document import Document
from ..models.layout import NormalizedLayout, NormalizedRegion
from .column_detection import build_table_grid
from .line_grouping import group_tokens_to_lines
from .region_assignment import assign_tokens_to_regions, page_extent, synthetic_page_region

logger = logging.getLogger(__name__)


def normalize_layout(
    document: Document,
    profile: Optional[ExtractionProfile] = None,
) -> NormalizedLayout:
    """Merge document tokens into ordered lines per region.

    Args:
        document: Document with tokens and layout regions
        profile: Extraction profile (active profile if None)

    Returns:
        NormalizedLayout with regions ordered by page, top edge, left edge

    Algorithm:
    1. Assign each token to the smallest region containing its centroid;
       tokens outside every region go to a synthetic "unknown" region
       covering their page (indexed after the input regions)
    2. Group each region's tokens into lines by vertical overlap
    3. Infer a column grid for every "table" region

    Deterministic: the same document always yields the same layout.
    """
    profile = profile or get_profile()
    layout_settings = profile.layout
    tokens = document.tokens
    regions = list(document.regions)

    assigned, orphans = assign_tokens_to_regions(tokens, regions)

    normalized: List[NormalizedRegion] = [
        NormalizedRegion(index=i, region=region, token_indices=assigned[i])
        for i, region in enumerate(regions)
    ]
    for page in sorted(orphans):
        normalized.append(
            NormalizedRegion(
                index=len(normalized),
                region=synthetic_page_region(page, tokens, regions),
                token_indices=orphans[page],
                synthetic=True,
            )
        )

    for region in normalized:
        region.lines = group_tokens_to_lines(
            [tokens[i] for i in region.token_indices],
            region.token_indices,
            region_index=region.index,
            region_kind=region.kind,
            page=region.page,
            overlap_ratio=float(layout_settings["line_overlap_ratio"]),
        )
        if region.kind == "table":
            region.grid = build_table_grid(
                region.lines,
                min_gap=float(layout_settings["min_column_gap"]),
                max_iterations=int(layout_settings["kmeans_max_iterations"]),
                word_gap=float(layout_settings["word_gap"]),
            )

    normalized.sort(
        key=lambda r: (r.page, r.region.box.y, r.region.box.x, r.index)
    )

    pages = sorted({t.page for t in tokens} | {r.page for r in regions})
    page_heights: Dict[int, float] = {
        page: page_extent(page, tokens, regions)[1] for page in pages
    }

    logger.debug(
        "Normalized %s: %d tokens, %d regions (%d synthetic), %d lines",
        document.document_id,
        len(tokens),
        len(normalized),
        sum(1 for r in normalized if r.synthetic),
        sum(len(r.lines) for r in normalized),
    )
    return NormalizedLayout(regions=normalized, page_heights=page_heights)
