"""
Column detection for table regions.

Columns are inferred from the left edges of cell phrases across all lines of
a table region:
- Tokens of one line separated by less than a word gap form one phrase
  (multi-word descriptions and space-grouped amounts stay in one cell)
- Phrase left edges are split at gaps of at least min_gap, then refined with
  1-D k-means (deterministic: seeded from the gap split, fixed iteration cap)
- Each phrase lands in the column whose center is nearest its left edge

Header mapping is score-based over diacritic-insensitive header text.
"""

from __future__ import annotations

import logging
import statistics
import unicodedata
from typing import Dict, List, Optional, Sequence, Tuple

from ..models.line import Line
from ..models.table_grid import TableCell, TableGrid

logger = logging.getLogger(__name__)


# ----------------------------
# Helpers
# ----------------------------

def _norm_text(s: str) -> str:
    """Lowercase + strip diacritics + collapse whitespace."""
    if not s:
        return ""
    s = s.strip().lower().replace("ł", "l")
    s = unicodedata.normalize("NFKD", s)
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    s = " ".join(s.split())
    return s


def split_into_phrases(line: Line, word_gap: float) -> List[List[int]]:
    """Split a line into phrases: runs of tokens closer than word_gap.

    Returns:
        Lists of token positions within the line, left to right
    """
    phrases: List[List[int]] = []
    for pos, token in enumerate(line.tokens):
        if phrases:
            previous = line.tokens[phrases[-1][-1]]
            if token.x_min - previous.x_max < word_gap:
                phrases[-1].append(pos)
                continue
        phrases.append([pos])
    return phrases


def _nearest(centers: Sequence[float], x: float) -> int:
    return min(range(len(centers)), key=lambda i: (abs(centers[i] - x), i))


def _build_boundaries(centers: List[float], left: float, right: float) -> List[float]:
    """
    Convert centers to boundaries:
      b0 = left
      bi = midpoint(centers[i-1], centers[i])
      bN = right
    """
    b: List[float] = [float(left)]
    for i in range(1, len(centers)):
        b.append((centers[i - 1] + centers[i]) / 2.0)
    b.append(max(float(left), float(right)))

    # ensure monotonic (guard against weird centers)
    for i in range(1, len(b)):
        if b[i] <= b[i - 1]:
            b[i] = b[i - 1] + 0.01
    return b


# ----------------------------
# Column Detection
# ----------------------------

def cluster_left_edges(
    edges: Sequence[float],
    min_gap: float = 15.0,
    max_iterations: int = 20,
) -> List[float]:
    """Cluster x-coordinates into column centers.

    Args:
        edges: Left edges of all phrases in the table
        min_gap: Minimum distance between two column centers
        max_iterations: k-means iteration cap

    Returns:
        Column center X-positions (sorted left to right)
    """
    if not edges:
        return []

    values = sorted(float(e) for e in edges)

    # Seed clusters at large gaps
    clusters: List[List[float]] = [[values[0]]]
    for previous, current in zip(values, values[1:]):
        if current - previous >= min_gap:
            clusters.append([current])
        else:
            clusters[-1].append(current)
    centers = [statistics.mean(c) for c in clusters]

    # k-means refinement
    for iteration in range(max_iterations):
        assigned: List[List[float]] = [[] for _ in centers]
        for value in values:
            assigned[_nearest(centers, value)].append(value)
        new_centers = [statistics.mean(group) for group in assigned if group]
        if new_centers == centers:
            break
        centers = new_centers
    else:
        logger.debug("Column k-means hit iteration cap (%d)", max_iterations)

    # Merge centers that drifted closer than min_gap
    merged: List[float] = []
    for center in sorted(centers):
        if merged and center - merged[-1] < min_gap:
            merged[-1] = (merged[-1] + center) / 2.0
        else:
            merged.append(center)
    return merged


def build_table_grid(
    lines: List[Line],
    min_gap: float = 15.0,
    max_iterations: int = 20,
    word_gap: float = 5.0,
) -> Optional[TableGrid]:
    """Infer a row x column grid for the lines of a table region.

    Returns:
        TableGrid with one row per line, or None if there are no lines
    """
    if not lines:
        return None

    line_phrases = [split_into_phrases(line, word_gap) for line in lines]
    edges = [
        line.tokens[phrase[0]].x_min
        for line, phrases in zip(lines, line_phrases)
        for phrase in phrases
    ]
    centers = cluster_left_edges(edges, min_gap=min_gap, max_iterations=max_iterations)

    left = min(line.x_min for line in lines)
    right = max(line.x_max for line in lines)
    boundaries = _build_boundaries(centers, left, right)

    rows: List[List[TableCell]] = []
    for line, phrases in zip(lines, line_phrases):
        cells = [TableCell() for _ in centers]
        for phrase in phrases:
            column = _nearest(centers, line.tokens[phrase[0]].x_min)
            for pos in phrase:
                cells[column].tokens.append(line.tokens[pos])
                cells[column].token_indices.append(line.token_indices[pos])
        rows.append(cells)

    logger.debug(
        "Table grid: %d rows x %d columns (centers=%s)",
        len(rows),
        len(centers),
        [round(c, 1) for c in centers],
    )
    return TableGrid(column_centers=centers, boundaries=boundaries, rows=rows, lines=list(lines))


# ----------------------------
# Header Mapping
# ----------------------------

def map_columns_from_header(
    header_cells: Sequence[str],
    field_keywords: Dict[str, List[str]],
) -> Optional[Dict[str, int]]:
    """
    Map columns to fields using header cell keywords (score-based).

    - Diacritic-insensitive matching
    - Multi-word header phrases
    - Longer keyword matches score higher; conflicts resolved by best score,
      one field per column

    Returns:
        Dict[field_name] = column_index
        None if no column header matches
    """
    col_text = {i: _norm_text(text) for i, text in enumerate(header_cells) if text}
    if not col_text:
        return None

    def score_field_in_text(field: str, text: str) -> float:
        s = 0.0
        padded = f" {text} "
        for kw in field_keywords[field]:
            nkw = _norm_text(kw)
            if not nkw:
                continue
            if nkw == text:
                s += 3.0 + min(len(nkw) / 10.0, 2.0)
            elif f" {nkw} " in padded or (len(nkw) > 3 and nkw in text):
                # longer keyword => higher confidence
                s += 1.0 + min(len(nkw) / 10.0, 2.0)
        return s

    candidates: List[Tuple[float, str, int]] = []
    for field in field_keywords:
        for col_idx, txt in col_text.items():
            sc = score_field_in_text(field, txt)
            if sc > 0.0:
                candidates.append((sc, field, col_idx))

    if not candidates:
        return None

    # strongest claims win; ties broken by field declaration order, then column
    field_order = {field: i for i, field in enumerate(field_keywords)}
    candidates.sort(key=lambda c: (-c[0], field_order[c[1]], c[2]))

    mapping: Dict[str, int] = {}
    used_cols = set()
    for sc, field, col in candidates:
        if field in mapping or col in used_cols:
            continue
        mapping[field] = col
        used_cols.add(col)

    return mapping or None
