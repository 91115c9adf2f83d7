"""Token-to-line grouping based on vertical overlap of bounding boxes."""

from typing import List, Sequence

from ..models.line import Line
from ..models.token import TextToken


def vertical_overlap(a: TextToken, b: TextToken) -> float:
    """Length of the shared vertical span of two tokens."""
    return max(0.0, min(a.y_max, b.y_max) - max(a.y_min, b.y_min))


def share_line(a: TextToken, b: TextToken, overlap_ratio: float = 0.5) -> bool:
    """Return True if two tokens sit on the same visual line.

    Tokens share a line when their vertical spans overlap by more than
    overlap_ratio of the shorter token's height. A zero-height token shares
    a line with any token whose span contains its y-position.
    """
    shorter = min(a.height, b.height)
    if shorter <= 0.0:
        thin, other = (a, b) if a.height <= b.height else (b, a)
        return other.y_min <= thin.y_min <= other.y_max
    return vertical_overlap(a, b) > overlap_ratio * shorter


def group_tokens_to_lines(
    tokens: Sequence[TextToken],
    token_indices: Sequence[int],
    region_index: int,
    region_kind: str,
    page: int,
    overlap_ratio: float = 0.5,
) -> List[Line]:
    """Group tokens of one region into lines.

    Args:
        tokens: Tokens assigned to the region
        token_indices: Document index of each token (parallel to tokens)
        region_index: Index of the owning region
        region_kind: Kind of the owning region
        page: Page index of the region
        overlap_ratio: Fraction of the shorter height two tokens must share

    Returns:
        List of Line objects, ordered top-to-bottom

    Algorithm:
    - Sort tokens top-to-bottom (ties left-to-right, then document index)
    - A token joins the first open line holding a token it shares a line with,
      otherwise it opens a new line
    - Tokens inside a line are ordered left-to-right
    - Lines are ordered by their top edge, then left edge
    """
    if len(tokens) != len(token_indices):
        raise ValueError(
            f"token_indices length ({len(token_indices)}) must match "
            f"tokens length ({len(tokens)})"
        )

    if not tokens:
        return []

    order = sorted(
        range(len(tokens)),
        key=lambda i: (tokens[i].y_min, tokens[i].x_min, token_indices[i]),
    )

    groups: List[List[int]] = []
    for i in order:
        token = tokens[i]
        for group in groups:
            if any(share_line(token, tokens[j], overlap_ratio) for j in group):
                group.append(i)
                break
        else:
            groups.append([i])

    lines = [
        _create_line_from_group(group, tokens, token_indices, region_index, region_kind, page)
        for group in groups
    ]
    lines.sort(key=lambda line: (line.y_min, line.x_min, line.token_indices[0]))
    return lines


def _create_line_from_group(
    group: List[int],
    tokens: Sequence[TextToken],
    token_indices: Sequence[int],
    region_index: int,
    region_kind: str,
    page: int,
) -> Line:
    """Create a Line from grouped positions, tokens sorted left-to-right."""
    ordered = sorted(group, key=lambda i: (tokens[i].x_min, token_indices[i]))
    return Line(
        tokens=[tokens[i] for i in ordered],
        token_indices=[token_indices[i] for i in ordered],
        region_index=region_index,
        region_kind=region_kind,
        page=page,
    )
