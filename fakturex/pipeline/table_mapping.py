"""Table header recognition: map grid columns to invoice fields."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..models.layout import NormalizedLayout, NormalizedRegion
from ..models.table_grid import TableCell
from .column_detection import map_columns_from_header
from .patterns import ITEM_COLUMNS

logger = logging.getLogger(__name__)

MAX_HEADER_ROWS = 3


@dataclass
class MappedTable:
    """A table region whose header row(s) were mapped to fields.

    Attributes:
        region: Normalized table region (grid is set)
        columns: Field name -> column index
        first_data_row: Index of the first grid row below the header
    """

    region: NormalizedRegion
    columns: Dict[str, int]
    first_data_row: int

    @property
    def data_rows(self) -> List[int]:
        return list(range(self.first_data_row, len(self.region.grid.rows)))

    def cell_text(self, row_index: int, field: str) -> str:
        cell = self.cell(row_index, field)
        return cell.text if cell is not None else ""

    def cell(self, row_index: int, field: str) -> Optional[TableCell]:
        return self.region.grid.cell(row_index, self.columns.get(field))

    def has(self, *fields: str) -> bool:
        return all(f in self.columns for f in fields)

    @property
    def is_item_table(self) -> bool:
        return self.has("description") and ("net" in self.columns or "gross" in self.columns)

    @property
    def is_summary_table(self) -> bool:
        return (
            self.has("rate", "net")
            and ("vat" in self.columns or "gross" in self.columns)
            and not self.has("description")
            and not self.has("quantity")
        )


def map_table(region: NormalizedRegion) -> Optional[MappedTable]:
    """Find the header row(s) of a table region and map its columns.

    Tries each of the first rows alone and joined with the row below it
    (two-line headers); the mapping covering most fields wins, earlier and
    shorter headers on ties.
    """
    grid = region.grid
    if grid is None or not grid.rows:
        return None

    best: Optional[Tuple[Dict[str, int], int]] = None
    for start in range(min(MAX_HEADER_ROWS, len(grid.rows))):
        for depth in (1, 2):
            end = start + depth
            if end > len(grid.rows):
                continue
            texts = [
                " ".join(
                    filter(None, (grid.rows[r][c].text for r in range(start, end)))
                )
                for c in range(grid.column_count)
            ]
            mapping = map_columns_from_header(texts, ITEM_COLUMNS)
            if mapping and (best is None or len(mapping) > len(best[0])):
                best = (mapping, end)

    if best is None:
        return None

    mapped = MappedTable(region=region, columns=best[0], first_data_row=best[1])
    logger.debug(
        "Table region %d columns: %s (data from row %d)",
        region.index,
        mapped.columns,
        mapped.first_data_row,
    )
    return mapped


def find_tables(layout: NormalizedLayout) -> Tuple[Optional[MappedTable], Optional[MappedTable]]:
    """Return (summary_table, item_table): first of each kind in reading order."""
    summary_table = None
    item_table = None
    for region in layout.regions_of_kind("table"):
        mapped = map_table(region)
        if mapped is None:
            continue
        if summary_table is None and mapped.is_summary_table:
            summary_table = mapped
        elif item_table is None and mapped.is_item_table:
            item_table = mapped
    return summary_table, item_table
