"""
Conversion between Sheets and 2-D grids of cell values.

Grid columns follow the sheet's field order; grid rows follow its rows.
"""

from typing import List, Tuple

from .grid_store import CellEdit
from .models import Sheet
from .ranges import Grid


def sheet_to_grid(sheet: Sheet) -> Grid:
    """Render a sheet as a list of rows in field order."""
    titles = sheet.field_titles
    return [[row.get(title, '') for title in titles] for row in sheet.rows]


def grid_to_edits(sheet: Sheet, data: Grid) -> List[CellEdit]:
    """
    Diff a grid against a sheet.

    Returns one edit per cell whose value differs. Cells beyond the sheet's
    rows or fields are ignored.
    """
    titles = sheet.field_titles
    edits: List[CellEdit] = []

    for r, grid_row in enumerate(data[:len(sheet.rows)]):
        if grid_row is None:
            continue
        row = sheet.rows[r]
        for c, value in enumerate(grid_row[:len(titles)]):
            title = titles[c]
            current = row.get(title, '')
            # 1 == True and 1 == 1.0, but pasting one over the other is still a change
            if (type(current), current) != (type(value), value):
                edits.append(CellEdit(r, title, value))

    return edits


def grid_extent(data: Grid) -> Tuple[int, int]:
    """Return (max_col, max_row) of a grid, both at least 0."""
    max_row = max(0, len(data) - 1)
    max_col = max(0, len(data[0]) - 1) if data and data[0] else 0
    return max_col, max_row
