"""
Rectangular selections over a 2-D grid of cell values.

A selection is an ``(anchor, head)`` pair of address strings. All operations
work on plain lists of rows and never mutate their input: the outer list and
every row they touch are copied, untouched rows are returned by reference.
"""

from typing import Any, List, NamedTuple, Optional, Sequence, Tuple

from .address import Address, decode_cell
from .logging_setup import get_logger

logger = get_logger(__name__)

Selection = Tuple[str, str]
Grid = List[List[Any]]


class Border(NamedTuple):
    """Normalized rectangle of a selection."""
    top_left: Address
    bottom_right: Address

    @property
    def height(self) -> int:
        return self.bottom_right.row - self.top_left.row + 1

    @property
    def width(self) -> int:
        return self.bottom_right.col - self.top_left.col + 1

    def contains(self, col: int, row: int) -> bool:
        return (self.top_left.col <= col <= self.bottom_right.col
                and self.top_left.row <= row <= self.bottom_right.row)


def normalize(a: Address, b: Address) -> Border:
    """Normalize two addresses to (top_left, bottom_right) by component-wise min/max."""
    return Border(
        Address(min(a.col, b.col), min(a.row, b.row)),
        Address(max(a.col, b.col), max(a.row, b.row)),
    )


def get_border(selection: Selection) -> Border:
    """
    Get the normalized rectangle of a selection.

    Args:
        selection: (anchor, head) address strings

    Returns:
        Border with top-left and bottom-right addresses
    """
    start, end = selection
    return normalize(decode_cell(start), decode_cell(end))


def _cell(data: Sequence[Sequence[Any]], row: int, col: int) -> Any:
    if row < len(data) and data[row] is not None and col < len(data[row]):
        return data[row][col]
    return ''


def clear_selection(data: Grid, selection: Optional[Selection]) -> Grid:
    """
    Empty every cell inside the selection.

    Args:
        data: Grid of cell values
        selection: Selection to clear (None leaves data unchanged)

    Returns:
        New grid; rows outside the selection are shared with ``data``
    """
    if not selection:
        return data

    border = get_border(selection)
    new_data = list(data)

    for r in range(border.top_left.row, border.bottom_right.row + 1):
        if r >= len(new_data) or new_data[r] is None:
            continue
        row = list(new_data[r])
        for c in range(border.top_left.col, border.bottom_right.col + 1):
            if c < len(row):
                row[c] = ''
        new_data[r] = row

    return new_data


def copy_selection(data: Grid, selection: Selection) -> Grid:
    """
    Capture the values of a selection as a clipboard block.

    Cells outside the grid read as empty strings.
    """
    border = get_border(selection)
    return [
        [_cell(data, r, c) for c in range(border.top_left.col, border.bottom_right.col + 1)]
        for r in range(border.top_left.row, border.bottom_right.row + 1)
    ]


def paste_selection(data: Grid, clipboard: Optional[Selection], selection: Optional[Selection]) -> Grid:
    """
    Paste the clipboard range into the target selection.

    The clipboard block is tiled over the target: the cell at offset
    ``(dr, dc)`` from the target's top-left takes the clipboard value at
    ``(dr % height, dc % width)``. A smaller target only reads the part of the
    clipboard it needs. Missing source values paste as empty strings.

    Args:
        data: Grid of cell values
        clipboard: Selection captured as the copy source
        selection: Target selection

    Returns:
        New grid with the pasted values
    """
    if not clipboard or not selection:
        return data

    block = copy_selection(data, clipboard)
    return paste_block(data, block, selection)


def paste_block(data: Grid, block: Grid, selection: Selection) -> Grid:
    """Tile an already captured clipboard block over the target selection."""
    if not block or not block[0]:
        return data

    target = get_border(selection)
    block_height = len(block)
    block_width = len(block[0])
    new_data = list(data)

    while len(new_data) <= target.bottom_right.row:
        new_data.append([])

    for dr in range(target.height):
        r = target.top_left.row + dr
        row = list(new_data[r] or [])
        if len(row) <= target.bottom_right.col:
            row.extend([''] * (target.bottom_right.col + 1 - len(row)))

        source_row = block[dr % block_height]
        for dc in range(target.width):
            source_col = dc % block_width
            value = source_row[source_col] if source_col < len(source_row) else None
            row[target.top_left.col + dc] = '' if value is None else value
        new_data[r] = row

    logger.debug(
        f"Pasted {block_height}x{block_width} block into "
        f"{target.height}x{target.width} target at {selection[0]}"
    )
    return new_data


def normalize_spreadsheet_data(data: Grid, min_rows: int = 10, min_cols: int = 10) -> Grid:
    """
    Pad a grid to at least ``min_rows`` rows of at least ``min_cols`` cells.

    Args:
        data: Grid of cell values
        min_rows: Minimum number of rows
        min_cols: Minimum number of cells in every row

    Returns:
        New padded grid
    """
    normalized = [list(row) if row is not None else [] for row in data]

    while len(normalized) < min_rows:
        normalized.append([])

    for row in normalized:
        if len(row) < min_cols:
            row.extend([''] * (min_cols - len(row)))

    return normalized
