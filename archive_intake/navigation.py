"""
Keyboard-driven selection movement.
"""

from typing import Optional

from .address import Address, decode_cell, encode_cell
from .grid import grid_extent
from .logging_setup import get_logger
from .ranges import Grid, Selection

logger = get_logger(__name__)

NAVIGATION_KEYS = ('ArrowUp', 'ArrowDown', 'ArrowLeft', 'ArrowRight', 'Enter', 'Tab')


def next_address(key: str, current: Address, max_col: int, max_row: int) -> Optional[Address]:
    """
    Address reached by pressing ``key`` at ``current``.

    Returns:
        The new address, or None if the key does not navigate
    """
    col, row = current

    if key == 'ArrowUp':
        row = max(0, row - 1)
    elif key in ('ArrowDown', 'Enter'):
        row = min(max_row, row + 1)
    elif key == 'ArrowLeft':
        col = max(0, col - 1)
    elif key == 'ArrowRight':
        col = min(max_col, col + 1)
    elif key == 'Tab':
        if col >= max_col:
            col = 0
            row = min(max_row, row + 1)
        else:
            col += 1
    else:
        return None

    return Address(col, row)


def navigate(key: str, selection: Optional[Selection], data: Grid,
             extend: bool = False) -> Optional[Selection]:
    """
    Apply a key press to a selection.

    The head moves; with ``extend`` the anchor stays put so the selection
    grows or shrinks, otherwise the selection collapses onto the new cell.

    Args:
        key: Key name ("ArrowUp", "Tab", ...)
        selection: Current (anchor, head) selection
        data: Grid the selection lives in, used for clamping
        extend: Whether the extend-selection modifier is held

    Returns:
        New selection (the same one for non-navigation keys)
    """
    if not selection:
        return None

    anchor, head = selection
    max_col, max_row = grid_extent(data)

    moved = next_address(key, decode_cell(head or anchor), max_col, max_row)
    if moved is None:
        return selection

    address = encode_cell(moved.col, moved.row)
    if extend and head:
        return (anchor, address)
    return (address, address)


class KeyboardNavigator:
    """Holds the current selection and updates it on key presses."""

    def __init__(self, data: Grid, selection: Optional[Selection] = None):
        """
        Initialize the navigator.

        Args:
            data: Grid the selection lives in
            selection: Initial selection
        """
        self.data = data
        self.selection = selection

    def set_data(self, data: Grid) -> None:
        """Replace the grid, e.g. after an edit changed its extent."""
        self.data = data

    def select(self, anchor: str, head: Optional[str] = None) -> Selection:
        self.selection = (anchor, head or anchor)
        return self.selection

    def handle_key(self, key: str, extend: bool = False) -> Optional[Selection]:
        """Apply a key press and return the new selection."""
        self.selection = navigate(key, self.selection, self.data, extend)
        logger.debug(f"Key {key} -> selection {self.selection}")
        return self.selection
