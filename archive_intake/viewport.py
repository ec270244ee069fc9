"""
Virtual-scroll windowing.

Given a scroll position and the sizes of the items in a long list, work out
which slice of the list has to be rendered.
"""

from typing import Any, Mapping, NamedTuple, Optional, Sequence

DEFAULT_ITEM_SIZE = 24
DEFAULT_COLUMN_WIDTH = 100


class VisibleRange(NamedTuple):
    """Slice ``[start, end)`` to render and the position of item ``start``."""
    start: int
    end: int
    offset: int


def visible_range(scroll_offset: float, viewport_size: float,
                  item_sizes: Sequence[Optional[float]], buffer: int = 5,
                  default_size: int = DEFAULT_ITEM_SIZE) -> VisibleRange:
    """
    Compute the window of items to render.

    The first visible item is the first one whose bottom edge lies past
    ``scroll_offset``; ``start`` backs off from it by ``buffer`` items.
    Items are then taken from ``start`` until they cover
    ``viewport_size + buffer * default_size``, and ``end`` extends that by
    another ``buffer`` items. Unsized items (None or 0) count as
    ``default_size``. Scrolling past the last item keeps the tail in view.

    Args:
        scroll_offset: Scroll position
        viewport_size: Visible extent of the viewport
        item_sizes: Size of each item
        buffer: Number of extra items rendered on each side
        default_size: Size used for unsized items

    Returns:
        VisibleRange with ``0 <= start <= end <= len(item_sizes)``
    """
    sizes = [size or default_size for size in item_sizes]
    count = len(sizes)

    first_visible = count
    cumulative = 0
    for index, size in enumerate(sizes):
        if cumulative + size > scroll_offset:
            first_visible = index
            break
        cumulative += size

    start = max(0, first_visible - buffer)
    offset = sum(sizes[:start])

    end = start
    remaining = viewport_size + buffer * default_size
    while end < count and remaining > 0:
        remaining -= sizes[end]
        end += 1

    return VisibleRange(start, min(end + buffer, count), offset)


def _parse_size(value: Any) -> float:
    if isinstance(value, str):
        value = value.strip()
        if value.endswith('px'):
            value = value[:-2]
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def get_row_height(row_index: int, rows: Sequence[Optional[Mapping[str, Any]]],
                   default_height: int = DEFAULT_ITEM_SIZE) -> float:
    """Height of a row from its ``height`` setting ("30px" or 30), never below the default."""
    if row_index < 0 or row_index >= len(rows) or not rows[row_index]:
        return default_height
    height = _parse_size(rows[row_index].get('height')) or default_height
    return max(height, default_height)


def get_column_width(column_index: int, columns: Sequence[Optional[Mapping[str, Any]]],
                     default_width: int = DEFAULT_COLUMN_WIDTH) -> float:
    """Width of a column from its ``width`` setting ("120px" or 120)."""
    if column_index < 0 or column_index >= len(columns) or not columns[column_index]:
        return default_width
    return _parse_size(columns[column_index].get('width')) or default_width
