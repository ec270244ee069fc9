"""
Tests for selection ranges: normalize, clear, copy and tiled paste.
"""
import unittest

from archive_intake.address import Address
from archive_intake.ranges import (clear_selection, copy_selection, get_border,
                                   normalize_spreadsheet_data, paste_selection)


class TestRanges(unittest.TestCase):
    """Test cases for the range model."""

    def setUp(self):
        """Set up a 4x4 grid."""
        self.data = [
            ["a1", "b1", "c1", "d1"],
            ["a2", "b2", "c2", "d2"],
            ["a3", "b3", "c3", "d3"],
            ["a4", "b4", "c4", "d4"],
        ]

    def test_get_border_normalizes(self):
        """Test that reversed selections normalize to top-left/bottom-right."""
        border = get_border(("C3", "A1"))
        self.assertEqual(border.top_left, Address(0, 0))
        self.assertEqual(border.bottom_right, Address(2, 2))

        border = get_border(("A3", "C1"))
        self.assertEqual(border.top_left, Address(0, 0))
        self.assertEqual(border.bottom_right, Address(2, 2))
        self.assertEqual((border.height, border.width), (3, 3))

    def test_single_cell_border(self):
        """Test a degenerate selection."""
        border = get_border(("B2", "B2"))
        self.assertEqual(border.top_left, border.bottom_right)
        self.assertTrue(border.contains(1, 1))
        self.assertFalse(border.contains(0, 1))

    def test_clear_selection(self):
        """Test clearing a rectangle and sharing untouched rows."""
        result = clear_selection(self.data, ("B2", "C3"))

        self.assertEqual(result[1], ["a2", "", "", "d2"])
        self.assertEqual(result[2], ["a3", "", "", "d3"])
        self.assertIs(result[0], self.data[0])
        self.assertIs(result[3], self.data[3])
        # Input untouched
        self.assertEqual(self.data[1], ["a2", "b2", "c2", "d2"])

    def test_clear_without_selection(self):
        """Test that a missing selection returns the data unchanged."""
        self.assertIs(clear_selection(self.data, None), self.data)

    def test_copy_selection(self):
        """Test capturing a clipboard block, with empty cells outside the grid."""
        self.assertEqual(copy_selection(self.data, ("C1", "B2")), [["b1", "c1"], ["b2", "c2"]])
        self.assertEqual(copy_selection(self.data, ("D4", "E5")), [["d4", ""], ["", ""]])

    def test_paste_single_cell_tiles(self):
        """Test that a 1x1 clipboard fills a 2x2 target."""
        data = [["X", ""], ["", ""]]
        result = paste_selection(data, ("A1", "A1"), ("A1", "B2"))
        self.assertEqual(result, [["X", "X"], ["X", "X"]])

    def test_paste_truncates_larger_clipboard(self):
        """Test that a 1x4 clipboard pasted into a 1x2 target uses the first two values."""
        data = [["1", "2", "3", "4"], ["", "", "", ""]]
        result = paste_selection(data, ("A1", "D1"), ("A2", "B2"))
        self.assertEqual(result[1], ["1", "2", "", ""])
        self.assertIs(result[0], data[0])

    def test_paste_repeats_pattern(self):
        """Test tiling of a 1x2 pattern over a 2x4 target."""
        data = [["x", "y", "", ""], ["", "", "", ""]]
        result = paste_selection(data, ("A1", "B1"), ("A1", "D2"))
        self.assertEqual(result, [["x", "y", "x", "y"], ["x", "y", "x", "y"]])

    def test_paste_extends_grid(self):
        """Test that pasting beyond the grid creates rows and cells."""
        data = [["v"]]
        result = paste_selection(data, ("A1", "A1"), ("B2", "B3"))
        self.assertEqual(result, [["v"], ["", "v"], ["", "v"]])

    def test_paste_without_clipboard(self):
        """Test that a missing clipboard or target returns the data unchanged."""
        self.assertIs(paste_selection(self.data, None, ("A1", "A1")), self.data)
        self.assertIs(paste_selection(self.data, ("A1", "A1"), None), self.data)

    def test_normalize_spreadsheet_data(self):
        """Test padding a grid to minimum dimensions."""
        result = normalize_spreadsheet_data([["a"], None], min_rows=3, min_cols=2)
        self.assertEqual(result, [["a", ""], ["", ""], ["", ""]])


if __name__ == '__main__':
    unittest.main()
