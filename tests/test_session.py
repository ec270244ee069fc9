"""
Tests for the editing session and grid conversion.
"""
import unittest
from unittest.mock import MagicMock

from archive_intake.grid import grid_extent, grid_to_edits, sheet_to_grid
from archive_intake.grid_store import CellEdit
from archive_intake.models import Field, Sheet
from archive_intake.session import SheetSession


class TestGridConversion(unittest.TestCase):
    """Test cases for sheet/grid conversion."""

    def setUp(self):
        """Set up a two-row sheet."""
        self.sheet = Sheet(
            fields=(Field("file"), Field("title")),
            rows=({"file": "a.jpg", "title": "A"}, {"file": "b.jpg"}),
        )

    def test_sheet_to_grid(self):
        """Test field-ordered rows with missing keys as empty."""
        self.assertEqual(sheet_to_grid(self.sheet), [["a.jpg", "A"], ["b.jpg", ""]])

    def test_grid_to_edits(self):
        """Test that only changed cells inside the sheet become edits."""
        edits = grid_to_edits(self.sheet, [["a.jpg", "AA", "extra"], ["b.jpg", ""], ["c.jpg", "C"]])
        self.assertEqual(edits, [CellEdit(0, "title", "AA")])

    def test_grid_to_edits_compares_types(self):
        """Test that equal-comparing values of different types still become edits."""
        sheet = Sheet(fields=(Field("count"), Field("flag")), rows=({"count": 1, "flag": 0},))

        edits = grid_to_edits(sheet, [[True, 0.0]])
        self.assertEqual(edits, [CellEdit(0, "count", True), CellEdit(0, "flag", 0.0)])
        self.assertIs(edits[0].value, True)

        self.assertEqual(grid_to_edits(sheet, [[1, 0]]), [])

    def test_grid_extent(self):
        """Test the maximum indexes of a grid."""
        self.assertEqual(grid_extent([["", "", ""], ["", "", ""]]), (2, 1))
        self.assertEqual(grid_extent([]), (0, 0))


class TestSheetSession(unittest.TestCase):
    """Test cases for the SheetSession class."""

    def setUp(self):
        """Set up a session with a mocked scheduler."""
        self.sheet = Sheet(
            fields=(Field("file"), Field("title"), Field("field_subject")),
            rows=(
                {"file": "a.jpg", "title": "Harbour", "field_subject": "Ships"},
                {"file": "b.jpg", "title": "Station", "field_subject": ""},
                {"file": "c.jpg", "title": "Market", "field_subject": ""},
            ),
        )
        self.scheduler = MagicMock()
        self.session = SheetSession(self.sheet, scheduler=self.scheduler)

    def test_edit_keeps_latest_snapshot(self):
        """Test that successful edits replace the session snapshot."""
        result = self.session.edit_cell(0, "title", "Old harbour")
        self.assertTrue(result.success)
        self.assertIs(self.session.sheet, result.sheet)
        self.scheduler.schedule.assert_called_with(result.sheet)

        result = self.session.edit_cell(0, "file", "bad/name")
        self.assertFalse(result.success)
        self.assertEqual(self.session.sheet.get_value(0, "file"), "a.jpg")

    def test_copy_paste_tiles_values(self):
        """Test pasting one copied cell over a column range."""
        self.session.copy(("C1", "C1"))
        self.session.paste(("C2", "C3"))

        self.assertEqual([row["field_subject"] for row in self.session.sheet.rows],
                         ["Ships", "Ships", "Ships"])
        self.assertIs(self.session.sheet.rows[0], self.sheet.rows[0])

    def test_paste_without_clipboard(self):
        """Test that pasting with an empty clipboard changes nothing."""
        self.assertIs(self.session.paste(("A1", "A1")), self.sheet)

    def test_paste_ignores_cells_outside_sheet(self):
        """Test that a paste running past the last field or row is cut off."""
        self.session.copy(("B1", "C1"))
        self.session.paste(("C3", "D4"))
        self.assertEqual(self.session.sheet.get_value(2, "field_subject"), "Harbour")
        self.assertEqual(len(self.session.sheet.rows), 3)

    def test_clear(self):
        """Test clearing a rectangle."""
        self.session.clear(("B1", "C2"))
        self.assertEqual(sheet_to_grid(self.session.sheet), [
            ["a.jpg", "", ""],
            ["b.jpg", "", ""],
            ["c.jpg", "Market", ""],
        ])

    def test_row_operations_report_errors(self):
        """Test that bad row indexes are reported instead of raised."""
        self.assertEqual(self.session.delete_row(9)['success'], False)
        self.assertEqual(self.session.move_row(0, 9)['success'], False)

        self.assertTrue(self.session.move_row(0, 2)['success'])
        self.assertEqual(self.session.sheet.get_value(2, "file"), "a.jpg")

        self.assertTrue(self.session.delete_row(0)['success'])
        self.session.add_row({"file": "d.jpg"})
        self.assertEqual([row["file"] for row in self.session.sheet.rows], ["c.jpg", "a.jpg", "d.jpg"])

    def test_validate_value(self):
        """Test checking a value without editing."""
        self.assertFalse(self.session.validate_value("file", "a?b").valid)
        result = self.session.validate_value("missing", "x")
        self.assertFalse(result.valid)
        self.assertEqual(result.error, "Field 'missing' not found")
        self.assertIs(self.session.sheet, self.sheet)

    def test_force_save(self):
        """Test forced saves through the scheduler."""
        self.scheduler.force_save.return_value = True
        self.assertTrue(self.session.force_save())
        self.scheduler.force_save.assert_called_once_with(self.session.sheet)

        self.assertFalse(SheetSession(self.sheet).force_save())


if __name__ == '__main__':
    unittest.main()
