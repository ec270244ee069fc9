"""
Tests for copy-on-write sheet editing.
"""
import unittest
from unittest.mock import MagicMock

from archive_intake.exceptions import FieldError
from archive_intake.grid_store import CellEdit, GridStore
from archive_intake.models import Field, Sheet


class TestSheetModel(unittest.TestCase):
    """Test cases for Sheet construction."""

    def test_titles_must_be_unique_and_non_empty(self):
        """Test rejected field definitions."""
        with self.assertRaises(ValueError):
            Sheet(fields=(Field("title"), Field("title")))
        with self.assertRaises(ValueError):
            Field("")

    def test_rows_are_read_only(self):
        """Test that snapshot rows cannot be mutated in place."""
        sheet = Sheet(fields=(Field("title"),), rows=({"title": "a"},))
        with self.assertRaises(TypeError):
            sheet.rows[0]["title"] = "b"
        self.assertEqual(sheet.get_value(0, "missing"), "")


class TestGridStore(unittest.TestCase):
    """Test cases for the GridStore class."""

    def setUp(self):
        """Set up a three-row sheet and a store without autosave."""
        self.sheet = Sheet(
            fields=(Field("file"), Field("title"), Field("field_coordinates")),
            rows=(
                {"file": "a.jpg", "title": "Harbour", "field_coordinates": ""},
                {"file": "b.jpg", "title": "Station", "field_coordinates": ""},
                {"file": "c.jpg", "title": "Market", "field_coordinates": ""},
            ),
            images=(("a.jpg", "/img/a.jpg"), ("b.jpg", "/img/b.jpg"), ("c.jpg", "/img/c.jpg")),
        )
        self.store = GridStore()

    def test_edit_cell_coerces_coordinates(self):
        """Test that a coordinate edit stores a number."""
        result = self.store.edit_cell(self.sheet, 0, "field_coordinates", "45.123")

        self.assertTrue(result.success)
        self.assertEqual(result.sheet.get_value(0, "field_coordinates"), 45.123)
        # Input snapshot untouched
        self.assertEqual(self.sheet.get_value(0, "field_coordinates"), "")

    def test_edit_cell_rejects_invalid_value(self):
        """Test that a failed validation leaves the sheet unchanged."""
        before = self.sheet.to_dict()
        result = self.store.edit_cell(self.sheet, 0, "field_coordinates", "not-a-number")

        self.assertFalse(result.success)
        self.assertEqual(result.error, 'Coordinates must be numeric')
        self.assertIs(result.sheet, self.sheet)
        self.assertEqual(self.sheet.to_dict(), before)

    def test_edit_cell_shares_untouched_rows(self):
        """Test row-level structural sharing."""
        result = self.store.edit_cell(self.sheet, 1, "title", "Old station")

        self.assertIs(result.sheet.rows[0], self.sheet.rows[0])
        self.assertIs(result.sheet.rows[2], self.sheet.rows[2])
        self.assertIsNot(result.sheet.rows[1], self.sheet.rows[1])
        self.assertEqual(result.sheet.get_value(1, "title"), "Old station")
        self.assertEqual(result.sheet.images, self.sheet.images)

    def test_edit_cell_errors(self):
        """Test out-of-range rows and unknown fields."""
        with self.assertRaises(IndexError):
            self.store.edit_cell(self.sheet, 3, "title", "x")
        with self.assertRaises(IndexError):
            self.store.edit_cell(self.sheet, -1, "title", "x")
        with self.assertRaises(FieldError) as context:
            self.store.edit_cell(self.sheet, 0, "nope", "x")
        self.assertEqual(str(context.exception), "Field 'nope' not found")

    def test_edit_row_is_atomic(self):
        """Test that one invalid field rejects the whole row."""
        result = self.store.edit_row(self.sheet, 0, {
            "file": "bad|name.jpg",
            "title": "New title",
            "field_coordinates": "somewhere",
        })

        self.assertFalse(result.success)
        self.assertEqual(set(result.errors), {"file", "field_coordinates"})
        self.assertIs(result.sheet, self.sheet)
        self.assertEqual(self.sheet.get_value(0, "title"), "Harbour")

    def test_edit_row_success(self):
        """Test a valid row update."""
        result = self.store.edit_row(self.sheet, 2, {
            "file": "c2.jpg",
            "title": " Fish market ",
            "field_coordinates": "-12.5",
        })

        self.assertTrue(result.success)
        self.assertEqual(dict(result.sheet.rows[2]),
                         {"file": "c2.jpg", "title": "Fish market", "field_coordinates": -12.5})
        self.assertIs(result.sheet.rows[0], self.sheet.rows[0])

    def test_add_row(self):
        """Test appending and inserting rows."""
        appended = self.store.add_row(self.sheet, {"title": "New"})
        self.assertEqual(len(appended.rows), 4)
        self.assertEqual(dict(appended.rows[3]), {"file": "", "title": "New", "field_coordinates": ""})

        inserted = self.store.add_row(self.sheet, insert_index=0)
        self.assertEqual(inserted.get_value(0, "file"), "")
        self.assertEqual(inserted.get_value(1, "file"), "a.jpg")
        self.assertEqual(len(self.sheet.rows), 3)

    def test_delete_row(self):
        """Test deleting a row."""
        updated = self.store.delete_row(self.sheet, 1)
        self.assertEqual([row["file"] for row in updated.rows], ["a.jpg", "c.jpg"])
        with self.assertRaises(IndexError):
            self.store.delete_row(self.sheet, 5)

    def test_move_row(self):
        """Test moving a row and the same-index shortcut."""
        updated = self.store.move_row(self.sheet, 0, 2)
        self.assertEqual([row["file"] for row in updated.rows], ["b.jpg", "c.jpg", "a.jpg"])
        self.assertIs(updated.rows[2], self.sheet.rows[0])

        self.assertIs(self.store.move_row(self.sheet, 2, 2), self.sheet)

        with self.assertRaises(IndexError):
            self.store.move_row(self.sheet, 0, 3)

    def test_batch_edit_skips_bad_edits(self):
        """Test that bad edits are skipped and the rest still apply."""
        updated = self.store.batch_edit_cells(self.sheet, [
            CellEdit(0, "title", "First"),
            {"row_index": 1, "field_name": "missing", "value": "x"},
            (7, "title", "out of range"),
            (2, "title", "Third"),
        ])

        self.assertEqual([row["title"] for row in updated.rows], ["First", "Station", "Third"])
        self.assertIs(updated.rows[1], self.sheet.rows[1])

    def test_batch_edit_does_not_validate(self):
        """Test that batch edits store values as given."""
        updated = self.store.batch_edit_cells(self.sheet, [(0, "field_coordinates", "north")])
        self.assertEqual(updated.get_value(0, "field_coordinates"), "north")

    def test_autosave_schedules_snapshot(self):
        """Test that mutations hand their snapshot to the scheduler."""
        scheduler = MagicMock()
        store = GridStore(scheduler=scheduler)

        result = store.edit_cell(self.sheet, 0, "title", "x")
        scheduler.schedule.assert_called_once_with(result.sheet)

        scheduler.reset_mock()
        store.edit_cell(self.sheet, 0, "title", "y", auto_save=False)
        scheduler.schedule.assert_not_called()

        # Failed validation does not schedule
        store.edit_cell(self.sheet, 0, "field_coordinates", "bad")
        scheduler.schedule.assert_not_called()

    def test_scheduler_is_the_only_collaborator(self):
        """Test that the scheduler can be passed positionally."""
        scheduler = MagicMock()
        store = GridStore(scheduler)

        self.assertIs(store.scheduler, scheduler)
        self.assertFalse(hasattr(store, "config"))
        updated = store.add_row(self.sheet)
        scheduler.schedule.assert_called_once_with(updated)


if __name__ == '__main__':
    unittest.main()
