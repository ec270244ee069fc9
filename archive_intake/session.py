"""
Editing session over the current sheet.

``SheetSession`` keeps the latest snapshot and routes every edit through a
GridStore, so callers do not have to thread snapshots through by hand.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

from .exceptions import FieldError
from .grid import grid_to_edits, sheet_to_grid
from .grid_store import EditResult, GridStore
from .logging_setup import get_logger
from .models import Sheet
from .persistence import PersistenceScheduler
from .ranges import Grid, Selection, clear_selection, copy_selection, paste_block
from .validation import ValidationResult, validate_cell_value

logger = get_logger(__name__)


class SheetSession:
    """Convenience wrapper holding the current sheet snapshot."""

    def __init__(self, sheet: Sheet, store: Optional[GridStore] = None,
                 scheduler: Optional[PersistenceScheduler] = None):
        """
        Initialize the session.

        Args:
            sheet: Initial snapshot
            store: GridStore used for edits (one is built around scheduler if None)
            scheduler: Scheduler used for autosave and force_save
        """
        self.sheet = sheet
        self.scheduler = scheduler
        self.store = store or GridStore(scheduler=scheduler)
        self.clipboard: Optional[Grid] = None

    @property
    def grid(self) -> Grid:
        return sheet_to_grid(self.sheet)

    def edit_cell(self, row_index: int, field_name: str, value: Any) -> EditResult:
        result = self.store.edit_cell(self.sheet, row_index, field_name, value)
        self.sheet = result.sheet
        return result

    def edit_row(self, row_index: int, row_data: Mapping[str, Any]) -> EditResult:
        result = self.store.edit_row(self.sheet, row_index, row_data)
        self.sheet = result.sheet
        return result

    def add_row(self, row_data: Optional[Mapping[str, Any]] = None,
                insert_index: Optional[int] = None) -> Sheet:
        self.sheet = self.store.add_row(self.sheet, row_data, insert_index)
        return self.sheet

    def delete_row(self, row_index: int) -> Dict[str, Any]:
        """Delete a row, reporting a bad index as data instead of raising."""
        try:
            self.sheet = self.store.delete_row(self.sheet, row_index)
            return {'success': True}
        except IndexError as e:
            return {'success': False, 'error': str(e)}

    def move_row(self, from_index: int, to_index: int) -> Dict[str, Any]:
        """Move a row, reporting bad indexes as data instead of raising."""
        try:
            self.sheet = self.store.move_row(self.sheet, from_index, to_index)
            return {'success': True}
        except IndexError as e:
            return {'success': False, 'error': str(e)}

    def batch_edit(self, edits: Iterable) -> Sheet:
        self.sheet = self.store.batch_edit_cells(self.sheet, edits)
        return self.sheet

    def copy(self, selection: Selection) -> Grid:
        """Capture the selected values as the clipboard."""
        self.clipboard = copy_selection(self.grid, selection)
        return self.clipboard

    def paste(self, selection: Selection) -> Sheet:
        """Tile the clipboard over the selection and apply the changed cells."""
        if not self.clipboard:
            return self.sheet
        data = paste_block(self.grid, self.clipboard, selection)
        return self.batch_edit(grid_to_edits(self.sheet, data))

    def clear(self, selection: Selection) -> Sheet:
        """Empty every cell inside the selection."""
        data = clear_selection(self.grid, selection)
        return self.batch_edit(grid_to_edits(self.sheet, data))

    def validate_value(self, field_name: str, value: Any) -> ValidationResult:
        """Check a value against a field without editing anything."""
        sheet_field = self.sheet.get_field(field_name)
        if sheet_field is None:
            return ValidationResult(False, str(FieldError(field_name)))
        return validate_cell_value(value, sheet_field)

    def force_save(self) -> bool:
        """Write the current snapshot now, superseding any pending autosave."""
        if self.scheduler is None:
            logger.warning("No persistence scheduler attached; nothing saved")
            return False
        return self.scheduler.force_save(self.sheet)
