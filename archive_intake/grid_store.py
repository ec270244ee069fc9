"""
Copy-on-write editing operations on Sheets.

Every operation takes a Sheet and returns a new snapshot (or an EditResult
wrapping one). Only the touched rows are rebuilt; all other rows are shared
with the input sheet. Validated edits (``edit_cell``, ``edit_row``) report
field errors as data; out-of-range row indexes raise ``IndexError``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Union

from .exceptions import FieldError
from .logging_setup import get_logger
from .models import Sheet, freeze_row
from .persistence import PersistenceScheduler
from .validation import validate_cell_value, validate_row_data

logger = get_logger(__name__)


class CellEdit(NamedTuple):
    """A single unvalidated cell assignment for ``batch_edit_cells``."""
    row_index: int
    field_name: str
    value: Any


@dataclass
class EditResult:
    """Outcome of a validated edit."""
    success: bool
    sheet: Sheet
    error: Optional[str] = None
    errors: Dict[str, str] = field(default_factory=dict)


def _as_edit(edit: Union[CellEdit, Mapping[str, Any], tuple]) -> CellEdit:
    if isinstance(edit, CellEdit):
        return edit
    if isinstance(edit, Mapping):
        return CellEdit(edit['row_index'], edit['field_name'], edit.get('value'))
    return CellEdit(*edit)


def _check_row_index(sheet: Sheet, row_index: int) -> None:
    if row_index < 0 or row_index >= len(sheet.rows):
        raise IndexError(f"Invalid row index: {row_index}")


class GridStore:
    """Sheet mutation operations with optional autosave."""

    def __init__(self, scheduler: Optional[PersistenceScheduler] = None):
        """
        Initialize the grid store.

        Args:
            scheduler: Scheduler that receives new snapshots when autosave is on
        """
        self.scheduler = scheduler

    def _autosave(self, sheet: Sheet, auto_save: bool) -> None:
        if auto_save and self.scheduler is not None:
            self.scheduler.schedule(sheet)

    def edit_cell(self, sheet: Sheet, row_index: int, field_name: str, value: Any,
                  auto_save: bool = True) -> EditResult:
        """
        Set one cell after validating and coercing the value.

        Args:
            sheet: Current snapshot
            row_index: Row to edit
            field_name: Title of the field to edit
            value: New raw value
            auto_save: Hand the new snapshot to the scheduler

        Returns:
            EditResult; on validation failure ``sheet`` is the unchanged input

        Raises:
            IndexError: If row_index is out of range
            FieldError: If field_name is not a field of the sheet
        """
        _check_row_index(sheet, row_index)

        sheet_field = sheet.get_field(field_name)
        if sheet_field is None:
            raise FieldError(field_name)

        validation = validate_cell_value(value, sheet_field)
        if not validation.valid:
            logger.debug(f"Rejected value for {field_name} in row {row_index}: {validation.error}")
            return EditResult(success=False, sheet=sheet, error=validation.error)

        rows = list(sheet.rows)
        rows[row_index] = freeze_row({**rows[row_index], field_name: validation.coerced_value})
        updated = sheet.with_rows(rows)

        self._autosave(updated, auto_save)
        return EditResult(success=True, sheet=updated)

    def edit_row(self, sheet: Sheet, row_index: int, row_data: Mapping[str, Any],
                 auto_save: bool = True) -> EditResult:
        """
        Replace a row's values, validating every field of the sheet.

        The update is all-or-nothing. Fields absent from ``row_data`` are
        validated as empty values and written as empty strings.

        Raises:
            IndexError: If row_index is out of range
        """
        _check_row_index(sheet, row_index)

        validation = validate_row_data(row_data, sheet.fields)
        if not validation.valid:
            logger.debug(f"Rejected row {row_index}: {len(validation.errors)} invalid field(s)")
            return EditResult(success=False, sheet=sheet, errors=validation.errors)

        rows = list(sheet.rows)
        rows[row_index] = freeze_row({**rows[row_index], **validation.coerced_data})
        updated = sheet.with_rows(rows)

        self._autosave(updated, auto_save)
        return EditResult(success=True, sheet=updated)

    def add_row(self, sheet: Sheet, row_data: Optional[Mapping[str, Any]] = None,
                insert_index: Optional[int] = None, auto_save: bool = True) -> Sheet:
        """
        Insert a new row; values are not validated.

        Every field defaults to an empty string unless ``row_data`` supplies a
        value. Out-of-range or missing ``insert_index`` appends.
        """
        row_data = row_data or {}
        new_row = freeze_row({
            f.title: row_data[f.title] if row_data.get(f.title) is not None else ''
            for f in sheet.fields
        })

        rows = list(sheet.rows)
        if insert_index is not None and 0 <= insert_index <= len(rows):
            rows.insert(insert_index, new_row)
        else:
            rows.append(new_row)
        updated = sheet.with_rows(rows)

        self._autosave(updated, auto_save)
        return updated

    def delete_row(self, sheet: Sheet, row_index: int, auto_save: bool = True) -> Sheet:
        """
        Remove a row.

        Raises:
            IndexError: If row_index is out of range
        """
        _check_row_index(sheet, row_index)

        rows = list(sheet.rows)
        del rows[row_index]
        updated = sheet.with_rows(rows)

        self._autosave(updated, auto_save)
        return updated

    def move_row(self, sheet: Sheet, from_index: int, to_index: int,
                 auto_save: bool = True) -> Sheet:
        """
        Move a row to a new position.

        Returns the same sheet object when both indexes are equal.

        Raises:
            IndexError: If either index is out of range
        """
        count = len(sheet.rows)
        if not (0 <= from_index < count and 0 <= to_index < count):
            raise IndexError(f"Invalid row indices: from={from_index}, to={to_index}")

        if from_index == to_index:
            return sheet

        rows = list(sheet.rows)
        rows.insert(to_index, rows.pop(from_index))
        updated = sheet.with_rows(rows)

        self._autosave(updated, auto_save)
        return updated

    def batch_edit_cells(self, sheet: Sheet, edits: Iterable[Union[CellEdit, Mapping[str, Any], tuple]],
                         auto_save: bool = True) -> Sheet:
        """
        Apply many cell assignments without validation or coercion.

        Edits naming a missing row or field are skipped with a warning; the
        rest still apply.
        """
        titles = set(sheet.field_titles)
        changed: Dict[int, Dict[str, Any]] = {}

        for raw_edit in edits:
            edit = _as_edit(raw_edit)

            if edit.row_index < 0 or edit.row_index >= len(sheet.rows):
                logger.warning(f"Invalid row index: {edit.row_index}, skipping edit")
                continue
            if edit.field_name not in titles:
                logger.warning(f"Field '{edit.field_name}' not found, skipping edit")
                continue

            row = changed.get(edit.row_index)
            if row is None:
                row = changed[edit.row_index] = dict(sheet.rows[edit.row_index])
            row[edit.field_name] = edit.value

        if not changed:
            updated = sheet.with_rows(sheet.rows)
        else:
            rows: List = list(sheet.rows)
            for index, row in changed.items():
                rows[index] = freeze_row(row)
            updated = sheet.with_rows(rows)

        self._autosave(updated, auto_save)
        return updated
