"""
Exceptions raised by the grid engine.
"""


class FieldError(KeyError):
    """Raised when an edit names a field the sheet does not define."""

    def __init__(self, field_name: str):
        super().__init__(field_name)
        self.field_name = field_name

    def __str__(self) -> str:
        return f"Field '{self.field_name}' not found"


class AddressError(ValueError):
    """Raised by strict address decoding on malformed input."""


class CSVParseError(ValueError):
    """Raised by strict CSV parsing when input ends inside a quoted field."""


class GoogleSheetsError(RuntimeError):
    """Raised when a Google Sheets import cannot be completed."""
