"""
Delimited text parsing and serialization.

The scanner is lenient: an unterminated quoted field simply runs
to the end of the input. ``parse_strict`` reports that case instead.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .exceptions import CSVParseError


@dataclass
class CSVParseOptions:
    """Options accepted by the CSV parser."""
    delimiter: str = ','
    quote: str = '"'
    trim: bool = False
    skip_empty_lines: bool = False


def _scan(text: str, options: CSVParseOptions):
    """Scan text into rows; returns (rows, ended_inside_quotes)."""
    delimiter = options.delimiter
    quote = options.quote

    rows: List[List[str]] = []
    row: List[str] = []
    field: List[str] = []
    in_quotes = False
    i = 0
    length = len(text)

    def end_field():
        value = ''.join(field)
        field.clear()
        row.append(value.strip() if options.trim else value)

    def end_row():
        if not options.skip_empty_lines or any(value for value in row):
            rows.append(list(row))
        row.clear()

    while i < length:
        char = text[i]

        if char == quote:
            if in_quotes and i + 1 < length and text[i + 1] == quote:
                field.append(quote)
                i += 2
                continue
            in_quotes = not in_quotes
        elif in_quotes:
            field.append(char)
        elif char == delimiter:
            end_field()
        elif char in '\r\n':
            end_field()
            end_row()
            if char == '\r' and i + 1 < length and text[i + 1] == '\n':
                i += 1
        else:
            field.append(char)
        i += 1

    # Trailing row without a terminator
    if field or row:
        end_field()
        end_row()

    return rows, in_quotes


def parse(text: str, options: Optional[CSVParseOptions] = None) -> List[List[str]]:
    """
    Parse delimited text into a list of rows.

    Args:
        text: Raw CSV text
        options: Parsing options

    Returns:
        List of rows, each a list of field strings
    """
    if not text or not isinstance(text, str):
        return []
    rows, _ = _scan(text, options or CSVParseOptions())
    return rows


def parse_strict(text: str, options: Optional[CSVParseOptions] = None) -> List[List[str]]:
    """
    Parse delimited text, raising on an unterminated quoted field.

    Raises:
        CSVParseError: If the input ends inside quotes
    """
    if not text or not isinstance(text, str):
        return []
    rows, unterminated = _scan(text, options or CSVParseOptions())
    if unterminated:
        raise CSVParseError(f"Unterminated quoted field in row {len(rows)}")
    return rows


def _format_field(value: Any, delimiter: str, quote: str) -> str:
    text = '' if value is None else str(value)
    if delimiter in text or quote in text or '\n' in text or '\r' in text:
        return quote + text.replace(quote, quote + quote) + quote
    return text


def stringify(rows: Sequence[Sequence[Any]], delimiter: str = ',', quote: str = '"') -> str:
    """
    Serialize rows to delimited text.

    A field is quoted only when it contains the delimiter, the quote character
    or a line break; quote characters inside it are doubled.
    """
    return '\n'.join(
        delimiter.join(_format_field(value, delimiter, quote) for value in row)
        for row in rows
    )


def parse_to_objects(text: str, options: Optional[CSVParseOptions] = None) -> List[Dict[str, str]]:
    """
    Parse CSV text using the first row as the header.

    Rows shorter than the header get empty strings for the missing columns.
    """
    rows = parse(text, options)
    if not rows:
        return []

    headers = rows[0]
    return [
        {header: row[index] if index < len(row) else '' for index, header in enumerate(headers)}
        for row in rows[1:]
    ]
