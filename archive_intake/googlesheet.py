"""
Import of shared Google Sheets through their CSV export.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from urllib.parse import urlparse

import requests

from .csv_codec import CSVParseOptions, parse, stringify
from .exceptions import GoogleSheetsError
from .logging_setup import get_logger

logger = get_logger(__name__)

SHEET_ID_PATTERN = re.compile(r'/spreadsheets/d/([a-zA-Z0-9_-]+)')
CSV_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv"


@dataclass
class ParsedSheetData:
    """CSV data split into headers, row records and the raw grid."""
    headers: List[str] = field(default_factory=list)
    rows: List[Dict[str, str]] = field(default_factory=list)
    raw_data: List[List[str]] = field(default_factory=list)


def extract_sheet_id(url: str) -> Optional[str]:
    """
    Extract the spreadsheet identifier from a Google Sheets URL.

    Returns:
        The sheet ID, or None if the URL does not contain one
    """
    if not isinstance(url, str):
        return None
    match = SHEET_ID_PATTERN.search(url)
    return match.group(1) if match else None


def convert_to_csv_url(url: str, gid: Optional[str] = None) -> Optional[str]:
    """
    Convert a sharing URL to its CSV export URL.

    Args:
        url: Google Sheets URL
        gid: Optional tab identifier

    Returns:
        CSV export URL, or None if no sheet ID was found
    """
    sheet_id = extract_sheet_id(url)
    if not sheet_id:
        return None

    csv_url = CSV_EXPORT_URL.format(sheet_id=sheet_id)
    if gid:
        csv_url += f"&gid={gid}"
    return csv_url


def is_valid_google_sheets_url(url: str) -> bool:
    """Check that a URL points at a spreadsheet on docs.google.com."""
    try:
        parsed = urlparse(url)
    except (TypeError, ValueError):
        return False
    return (
        parsed.hostname == 'docs.google.com'
        and '/spreadsheets/' in parsed.path
        and extract_sheet_id(url) is not None
    )


def fetch_raw_csv(url: str, gid: Optional[str] = None, timeout: int = 30) -> str:
    """
    Download the CSV export of a sheet.

    Raises:
        GoogleSheetsError: If the URL is invalid, the request fails or the
            response is empty
    """
    if not is_valid_google_sheets_url(url):
        raise GoogleSheetsError("Invalid Google Sheets URL provided")

    csv_url = convert_to_csv_url(url, gid)

    try:
        response = requests.get(csv_url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise GoogleSheetsError(f"Failed to fetch Google Sheets data: {str(e)}") from e

    csv_data = response.text
    if not csv_data or not csv_data.strip():
        raise GoogleSheetsError("Received empty CSV data")
    return csv_data


def parse_csv_data(csv_data: str, skip_empty_lines: bool = True, trim_fields: bool = True,
                   delimiter: str = ',', quote: str = '"') -> ParsedSheetData:
    """
    Parse CSV text into headers and row records.

    Raises:
        GoogleSheetsError: If the text holds no rows
    """
    raw_data = parse(csv_data, CSVParseOptions(
        delimiter=delimiter,
        quote=quote,
        trim=trim_fields,
        skip_empty_lines=skip_empty_lines,
    ))
    if not raw_data:
        raise GoogleSheetsError("No data found in CSV")

    headers = [header.strip() for header in raw_data[0]]
    rows = [
        {header: (row[index].strip() if index < len(row) else '') for index, header in enumerate(headers)}
        for row in raw_data[1:]
    ]
    return ParsedSheetData(headers=headers, rows=rows, raw_data=raw_data)


def filter_sheet_data(data: ParsedSheetData, filter_fn: Callable[[Dict[str, str]], bool]) -> ParsedSheetData:
    """Keep only the rows accepted by ``filter_fn``; the raw grid is rebuilt to match."""
    rows = [row for row in data.rows if filter_fn(row)]
    raw_data = [list(data.raw_data[0])] if data.raw_data else [list(data.headers)]
    raw_data.extend([row.get(header, '') for header in data.headers] for row in rows)
    return ParsedSheetData(headers=list(data.headers), rows=rows, raw_data=raw_data)


def data_to_csv(data: ParsedSheetData) -> str:
    """Serialize parsed sheet data back to CSV text."""
    grid = [list(data.headers)]
    grid.extend([row.get(header, '') for header in data.headers] for row in data.rows)
    return stringify(grid)


def get_column_data(data: ParsedSheetData, column_name: str) -> List[str]:
    """
    Values of one column.

    Raises:
        KeyError: If the column is not a header
    """
    if column_name not in data.headers:
        raise KeyError(f'Column "{column_name}" not found in headers')
    return [row.get(column_name, '') for row in data.rows]


def find_rows_by_column_value(data: ParsedSheetData, column_name: str, value: str,
                              exact_match: bool = True) -> List[Dict[str, str]]:
    """
    Rows whose column equals ``value`` (or contains it, case-insensitively).

    Raises:
        KeyError: If the column is not a header
    """
    if column_name not in data.headers:
        raise KeyError(f'Column "{column_name}" not found in headers')

    if exact_match:
        return [row for row in data.rows if row.get(column_name, '') == value]
    needle = value.lower()
    return [row for row in data.rows if needle in row.get(column_name, '').lower()]


def fetch_from_google_sheets(link: str, gid: Optional[str] = None, **parse_options) -> ParsedSheetData:
    """
    Fetch and parse a shared Google Sheet.

    Raises:
        GoogleSheetsError: On invalid input, network failure or a sheet without headers
    """
    if not link or not isinstance(link, str):
        raise GoogleSheetsError("Valid Google Sheets URL is required")

    csv_data = fetch_raw_csv(link, gid)
    parsed = parse_csv_data(csv_data, **parse_options)

    if not any(parsed.headers):
        raise GoogleSheetsError("No headers found in the spreadsheet")

    logger.info(f"Fetched Google Sheets data: {len(parsed.headers)} columns, {len(parsed.rows)} rows")
    return parsed
