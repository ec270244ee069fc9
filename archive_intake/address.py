"""
Cell address encoding and decoding.

Addresses are zero-based ``(col, row)`` pairs. Their text form is the
spreadsheet column name (bijective base-26: A..Z, AA..AZ, ...) followed by the
one-based row number, e.g. ``(0, 0) -> "A1"`` and ``(27, 11) -> "AB12"``.
"""

import re
from typing import NamedTuple

from .exceptions import AddressError

ADDRESS_PATTERN = re.compile(r'^([A-Z]+)(\d+)$')


class Address(NamedTuple):
    """Zero-based cell coordinate."""
    col: int
    row: int


def encode_col(col: int) -> str:
    """
    Convert a zero-based column index to its letter name.

    Args:
        col: Column index (0 -> "A", 25 -> "Z", 26 -> "AA")

    Returns:
        Column letters
    """
    if col < 0:
        raise ValueError(f"Column index must be non-negative: {col}")

    letters = ''
    while col >= 0:
        letters = chr(65 + col % 26) + letters
        col = col // 26 - 1
    return letters


def decode_col(letters: str) -> int:
    """Convert column letters back to a zero-based column index."""
    col = 0
    for char in letters:
        col = col * 26 + (ord(char) - 64)
    return col - 1


def encode_cell(col: int, row: int) -> str:
    """
    Encode a zero-based coordinate as an address string.

    Args:
        col: Column index
        row: Row index

    Returns:
        Address text such as "A1"
    """
    if row < 0:
        raise ValueError(f"Row index must be non-negative: {row}")
    return f"{encode_col(col)}{row + 1}"


def is_valid_address(text: str) -> bool:
    """Check whether text is a well-formed address with a row of at least 1."""
    if not isinstance(text, str):
        return False
    match = ADDRESS_PATTERN.match(text)
    return bool(match) and int(match.group(2)) >= 1


def decode_cell_strict(text: str) -> Address:
    """
    Decode an address string, rejecting malformed input.

    Args:
        text: Address text such as "AB12"

    Returns:
        Decoded Address

    Raises:
        AddressError: If text is not a valid address
    """
    if not is_valid_address(text):
        raise AddressError(f"Invalid cell address: {text!r}")
    match = ADDRESS_PATTERN.match(text)
    return Address(decode_col(match.group(1)), int(match.group(2)) - 1)


def decode_cell(text: str) -> Address:
    """
    Decode an address string.

    Malformed input never raises; it decodes to ``Address(0, 0)``. Callers that
    need to tell the two apart should use ``decode_cell_strict`` or check
    ``is_valid_address`` first.
    """
    try:
        return decode_cell_strict(text)
    except AddressError:
        return Address(0, 0)
