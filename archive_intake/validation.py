"""
Cell validation and coercion.

Every field is assigned its validation rules once, from its title, when the
field is defined. A title can match several rules (``image_link_filename`` is
both a URL and a file name); they are applied in order and the first failure
is reported.
"""

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple
from urllib.parse import urlparse

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')

# Schemes that are well-formed without a network location
_OPAQUE_SCHEMES = {'mailto', 'urn', 'data', 'tel', 'file', 'about'}


class FieldKind(Enum):
    """Validation rule applied to a field."""
    EMAIL = "email"
    URL = "url"
    COORDINATE = "coordinate"
    FILENAME = "filename"


def resolve_field_kinds(title: str) -> Tuple[FieldKind, ...]:
    """
    Pick the validation rules for a field title.

    Matching is on the lower-cased title. Every matching rule is returned, in
    the order email, URL, coordinate, filename. An empty tuple means plain
    text.
    """
    name = (title or '').lower()
    kinds = []

    if 'email' in name:
        kinds.append(FieldKind.EMAIL)
    if 'url' in name or 'link' in name:
        kinds.append(FieldKind.URL)
    if 'coordinate' in name or 'lat' in name or 'lng' in name:
        kinds.append(FieldKind.COORDINATE)
    if name == 'file' or 'filename' in name:
        kinds.append(FieldKind.FILENAME)
    return tuple(kinds)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a single cell value."""
    valid: bool
    error: Optional[str] = None
    coerced_value: Any = None


@dataclass
class RowValidationResult:
    """Outcome of validating every field of a row."""
    valid: bool
    errors: Dict[str, str] = field(default_factory=dict)
    coerced_data: Dict[str, Any] = field(default_factory=dict)


def _is_url(text: str) -> bool:
    try:
        parsed = urlparse(text)
    except ValueError:
        return False
    if not parsed.scheme or not re.match(r'^[a-zA-Z][a-zA-Z0-9+.-]*$', parsed.scheme):
        return False
    if parsed.scheme.lower() in _OPAQUE_SCHEMES:
        return bool(parsed.path or parsed.netloc)
    return bool(parsed.netloc)


def _parse_coordinate(text: str) -> Optional[float]:
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def validate_with_kinds(value: Any, kinds: Iterable[FieldKind]) -> ValidationResult:
    """
    Validate a value against explicit rules, applied in order.

    A coordinate rule that passes returns the numeric value straight away;
    any rules after it are not applied.
    """
    if value is None:
        return ValidationResult(True, coerced_value='')

    if isinstance(value, bool):
        text = 'true' if value else 'false'
    else:
        text = str(value).strip()

    for kind in kinds:
        if kind is FieldKind.EMAIL:
            if not EMAIL_PATTERN.match(text):
                return ValidationResult(False, 'Invalid email format')

        elif kind is FieldKind.URL:
            if not _is_url(text):
                return ValidationResult(False, 'Invalid URL format')

        elif kind is FieldKind.COORDINATE:
            number = _parse_coordinate(text)
            if number is None:
                return ValidationResult(False, 'Coordinates must be numeric')
            return ValidationResult(True, coerced_value=number)

        elif kind is FieldKind.FILENAME:
            if not text:
                return ValidationResult(False, 'File name cannot be empty')
            if INVALID_FILENAME_CHARS.search(text):
                return ValidationResult(False, 'File name contains invalid characters')

    return ValidationResult(True, coerced_value=text)


def validate_cell_value(value: Any, field) -> ValidationResult:
    """
    Validate and coerce a value for a field.

    Args:
        value: Raw value entered by the user
        field: Field definition (anything with ``kinds`` or a ``title``)

    Returns:
        ValidationResult with the coerced value on success
    """
    kinds = getattr(field, 'kinds', None)
    if kinds is None:
        kinds = resolve_field_kinds(field.title)
    return validate_with_kinds(value, kinds)


def validate_row_data(row_data: Dict[str, Any], fields: Iterable) -> RowValidationResult:
    """
    Validate a row against every field of the sheet.

    Fields missing from ``row_data`` are validated as empty (None) values.
    """
    result = RowValidationResult(valid=True)

    for sheet_field in fields:
        validation = validate_cell_value(row_data.get(sheet_field.title), sheet_field)
        if validation.valid:
            result.coerced_data[sheet_field.title] = validation.coerced_value
        else:
            result.errors[sheet_field.title] = validation.error or 'Invalid value'

    result.valid = not result.errors
    return result
