"""
Sheet data model.

A Sheet is an immutable snapshot: its rows are a tuple of read-only mappings,
so a new snapshot can share every untouched row with the one it came from.
"""

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .validation import FieldKind, resolve_field_kinds

Row = Mapping[str, Any]
Image = Tuple[str, Path]


@dataclass(frozen=True)
class Field:
    """Column definition."""
    title: str
    instructions: Optional[str] = None
    kinds: Tuple[FieldKind, ...] = field(default=None, compare=False)

    def __post_init__(self):
        if not self.title:
            raise ValueError("Field title cannot be empty")
        if self.kinds is None:
            object.__setattr__(self, 'kinds', resolve_field_kinds(self.title))
        else:
            object.__setattr__(self, 'kinds', tuple(self.kinds))

    def to_dict(self) -> Dict[str, Any]:
        data = {'title': self.title}
        if self.instructions is not None:
            data['instructions'] = self.instructions
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Field':
        return cls(title=data['title'], instructions=data.get('instructions'))


def freeze_row(row: Mapping[str, Any]) -> Row:
    """Wrap a row as a read-only mapping; already frozen rows are returned as-is."""
    if isinstance(row, MappingProxyType):
        return row
    return MappingProxyType(dict(row))


@dataclass(frozen=True)
class Sheet:
    """Fields, rows and the images the rows were generated from."""
    fields: Tuple[Field, ...] = ()
    rows: Tuple[Row, ...] = ()
    images: Tuple[Image, ...] = ()

    def __post_init__(self):
        fields = tuple(self.fields)
        titles = [f.title for f in fields]
        duplicates = sorted({t for t in titles if titles.count(t) > 1})
        if duplicates:
            raise ValueError(f"Duplicate field titles: {', '.join(duplicates)}")

        object.__setattr__(self, 'fields', fields)
        object.__setattr__(self, 'rows', tuple(freeze_row(row) for row in self.rows))
        object.__setattr__(self, 'images', tuple((name, Path(handle)) for name, handle in self.images))

    @property
    def field_titles(self) -> List[str]:
        return [f.title for f in self.fields]

    def get_field(self, title: str) -> Optional[Field]:
        for sheet_field in self.fields:
            if sheet_field.title == title:
                return sheet_field
        return None

    def get_value(self, row_index: int, title: str) -> Any:
        """Read a cell; absent keys read as empty."""
        return self.rows[row_index].get(title, '')

    def with_rows(self, rows: Iterable[Row]) -> 'Sheet':
        """New snapshot with the given rows and the same fields and images."""
        return Sheet(fields=self.fields, rows=tuple(rows), images=self.images)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form, as stored under the ``sheet`` key."""
        return {
            'fields': [f.to_dict() for f in self.fields],
            'rows': [dict(row) for row in self.rows],
            'images': [[name, str(handle)] for name, handle in self.images],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Sheet':
        return cls(
            fields=tuple(Field.from_dict(f) for f in data.get('fields', [])),
            rows=tuple(data.get('rows', [])),
            images=tuple((name, handle) for name, handle in data.get('images', [])),
        )


@dataclass
class ImageResponse:
    """Metadata draft returned by the AI collaborator for one image."""
    is_done: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)
    questions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_done': self.is_done,
            'metadata': dict(self.metadata),
            'questions': list(self.questions),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ImageResponse':
        return cls(
            is_done=bool(data.get('is_done', False)),
            metadata=dict(data.get('metadata') or {}),
            questions=[str(q) for q in data.get('questions') or []],
        )
