"""Copy-on-write helpers for ordered field collections.

A field collection is a plain ``tuple[Field, ...]``. Every helper returns a
new tuple and leaves its input untouched, so earlier snapshots stay valid
for comparison and for re-deriving panel validity.
"""

from collections.abc import Callable
from typing import Any

from .field import Field

FieldCollection = tuple[Field, ...]


def _check_index(fields: FieldCollection, index: int) -> None:
    if not 0 <= index < len(fields):
        raise IndexError(f"Field index {index} out of range for {len(fields)} field(s)")


def with_field_replaced(fields: FieldCollection, index: int, **changes: Any) -> FieldCollection:
    """Return a copy of ``fields`` with the field at ``index`` patched."""
    _check_index(fields, index)
    updated = fields[index].with_changes(**changes)
    return fields[:index] + (updated,) + fields[index + 1:]


def with_field_appended(fields: FieldCollection, field: Field) -> FieldCollection:
    return fields + (field,)


def with_field_removed(fields: FieldCollection, predicate: Callable[[Field], bool]) -> FieldCollection:
    """Return a copy of ``fields`` without the fields matching ``predicate``."""
    return tuple(f for f in fields if not predicate(f))


def key_field_indexes(fields: FieldCollection) -> list[int]:
    """Indexes of every field flagged as primary key, placeholder included."""
    return [i for i, f in enumerate(fields) if f.is_primary_key]


def placeholder_index(fields: FieldCollection) -> int | None:
    return next((i for i, f in enumerate(fields) if f.is_auto_increment), None)


def find_field_index(fields: FieldCollection, name: str | None) -> int:
    """Case-insensitive lookup by name; -1 when absent."""
    if not name:
        return -1
    lowered = name.lower()
    return next((i for i, f in enumerate(fields) if f.name and f.name.lower() == lowered), -1)


def invalid_field_indexes(fields: FieldCollection) -> list[int]:
    return [i for i, f in enumerate(fields) if f.has_errors()]
