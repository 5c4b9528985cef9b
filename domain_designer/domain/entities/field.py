"""Domain entity for a single schema field being designed."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class DataTypeKind(str, Enum):
    """Supported field data types."""

    INTEGER = "int"
    TEXT = "string"
    MULTILINE = "multiLine"
    BOOLEAN = "boolean"
    DOUBLE = "double"
    DECIMAL = "decimal"
    FLOAT = "float"
    LONG = "long"
    DATETIME = "dateTime"
    DATE = "date"
    TIME = "time"
    FILE_LINK = "fileLink"
    ATTACHMENT = "attachment"


KEY_ELIGIBLE_KINDS = frozenset({DataTypeKind.INTEGER, DataTypeKind.TEXT})


class LockType(str, Enum):
    """How much of a field may still be edited."""

    NOT_LOCKED = "NotLocked"              # can change all properties
    PARTIALLY_LOCKED = "PartiallyLocked"  # can't change name and type
    FULLY_LOCKED = "FullyLocked"          # can't change any properties
    PRIMARY_KEY_LOCKED = "PKLocked"       # can't change data type, required, or key-ness


class FieldErrors(str, Enum):
    """Client-side field problems."""

    NONE = ""
    MISSING_FIELD_NAME = "Please provide a name for each field."


@dataclass(frozen=True)
class Field:
    """One schema column in a domain design.

    Instances are immutable; use ``with_changes`` or the collection helpers
    to derive modified copies.
    """

    name: str = ""
    data_type: DataTypeKind = DataTypeKind.TEXT
    is_primary_key: bool = False
    required: bool = False
    lock_type: LockType = LockType.NOT_LOCKED
    is_auto_increment: bool = False  # synthetic auto-increment key placeholder
    property_id: int | None = None
    description: str = ""

    @classmethod
    def auto_increment_placeholder(cls, name: str) -> "Field":
        """Build the synthetic field that stands in for a server-generated key."""
        return cls(
            name=name,
            data_type=DataTypeKind.INTEGER,
            is_primary_key=True,
            required=True,
            is_auto_increment=True,
        )

    def with_changes(self, **changes: Any) -> "Field":
        return replace(self, **changes)

    def has_invalid_name(self) -> bool:
        return self.name is None or self.name.strip() == ""

    def get_errors(self) -> FieldErrors:
        if self.has_invalid_name():
            return FieldErrors.MISSING_FIELD_NAME
        return FieldErrors.NONE

    def has_errors(self) -> bool:
        return self.get_errors() is not FieldErrors.NONE

    def is_key_eligible(self) -> bool:
        return self.data_type in KEY_ELIGIBLE_KINDS

    def is_deletable(self) -> bool:
        return self.lock_type not in (LockType.FULLY_LOCKED, LockType.PRIMARY_KEY_LOCKED)

    def can_change(self, attribute: str) -> bool:
        """Whether the lock type permits editing the given attribute."""
        if self.lock_type is LockType.FULLY_LOCKED:
            return False
        if self.lock_type is LockType.PARTIALLY_LOCKED:
            return attribute not in ("name", "data_type")
        if self.lock_type is LockType.PRIMARY_KEY_LOCKED:
            return attribute not in ("data_type", "required", "is_primary_key")
        return True
