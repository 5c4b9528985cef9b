"""Designer events — one tagged type per kind of user change."""

from dataclasses import dataclass, field as dataclass_field
from typing import Union

from .field import DataTypeKind, Field
from .key_selection import SelectionTarget


@dataclass(frozen=True)
class DomainNameChanged:
    name: str


@dataclass(frozen=True)
class DomainDescriptionChanged:
    description: str


@dataclass(frozen=True)
class TitleColumnChanged:
    title_column: str | None


@dataclass(frozen=True)
class FieldAdded:
    field: Field = dataclass_field(default_factory=Field)


@dataclass(frozen=True)
class FieldRemoved:
    index: int


@dataclass(frozen=True)
class FieldNameChanged:
    index: int
    name: str


@dataclass(frozen=True)
class FieldDataTypeChanged:
    index: int
    data_type: DataTypeKind


@dataclass(frozen=True)
class FieldRequiredChanged:
    index: int
    required: bool


@dataclass(frozen=True)
class KeySelected:
    target: SelectionTarget


@dataclass(frozen=True)
class PanelValidityReported:
    panel_index: int
    is_valid: bool


PropertiesEvent = Union[DomainNameChanged, DomainDescriptionChanged, TitleColumnChanged]
FieldEvent = Union[FieldAdded, FieldRemoved, FieldNameChanged, FieldDataTypeChanged, FieldRequiredChanged]
DesignerEvent = Union[PropertiesEvent, FieldEvent, KeySelected, PanelValidityReported]
