"""Key selection variants — which mechanism currently identifies rows."""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .field_collection import FieldCollection


@dataclass(frozen=True)
class NoKey:
    """No field is the key yet."""


@dataclass(frozen=True)
class AutoIncrementKey:
    """A synthetic server-generated key; a placeholder field is in the collection."""


@dataclass(frozen=True)
class FieldKey:
    """An existing field is flagged as the key."""

    field_index: int


KeySelection = Union[NoKey, AutoIncrementKey, FieldKey]


class KeyTarget(str, Enum):
    """Non-index targets a key selector can emit."""

    AUTO_INCREMENT = "auto-increment"
    NO_SELECTION = "no-selection"


SelectionTarget = Union[int, KeyTarget]


class KeyType(str, Enum):
    """Key type as understood by the server."""

    AUTO_INCREMENT_INTEGER = "AutoIncrementInteger"
    INTEGER = "Integer"
    VARCHAR = "Varchar"


@dataclass(frozen=True)
class KeyBinding:
    """The result of a key transition: the selection and the collection it implies."""

    selection: KeySelection
    fields: FieldCollection


@dataclass(frozen=True)
class KeyOption:
    """An entry offered by a key-field selector."""

    label: str
    target: SelectionTarget
    data_type: str | None = None
