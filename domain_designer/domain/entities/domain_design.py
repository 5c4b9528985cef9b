"""Domain entity for the entity definition being designed."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from .field_collection import FieldCollection
from .key_selection import KeySelection, KeyType, NoKey

SEVERITY_LEVEL_ERROR = "Error"
SEVERITY_LEVEL_WARN = "Warning"


class DomainKind(str, Enum):
    """Kinds of entities the designer can define."""

    LIST = "list"
    DATASET = "dataset"
    ISSUE_LIST = "issue_list"
    ASSAY = "assay"

    @property
    def requires_key_field(self) -> bool:
        return self is DomainKind.LIST

    @property
    def noun(self) -> str:
        return {
            DomainKind.LIST: "list",
            DomainKind.DATASET: "dataset",
            DomainKind.ISSUE_LIST: "issue list",
            DomainKind.ASSAY: "assay design",
        }[self]


@dataclass(frozen=True)
class DomainDesign:
    """Schema and properties of one entity definition.

    A design without an ``id`` has never been saved.
    """

    kind: DomainKind
    name: str = ""
    fields: FieldCollection = ()
    id: str | None = None
    description: str = ""
    key_selection: KeySelection = field(default_factory=NoKey)
    title_column: str | None = None

    @property
    def is_new(self) -> bool:
        return self.id is None

    def has_valid_properties(self) -> bool:
        return bool(self.name and self.name.strip())

    def with_changes(self, **changes: Any) -> "DomainDesign":
        return replace(self, **changes)


@dataclass(frozen=True)
class LoadedDomain:
    """What a domain loader returns: the design plus the server's key metadata."""

    design: DomainDesign
    key_field_name: str | None = None
    key_type: KeyType | None = None


@dataclass(frozen=True)
class ValidationError:
    """A save-time problem reported by the server.

    Carries either a panel index or enough field information
    (index or name) to map the problem back onto a panel.
    """

    message: str
    panel_index: int | None = None
    field_index: int | None = None
    field_name: str | None = None
    severity: str = SEVERITY_LEVEL_ERROR

    @property
    def is_field_error(self) -> bool:
        return self.field_index is not None or bool(self.field_name)
