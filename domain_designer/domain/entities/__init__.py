from .field import DataTypeKind, Field, FieldErrors, KEY_ELIGIBLE_KINDS, LockType
from .field_collection import (
    FieldCollection,
    find_field_index,
    invalid_field_indexes,
    key_field_indexes,
    placeholder_index,
    with_field_appended,
    with_field_removed,
    with_field_replaced,
)
from .key_selection import (
    AutoIncrementKey,
    FieldKey,
    KeyBinding,
    KeyOption,
    KeySelection,
    KeyTarget,
    KeyType,
    NoKey,
    SelectionTarget,
)
from .panel import (
    DesignerSessionState,
    PanelDefinition,
    PanelDescriptor,
    PanelKind,
    PanelStatus,
)
from .domain_design import (
    DomainDesign,
    DomainKind,
    LoadedDomain,
    SEVERITY_LEVEL_ERROR,
    SEVERITY_LEVEL_WARN,
    ValidationError,
)
from .events import (
    DesignerEvent,
    DomainDescriptionChanged,
    DomainNameChanged,
    FieldAdded,
    FieldDataTypeChanged,
    FieldEvent,
    FieldNameChanged,
    FieldRemoved,
    FieldRequiredChanged,
    KeySelected,
    PanelValidityReported,
    PropertiesEvent,
    TitleColumnChanged,
)

__all__ = [
    "DataTypeKind",
    "Field",
    "FieldErrors",
    "KEY_ELIGIBLE_KINDS",
    "LockType",
    "FieldCollection",
    "find_field_index",
    "invalid_field_indexes",
    "key_field_indexes",
    "placeholder_index",
    "with_field_appended",
    "with_field_removed",
    "with_field_replaced",
    "AutoIncrementKey",
    "FieldKey",
    "KeyBinding",
    "KeyOption",
    "KeySelection",
    "KeyTarget",
    "KeyType",
    "NoKey",
    "SelectionTarget",
    "DesignerSessionState",
    "PanelDefinition",
    "PanelDescriptor",
    "PanelKind",
    "PanelStatus",
    "DomainDesign",
    "DomainKind",
    "LoadedDomain",
    "SEVERITY_LEVEL_ERROR",
    "SEVERITY_LEVEL_WARN",
    "ValidationError",
    "DesignerEvent",
    "DomainDescriptionChanged",
    "DomainNameChanged",
    "FieldAdded",
    "FieldDataTypeChanged",
    "FieldEvent",
    "FieldNameChanged",
    "FieldRemoved",
    "FieldRequiredChanged",
    "KeySelected",
    "PanelValidityReported",
    "PropertiesEvent",
    "TitleColumnChanged",
]
