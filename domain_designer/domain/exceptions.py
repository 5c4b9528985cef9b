"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class PanelIndexError(IndexError):
    """Raised when a panel index is outside the designer's panel range.

    This is a programmer error: callers must only toggle panels that exist.
    """

    def __init__(self, index: int, panel_count: int):
        self.index = index
        self.panel_count = panel_count
        super().__init__(f"Panel index {index} out of range (designer has {panel_count} panels)")


class KeySelectionError(ValueError):
    """Raised when a key selection target cannot be applied to the field collection."""

    def __init__(self, target: object, reason: str):
        self.target = target
        self.reason = reason
        super().__init__(f"Cannot select key {target!r}: {reason}")


class LockedKeyFieldError(Exception):
    """Raised when changing which field is the key of an already persisted entity."""

    def __init__(self, key_field_name: str | None):
        self.key_field_name = key_field_name
        super().__init__(
            f"The key field '{key_field_name}' is locked and cannot be changed"
            if key_field_name
            else "The key of an existing entity cannot be changed"
        )


class FieldLockedError(Exception):
    """Raised when a field edit is not permitted by the field's lock type."""

    def __init__(self, field_name: str, lock_type: str, attribute: str):
        self.field_name = field_name
        self.lock_type = lock_type
        self.attribute = attribute
        super().__init__(f"Field '{field_name}' is {lock_type}; cannot change {attribute}")


class SubmitInProgressError(Exception):
    """Raised when a save is requested while another save is still in flight."""

    def __init__(self) -> None:
        super().__init__("A save is already in progress for this designer")


class DesignerClosedError(Exception):
    """Raised when a closed designer session receives further actions."""

    def __init__(self) -> None:
        super().__init__("The designer has been closed")


class DomainSaveError(Exception):
    """Raised by a domain saver when the save request itself failed.

    Validation problems are returned as ValidationError values instead;
    this covers transport and server failures.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(f"{status_code}: {message}" if status_code else message)
