"""Key-Field Binder — keeps exactly one key mechanism bound to a field collection.

Handles the transitions between "no key", "auto-increment synthetic key"
and "user field is key". Each transition is composed from the copy-on-write
collection helpers and returned as a single KeyBinding, so observers never
see a collection where two fields are flagged as key.
"""

import logging

from domain_designer.domain.entities import (
    AutoIncrementKey,
    DataTypeKind,
    DomainDesign,
    Field,
    FieldCollection,
    FieldKey,
    KeyBinding,
    KeyOption,
    KeySelection,
    KeyTarget,
    KeyType,
    LoadedDomain,
    LockType,
    NoKey,
    SelectionTarget,
    find_field_index,
    key_field_indexes,
    placeholder_index,
    with_field_appended,
    with_field_removed,
    with_field_replaced,
)
from domain_designer.domain.exceptions import KeySelectionError, LockedKeyFieldError

logger = logging.getLogger(__name__)

AUTO_INCREMENT_OPTION_LABEL = "Auto integer key"


class KeyFieldBinder:
    """Applies key selections to field collections."""

    def __init__(self, placeholder_name: str = "Key") -> None:
        self._placeholder_name = placeholder_name

    @property
    def placeholder_name(self) -> str:
        return self._placeholder_name

    # ── Transitions ──────────────────────────────────────────────────

    def select_key(
        self,
        selection: KeySelection,
        fields: FieldCollection,
        target: SelectionTarget,
        *,
        locked: bool = False,
    ) -> KeyBinding:
        """Move the key to ``target`` and return the resulting binding.

        Args:
            selection: The current key selection for ``fields``.
            fields: The current field collection.
            target: A field index, ``KeyTarget.AUTO_INCREMENT`` or
                ``KeyTarget.NO_SELECTION``.
            locked: True when the entity already exists; its key may not move.

        Raises:
            KeySelectionError: If the target or current selection does not
                fit the collection.
            LockedKeyFieldError: If the key of an existing entity would change.
        """
        self._check_selection(selection, fields)
        requested = self._resolve_target(fields, target)

        if requested == selection:
            return KeyBinding(selection, fields)

        current_key = self._current_key_field(selection, fields)
        if locked or (current_key is not None and current_key.lock_type is LockType.PRIMARY_KEY_LOCKED):
            raise LockedKeyFieldError(current_key.name if current_key else None)

        working = fields
        if isinstance(selection, AutoIncrementKey):
            removed_at = placeholder_index(working)
            working = with_field_removed(working, lambda f: f.is_auto_increment)
            if isinstance(requested, FieldKey) and removed_at is not None and removed_at < requested.field_index:
                requested = FieldKey(requested.field_index - 1)
        elif isinstance(selection, FieldKey):
            working = with_field_replaced(working, selection.field_index, is_primary_key=False, required=False)

        if isinstance(requested, FieldKey):
            working = with_field_replaced(working, requested.field_index, is_primary_key=True, required=True)
        elif isinstance(requested, AutoIncrementKey):
            working = with_field_appended(working, Field.auto_increment_placeholder(self._placeholder_name))

        logger.debug("Key selection %s -> %s", selection, requested)
        return KeyBinding(requested, working)

    def _resolve_target(self, fields: FieldCollection, target: SelectionTarget) -> KeySelection:
        if target is KeyTarget.AUTO_INCREMENT:
            return AutoIncrementKey()
        if target is KeyTarget.NO_SELECTION:
            return NoKey()
        if isinstance(target, bool) or not isinstance(target, int):
            raise KeySelectionError(target, "unknown target")
        if not 0 <= target < len(fields):
            raise KeySelectionError(target, f"no field at index {target}")
        if fields[target].is_auto_increment:
            raise KeySelectionError(target, "the auto-increment placeholder is selected with the auto-increment option")
        return FieldKey(target)

    def _check_selection(self, selection: KeySelection, fields: FieldCollection) -> None:
        if isinstance(selection, FieldKey):
            index = selection.field_index
            if not 0 <= index < len(fields) or not fields[index].is_primary_key:
                raise KeySelectionError(selection, "current selection does not match the field collection")
        elif isinstance(selection, AutoIncrementKey) and placeholder_index(fields) is None:
            raise KeySelectionError(selection, "auto-increment selection without a placeholder field")

    def _current_key_field(self, selection: KeySelection, fields: FieldCollection) -> Field | None:
        if isinstance(selection, FieldKey):
            return fields[selection.field_index]
        if isinstance(selection, AutoIncrementKey):
            return fields[placeholder_index(fields)]
        return None

    # ── Queries ──────────────────────────────────────────────────────

    def is_key_valid(self, fields: FieldCollection) -> bool:
        """Exactly one field is the key and its data type can serve as a key."""
        keys = key_field_indexes(fields)
        return len(keys) == 1 and fields[keys[0]].is_key_eligible()

    def derive_selection(self, fields: FieldCollection) -> KeySelection:
        """Rebuild the selection variant from the flags on ``fields``."""
        if placeholder_index(fields) is not None:
            return AutoIncrementKey()
        keys = key_field_indexes(fields)
        if keys:
            return FieldKey(keys[0])
        return NoKey()

    def key_options(self, fields: FieldCollection) -> list[KeyOption]:
        """Choices offered by a key-field selector: eligible named fields, then auto-increment."""
        options = [
            KeyOption(label=f.name, target=i, data_type=f.data_type.value)
            for i, f in enumerate(fields)
            if not f.is_auto_increment and not f.has_invalid_name() and f.is_key_eligible()
        ]
        options.append(
            KeyOption(
                label=AUTO_INCREMENT_OPTION_LABEL,
                target=KeyTarget.AUTO_INCREMENT,
                data_type=DataTypeKind.INTEGER.value,
            )
        )
        return options

    def key_name(self, fields: FieldCollection) -> str | None:
        keys = key_field_indexes(fields)
        return fields[keys[0]].name if keys else None

    def key_type(self, fields: FieldCollection) -> KeyType | None:
        keys = key_field_indexes(fields)
        if not keys:
            return None
        key = fields[keys[0]]
        if key.is_auto_increment:
            return KeyType.AUTO_INCREMENT_INTEGER
        if key.data_type is DataTypeKind.INTEGER:
            return KeyType.INTEGER
        if key.data_type is DataTypeKind.TEXT:
            return KeyType.VARCHAR
        return None

    # ── Initial binding ──────────────────────────────────────────────

    def bind_loaded(self, loaded: LoadedDomain) -> DomainDesign:
        """Derive the starting key binding for a design coming from the server.

        The key field is resolved by name, falling back to the primary key
        flag. For an entity that already exists the key field is locked.
        """
        design = loaded.design
        fields = design.fields

        index = find_field_index(fields, loaded.key_field_name)
        if index < 0:
            keys = key_field_indexes(fields)
            index = keys[0] if keys else -1

        if index >= 0:
            key = fields[index]
            fields = tuple(f for f in fields if f is key or not f.is_auto_increment)
            index = next(i for i, f in enumerate(fields) if f is key)
            fields = tuple(
                f.with_changes(is_primary_key=False) if f.is_primary_key and i != index else f
                for i, f in enumerate(fields)
            )
            changes: dict = {"is_primary_key": True, "required": True}
            if not design.is_new and fields[index].lock_type is not LockType.FULLY_LOCKED:
                changes["lock_type"] = LockType.PRIMARY_KEY_LOCKED
            fields = with_field_replaced(fields, index, **changes)
        elif loaded.key_type is KeyType.AUTO_INCREMENT_INTEGER and design.is_new:
            fields = with_field_appended(fields, Field.auto_increment_placeholder(self._placeholder_name))

        return design.with_changes(fields=fields, key_selection=self.derive_selection(fields))
