"""Unit tests for the KeyFieldBinder transitions, lock rule and validity."""

import pytest

from domain_designer.application.services import KeyFieldBinder
from domain_designer.application.services.key_field_binder import AUTO_INCREMENT_OPTION_LABEL
from domain_designer.domain.entities import (
    AutoIncrementKey,
    DataTypeKind,
    DomainDesign,
    DomainKind,
    Field,
    FieldKey,
    KeyTarget,
    KeyType,
    LoadedDomain,
    LockType,
    NoKey,
    key_field_indexes,
)
from domain_designer.domain.exceptions import KeySelectionError, LockedKeyFieldError

INT = DataTypeKind.INTEGER
TEXT = DataTypeKind.TEXT


@pytest.fixture
def binder() -> KeyFieldBinder:
    return KeyFieldBinder()


# ── Transitions ──────────────────────────────────────────────────────


def test_select_field_from_no_key(binder):
    fields = (Field(name="A", data_type=INT),)

    binding = binder.select_key(NoKey(), fields, 0)

    assert binding.selection == FieldKey(0)
    assert binding.fields[0].is_primary_key
    assert binding.fields[0].required
    assert binder.is_key_valid(binding.fields)
    assert not fields[0].is_primary_key


def test_move_key_between_fields(binder):
    fields = (Field(name="A", data_type=INT, is_primary_key=True, required=True), Field(name="B"))

    binding = binder.select_key(FieldKey(0), fields, 1)

    assert binding.selection == FieldKey(1)
    assert not binding.fields[0].is_primary_key
    assert not binding.fields[0].required
    assert binding.fields[1].is_primary_key
    assert key_field_indexes(binding.fields) == [1]


def test_auto_increment_appends_placeholder(binder):
    fields = (Field(name="A"),)

    binding = binder.select_key(NoKey(), fields, KeyTarget.AUTO_INCREMENT)

    assert binding.selection == AutoIncrementKey()
    placeholder = binding.fields[-1]
    assert placeholder.is_auto_increment
    assert placeholder.name == "Key"
    assert placeholder.data_type is INT
    assert placeholder.is_primary_key and placeholder.required
    assert binder.is_key_valid(binding.fields)


def test_leaving_auto_increment_removes_placeholder_and_shifts_target(binder):
    fields = (Field.auto_increment_placeholder("Key"), Field(name="A"), Field(name="B", data_type=INT))

    binding = binder.select_key(AutoIncrementKey(), fields, 2)

    assert [f.name for f in binding.fields] == ["A", "B"]
    assert binding.selection == FieldKey(1)
    assert binding.fields[1].is_primary_key


def test_no_selection_clears_key(binder):
    fields = (Field(name="A", is_primary_key=True, required=True),)

    binding = binder.select_key(FieldKey(0), fields, KeyTarget.NO_SELECTION)

    assert binding.selection == NoKey()
    assert key_field_indexes(binding.fields) == []
    assert not binder.is_key_valid(binding.fields)


def test_round_trip_through_auto_increment_restores_fields(binder):
    original = (Field(name="A", data_type=INT, is_primary_key=True, required=True), Field(name="B"))

    auto = binder.select_key(FieldKey(0), original, KeyTarget.AUTO_INCREMENT)
    back = binder.select_key(auto.selection, auto.fields, 0)

    assert back.selection == FieldKey(0)
    assert back.fields == original


def test_every_transition_leaves_at_most_one_key(binder):
    fields = (Field(name="A", data_type=INT), Field(name="B"), Field(name="C"))
    selection = NoKey()
    targets = [0, 2, KeyTarget.AUTO_INCREMENT, 1, KeyTarget.NO_SELECTION, KeyTarget.AUTO_INCREMENT, 0]

    for target in targets:
        binding = binder.select_key(selection, fields, target)
        selection, fields = binding.selection, binding.fields
        assert len(key_field_indexes(fields)) <= 1
        assert binder.derive_selection(fields) == selection


def test_selecting_current_key_is_a_no_op_even_when_locked(binder):
    fields = (Field(name="A", is_primary_key=True, required=True, lock_type=LockType.PRIMARY_KEY_LOCKED),)

    binding = binder.select_key(FieldKey(0), fields, 0, locked=True)

    assert binding.fields is fields
    assert binding.selection == FieldKey(0)


def test_ineligible_type_is_selectable_but_invalid(binder):
    fields = (Field(name="When", data_type=DataTypeKind.DATETIME),)

    binding = binder.select_key(NoKey(), fields, 0)

    assert binding.fields[0].is_primary_key
    assert not binder.is_key_valid(binding.fields)


def test_custom_placeholder_name():
    binding = KeyFieldBinder("RowId").select_key(NoKey(), (), KeyTarget.AUTO_INCREMENT)
    assert binding.fields[0].name == "RowId"


# ── Lock rule and bad targets ────────────────────────────────────────


def test_locked_key_cannot_move(binder):
    fields = (
        Field(name="A", data_type=INT, is_primary_key=True, required=True, lock_type=LockType.PRIMARY_KEY_LOCKED),
        Field(name="B", data_type=INT),
    )

    with pytest.raises(LockedKeyFieldError) as exc_info:
        binder.select_key(FieldKey(0), fields, 1)

    assert exc_info.value.key_field_name == "A"
    assert fields[0].is_primary_key
    assert not fields[1].is_primary_key


def test_persisted_entity_rejects_first_key_selection(binder):
    with pytest.raises(LockedKeyFieldError):
        binder.select_key(NoKey(), (Field(name="A"),), 0, locked=True)


@pytest.mark.parametrize("target", [5, -1, True, "A", None])
def test_bad_targets_are_rejected(binder, target):
    with pytest.raises(KeySelectionError):
        binder.select_key(NoKey(), (Field(name="A"),), target)


def test_placeholder_index_is_not_a_field_target(binder):
    fields = (Field(name="A"), Field.auto_increment_placeholder("Key"))
    with pytest.raises(KeySelectionError):
        binder.select_key(AutoIncrementKey(), fields, 1)


def test_selection_out_of_sync_with_fields_is_rejected(binder):
    with pytest.raises(KeySelectionError):
        binder.select_key(FieldKey(0), (Field(name="A"),), KeyTarget.NO_SELECTION)
    with pytest.raises(KeySelectionError):
        binder.select_key(AutoIncrementKey(), (Field(name="A"),), 0)


# ── Queries ──────────────────────────────────────────────────────────


def test_key_validity_requires_exactly_one_eligible_key(binder):
    assert not binder.is_key_valid(())
    assert not binder.is_key_valid(
        (Field(name="A", is_primary_key=True), Field(name="B", is_primary_key=True))
    )
    assert binder.is_key_valid((Field(name="A", is_primary_key=True),))


def test_key_options_list_eligible_named_fields_then_auto_increment(binder):
    fields = (
        Field(name="Id", data_type=INT),
        Field(name=""),
        Field(name="Price", data_type=DataTypeKind.DECIMAL),
        Field(name="Code"),
        Field.auto_increment_placeholder("Key"),
    )

    options = binder.key_options(fields)

    assert [o.label for o in options] == ["Id", "Code", AUTO_INCREMENT_OPTION_LABEL]
    assert [o.target for o in options] == [0, 3, KeyTarget.AUTO_INCREMENT]


def test_key_type(binder):
    assert binder.key_type(()) is None
    assert binder.key_type((Field(name="A", data_type=INT, is_primary_key=True),)) is KeyType.INTEGER
    assert binder.key_type((Field(name="A", is_primary_key=True),)) is KeyType.VARCHAR
    assert binder.key_type((Field.auto_increment_placeholder("Key"),)) is KeyType.AUTO_INCREMENT_INTEGER


# ── Initial binding ──────────────────────────────────────────────────


def test_bind_loaded_locks_key_of_existing_entity(binder):
    design = DomainDesign(
        kind=DomainKind.LIST,
        name="Reagents",
        id="d1",
        fields=(Field(name="Name"), Field(name="Id", data_type=INT)),
    )

    bound = binder.bind_loaded(LoadedDomain(design, key_field_name="id", key_type=KeyType.INTEGER))

    assert bound.key_selection == FieldKey(1)
    assert bound.fields[1].is_primary_key
    assert bound.fields[1].required
    assert bound.fields[1].lock_type is LockType.PRIMARY_KEY_LOCKED


def test_bind_loaded_new_auto_increment_template(binder):
    design = DomainDesign(kind=DomainKind.LIST, fields=(Field(name="Name"),))

    bound = binder.bind_loaded(LoadedDomain(design, key_type=KeyType.AUTO_INCREMENT_INTEGER))

    assert bound.key_selection == AutoIncrementKey()
    assert bound.fields[-1].is_auto_increment
    assert bound.fields[-1].lock_type is LockType.NOT_LOCKED


def test_bind_loaded_clears_extra_key_flags(binder):
    design = DomainDesign(
        kind=DomainKind.LIST,
        fields=(Field(name="A", is_primary_key=True), Field(name="B", is_primary_key=True)),
    )

    bound = binder.bind_loaded(LoadedDomain(design, key_field_name="B"))

    assert key_field_indexes(bound.fields) == [1]
    assert bound.key_selection == FieldKey(1)
