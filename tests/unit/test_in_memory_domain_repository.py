"""Unit tests for the InMemoryDomainRepository server-side checks."""

import pytest

from domain_designer.domain.entities import (
    DataTypeKind,
    DomainDesign,
    DomainKind,
    Field,
    KeyType,
    LockType,
)
from domain_designer.domain.exceptions import EntityNotFoundError
from domain_designer.infrastructure.repositories import InMemoryDomainRepository

INT = DataTypeKind.INTEGER


@pytest.fixture
def repository() -> InMemoryDomainRepository:
    return InMemoryDomainRepository()


def _list_design(name: str = "Reagents", **changes) -> DomainDesign:
    design = DomainDesign(
        kind=DomainKind.LIST,
        name=name,
        fields=(
            Field(name="Id", data_type=INT, is_primary_key=True, required=True),
            Field(name="Name"),
        ),
    )
    return design.with_changes(**changes) if changes else design


@pytest.mark.asyncio
async def test_save_assigns_ids_and_locks_key(repository):
    saved = await repository.save_domain(_list_design())

    assert isinstance(saved, DomainDesign)
    assert saved.id is not None
    assert [f.property_id for f in saved.fields] == [1, 2]
    assert saved.fields[0].lock_type is LockType.PRIMARY_KEY_LOCKED
    assert saved.fields[1].lock_type is LockType.NOT_LOCKED


@pytest.mark.asyncio
async def test_load_returns_key_metadata(repository):
    saved = await repository.save_domain(_list_design())

    loaded = await repository.load_domain(saved.id)

    assert loaded.design == saved
    assert loaded.key_field_name == "Id"
    assert loaded.key_type is KeyType.INTEGER


@pytest.mark.asyncio
async def test_load_unknown_domain_raises(repository):
    with pytest.raises(EntityNotFoundError):
        await repository.load_domain("missing")


@pytest.mark.asyncio
async def test_resave_keeps_property_ids(repository):
    saved = await repository.save_domain(_list_design())
    extended = saved.with_changes(fields=saved.fields + (Field(name="Lot"),))

    resaved = await repository.save_domain(extended)

    assert resaved.id == saved.id
    assert [f.property_id for f in resaved.fields] == [1, 2, 3]


@pytest.mark.asyncio
async def test_duplicate_name_per_kind_is_rejected(repository):
    await repository.save_domain(_list_design())

    errors = await repository.save_domain(_list_design(name="reagents"))
    assert isinstance(errors, list)
    assert errors[0].message == "A list with the name 'reagents' already exists."
    assert not errors[0].is_field_error

    dataset = await repository.save_domain(_list_design(kind=DomainKind.DATASET))
    assert isinstance(dataset, DomainDesign)


@pytest.mark.asyncio
async def test_field_problems_are_reported_per_field(repository):
    design = _list_design(
        fields=(
            Field(name="Id", data_type=INT, is_primary_key=True, required=True),
            Field(name=""),
            Field(name="id"),
        )
    )

    errors = await repository.save_domain(design)

    assert [e.field_index for e in errors] == [1, 2]
    assert errors[1].field_name == "id"


@pytest.mark.asyncio
async def test_list_needs_an_eligible_key(repository):
    no_key = _list_design(fields=(Field(name="Name"),))
    errors = await repository.save_domain(no_key)
    assert errors[0].message == "You must specify a key field for your list."

    bad_key = _list_design(fields=(Field(name="When", data_type=DataTypeKind.DATE, is_primary_key=True),))
    errors = await repository.save_domain(bad_key)
    assert errors[0].field_name == "When"


@pytest.mark.asyncio
async def test_auto_increment_key_is_persisted(repository):
    design = _list_design(fields=(Field(name="Name"), Field.auto_increment_placeholder("Key")))

    saved = await repository.save_domain(design)
    loaded = await repository.load_domain(saved.id)

    assert loaded.key_type is KeyType.AUTO_INCREMENT_INTEGER
    assert loaded.key_field_name == "Key"
    assert saved.fields[1].lock_type is LockType.PRIMARY_KEY_LOCKED
