"""Unit tests for the DesignerSessionRegistry."""

import pytest

from domain_designer.application.services import DesignerSessionRegistry, KeyFieldBinder
from domain_designer.domain.entities import (
    DataTypeKind,
    DomainDesign,
    DomainKind,
    Field,
    FieldKey,
    LockType,
)
from domain_designer.domain.exceptions import DesignerClosedError, EntityNotFoundError
from domain_designer.infrastructure.repositories import InMemoryDomainRepository


@pytest.fixture
def repository() -> InMemoryDomainRepository:
    return InMemoryDomainRepository()


@pytest.fixture
def registry(repository) -> DesignerSessionRegistry:
    return DesignerSessionRegistry(
        loader=repository,
        saver=repository,
        binder=KeyFieldBinder("RowId"),
        panel_titles=("Details", "Columns"),
    )


@pytest.mark.asyncio
async def test_open_new_session(registry):
    session_id, controller = await registry.open_session(kind=DomainKind.LIST, name="Reagents")

    assert registry.get(session_id) is controller
    assert controller.design.is_new
    assert [p.title for p in controller.panels()] == ["Details", "Columns"]
    assert controller.binder.placeholder_name == "RowId"
    assert registry.session_count == 1


@pytest.mark.asyncio
async def test_open_existing_session(registry, repository):
    saved = await repository.save_domain(
        DomainDesign(
            kind=DomainKind.LIST,
            name="Reagents",
            fields=(Field(name="Id", data_type=DataTypeKind.INTEGER, is_primary_key=True, required=True),),
        )
    )

    _, controller = await registry.open_session(domain_id=saved.id)

    assert controller.design.id == saved.id
    assert controller.design.key_selection == FieldKey(0)
    assert controller.design.fields[0].lock_type is LockType.PRIMARY_KEY_LOCKED


@pytest.mark.asyncio
async def test_open_requires_kind_or_id(registry):
    with pytest.raises(ValueError):
        await registry.open_session()
    with pytest.raises(EntityNotFoundError):
        await registry.open_session(domain_id="missing")


@pytest.mark.asyncio
async def test_close_session_closes_controller(registry):
    session_id, controller = await registry.open_session(kind=DomainKind.DATASET)

    registry.close_session(session_id)

    assert controller.closed
    with pytest.raises(DesignerClosedError):
        controller.toggle_panel(0, collapsed=False)
    with pytest.raises(EntityNotFoundError):
        registry.get(session_id)
    with pytest.raises(EntityNotFoundError):
        registry.close_session(session_id)


@pytest.mark.asyncio
async def test_close_all(registry):
    await registry.open_session(kind=DomainKind.LIST)
    await registry.open_session(kind=DomainKind.ASSAY)

    registry.close_all()

    assert registry.session_count == 0
