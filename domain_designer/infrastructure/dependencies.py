"""FastAPI dependency injection — wires infrastructure to application layer."""

from functools import lru_cache

from domain_designer.config import get_settings
from domain_designer.application.services import DesignerSessionRegistry, KeyFieldBinder
from domain_designer.infrastructure.repositories import InMemoryDomainRepository


@lru_cache
def get_domain_repository() -> InMemoryDomainRepository:
    """Process-wide domain store; acts as both loader and saver."""
    return InMemoryDomainRepository()


@lru_cache
def get_key_field_binder() -> KeyFieldBinder:
    settings = get_settings()
    return KeyFieldBinder(placeholder_name=settings.auto_increment_key_name)


@lru_cache
def get_session_registry() -> DesignerSessionRegistry:
    """Provides the DesignerSessionRegistry with the repository and binder wired up."""
    settings = get_settings()
    repository = get_domain_repository()
    return DesignerSessionRegistry(
        loader=repository,
        saver=repository,
        binder=get_key_field_binder(),
        panel_titles=(settings.properties_panel_title, settings.fields_panel_title),
    )
