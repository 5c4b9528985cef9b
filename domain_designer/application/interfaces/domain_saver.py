"""Abstract domain saver interface (port) — persists designs built in the designer."""

from abc import ABC, abstractmethod

from domain_designer.domain.entities import DomainDesign, ValidationError


class DomainSaver(ABC):
    """Port for persisting a domain design — implemented in the infrastructure layer."""

    @abstractmethod
    async def save_domain(self, design: DomainDesign) -> DomainDesign | list[ValidationError]:
        """Create or update a design atomically.

        Returns:
            The saved design (with its ID and server-assigned field
            metadata), or the list of validation errors that prevented
            the save. Nothing is persisted when errors are returned.

        Raises:
            DomainSaveError: If the save request itself failed.
        """
        ...
