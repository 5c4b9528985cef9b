"""Abstract domain loader interface (port) — supplies designs to the designer."""

from abc import ABC, abstractmethod

from domain_designer.domain.entities import LoadedDomain


class DomainLoader(ABC):
    """Port for fetching an existing domain design — implemented in the infrastructure layer."""

    @abstractmethod
    async def load_domain(self, domain_id: str) -> LoadedDomain:
        """Load a persisted design with its key metadata.

        Raises:
            EntityNotFoundError: If no design exists with the given ID.
        """
        ...
