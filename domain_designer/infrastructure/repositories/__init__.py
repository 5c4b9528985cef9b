from .in_memory_domain_repository import InMemoryDomainRepository

__all__ = [
    "InMemoryDomainRepository",
]
