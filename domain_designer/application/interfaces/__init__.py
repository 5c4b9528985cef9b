from .domain_loader import DomainLoader
from .domain_saver import DomainSaver

__all__ = [
    "DomainLoader",
    "DomainSaver",
]
