"""Domain repository kept in process memory, implementing both designer ports."""

import asyncio
import logging
import uuid
from dataclasses import dataclass

from domain_designer.application.interfaces import DomainLoader, DomainSaver
from domain_designer.domain.entities import (
    DataTypeKind,
    DomainDesign,
    Field,
    KeyType,
    LoadedDomain,
    LockType,
    ValidationError,
    key_field_indexes,
)
from domain_designer.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _StoredDomain:
    design: DomainDesign
    key_field_name: str | None
    key_type: KeyType | None


class InMemoryDomainRepository(DomainLoader, DomainSaver):
    """Implements the DomainLoader and DomainSaver ports over a dict.

    ``save_domain`` performs the checks a schema server makes before
    accepting a design and returns them as ValidationError values.
    Accepted designs get an id, property ids for new fields and a
    locked key field.
    """

    def __init__(self) -> None:
        self._domains: dict[str, _StoredDomain] = {}
        self._next_property_id = 1
        self._lock = asyncio.Lock()

    def _to_loaded(self, stored: _StoredDomain) -> LoadedDomain:
        """Map stored record → loader result."""
        return LoadedDomain(
            design=stored.design,
            key_field_name=stored.key_field_name,
            key_type=stored.key_type,
        )

    async def load_domain(self, domain_id: str) -> LoadedDomain:
        stored = self._domains.get(domain_id)
        if stored is None:
            raise EntityNotFoundError("Domain", domain_id)
        return self._to_loaded(stored)

    async def save_domain(self, design: DomainDesign) -> DomainDesign | list[ValidationError]:
        async with self._lock:
            if design.id is not None and design.id not in self._domains:
                raise EntityNotFoundError("Domain", design.id)

            errors = self._validate(design)
            if errors:
                logger.info("Rejected %s '%s' with %d error(s)", design.kind.noun, design.name, len(errors))
                return errors

            domain_id = design.id or str(uuid.uuid4())
            fields = tuple(self._persist_field(f) for f in design.fields)
            saved = design.with_changes(id=domain_id, fields=fields)

            keys = key_field_indexes(fields)
            key = fields[keys[0]] if keys else None
            self._domains[domain_id] = _StoredDomain(
                design=saved,
                key_field_name=key.name if key else None,
                key_type=_key_type(key) if key else None,
            )
            logger.info("Saved %s '%s' as %s", design.kind.noun, design.name, domain_id)
            return saved

    # ── Server-side checks ───────────────────────────────────────────

    def _validate(self, design: DomainDesign) -> list[ValidationError]:
        errors: list[ValidationError] = []
        noun = design.kind.noun

        if not design.has_valid_properties():
            errors.append(ValidationError(message=f"The {noun} name is required."))
        else:
            for domain_id, stored in self._domains.items():
                other = stored.design
                if (
                    domain_id != design.id
                    and other.kind is design.kind
                    and other.name.strip().lower() == design.name.strip().lower()
                ):
                    errors.append(ValidationError(message=f"A {noun} with the name '{design.name}' already exists."))
                    break

        seen: set[str] = set()
        for index, f in enumerate(design.fields):
            if f.has_invalid_name():
                errors.append(
                    ValidationError(message="Please provide a name for each field.", field_index=index)
                )
                continue
            lowered = f.name.strip().lower()
            if lowered in seen:
                errors.append(
                    ValidationError(
                        message=f"The field name '{f.name}' is already taken. Please provide a unique name for each field.",
                        field_index=index,
                        field_name=f.name,
                    )
                )
            seen.add(lowered)

        keys = key_field_indexes(design.fields)
        if len(keys) > 1:
            errors.append(ValidationError(message=f"A {noun} can only have one key field."))
        elif keys:
            key = design.fields[keys[0]]
            if not key.is_key_eligible():
                errors.append(
                    ValidationError(
                        message=f"The key field '{key.name}' must be of type Integer or Text.",
                        field_index=keys[0],
                        field_name=key.name,
                    )
                )
        elif design.kind.requires_key_field:
            errors.append(ValidationError(message=f"You must specify a key field for your {noun}."))

        return errors

    def _persist_field(self, f: Field) -> Field:
        changes: dict = {}
        if f.property_id is None:
            changes["property_id"] = self._next_property_id
            self._next_property_id += 1
        if f.is_primary_key and f.lock_type is LockType.NOT_LOCKED:
            changes["lock_type"] = LockType.PRIMARY_KEY_LOCKED
        return f.with_changes(**changes) if changes else f


def _key_type(key: Field) -> KeyType | None:
    if key.is_auto_increment:
        return KeyType.AUTO_INCREMENT_INTEGER
    if key.data_type is DataTypeKind.INTEGER:
        return KeyType.INTEGER
    if key.data_type is DataTypeKind.TEXT:
        return KeyType.VARCHAR
    return None
