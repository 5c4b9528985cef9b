"""Designer Controller — orchestrates panels, key binding and the save sequence.

One controller exists per open designer. It owns the session state and the
design being edited, threads both through the PanelStateStore and the
KeyFieldBinder, and is the single place that decides whether the design
may be saved.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from domain_designer.application.interfaces.domain_loader import DomainLoader
from domain_designer.application.interfaces.domain_saver import DomainSaver
from domain_designer.application.services.key_field_binder import KeyFieldBinder
from domain_designer.application.services.panel_state_store import PanelStateStore
from domain_designer.domain.entities import (
    DesignerEvent,
    DesignerSessionState,
    DomainDescriptionChanged,
    DomainDesign,
    DomainKind,
    DomainNameChanged,
    FieldAdded,
    FieldCollection,
    FieldDataTypeChanged,
    FieldNameChanged,
    FieldRemoved,
    FieldRequiredChanged,
    KeySelected,
    LoadedDomain,
    PanelDefinition,
    PanelDescriptor,
    PanelKind,
    PanelValidityReported,
    SEVERITY_LEVEL_ERROR,
    SelectionTarget,
    TitleColumnChanged,
    ValidationError,
    find_field_index,
    invalid_field_indexes,
    key_field_indexes,
    with_field_appended,
    with_field_removed,
    with_field_replaced,
)
from domain_designer.domain.exceptions import (
    DesignerClosedError,
    DomainSaveError,
    FieldLockedError,
    KeySelectionError,
    SubmitInProgressError,
)
from domain_designer.infrastructure.logging.colored_logger import DesignerLogger, DesignerStage

logger = logging.getLogger(__name__)

PLACEHOLDER_LOCK = "AutoIncrementPlaceholder"


class SubmitOutcome(str, Enum):
    """How a submit attempt ended."""

    SAVED = "saved"
    INVALID = "invalid"        # blocked client-side, saver not called
    FAILED = "failed"          # saver rejected the design
    STALE = "stale"            # response arrived after the user changed the design
    DISCARDED = "discarded"    # designer closed while the save was in flight


@dataclass(frozen=True)
class SubmitResult:
    outcome: SubmitOutcome
    design: DomainDesign
    errors: tuple[ValidationError, ...] = ()


def default_panels(
    kind: DomainKind,
    binder: KeyFieldBinder,
    properties_title: str = "Properties",
    fields_title: str = "Fields",
) -> list[PanelDefinition]:
    """The standard two-panel layout: entity properties, then the field editor."""

    def fields_valid(design: DomainDesign) -> bool:
        if invalid_field_indexes(design.fields):
            return False
        if design.kind.requires_key_field or key_field_indexes(design.fields):
            return binder.is_key_valid(design.fields)
        return True

    return [
        PanelDefinition(
            title=properties_title,
            kind=PanelKind.PROPERTIES,
            validator=lambda design: design.has_valid_properties(),
        ),
        PanelDefinition(title=fields_title, kind=PanelKind.FIELDS, validator=fields_valid),
    ]


class DesignerController:
    """Application service for one designer session."""

    def __init__(
        self,
        design: DomainDesign,
        saver: DomainSaver,
        *,
        binder: KeyFieldBinder | None = None,
        panels: Sequence[PanelDefinition] | None = None,
        panel_titles: tuple[str, str] = ("Properties", "Fields"),
        on_complete: Callable[[DomainDesign], None] | None = None,
    ) -> None:
        self._binder = binder or KeyFieldBinder()
        if panels is None:
            panels = default_panels(design.kind, self._binder, *panel_titles)
        self._panels = list(panels)
        self._store = PanelStateStore(len(self._panels))
        self._saver = saver
        self._on_complete = on_complete
        self._design = design
        self._state = DesignerSessionState()
        self._reported_validity: dict[int, bool] = {}
        self._server_errors: dict[int, tuple[ValidationError, ...]] = {}
        self._closed = False
        self._log = DesignerLogger("DesignerController")

        self._properties_panel = self._first_panel_of(PanelKind.PROPERTIES)
        self._fields_panel = self._first_panel_of(PanelKind.FIELDS)

    # ── Construction ─────────────────────────────────────────────────

    @classmethod
    def new(
        cls,
        kind: DomainKind,
        saver: DomainSaver,
        *,
        name: str = "",
        binder: KeyFieldBinder | None = None,
        **options: Any,
    ) -> "DesignerController":
        """Start a designer for an entity that has never been saved.

        Remaining keyword options (``panels``, ``panel_titles``,
        ``on_complete``) are passed to the constructor.
        """
        design = DomainDesign(kind=kind, name=name)
        return cls(design, saver, binder=binder, **options)

    @classmethod
    async def open(
        cls,
        loader: DomainLoader,
        domain_id: str,
        saver: DomainSaver,
        *,
        binder: KeyFieldBinder | None = None,
        **options: Any,
    ) -> "DesignerController":
        """Start a designer on an existing entity fetched through ``loader``.

        Raises:
            EntityNotFoundError: If the loader has no entity with ``domain_id``.
        """
        binder = binder or KeyFieldBinder()
        log = DesignerLogger("DesignerController")
        with log.timed_step(DesignerStage.LOAD, f"Loading domain {domain_id}"):
            loaded = await loader.load_domain(domain_id)
        design = binder.bind_loaded(loaded)
        return cls(design, saver, binder=binder, **options)

    def _first_panel_of(self, kind: PanelKind) -> int | None:
        return next((i for i, p in enumerate(self._panels) if p.kind is kind), None)

    # ── Read access ──────────────────────────────────────────────────

    @property
    def design(self) -> DomainDesign:
        return self._design

    @property
    def state(self) -> DesignerSessionState:
        return self._state

    @property
    def binder(self) -> KeyFieldBinder:
        return self._binder

    @property
    def panel_count(self) -> int:
        return len(self._panels)

    @property
    def closed(self) -> bool:
        return self._closed

    def server_errors(self, index: int) -> tuple[ValidationError, ...]:
        self._store.check_index(index)
        return self._server_errors.get(index, ())

    def panel_validity(self, index: int) -> bool:
        """Panel-local validity combined with any server errors mapped onto the panel."""
        self._store.check_index(index)
        definition = self._panels[index]
        valid = definition.validator(self._design) if definition.validator else True
        return valid and self._reported_validity.get(index, True) and not self._server_errors.get(index)

    def panels(self) -> list[PanelDescriptor]:
        descriptors = []
        for index, definition in enumerate(self._panels):
            valid = self.panel_validity(index)
            descriptors.append(
                PanelDescriptor(
                    index=index,
                    title=definition.title,
                    status=self._store.status(self._state, index, valid),
                    is_valid=valid,
                    collapsed=self._store.is_collapsed(self._state, index),
                    validate=self._state.validate_panel == index,
                )
            )
        return descriptors

    def can_save(self) -> bool:
        if self._closed or self._state.submitting:
            return False
        if not self._design.has_valid_properties():
            return False
        return all(self.panel_validity(i) for i in range(len(self._panels)))

    def key_options(self):
        return self._binder.key_options(self._design.fields)

    def bottom_error_message(self) -> str | None:
        """Banner text shown under the panels, if any."""
        if self._state.exception:
            return self._state.exception

        props = self._properties_panel
        props_invalid = props is not None and not self.panel_validity(props)
        error_panels = [
            i
            for i in range(len(self._panels))
            if i != props and i in self._state.visited_panels and not self.panel_validity(i)
        ]

        if len(error_panels) > 1 or (error_panels and props_invalid):
            return "Please correct errors above before saving."
        if self._state.visited_panels and props_invalid:
            return f"Please correct errors in the {self._panels[props].title.lower()} panel before saving."
        if len(error_panels) == 1:
            return f"Please correct errors in {self._panels[error_panels[0]].title} before saving."
        return None

    # ── Navigation ───────────────────────────────────────────────────

    def toggle_panel(self, index: int, collapsed: bool, callback: Callable[[], None] | None = None) -> None:
        self._ensure_open()
        self._state = self._store.toggle(self._state, index, collapsed)
        self._log.step_start(
            DesignerStage.PANEL,
            f"Panel {index} {'collapsed' if collapsed else 'expanded'}",
            current=self._state.current_panel_index,
            visited=sorted(self._state.visited_panels),
        )
        if callback is not None:
            callback()

    def next_panel(self) -> int | None:
        index = self._store.next_index(self._state)
        if index is not None:
            self.toggle_panel(index, collapsed=False)
        return index

    def previous_panel(self) -> int | None:
        index = self._store.previous_index(self._state)
        if index is not None:
            self.toggle_panel(index, collapsed=False)
        return index

    # ── Edits ────────────────────────────────────────────────────────

    def report_validity(self, index: int, is_valid: bool) -> None:
        self.dispatch(PanelValidityReported(index, is_valid))

    def select_key(self, target: SelectionTarget) -> DomainDesign:
        return self.dispatch(KeySelected(target))

    def dispatch(self, event: DesignerEvent) -> DomainDesign:
        """Apply one user change and return the resulting design."""
        self._ensure_open()

        if isinstance(event, PanelValidityReported):
            self._store.check_index(event.panel_index)
            self._reported_validity[event.panel_index] = event.is_valid
            return self._design

        if isinstance(event, KeySelected):
            self._apply_key_selection(event.target)
            self._touch(self._fields_panel)
        elif isinstance(event, (DomainNameChanged, DomainDescriptionChanged, TitleColumnChanged)):
            self._apply_properties_change(event)
            self._touch(self._properties_panel)
        elif isinstance(event, (FieldAdded, FieldRemoved, FieldNameChanged, FieldDataTypeChanged, FieldRequiredChanged)):
            self._apply_field_change(event)
            self._touch(self._fields_panel)
        else:
            raise TypeError(f"Unsupported designer event: {type(event).__name__}")

        return self._design

    def _apply_key_selection(self, target: SelectionTarget) -> None:
        binding = self._binder.select_key(
            self._design.key_selection,
            self._design.fields,
            target,
            locked=not self._design.is_new,
        )
        self._design = self._design.with_changes(fields=binding.fields, key_selection=binding.selection)
        self._log.step_complete(
            DesignerStage.KEY,
            f"Key is now {self._binder.key_name(binding.fields) or 'unset'}",
            key_type=self._binder.key_type(binding.fields),
        )

    def _apply_properties_change(self, event) -> None:
        if isinstance(event, DomainNameChanged):
            self._design = self._design.with_changes(name=event.name)
        elif isinstance(event, DomainDescriptionChanged):
            self._design = self._design.with_changes(description=event.description)
        else:
            if event.title_column and find_field_index(self._design.fields, event.title_column) < 0:
                raise ValueError(f"Title column '{event.title_column}' is not a field of this design")
            self._design = self._design.with_changes(title_column=event.title_column)

    def _apply_field_change(self, event) -> None:
        design = self._design
        fields = design.fields
        title_column = design.title_column

        if isinstance(event, FieldAdded):
            if event.field.is_primary_key or event.field.is_auto_increment:
                raise KeySelectionError(event.field.name, "new fields cannot carry the key; select the key instead")
            fields = with_field_appended(fields, event.field)

        elif isinstance(event, FieldRemoved):
            target = self._field_at(event.index)
            if not target.is_deletable():
                raise FieldLockedError(target.name, target.lock_type.value, "removal")
            fields = with_field_removed(fields, lambda f: f is target)
            if title_column and title_column == target.name:
                title_column = None

        elif isinstance(event, FieldNameChanged):
            target = self._check_editable(event.index, "name")
            fields = with_field_replaced(fields, event.index, name=event.name)
            # title column follows the renamed field
            if title_column and title_column == target.name:
                title_column = event.name

        elif isinstance(event, FieldDataTypeChanged):
            self._check_editable(event.index, "data_type")
            fields = with_field_replaced(fields, event.index, data_type=event.data_type)

        else:
            target = self._check_editable(event.index, "required")
            if target.is_primary_key and not event.required:
                raise FieldLockedError(target.name, "key field", "required")
            fields = with_field_replaced(fields, event.index, required=event.required)

        self._design = design.with_changes(
            fields=fields,
            key_selection=self._binder.derive_selection(fields),
            title_column=title_column,
        )

    def _field_at(self, index: int):
        fields = self._design.fields
        if not 0 <= index < len(fields):
            raise IndexError(f"Field index {index} out of range for {len(fields)} field(s)")
        return fields[index]

    def _check_editable(self, index: int, attribute: str):
        target = self._field_at(index)
        if target.is_auto_increment:
            raise FieldLockedError(target.name, PLACEHOLDER_LOCK, attribute)
        if not target.can_change(attribute):
            raise FieldLockedError(target.name, target.lock_type.value, attribute)
        return target

    def _touch(self, panel_index: int | None) -> None:
        """Record a user change: bump the generation and drop stale server errors."""
        if panel_index is not None:
            self._server_errors.pop(panel_index, None)
        exception = self._state.exception if self._server_errors else None
        self._state = replace(self._state, generation=self._state.generation + 1, exception=exception)

    # ── Save ─────────────────────────────────────────────────────────

    async def submit(self) -> SubmitResult:
        """Validate, then save the design through the domain saver.

        Panel progress is never reset by a failed save; server errors are
        mapped onto their panels, which are marked visited so they show TODO.
        """
        self._ensure_open()
        if self._state.submitting:
            raise SubmitInProgressError()

        current = self._state.current_panel_index
        state = self._state
        if current is not None:
            state = self._store.mark_visited(state, current)
        self._state = replace(state, validate_panel=current)

        if not self.can_save():
            message = self._invalid_message()
            self._state = replace(self._state, exception=message)
            self._log.step_error(DesignerStage.SUBMIT, message)
            return SubmitResult(SubmitOutcome.INVALID, self._design)

        design = self._design
        generation = self._state.generation
        self._state = replace(self._state, submitting=True, exception=None)

        failure: DomainSaveError | None = None
        try:
            with self._log.timed_step(
                DesignerStage.SUBMIT,
                f"Saving {design.kind.noun} '{design.name}'",
                fields=len(design.fields),
            ):
                result = await self._saver.save_domain(design)
        except DomainSaveError as exc:
            failure = exc
        except Exception:
            self._state = replace(self._state, submitting=False)
            raise

        if self._closed:
            logger.info("Discarding save response for closed designer '%s'", design.name)
            return SubmitResult(SubmitOutcome.DISCARDED, design)

        stale = self._state.generation != generation
        if failure is not None:
            # Transport failures carry no panel information; only the banner shows them.
            return self._on_save_failure([ValidationError(message=failure.message)], stale, map_to_panels=False)
        if isinstance(result, list):
            return self._on_save_failure(result, stale)
        return self._on_save_success(result, stale)

    def _on_save_success(self, saved: DomainDesign, stale: bool) -> SubmitResult:
        if stale:
            # The user kept editing; adopt the saved identity and locks, keep the edits.
            logger.warning("Design changed while saving; keeping local edits for '%s'", saved.name)
            self._design = self._design.with_changes(
                id=saved.id,
                fields=self._merge_saved_fields(saved.fields),
            )
            outcome = SubmitOutcome.STALE
        else:
            self._design = self._binder.bind_loaded(
                LoadedDomain(saved, key_field_name=self._binder.key_name(saved.fields))
            )
            outcome = SubmitOutcome.SAVED

        self._server_errors.clear()
        self._state = replace(self._state, submitting=False, exception=None)
        self._log.step_complete(DesignerStage.COMPLETE, f"Saved '{self._design.name}'", id=self._design.id)

        if self._on_complete is not None:
            self._on_complete(self._design)
        return SubmitResult(outcome, self._design)

    def _merge_saved_fields(self, saved_fields: FieldCollection) -> FieldCollection:
        """Copy server-assigned property ids and lock types onto the local fields.

        Fields are matched by property id, or by name for fields the server
        saw for the first time. Local names and other edits are kept.
        """
        by_property_id = {f.property_id: f for f in saved_fields if f.property_id is not None}
        merged = []
        for field in self._design.fields:
            match = by_property_id.get(field.property_id) if field.property_id is not None else None
            if match is None and field.property_id is None:
                index = find_field_index(saved_fields, field.name)
                match = saved_fields[index] if index >= 0 else None
            if match is None:
                merged.append(field)
            else:
                merged.append(field.with_changes(property_id=match.property_id, lock_type=match.lock_type))
        return tuple(merged)

    def _on_save_failure(
        self,
        errors: list[ValidationError],
        stale: bool,
        map_to_panels: bool = True,
    ) -> SubmitResult:
        errors_t = tuple(errors)
        message = self._exception_message(errors_t)
        self._state = replace(self._state, submitting=False, exception=message)

        self._server_errors = (
            self._map_errors(errors_t, trust_field_indexes=not stale) if map_to_panels else {}
        )
        if self._server_errors:
            self._state = self._store.mark_visited(self._state, *self._server_errors)

        self._log.step_error(DesignerStage.ERROR, message)
        outcome = SubmitOutcome.STALE if stale else SubmitOutcome.FAILED
        return SubmitResult(outcome, self._design, errors_t)

    def _map_errors(
        self,
        errors: tuple[ValidationError, ...],
        trust_field_indexes: bool,
    ) -> dict[int, tuple[ValidationError, ...]]:
        mapped: dict[int, list[ValidationError]] = {}
        fields = self._design.fields

        for error in errors:
            if error.severity != SEVERITY_LEVEL_ERROR:
                continue

            panel: int | None = None
            if error.panel_index is not None and 0 <= error.panel_index < len(self._panels):
                panel = error.panel_index
            elif error.is_field_error:
                by_index = (
                    trust_field_indexes
                    and error.field_index is not None
                    and 0 <= error.field_index < len(fields)
                )
                if by_index or find_field_index(fields, error.field_name) >= 0:
                    panel = self._fields_panel
            else:
                panel = self._properties_panel

            if panel is not None:
                mapped.setdefault(panel, []).append(error)

        return {panel: tuple(errs) for panel, errs in mapped.items()}

    def _exception_message(self, errors: tuple[ValidationError, ...]) -> str:
        field_errors = [e for e in errors if e.is_field_error]
        general = " ".join(e.message for e in errors if not e.is_field_error)
        if len(field_errors) > 1:
            return f"You have {len(field_errors)} field errors. {general}".strip()
        single = field_errors[0].message if field_errors else ""
        return f"{single} {general}".strip() or "The design could not be saved."

    def _invalid_message(self) -> str:
        design = self._design
        noun = design.kind.noun
        if design.kind.requires_key_field and not self._binder.is_key_valid(design.fields):
            return f"You must specify a key field for your {noun} in the fields panel to continue."
        invalid = invalid_field_indexes(design.fields)
        if invalid:
            return design.fields[invalid[0]].get_errors().value
        if not design.has_valid_properties():
            return f"Please provide a name for your {noun}."
        return "Please correct errors above before saving."

    # ── Lifecycle ────────────────────────────────────────────────────

    def close(self) -> None:
        """Unmount the designer; any save still in flight is discarded."""
        self._closed = True
        logger.debug("Designer for '%s' closed", self._design.name)

    def _ensure_open(self) -> None:
        if self._closed:
            raise DesignerClosedError()
