"""Designer session endpoints — drive a DesignerController over HTTP."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from domain_designer.application.schemas.designer import (
    DesignerSessionResponse,
    DesignResponse,
    FieldCreate,
    FieldResponse,
    FieldUpdate,
    KeyOptionResponse,
    KeySelectRequest,
    OpenSessionRequest,
    PanelResponse,
    PropertiesUpdate,
    SubmitResponse,
    TogglePanelRequest,
    ValidationErrorResponse,
)
from domain_designer.application.services import DesignerController, DesignerSessionRegistry
from domain_designer.domain.entities import (
    AutoIncrementKey,
    DomainDescriptionChanged,
    DomainDesign,
    DomainNameChanged,
    Field,
    FieldAdded,
    FieldDataTypeChanged,
    FieldKey,
    FieldNameChanged,
    FieldRemoved,
    FieldRequiredChanged,
    TitleColumnChanged,
)
from domain_designer.domain.exceptions import (
    DesignerClosedError,
    EntityNotFoundError,
    FieldLockedError,
    LockedKeyFieldError,
    SubmitInProgressError,
)
from domain_designer.infrastructure.dependencies import get_session_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/designer-sessions", tags=["Designer Sessions"])


# ── Helpers ──────────────────────────────────────────────────────────


def _design_to_response(design: DomainDesign) -> DesignResponse:
    """Map a DomainDesign to its API response."""
    selection = design.key_selection
    if isinstance(selection, FieldKey):
        key_selection, key_field_index = "field", selection.field_index
    elif isinstance(selection, AutoIncrementKey):
        key_selection, key_field_index = "auto-increment", None
    else:
        key_selection, key_field_index = "none", None

    return DesignResponse(
        id=design.id,
        kind=design.kind,
        name=design.name,
        description=design.description,
        title_column=design.title_column,
        key_selection=key_selection,
        key_field_index=key_field_index,
        fields=[FieldResponse.model_validate(f, from_attributes=True) for f in design.fields],
    )


def _session_to_response(session_id: str, controller: DesignerController) -> DesignerSessionResponse:
    """Map a controller's current state to the session response."""
    return DesignerSessionResponse(
        session_id=session_id,
        design=_design_to_response(controller.design),
        panels=[
            PanelResponse(
                index=p.index,
                title=p.title,
                status=p.status,
                is_valid=p.is_valid,
                collapsed=p.collapsed,
                validate_panel=p.validate,
            )
            for p in controller.panels()
        ],
        current_panel_index=controller.state.current_panel_index,
        can_save=controller.can_save(),
        submitting=controller.state.submitting,
        bottom_error_message=controller.bottom_error_message(),
    )


def _http_error(exc: Exception) -> HTTPException:
    """Map a designer exception to an HTTP error."""
    if isinstance(exc, EntityNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (LockedKeyFieldError, FieldLockedError, SubmitInProgressError, DesignerClosedError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    # PanelIndexError, KeySelectionError, bad field index or title column
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(exc))


_DESIGNER_ERRORS = (
    EntityNotFoundError,
    LockedKeyFieldError,
    FieldLockedError,
    SubmitInProgressError,
    DesignerClosedError,
    IndexError,
    ValueError,
)


def _get_controller(registry: DesignerSessionRegistry, session_id: str) -> DesignerController:
    try:
        return registry.get(session_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# ── Sessions ─────────────────────────────────────────────────────────


@router.post("", response_model=DesignerSessionResponse, status_code=status.HTTP_201_CREATED)
async def open_session(
    request: OpenSessionRequest,
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> DesignerSessionResponse:
    """Open a designer on a new entity of ``kind`` or on an existing ``domain_id``."""
    try:
        session_id, controller = await registry.open_session(
            kind=request.kind,
            domain_id=request.domain_id,
            name=request.name,
        )
    except (EntityNotFoundError, ValueError) as e:
        raise _http_error(e)
    return _session_to_response(session_id, controller)


@router.get("/{session_id}", response_model=DesignerSessionResponse)
async def get_session(
    session_id: str,
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> DesignerSessionResponse:
    """Current design, panel descriptors and save state."""
    controller = _get_controller(registry, session_id)
    return _session_to_response(session_id, controller)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    session_id: str,
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> None:
    """Close the designer; a save still in flight is discarded."""
    try:
        registry.close_session(session_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# ── Panels ───────────────────────────────────────────────────────────


@router.post("/{session_id}/panels/next", response_model=DesignerSessionResponse)
async def next_panel(
    session_id: str,
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> DesignerSessionResponse:
    controller = _get_controller(registry, session_id)
    try:
        controller.next_panel()
    except _DESIGNER_ERRORS as e:
        raise _http_error(e)
    return _session_to_response(session_id, controller)


@router.post("/{session_id}/panels/previous", response_model=DesignerSessionResponse)
async def previous_panel(
    session_id: str,
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> DesignerSessionResponse:
    controller = _get_controller(registry, session_id)
    try:
        controller.previous_panel()
    except _DESIGNER_ERRORS as e:
        raise _http_error(e)
    return _session_to_response(session_id, controller)


@router.post("/{session_id}/panels/{index}/toggle", response_model=DesignerSessionResponse)
async def toggle_panel(
    session_id: str,
    index: int,
    request: TogglePanelRequest,
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> DesignerSessionResponse:
    """Expand or collapse a panel."""
    controller = _get_controller(registry, session_id)
    try:
        controller.toggle_panel(index, request.collapsed)
    except _DESIGNER_ERRORS as e:
        raise _http_error(e)
    return _session_to_response(session_id, controller)


# ── Properties ───────────────────────────────────────────────────────


@router.patch("/{session_id}/properties", response_model=DesignerSessionResponse)
async def update_properties(
    session_id: str,
    data: PropertiesUpdate,
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> DesignerSessionResponse:
    """Edit the entity name, description or title column."""
    controller = _get_controller(registry, session_id)
    try:
        if data.name is not None:
            controller.dispatch(DomainNameChanged(data.name))
        if data.description is not None:
            controller.dispatch(DomainDescriptionChanged(data.description))
        if "title_column" in data.model_fields_set:
            controller.dispatch(TitleColumnChanged(data.title_column))
    except _DESIGNER_ERRORS as e:
        raise _http_error(e)
    return _session_to_response(session_id, controller)


# ── Fields ───────────────────────────────────────────────────────────


@router.post("/{session_id}/fields", response_model=DesignerSessionResponse, status_code=status.HTTP_201_CREATED)
async def add_field(
    session_id: str,
    data: FieldCreate,
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> DesignerSessionResponse:
    controller = _get_controller(registry, session_id)
    new_field = Field(
        name=data.name,
        data_type=data.data_type,
        required=data.required,
        description=data.description,
    )
    try:
        controller.dispatch(FieldAdded(new_field))
    except _DESIGNER_ERRORS as e:
        raise _http_error(e)
    return _session_to_response(session_id, controller)


@router.patch("/{session_id}/fields/{index}", response_model=DesignerSessionResponse)
async def update_field(
    session_id: str,
    index: int,
    data: FieldUpdate,
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> DesignerSessionResponse:
    """Edit one field; locked attributes are rejected with 409."""
    controller = _get_controller(registry, session_id)
    try:
        if data.name is not None:
            controller.dispatch(FieldNameChanged(index, data.name))
        if data.data_type is not None:
            controller.dispatch(FieldDataTypeChanged(index, data.data_type))
        if data.required is not None:
            controller.dispatch(FieldRequiredChanged(index, data.required))
    except _DESIGNER_ERRORS as e:
        raise _http_error(e)
    return _session_to_response(session_id, controller)


@router.delete("/{session_id}/fields/{index}", response_model=DesignerSessionResponse)
async def remove_field(
    session_id: str,
    index: int,
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> DesignerSessionResponse:
    controller = _get_controller(registry, session_id)
    try:
        controller.dispatch(FieldRemoved(index))
    except _DESIGNER_ERRORS as e:
        raise _http_error(e)
    return _session_to_response(session_id, controller)


# ── Key field ────────────────────────────────────────────────────────


@router.get("/{session_id}/key-options", response_model=list[KeyOptionResponse])
async def list_key_options(
    session_id: str,
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> list[KeyOptionResponse]:
    """Choices for the key-field selector."""
    controller = _get_controller(registry, session_id)
    return [
        KeyOptionResponse(label=o.label, target=o.target, data_type=o.data_type)
        for o in controller.key_options()
    ]


@router.post("/{session_id}/key", response_model=DesignerSessionResponse)
async def select_key(
    session_id: str,
    request: KeySelectRequest,
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> DesignerSessionResponse:
    """Move the key to a field, to the auto-increment key, or clear it."""
    controller = _get_controller(registry, session_id)
    try:
        controller.select_key(request.target)
    except _DESIGNER_ERRORS as e:
        raise _http_error(e)
    return _session_to_response(session_id, controller)


# ── Save ─────────────────────────────────────────────────────────────


@router.post("/{session_id}/submit", response_model=SubmitResponse)
async def submit(
    session_id: str,
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> SubmitResponse:
    """Validate and save the design.

    Validation failures are not HTTP errors: the outcome and the errors
    mapped onto panels are returned in the body.
    """
    controller = _get_controller(registry, session_id)
    try:
        result = await controller.submit()
    except _DESIGNER_ERRORS as e:
        raise _http_error(e)

    return SubmitResponse(
        outcome=result.outcome,
        session=_session_to_response(session_id, controller),
        errors=[ValidationErrorResponse.model_validate(e, from_attributes=True) for e in result.errors],
    )
