"""Pydantic schemas for the designer sessions API."""

from pydantic import BaseModel, Field

from domain_designer.application.services.designer_controller import SubmitOutcome
from domain_designer.domain.entities import DataTypeKind, DomainKind, KeyTarget, LockType, PanelStatus


# ── Requests ─────────────────────────────────────────────────────────


class OpenSessionRequest(BaseModel):
    """Request body for opening a designer session.

    Give ``domain_id`` to edit an existing entity, or ``kind`` to design a new one.
    """

    kind: DomainKind | None = None
    domain_id: str | None = None
    name: str = Field("", max_length=200)


class TogglePanelRequest(BaseModel):
    collapsed: bool


class PropertiesUpdate(BaseModel):
    """Schema for editing entity properties — all fields optional."""

    name: str | None = Field(None, max_length=200)
    description: str | None = None
    title_column: str | None = None


class FieldCreate(BaseModel):
    name: str = ""
    data_type: DataTypeKind = DataTypeKind.TEXT
    required: bool = False
    description: str = ""


class FieldUpdate(BaseModel):
    """Schema for editing one field — all fields optional."""

    name: str | None = None
    data_type: DataTypeKind | None = None
    required: bool | None = None


class KeySelectRequest(BaseModel):
    """A field index, ``"auto-increment"`` or ``"no-selection"``."""

    target: int | KeyTarget = Field(..., examples=[0, "auto-increment"])


# ── Responses ────────────────────────────────────────────────────────


class FieldResponse(BaseModel):
    name: str
    data_type: DataTypeKind
    is_primary_key: bool
    required: bool
    lock_type: LockType
    is_auto_increment: bool
    property_id: int | None
    description: str

    model_config = {"from_attributes": True}


class DesignResponse(BaseModel):
    id: str | None
    kind: DomainKind
    name: str
    description: str
    title_column: str | None
    key_selection: str = Field(..., examples=["none", "auto-increment", "field"])
    key_field_index: int | None
    fields: list[FieldResponse]


class PanelResponse(BaseModel):
    """What a panel needs to render itself."""

    index: int
    title: str
    status: PanelStatus
    is_valid: bool
    collapsed: bool
    validate_panel: bool


class KeyOptionResponse(BaseModel):
    label: str
    target: int | KeyTarget
    data_type: str | None


class ValidationErrorResponse(BaseModel):
    message: str
    panel_index: int | None
    field_index: int | None
    field_name: str | None
    severity: str

    model_config = {"from_attributes": True}


class DesignerSessionResponse(BaseModel):
    session_id: str
    design: DesignResponse
    panels: list[PanelResponse]
    current_panel_index: int | None
    can_save: bool
    submitting: bool
    bottom_error_message: str | None


class SubmitResponse(BaseModel):
    outcome: SubmitOutcome
    session: DesignerSessionResponse
    errors: list[ValidationErrorResponse] = Field(default_factory=list)
