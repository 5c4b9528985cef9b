from .designer import (
    OpenSessionRequest,
    TogglePanelRequest,
    PropertiesUpdate,
    FieldCreate,
    FieldUpdate,
    KeySelectRequest,
    FieldResponse,
    DesignResponse,
    PanelResponse,
    KeyOptionResponse,
    ValidationErrorResponse,
    DesignerSessionResponse,
    SubmitResponse,
)

__all__ = [
    "OpenSessionRequest",
    "TogglePanelRequest",
    "PropertiesUpdate",
    "FieldCreate",
    "FieldUpdate",
    "KeySelectRequest",
    "FieldResponse",
    "DesignResponse",
    "PanelResponse",
    "KeyOptionResponse",
    "ValidationErrorResponse",
    "DesignerSessionResponse",
    "SubmitResponse",
]
