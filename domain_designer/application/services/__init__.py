from .designer_controller import DesignerController, SubmitOutcome, SubmitResult, default_panels
from .designer_session_registry import DesignerSessionRegistry
from .key_field_binder import KeyFieldBinder
from .panel_state_store import PanelStateStore

__all__ = [
    "DesignerController",
    "SubmitOutcome",
    "SubmitResult",
    "default_panels",
    "DesignerSessionRegistry",
    "KeyFieldBinder",
    "PanelStateStore",
]
