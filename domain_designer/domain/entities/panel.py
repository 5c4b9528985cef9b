"""Domain entities for designer panels and the per-session panel state."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .domain_design import DomainDesign


class PanelStatus(str, Enum):
    """Display status of a panel header."""

    NONE = "NONE"
    TODO = "TODO"
    INPROGRESS = "INPROGRESS"
    COMPLETE = "COMPLETE"


class PanelKind(str, Enum):
    PROPERTIES = "properties"
    FIELDS = "fields"
    CUSTOM = "custom"


@dataclass(frozen=True)
class PanelDefinition:
    """Static description of a panel, before any session exists.

    ``validator`` computes the panel-local validity from the design; panels
    without one rely on the validity they report themselves.
    """

    title: str
    kind: PanelKind = PanelKind.CUSTOM
    validator: "Callable[[DomainDesign], bool] | None" = None


@dataclass(frozen=True)
class PanelDescriptor:
    """A panel as seen by a renderer at one moment of the session."""

    index: int
    title: str
    status: PanelStatus
    is_valid: bool
    collapsed: bool
    validate: bool = False


@dataclass(frozen=True)
class DesignerSessionState:
    """Navigation and submit state of one designer session.

    ``visited_panels`` only ever grows. ``generation`` is bumped on every
    user-originated change so late network responses can be recognised.
    """

    current_panel_index: int | None = None
    current_collapsed: bool = False
    visited_panels: frozenset[int] = field(default_factory=frozenset)
    first_state: bool = True
    submitting: bool = False
    validate_panel: int | None = None
    generation: int = 0
    exception: str | None = None
