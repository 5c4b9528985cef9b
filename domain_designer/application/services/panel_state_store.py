"""Panel State Store — panel status rules and navigation transitions.

The store holds no state of its own. Every operation takes the current
DesignerSessionState and returns a new one, so the controller owns the
single copy of the session.
"""

import logging
from collections.abc import Sequence
from dataclasses import replace

from domain_designer.domain.entities import DesignerSessionState, PanelStatus
from domain_designer.domain.exceptions import PanelIndexError

logger = logging.getLogger(__name__)


def compute_status(
    index: int,
    current_panel_index: int | None,
    visited_panels: frozenset[int],
    first_state: bool,
    local_valid: bool,
) -> PanelStatus:
    """Display status of panel ``index``.

    No error colouring is shown before the user has interacted with the
    designer, and a panel keeps reporting its problems once visited.
    """
    is_current = index == current_panel_index
    visited = index in visited_panels

    if first_state and not visited and not is_current:
        return PanelStatus.NONE
    if is_current:
        return PanelStatus.INPROGRESS
    if visited and local_valid:
        return PanelStatus.COMPLETE
    if visited:
        return PanelStatus.TODO
    return PanelStatus.NONE


class PanelStateStore:
    """Transition rules for the panels of one designer."""

    def __init__(self, panel_count: int) -> None:
        if panel_count < 1:
            raise ValueError("A designer needs at least one panel")
        self._panel_count = panel_count

    @property
    def panel_count(self) -> int:
        return self._panel_count

    def check_index(self, index: int) -> None:
        if not 0 <= index < self._panel_count:
            raise PanelIndexError(index, self._panel_count)

    # ── Status ───────────────────────────────────────────────────────

    def status(self, state: DesignerSessionState, index: int, local_valid: bool) -> PanelStatus:
        self.check_index(index)
        return compute_status(
            index,
            state.current_panel_index,
            state.visited_panels,
            state.first_state,
            local_valid,
        )

    def statuses(self, state: DesignerSessionState, validity: Sequence[bool]) -> list[PanelStatus]:
        if len(validity) != self._panel_count:
            raise ValueError(f"Expected {self._panel_count} validity flags, got {len(validity)}")
        return [self.status(state, i, valid) for i, valid in enumerate(validity)]

    def is_collapsed(self, state: DesignerSessionState, index: int) -> bool:
        self.check_index(index)
        return index != state.current_panel_index or state.current_collapsed

    # ── Transitions ──────────────────────────────────────────────────

    def toggle(self, state: DesignerSessionState, index: int, collapsed: bool) -> DesignerSessionState:
        """Apply a panel expand (``collapsed=False``) or collapse.

        Expanding makes the panel current and visited, and asks the panel
        being left to validate. Collapsing the current panel keeps it
        current; collapsing any other panel changes nothing.
        """
        self.check_index(index)
        previous = state.current_panel_index

        if not collapsed:
            logger.debug("Expanding panel %d (previous=%s)", index, previous)
            return replace(
                state,
                current_panel_index=index,
                current_collapsed=False,
                visited_panels=state.visited_panels | {index},
                first_state=False,
                validate_panel=previous,
            )

        if previous == index:
            logger.debug("Collapsing current panel %d", index)
            return replace(
                state,
                current_collapsed=True,
                first_state=False,
                validate_panel=index,
            )

        return state

    def mark_visited(self, state: DesignerSessionState, *indexes: int) -> DesignerSessionState:
        for index in indexes:
            self.check_index(index)
        merged = state.visited_panels | frozenset(indexes)
        if merged == state.visited_panels:
            return state
        return replace(state, visited_panels=merged)

    # ── Wizard stepping ──────────────────────────────────────────────

    def next_index(self, state: DesignerSessionState) -> int | None:
        """Panel a "next" action should open, or None on the last panel."""
        current = state.current_panel_index
        if current is None:
            return 0
        if current + 1 >= self._panel_count:
            return None
        return current + 1

    def previous_index(self, state: DesignerSessionState) -> int | None:
        current = state.current_panel_index
        if current is None or current == 0:
            return None
        return current - 1
