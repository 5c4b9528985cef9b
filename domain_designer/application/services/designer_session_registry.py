"""Designer Session Registry — in-process store of open designer controllers."""

import logging
import uuid

from domain_designer.application.interfaces.domain_loader import DomainLoader
from domain_designer.application.interfaces.domain_saver import DomainSaver
from domain_designer.application.services.designer_controller import DesignerController
from domain_designer.application.services.key_field_binder import KeyFieldBinder
from domain_designer.domain.entities import DomainKind
from domain_designer.domain.exceptions import EntityNotFoundError

logger = logging.getLogger("DesignerSessionRegistry")


class DesignerSessionRegistry:
    """Keeps one DesignerController per session id.

    The HTTP surface is stateless, so each open designer lives here until
    it is closed. Closing a session closes its controller, which discards
    any save still in flight.
    """

    def __init__(
        self,
        loader: DomainLoader,
        saver: DomainSaver,
        binder: KeyFieldBinder,
        panel_titles: tuple[str, str] = ("Properties", "Fields"),
    ) -> None:
        self._loader = loader
        self._saver = saver
        self._binder = binder
        self._panel_titles = panel_titles
        self._sessions: dict[str, DesignerController] = {}

    async def open_session(
        self,
        kind: DomainKind | None = None,
        domain_id: str | None = None,
        name: str = "",
    ) -> tuple[str, DesignerController]:
        """Open a designer on an existing entity (``domain_id``) or a new one of ``kind``.

        Raises:
            EntityNotFoundError: If ``domain_id`` is unknown to the loader.
            ValueError: If neither ``kind`` nor ``domain_id`` is given.
        """
        if domain_id is not None:
            controller = await DesignerController.open(
                self._loader,
                domain_id,
                self._saver,
                binder=self._binder,
                panel_titles=self._panel_titles,
            )
        elif kind is not None:
            controller = DesignerController.new(
                kind,
                self._saver,
                name=name,
                binder=self._binder,
                panel_titles=self._panel_titles,
            )
        else:
            raise ValueError("Either a domain kind or a domain id is required")

        session_id = str(uuid.uuid4())
        self._sessions[session_id] = controller
        logger.info(
            "Opened designer session %s for %s '%s'",
            session_id,
            controller.design.kind.noun,
            controller.design.name,
        )
        return session_id, controller

    def get(self, session_id: str) -> DesignerController:
        controller = self._sessions.get(session_id)
        if controller is None:
            raise EntityNotFoundError("DesignerSession", session_id)
        return controller

    def close_session(self, session_id: str) -> None:
        controller = self._sessions.pop(session_id, None)
        if controller is None:
            raise EntityNotFoundError("DesignerSession", session_id)
        controller.close()
        logger.info("Closed designer session %s", session_id)

    def close_all(self) -> None:
        """Close every open session (application shutdown)."""
        for controller in self._sessions.values():
            controller.close()
        self._sessions.clear()

    @property
    def session_count(self) -> int:
        return len(self._sessions)
