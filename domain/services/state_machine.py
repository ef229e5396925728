from __future__ import annotations

import logging

from domain.models import Payload, StateChangedInfo, parse_fsm_info, parse_state_changed
from domain.services.diagram import Diagram, LayoutConfig, NodeMatch
from domain.services.svg import SvgElement, to_xml

logger = logging.getLogger(__name__)

INITIAL_STATE_PREFIX = "initial"


def build_key(client_id: str, fsm_name: str) -> str:
    return f"{client_id} - {fsm_name}"


class StateMachine:
    """Live diagram of one machine reported by one client.

    ``on_set_machine`` replaces the diagram wholesale; ``on_state_changed``
    only restyles the affected nodes of the existing layout.
    """

    def __init__(
        self, client_id: str, fsm_name: str, layout_config: LayoutConfig | None = None
    ) -> None:
        self.client_id = client_id
        self.fsm_name = fsm_name
        self.layout_config = layout_config
        self.diagram: Diagram | None = None
        self.svg_doc: SvgElement | None = None

    @property
    def key(self) -> str:
        return build_key(self.client_id, self.fsm_name)

    @property
    def svg_markup(self) -> str:
        if self.svg_doc is None:
            return ""
        return to_xml(self.svg_doc)

    def on_set_machine(self, payload: Payload) -> StateMachine:
        try:
            fsm = parse_fsm_info(payload)
        except ValueError:
            logger.exception("Invalid machine description for %s", self.key)
            raise
        diagram = Diagram(fsm, self.layout_config)
        self.diagram = diagram
        self.svg_doc = diagram.svg_document()
        return self

    def on_state_changed(self, payload: Payload) -> StateMachine:
        diagram = self.diagram
        if diagram is None or self.svg_doc is None:
            return self
        try:
            info = parse_state_changed(payload)
        except ValueError:
            logger.exception("Invalid state change for %s", self.key)
            raise

        logger.info("%s: %s ==> %s", info.fsm, info.old_state_name, info.new_state_name)
        self._reset_node_or_all(diagram.find_node(info.old_state_id), info)
        new_match = diagram.find_node(info.new_state_id)
        if new_match is not None:
            new_match.node.highlight()
        return self

    @staticmethod
    def _reset_node_or_all(match: NodeMatch | None, info: StateChangedInfo) -> None:
        if match is None:
            return
        # Leaving an initial state means the (sub)chart was just entered.
        if info.old_state_name.lower().startswith(INITIAL_STATE_PREFIX):
            match.diagram.reset_all()
        else:
            match.node.reset()
