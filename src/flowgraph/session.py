"""Edit session: turns pointer gestures into graph store mutations.

States and transitions:

  IDLE            down on a source handle  -> CONNECTING_EDGE
                  down on a node body      -> DRAGGING_NODE (node selected)
                  down on an edge          -> select edge, stay IDLE
                  down on the canvas       -> clear selection, stay IDLE
  CONNECTING_EDGE move                     -> re-check hovered handle (feedback only)
                  up on a valid target     -> add_edge, IDLE
                  up anywhere else         -> discard, IDLE
  DRAGGING_NODE   move                     -> move_node
                  up                       -> IDLE
  any             leave / cancel()         -> IDLE, pending connection dropped

A drag that is cancelled keeps the position of its last move.
"""

from __future__ import annotations
import logging
import uuid
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .ir import Connection, Edge, Position
from .settings import EditorSettings
from .store import GraphStore

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    CONNECTING_EDGE = "connecting_edge"
    DRAGGING_NODE = "dragging_node"


class PointerKind(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    LEAVE = "leave"


class TargetRef(BaseModel):
    """What the pointer is over."""
    kind: Literal["node", "handle", "edge", "canvas"] = "canvas"
    node_id: Optional[str] = None
    handle_id: Optional[str] = None       # None is the node's unnamed handle
    handle_type: Optional[Literal["source", "target"]] = None
    edge_id: Optional[str] = None


class PointerEvent(BaseModel):
    kind: PointerKind
    target: TargetRef = Field(default_factory=TargetRef)
    position: Position = Field(default_factory=Position)


class PendingConnection(BaseModel):
    source: str
    source_handle: Optional[str] = None
    cursor: Position = Field(default_factory=Position)
    hovered: Optional[Connection] = None
    valid: Optional[bool] = None


class EditSession:
    def __init__(self, store: GraphStore, settings: Optional[EditorSettings] = None):
        self.store = store
        self.settings = settings or EditorSettings()
        if settings is not None:
            store.policy = settings.connection
        self.state = SessionState.IDLE
        self.pending: Optional[PendingConnection] = None
        self._drag_node: Optional[str] = None
        self._drag_offset = Position()

    @classmethod
    def from_document(cls, document, settings: Optional[EditorSettings] = None) -> "EditSession":
        settings = settings or EditorSettings()
        return cls(GraphStore.from_document(document, settings.connection), settings)

    @property
    def feedback(self) -> Optional[bool]:
        """Validity of the handle currently hovered while connecting."""
        return self.pending.valid if self.pending is not None else None

    def handle(self, event: PointerEvent) -> SessionState:
        if event.kind == PointerKind.LEAVE:
            self.cancel()
        elif self.state == SessionState.IDLE:
            if event.kind == PointerKind.DOWN:
                self._press(event)
        elif self.state == SessionState.CONNECTING_EDGE:
            if event.kind == PointerKind.MOVE:
                self._hover(event)
            elif event.kind == PointerKind.UP:
                self._release_connection(event)
        elif self.state == SessionState.DRAGGING_NODE:
            if event.kind == PointerKind.MOVE:
                self.store.move_node(self._drag_node, Position(
                    x=event.position.x - self._drag_offset.x,
                    y=event.position.y - self._drag_offset.y,
                ))
            elif event.kind == PointerKind.UP:
                self._set_state(SessionState.IDLE)
                self._drag_node = None
        return self.state

    def cancel(self) -> None:
        if self.state == SessionState.CONNECTING_EDGE:
            logger.info("connection from %s cancelled", self.pending.source)
        self.pending = None
        self._drag_node = None
        self._set_state(SessionState.IDLE)

    # -- Transitions --

    def _set_state(self, state: SessionState) -> None:
        if state != self.state:
            logger.debug("session %s -> %s", self.state.value, state.value)
        self.state = state

    def _press(self, event: PointerEvent) -> None:
        target = event.target
        if target.kind == "handle":
            # Connections start from output handles only
            if target.handle_type == "source" and target.node_id is not None:
                self.store.get_node(target.node_id)
                self.pending = PendingConnection(
                    source=target.node_id,
                    source_handle=target.handle_id,
                    cursor=event.position,
                )
                self._set_state(SessionState.CONNECTING_EDGE)
            return

        if target.kind == "node" and target.node_id is not None:
            node = self.store.get_node(target.node_id)
            self.store.select_node(node.id)
            self._drag_node = node.id
            self._drag_offset = Position(x=event.position.x - node.position.x,
                                         y=event.position.y - node.position.y)
            self._set_state(SessionState.DRAGGING_NODE)
            return

        if target.kind == "edge" and target.edge_id is not None:
            self.store.select_edge(target.edge_id)
            return

        if target.kind == "canvas":
            self.store.clear_selection()

    def _candidate(self, target: TargetRef) -> Optional[Connection]:
        if target.kind != "handle" or target.handle_type != "target" or target.node_id is None:
            return None
        return Connection(
            source=self.pending.source,
            target=target.node_id,
            source_handle=self.pending.source_handle,
            target_handle=target.handle_id,
        )

    def _hover(self, event: PointerEvent) -> None:
        candidate = self._candidate(event.target)
        self.pending.cursor = event.position
        self.pending.hovered = candidate
        self.pending.valid = None if candidate is None else self.store.can_connect(candidate)

    def _release_connection(self, event: PointerEvent) -> None:
        candidate = self._candidate(event.target)
        pending, self.pending = self.pending, None
        self._set_state(SessionState.IDLE)
        if candidate is None:
            logger.info("connection from %s dropped on %s", pending.source, event.target.kind)
            return
        if not self.store.can_connect(candidate):
            logger.info("connection %s->%s rejected", candidate.source, candidate.target)
            return
        self.store.add_edge(Edge(
            id=self._new_edge_id(),
            source=candidate.source,
            target=candidate.target,
            source_handle=candidate.source_handle,
            target_handle=candidate.target_handle,
            type=self.settings.default_edge_type.value,
            animated=self.settings.default_edge_animated,
        ))

    def _new_edge_id(self) -> str:
        while True:
            edge_id = f"{self.settings.edge_id_prefix}-{uuid.uuid4().hex[:8]}"
            if not self.store.has_edge(edge_id):
                return edge_id
