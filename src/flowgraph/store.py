"""Graph store: the single owner of an editing session's graph.

Every mutation checks everything it needs before touching state, so a
refused call leaves the graph exactly as it was. Successful mutations push
a fresh snapshot to each subscriber; refused ones push nothing. A subscriber
that raises does not stop the others; its error reaches the caller once the
committed change has been delivered to everyone.
"""

from __future__ import annotations
import logging
from typing import Any, Callable, List, Mapping, Optional, Union

from .errors import DuplicateIdError, InvalidConnectionError, NotFoundError
from .ir import Connection, Edge, Graph, Node, Position, Selection, WorkflowDocument
from .loader import dump, load
from .registry import resolve_edge_renderer, resolve_node_renderer
from .validator import ConnectionPolicy, DEFAULT_POLICY, connection_problem

logger = logging.getLogger(__name__)

Subscriber = Callable[[Graph], None]


def _adopt(graph: Graph) -> Graph:
    """Private, checked copy of a caller's graph (MalformedDocumentError if inconsistent)."""
    adopted = load(dump(graph))
    sel = graph.selection
    if sel is not None and sel.id in (adopted.nodes if sel.kind == "node" else adopted.edges):
        adopted.selection = sel.model_copy()
    return adopted


class GraphStore:
    """Mutable graph for one editing session."""

    def __init__(self, graph: Optional[Graph] = None,
                 policy: Optional[ConnectionPolicy] = None):
        self._graph = _adopt(graph) if graph is not None else Graph()
        self.policy = policy or DEFAULT_POLICY
        self._subscribers: List[Subscriber] = []

    @classmethod
    def from_document(cls, document: Union[WorkflowDocument, Mapping[str, Any]],
                      policy: Optional[ConnectionPolicy] = None) -> "GraphStore":
        return cls(load(document), policy)

    # -- Observation --

    def snapshot(self) -> Graph:
        return self._graph.model_copy(deep=True)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    def _changed(self, what: str) -> None:
        logger.debug("graph changed: %s", what)
        # Every subscriber hears about the change; the first failure is re-raised after.
        error = None
        for callback in list(self._subscribers):
            try:
                callback(self.snapshot())
            except Exception as e:
                logger.exception("subscriber %r failed", callback)
                if error is None:
                    error = e
        if error is not None:
            raise error

    # -- Queries --

    def _node(self, node_id: str) -> Node:
        try:
            return self._graph.nodes[node_id]
        except KeyError:
            raise NotFoundError("node", node_id) from None

    def _edge(self, edge_id: str) -> Edge:
        try:
            return self._graph.edges[edge_id]
        except KeyError:
            raise NotFoundError("edge", edge_id) from None

    def get_node(self, node_id: str) -> Node:
        return self._node(node_id).model_copy(deep=True)

    def get_edge(self, edge_id: str) -> Edge:
        return self._edge(edge_id).model_copy(deep=True)

    def has_edge(self, edge_id: str) -> bool:
        return edge_id in self._graph.edges

    def edges_for_node(self, node_id: str) -> List[Edge]:
        return [e.model_copy(deep=True) for e in self._graph.edges_for_node(node_id)]

    def can_connect(self, candidate: Connection) -> bool:
        return connection_problem(candidate, self._graph, self.policy) is None

    @property
    def selection(self) -> Optional[Selection]:
        return self._graph.selection

    # -- Nodes --

    def add_node(self, node: Node) -> None:
        if node.id in self._graph.nodes:
            raise DuplicateIdError("node", node.id)
        resolve_node_renderer(node.type, node.id)
        self._graph.nodes[node.id] = node.model_copy(deep=True)
        self._changed(f"add node {node.id}")

    def move_node(self, node_id: str, position: Position) -> None:
        node = self._node(node_id)
        node.position = Position(x=position.x, y=position.y)
        self._changed(f"move node {node_id}")

    def remove_node(self, node_id: str) -> None:
        self._node(node_id)
        doomed = [e.id for e in self._graph.edges_for_node(node_id)]
        for edge_id in doomed:
            del self._graph.edges[edge_id]
        del self._graph.nodes[node_id]
        sel = self._graph.selection
        if sel is not None and ((sel.kind == "node" and sel.id == node_id) or
                                (sel.kind == "edge" and sel.id in doomed)):
            self._graph.selection = None
        self._changed(f"remove node {node_id} (+{len(doomed)} edges)")

    # -- Edges --

    def add_edge(self, edge: Edge) -> None:
        if edge.id in self._graph.edges:
            raise DuplicateIdError("edge", edge.id)
        resolve_edge_renderer(edge.type, edge.id)
        candidate = edge.connection()
        problem = connection_problem(candidate, self._graph, self.policy)
        if problem is not None:
            raise InvalidConnectionError(candidate, problem)
        self._graph.edges[edge.id] = edge.model_copy(deep=True)
        self._changed(f"add edge {edge.id} {edge.source}->{edge.target}")

    def remove_edge(self, edge_id: str) -> None:
        self._edge(edge_id)
        del self._graph.edges[edge_id]
        sel = self._graph.selection
        if sel is not None and sel.kind == "edge" and sel.id == edge_id:
            self._graph.selection = None
        self._changed(f"remove edge {edge_id}")

    # -- Selection --

    def select_node(self, node_id: str) -> None:
        self._node(node_id)
        self._graph.selection = Selection(kind="node", id=node_id)
        self._changed(f"select node {node_id}")

    def select_edge(self, edge_id: str) -> None:
        self._edge(edge_id)
        self._graph.selection = Selection(kind="edge", id=edge_id)
        self._changed(f"select edge {edge_id}")

    def clear_selection(self) -> None:
        self._graph.selection = None
        self._changed("clear selection")
