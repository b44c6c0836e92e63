from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Any, Literal

from .registry import EdgeType, NodeType, resolve_edge_renderer, resolve_node_renderer


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


# -- Document records (external input, camelCase as written by the canvas) --

class NodeRecord(BaseModel):
    id: str
    type: str
    position: Position = Field(default_factory=Position)
    data: Dict[str, Any] = Field(default_factory=dict)


class EdgeRecord(BaseModel):
    id: str
    source: str
    target: str
    type: str
    animated: bool = False
    label: Optional[str] = None
    sourceHandle: Optional[str] = None
    targetHandle: Optional[str] = None


class WorkflowDocument(BaseModel):
    nodes: List[NodeRecord] = Field(default_factory=list)
    edges: List[EdgeRecord] = Field(default_factory=list)


# -- In-memory graph --

class Node(BaseModel):
    id: str = Field(frozen=True)
    type: str = Field(frozen=True)   # tag as written in the document
    position: Position = Field(default_factory=Position)
    data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def kind(self) -> NodeType:
        return resolve_node_renderer(self.type, self.id).type

    @property
    def label(self) -> str:
        return self.data.get("label") or resolve_node_renderer(self.type, self.id).default_label

    def input_handles(self) -> List[Optional[str]]:
        return resolve_node_renderer(self.type, self.id).input_handles(self.data)

    def output_handles(self) -> List[Optional[str]]:
        return resolve_node_renderer(self.type, self.id).output_handles(self.data)


class EdgeData(BaseModel):
    label: Optional[str] = None


class Connection(BaseModel):
    """A proposed edge, before it has an id."""
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None


class Edge(BaseModel):
    id: str = Field(frozen=True)
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    type: str = EdgeType.BEZIER.value
    animated: bool = False
    data: EdgeData = Field(default_factory=EdgeData)

    @property
    def kind(self) -> EdgeType:
        return resolve_edge_renderer(self.type, self.id).type

    def connection(self) -> Connection:
        return Connection(source=self.source, target=self.target,
                          source_handle=self.source_handle, target_handle=self.target_handle)


class Selection(BaseModel):
    kind: Literal["node", "edge"]
    id: str


class Graph(BaseModel):
    nodes: Dict[str, Node] = Field(default_factory=dict)
    edges: Dict[str, Edge] = Field(default_factory=dict)
    selection: Optional[Selection] = None

    def edges_for_node(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges.values()
                if e.source == node_id or e.target == node_id]

    def outgoing(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges.values() if e.source == node_id]
