"""Workflow graph model and interactive edit session."""

from .errors import (
    FlowGraphError, MalformedDocumentError, UnknownTypeError,
    GraphEditError, DuplicateIdError, NotFoundError, InvalidConnectionError,
)
from .registry import NodeType, EdgeType, resolve_node_renderer, resolve_edge_renderer
from .ir import (
    Position, NodeRecord, EdgeRecord, WorkflowDocument,
    Node, Edge, EdgeData, Connection, Selection, Graph,
)
from .loader import load, dump, load_file, load_document_file, save_document, load_template
from .validator import ConnectionPolicy, is_valid_connection, connection_problem, audit_document
from .settings import EditorSettings, load_settings
from .store import GraphStore
from .session import EditSession, SessionState, PointerEvent, PointerKind, TargetRef

__all__ = [
    "FlowGraphError", "MalformedDocumentError", "UnknownTypeError",
    "GraphEditError", "DuplicateIdError", "NotFoundError", "InvalidConnectionError",
    "NodeType", "EdgeType", "resolve_node_renderer", "resolve_edge_renderer",
    "Position", "NodeRecord", "EdgeRecord", "WorkflowDocument",
    "Node", "Edge", "EdgeData", "Connection", "Selection", "Graph",
    "load", "dump", "load_file", "load_document_file", "save_document", "load_template",
    "ConnectionPolicy", "is_valid_connection", "connection_problem", "audit_document",
    "EditorSettings", "load_settings",
    "GraphStore",
    "EditSession", "SessionState", "PointerEvent", "PointerKind", "TargetRef",
]
