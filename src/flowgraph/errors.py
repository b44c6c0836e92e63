from __future__ import annotations
from typing import Any, Optional


class FlowGraphError(Exception):
    """Base class for everything raised by flowgraph."""


class MalformedDocumentError(FlowGraphError, ValueError):
    """A workflow document cannot be turned into a graph. Nothing was loaded."""


class UnknownTypeError(MalformedDocumentError):
    def __init__(self, tag: str, record_id: Optional[str] = None):
        self.tag = tag
        self.record_id = record_id
        where = f" on record '{record_id}'" if record_id is not None else ""
        super().__init__(f"Unknown type tag '{tag}'{where}.")


class GraphEditError(FlowGraphError):
    """A store mutation was refused; the graph is unchanged."""


class DuplicateIdError(GraphEditError):
    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"A {kind} with id '{item_id}' already exists.")


class NotFoundError(GraphEditError, LookupError):
    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"No {kind} with id '{item_id}'.")


class InvalidConnectionError(GraphEditError):
    def __init__(self, connection: Any, reason: str):
        self.connection = connection
        self.reason = reason
        super().__init__(f"Connection {connection.source}->{connection.target} rejected: {reason}")
