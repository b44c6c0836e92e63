from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, Mapping, Union
import json

import yaml
from pydantic import ValidationError

from .errors import MalformedDocumentError
from .ir import Edge, EdgeData, EdgeRecord, Graph, Node, NodeRecord, WorkflowDocument
from .registry import resolve_edge_renderer, resolve_node_renderer

TEMPLATES = {"feel": "feel_workflow"}


def _as_document(document: Union[WorkflowDocument, Mapping[str, Any]]) -> WorkflowDocument:
    if isinstance(document, WorkflowDocument):
        return document
    if not isinstance(document, Mapping):
        raise MalformedDocumentError(
            f"Workflow document must be a mapping with 'nodes' and 'edges', got {type(document).__name__}.")
    try:
        return WorkflowDocument.model_validate(document)
    except ValidationError as e:
        raise MalformedDocumentError(f"Workflow document has the wrong shape: {e}") from e


def load(document: Union[WorkflowDocument, Mapping[str, Any]]) -> Graph:
    """Build a graph from a workflow document.

    All records are checked before anything is returned; the first problem
    raises MalformedDocumentError (UnknownTypeError for bad type tags) and no
    graph is produced. The document itself is left untouched.
    """
    doc = _as_document(document)

    nodes: Dict[str, Node] = {}
    for rec in doc.nodes:
        resolve_node_renderer(rec.type, rec.id)
        if rec.id in nodes:
            raise MalformedDocumentError(f"Duplicate node id '{rec.id}'.")
        nodes[rec.id] = Node(
            id=rec.id,
            type=rec.type,
            position=rec.position.model_copy(),
            data=dict(rec.data),
        )

    edges: Dict[str, Edge] = {}
    for rec in doc.edges:
        resolve_edge_renderer(rec.type, rec.id)
        if rec.source not in nodes:
            raise MalformedDocumentError(f"Edge '{rec.id}' references missing source node '{rec.source}'.")
        if rec.target not in nodes:
            raise MalformedDocumentError(f"Edge '{rec.id}' references missing target node '{rec.target}'.")
        if rec.id in edges:
            raise MalformedDocumentError(f"Duplicate edge id '{rec.id}'.")
        fields: Dict[str, Any] = {
            "id": rec.id,
            "source": rec.source,
            "target": rec.target,
            "type": rec.type,
            "animated": rec.animated,
            "data": EdgeData(label=rec.label),
        }
        # Handles are only set when the record has a non-empty one.
        if rec.sourceHandle:
            fields["source_handle"] = rec.sourceHandle
        if rec.targetHandle:
            fields["target_handle"] = rec.targetHandle
        edges[rec.id] = Edge(**fields)

    return Graph(nodes=nodes, edges=edges)


def dump(graph: Graph) -> WorkflowDocument:
    """Turn a graph back into document records."""
    return WorkflowDocument(
        nodes=[
            NodeRecord(id=n.id, type=n.type, position=n.position.model_copy(), data=dict(n.data))
            for n in graph.nodes.values()
        ],
        edges=[
            EdgeRecord(
                id=e.id, source=e.source, target=e.target,
                type=e.type, animated=e.animated, label=e.data.label,
                sourceHandle=e.source_handle, targetHandle=e.target_handle,
            )
            for e in graph.edges.values()
        ],
    )


def load_document_file(path: Path) -> WorkflowDocument:
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise MalformedDocumentError(f"Could not parse {path}: {e}") from e
    return _as_document(data)


def load_file(path: Path) -> Graph:
    return load(load_document_file(path))


def save_document(document: WorkflowDocument, path: Path) -> None:
    path = Path(path)
    data = document.model_dump(exclude_none=True)
    if path.suffix.lower() == ".json":
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    else:
        path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")


def _load_template_yaml(name: str) -> str:
    pkg = files('flowgraph.templates')
    return (pkg / f"{name}.yaml").read_text(encoding="utf-8")


def load_template(name: str) -> WorkflowDocument:
    name = name.lower()
    if name not in TEMPLATES:
        raise ValueError(f"Unknown template '{name}'. Use one of: {', '.join(sorted(TEMPLATES))}")
    data = yaml.safe_load(_load_template_yaml(TEMPLATES[name]))
    return WorkflowDocument(**data)
