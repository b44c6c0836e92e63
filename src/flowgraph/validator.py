from pathlib import Path
from typing import List, Optional, Tuple

import networkx as nx
from pydantic import BaseModel

from .errors import MalformedDocumentError, UnknownTypeError
from .ir import Connection, Graph, WorkflowDocument
from .loader import load_document_file
from .registry import resolve_edge_renderer, resolve_node_renderer


class ConnectionPolicy(BaseModel):
    allow_self_loops: bool = False
    # Parallel edges between the same handles are accepted unless turned off here.
    allow_parallel_edges: bool = True
    enforce_handles: bool = False


DEFAULT_POLICY = ConnectionPolicy()


def connection_problem(candidate: Connection, graph: Graph,
                       policy: Optional[ConnectionPolicy] = None) -> Optional[str]:
    """Return why ``candidate`` is not admissible, or None if it is."""
    policy = policy or DEFAULT_POLICY

    source = graph.nodes.get(candidate.source)
    target = graph.nodes.get(candidate.target)
    if source is None:
        return f"source node '{candidate.source}' does not exist"
    if target is None:
        return f"target node '{candidate.target}' does not exist"

    if candidate.source == candidate.target and not policy.allow_self_loops:
        return "self-loops are not allowed"

    if not policy.allow_parallel_edges:
        for e in graph.edges.values():
            if (e.source == candidate.source and e.target == candidate.target and
                    e.source_handle == candidate.source_handle and
                    e.target_handle == candidate.target_handle):
                return f"parallel to existing edge '{e.id}'"

    if policy.enforce_handles:
        if candidate.source_handle not in source.output_handles():
            return f"'{candidate.source}' has no output handle {candidate.source_handle!r}"
        if candidate.target_handle not in target.input_handles():
            return f"'{candidate.target}' has no input handle {candidate.target_handle!r}"

    return None


def is_valid_connection(candidate: Connection, graph: Graph,
                        policy: Optional[ConnectionPolicy] = None) -> bool:
    return connection_problem(candidate, graph, policy) is None


def audit_document(doc: WorkflowDocument) -> Tuple[bool, List[str]]:
    """Check a document and report every problem found, not only the first."""
    messages: List[str] = []
    ok = True

    # 1) Unique node ids
    node_ids = {n.id for n in doc.nodes}
    if len(node_ids) != len(doc.nodes):
        ok = False
        messages.append("ERR: Duplicate node IDs detected.")
    else:
        messages.append("OK: Node IDs are unique.")

    # 2) Known type tags
    caps = {}
    types_ok = True
    for n in doc.nodes:
        try:
            caps[n.id] = resolve_node_renderer(n.type, n.id)
        except UnknownTypeError as e:
            types_ok = False
            messages.append(f"ERR: {e}")
    for e in doc.edges:
        try:
            resolve_edge_renderer(e.type, e.id)
        except UnknownTypeError as err:
            types_ok = False
            messages.append(f"ERR: {err}")
    if types_ok:
        messages.append("OK: All node and edge types are registered.")
    ok = ok and types_ok

    # 3) Unique edge ids
    if len({e.id for e in doc.edges}) != len(doc.edges):
        ok = False
        messages.append("ERR: Duplicate edge IDs detected.")
    else:
        messages.append("OK: Edge IDs are unique.")

    # 4) Edges refer to existing nodes
    refs_ok = True
    for e in doc.edges:
        if e.source not in node_ids or e.target not in node_ids:
            refs_ok = False
            messages.append(f"ERR: Edge {e.id} ({e.source}->{e.target}) references missing node(s).")
    if refs_ok:
        messages.append("OK: All edges reference existing nodes.")
    ok = ok and refs_ok

    # 5) Handles declared by the node types
    data = {n.id: n.data for n in doc.nodes}
    handles_ok = True
    for e in doc.edges:
        if e.source in caps and (e.sourceHandle or None) not in caps[e.source].output_handles(data[e.source]):
            handles_ok = False
            messages.append(f"WARN: Edge {e.id} leaves {e.source} through undeclared handle {e.sourceHandle!r}.")
        if e.target in caps and (e.targetHandle or None) not in caps[e.target].input_handles(data[e.target]):
            handles_ok = False
            messages.append(f"WARN: Edge {e.id} enters {e.target} through undeclared handle {e.targetHandle!r}.")
    if handles_ok:
        messages.append("OK: All edge handles are declared by their nodes.")

    # 6) Self-loops load, but the default connection policy would refuse them
    loops = [e for e in doc.edges if e.source == e.target]
    for e in loops:
        messages.append(f"WARN: Edge {e.id} is a self-loop on {e.source}.")
    if not loops:
        messages.append("OK: No self-loops.")

    # 7) Cycles are legal in a workflow but worth pointing out
    nxg = nx.MultiDiGraph()
    nxg.add_nodes_from(node_ids)
    for e in doc.edges:
        if e.source in node_ids and e.target in node_ids:
            nxg.add_edge(e.source, e.target)
    if nx.is_directed_acyclic_graph(nxg):
        messages.append("OK: Graph is acyclic.")
    else:
        messages.append("WARN: Cycle detected in the graph.")

    return ok, messages


def validate_document_from_file(path: Path) -> Tuple[bool, List[str]]:
    try:
        doc = load_document_file(path)
    except MalformedDocumentError as e:
        return False, [f"ERR: {e}"]
    return audit_document(doc)
