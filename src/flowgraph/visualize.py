import networkx as nx
from .ir import Graph


def _handle(h):
    return "" if h is None else f".{h}"


def ascii_plan(g: Graph) -> str:
    nxg = nx.MultiDiGraph()
    nxg.add_nodes_from(g.nodes)
    for e in g.edges.values():
        nxg.add_edge(e.source, e.target)

    try:
        order = list(nx.topological_sort(nxg))
        lines = ["# ASCII Plan (topological order)"]
    except nx.NetworkXUnfeasible:
        order = list(g.nodes)
        lines = ["# ASCII Plan (graph has a cycle; document order)"]

    for i, nid in enumerate(order, 1):
        node = g.nodes[nid]
        lines.append(f"{i:02d}. {node.id} [{node.kind.value}] {node.label}")
        for e in g.outgoing(nid):
            label = f"  \"{e.data.label}\"" if e.data.label else ""
            lines.append(f"    └─▶ {e.target}  ({e.id}: {e.source}{_handle(e.source_handle)}"
                         f" -> {e.target}{_handle(e.target_handle)}, {e.type}){label}")
    return "\n".join(lines)
