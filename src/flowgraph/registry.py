"""Type registry for workflow nodes and edges.

Every node and edge carries a string tag. The registry maps each accepted tag
to a capability record describing how that variant behaves on the canvas:
which handles a node exposes, and whether an edge renders an animated
gradient. Unknown tags are never defaulted; they raise UnknownTypeError.

Node handle layout (``None`` is the unnamed default handle):

  module    in: default        out: default + one per data.functions[].id
  function  in: default        out: none (attaches below a module/tool)
  if        in: default        out: "true", "false"
  idle      in: default        out: default
  tool      in: "top"          out: one per data.functions[].id

Legacy document tags (moduleNode, ai-agent, functionNode, if-node,
idle-node, tool-ai) resolve to the same capabilities.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import UnknownTypeError


class NodeType(str, Enum):
    MODULE = "module"
    FUNCTION = "function"
    IF = "if"
    IDLE = "idle"
    TOOL = "tool"


class EdgeType(str, Enum):
    ANIMATED_GRADIENT = "animatedGradient"
    BEZIER = "bezier"


@dataclass(frozen=True)
class NodeCapability:
    type: NodeType
    default_label: str
    inputs: Tuple[Optional[str], ...] = (None,)
    outputs: Tuple[Optional[str], ...] = ()
    function_outputs: bool = False   # one extra output handle per data.functions entry
    aliases: Tuple[str, ...] = ()

    def input_handles(self, data: Mapping[str, Any]) -> List[Optional[str]]:
        return list(self.inputs)

    def output_handles(self, data: Mapping[str, Any]) -> List[Optional[str]]:
        handles = list(self.outputs)
        if self.function_outputs:
            for func in data.get("functions") or []:
                if isinstance(func, Mapping) and func.get("id"):
                    handles.append(str(func["id"]))
        return handles


@dataclass(frozen=True)
class EdgeCapability:
    type: EdgeType
    gradient: bool = False


NODE_CAPABILITIES: Dict[NodeType, NodeCapability] = {
    NodeType.MODULE: NodeCapability(
        NodeType.MODULE, "Module",
        outputs=(None,), function_outputs=True,
        aliases=("moduleNode", "ai-agent"),
    ),
    NodeType.FUNCTION: NodeCapability(
        NodeType.FUNCTION, "Function",
        aliases=("functionNode",),
    ),
    NodeType.IF: NodeCapability(
        NodeType.IF, "IF",
        outputs=("true", "false"),
        aliases=("if-node",),
    ),
    NodeType.IDLE: NodeCapability(
        NodeType.IDLE, "Idle",
        outputs=(None,),
        aliases=("idle-node",),
    ),
    NodeType.TOOL: NodeCapability(
        NodeType.TOOL, "Tool",
        inputs=("top",), function_outputs=True,
        aliases=("tool-ai",),
    ),
}

EDGE_CAPABILITIES: Dict[EdgeType, EdgeCapability] = {
    EdgeType.ANIMATED_GRADIENT: EdgeCapability(EdgeType.ANIMATED_GRADIENT, gradient=True),
    EdgeType.BEZIER: EdgeCapability(EdgeType.BEZIER),
}

_NODE_LOOKUP: Dict[str, NodeCapability] = {}
for _cap in NODE_CAPABILITIES.values():
    _NODE_LOOKUP[_cap.type.value] = _cap
    for _alias in _cap.aliases:
        _NODE_LOOKUP[_alias] = _cap

_EDGE_LOOKUP: Dict[str, EdgeCapability] = {c.type.value: c for c in EDGE_CAPABILITIES.values()}

NODE_TAGS = frozenset(_NODE_LOOKUP)
EDGE_TAGS = frozenset(_EDGE_LOOKUP)


def resolve_node_renderer(tag: str, record_id: Optional[str] = None) -> NodeCapability:
    if isinstance(tag, Enum):
        tag = tag.value
    try:
        return _NODE_LOOKUP[tag]
    except (KeyError, TypeError):
        raise UnknownTypeError(tag, record_id) from None


def resolve_edge_renderer(tag: str, record_id: Optional[str] = None) -> EdgeCapability:
    if isinstance(tag, Enum):
        tag = tag.value
    try:
        return _EDGE_LOOKUP[tag]
    except (KeyError, TypeError):
        raise UnknownTypeError(tag, record_id) from None
