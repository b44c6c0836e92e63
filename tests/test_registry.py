import pytest

from flowgraph.errors import MalformedDocumentError, UnknownTypeError
from flowgraph.registry import (
    EDGE_TAGS, NODE_TAGS, EdgeType, NodeType,
    resolve_edge_renderer, resolve_node_renderer,
)


def test_canonical_and_legacy_tags_resolve():
    assert resolve_node_renderer("module").type is NodeType.MODULE
    assert resolve_node_renderer("ai-agent").type is NodeType.MODULE
    assert resolve_node_renderer("tool-ai").type is NodeType.TOOL
    assert resolve_node_renderer("if-node").type is NodeType.IF
    assert resolve_node_renderer(NodeType.IDLE).type is NodeType.IDLE
    assert resolve_edge_renderer("animatedGradient").gradient
    assert not resolve_edge_renderer(EdgeType.BEZIER).gradient
    assert {t.value for t in NodeType} <= NODE_TAGS
    assert EDGE_TAGS == {"animatedGradient", "bezier"}


def test_unknown_tag_carries_tag_and_record():
    with pytest.raises(UnknownTypeError) as exc:
        resolve_node_renderer("loop", "n7")
    assert exc.value.tag == "loop"
    assert exc.value.record_id == "n7"
    assert isinstance(exc.value, MalformedDocumentError)

    with pytest.raises(UnknownTypeError):
        resolve_edge_renderer("straight", "e9")


def test_handle_layout():
    funcs = {"functions": [{"id": "fetch", "label": "Fetch"}, {"id": "rank", "label": "Rank"}]}
    module = resolve_node_renderer("module")
    assert module.input_handles({}) == [None]
    assert module.output_handles(funcs) == [None, "fetch", "rank"]

    tool = resolve_node_renderer("tool")
    assert tool.input_handles({}) == ["top"]
    assert tool.output_handles(funcs) == ["fetch", "rank"]

    assert resolve_node_renderer("if").output_handles({}) == ["true", "false"]
    assert resolve_node_renderer("function").output_handles(funcs) == []
