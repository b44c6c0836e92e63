import json
from pathlib import Path

import pytest

from flowgraph.errors import MalformedDocumentError, UnknownTypeError
from flowgraph.loader import dump, load, load_file, load_template, save_document
from flowgraph.ir import WorkflowDocument


def _doc():
    return {
        "nodes": [
            {"id": "a", "type": "module", "position": {"x": 10, "y": 20.5},
             "data": {"label": "Analyst", "functions": [{"id": "f", "label": "F"}]}},
            {"id": "b", "type": "function", "position": {"x": -3, "y": 0}, "data": {"label": "F"}},
            {"id": "c", "type": "if-node", "position": {"x": 100, "y": 40}, "data": {"label": "Check"}},
        ],
        "edges": [
            {"id": "e1", "source": "a", "target": "b", "type": "bezier", "animated": False,
             "sourceHandle": "f"},
            {"id": "e2", "source": "a", "target": "c", "type": "animatedGradient", "animated": True,
             "label": "Analysis"},
        ],
    }


def test_load_preserves_records():
    doc = _doc()
    g = load(doc)
    assert len(g.nodes) == 3
    assert len(g.edges) == 2
    a = g.nodes["a"]
    assert a.type == "module"
    assert (a.position.x, a.position.y) == (10, 20.5)
    assert a.data == doc["nodes"][0]["data"]
    assert g.nodes["c"].type == "if-node"

    e1, e2 = g.edges["e1"], g.edges["e2"]
    assert (e1.source, e1.target, e1.type, e1.animated) == ("a", "b", "bezier", False)
    assert e1.source_handle == "f"
    assert e1.data.label is None
    assert e2.source_handle is None
    assert e2.target_handle is None
    assert e2.animated is True
    assert e2.data.label == "Analysis"
    assert g.selection is None


def test_load_does_not_touch_document():
    doc = _doc()
    before = json.dumps(doc, sort_keys=True)
    g = load(doc)
    g.nodes["a"].data["label"] = "changed"
    assert json.dumps(doc, sort_keys=True) == before


def test_minimal_records_get_defaults():
    g = load({"nodes": [{"id": "a", "type": "module"}, {"id": "b", "type": "function"}],
              "edges": [{"id": "e1", "source": "a", "target": "b", "type": "bezier", "animated": False}]})
    assert len(g.nodes) == 2
    assert len(g.edges) == 1
    assert g.nodes["b"].data == {}
    assert g.nodes["b"].label == "Function"


@pytest.mark.parametrize("mutate, exc", [
    (lambda d: d["edges"].append({"id": "e3", "source": "a", "target": "z", "type": "bezier"}),
     MalformedDocumentError),
    (lambda d: d["edges"].append({"id": "e3", "source": "z", "target": "a", "type": "bezier"}),
     MalformedDocumentError),
    (lambda d: d["nodes"].append({"id": "a", "type": "idle"}), MalformedDocumentError),
    (lambda d: d["edges"].append(dict(d["edges"][0])), MalformedDocumentError),
    (lambda d: d["nodes"].append({"id": "q", "type": "loop"}), UnknownTypeError),
    (lambda d: d["edges"][0].update(type="straight"), UnknownTypeError),
    (lambda d: d["nodes"][0].pop("type"), MalformedDocumentError),
])
def test_malformed_documents_are_rejected(mutate, exc):
    doc = _doc()
    mutate(doc)
    with pytest.raises(exc):
        load(doc)


def test_unknown_type_reports_record():
    doc = _doc()
    doc["nodes"].append({"id": "q", "type": "loop"})
    with pytest.raises(UnknownTypeError) as err:
        load(doc)
    assert (err.value.tag, err.value.record_id) == ("loop", "q")


def test_non_mapping_document():
    with pytest.raises(MalformedDocumentError):
        load(["not", "a", "document"])


def test_dump_round_trips_through_files(tmp_path: Path):
    g = load(_doc())
    for name in ("wf.yaml", "wf.json"):
        path = tmp_path / name
        save_document(dump(g), path)
        again = load_file(path)
        assert again.model_dump() == g.model_dump()
    raw = json.loads((tmp_path / "wf.json").read_text())
    assert "sourceHandle" not in raw["edges"][1]
    assert "label" not in raw["edges"][0]


def test_unparseable_file(tmp_path: Path):
    path = tmp_path / "broken.yaml"
    path.write_text("nodes: [\n")
    with pytest.raises(MalformedDocumentError):
        load_file(path)


def test_bundled_template_loads():
    doc = load_template("feel")
    assert isinstance(doc, WorkflowDocument)
    g = load(doc)
    assert "quality-check" in g.nodes
    assert g.edges["e3"].source_handle == "true"
    with pytest.raises(ValueError):
        load_template("nope")


def test_empty_handles_count_as_absent():
    doc = _doc()
    doc["edges"][0]["sourceHandle"] = ""
    doc["edges"][1]["targetHandle"] = ""
    g = load(doc)
    assert g.edges["e1"].source_handle is None
    assert g.edges["e2"].target_handle is None
