from __future__ import annotations

import json

import pytest

from sccdag import GraphInputError, MalformedEdgeError, load_graph_json, parse_graph_document


def _write(tmp_path, doc, name="graph.json"):
    path = tmp_path / name
    path.write_text(json.dumps(doc) if not isinstance(doc, str) else doc, encoding="utf-8")
    return path


def test_load_unweighted_and_weighted(tmp_path):
    path = _write(tmp_path, {"nodes": ["V1", "V2"], "edges": [["V1", "V2", 3], ["V2", "V3", 1]]})
    g = load_graph_json(path)
    assert g.node_ids == ("V1", "V2", "V3")
    w = load_graph_json(path, weighted=True)
    assert w.weighted
    assert [e[2] for e in w.edges()] == [3.0, 1.0]


def test_malformed_edges_are_counted(tmp_path):
    path = _write(tmp_path, {"nodes": ["A"], "edges": [["A", "B"], ["A"], ["A", "B", "C", "D"]]})
    g = load_graph_json(path)
    assert g.m == 1
    assert g.skipped_edges == 2
    with pytest.raises(MalformedEdgeError):
        load_graph_json(path, on_malformed="raise")


def test_missing_file_is_an_input_error(tmp_path):
    with pytest.raises(GraphInputError, match="File not found"):
        load_graph_json(tmp_path / "nope.json")


def test_invalid_json_is_an_input_error(tmp_path):
    path = _write(tmp_path, "{nodes: [")
    with pytest.raises(GraphInputError, match="Invalid JSON"):
        load_graph_json(path)


@pytest.mark.parametrize(
    "doc",
    [
        [],
        {"nodes": ["A"]},
        {"edges": []},
        {"nodes": "A", "edges": []},
        {"nodes": [], "edges": {"A": "B"}},
    ],
)
def test_bad_documents(doc):
    with pytest.raises(GraphInputError):
        parse_graph_document(doc)


def test_non_utf8_file_is_an_input_error(tmp_path):
    path = tmp_path / "latin.json"
    path.write_bytes(b'{"nodes": ["\xff\xfe"], "edges": []}')
    with pytest.raises(GraphInputError, match="not valid UTF-8"):
        load_graph_json(path)
