from __future__ import annotations

import dataclasses
import math

import numpy as np
import pytest

from sccdag import GraphInputError, MalformedEdgeError, UnknownNodeError, build_graph


def test_undeclared_endpoints_are_added():
    g = build_graph(["A"], [("A", "B"), ("C", "A")])
    assert g.node_ids == ("A", "B", "C")
    assert g.n == 3
    assert g.m == 2
    assert all(u in g and v in g for u, v, _ in g.edges())


def test_adjacency_keeps_insertion_order_and_parallel_edges():
    g = build_graph([], [("A", "C"), ("A", "B"), ("A", "C")])
    assert g.successors()[g.index_of("A")] == [g.index_of("C"), g.index_of("B"), g.index_of("C")]
    assert g.transpose()[g.index_of("C")] == [g.index_of("A"), g.index_of("A")]
    assert g.to_csr()[g.index_of("A"), g.index_of("C")] == 2


def test_weights_are_optional_for_unweighted_graphs():
    g = build_graph([], [("A", "B"), ("B", "C", 2.5)])
    assert list(g.edges()) == [("A", "B", None), ("B", "C", 2.5)]
    assert not g.weighted


@pytest.mark.parametrize(
    "edge",
    [
        ("A",),
        ("A", "B", 1, 2),
        "AB",
        ("A", ""),
        ("A", 3),
        ("A", "B", "heavy"),
        ("A", "B", True),
        ("A", "B", math.nan),
        ("A", "B", math.inf),
    ],
)
def test_malformed_edges_are_skipped_and_counted(edge):
    g = build_graph(["A", "B"], [("A", "B"), edge])
    assert g.m == 1
    assert g.skipped_edges == 1
    assert g.skipped == (edge,)


def test_malformed_edge_raise_policy():
    with pytest.raises(MalformedEdgeError) as exc_info:
        build_graph([], [("A", "B"), ("A", "B", "C", "D")], on_malformed="raise")
    assert "expected 2 or 3 elements" in str(exc_info.value)
    assert isinstance(exc_info.value, GraphInputError)


def test_weighted_graph_requires_every_weight():
    g = build_graph([], [("A", "B", 1), ("B", "C")], weighted=True)
    assert g.m == 1
    assert g.skipped_edges == 1
    with pytest.raises(MalformedEdgeError):
        build_graph([], [("A", "B")], weighted=True, on_malformed="raise")


def test_unknown_policy_and_bad_node_ids():
    with pytest.raises(ValueError):
        build_graph([], [], on_malformed="ignore")
    with pytest.raises(GraphInputError):
        build_graph(["A", 7], [])


def test_graph_is_immutable():
    g = build_graph([], [("A", "B", 1)], weighted=True)
    with pytest.raises(dataclasses.FrozenInstanceError):
        g.weighted = False
    with pytest.raises(ValueError):
        g.w[0] = 5.0
    assert np.array_equal(g.src, [0])


def test_index_of_unknown_node():
    g = build_graph(["A"], [])
    with pytest.raises(UnknownNodeError) as exc_info:
        g.index_of("Q")
    assert isinstance(exc_info.value, KeyError)
    assert "Q" in str(exc_info.value)


def test_empty_graph():
    g = build_graph([], [])
    assert g.n == 0 and g.m == 0
    assert g.successors() == []
    assert g.to_csr().shape == (0, 0)


def test_fully_weighted():
    assert build_graph([], [("A", "B", 1.5), ("B", "C", 0)]).fully_weighted
    assert not build_graph([], [("A", "B", 1.5), ("B", "C")]).fully_weighted
    assert build_graph(["A"], []).fully_weighted
