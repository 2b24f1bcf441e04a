from __future__ import annotations

from typing import List, Tuple

import numpy as np
import pytest

from sccdag import Digraph, build_graph

DIAMOND_EDGES = [
    ("A", "B", 1),
    ("A", "C", 4),
    ("B", "C", 2),
    ("B", "D", 5),
    ("C", "D", 1),
]


@pytest.fixture
def diamond() -> Digraph:
    return build_graph(["A", "B", "C", "D"], DIAMOND_EDGES, weighted=True)


@pytest.fixture
def two_cycle() -> Digraph:
    """X <-> Y plus the isolated node Z."""
    return build_graph(["X", "Y", "Z"], [("X", "Y"), ("Y", "X")])


@pytest.fixture
def chained_cycles() -> Digraph:
    """Two 3-cycles joined by parallel edges, feeding a sink."""
    edges = [
        ("a1", "a2"), ("a2", "a3"), ("a3", "a1"),
        ("b1", "b2"), ("b2", "b3"), ("b3", "b1"),
        ("a1", "b1"), ("a2", "b2"), ("a3", "b1"),
        ("b3", "sink"), ("sink", "sink"),
    ]
    return build_graph([], edges)


def random_edges(
    seed: int,
    n: int,
    m: int,
    *,
    acyclic: bool = False,
    weighted: bool = False,
) -> Tuple[List[str], List[tuple]]:
    """Random node ids and edges; with `acyclic` edges only go forward in a hidden rank."""
    rng = np.random.default_rng(seed)
    nodes = [f"v{i}" for i in rng.permutation(n)]
    edges = []
    for _ in range(m):
        i, j = (int(x) for x in rng.integers(0, n, size=2))
        if acyclic:
            if i == j:
                continue
            i, j = min(i, j), max(i, j)
        edge: tuple = (nodes[i], nodes[j])
        if weighted:
            edge += (int(rng.integers(0, 10)),)
        edges.append(edge)
    return nodes, edges


def random_graph(seed: int, n: int = 30, m: int = 60, *, acyclic: bool = False, weighted: bool = False) -> Digraph:
    nodes, edges = random_edges(seed, n, m, acyclic=acyclic, weighted=weighted)
    return build_graph(nodes, edges, weighted=weighted)
