"""Directed-graph analysis: SCCs, condensation, topological order, DAG paths.

This package provides:
- Kosaraju strongly connected components (iterative, instrumented),
- condensation of SCCs into an acyclic component graph,
- topological sorting by DFS finish order and by Kahn's algorithm,
- single-source shortest / longest (critical) paths over a DAG.
"""

from .counters import OpCounters
from .errors import (
    CycleDetected,
    GraphInputError,
    MalformedEdgeError,
    MissingWeightError,
    SccDagError,
    StructuralViolation,
    UnknownNodeError,
)
from .graph import Digraph, build_graph
from .scc import SCCResult, find_sccs, scc_kosaraju
from .condensation import CondensationGraph, build_condensation
from .toposort import TopoResult, is_valid_order, topo_sort, topo_sort_dfs, topo_sort_kahn, topological_order
from .dag_paths import PathMode, PathResult, paths_in_dag, shortest_and_longest
from .loader import load_graph_json, parse_graph_document

__all__ = [
    "OpCounters",
    "SccDagError",
    "GraphInputError",
    "MalformedEdgeError",
    "MissingWeightError",
    "UnknownNodeError",
    "StructuralViolation",
    "CycleDetected",
    "Digraph",
    "build_graph",
    "SCCResult",
    "find_sccs",
    "scc_kosaraju",
    "CondensationGraph",
    "build_condensation",
    "TopoResult",
    "topo_sort",
    "topo_sort_dfs",
    "topo_sort_kahn",
    "topological_order",
    "is_valid_order",
    "PathMode",
    "PathResult",
    "paths_in_dag",
    "shortest_and_longest",
    "load_graph_json",
    "parse_graph_document",
]
