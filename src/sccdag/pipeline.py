from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Union

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from .condensation import CondensationGraph, build_condensation
from .dag_paths import PathResult, shortest_and_longest
from .graph import Digraph
from .loader import load_graph_json
from .scc import SCCResult, find_sccs
from .toposort import TopoResult, topo_sort_dfs, topo_sort_kahn

logger = logging.getLogger(__name__)

# default source / target node ids for path reports
DEFAULT_SOURCE = "V1"
DEFAULT_TARGET = "V6"


@dataclass(frozen=True, eq=False)
class ComponentAnalysis:
    graph: Digraph
    sccs: SCCResult
    condensation: CondensationGraph
    dfs_order: TopoResult
    kahn_order: TopoResult

    @property
    def graph_is_dag(self) -> bool:
        """Every SCC is a singleton and no node has a self-loop."""
        if self.sccs.n_components != self.graph.n:
            return False
        return not any(u == v for u, v in zip(self.graph.src, self.graph.dst))

    def component_order(self, method: str = "kahn") -> List[str]:
        labels = self.sccs.labels()
        result = self.kahn_order if method == "kahn" else self.dfs_order
        return [labels[c] for c in result.order]

    def task_order(self, method: str = "kahn") -> List[str]:
        result = self.kahn_order if method == "kahn" else self.dfs_order
        return self.condensation.expand_order(result.order)


@dataclass(frozen=True, eq=False)
class PathAnalysis:
    graph: Digraph
    source: str
    shortest: PathResult
    longest: PathResult


def analyze_components(graph: Digraph) -> ComponentAnalysis:
    """SCCs -> condensation -> DFS and Kahn orders of the condensation.

    The condensation is acyclic by construction; a cycle there raises
    StructuralViolation.
    """
    sccs = find_sccs(graph)
    cond = build_condensation(graph, sccs)
    succ = cond.successors()
    dfs_order = topo_sort_dfs(succ)
    kahn_order = topo_sort_kahn(succ)
    cond.assert_acyclic()
    return ComponentAnalysis(
        graph=graph, sccs=sccs, condensation=cond, dfs_order=dfs_order, kahn_order=kahn_order,
    )


def analyze_paths(graph: Digraph, source: str = DEFAULT_SOURCE, *, method: str = "dfs") -> PathAnalysis:
    """Shortest and longest paths from `source`; the graph itself must be a DAG."""
    shortest, longest = shortest_and_longest(graph, source, method=method)
    return PathAnalysis(graph=graph, source=source, shortest=shortest, longest=longest)


# ---------------------------------------------------------------------------
# report tables

def scc_table(sccs: SCCResult) -> pd.DataFrame:
    rows = []
    for cid, label in enumerate(sccs.labels()):
        members = sorted(sccs.members(cid))
        rows.append({"scc": label, "size": len(members), "members": ", ".join(members)})
    return pd.DataFrame(rows, columns=["scc", "size", "members"])


def condensation_table(cond: CondensationGraph) -> pd.DataFrame:
    labels = cond.sccs.labels()
    rows = []
    for cid, targets in enumerate(cond.successors()):
        rows.append({
            "scc": labels[cid],
            "out_degree": len(targets),
            "successors": ", ".join(labels[t] for t in targets),
        })
    return pd.DataFrame(rows, columns=["scc", "out_degree", "successors"])


def distance_table(paths: PathAnalysis, order: Sequence[str] | None = None) -> pd.DataFrame:
    """One row per node: shortest and longest distance from the source.

    Unreachable nodes keep their +inf / -inf sentinels and `reachable=False`.
    """
    if order is None:
        order = paths.graph.node_ids
    rows = []
    for node in order:
        rows.append({
            "node": node,
            "shortest": paths.shortest.distance(node),
            "longest": paths.longest.distance(node),
            "reachable": paths.shortest.is_reachable(node),
        })
    return pd.DataFrame(rows, columns=["node", "shortest", "longest", "reachable"])


def instrumentation_table(stages: Dict[str, object]) -> pd.DataFrame:
    """Long-format counters: stage name -> an object carrying `.counters`."""
    rows = []
    for stage, holder in stages.items():
        for counter, value in holder.counters.as_dict().items():
            if value:
                rows.append({"stage": stage, "counter": counter, "value": int(value)})
    return pd.DataFrame(rows, columns=["stage", "counter", "value"])


# ---------------------------------------------------------------------------
# batch runs over graph files

def run_batch(
    paths: Sequence[Union[str, Path]],
    *,
    source: str = DEFAULT_SOURCE,
    on_malformed: str = "skip",
    progress: bool = True,
) -> pd.DataFrame:
    """Component analysis (and paths, where the graph is a weighted DAG) per file.

    Returns one row per file with sizes, counters and elapsed milliseconds.
    Files that fail to load propagate GraphInputError.
    """
    rows = []
    for path in tqdm(list(paths), desc="Graphs", disable=not progress):
        path = Path(path)
        t0 = time.perf_counter()
        graph = load_graph_json(path, weighted=False, on_malformed=on_malformed)
        comp = analyze_components(graph)
        row = {
            "graph": path.name,
            "n": graph.n,
            "m": graph.m,
            "skipped_edges": graph.skipped_edges,
            "n_sccs": comp.sccs.n_components,
            "condensation_edges": comp.condensation.m,
            "dfs_visits": comp.sccs.counters.dfs_visits,
            "dfs_edges": comp.sccs.counters.dfs_edges,
            "kahn_pushes": comp.kahn_order.counters.queue_pushes,
            "kahn_pops": comp.kahn_order.counters.queue_pops,
            "relax_shortest": None,
            "relax_longest": None,
        }

        if comp.graph_is_dag and source in graph:
            if graph.fully_weighted:
                weighted = load_graph_json(path, weighted=True, on_malformed=on_malformed)
                paths_res = analyze_paths(weighted, source)
                row["relax_shortest"] = paths_res.shortest.relaxations
                row["relax_longest"] = paths_res.longest.relaxations
            else:
                logger.info("%s: %d edge(s) lack weights, skipping paths", path.name, int(np.isnan(graph.w).sum()))

        row["elapsed_ms"] = (time.perf_counter() - t0) * 1000.0
        rows.append(row)

    return pd.DataFrame(rows)
