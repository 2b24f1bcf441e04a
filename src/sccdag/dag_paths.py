from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .counters import OpCounters
from .errors import MissingWeightError, StructuralViolation
from .graph import Digraph
from .toposort import is_valid_order, topo_sort

logger = logging.getLogger(__name__)


class PathMode(enum.Enum):
    SHORTEST = "shortest"
    LONGEST = "longest"

    @property
    def unreached(self) -> float:
        return np.inf if self is PathMode.SHORTEST else -np.inf


@dataclass(frozen=True, eq=False)
class PathResult:
    """Distances and predecessors from one relaxation pass.

    `dist[v]` is the unreached sentinel (+inf for SHORTEST, -inf for LONGEST)
    when v cannot be reached from the source; `pred[v]` is -1 for none.
    """

    graph: Digraph
    source: int
    mode: PathMode
    dist: np.ndarray
    pred: np.ndarray
    counters: OpCounters

    @property
    def relaxations(self) -> int:
        return self.counters.relaxations

    @property
    def source_id(self) -> str:
        return self.graph.node_ids[self.source]

    @property
    def distances(self) -> Dict[str, float]:
        return {node: float(d) for node, d in zip(self.graph.node_ids, self.dist)}

    @property
    def predecessors(self) -> Dict[str, Optional[str]]:
        ids = self.graph.node_ids
        return {ids[v]: (ids[p] if p >= 0 else None) for v, p in enumerate(self.pred)}

    def distance(self, target: str) -> float:
        return float(self.dist[self.graph.index_of(target)])

    def is_reachable(self, target: str) -> bool:
        return bool(np.isfinite(self.dist[self.graph.index_of(target)]))

    def path_to(self, target: str) -> List[str]:
        """Walk predecessor links back from `target`; empty when unreachable."""
        v = self.graph.index_of(target)
        if not np.isfinite(self.dist[v]):
            return []
        path: List[int] = []
        while v != -1 and v != self.source:
            path.append(v)
            v = int(self.pred[v])
        if v != self.source:
            return []
        path.append(self.source)
        return [self.graph.node_ids[u] for u in reversed(path)]

    def critical_path(self) -> Tuple[Optional[str], float, List[str]]:
        """End node, length and path of the maximal finite distance.

        Ties go to the lowest node index. Only meaningful for LONGEST.
        """
        if self.mode is not PathMode.LONGEST:
            raise ValueError("critical_path() needs a LONGEST path result.")
        finite = np.isfinite(self.dist)
        if not np.any(finite):
            return None, float("-inf"), []
        scores = np.where(finite, self.dist, -np.inf)
        end = int(np.argmax(scores))
        node = self.graph.node_ids[end]
        return node, float(self.dist[end]), self.path_to(node)


def _as_mode(mode: Union[PathMode, str]) -> PathMode:
    if isinstance(mode, PathMode):
        return mode
    try:
        return PathMode(str(mode).lower())
    except ValueError:
        raise ValueError(f"mode must be 'shortest' or 'longest', got {mode!r}") from None


def paths_in_dag(
    graph: Digraph,
    topo_order: Sequence[Union[int, str]],
    source: str,
    mode: Union[PathMode, str] = PathMode.SHORTEST,
    *,
    counters: Optional[OpCounters] = None,
) -> PathResult:
    """Single-source shortest or longest paths by relaxing in topological order.

    Parameters
    ----------
    graph:
        weighted DAG.
    topo_order:
        a complete topological order of `graph`, as node indices or node ids.
    source:
        source node id.
    mode:
        PathMode.SHORTEST or PathMode.LONGEST (or their string values).

    Every edge scanned out of a reached node counts as one relaxation,
    whether or not it improves the target's distance. Nodes still at the
    sentinel are skipped. Each call allocates fresh arrays and counters.
    """
    mode = _as_mode(mode)
    if not graph.weighted:
        raise MissingWeightError("Path computation needs a graph built with weighted=True.")
    if counters is None:
        counters = OpCounters()

    src = graph.index_of(source)
    order = [u if isinstance(u, (int, np.integer)) else graph.index_of(u) for u in topo_order]
    if len(order) != graph.n or len(set(order)) != graph.n or not all(0 <= u < graph.n for u in order):
        raise StructuralViolation(
            f"Topological order covers {len(set(order))} of {graph.n} nodes."
        )
    if not is_valid_order(graph.successors(), order):
        raise StructuralViolation("Node order is not a topological order of the graph.")

    unreached = mode.unreached
    shortest = mode is PathMode.SHORTEST
    dist = np.full(graph.n, unreached, dtype=np.float64)
    pred = np.full(graph.n, -1, dtype=np.int64)
    dist[src] = 0.0

    for u in order:
        du = dist[u]
        if du == unreached:
            continue
        for v, w in graph.out_adj[u]:
            counters.relaxations += 1
            cand = du + w
            if (cand < dist[v]) if shortest else (cand > dist[v]):
                dist[v] = cand
                pred[v] = u

    dist.flags.writeable = False
    pred.flags.writeable = False
    logger.debug("%s paths from %s: %d relaxations", mode.value, source, counters.relaxations)
    return PathResult(graph=graph, source=src, mode=mode, dist=dist, pred=pred, counters=counters)


def shortest_and_longest(
    graph: Digraph,
    source: str,
    *,
    method: str = "dfs",
) -> Tuple[PathResult, PathResult]:
    """Sort `graph` once, then run independent SHORTEST and LONGEST passes.

    Raises CycleDetected if `graph` is not a DAG.
    """
    topo = topo_sort(graph.successors(), method=method).require_dag()
    shortest = paths_in_dag(graph, topo.order, source, PathMode.SHORTEST)
    longest = paths_in_dag(graph, topo.order, source, PathMode.LONGEST)
    return shortest, longest
