from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .counters import OpCounters
from .errors import CycleDetected
from .graph import Digraph

logger = logging.getLogger(__name__)

TOPO_METHODS = ("dfs", "kahn")

_UNSEEN, _ON_STACK, _DONE = 0, 1, 2


@dataclass(frozen=True)
class TopoResult:
    """Outcome of a topological sort.

    `order` lists node indices. When the input has a cycle the order is
    partial (`is_dag` is False) and must not be used as a topological order.
    """

    order: Tuple[int, ...]
    n_nodes: int
    method: str
    counters: OpCounters = field(default_factory=OpCounters)

    @property
    def is_dag(self) -> bool:
        return len(self.order) == self.n_nodes

    @property
    def missing(self) -> int:
        return self.n_nodes - len(self.order)

    def require_dag(self) -> "TopoResult":
        if not self.is_dag:
            raise CycleDetected(self)
        return self


def topo_sort_dfs(
    succ: Sequence[Sequence[int]],
    *,
    start_order: Optional[Iterable[int]] = None,
    counters: Optional[OpCounters] = None,
) -> TopoResult:
    """Topological order as reversed DFS finish order (iterative).

    Roots are tried in `start_order` (default: index order). A back edge to a
    node still on the DFS stack means a cycle: the sort stops there and the
    reversed finish order gathered so far is returned as a partial result.
    """
    if counters is None:
        counters = OpCounters()

    n = len(succ)
    state = np.zeros(n, dtype=np.int8)
    finish: List[int] = []
    cyclic = False

    starts = range(n) if start_order is None else start_order
    for start in starts:
        if state[start] != _UNSEEN:
            continue
        stack = [(start, 0)]
        state[start] = _ON_STACK
        counters.dfs_visits += 1
        while stack:
            u, idx = stack[-1]
            nbrs = succ[u]
            if idx < len(nbrs):
                v = int(nbrs[idx])
                stack[-1] = (u, idx + 1)
                counters.dfs_edges += 1
                if state[v] == _UNSEEN:
                    state[v] = _ON_STACK
                    counters.dfs_visits += 1
                    stack.append((v, 0))
                elif state[v] == _ON_STACK:
                    cyclic = True
                    break
            else:
                stack.pop()
                state[u] = _DONE
                finish.append(u)
        if cyclic:
            break

    result = TopoResult(order=tuple(reversed(finish)), n_nodes=n, method="dfs", counters=counters)
    if cyclic:
        logger.warning("DFS topological sort found a back edge; ordered %d/%d nodes", len(finish), n)
    return result


def topo_sort_kahn(
    succ: Sequence[Sequence[int]],
    *,
    counters: Optional[OpCounters] = None,
) -> TopoResult:
    """Kahn's algorithm: repeatedly dequeue zero in-degree nodes.

    Every enqueue counts one `queue_pushes`, every dequeue one `queue_pops`.
    Nodes left on a cycle never reach in-degree 0, so the order comes out short.
    """
    if counters is None:
        counters = OpCounters()

    n = len(succ)
    in_degree = np.zeros(n, dtype=np.int64)
    for nbrs in succ:
        for v in nbrs:
            in_degree[int(v)] += 1

    queue: deque = deque()
    for u in range(n):
        if in_degree[u] == 0:
            queue.append(u)
            counters.queue_pushes += 1

    order: List[int] = []
    while queue:
        u = queue.popleft()
        counters.queue_pops += 1
        order.append(u)
        for v in succ[u]:
            v = int(v)
            in_degree[v] -= 1
            if in_degree[v] == 0:
                queue.append(v)
                counters.queue_pushes += 1

    result = TopoResult(order=tuple(order), n_nodes=n, method="kahn", counters=counters)
    if not result.is_dag:
        logger.warning(
            "Kahn topological sort is incomplete (%d/%d nodes); the graph contains a cycle",
            len(order), n,
        )
    return result


def topo_sort(
    succ: Sequence[Sequence[int]],
    *,
    method: str = "dfs",
    counters: Optional[OpCounters] = None,
) -> TopoResult:
    if method == "dfs":
        return topo_sort_dfs(succ, counters=counters)
    if method == "kahn":
        return topo_sort_kahn(succ, counters=counters)
    raise ValueError(f"method must be one of {TOPO_METHODS}, got {method!r}")


def topological_order(graph: Digraph, *, method: str = "dfs") -> List[str]:
    """Node ids of `graph` in topological order; raises CycleDetected on a cycle."""
    result = topo_sort(graph.successors(), method=method).require_dag()
    return [graph.node_ids[u] for u in result.order]


def is_valid_order(succ: Sequence[Sequence[int]], order: Sequence[int]) -> bool:
    """True iff `order` is a permutation of all nodes with u before v for every edge u->v."""
    n = len(succ)
    if len(order) != n:
        return False
    pos = np.full(n, -1, dtype=np.int64)
    for i, u in enumerate(order):
        if pos[u] != -1:
            return False
        pos[u] = i
    for u, nbrs in enumerate(succ):
        for v in nbrs:
            if pos[u] >= pos[int(v)]:
                return False
    return True
