from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .counters import OpCounters
from .graph import Digraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SCCResult:
    """Partition of a Digraph into strongly connected components.

    Components are identified by their integer index in discovery order
    (pass-2 tree order); `comp_id[v]` is the component of node index `v`.
    """

    graph: Digraph
    comp_id: np.ndarray
    components: Tuple[Tuple[int, ...], ...]
    counters: OpCounters

    @property
    def n_components(self) -> int:
        return len(self.components)

    def component_of(self, node: str) -> int:
        return int(self.comp_id[self.graph.index_of(node)])

    def members(self, cid: int) -> List[str]:
        return [self.graph.node_ids[v] for v in self.components[cid]]

    def as_sets(self) -> List[frozenset]:
        return [frozenset(self.members(c)) for c in range(self.n_components)]

    def labels(self) -> List[str]:
        return [f"SCC {c + 1}" for c in range(self.n_components)]


def scc_kosaraju(
    out_adj: Sequence[Sequence[int]],
    *,
    counters: Optional[OpCounters] = None,
) -> Tuple[np.ndarray, List[List[int]]]:
    """Kosaraju in two iterative passes: post-order over `out_adj`, then
    flood fill over the transpose in decreasing finish time.

    Component indices are assigned in the order pass 2 discovers them, which
    is a topological order of the condensation. Each pass adds one
    `dfs_visits` per node and one `dfs_edges` per edge to `counters`, so a
    full run totals 2n visits and 2m edges.

    Returns `(comp_id, comps)`: an int32 array of component index per node,
    and the member node indices of each component.
    """
    if counters is None:
        counters = OpCounters()

    n = len(out_adj)
    rev: List[List[int]] = [[] for _ in range(n)]
    for u, nbrs in enumerate(out_adj):
        for v in nbrs:
            rev[int(v)].append(int(u))

    visited = np.zeros(n, dtype=bool)
    order: List[int] = []

    # first pass: compute finishing order
    for start in range(n):
        if visited[start]:
            continue
        stack = [(start, 0)]
        visited[start] = True
        counters.dfs_visits += 1
        while stack:
            u, idx = stack[-1]
            nbrs = out_adj[u]
            if idx < len(nbrs):
                v = int(nbrs[idx])
                stack[-1] = (u, idx + 1)
                counters.dfs_edges += 1
                if not visited[v]:
                    visited[v] = True
                    counters.dfs_visits += 1
                    stack.append((v, 0))
            else:
                stack.pop()
                order.append(u)

    # second pass on reversed graph, decreasing finish order
    comp_id = np.full(n, -1, dtype=np.int32)
    comps: List[List[int]] = []

    for start in reversed(order):
        if comp_id[start] != -1:
            continue
        cid = len(comps)
        comps.append([])
        stack = [start]
        comp_id[start] = cid
        while stack:
            u = stack.pop()
            counters.dfs_visits += 1
            comps[cid].append(u)
            for v in rev[u]:
                counters.dfs_edges += 1
                if comp_id[v] == -1:
                    comp_id[v] = cid
                    stack.append(v)

    return comp_id, comps


def find_sccs(graph: Digraph, *, counters: Optional[OpCounters] = None) -> SCCResult:
    """Partition `graph` into SCCs. Each call gets its own counters unless one is injected."""
    if counters is None:
        counters = OpCounters()
    comp_id, comps = scc_kosaraju(graph.successors(), counters=counters)
    comp_id.flags.writeable = False
    logger.debug(
        "Kosaraju: %d components over %d nodes (%d visits, %d edges)",
        len(comps), graph.n, counters.dfs_visits, counters.dfs_edges,
    )
    return SCCResult(
        graph=graph,
        comp_id=comp_id,
        components=tuple(tuple(c) for c in comps),
        counters=counters,
    )
