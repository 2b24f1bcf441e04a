from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterator, List, Sequence, Set, Tuple

from .errors import StructuralViolation
from .graph import Digraph
from .scc import SCCResult
from .toposort import TopoResult, topo_sort_kahn

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class CondensationGraph:
    """DAG with one node per SCC index.

    `succ[c]` holds the distinct components reachable from `c` by at least one
    inter-component edge; it never contains `c` itself.
    """

    sccs: SCCResult
    succ: Tuple[FrozenSet[int], ...]

    @property
    def n(self) -> int:
        return len(self.succ)

    @property
    def m(self) -> int:
        return sum(len(s) for s in self.succ)

    def successors(self) -> List[List[int]]:
        # sorted so that traversal order is reproducible
        return [sorted(s) for s in self.succ]

    def edges(self) -> Iterator[Tuple[int, int]]:
        for ci, targets in enumerate(self.succ):
            for cj in sorted(targets):
                yield ci, cj

    def assert_acyclic(self) -> TopoResult:
        """Return Kahn's order of the condensation, or raise if it is cyclic.

        A cycle here means the SCC partition itself is wrong.
        """
        result = topo_sort_kahn(self.successors())
        if not result.is_dag:
            raise StructuralViolation(
                f"Condensation graph is cyclic: ordered {len(result.order)}/{self.n} components"
            )
        return result

    def expand_order(self, order: Sequence[int]) -> List[str]:
        """Node ids following a component order, members sorted within each component."""
        out: List[str] = []
        for cid in order:
            out.extend(sorted(self.sccs.members(cid)))
        return out


def build_condensation(graph: Digraph, sccs: SCCResult) -> CondensationGraph:
    """Collapse every SCC of `graph` into a single DAG node."""
    if sccs.graph is not graph:
        raise ValueError("SCC partition was computed for a different graph.")
    comp = sccs.comp_id
    targets: List[Set[int]] = [set() for _ in range(sccs.n_components)]

    dropped = 0
    for u, v in zip(graph.src, graph.dst):
        ci = int(comp[u]); cj = int(comp[v])
        if ci == cj:
            dropped += 1
            continue
        targets[ci].add(cj)

    cond = CondensationGraph(sccs=sccs, succ=tuple(frozenset(t) for t in targets))
    logger.debug(
        "Condensation: %d components, %d inter-component edges (%d intra edges dropped)",
        cond.n, cond.m, dropped,
    )
    return cond
