from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from scipy import sparse

from .errors import GraphInputError, MalformedEdgeError, UnknownNodeError

logger = logging.getLogger(__name__)

MALFORMED_POLICIES = ("skip", "raise")


@dataclass(frozen=True, eq=False)
class Digraph:
    """Immutable directed multigraph with string node ids.

    Nodes are indexed densely in first-seen order (declared nodes first, then
    undeclared edge endpoints). `out_adj[u]` lists `(v, w)` pairs in edge
    insertion order; `w` is NaN on edges loaded without a weight.
    """

    node_ids: Tuple[str, ...]
    id_to_idx: Dict[str, int]
    out_adj: Tuple[Tuple[Tuple[int, float], ...], ...]

    # parallel edge arrays, in insertion order
    src: np.ndarray
    dst: np.ndarray
    w: np.ndarray

    weighted: bool = False
    skipped_edges: int = 0
    skipped: Tuple[Any, ...] = field(default=(), repr=False)

    @property
    def n(self) -> int:
        return len(self.node_ids)

    @property
    def m(self) -> int:
        return int(self.src.shape[0])

    @property
    def fully_weighted(self) -> bool:
        """True when every edge carries a weight (vacuously true with no edges)."""
        return not bool(np.isnan(self.w).any())

    def index_of(self, node: str) -> int:
        try:
            return self.id_to_idx[node]
        except (KeyError, TypeError):
            raise UnknownNodeError(node) from None

    def __contains__(self, node: object) -> bool:
        return node in self.id_to_idx

    def successors(self) -> List[List[int]]:
        return [[v for v, _ in nbrs] for nbrs in self.out_adj]

    def transpose(self) -> List[List[int]]:
        """Reverse adjacency: `rev[v]` lists every `u` with an edge u->v."""
        rev: List[List[int]] = [[] for _ in range(self.n)]
        for u, nbrs in enumerate(self.out_adj):
            for v, _ in nbrs:
                rev[v].append(u)
        return rev

    def edges(self) -> Iterator[Tuple[str, str, Optional[float]]]:
        for u, v, w in zip(self.src, self.dst, self.w):
            yield self.node_ids[int(u)], self.node_ids[int(v)], (None if math.isnan(w) else float(w))

    def to_csr(self) -> sparse.csr_matrix:
        """Adjacency matrix; entry (u, v) counts the parallel edges u->v."""
        data = np.ones(self.m, dtype=np.int64)
        return sparse.csr_matrix((data, (self.src, self.dst)), shape=(self.n, self.n))


def _check_endpoint(edge: Any, node: Any) -> str:
    if not isinstance(node, str) or not node:
        raise MalformedEdgeError(edge, f"endpoint {node!r} is not a non-empty string")
    return node


def _check_weight(edge: Any, w: Any) -> float:
    if isinstance(w, bool) or not isinstance(w, numbers.Real):
        raise MalformedEdgeError(edge, f"weight {w!r} is not a number")
    w = float(w)
    if not math.isfinite(w):
        raise MalformedEdgeError(edge, f"weight {w!r} is not finite")
    return w


def parse_edge(edge: Any, *, weighted: bool) -> Tuple[str, str, float]:
    """Validate one `(u, v)` / `(u, v, w)` tuple.

    Returns `(u, v, w)` with `w` NaN when no weight was given. Raises
    MalformedEdgeError for anything that is not a well-formed edge.
    """
    if not isinstance(edge, (list, tuple)):
        raise MalformedEdgeError(edge, "edge must be a list or tuple")
    if len(edge) not in (2, 3):
        raise MalformedEdgeError(edge, f"expected 2 or 3 elements, got {len(edge)}")

    u = _check_endpoint(edge, edge[0])
    v = _check_endpoint(edge, edge[1])

    if len(edge) == 3:
        return u, v, _check_weight(edge, edge[2])
    if weighted:
        raise MalformedEdgeError(edge, "weight is required for a weighted graph")
    return u, v, math.nan


def build_graph(
    nodes: Iterable[str],
    edges: Iterable[Sequence[Any]],
    *,
    weighted: bool = False,
    on_malformed: str = "skip",
) -> Digraph:
    """Build an immutable Digraph from node ids and edge tuples.

    Parameters
    ----------
    nodes:
        declared node ids. Edge endpoints missing from this list are added.
    edges:
        `(u, v)` or `(u, v, w)` tuples.
    weighted:
        if True every edge must carry a finite numeric weight.
    on_malformed:
        "skip" drops malformed edges and counts them in `skipped_edges`;
        "raise" raises MalformedEdgeError on the first one.
    """
    if on_malformed not in MALFORMED_POLICIES:
        raise ValueError(f"on_malformed must be one of {MALFORMED_POLICIES}, got {on_malformed!r}")

    id_to_idx: Dict[str, int] = {}
    node_ids: List[str] = []

    def intern(node: str) -> int:
        idx = id_to_idx.get(node)
        if idx is None:
            idx = len(node_ids)
            id_to_idx[node] = idx
            node_ids.append(node)
        return idx

    for node in nodes:
        if not isinstance(node, str) or not node:
            raise GraphInputError(f"Node id {node!r} is not a non-empty string")
        intern(node)

    src: List[int] = []
    dst: List[int] = []
    wts: List[float] = []
    skipped: List[Any] = []

    for edge in edges:
        try:
            u, v, w = parse_edge(edge, weighted=weighted)
        except MalformedEdgeError as exc:
            if on_malformed == "raise":
                raise
            logger.warning("Skipping edge: %s", exc)
            skipped.append(edge)
            continue
        src.append(intern(u))
        dst.append(intern(v))
        wts.append(w)

    n = len(node_ids)
    buckets: List[List[Tuple[int, float]]] = [[] for _ in range(n)]
    for u, v, w in zip(src, dst, wts):
        buckets[u].append((v, w))

    src_arr = np.asarray(src, dtype=np.int32)
    dst_arr = np.asarray(dst, dtype=np.int32)
    w_arr = np.asarray(wts, dtype=np.float64)
    for arr in (src_arr, dst_arr, w_arr):
        arr.flags.writeable = False

    if skipped:
        logger.warning("Skipped %d malformed edge(s) out of %d", len(skipped), len(skipped) + len(src))
    logger.debug("Built graph: %d nodes, %d edges (weighted=%s)", n, len(src), weighted)

    return Digraph(
        node_ids=tuple(node_ids),
        id_to_idx=id_to_idx,
        out_adj=tuple(tuple(b) for b in buckets),
        src=src_arr,
        dst=dst_arr,
        w=w_arr,
        weighted=weighted,
        skipped_edges=len(skipped),
        skipped=tuple(skipped),
    )
