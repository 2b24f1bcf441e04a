from __future__ import annotations

from typing import Any


class SccDagError(Exception):
    """Base class for every error raised by sccdag."""


class GraphInputError(SccDagError):
    """The graph source is missing or malformed. Fatal for the whole run."""


class MalformedEdgeError(GraphInputError, ValueError):
    """An edge tuple has the wrong arity, a bad endpoint or a bad weight."""

    def __init__(self, edge: Any, reason: str) -> None:
        super().__init__(f"Malformed edge {edge!r}: {reason}")
        self.edge = edge
        self.reason = reason


class MissingWeightError(GraphInputError):
    """A weighted analysis was requested on a graph built without weights."""


class UnknownNodeError(SccDagError, KeyError):
    def __init__(self, node: Any) -> None:
        super().__init__(node)
        self.node = node

    def __str__(self) -> str:
        return f"Unknown node: {self.node!r}"


class StructuralViolation(SccDagError):
    """A derived structure broke its invariant (e.g. a cyclic condensation)."""


class CycleDetected(StructuralViolation):
    """A topological sort could not order every node.

    `result` holds the partial TopoResult so callers can see how far it got.
    """

    def __init__(self, result: Any, message: str | None = None) -> None:
        if message is None:
            message = (
                f"Graph contains a cycle: {result.method} ordered "
                f"{len(result.order)}/{result.n_nodes} nodes."
            )
        super().__init__(message)
        self.result = result
