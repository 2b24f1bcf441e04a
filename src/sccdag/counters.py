from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Dict


@dataclass
class OpCounters:
    """Operation counts for a single stage invocation.

    A fresh instance is created per call (or injected by the caller), so counts
    from one run never leak into another.
    """

    dfs_visits: int = 0
    dfs_edges: int = 0
    queue_pushes: int = 0
    queue_pops: int = 0
    relaxations: int = 0

    @property
    def total(self) -> int:
        return sum(getattr(self, f.name) for f in fields(self))

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)

    def merged(self, other: "OpCounters") -> "OpCounters":
        return OpCounters(**{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)})
