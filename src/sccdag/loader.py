"""JSON graph files: {"nodes": [...], "edges": [[u, v], [u, v, w], ...]}."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from .errors import GraphInputError
from .graph import Digraph, build_graph

logger = logging.getLogger(__name__)


def parse_graph_document(
    doc: Dict[str, Any],
    *,
    weighted: bool = False,
    on_malformed: str = "skip",
) -> Digraph:
    if not isinstance(doc, dict):
        raise GraphInputError(f"Graph document must be a JSON object, got {type(doc).__name__}")
    nodes = doc.get("nodes")
    edges = doc.get("edges")
    if not isinstance(nodes, list):
        raise GraphInputError("'nodes' must be a list")
    if not isinstance(edges, list):
        raise GraphInputError("'edges' must be a list")
    return build_graph(nodes, edges, weighted=weighted, on_malformed=on_malformed)


def load_graph_json(
    path: Union[str, Path],
    *,
    weighted: bool = False,
    on_malformed: str = "skip",
) -> Digraph:
    """Read a graph file. Missing or unparsable files raise GraphInputError."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise GraphInputError(f"File not found: {path}") from None
    except OSError as exc:
        raise GraphInputError(f"Cannot read {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise GraphInputError(f"{path} is not valid UTF-8: {exc}") from exc

    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GraphInputError(f"Invalid JSON in {path}: {exc}") from exc

    graph = parse_graph_document(doc, weighted=weighted, on_malformed=on_malformed)
    logger.info("Loaded %s: %d nodes, %d edges", path.name, graph.n, graph.m)
    return graph
