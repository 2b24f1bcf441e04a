#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from sccdag import CycleDetected, OpCounters, GraphInputError, StructuralViolation, UnknownNodeError, load_graph_json
from sccdag.pipeline import (
    ComponentAnalysis,
    DEFAULT_SOURCE,
    DEFAULT_TARGET,
    analyze_components,
    analyze_paths,
    condensation_table,
    distance_table,
    instrumentation_table,
    run_batch,
    scc_table,
)


def _paths_skip_reason(comp: ComponentAnalysis, source: str) -> Optional[str]:
    if not comp.graph_is_dag:
        return "graph has a cycle"
    if source not in comp.graph:
        return f"source {source!r} is not in the graph"
    if not comp.graph.fully_weighted:
        return "graph is unweighted"
    return None


def _fmt_dist(d: float) -> str:
    return f"{d:.2f}" if np.isfinite(d) else "Unreachable"


def report_components(path: Path, on_malformed: str) -> ComponentAnalysis:
    t0 = time.perf_counter()
    graph = load_graph_json(path, on_malformed=on_malformed)
    comp = analyze_components(graph)
    elapsed = (time.perf_counter() - t0) * 1000.0

    print("--- Strongly Connected Components (Kosaraju) ---")
    if graph.skipped_edges:
        print(f"Skipped malformed edges: {graph.skipped_edges}")
    print(scc_table(comp.sccs).to_string(index=False))
    print(f"\nTotal SCCs: {comp.sccs.n_components}")

    print("\n--- Condensation Graph (DAG) Edges ---")
    print(condensation_table(comp.condensation).to_string(index=False))

    print("\n--- Topological Order of Components ---")
    print("DFS :", " -> ".join(comp.component_order("dfs")))
    print("Kahn:", " -> ".join(comp.component_order("kahn")))
    print("\nDerived order of original tasks (sorted within components):")
    print(", ".join(comp.task_order("kahn")))

    print("\n--- Instrumentation Report ---")
    table = instrumentation_table({"scc": comp.sccs, "topo_dfs": comp.dfs_order, "topo_kahn": comp.kahn_order})
    print(table.to_string(index=False))
    print(f"Core DFS Operations (Visits/Edges): {comp.sccs.counters.total}")
    print(f"Core Kahn Operations (Pushes/Pops): {comp.kahn_order.counters.total}")
    overall = OpCounters()
    for stage in (comp.sccs, comp.dfs_order, comp.kahn_order):
        overall = overall.merged(stage.counters)
    print(f"Total Operations (all stages): {overall.total}")
    print(f"Total Execution Time (Load, SCC, DAG, Sort): {elapsed:.3f} milliseconds")
    return comp


def report_paths(path: Path, source: str, target: str | None, method: str, on_malformed: str) -> None:
    t0 = time.perf_counter()
    graph = load_graph_json(path, weighted=True, on_malformed=on_malformed)
    res = analyze_paths(graph, source, method=method)
    elapsed = (time.perf_counter() - t0) * 1000.0

    if graph.skipped_edges:
        print(f"Skipped malformed edges: {graph.skipped_edges}")
    print(f"--- Single-Source Shortest Paths from {source} ---")
    for node, dist in res.shortest.distances.items():
        print(f"  To {node}: {_fmt_dist(dist)}")

    if target is None:
        target = DEFAULT_TARGET if DEFAULT_TARGET in graph else graph.node_ids[-1]
    shortest_path = res.shortest.path_to(target)
    if shortest_path:
        print(f"\n  Optimal Shortest Path to {target} (Length {res.shortest.distance(target):.2f}):")
        print(f"  Path: {' -> '.join(shortest_path)}")
    else:
        print(f"\n  {target} is unreachable from {source}")

    print(f"\n--- Longest Path (Critical Path) from {source} ---")
    end, length, critical = res.longest.critical_path()
    if end is not None and len(critical) > 1:
        print(f"  Critical Path Length: {length:.2f}")
        print(f"  Path: {' -> '.join(critical)}")
    else:
        print(f"  No paths found from source {source}")

    print("\n--- Distances ---")
    print(distance_table(res).to_string(index=False))

    print("\n--- Instrumentation Report ---")
    print(f"Total Relaxations (SSSP Run): {res.shortest.relaxations}")
    print(f"Total Relaxations (LPSP Run): {res.longest.relaxations}")
    print(f"Total Relaxations (both runs): {res.shortest.counters.merged(res.longest.counters).total}")
    print(f"Total Execution Time: {elapsed:.3f} milliseconds")


def report_batch(paths: List[Path], source: str, on_malformed: str, outputs_dir: Path) -> None:
    (outputs_dir / "figures").mkdir(parents=True, exist_ok=True)
    summary = run_batch(paths, source=source, on_malformed=on_malformed)
    csv_path = outputs_dir / "instrumentation_summary.csv"
    summary.to_csv(csv_path, index=False)
    print(summary.to_string(index=False))

    summary = summary.sort_values("m")
    plt.figure()
    plt.plot(summary["m"], summary["dfs_edges"], marker="o", label="Kosaraju DFS edges")
    plt.plot(summary["m"], summary["kahn_pushes"] + summary["kahn_pops"], marker="s", label="Kahn queue ops")
    plt.xlabel("Edges")
    plt.ylabel("Operations")
    plt.title("Operation counts vs graph size")
    plt.legend()
    plt.tight_layout()
    fig = outputs_dir / "figures" / "ops_vs_edges.png"
    plt.savefig(fig, dpi=300, bbox_inches="tight")
    plt.close()

    print("\nSaved:", csv_path)
    print("Saved figures:")
    print(" -", fig)


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="SCCs, condensation, topological order and DAG paths for JSON graphs.")

    ap.add_argument("graphs", nargs="+", help="Graph JSON file(s): {\"nodes\": [...], \"edges\": [[u, v(, w)], ...]}.")
    ap.add_argument("--task", default="all", choices=["scc", "paths", "all", "batch"],
                    help="scc: components + topological order; paths: DAG shortest/longest paths; "
                         "batch: summary table and figure over all files.")
    ap.add_argument("--source", default=DEFAULT_SOURCE, help="Source node for path computations.")
    ap.add_argument("--target", default=None, help="Target node for the reported shortest path.")
    ap.add_argument("--topo-method", default="dfs", choices=["dfs", "kahn"],
                    help="Topological sort used before path relaxation.")
    ap.add_argument("--on-malformed", default="skip", choices=["skip", "raise"],
                    help="Skip-and-count or reject malformed edges.")
    ap.add_argument("--outputs-dir", default="outputs", help="Directory to save CSV/figures (batch).")
    ap.add_argument("--log-level", default="WARNING", help="Logging level.")

    args = ap.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    paths = [Path(p) for p in args.graphs]
    try:
        if args.task == "batch" or len(paths) > 1:
            report_batch(paths, args.source, args.on_malformed, Path(args.outputs_dir))
            return 0
        if args.task in ("scc", "all"):
            comp = report_components(paths[0], args.on_malformed)
            if args.task == "all":
                print()
                reason = _paths_skip_reason(comp, args.source)
                if reason is not None:
                    print(f"--- Paths skipped: {reason} ---")
                    return 0
        if args.task in ("paths", "all"):
            report_paths(paths[0], args.source, args.target, args.topo_method, args.on_malformed)
    except (GraphInputError, CycleDetected, UnknownNodeError) as exc:
        print(f"\nA critical error occurred: {exc}", file=sys.stderr)
        return 1
    except StructuralViolation as exc:
        print(f"\nInternal error, condensation is not a DAG: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
