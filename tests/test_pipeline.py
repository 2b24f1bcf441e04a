from __future__ import annotations

import json
import math

import pytest

from conftest import DIAMOND_EDGES
from sccdag import CycleDetected, build_graph
from sccdag.pipeline import (
    analyze_components,
    analyze_paths,
    condensation_table,
    distance_table,
    instrumentation_table,
    run_batch,
    scc_table,
)


def test_analyze_components(chained_cycles):
    comp = analyze_components(chained_cycles)
    assert comp.sccs.n_components == 3
    assert comp.component_order("kahn") == ["SCC 1", "SCC 2", "SCC 3"]
    assert comp.component_order("dfs") == ["SCC 1", "SCC 2", "SCC 3"]
    assert comp.task_order() == ["a1", "a2", "a3", "b1", "b2", "b3", "sink"]


def test_scc_and_condensation_tables(chained_cycles):
    comp = analyze_components(chained_cycles)
    sccs = scc_table(comp.sccs)
    assert list(sccs["size"]) == [3, 3, 1]
    assert sccs.loc[0, "members"] == "a1, a2, a3"
    cond = condensation_table(comp.condensation)
    assert list(cond["out_degree"]) == [1, 1, 0]
    assert cond.loc[0, "successors"] == "SCC 2"


def test_instrumentation_table(chained_cycles):
    comp = analyze_components(chained_cycles)
    table = instrumentation_table({"scc": comp.sccs, "kahn": comp.kahn_order})
    values = {(r.stage, r.counter): r.value for r in table.itertuples()}
    assert values[("scc", "dfs_visits")] == 2 * chained_cycles.n
    assert values[("kahn", "queue_pushes")] == 3
    assert ("kahn", "relaxations") not in values


def test_distance_table(diamond):
    paths = analyze_paths(diamond, "B")
    table = distance_table(paths)
    row = table.set_index("node").loc["A"]
    assert row["shortest"] == math.inf
    assert row["longest"] == -math.inf
    assert not row["reachable"]
    assert table.set_index("node").loc["D", "longest"] == 5.0


def test_graph_is_dag(diamond, two_cycle):
    assert analyze_components(diamond).graph_is_dag
    assert not analyze_components(two_cycle).graph_is_dag
    assert not analyze_components(build_graph([], [("A", "A")])).graph_is_dag


def test_analyze_paths_rejects_cycles(two_cycle):
    with pytest.raises(CycleDetected):
        analyze_paths(two_cycle, "X")


def test_run_batch(tmp_path):
    dag = tmp_path / "dag.json"
    dag.write_text(json.dumps({"nodes": ["V1", "B", "C", "D"], "edges": [
        ["V1" if u == "A" else u, v, w] for u, v, w in DIAMOND_EDGES
    ]}))
    cyclic = tmp_path / "cyclic.json"
    cyclic.write_text(json.dumps({"nodes": ["X", "Y", "Z"], "edges": [["X", "Y"], ["Y", "X"], ["Y"]]}))

    summary = run_batch([dag, cyclic], progress=False).set_index("graph")
    assert summary.loc["dag.json", "n_sccs"] == 4
    assert summary.loc["dag.json", "relax_shortest"] == 5
    assert summary.loc["cyclic.json", "n_sccs"] == 2
    assert summary.loc["cyclic.json", "skipped_edges"] == 1
    assert summary.loc["cyclic.json", "dfs_visits"] == 6
    assert (summary["elapsed_ms"] >= 0).all()
