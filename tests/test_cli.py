import json
from pathlib import Path

import pytest

from schedsim.cli import main
from schedsim.gantt import render_gantt
from schedsim.models import ExecutionSegment


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    # Keep rich from wrapping table cells in captured output.
    monkeypatch.setenv("COLUMNS", "200")


@pytest.fixture
def workload(tmp_path: Path) -> Path:
    p = tmp_path / "w.json"
    p.write_text(
        json.dumps(
            [
                {"process_id": "P1", "arrival_time": 0, "burst_time": 5, "priority": 2},
                {"process_id": "P2", "arrival_time": 1, "burst_time": 3, "priority": 1},
                {"process_id": "P3", "arrival_time": 2, "burst_time": 8, "priority": 3},
            ]
        )
    )
    return p


def test_run_prints_tables(workload, capsys):
    assert main(["run", "-a", "fcfs", "-w", str(workload)]) == 0
    out = capsys.readouterr().out
    assert "FCFS" in out
    assert "Per-process metrics" in out
    assert "3.33" in out


def test_run_plain_gantt(workload, capsys):
    assert main(["run", "-a", "sjf", "-w", str(workload), "--plain"]) == 0
    out = capsys.readouterr().out
    assert "|=====" in out


def test_run_json(workload, capsys):
    assert main(["run", "-a", "rr", "-q", "2", "-w", str(workload), "--json"]) == 0
    out = capsys.readouterr().out
    assert '"policy": "round-robin"' in out
    assert '"quantum": 2' in out


def test_run_step_replay(workload, capsys):
    assert main(["run", "-a", "srtf", "-w", str(workload), "--step", "--step-delay", "0"]) == 0
    out = capsys.readouterr().out
    assert "t= 0:" in out
    assert "ready:" in out


def test_round_robin_without_quantum_fails(workload, capsys):
    assert main(["run", "-a", "round-robin", "-w", str(workload)]) == 2
    assert "positive quantum" in capsys.readouterr().out


def test_unknown_algorithm_fails(workload, capsys):
    assert main(["run", "-a", "lottery", "-w", str(workload)]) == 2
    assert "lottery" in capsys.readouterr().out


def test_missing_workload_fails(tmp_path, capsys):
    assert main(["run", "-a", "fcfs", "-w", str(tmp_path / "nope.json")]) == 2


def test_compare_table(workload, capsys):
    assert main(["compare", "-w", str(workload)]) == 0
    out = capsys.readouterr().out
    for label in ("FCFS", "SRTF", "Round Robin"):
        assert label in out


def test_compare_json_marks_skipped(workload, capsys):
    assert main(["compare", "-w", str(workload), "-a", "fcfs", "rr", "-q", "0", "--json"]) == 0
    out = capsys.readouterr().out
    assert '"round-robin": null' in out


def test_queue_at_instant(workload, capsys):
    assert main(["queue", "-a", "fcfs", "-w", str(workload), "-t", "3"]) == 0
    out = capsys.readouterr().out
    assert "P1 P2 P3" in out


def test_queue_timeline(workload, capsys):
    assert main(["-v", "queue", "-a", "priority-preemptive", "-w", str(workload)]) == 0
    assert "Ready queue" in capsys.readouterr().out


def test_render_gantt_shows_idle_gap():
    text = render_gantt([ExecutionSegment("A", 0, 2), ExecutionSegment("B", 4, 5)])
    assert text.splitlines()[1] == "|==..=|"
    assert render_gantt([]) == "(no execution)"


def test_render_gantt_folds_sub_cell_gap():
    text = render_gantt([ExecutionSegment("A", 0, 2), ExecutionSegment("B", 2.3, 3)])
    lines = text.splitlines()
    assert lines[1] == "|===|"
    # No mark for the gap start, so marks line up with the bar.
    assert lines[3] == "0  2  3"
