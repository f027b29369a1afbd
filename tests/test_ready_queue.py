import pytest

from schedsim.algorithms import simulate
from schedsim.errors import UnknownPolicyError
from schedsim.models import ExecutionSegment, Process
from schedsim.policies import Policy
from schedsim.ready_queue import ready_queue_at, ready_queue_timeline, running_at


def _scenario_a():
    return [
        Process("P1", arrival_time=0, burst_time=5),
        Process("P2", arrival_time=1, burst_time=3),
        Process("P3", arrival_time=2, burst_time=8),
    ]


def test_fcfs_queue_pins_running_process():
    gantt = simulate("fcfs", _scenario_a()).gantt
    assert ready_queue_at(gantt, 0, "fcfs") == ["P1"]
    assert ready_queue_at(gantt, 3, "fcfs") == ["P1", "P2", "P3"]
    assert ready_queue_at(gantt, 5, "fcfs") == ["P2", "P3"]
    assert ready_queue_at(gantt, 16, "fcfs") == []


def test_sjf_queue_sorts_by_burst():
    procs = [
        Process("P1", arrival_time=0, burst_time=5),
        Process("P2", arrival_time=1, burst_time=8),
        Process("P3", arrival_time=2, burst_time=3),
    ]
    gantt = simulate("sjf", procs).gantt
    assert ready_queue_at(gantt, 3, "sjf") == ["P1", "P3", "P2"]
    assert ready_queue_at(gantt, 6, "sjf") == ["P3", "P2"]


def test_srtf_queue_sorts_by_live_remaining_time():
    procs = [
        Process("P1", arrival_time=0, burst_time=8),
        Process("P2", arrival_time=1, burst_time=4),
        Process("P3", arrival_time=2, burst_time=2),
    ]
    gantt = simulate("srtf", procs).gantt
    assert ready_queue_at(gantt, 2, "srtf") == ["P3", "P2", "P1"]
    assert ready_queue_at(gantt, 5, "srtf") == ["P2", "P1"]
    assert ready_queue_at(gantt, 7, "srtf") == ["P1"]


def test_priority_queue_pinning_depends_on_preemption():
    procs = [
        Process("P1", arrival_time=0, burst_time=5, priority=3),
        Process("P2", arrival_time=1, burst_time=3, priority=1),
    ]
    gantt = simulate("priority", procs).gantt
    assert ready_queue_at(gantt, 2, "priority") == ["P1", "P2"]
    # The preemptive ordering never overrides the sort.
    assert ready_queue_at(gantt, 2, "priority-preemptive") == ["P2", "P1"]


def test_priority_preemptive_queue():
    procs = [
        Process("P1", arrival_time=0, burst_time=5, priority=3),
        Process("P2", arrival_time=1, burst_time=2, priority=1),
        Process("P3", arrival_time=2, burst_time=1, priority=2),
    ]
    gantt = simulate("priority-preemptive", procs).gantt
    assert ready_queue_at(gantt, 2, "priority-preemptive") == ["P2", "P3", "P1"]
    assert ready_queue_at(gantt, 3, "priority-preemptive") == ["P3", "P1"]


def test_round_robin_queue_rotation():
    procs = [Process("P1", burst_time=5), Process("P2", burst_time=3)]
    gantt = simulate("round-robin", procs, quantum=2).gantt
    assert ready_queue_at(gantt, 0, "round-robin") == ["P1", "P2"]
    assert ready_queue_at(gantt, 3, "round-robin") == ["P2", "P1"]
    assert ready_queue_at(gantt, 4, "round-robin") == ["P1", "P2"]
    assert ready_queue_at(gantt, 7, "round-robin") == ["P1"]


def test_round_robin_queue_interleaves_arrivals_and_preempted():
    procs = [
        Process("P1", burst_time=4),
        Process("P2", burst_time=4),
        Process("P3", arrival_time=3, burst_time=1),
    ]
    res = simulate("round-robin", procs, quantum=2)
    assert [s.process_id for s in res.gantt] == ["P1", "P2", "P1", "P3", "P2"]
    # P1 was preempted at t=2, before P3 arrived at t=3.
    assert ready_queue_at(res.gantt, 3, "round-robin") == ["P2", "P1", "P3"]
    # P3 arrived during P2's slice, so it is ahead of P2.
    assert ready_queue_at(res.gantt, 4, "round-robin") == ["P1", "P3", "P2"]


_INTEGER_WORKLOAD = [
    Process("P1", arrival_time=0, burst_time=7, priority=3),
    Process("P2", arrival_time=2, burst_time=4, priority=1),
    Process("P3", arrival_time=4, burst_time=1, priority=4),
    Process("P4", arrival_time=5, burst_time=4, priority=2),
]

_DECIMAL_WORKLOAD = [
    Process("P0", arrival_time=1.8, burst_time=1.9, priority=2),
    Process("P1", arrival_time=0.7, burst_time=0.7, priority=1),
    Process("P2", arrival_time=0.3, burst_time=0.4, priority=3),
    Process("P3", arrival_time=1.9, burst_time=1.4, priority=0),
    Process("P4", arrival_time=1.4, burst_time=0.1, priority=2),
]


@pytest.mark.parametrize(
    "procs, quantum", [(_INTEGER_WORKLOAD, 3), (_DECIMAL_WORKLOAD, 0.3)], ids=["integers", "tenths"]
)
@pytest.mark.parametrize("policy", list(Policy))
def test_running_process_heads_the_queue_at_each_dispatch(policy, procs, quantum):
    res = simulate(policy, procs, quantum=quantum)
    for seg in res.gantt:
        queue = ready_queue_at(res.gantt, seg.start_time, policy)
        assert queue[0] == seg.process_id
        assert len(queue) == len(set(queue))


def test_idle_instant_has_empty_queue():
    gantt = simulate("fcfs", [Process("A", burst_time=2), Process("B", arrival_time=5, burst_time=1)]).gantt
    assert running_at(gantt, 3) is None
    assert ready_queue_at(gantt, 3, "fcfs") == []


def test_empty_or_malformed_trace():
    assert ready_queue_at([], 0, "fcfs") == []
    bad = [ExecutionSegment("P1", 3, 3)]
    assert ready_queue_at(bad, 3, "srtf") == []
    assert ready_queue_timeline(bad, "srtf") == []


def test_unknown_policy():
    gantt = simulate("fcfs", _scenario_a()).gantt
    with pytest.raises(UnknownPolicyError):
        ready_queue_at(gantt, 1, "lifo")


def test_timeline_lists_each_boundary():
    gantt = simulate("fcfs", _scenario_a()).gantt
    timeline = ready_queue_timeline(gantt, Policy.FCFS)
    assert [t for t, _ in timeline] == [0, 1, 2, 5, 8, 16]
    assert timeline[0] == (0, ["P1"])
    assert timeline[-1] == (16, [])
