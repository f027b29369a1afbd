from __future__ import annotations

import logging
from collections import deque
from dataclasses import replace
from typing import Callable, Deque, Dict, List, Optional, Sequence, Tuple, Union

from .metrics import TIME_EPSILON, build_result, is_settled, process_metrics, quantize
from .models import ExecutionSegment, Number, Process, ProcessMetrics, SimulationResult
from .policies import Policy
from .validation import validate_processes, validate_quantum, with_default_priority

logger = logging.getLogger(__name__)

Engine = Callable[..., SimulationResult]


def _arrival_order(processes: Sequence[Process]) -> List[Process]:
    """
    Validate ``processes`` and return them sorted by arrival (tie: process id).
    """
    validate_processes(processes)
    return sorted(processes, key=lambda p: (p.arrival_time, p.process_id))


def _arrived(p: Process, time: Number) -> bool:
    return p.arrival_time <= time + TIME_EPSILON


def _priority(p: Process) -> Number:
    # Engines treat a missing priority as the most urgent level.
    return p.priority if p.priority is not None else 0


def _segment(p: Process, start_time: Number, end_time: Number) -> ExecutionSegment:
    return ExecutionSegment(
        process_id=p.process_id,
        start_time=start_time,
        end_time=end_time,
        arrival_time=p.arrival_time,
        priority=p.priority,
    )


def schedule_fcfs(processes: Sequence[Process], quantum: Optional[Number] = None) -> SimulationResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    processes_sorted = _arrival_order(processes)

    time: Number = 0
    timeline: List[ExecutionSegment] = []
    metrics: List[ProcessMetrics] = []

    for p in processes_sorted:
        if time < p.arrival_time:
            time = p.arrival_time

        start_time = time
        end_time = start_time + p.burst_time
        logger.debug("fcfs: t=%s dispatch %s until %s", start_time, p.process_id, end_time)

        timeline.append(_segment(p, start_time, end_time))
        metrics.append(process_metrics(p, start_time, end_time))

        time = end_time

    return build_result(Policy.FCFS, None, metrics, timeline)


def _run_non_preemptive(
    policy: Policy,
    processes: Sequence[Process],
    rank: Callable[[Process], Number],
) -> SimulationResult:
    """
    Shared loop for the non-preemptive selectors (SJF, static priority).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest ``rank``; break ties by
    earlier arrival time, then process id. The chosen process runs to
    completion.
    """
    remaining = _arrival_order(processes)

    time: Number = 0
    timeline: List[ExecutionSegment] = []
    metrics: List[ProcessMetrics] = []

    while remaining:
        ready = [p for p in remaining if _arrived(p, time)]

        if not ready:
            # Nothing is ready: jump time to the next arrival.
            time = remaining[0].arrival_time
            continue

        p = min(ready, key=lambda x: (rank(x), x.arrival_time, x.process_id))

        start_time = time
        end_time = start_time + p.burst_time
        logger.debug("%s: t=%s dispatch %s until %s", policy.value, start_time, p.process_id, end_time)

        timeline.append(_segment(p, start_time, end_time))
        metrics.append(process_metrics(p, start_time, end_time))

        remaining.remove(p)
        time = end_time

    return build_result(policy, None, metrics, timeline)


def _run_preemptive(
    policy: Policy,
    processes: Sequence[Process],
    rank: Callable[[Process, Number], Number],
) -> SimulationResult:
    """
    Shared loop for the preemptive selectors (SRTF, preemptive priority).

    The choice is re-evaluated at every arrival and every completion. Between
    two such events the running process only gets better ranked, so this
    yields the same schedule as re-evaluating every time unit. Consecutive
    runs of the same process are merged into one segment.
    """
    pending = _arrival_order(processes)
    remaining: Dict[str, Number] = {p.process_id: p.burst_time for p in pending}
    first_start: Dict[str, Number] = {}

    time: Number = 0
    timeline: List[ExecutionSegment] = []
    metrics: List[ProcessMetrics] = []
    ready: List[Process] = []
    next_idx = 0

    while len(metrics) < len(pending):
        while next_idx < len(pending) and _arrived(pending[next_idx], time):
            ready.append(pending[next_idx])
            next_idx += 1

        if not ready:
            time = pending[next_idx].arrival_time
            continue

        current = min(ready, key=lambda p: (rank(p, remaining[p.process_id]), p.arrival_time, p.process_id))
        pid = current.process_id
        first_start.setdefault(pid, time)

        # Run until completion or next arrival, whichever comes first.
        run_time = remaining[pid]
        if next_idx < len(pending):
            run_time = min(run_time, pending[next_idx].arrival_time - time)

        slice_end = time + run_time
        last = timeline[-1] if timeline else None
        contiguous = last is not None and abs(last.end_time - time) <= TIME_EPSILON
        if contiguous and last.process_id == pid:
            timeline[-1] = replace(last, end_time=slice_end)
        else:
            if contiguous:
                logger.debug("%s: t=%s %s preempts %s", policy.value, time, pid, last.process_id)
            timeline.append(_segment(current, time, slice_end))

        time = slice_end
        remaining[pid] -= run_time

        if is_settled(remaining[pid]):
            remaining[pid] = 0
            ready.remove(current)
            metrics.append(process_metrics(current, first_start[pid], time))
            logger.debug("%s: t=%s %s completed", policy.value, time, pid)

    return build_result(policy, None, metrics, timeline)


def schedule_sjf(processes: Sequence[Process], quantum: Optional[Number] = None) -> SimulationResult:
    """
    Shortest Job First (non-preemptive).
    """
    return _run_non_preemptive(Policy.SJF, processes, lambda p: p.burst_time)


def schedule_srtf(processes: Sequence[Process], quantum: Optional[Number] = None) -> SimulationResult:
    """
    Shortest Remaining Time First (preemptive SJF).
    """
    return _run_preemptive(Policy.SRTF, processes, lambda p, remaining: quantize(remaining))


def schedule_priority(processes: Sequence[Process], quantum: Optional[Number] = None) -> SimulationResult:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority.
    """
    return _run_non_preemptive(Policy.PRIORITY, processes, _priority)


def schedule_priority_preemptive(
    processes: Sequence[Process], quantum: Optional[Number] = None
) -> SimulationResult:
    """
    Static Priority scheduling (preemptive).

    A newly arrived process with a lower priority number takes the CPU from
    the running process as soon as it arrives.
    """
    return _run_preemptive(Policy.PRIORITY_PREEMPTIVE, processes, lambda p, remaining: _priority(p))


def schedule_rr(processes: Sequence[Process], quantum: Optional[Number] = None) -> SimulationResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes arriving while a slice runs join the queue before the process
    that was just preempted. Every slice is its own segment, even when the
    same process runs again straight away.
    """
    pending = _arrival_order(processes)
    quantum = validate_quantum(quantum)

    remaining: Dict[str, Number] = {p.process_id: p.burst_time for p in pending}
    first_start: Dict[str, Number] = {}

    time: Number = 0
    timeline: List[ExecutionSegment] = []
    metrics: List[ProcessMetrics] = []

    ready: Deque[Process] = deque()
    next_idx = 0

    def enqueue_new_arrivals(current_time: Number) -> None:
        nonlocal next_idx
        while next_idx < len(pending) and _arrived(pending[next_idx], current_time):
            ready.append(pending[next_idx])
            next_idx += 1

    enqueue_new_arrivals(time)

    while len(metrics) < len(pending):
        if not ready:
            # CPU idle: fast-forward to the next arrival.
            time = pending[next_idx].arrival_time
            enqueue_new_arrivals(time)

        p = ready.popleft()
        pid = p.process_id
        first_start.setdefault(pid, time)

        run_time = min(quantum, remaining[pid])
        slice_start = time
        time = slice_start + run_time
        remaining[pid] -= run_time
        timeline.append(_segment(p, slice_start, time))
        logger.debug("round-robin: t=%s ran %s until %s", slice_start, pid, time)

        enqueue_new_arrivals(time)

        if not is_settled(remaining[pid]):
            ready.append(p)
        else:
            metrics.append(process_metrics(p, first_start[pid], time))

    return build_result(Policy.ROUND_ROBIN, quantum, metrics, timeline)


ALGORITHMS: Dict[Policy, Engine] = {
    Policy.FCFS: schedule_fcfs,
    Policy.SJF: schedule_sjf,
    Policy.SRTF: schedule_srtf,
    Policy.PRIORITY: schedule_priority,
    Policy.PRIORITY_PREEMPTIVE: schedule_priority_preemptive,
    Policy.ROUND_ROBIN: schedule_rr,
}


def simulate(
    policy: Union[str, Policy],
    processes: Sequence[Process],
    quantum: Optional[Number] = None,
) -> SimulationResult:
    """
    Dispatch to the requested algorithm.

    The quantum is only passed on to Round Robin. Priority policies see
    missing priorities as ``DEFAULT_PRIORITY``.
    """
    policy = Policy.parse(policy)
    working: List[Process] = list(processes)
    if policy.uses_priority:
        working = with_default_priority(working)

    func = ALGORITHMS[policy]
    return func(working, quantum=quantum if policy.needs_quantum else None)


def policy_names() -> Tuple[str, ...]:
    return tuple(p.value for p in ALGORITHMS)
