from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .models import ExecutionSegment, Number, Process, ProcessMetrics, SimulationResult, SystemMetrics
from .policies import Policy

# Real-valued times closer than this are the same instant.
TIME_EPSILON = 1e-9


def is_settled(value: Number) -> bool:
    """True when ``value`` is zero (or below) up to float rounding."""
    return value <= TIME_EPSILON


def quantize(value: Number) -> Number:
    # Remaining times of 0.3 and 0.30000000000000004 must rank as a tie.
    return round(value, 9) if isinstance(value, float) else value


def snap(value: Number) -> Number:
    """
    Collapse float residue around zero, e.g. ``(1.8 + 0.4) - 1.8 - 0.4``.
    """
    if isinstance(value, float) and abs(value) <= TIME_EPSILON:
        return 0.0
    return value


def process_metrics(p: Process, start_time: Number, completion_time: Number) -> ProcessMetrics:
    """
    Per-process metrics for a finished process.

    Waiting time is derived from turnaround so it also counts the time a
    preempted process spent back in the ready queue.
    """
    turnaround_time = completion_time - p.arrival_time
    return ProcessMetrics(
        process_id=p.process_id,
        arrival_time=p.arrival_time,
        burst_time=p.burst_time,
        start_time=start_time,
        completion_time=completion_time,
        waiting_time=snap(turnaround_time - p.burst_time),
        turnaround_time=turnaround_time,
        response_time=snap(start_time - p.arrival_time),
        priority=p.priority,
    )


def compute_system_metrics(
    processes: Sequence[ProcessMetrics], timeline: Sequence[ExecutionSegment]
) -> SystemMetrics:
    """
    Compute throughput and CPU utilization given populated per-process metrics
    and timeline slices.
    """
    if not processes:
        return SystemMetrics(cpu_busy_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)

    makespan = max(p.completion_time for p in processes)
    cpu_busy_time = sum(seg.duration for seg in timeline)

    throughput = len(processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    # Count processes whose waiting time is more than 2x the average waiting time.
    avg_wait = sum(p.waiting_time for p in processes) / len(processes)
    starvation_count = sum(1 for p in processes if p.waiting_time > 2 * avg_wait)

    return SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        starvation_count=starvation_count,
    )


def build_result(
    policy: Policy,
    quantum: Optional[Number],
    metrics: Iterable[ProcessMetrics],
    timeline: Iterable[ExecutionSegment],
) -> SimulationResult:
    ordered: List[ProcessMetrics] = sorted(metrics, key=lambda m: (m.arrival_time, m.process_id))
    segments: List[ExecutionSegment] = sorted(timeline, key=lambda s: (s.start_time, s.end_time))
    summary = summarize_process_metrics(ordered)

    return SimulationResult(
        policy=policy,
        quantum=quantum,
        results=tuple(ordered),
        avg_waiting_time=summary["avg_waiting"],
        avg_turnaround_time=summary["avg_turnaround"],
        gantt=tuple(segments),
        system=compute_system_metrics(ordered, segments),
    )


def summarize_process_metrics(processes: Sequence[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
    }
