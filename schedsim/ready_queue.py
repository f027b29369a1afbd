"""
Rebuild the ready queue of a finished simulation from its Gantt trace alone.

Only the trace is available here, so each process's burst is the sum of its
segment durations and its arrival/priority come from the segments. The
ordering rules mirror the engines' tie-breaks, which makes these queues a
useful cross-check for the engines themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .metrics import TIME_EPSILON, is_settled, quantize
from .models import ExecutionSegment, Number
from .policies import Policy


@dataclass
class _TraceInfo:
    process_id: str
    arrival_time: Number
    priority: Number
    total_burst: Number = 0
    executed: Number = 0
    last_end: Optional[Number] = None

    @property
    def remaining(self) -> Number:
        return self.total_burst - self.executed


def _collect(gantt: Sequence[ExecutionSegment], t: Number) -> Dict[str, _TraceInfo]:
    info: Dict[str, _TraceInfo] = {}
    for seg in gantt:
        entry = info.get(seg.process_id)
        if entry is None:
            entry = _TraceInfo(
                process_id=seg.process_id,
                arrival_time=seg.arrival_time or 0,
                priority=seg.priority if seg.priority is not None else 0,
            )
            info[seg.process_id] = entry

        entry.total_burst += seg.duration
        if seg.start_time <= t:
            entry.executed += min(t - seg.start_time, seg.duration)
        if seg.end_time <= t and (entry.last_end is None or seg.end_time > entry.last_end):
            entry.last_end = seg.end_time
    return info


def _is_malformed(gantt: Sequence[ExecutionSegment]) -> bool:
    return any(seg.end_time <= seg.start_time for seg in gantt)


def running_at(gantt: Sequence[ExecutionSegment], t: Number) -> Optional[str]:
    for seg in gantt:
        if seg.start_time <= t < seg.end_time:
            return seg.process_id
    return None


def _pin_first(order: List[str], running: Optional[str]) -> List[str]:
    if running is not None and running in order:
        return [running] + [pid for pid in order if pid != running]
    return order


def _round_robin_order(waiting: List[_TraceInfo], running: Optional[str]) -> List[str]:
    # A process joined the FIFO either on arrival (never run yet) or when its
    # last slice ended. Arrivals at the same instant go ahead of the
    # preempted process, as in the engine.
    def enqueued_at(entry: _TraceInfo) -> Tuple[Number, int, Number, str]:
        if entry.last_end is None:
            return (quantize(entry.arrival_time), 0, entry.arrival_time, entry.process_id)
        return (quantize(entry.last_end), 1, entry.arrival_time, entry.process_id)

    queue = [running] if running is not None else []
    queue.extend(e.process_id for e in sorted(waiting, key=enqueued_at) if e.process_id != running)
    return queue


def ready_queue_at(
    gantt: Sequence[ExecutionSegment],
    t: Number,
    policy: Union[str, Policy],
) -> List[str]:
    """
    Process ids that would sit in the ready queue at instant ``t``.

    The running process, if any, is listed first for the non-preemptive
    policies and Round Robin; the preemptive selectors simply sort, since the
    running process already ranks first there. An empty or malformed trace
    yields an empty list.
    """
    policy = Policy.parse(policy)
    if not gantt or _is_malformed(gantt):
        return []

    info = _collect(gantt, t)
    running = running_at(gantt, t)
    waiting = [e for e in info.values() if e.arrival_time <= t + TIME_EPSILON and not is_settled(e.remaining)]

    if policy is Policy.ROUND_ROBIN:
        return _round_robin_order(waiting, running)

    if policy is Policy.FCFS:
        order = sorted(waiting, key=lambda e: (e.arrival_time, e.process_id))
    elif policy is Policy.SJF:
        order = sorted(waiting, key=lambda e: (quantize(e.total_burst), e.arrival_time, e.process_id))
    elif policy is Policy.SRTF:
        order = sorted(waiting, key=lambda e: (quantize(e.remaining), e.arrival_time, e.process_id))
    else:
        order = sorted(waiting, key=lambda e: (e.priority, e.arrival_time, e.process_id))

    pids = [e.process_id for e in order]
    if policy.preemptive:
        return pids
    return _pin_first(pids, running)


def ready_queue_timeline(
    gantt: Sequence[ExecutionSegment],
    policy: Union[str, Policy],
) -> List[Tuple[Number, List[str]]]:
    """
    Ready queue at every instant where it can change: each arrival and each
    segment boundary.
    """
    policy = Policy.parse(policy)
    if not gantt or _is_malformed(gantt):
        return []

    instants = set()
    for seg in gantt:
        instants.update((seg.arrival_time or 0, seg.start_time, seg.end_time))
    return [(t, ready_queue_at(gantt, t, policy)) for t in sorted(instants)]
