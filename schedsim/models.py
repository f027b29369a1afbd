from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple, Union

from .policies import Policy

Number = Union[int, float]


@dataclass(frozen=True)
class Process:
    process_id: str
    burst_time: Number
    arrival_time: Number = 0
    priority: Optional[Number] = None


@dataclass(frozen=True)
class ExecutionSegment:
    """
    One contiguous slice of execution for a process in the Gantt trace.
    """

    process_id: str
    start_time: Number
    end_time: Number
    arrival_time: Number = 0
    priority: Optional[Number] = None

    @property
    def duration(self) -> Number:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class ProcessMetrics:
    process_id: str
    burst_time: Number
    arrival_time: Number
    start_time: Number
    completion_time: Number
    waiting_time: Number
    turnaround_time: Number
    response_time: Number
    priority: Optional[Number] = None


@dataclass(frozen=True)
class SystemMetrics:
    cpu_busy_time: Number
    makespan: Number
    throughput: float
    cpu_utilization: float
    starvation_count: int = 0


@dataclass(frozen=True)
class SimulationResult:
    policy: Policy
    quantum: Optional[Number]
    results: Tuple[ProcessMetrics, ...]
    avg_waiting_time: float
    avg_turnaround_time: float
    gantt: Tuple[ExecutionSegment, ...]
    system: SystemMetrics

    @property
    def avg_response_time(self) -> float:
        if not self.results:
            return 0.0
        return sum(m.response_time for m in self.results) / len(self.results)

    def metrics_for(self, process_id: str) -> ProcessMetrics:
        for m in self.results:
            if m.process_id == process_id:
                return m
        raise KeyError(process_id)

    def to_dict(self) -> Dict[str, Any]:
        """
        Plain JSON-friendly representation (policy rendered as its identifier).
        """
        data = asdict(self)
        data["policy"] = self.policy.value
        data["results"] = list(data["results"])
        data["gantt"] = list(data["gantt"])
        return data
