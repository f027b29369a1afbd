"""
schedsim package.

Simulates classical CPU scheduling policies over a fixed set of processes and
reports per-process timings, averages and a Gantt trace for each policy.
"""

from .algorithms import simulate
from .compare import compare, compare_all, compare_workloads
from .errors import InvalidInputError, SchedulerError, UnknownPolicyError
from .models import ExecutionSegment, Process, ProcessMetrics, SimulationResult
from .policies import Policy
from .ready_queue import ready_queue_at

__all__ = [
    "ExecutionSegment",
    "InvalidInputError",
    "Policy",
    "Process",
    "ProcessMetrics",
    "SchedulerError",
    "SimulationResult",
    "UnknownPolicyError",
    "compare",
    "compare_all",
    "compare_workloads",
    "ready_queue_at",
    "simulate",
]
