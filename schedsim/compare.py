"""
Run several scheduling policies over the same (or per-policy) workloads.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional, Sequence, Union

from .algorithms import simulate
from .errors import InvalidInputError
from .models import Number, Process, SimulationResult
from .policies import Policy

logger = logging.getLogger(__name__)

ComparisonBundle = Dict[Policy, Optional[SimulationResult]]


def _run_one(policy: Policy, processes: Sequence[Process], quantum: Optional[Number]) -> Optional[SimulationResult]:
    try:
        # Each engine gets its own list; records are frozen so no state is shared.
        return simulate(policy, list(processes), quantum=quantum)
    except InvalidInputError as exc:
        logger.warning("Skipping %s: %s", policy.value, exc)
        return None


def compare(
    processes: Sequence[Process],
    quantum: Optional[Number] = None,
    policies: Optional[Iterable[Union[str, Policy]]] = None,
) -> ComparisonBundle:
    """
    Run ``policies`` (all of them by default) on ``processes``.

    A policy whose input is rejected maps to ``None``; the others still run.
    Unknown policy names raise before anything is simulated.
    """
    selected = [Policy.parse(p) for p in policies] if policies is not None else list(Policy)
    return {policy: _run_one(policy, processes, quantum) for policy in selected}


def compare_workloads(
    workloads: Mapping[Union[str, Policy], Sequence[Process]],
    quantum: Optional[Number] = None,
) -> ComparisonBundle:
    """
    Like :func:`compare`, but with a distinct process set for each policy.
    """
    parsed = {Policy.parse(name): processes for name, processes in workloads.items()}
    return {policy: _run_one(policy, processes, quantum) for policy, processes in parsed.items()}


def compare_all(processes: Sequence[Process], quantum: Number) -> Dict[Policy, SimulationResult]:
    """
    Run all six policies unconditionally. Invalid input raises instead of
    yielding a partial bundle.
    """
    return {policy: simulate(policy, list(processes), quantum=quantum) for policy in Policy}
