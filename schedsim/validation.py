from __future__ import annotations

import numbers
from dataclasses import replace
from typing import List, Optional, Sequence

from .errors import InvalidInputError
from .models import Number, Process

DEFAULT_PRIORITY = 1


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def validate_processes(processes: Sequence[Process]) -> None:
    """
    Reject process sets no engine can simulate.

    Zero or negative burst times are refused outright rather than treated as
    instant completions.
    """
    if not processes:
        raise InvalidInputError("No processes provided")

    seen: set[str] = set()
    for p in processes:
        if not isinstance(p.process_id, str) or not p.process_id:
            raise InvalidInputError(f"Invalid process id: {p.process_id!r}")
        if p.process_id in seen:
            raise InvalidInputError(f"Duplicate process id '{p.process_id}'")
        seen.add(p.process_id)

        if not _is_number(p.burst_time) or p.burst_time <= 0:
            raise InvalidInputError(f"Process '{p.process_id}' needs a positive burst time, got {p.burst_time!r}")
        if not _is_number(p.arrival_time) or p.arrival_time < 0:
            raise InvalidInputError(
                f"Process '{p.process_id}' needs a non-negative arrival time, got {p.arrival_time!r}"
            )
        if p.priority is not None and not _is_number(p.priority):
            raise InvalidInputError(f"Process '{p.process_id}' has a non-numeric priority {p.priority!r}")


def validate_quantum(quantum: Optional[Number]) -> Number:
    if quantum is None or not _is_number(quantum) or quantum <= 0:
        raise InvalidInputError("Round Robin requires a positive quantum (use --quantum)")
    return quantum


def with_default_priority(processes: Sequence[Process], default: Number = DEFAULT_PRIORITY) -> List[Process]:
    """
    Copy of ``processes`` where a missing priority is replaced by ``default``.
    """
    return [p if p.priority is not None else replace(p, priority=default) for p in processes]
