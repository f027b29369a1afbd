from __future__ import annotations

from enum import Enum
from typing import Dict, Union

from .errors import UnknownPolicyError


class Policy(str, Enum):
    FCFS = "fcfs"
    SJF = "sjf"
    SRTF = "srtf"
    PRIORITY = "priority"
    PRIORITY_PREEMPTIVE = "priority-preemptive"
    ROUND_ROBIN = "round-robin"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def needs_quantum(self) -> bool:
        return self is Policy.ROUND_ROBIN

    @property
    def uses_priority(self) -> bool:
        return self in (Policy.PRIORITY, Policy.PRIORITY_PREEMPTIVE)

    @property
    def preemptive(self) -> bool:
        return self in (Policy.SRTF, Policy.PRIORITY_PREEMPTIVE, Policy.ROUND_ROBIN)

    @classmethod
    def parse(cls, name: Union[str, "Policy"]) -> "Policy":
        """
        Resolve a policy identifier, accepting a few common spellings
        (``rr``, ``round_robin``, ``priority_preemptive``).
        """
        if isinstance(name, Policy):
            return name
        if not isinstance(name, str):
            raise UnknownPolicyError(name)
        key = name.strip().lower()
        policy = _ALIASES.get(key)
        if policy is None:
            raise UnknownPolicyError(name)
        return policy


_LABELS: Dict[Policy, str] = {
    Policy.FCFS: "FCFS",
    Policy.SJF: "SJF (non-preemptive)",
    Policy.SRTF: "SRTF",
    Policy.PRIORITY: "Priority (non-preemptive)",
    Policy.PRIORITY_PREEMPTIVE: "Priority (preemptive)",
    Policy.ROUND_ROBIN: "Round Robin",
}

_ALIASES: Dict[str, Policy] = {p.value: p for p in Policy}
_ALIASES.update(
    {
        "rr": Policy.ROUND_ROBIN,
        "round_robin": Policy.ROUND_ROBIN,
        "roundrobin": Policy.ROUND_ROBIN,
        "priority_preemptive": Policy.PRIORITY_PREEMPTIVE,
        "fifo": Policy.FCFS,
    }
)
