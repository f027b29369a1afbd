"""
Exception types raised by the simulator.

Everything derives from ValueError so callers that only guard against bad
input with ``except ValueError`` keep working.
"""


class SchedulerError(ValueError):
    pass


class InvalidInputError(SchedulerError):
    """Empty or malformed process set, or an unusable time quantum."""


class UnknownPolicyError(SchedulerError):
    def __init__(self, name: object) -> None:
        super().__init__(f"Unknown or unimplemented algorithm '{name}'")
        self.name = name


class WorkloadFormatError(InvalidInputError):
    """A workload file could not be parsed into processes."""
