"""
Errors raised by the simulation engine.

Both derive from ValueError so callers that already guard workload parsing
with ``except ValueError`` also see engine input problems.
"""


class SchedulerError(ValueError):
    pass


class InvalidRegistry(SchedulerError):
    """The process list cannot be simulated (bad burst, arrival or ids)."""


class InvalidParameter(SchedulerError):
    """A policy was asked to tick with parameters it refuses (e.g. quantum < 1)."""
