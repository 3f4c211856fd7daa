"""
Tick scheduler package.

Steps classic CPU scheduling algorithms one time unit at a time, keeping a
replayable history of every scheduler state.
"""

from .engine import advance, initialize, reset
from .errors import InvalidParameter, InvalidRegistry, SchedulerError
from .history import Phase, SimulationController, retreat
from .metrics import compute_metrics
from .models import Process, SchedulerState

__all__ = [
    "InvalidParameter",
    "InvalidRegistry",
    "Phase",
    "Process",
    "SchedulerError",
    "SchedulerState",
    "SimulationController",
    "advance",
    "compute_metrics",
    "initialize",
    "reset",
    "retreat",
]
