"""
Entry points of the simulation engine.

``initialize`` / ``reset`` build the t0 snapshot for a process registry and
``advance`` executes a single tick of a named algorithm. Rewinding lives in
``history`` and metrics in ``metrics``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, List, Optional, Tuple

from .algorithms import get_policy, step
from .errors import InvalidRegistry
from .models import (
    LOW_QUANTUM,
    MEDIUM_QUANTUM,
    PALETTE,
    QUEUE_CLASSES,
    MultilevelParams,
    Process,
    RoundRobinParams,
    SchedulerState,
)

logger = logging.getLogger(__name__)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_registry(registry: Iterable[Process]) -> List[Process]:
    processes = list(registry)
    seen: set[str] = set()
    for p in processes:
        if p.pid in seen:
            raise InvalidRegistry(f"Duplicate process id '{p.pid}'")
        seen.add(p.pid)
        for field in ("arrival_time", "burst_time", "priority", "queue_class"):
            value = getattr(p, field)
            if field == "priority" and value is None:
                continue
            if not _is_int(value):
                raise InvalidRegistry(f"Process '{p.pid}' has non-integer {field} {value!r}")
        if p.burst_time < 1:
            raise InvalidRegistry(f"Process '{p.pid}' has burst time {p.burst_time}; it must be at least 1")
        if p.arrival_time < 0:
            raise InvalidRegistry(f"Process '{p.pid}' has negative arrival time {p.arrival_time}")
        if p.priority is not None and p.priority < 0:
            raise InvalidRegistry(f"Process '{p.pid}' has negative priority {p.priority}")
        if p.queue_class not in QUEUE_CLASSES:
            raise InvalidRegistry(f"Process '{p.pid}' has queue class {p.queue_class}; expected 0, 1 or 2")
    return processes


def initialize(registry: Iterable[Process]) -> SchedulerState:
    """
    Validate the registry and build the empty snapshot at t0.

    Every process starts pending with its full burst outstanding; processes
    without a colour get one from the palette by registry position.
    """
    processes = validate_registry(registry)
    pending = tuple(
        replace(
            p,
            remaining_time=p.burst_time,
            color=p.color or PALETTE[idx % len(PALETTE)],
        )
        for idx, p in enumerate(processes)
    )
    return SchedulerState(current_time=0, pending=pending)


def reset(registry: Iterable[Process]) -> SchedulerState:
    state = initialize(registry)
    logger.debug("Reset registry of %d processes to t0", len(state.pending))
    return state


def default_params(
    algorithm: str,
    time_quantum: Optional[int] = None,
    medium_quantum: int = MEDIUM_QUANTUM,
    low_quantum: int = LOW_QUANTUM,
) -> Any:
    """
    Starting policy parameters for an algorithm tag.

    The quantum is passed through unchecked; ``advance`` refuses a bad one.
    """
    get_policy(algorithm)
    key = algorithm.lower()
    if key == "rr":
        return RoundRobinParams(time_quantum=time_quantum)
    if key == "mlq":
        return MultilevelParams(medium_quantum=medium_quantum, low_quantum=low_quantum)
    return None


def advance(algorithm: str, state: SchedulerState, params: Any = None) -> Tuple[SchedulerState, Any]:
    """
    Run one tick of ``algorithm`` (fcfs, sjf, rr, priority or mlq) on ``state``.

    ``params`` is a RoundRobinParams for rr, a MultilevelParams for mlq (None
    means the default class quanta) and is ignored by the other algorithms. A finished state is returned
    unchanged together with ``params``.
    """
    policy = get_policy(algorithm)
    if state.is_complete:
        return state, params
    if params is None and algorithm.lower() == "mlq":
        params = MultilevelParams()
    return step(policy, state, params)
