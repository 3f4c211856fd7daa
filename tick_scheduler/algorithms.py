from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import InvalidParameter
from .models import (
    HIGH,
    LOW,
    MEDIUM,
    CompletedProcess,
    MultilevelParams,
    Process,
    RoundRobinParams,
    SchedulerState,
    TimelineEntry,
)

logger = logging.getLogger(__name__)

# Missing priorities sort behind every real one.
PRIORITY_SENTINEL = 999


def admit_arrivals(state: SchedulerState) -> Tuple[List[Process], Tuple[Process, ...]]:
    """
    Split the pending processes into those that have arrived by
    ``state.current_time`` and those still in the future.

    Both sides keep registry order. Processes already ready, running or
    completed are never in ``pending``, so they cannot be admitted twice.
    """
    now = state.current_time
    arrived = [p for p in state.pending if p.arrival_time <= now]
    still_pending = tuple(p for p in state.pending if p.arrival_time > now)
    return arrived, still_pending


def _fifo(ready: List[Process]) -> List[Process]:
    return ready


def _head(ready: List[Process]) -> int:
    return 0


def _never(running: Process, ready: List[Process]) -> bool:
    return False


def _no_grant(process: Process, params: Any) -> Any:
    return params


def _no_consume(process: Process, params: Any) -> Tuple[Any, bool]:
    return params, False


def _keep(params: Any) -> Any:
    return params


def _accept(params: Any) -> None:
    return None


@dataclass(frozen=True)
class Policy:
    """
    The pieces that distinguish one scheduling discipline from another.

    ``step`` owns admission, dispatch, completion and context-switch
    bookkeeping; a policy only decides:

    - ``order``: how the ready queue is arranged before selection,
    - ``select``: which index of the ready queue is dispatched,
    - ``preempts``: whether the running process must give up the CPU now,
    - ``grant`` / ``consume`` / ``clear``: quantum bookkeeping on dispatch,
      after each executed tick, and after completion or preemption,
    - ``validate``: refusal of unusable parameters.
    """

    name: str
    order: Callable[[List[Process]], List[Process]] = _fifo
    select: Callable[[List[Process]], int] = _head
    preempts: Callable[[Process, List[Process]], bool] = _never
    grant: Callable[[Process, Any], Any] = _no_grant
    consume: Callable[[Process, Any], Tuple[Any, bool]] = _no_consume
    clear: Callable[[Any], Any] = _keep
    validate: Callable[[Any], None] = _accept


def _front_of_class(ready: List[Process], process: Process) -> int:
    for idx, p in enumerate(ready):
        if p.queue_class == process.queue_class:
            return idx
    return len(ready)


def step(policy: Policy, state: SchedulerState, params: Any = None) -> Tuple[SchedulerState, Any]:
    """
    Execute tick ``state.current_time`` and return the next snapshot together
    with the updated policy parameters. ``state`` itself is never modified.
    """
    policy.validate(params)

    now = state.current_time
    arrived, pending = admit_arrivals(state)
    for p in arrived:
        logger.debug("%s t=%d: %s arrives", policy.name, now, p.pid)

    ready = policy.order(list(state.ready_queue) + arrived)
    running = state.running
    completed = list(state.completed)
    timeline = list(state.timeline)
    switches = state.context_switches

    def dispatch(at: int, previous: Optional[Process]) -> None:
        nonlocal running, params, switches
        if not ready:
            return
        chosen = ready.pop(policy.select(ready))
        running = chosen
        params = policy.grant(chosen, params)
        if previous is not None and previous.pid == chosen.pid:
            # Sole ready process after its own quantum ran out: it never
            # left the CPU, so no new timeline entry.
            logger.debug("%s t=%d: %s keeps the CPU", policy.name, at, chosen.pid)
            return
        timeline.append(TimelineEntry(pid=chosen.pid, name=chosen.name, start=at, color=chosen.color))
        switches += 1
        logger.debug("%s t=%d: dispatch %s", policy.name, at, chosen.pid)

    if running is not None and policy.preempts(running, ready):
        logger.debug("%s t=%d: preempt %s", policy.name, now, running.pid)
        preempted = running
        running = None
        params = policy.clear(params)
        if timeline and timeline[-1].pid == preempted.pid and timeline[-1].start == now:
            # Dispatched at this boundary and displaced before its first tick:
            # it never held the CPU, so drop the dispatch and keep its turn.
            timeline.pop()
            switches -= 1
            ready.insert(_front_of_class(ready, preempted), preempted)
        else:
            ready.append(preempted)
        dispatch(now, preempted)

    if running is None:
        dispatch(now, None)

    if running is not None:
        running = replace(running, remaining_time=running.remaining_time - 1)
        params, expired = policy.consume(running, params)

        if running.remaining_time == 0:
            completed.append(CompletedProcess(process=running, completion_time=now + 1))
            logger.debug("%s t=%d: %s completes", policy.name, now + 1, running.pid)
            running = None
            params = policy.clear(params)
            dispatch(now + 1, None)
        elif expired:
            logger.debug("%s t=%d: %s quantum expired", policy.name, now + 1, running.pid)
            expired_process = running
            ready.append(expired_process)
            running = None
            dispatch(now + 1, expired_process)

    next_state = SchedulerState(
        current_time=now + 1,
        pending=pending,
        ready_queue=tuple(ready),
        running=running,
        completed=tuple(completed),
        timeline=tuple(timeline),
        context_switches=switches,
    )
    return next_state, params


# --- SJF / Priority -------------------------------------------------------


def _by_burst(ready: List[Process]) -> List[Process]:
    # sorted() is stable: equal bursts keep queue order.
    return sorted(ready, key=lambda p: p.burst_time)


def _priority_key(p: Process) -> int:
    return p.priority if p.priority is not None else PRIORITY_SENTINEL


def _by_priority(ready: List[Process]) -> List[Process]:
    return sorted(ready, key=_priority_key)


# --- Round Robin ----------------------------------------------------------


def _rr_validate(params: Any) -> None:
    if not isinstance(params, RoundRobinParams):
        raise InvalidParameter("Round Robin requires RoundRobinParams carrying a time quantum")
    if params.time_quantum is None or params.time_quantum < 1:
        raise InvalidParameter(f"Round Robin requires a positive quantum, got {params.time_quantum!r}")


def _rr_grant(process: Process, params: RoundRobinParams) -> RoundRobinParams:
    return replace(params, quantum_remaining=params.time_quantum)


def _rr_consume(process: Process, params: RoundRobinParams) -> Tuple[RoundRobinParams, bool]:
    left = params.quantum_remaining - 1
    return replace(params, quantum_remaining=left), left <= 0


def _rr_clear(params: RoundRobinParams) -> RoundRobinParams:
    return replace(params, quantum_remaining=0)


# --- Multilevel Queue -----------------------------------------------------


def _mlq_validate(params: Any) -> None:
    if not isinstance(params, MultilevelParams):
        raise InvalidParameter("Multilevel Queue requires MultilevelParams")
    for label, quantum in (("medium", params.medium_quantum), ("low", params.low_quantum)):
        if quantum < 1:
            raise InvalidParameter(f"Multilevel Queue {label} quantum must be positive, got {quantum}")


def _mlq_select(ready: List[Process]) -> int:
    # The class partition is read straight off the queue order: the first
    # process of the highest non-empty class wins.
    return min(range(len(ready)), key=lambda i: ready[i].queue_class)


def _mlq_preempts(running: Process, ready: List[Process]) -> bool:
    return running.queue_class != HIGH and any(p.queue_class == HIGH for p in ready)


def _mlq_grant(process: Process, params: MultilevelParams) -> MultilevelParams:
    if process.queue_class == MEDIUM:
        return replace(params, medium_remaining=params.medium_quantum)
    if process.queue_class == LOW:
        return replace(params, low_remaining=params.low_quantum)
    return params


def _mlq_consume(process: Process, params: MultilevelParams) -> Tuple[MultilevelParams, bool]:
    if process.queue_class == MEDIUM:
        left = params.medium_remaining - 1
        return replace(params, medium_remaining=left), left <= 0
    if process.queue_class == LOW:
        left = params.low_remaining - 1
        return replace(params, low_remaining=left), left <= 0
    return params, False


def _mlq_clear(params: MultilevelParams) -> MultilevelParams:
    return replace(params, medium_remaining=0, low_remaining=0)


ALGORITHMS: Dict[str, Policy] = {
    "fcfs": Policy(name="FCFS"),
    "sjf": Policy(name="SJF", order=_by_burst),
    "rr": Policy(
        name="Round Robin",
        grant=_rr_grant,
        consume=_rr_consume,
        clear=_rr_clear,
        validate=_rr_validate,
    ),
    "priority": Policy(name="Priority", order=_by_priority),
    "mlq": Policy(
        name="Multilevel Queue",
        select=_mlq_select,
        preempts=_mlq_preempts,
        grant=_mlq_grant,
        consume=_mlq_consume,
        clear=_mlq_clear,
        validate=_mlq_validate,
    ),
}


def get_policy(name: str) -> Policy:
    key = name.lower()
    if key not in ALGORITHMS:
        raise InvalidParameter(f"Unknown or unimplemented algorithm '{name}'")
    return ALGORITHMS[key]
