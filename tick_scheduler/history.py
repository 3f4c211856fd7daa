"""
Stepper and history controller.

The controller drives one algorithm tick by tick and keeps every produced
snapshot in an append-only buffer. A cursor points at the snapshot currently
shown; moving backwards and forwards over already computed snapshots is pure
replay, only stepping past the end of the buffer computes a new tick.

Phases:

- IDLE: no tick executed yet, the buffer is empty.
- STEPPED: at least one tick executed, the snapshot under the cursor still
  has unfinished processes.
- FINISHED: the snapshot under the cursor has every process completed.

Changing the algorithm, its quanta or the registry always resets first, so a
buffer only ever holds snapshots of a single configuration.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from . import engine
from .algorithms import get_policy
from .metrics import compute_metrics
from .models import LOW_QUANTUM, MEDIUM_QUANTUM, Process, SchedulerState, SimulationMetrics

logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = "idle"
    STEPPED = "stepped"
    FINISHED = "finished"


def retreat(history: Sequence[SchedulerState], cursor: int) -> Tuple[SchedulerState, int]:
    """
    Step the cursor back one entry and return the snapshot it lands on.

    Stays put on the first entry. Nothing is recomputed.
    """
    if not history:
        raise ValueError("Cannot retreat over an empty history")
    if not 0 <= cursor < len(history):
        raise IndexError(f"Cursor {cursor} outside history of length {len(history)}")
    target = max(cursor - 1, 0)
    return history[target], target


class SimulationController:
    def __init__(
        self,
        registry: Iterable[Process],
        algorithm: str = "fcfs",
        time_quantum: Optional[int] = None,
        medium_quantum: int = MEDIUM_QUANTUM,
        low_quantum: int = LOW_QUANTUM,
    ) -> None:
        get_policy(algorithm)
        self._registry: Tuple[Process, ...] = tuple(registry)
        self._algorithm = algorithm.lower()
        self._time_quantum = time_quantum
        self._medium_quantum = medium_quantum
        self._low_quantum = low_quantum

        self._states: List[SchedulerState] = []
        self._params: List[Any] = []
        self._cursor = -1
        self.reset()

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def registry(self) -> Tuple[Process, ...]:
        return self._registry

    @property
    def history(self) -> Tuple[SchedulerState, ...]:
        return tuple(self._states)

    @property
    def cursor(self) -> int:
        """Index of the shown snapshot in ``history``; -1 while idle."""
        return self._cursor

    @property
    def state(self) -> SchedulerState:
        if not self._states:
            return self._initial_state
        return self._states[self._cursor]

    @property
    def params(self) -> Any:
        if not self._params:
            return self._initial_params
        return self._params[self._cursor]

    @property
    def phase(self) -> Phase:
        if not self._states:
            return Phase.IDLE
        if self.state.is_complete:
            return Phase.FINISHED
        return Phase.STEPPED

    def reset(self) -> SchedulerState:
        """
        Drop the whole history and return the fresh t0 snapshot.
        """
        self._initial_state = engine.reset(self._registry)
        self._initial_params = engine.default_params(
            self._algorithm,
            time_quantum=self._time_quantum,
            medium_quantum=self._medium_quantum,
            low_quantum=self._low_quantum,
        )
        self._states = []
        self._params = []
        self._cursor = -1
        logger.info("Simulation reset: %s with %d processes", self._algorithm, len(self._registry))
        return self._initial_state

    def configure(
        self,
        algorithm: Optional[str] = None,
        time_quantum: Optional[int] = None,
        medium_quantum: Optional[int] = None,
        low_quantum: Optional[int] = None,
    ) -> SchedulerState:
        """
        Change the algorithm or its quanta. Arguments left as None keep their
        current value. Always resets.
        """
        if algorithm is not None:
            get_policy(algorithm)
            self._algorithm = algorithm.lower()
        if time_quantum is not None:
            self._time_quantum = time_quantum
        if medium_quantum is not None:
            self._medium_quantum = medium_quantum
        if low_quantum is not None:
            self._low_quantum = low_quantum
        return self.reset()

    def update_registry(self, registry: Iterable[Process]) -> SchedulerState:
        processes = tuple(registry)
        engine.validate_registry(processes)
        self._registry = processes
        return self.reset()

    def advance(self) -> SchedulerState:
        """
        Move one tick forward: replay a stored snapshot if the cursor is
        behind the end of the buffer, otherwise compute and append a new one.
        A finished simulation stays where it is.
        """
        current = self.state
        if current.is_complete:
            return current

        if self._cursor < len(self._states) - 1:
            self._cursor += 1
            return self._states[self._cursor]

        state, params = engine.advance(self._algorithm, current, self.params)
        self._states.append(state)
        self._params.append(params)
        self._cursor = len(self._states) - 1

        if state.is_complete:
            logger.info(
                "Simulation finished at t=%d after %d context switches",
                state.current_time,
                state.context_switches,
            )
        return state

    def retreat(self) -> SchedulerState:
        if not self._states:
            return self._initial_state
        state, self._cursor = retreat(self._states, self._cursor)
        return state

    def run_to_completion(self) -> SchedulerState:
        while not self.state.is_complete:
            self.advance()
        return self.state

    def metrics(self) -> Optional[SimulationMetrics]:
        return compute_metrics(self.state)
