from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# Display colours handed out to processes that do not bring their own.
PALETTE = (
    "#3b82f6",
    "#10b981",
    "#f59e0b",
    "#ef4444",
    "#8b5cf6",
    "#ec4899",
    "#06b6d4",
    "#84cc16",
)

HIGH, MEDIUM, LOW = 0, 1, 2
QUEUE_CLASSES = (HIGH, MEDIUM, LOW)

MEDIUM_QUANTUM = 3
LOW_QUANTUM = 5


@dataclass(frozen=True)
class Process:
    pid: str
    arrival_time: int
    burst_time: int
    priority: Optional[int] = None
    queue_class: int = HIGH
    name: str = ""
    remaining_time: Optional[int] = None
    color: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            object.__setattr__(self, "name", self.pid)
        if self.remaining_time is None:
            object.__setattr__(self, "remaining_time", self.burst_time)


@dataclass(frozen=True)
class CompletedProcess:
    process: Process
    completion_time: int

    @property
    def pid(self) -> str:
        return self.process.pid


@dataclass(frozen=True)
class TimelineEntry:
    """
    A process starting to occupy the CPU at a given tick.
    """

    pid: str
    name: str
    start: int
    color: Optional[str] = None


@dataclass(frozen=True)
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: str
    start_time: int
    end_time: int


@dataclass(frozen=True)
class SchedulerState:
    """
    Snapshot of the simulation before tick ``current_time`` executes.

    Every process of the registry sits in exactly one of ``pending``,
    ``ready_queue``, ``running`` or ``completed``.
    """

    current_time: int = 0
    pending: Tuple[Process, ...] = ()
    ready_queue: Tuple[Process, ...] = ()
    running: Optional[Process] = None
    completed: Tuple[CompletedProcess, ...] = ()
    timeline: Tuple[TimelineEntry, ...] = ()
    context_switches: int = 0

    @property
    def is_complete(self) -> bool:
        return not self.pending and not self.ready_queue and self.running is None

    def processes(self) -> List[Process]:
        """All processes of the run, whatever their current partition."""
        procs = list(self.pending) + list(self.ready_queue)
        if self.running is not None:
            procs.append(self.running)
        procs.extend(c.process for c in self.completed)
        return procs


@dataclass(frozen=True)
class RoundRobinParams:
    time_quantum: Optional[int]
    quantum_remaining: int = 0


@dataclass(frozen=True)
class MultilevelParams:
    """
    Class quanta and per-class counters for the multilevel queue.

    High class processes run to completion and have no counter.
    """

    medium_quantum: int = MEDIUM_QUANTUM
    low_quantum: int = LOW_QUANTUM
    medium_remaining: int = 0
    low_remaining: int = 0


@dataclass(frozen=True)
class ProcessMetrics:
    pid: str
    name: str
    arrival_time: int
    burst_time: int
    start_time: int
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int
    priority: Optional[int] = None
    queue_class: int = HIGH


@dataclass(frozen=True)
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    starvation_count: int = 0


@dataclass(frozen=True)
class SimulationMetrics:
    processes: List[ProcessMetrics] = field(default_factory=list)
    avg_waiting: float = 0.0
    avg_turnaround: float = 0.0
    avg_response: float = 0.0
    context_switches: int = 0
    system: Optional[SystemMetrics] = None
