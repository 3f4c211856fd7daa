from __future__ import annotations

from typing import Dict, List, Optional

from .models import ProcessMetrics, SchedulerState, SimulationMetrics, SystemMetrics


def _first_dispatch(state: SchedulerState) -> Dict[str, int]:
    first: Dict[str, int] = {}
    for entry in state.timeline:
        first.setdefault(entry.pid, entry.start)
    return first


def process_metrics(state: SchedulerState) -> List[ProcessMetrics]:
    """
    Per-process metrics for every process completed in ``state``, in
    completion order.
    """
    first = _first_dispatch(state)
    metrics: List[ProcessMetrics] = []
    for done in state.completed:
        p = done.process
        turnaround_time = done.completion_time - p.arrival_time
        start_time = first.get(p.pid, p.arrival_time)
        metrics.append(
            ProcessMetrics(
                pid=p.pid,
                name=p.name,
                arrival_time=p.arrival_time,
                burst_time=p.burst_time,
                start_time=start_time,
                completion_time=done.completion_time,
                waiting_time=turnaround_time - p.burst_time,
                turnaround_time=turnaround_time,
                response_time=start_time - p.arrival_time,
                priority=p.priority,
                queue_class=p.queue_class,
            )
        )
    return metrics


def compute_system_metrics(processes: List[ProcessMetrics]) -> SystemMetrics:
    """
    Compute throughput and CPU utilization over the completed processes.
    """
    if not processes:
        return SystemMetrics(cpu_busy_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)

    makespan = max(p.completion_time for p in processes)
    cpu_busy_time = sum(p.burst_time for p in processes)

    throughput = len(processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    # Count processes whose waiting time is more than 2x the average.
    avg_wait = sum(p.waiting_time for p in processes) / len(processes)
    starvation_count = sum(1 for p in processes if p.waiting_time > 2 * avg_wait)

    return SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        starvation_count=starvation_count,
    )


def compute_metrics(state: SchedulerState) -> Optional[SimulationMetrics]:
    """
    Turnaround, waiting and response times of the completed processes plus
    their averages. Returns None while nothing has completed.
    """
    processes = process_metrics(state)
    if not processes:
        return None

    n = len(processes)
    return SimulationMetrics(
        processes=processes,
        avg_waiting=sum(p.waiting_time for p in processes) / n,
        avg_turnaround=sum(p.turnaround_time for p in processes) / n,
        avg_response=sum(p.response_time for p in processes) / n,
        context_switches=state.context_switches,
        system=compute_system_metrics(processes),
    )
