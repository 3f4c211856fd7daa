from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import ALGORITHMS
from .gantt import build_rich_gantt
from .history import SimulationController
from .metrics import compute_metrics
from .models import LOW_QUANTUM, MEDIUM_QUANTUM, SchedulerState
from .workload_io import load_workload

logger = logging.getLogger(__name__)

QUEUE_LABELS = {0: "High", 1: "Medium", 2: "Low"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tick-scheduler",
        description="Tick-by-tick CPU scheduling simulator (FCFS, SJF, RR, Priority, MLQ).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every dispatch, preemption and completion.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Simulate one algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help="Algorithm to use (fcfs, sjf, rr, priority, mlq).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round-robin (ignored by the other algorithms).",
    )
    _add_mlq_arguments(run_parser)
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Print the scheduler state after every tick.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.3,
        help="Seconds to wait between ticks when --step is used (default: 0.3).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(ALGORITHMS),
        help="Algorithms to compare (default: fcfs sjf rr priority mlq).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=2,
        help="Time quantum used for RR when included (default: 2).",
    )
    _add_mlq_arguments(compare_parser)

    return parser


def _add_mlq_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--medium-quantum",
        type=int,
        default=MEDIUM_QUANTUM,
        help=f"Multilevel queue quantum of the medium class (default: {MEDIUM_QUANTUM}).",
    )
    parser.add_argument(
        "--low-quantum",
        type=int,
        default=LOW_QUANTUM,
        help=f"Multilevel queue quantum of the low class (default: {LOW_QUANTUM}).",
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
    )


def _describe_tick(state: SchedulerState) -> str:
    running = state.running.pid if state.running else "[dim]idle[/dim]"
    ready = ", ".join(p.pid for p in state.ready_queue) or "-"
    total = len(state.processes())
    return (
        f"t={state.current_time:3d}: running {running} | ready: {ready} "
        f"| done {len(state.completed)}/{total} | switches {state.context_switches}"
    )


def _step_through(controller: SimulationController, delay: float, console: Console) -> None:
    console.print(f"[bold]Stepping {controller.algorithm}[/bold]")
    console.print("[dim]Press Ctrl+C to skip to the result.[/dim]")
    while not controller.state.is_complete:
        state = controller.advance()
        console.print(_describe_tick(state))
        time.sleep(delay)


def _print_result(controller: SimulationController, console: Console, quantum: Optional[int]) -> None:
    state = controller.state

    console.print(f"[bold]Algorithm:[/bold] {controller.algorithm}")
    if quantum is not None and controller.algorithm == "rr":
        console.print(f"[bold]Quantum:[/bold] {quantum}")

    console.print()

    panel, time_marks = build_rich_gantt(state)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()

    result = compute_metrics(state)
    if result is None:
        console.print("[yellow]No process completed.[/yellow]")
        return

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Start",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
        "Priority",
        "Queue",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority", "Queue"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in sorted(result.processes, key=lambda m: (m.arrival_time, m.pid)):
        proc_table.add_row(
            p.pid,
            str(p.arrival_time),
            str(p.burst_time),
            str(p.start_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
            "" if p.priority is None else str(p.priority),
            QUEUE_LABELS.get(p.queue_class, str(p.queue_class)),
        )

    console.print(proc_table)
    console.print()

    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{result.avg_waiting:.2f}")
    sys_table.add_row("Avg turnaround", f"{result.avg_turnaround:.2f}")
    sys_table.add_row("Avg response", f"{result.avg_response:.2f}")
    sys_table.add_row("Context switches", str(result.context_switches))
    if result.system:
        sys_metrics = result.system
        sys_table.add_row("Throughput (proc/time)", f"{sys_metrics.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys_metrics.cpu_utilization*100:.1f}%")
        sys_table.add_row("Starvation count", str(sys_metrics.starvation_count))

    console.print(sys_table)


def _run(args: argparse.Namespace, console: Console) -> None:
    processes = load_workload(Path(args.workload))
    controller = SimulationController(
        processes,
        algorithm=args.algorithm,
        time_quantum=args.quantum,
        medium_quantum=args.medium_quantum,
        low_quantum=args.low_quantum,
    )
    if args.step:
        try:
            _step_through(controller, args.step_delay, console)
        except KeyboardInterrupt:
            console.print("[yellow]Stepping skipped.[/yellow]")
    controller.run_to_completion()
    _print_result(controller, console, args.quantum)


def _compare(args: argparse.Namespace, console: Console) -> None:
    processes = load_workload(Path(args.workload))

    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Switches", justify="right")

    for alg in args.algorithms:
        controller = SimulationController(
            processes,
            algorithm=alg,
            time_quantum=args.quantum,
            medium_quantum=args.medium_quantum,
            low_quantum=args.low_quantum,
        )
        controller.run_to_completion()
        result = controller.metrics()
        quantum = ""
        if controller.algorithm == "rr":
            quantum = str(args.quantum)
        elif controller.algorithm == "mlq":
            quantum = f"{args.medium_quantum}/{args.low_quantum}"
        if result is None:
            summary_table.add_row(controller.algorithm, quantum, "-", "-", "-", "0")
            continue
        summary_table.add_row(
            controller.algorithm,
            quantum,
            f"{result.avg_waiting:.2f}",
            f"{result.avg_turnaround:.2f}",
            f"{result.avg_response:.2f}",
            str(result.context_switches),
        )

    console.print(summary_table)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    console = Console()

    try:
        if args.command == "run":
            _run(args, console)
            return 0
        if args.command == "compare":
            _compare(args, console)
            return 0
    except ValueError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
