from __future__ import annotations

from typing import Dict, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice, SchedulerState

FALLBACK_COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def timeline_slices(state: SchedulerState) -> List[ScheduledSlice]:
    """
    Turn the timeline of ``state`` into contiguous execution slices.

    A slice runs until the next timeline entry, or until its process
    completed if that happened first (the CPU then idled). The last slice of a
    running simulation ends at ``state.current_time``.
    """
    completion = {c.pid: c.completion_time for c in state.completed}
    entries = state.timeline
    slices: List[ScheduledSlice] = []

    for idx, entry in enumerate(entries):
        end = entries[idx + 1].start if idx + 1 < len(entries) else state.current_time
        done_at = completion.get(entry.pid)
        if done_at is not None and entry.start < done_at < end:
            end = done_at
        if end > entry.start:
            slices.append(ScheduledSlice(pid=entry.pid, start_time=entry.start, end_time=end))

    return slices


def _slice_colors(state: SchedulerState) -> Dict[str, str]:
    colors: Dict[str, str] = {}
    for entry in state.timeline:
        if entry.pid not in colors:
            colors[entry.pid] = entry.color or FALLBACK_COLORS[len(colors) % len(FALLBACK_COLORS)]
    return colors


def build_rich_gantt(state: SchedulerState) -> tuple[Panel, str]:
    """
    Build a Rich Panel with the coloured Gantt chart of ``state`` and a string
    with the matching time marks.
    """
    slices = timeline_slices(state)
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    colors = _slice_colors(state)

    bar = Text()
    labels = Text()
    time_marks = "0"
    last_time = 0

    for sl in slices:
        idle_gap = sl.start_time - last_time
        if idle_gap > 0:
            bar.append("." * idle_gap, style="dim")
            labels.append(" " * idle_gap)
            time_marks += f"{sl.start_time:>3}"

        width = sl.end_time - sl.start_time
        bar.append(" " * width, style=f"on {colors[sl.pid]}")
        labels.append(sl.pid[:width].ljust(width), style="bold")

        last_time = sl.end_time
        time_marks += f"{last_time:>3}"

    table = Table.grid(padding=(0, 0))
    table.add_row(bar)
    table.add_row(labels)

    panel = Panel.fit(table, title=f"Gantt Chart (t={state.current_time})")
    return panel, time_marks
