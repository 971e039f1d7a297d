from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ProcessState, ScheduledSlice

MAX_CHART_WIDTH = 80


def render_gantt(slices: List[ScheduledSlice], scale: Optional[int] = None) -> str:
    """
    Plain-text Gantt chart for consoles without styling: one row per process
    in order of first dispatch, ``#`` where it ran and ``.`` otherwise.
    """
    if not slices:
        return "(no execution)"

    slices = sorted(slices, key=lambda s: (s.start_time, s.end_time))
    total_time = max(sl.end_time for sl in slices)
    if scale is None:
        scale = chart_scale(total_time)

    pids: List[int] = []
    for sl in slices:
        if sl.pid not in pids:
            pids.append(sl.pid)
    label_width = max(len(f"P{pid}") for pid in pids)

    lines = [f"Gantt Chart (1 column = {scale} tick{'s' if scale > 1 else ''}):"]
    for pid in pids:
        cells = "".join("#" if busy else "." for busy in busy_columns(slices, pid, total_time, scale))
        lines.append(f"{f'P{pid}':<{label_width}} |{cells}|")

    columns = math.ceil(total_time / scale)
    axis = "".join(f"{col * scale:<10}" for col in range(0, columns, 10))
    lines.append(" " * (label_width + 2) + axis.rstrip())
    return "\n".join(lines)


def chart_scale(total_time: int, max_width: int = MAX_CHART_WIDTH) -> int:
    """
    Ticks per chart column so that a run fits in ``max_width`` columns.
    """
    if total_time <= 0:
        return 1
    return max(1, math.ceil(total_time / max_width))


def busy_columns(slices: Sequence[ScheduledSlice], pid: int, total_time: int, scale: int) -> List[bool]:
    """
    For each chart column, whether ``pid`` ran at any tick inside it.
    """
    columns = [False] * math.ceil(total_time / scale) if total_time > 0 else []
    for sl in slices:
        if sl.pid != pid:
            continue
        for tick in range(sl.start_time, sl.end_time):
            columns[tick // scale] = True
    return columns


def build_rich_gantt(slices: List[ScheduledSlice], processes: Sequence[ProcessState], total_time: int) -> Panel:
    """
    Build a Rich Panel with one colored row per process and a time axis.
    """
    if not slices:
        return Panel("No execution", title="Gantt Chart")

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    scale = chart_scale(total_time)
    name_width = max(len(p.name) for p in processes)

    table = Table.grid(padding=(0, 1))
    table.add_column(justify="left", no_wrap=True)
    table.add_column(no_wrap=True)
    table.add_column(no_wrap=True)

    for state in processes:
        row = Text()
        color = pid_color(state.pid)
        for busy in busy_columns(slices, state.pid, total_time, scale):
            if busy:
                row.append(" ", style=f"on {color}")
            else:
                row.append("·", style="dim")

        note = ""
        if state.descriptor.is_emergency and state.response_time is not None:
            note = f"* {state.response_time}s response"
        table.add_row(state.name.ljust(name_width), row, note)

    axis = Text()
    columns = math.ceil(total_time / scale)
    step = 10
    for col in range(0, columns, step):
        axis.append(f"{col * scale:<{step}}")
    table.add_row("", axis, "")

    subtitle = f"1 column = {scale} tick{'s' if scale > 1 else ''}, * = emergency"
    return Panel.fit(table, title=f"Gantt Chart (0-{total_time})", subtitle=subtitle)
