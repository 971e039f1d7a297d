"""
Rich renderables for scenario reports.

Everything here formats results that the engine already produced; nothing
in this module runs a scheduler.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.rule import Rule
from rich.table import Table

from .gantt import build_rich_gantt, render_gantt
from .metrics import (
    best_result,
    format_emergency_range,
    percent_change,
    rate_emergency,
    rate_response,
)
from .models import EventKind, ProcessDescriptor, ScheduleResult
from .scenarios import emergency_count


def workload_table(workload: Sequence[ProcessDescriptor]) -> Table:
    table = Table(title="Process Workload", box=box.SIMPLE_HEAVY)
    table.add_column("PID", justify="right")
    table.add_column("Process Name")
    table.add_column("Priority", justify="center")
    table.add_column("Arrival(s)", justify="right")
    table.add_column("Burst(s)", justify="right")
    table.add_column("Medical Classification")

    for p in workload:
        style = "bold red" if p.is_emergency else None
        table.add_row(
            str(p.pid),
            p.name,
            str(p.priority),
            str(p.arrival_time),
            str(p.burst_time),
            p.classification,
            style=style,
        )
    return table


def workload_summary(workload: Sequence[ProcessDescriptor]) -> str:
    total = len(workload)
    emergencies = emergency_count(workload)
    if emergencies:
        return f"Total Processes: {total} ({emergencies} emergencies + {total - emergencies} supporting operations)"
    return f"Total Processes: {total}"


def metrics_table(result: ScheduleResult) -> Table:
    m = result.metrics

    table = Table(title="Performance Metrics", box=box.SIMPLE_HEAVY)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_column("Assessment")

    table.add_row("Average Response Time", f"{m.avg_response_time:.2f}s", rate_response(m.avg_response_time))
    table.add_row("Average Turnaround Time", f"{m.avg_turnaround_time:.2f}s", "")
    table.add_row("Average Waiting Time", f"{m.avg_waiting_time:.2f}s", "")
    if m.emergency_count:
        table.add_row(
            "EMERGENCY Response Time",
            f"{format_emergency_range(m)}s",
            rate_emergency(m.emergency_response_max),
        )
    table.add_row("CPU Utilization", f"{m.cpu_utilization:.2f}%", "")
    table.add_row("Context Switches", str(m.context_switches), "")
    table.add_row("Throughput", f"{m.throughput:.3f} processes/second", "")
    table.add_row("Total Execution Time", f"{m.total_time}s", "")
    return table


def _fmt(value: Optional[int]) -> str:
    return "-" if value is None else str(value)


def process_table(result: ScheduleResult) -> Table:
    """
    Per-process results, emergencies listed first.
    """
    headers = [
        "Process",
        "Priority",
        "Arrival",
        "Burst",
        "Start",
        "Finish",
        "Response",
        "TAT",
        "Wait",
        "Left",
    ]

    table = Table(title="Individual Process Performance", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "left" if h == "Process" else "right"
        table.add_column(h, justify=justify)

    ordered = sorted(result.processes, key=lambda s: not s.descriptor.is_emergency)
    for s in ordered:
        table.add_row(
            s.name,
            str(s.priority),
            str(s.arrival_time),
            str(s.burst_time),
            _fmt(s.start_time),
            _fmt(s.completion_time),
            _fmt(s.response_time),
            _fmt(s.turnaround_time),
            _fmt(s.waiting_time),
            str(s.remaining_time),
            style="bold red" if s.descriptor.is_emergency else None,
        )
    return table


def key_events(result: ScheduleResult) -> List[str]:
    """
    Human-readable event log: every emergency start and completion, every
    other start, and preemptions of background work.
    """
    lines: List[str] = []
    first_emergency: Optional[int] = None
    last_emergency: Optional[int] = None

    for event in result.events:
        state = result.process(event.pid)
        if state.descriptor.is_emergency:
            if event.kind is EventKind.START and state.start_time == event.tick:
                marker = "IMMEDIATE" if state.response_time == 0 else "ok"
                lines.append(f"{event.tick}s    {state.name} starts -> Response: {state.response_time}s {marker}")
                if first_emergency is None:
                    first_emergency = event.tick
            elif event.kind is EventKind.COMPLETE:
                lines.append(f"{event.tick}s    {state.name} completes")
                last_emergency = event.tick
        elif event.kind is EventKind.START:
            lines.append(f"{event.tick}s    {state.name} starts (P{state.priority})")
        elif event.kind is EventKind.PREEMPT:
            lines.append(f"{event.tick}s    {state.name} preempted")

    if first_emergency is not None and last_emergency is not None:
        lines.append(
            f"{last_emergency}s    All emergencies handled ({last_emergency - first_emergency} seconds total)"
        )
    lines.append(f"{result.total_time}s    All processes complete")
    return lines


def comparison_table(results: Sequence[ScheduleResult], labels: Sequence[str], title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("Metric")
    for label in labels:
        table.add_column(label, justify="right")

    def row(name: str, values: List[str]) -> None:
        table.add_row(name, *values)

    row("Avg Response Time", [f"{r.metrics.avg_response_time:.2f}s" for r in results])
    row("Avg Turnaround Time", [f"{r.metrics.avg_turnaround_time:.2f}s" for r in results])
    row("Avg Waiting Time", [f"{r.metrics.avg_waiting_time:.2f}s" for r in results])
    if any(r.metrics.emergency_count for r in results):
        row("Emergency Response", [f"{format_emergency_range(r.metrics)}s" for r in results])
    row("Context Switches", [str(r.metrics.context_switches) for r in results])
    row("CPU Utilization", [f"{r.metrics.cpu_utilization:.2f}%" for r in results])
    row("Throughput", [f"{r.metrics.throughput:.3f}" for r in results])
    row("Total Time", [f"{r.metrics.total_time}s" for r in results])
    return table


def winner_summary(results: Sequence[ScheduleResult], labels: Sequence[str]) -> List[str]:
    """
    Headline lines naming the best policy on average response time.
    """
    if not results:
        return []

    label_of = {r.key: label for r, label in zip(results, labels)}
    winner = best_result(results, "avg_response_time")
    lines = [f"WINNER (avg response): {label_of[winner.key]}"]

    with_emergencies = [r for r in results if r.metrics.emergency_count]
    if with_emergencies:
        fastest = best_result(with_emergencies, "emergency_response_max")
        lines.append(
            f"- Best emergency response: {label_of[fastest.key]} ({format_emergency_range(fastest.metrics)}s)"
        )

    fcfs = next((r for r in results if r.key == "fcfs"), None)
    if fcfs is not None and winner.key != "fcfs" and fcfs.metrics.avg_response_time > 0:
        faster = -percent_change(winner.metrics.avg_response_time, fcfs.metrics.avg_response_time)
        lines.append(f"- {faster:.0f}% faster average response than FCFS")
    return lines


def overhead_summary(results: Sequence[ScheduleResult]) -> Optional[str]:
    """
    Round robin context switches against preemptive priority.
    """
    by_key = {r.key: r for r in results}
    rr = by_key.get("rr")
    priority = by_key.get("priority")
    if rr is None or priority is None:
        return None

    overhead = percent_change(rr.metrics.context_switches, priority.metrics.context_switches)
    return (
        f"Context switches: {rr.metrics.context_switches} "
        f"(vs {priority.metrics.context_switches} for Priority = {overhead:.0f}% overhead)"
    )


def print_policy_section(
    console: Console,
    result: ScheduleResult,
    heading: str,
    *,
    show_timeline: bool = False,
    plain_timeline: bool = False,
    show_details: bool = False,
) -> None:
    console.print()
    console.print(Rule(f"[bold]{heading}[/bold]"))
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    if show_timeline:
        if plain_timeline:
            console.print(render_gantt(result.timeline), markup=False, highlight=False)
        else:
            console.print(build_rich_gantt(result.timeline, result.processes, result.total_time))
        console.print("[bold]Key Execution Events:[/bold]")
        for line in key_events(result):
            console.print(f"  {line}", highlight=False)

    console.print(metrics_table(result))
    if show_details:
        console.print(process_table(result))


def print_scenario_report(
    console: Console,
    title: str,
    workload: Sequence[ProcessDescriptor],
    results: Sequence[ScheduleResult],
    headings: Sequence[str],
    labels: Sequence[str],
    *,
    subtitle: Optional[str] = None,
    description: Optional[Sequence[str]] = None,
    show_timeline: bool = False,
    plain_timeline: bool = False,
    show_details: bool = False,
) -> None:
    console.print()
    console.print(Rule(f"[bold cyan]{title}[/bold cyan]", style="cyan"))
    if subtitle:
        console.print(subtitle, justify="center")

    if description:
        console.print("[bold]Scenario Description:[/bold]")
        for line in description:
            console.print(f"  - {line}")

    console.print(workload_table(workload))
    console.print(workload_summary(workload))

    for index, (result, heading) in enumerate(zip(results, headings), start=1):
        print_policy_section(
            console,
            result,
            f"ALGORITHM {index}: {heading}",
            show_timeline=show_timeline,
            plain_timeline=plain_timeline,
            show_details=show_details,
        )

    overhead = overhead_summary(results)
    if overhead and show_details:
        console.print(f"[bold]Overhead analysis:[/bold] {overhead}")

    print_comparison(console, results, labels, title="Algorithm Comparison Summary")


def print_comparison(
    console: Console,
    results: Sequence[ScheduleResult],
    labels: Sequence[str],
    title: str = "Algorithm Comparison",
) -> None:
    console.print()
    console.print(comparison_table(results, labels, title=title))
    for line in winner_summary(results, labels):
        console.print(line, highlight=False)
