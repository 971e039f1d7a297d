from __future__ import annotations

from typing import Iterable, List, Sequence

from .models import Metrics, ProcessState, ScheduleResult


def compute_metrics(states: Iterable[ProcessState], total_time: int, context_switches: int) -> Metrics:
    """
    Aggregate statistics for a finished run.

    Averages cover completed processes only; emergency bounds cover
    completed priority-1 processes and are 0 when there are none. Every
    ratio is 0 when its denominator is 0, so an empty run yields zeros.
    """
    completed: List[ProcessState] = [s for s in states if s.is_complete]

    if not completed:
        return Metrics(context_switches=context_switches, total_time=total_time)

    n = len(completed)
    total_burst = sum(s.burst_time for s in completed)
    emergency_responses = [s.response_time for s in completed if s.descriptor.is_emergency]

    return Metrics(
        avg_response_time=sum(s.response_time for s in completed) / n,
        avg_turnaround_time=sum(s.turnaround_time for s in completed) / n,
        avg_waiting_time=sum(s.waiting_time for s in completed) / n,
        emergency_response_min=min(emergency_responses) if emergency_responses else 0,
        emergency_response_max=max(emergency_responses) if emergency_responses else 0,
        cpu_utilization=total_burst / total_time * 100 if total_time > 0 else 0.0,
        throughput=n / total_time if total_time > 0 else 0.0,
        context_switches=context_switches,
        total_time=total_time,
        completed=n,
        emergency_count=len(emergency_responses),
    )


def rate_response(avg_response_time: float) -> str:
    if avg_response_time < 5:
        return "Excellent"
    if avg_response_time < 15:
        return "Good"
    return "Poor"


def rate_emergency(emergency_response_max: int) -> str:
    if emergency_response_max <= 5:
        return "EXCELLENT"
    if emergency_response_max <= 10:
        return "Acceptable"
    return "CRITICAL DELAY"


def format_emergency_range(metrics: Metrics) -> str:
    if metrics.emergency_response_min == metrics.emergency_response_max:
        return f"{metrics.emergency_response_min}"
    return f"{metrics.emergency_response_min}-{metrics.emergency_response_max}"


def percent_change(value: float, baseline: float) -> float:
    """
    Relative difference of ``value`` against ``baseline`` in percent.
    """
    if baseline == 0:
        return 0.0
    return (value - baseline) / baseline * 100


def best_result(results: Sequence[ScheduleResult], attribute: str) -> ScheduleResult:
    """
    Return the result with the lowest value of a Metrics attribute; the
    earlier policy wins ties.
    """
    if not results:
        raise ValueError("No results to compare")
    return min(results, key=lambda r: getattr(r.metrics, attribute))
