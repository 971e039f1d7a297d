from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional, Sequence

from .errors import WorkloadError
from .metrics import compute_metrics
from .models import Event, EventKind, ProcessDescriptor, ProcessState, ScheduleResult

logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = 4


def _fresh_states(processes: Sequence[ProcessDescriptor]) -> List[ProcessState]:
    # Every run owns its own states; descriptors are frozen and can be shared.
    # Events and lookups are keyed by pid, so pids must be unique.
    pids = [p.pid for p in processes]
    if len(set(pids)) != len(pids):
        duplicates = sorted({pid for pid in pids if pids.count(pid) > 1})
        raise WorkloadError(f"Duplicate process ids: {duplicates}")
    return [ProcessState.fresh(p) for p in processes]


def _finish(
    label: str,
    key: str,
    quantum: Optional[int],
    states: List[ProcessState],
    events: List[Event],
    total_time: int,
    context_switches: int,
) -> ScheduleResult:
    metrics = compute_metrics(states, total_time, context_switches)
    logger.info(
        "%s: %d processes finished at tick %d (%d context switches)",
        label,
        metrics.completed,
        total_time,
        context_switches,
    )
    return ScheduleResult(
        policy=label,
        key=key,
        quantum=quantum,
        processes=tuple(states),
        events=tuple(events),
        total_time=total_time,
        context_switches=context_switches,
        metrics=metrics,
    )


def _run_to_completion(state: ProcessState, time: int, events: List[Event]) -> int:
    """
    Dispatch a process at ``time`` and run it without interruption.
    Returns the completion tick.
    """
    state.start(time)
    events.append(Event(time, state.pid, EventKind.START))
    logger.debug("t=%d start pid=%d (%s)", time, state.pid, state.name)

    time += state.remaining_time
    state.execute(state.remaining_time)
    state.complete(time)
    events.append(Event(time, state.pid, EventKind.COMPLETE))
    logger.debug("t=%d complete pid=%d", time, state.pid)
    return time


def schedule_priority(processes: Sequence[ProcessDescriptor], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Preemptive priority scheduling, simulated one tick at a time.

    Lower numeric priority wins; ties go to the process listed first in the
    workload, even over the one currently running. Nothing ages, so a steady
    stream of urgent work can starve low-priority processes.
    """
    states = _fresh_states(processes)
    events: List[Event] = []

    time = 0
    context_switches = 0
    completed = 0
    running: Optional[int] = None

    while completed < len(states):
        ready = [i for i, s in enumerate(states) if s.is_ready(time)]
        if not ready:
            time += 1
            continue

        chosen = min(ready, key=lambda i: (states[i].priority, i))

        if chosen != running:
            if running is not None and states[running].remaining_time > 0:
                events.append(Event(time, states[running].pid, EventKind.PREEMPT))
                logger.debug("t=%d preempt pid=%d for pid=%d", time, states[running].pid, states[chosen].pid)

            states[chosen].start(time)
            events.append(Event(time, states[chosen].pid, EventKind.START))
            logger.debug("t=%d start pid=%d (%s)", time, states[chosen].pid, states[chosen].name)
            context_switches += 1
            running = chosen

        current = states[chosen]
        current.execute(1)
        time += 1

        if current.remaining_time == 0:
            current.complete(time)
            events.append(Event(time, current.pid, EventKind.COMPLETE))
            logger.debug("t=%d complete pid=%d", time, current.pid)
            completed += 1
            running = None

    return _finish("Priority (Preemptive)", "priority", None, states, events, time, context_switches)


def schedule_fcfs(processes: Sequence[ProcessDescriptor], quantum: Optional[int] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    states = _fresh_states(processes)
    events: List[Event] = []

    time = 0
    context_switches = 0

    # sorted() is stable, so equal arrivals keep workload order.
    for state in sorted(states, key=lambda s: s.arrival_time):
        if time < state.arrival_time:
            time = state.arrival_time
        time = _run_to_completion(state, time, events)
        context_switches += 1

    return _finish("FCFS", "fcfs", None, states, events, time, context_switches)


def schedule_sjf(processes: Sequence[ProcessDescriptor], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time (ties go to the
    earlier workload entry). A chosen job always runs to completion.
    """
    states = _fresh_states(processes)
    events: List[Event] = []

    time = 0
    context_switches = 0
    completed = 0

    while completed < len(states):
        ready = [i for i, s in enumerate(states) if s.is_ready(time)]
        if not ready:
            time += 1
            continue

        chosen = min(ready, key=lambda i: (states[i].burst_time, i))
        time = _run_to_completion(states[chosen], time, events)
        context_switches += 1
        completed += 1

    return _finish("SJF (Non-preemptive)", "sjf", None, states, events, time, context_switches)


def schedule_rr(processes: Sequence[ProcessDescriptor], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum (4 ticks by default).
    """
    if quantum is None:
        quantum = DEFAULT_QUANTUM
    if quantum <= 0:
        raise ValueError(f"Round Robin requires a positive quantum, got {quantum}")

    states = _fresh_states(processes)
    events: List[Event] = []

    time = 0
    context_switches = 0
    completed = 0

    ready: Deque[int] = deque()
    queued: set[int] = set()

    def enqueue_new_arrivals(current_time: int, skip: Optional[int] = None) -> None:
        for i, s in enumerate(states):
            if i != skip and i not in queued and s.is_ready(current_time):
                ready.append(i)
                queued.add(i)

    enqueue_new_arrivals(time)

    while completed < len(states):
        if not ready:
            time += 1
            enqueue_new_arrivals(time)
            continue

        idx = ready.popleft()
        queued.discard(idx)
        state = states[idx]

        state.start(time)
        events.append(Event(time, state.pid, EventKind.START))
        logger.debug("t=%d dispatch pid=%d (%d remaining)", time, state.pid, state.remaining_time)

        run_time = min(quantum, state.remaining_time)
        state.execute(run_time)
        time += run_time
        context_switches += 1

        # Arrivals during the slice queue up ahead of the process just run.
        enqueue_new_arrivals(time, skip=idx)

        if state.remaining_time == 0:
            state.complete(time)
            events.append(Event(time, state.pid, EventKind.COMPLETE))
            logger.debug("t=%d complete pid=%d", time, state.pid)
            completed += 1
        else:
            events.append(Event(time, state.pid, EventKind.PREEMPT))
            ready.append(idx)
            queued.add(idx)

    return _finish("Round Robin", "rr", quantum, states, events, time, context_switches)


@dataclass(frozen=True)
class Policy:
    """
    A scheduling policy: a name for humans, a key for the CLI and the
    function that runs it.
    """

    key: str
    label: str
    short: str
    runner: Callable[..., ScheduleResult]
    preemptive: bool
    uses_quantum: bool = False

    def run(self, processes: Sequence[ProcessDescriptor], quantum: Optional[int] = None) -> ScheduleResult:
        return self.runner(processes, quantum=quantum if self.uses_quantum else None)


POLICIES = (
    Policy("priority", "Priority (Preemptive)", "Priority", schedule_priority, preemptive=True),
    Policy("fcfs", "FCFS (First Come First Served)", "FCFS", schedule_fcfs, preemptive=False),
    Policy("sjf", "SJF (Shortest Job First)", "SJF", schedule_sjf, preemptive=False),
    Policy("rr", "Round Robin", "Round Robin", schedule_rr, preemptive=True, uses_quantum=True),
)

ALGORITHMS = {policy.key: policy for policy in POLICIES}


def get_policy(name: str) -> Policy:
    name = name.lower()
    if name not in ALGORITHMS:
        raise ValueError(f"Unknown scheduling policy '{name}' (choose from {', '.join(ALGORITHMS)})")
    return ALGORITHMS[name]


def run_policy(name: str, processes: Sequence[ProcessDescriptor], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Dispatch to the requested policy. Quantum only matters for round robin.
    """
    return get_policy(name).run(processes, quantum=quantum)


def run_all(
    processes: Sequence[ProcessDescriptor],
    quantum: int = DEFAULT_QUANTUM,
    names: Optional[Sequence[str]] = None,
) -> List[ScheduleResult]:
    """
    Run each policy on its own copy of the workload, in report order.
    """
    policies = POLICIES if names is None else [get_policy(n) for n in names]
    return [policy.run(processes, quantum=quantum) for policy in policies]
