from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .errors import WorkloadError

EMERGENCY_PRIORITY = 1


@dataclass(frozen=True)
class ProcessDescriptor:
    pid: int
    name: str
    classification: str
    priority: int
    arrival_time: int
    burst_time: int

    def __post_init__(self) -> None:
        if self.priority < EMERGENCY_PRIORITY:
            raise WorkloadError(f"Process {self.pid} ({self.name}): priority must be >= 1, got {self.priority}")
        if self.arrival_time < 0:
            raise WorkloadError(f"Process {self.pid} ({self.name}): arrival time must be >= 0, got {self.arrival_time}")
        if self.burst_time <= 0:
            raise WorkloadError(f"Process {self.pid} ({self.name}): burst time must be > 0, got {self.burst_time}")

    @property
    def is_emergency(self) -> bool:
        return self.priority == EMERGENCY_PRIORITY


@dataclass
class ProcessState:
    """
    Mutable bookkeeping for one process during a single scheduling run.
    """

    descriptor: ProcessDescriptor
    remaining_time: int
    start_time: Optional[int] = None
    completion_time: Optional[int] = None

    @classmethod
    def fresh(cls, descriptor: ProcessDescriptor) -> "ProcessState":
        return cls(descriptor=descriptor, remaining_time=descriptor.burst_time)

    @property
    def pid(self) -> int:
        return self.descriptor.pid

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def priority(self) -> int:
        return self.descriptor.priority

    @property
    def arrival_time(self) -> int:
        return self.descriptor.arrival_time

    @property
    def burst_time(self) -> int:
        return self.descriptor.burst_time

    @property
    def is_complete(self) -> bool:
        return self.completion_time is not None

    @property
    def turnaround_time(self) -> Optional[int]:
        if self.completion_time is None:
            return None
        return self.completion_time - self.arrival_time

    @property
    def waiting_time(self) -> Optional[int]:
        turnaround = self.turnaround_time
        if turnaround is None:
            return None
        return turnaround - self.burst_time

    @property
    def response_time(self) -> Optional[int]:
        if self.start_time is None:
            return None
        return self.start_time - self.arrival_time

    def is_ready(self, tick: int) -> bool:
        return self.arrival_time <= tick and self.remaining_time > 0

    def start(self, tick: int) -> bool:
        """
        Record the first dispatch. Returns True only the first time.
        """
        if self.start_time is not None:
            return False
        if tick < self.arrival_time:
            raise ValueError(f"Process {self.pid} cannot start at {tick} before arriving at {self.arrival_time}")
        self.start_time = tick
        return True

    def execute(self, ticks: int) -> None:
        if ticks <= 0:
            raise ValueError(f"Process {self.pid}: execution slice must be positive, got {ticks}")
        if ticks > self.remaining_time:
            raise ValueError(
                f"Process {self.pid}: cannot run {ticks} ticks with only {self.remaining_time} remaining"
            )
        self.remaining_time -= ticks

    def complete(self, tick: int) -> None:
        if self.remaining_time != 0:
            raise ValueError(f"Process {self.pid} still has {self.remaining_time} ticks remaining")
        self.completion_time = tick


class EventKind(Enum):
    START = "start"
    PREEMPT = "preempt"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Event:
    tick: int
    pid: int
    kind: EventKind


@dataclass(frozen=True)
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int


@dataclass(frozen=True)
class Metrics:
    avg_response_time: float = 0.0
    avg_turnaround_time: float = 0.0
    avg_waiting_time: float = 0.0
    emergency_response_min: int = 0
    emergency_response_max: int = 0
    cpu_utilization: float = 0.0
    throughput: float = 0.0
    context_switches: int = 0
    total_time: int = 0
    completed: int = 0
    emergency_count: int = 0


@dataclass(frozen=True)
class ScheduleResult:
    policy: str
    key: str
    quantum: Optional[int]
    processes: Tuple[ProcessState, ...] = ()
    events: Tuple[Event, ...] = ()
    total_time: int = 0
    context_switches: int = 0
    metrics: Metrics = field(default_factory=Metrics)

    @property
    def timeline(self) -> List[ScheduledSlice]:
        return slices_from_events(self.events)

    def process(self, pid: int) -> ProcessState:
        for state in self.processes:
            if state.pid == pid:
                return state
        raise KeyError(pid)


def slices_from_events(events: Tuple[Event, ...]) -> List[ScheduledSlice]:
    """
    Pair every Start with the next Preempt or Complete of the same process.

    A Start without a closing event (which a finished run never produces)
    is dropped.
    """
    open_starts: dict[int, int] = {}
    slices: List[ScheduledSlice] = []

    for event in events:
        if event.kind is EventKind.START:
            open_starts[event.pid] = event.tick
        elif event.pid in open_starts:
            start = open_starts.pop(event.pid)
            if event.tick > start:
                slices.append(ScheduledSlice(pid=event.pid, start_time=start, end_time=event.tick))

    slices.sort(key=lambda s: (s.start_time, s.end_time))
    return slices
