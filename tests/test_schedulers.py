import pytest

from hpms_scheduler.algorithms import (
    DEFAULT_QUANTUM,
    POLICIES,
    get_policy,
    run_all,
    run_policy,
    schedule_fcfs,
    schedule_priority,
    schedule_rr,
    schedule_sjf,
)
from hpms_scheduler.errors import WorkloadError
from hpms_scheduler.models import Event, EventKind, ProcessDescriptor


def _procs():
    return [
        ProcessDescriptor(0, "A", "Standard", priority=3, arrival_time=0, burst_time=5),
        ProcessDescriptor(1, "B", "Critical", priority=1, arrival_time=2, burst_time=3),
        ProcessDescriptor(2, "C", "Background", priority=5, arrival_time=0, burst_time=4),
    ]


def test_priority_preempts_for_emergency():
    res = schedule_priority(_procs())

    assert res.events == (
        Event(0, 0, EventKind.START),
        Event(2, 0, EventKind.PREEMPT),
        Event(2, 1, EventKind.START),
        Event(5, 1, EventKind.COMPLETE),
        Event(5, 0, EventKind.START),
        Event(8, 0, EventKind.COMPLETE),
        Event(8, 2, EventKind.START),
        Event(12, 2, EventKind.COMPLETE),
    )

    a, b, c = res.processes
    assert (a.start_time, a.completion_time) == (0, 8)
    assert (b.start_time, b.completion_time, b.response_time) == (2, 5, 0)
    assert (c.start_time, c.completion_time) == (8, 12)

    assert res.total_time == 12
    assert res.context_switches == 4
    assert res.metrics.avg_response_time == pytest.approx(8 / 3)
    assert res.metrics.emergency_response_min == 0
    assert res.metrics.emergency_response_max == 0


def test_fcfs_order():
    res = schedule_fcfs(_procs())
    assert [s.pid for s in res.timeline] == [0, 2, 1]

    a, b, c = res.processes
    assert a.completion_time == 5
    assert c.completion_time == 9
    assert b.completion_time == 12
    assert [a.turnaround_time, c.turnaround_time, b.turnaround_time] == [5, 9, 10]
    assert [a.response_time, c.response_time, b.response_time] == [0, 5, 7]
    assert res.metrics.avg_response_time == pytest.approx(4.0)
    assert res.context_switches == 3


def test_fcfs_waits_for_late_arrival():
    procs = [
        ProcessDescriptor(0, "A", "", priority=2, arrival_time=3, burst_time=2),
        ProcessDescriptor(1, "B", "", priority=2, arrival_time=10, burst_time=1),
    ]
    res = schedule_fcfs(procs)

    assert [(s.start_time, s.end_time) for s in res.timeline] == [(3, 5), (10, 11)]
    assert res.total_time == 11
    assert res.metrics.cpu_utilization == pytest.approx(3 / 11 * 100)


def test_sjf_order():
    res = schedule_sjf(_procs())
    # C (4) beats A (5) at t=0; B (3) has arrived by t=4.
    assert [s.pid for s in res.timeline] == [2, 1, 0]
    assert [(s.start_time, s.end_time) for s in res.timeline] == [(0, 4), (4, 7), (7, 12)]


def test_sjf_does_not_preempt_for_shorter_arrival():
    procs = [
        ProcessDescriptor(0, "Long", "", priority=3, arrival_time=0, burst_time=10),
        ProcessDescriptor(1, "Short", "", priority=1, arrival_time=1, burst_time=1),
    ]
    res = schedule_sjf(procs)
    assert res.process(0).completion_time == 10
    assert res.process(1).start_time == 10
    assert not any(e.kind is EventKind.PREEMPT for e in res.events)


def test_sjf_ties_go_to_earlier_entry():
    procs = [
        ProcessDescriptor(5, "X", "", priority=3, arrival_time=0, burst_time=2),
        ProcessDescriptor(3, "Y", "", priority=3, arrival_time=0, burst_time=2),
    ]
    res = schedule_sjf(procs)
    assert [s.pid for s in res.timeline] == [5, 3]


def test_sjf_idles_until_first_arrival():
    procs = [ProcessDescriptor(0, "A", "", priority=3, arrival_time=4, burst_time=2)]
    res = schedule_sjf(procs)
    assert res.process(0).start_time == 4
    assert res.total_time == 6


def test_rr_default_quantum():
    res = schedule_rr(_procs())

    assert res.quantum == DEFAULT_QUANTUM
    assert [(s.pid, s.start_time, s.end_time) for s in res.timeline] == [
        (0, 0, 4),
        (2, 4, 8),
        (1, 8, 11),
        (0, 11, 12),
    ]
    assert res.context_switches == 4
    assert [p.response_time for p in res.processes] == [0, 6, 4]


def test_rr_new_arrivals_queue_before_preempted_process():
    procs = [
        ProcessDescriptor(0, "A", "", priority=3, arrival_time=0, burst_time=6),
        ProcessDescriptor(1, "B", "", priority=3, arrival_time=1, burst_time=2),
    ]
    res = schedule_rr(procs, quantum=2)
    assert [s.pid for s in res.timeline] == [0, 1, 0, 0]


def test_rr_rejects_non_positive_quantum():
    with pytest.raises(ValueError):
        schedule_rr(_procs(), quantum=0)


def test_priority_ties_prefer_earlier_entry_even_over_running():
    procs = [
        ProcessDescriptor(0, "First", "", priority=1, arrival_time=2, burst_time=2),
        ProcessDescriptor(1, "Second", "", priority=1, arrival_time=0, burst_time=4),
    ]
    res = schedule_priority(procs)
    assert Event(2, 1, EventKind.PREEMPT) in res.events
    assert res.process(0).completion_time == 4
    assert res.process(1).completion_time == 6


def test_priority_idle_ticks_are_not_context_switches():
    procs = [
        ProcessDescriptor(0, "A", "", priority=2, arrival_time=0, burst_time=1),
        ProcessDescriptor(1, "B", "", priority=2, arrival_time=5, burst_time=1),
    ]
    res = schedule_priority(procs)
    assert res.context_switches == 2
    assert res.total_time == 6
    assert res.metrics.cpu_utilization == pytest.approx(2 / 6 * 100)


@pytest.mark.parametrize("policy", POLICIES, ids=lambda p: p.key)
def test_empty_workload_yields_zero_metrics(policy):
    res = policy.run([])
    assert res.total_time == 0
    assert res.processes == ()
    assert res.metrics.avg_response_time == 0
    assert res.metrics.throughput == 0
    assert res.metrics.cpu_utilization == 0


def test_runs_do_not_share_state():
    procs = _procs()
    first = schedule_priority(procs)
    second = schedule_priority(procs)
    assert first == second
    assert first.processes[0] is not second.processes[0]


def test_run_policy_dispatch():
    assert run_policy("FCFS", _procs()).key == "fcfs"
    assert run_policy("rr", _procs(), quantum=2).quantum == 2
    # Quantum is ignored by policies that do not use it.
    assert run_policy("sjf", _procs(), quantum=2).quantum is None


def test_unknown_policy():
    with pytest.raises(ValueError):
        get_policy("mlfq")


def test_run_all_order():
    results = run_all(_procs())
    assert [r.key for r in results] == ["priority", "fcfs", "sjf", "rr"]

    subset = run_all(_procs(), names=["rr", "fcfs"])
    assert [r.key for r in subset] == ["rr", "fcfs"]


@pytest.mark.parametrize("policy", POLICIES, ids=lambda p: p.key)
def test_duplicate_pids_are_rejected(policy):
    procs = [
        ProcessDescriptor(7, "A", "", priority=2, arrival_time=0, burst_time=2),
        ProcessDescriptor(7, "B", "", priority=2, arrival_time=1, burst_time=2),
    ]
    with pytest.raises(WorkloadError):
        policy.run(procs)
