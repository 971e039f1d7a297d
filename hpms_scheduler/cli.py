from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .algorithms import ALGORITHMS, DEFAULT_QUANTUM, POLICIES, Policy, get_policy, run_all
from .errors import WorkloadError
from .report import print_comparison, print_scenario_report
from .scenarios import SCENARIO_TITLES, Scenario, Workload, describe_scenario, load_scenario
from .workload_io import load_workload

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hpms-scheduler",
        description="Hospital workload CPU scheduling simulator (Priority, FCFS, SJF, Round Robin).",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging level for diagnostics on stderr (default: WARNING).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Shortcut for --log-level DEBUG.",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Console width for the report (default: detect from terminal).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run the full scheduling report for one or all scenarios.")
    _add_workload_arguments(run_parser)
    run_parser.add_argument(
        "--policy",
        "-p",
        action="append",
        choices=list(ALGORITHMS),
        default=None,
        help="Policy to include; repeat for several (default: all four).",
    )
    run_parser.add_argument(
        "--timeline",
        action="store_true",
        help="Show a Gantt chart and key execution events for each policy.",
    )
    run_parser.add_argument(
        "--plain-timeline",
        action="store_true",
        help="Like --timeline, but draw the Gantt chart as plain text (for logs and pipes).",
    )
    run_parser.add_argument(
        "--details",
        action="store_true",
        help="Show per-process performance tables.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run all four policies and print only the comparison table.",
    )
    _add_workload_arguments(compare_parser)

    subparsers.add_parser("list", help="List the built-in scenarios and scheduling policies.")

    return parser


def _add_workload_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--scenario",
        "-s",
        default="all",
        help="Scenario to simulate: mass-casualty, normal, light or all (default: all).",
    )
    parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Path to a JSON or CSV workload file, used instead of a built-in scenario.",
    )
    parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Round Robin time quantum (default: {DEFAULT_QUANTUM}).",
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


Selection = Tuple[str, Optional[str], Workload, Optional[List[str]]]


def _select_workloads(args: argparse.Namespace) -> List[Selection]:
    """
    Resolve --workload / --scenario into (title, subtitle, workload, description) tuples.
    """
    if args.workload:
        path = Path(args.workload)
        if not path.exists():
            raise WorkloadError(f"Workload not found: {path}")
        return [(f"CUSTOM WORKLOAD: {path.name}", None, load_workload(path), None)]

    if args.scenario.lower() == "all":
        scenarios = list(Scenario)
    else:
        scenarios = [Scenario.parse(args.scenario)]

    selections: List[Selection] = []
    for scenario in scenarios:
        workload = load_scenario(scenario)
        title, subtitle = SCENARIO_TITLES[scenario]
        selections.append((title, subtitle, workload, describe_scenario(workload)))
    return selections


def _heading(policy: Policy, quantum: int) -> str:
    if policy.uses_quantum:
        return f"{policy.label.upper()} (Quantum = {quantum}s)"
    return policy.label.upper()


def _print_listing(console: Console) -> None:
    scenario_table = Table(title="Scenarios", box=box.SIMPLE_HEAVY)
    scenario_table.add_column("Name")
    scenario_table.add_column("Description")
    scenario_table.add_column("Processes", justify="right")
    for scenario in Scenario:
        title, subtitle = SCENARIO_TITLES[scenario]
        scenario_table.add_row(scenario.value, f"{title}: {subtitle}", str(len(load_scenario(scenario))))
    console.print(scenario_table)

    policy_table = Table(title="Policies", box=box.SIMPLE_HEAVY)
    policy_table.add_column("Key")
    policy_table.add_column("Policy")
    policy_table.add_column("Preemptive", justify="center")
    for policy in POLICIES:
        policy_table.add_row(policy.key, policy.label, "yes" if policy.preemptive else "no")
    console.print(policy_table)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging("DEBUG" if args.verbose else args.log_level)
    console = Console(width=args.width)

    if args.command == "list":
        _print_listing(console)
        return 0

    if args.quantum <= 0:
        parser.error(f"--quantum must be positive, got {args.quantum}")

    try:
        selections = _select_workloads(args)
    except (WorkloadError, ValueError) as exc:
        parser.error(str(exc))

    if args.command == "run":
        policies = [get_policy(name) for name in args.policy] if args.policy else list(POLICIES)
        names = [p.key for p in policies]
        headings = [_heading(p, args.quantum) for p in policies]
        labels = [p.short for p in policies]

        for title, subtitle, workload, description in selections:
            logger.info("Simulating %s (%d processes)", title, len(workload))
            results = run_all(workload, quantum=args.quantum, names=names)
            print_scenario_report(
                console,
                title,
                workload,
                results,
                headings,
                labels,
                subtitle=subtitle,
                description=description,
                show_timeline=args.timeline or args.plain_timeline,
                plain_timeline=args.plain_timeline,
                show_details=args.details,
            )
        return 0

    # compare
    labels = [p.short for p in POLICIES]
    for title, _subtitle, workload, _description in selections:
        results = run_all(workload, quantum=args.quantum)
        print_comparison(console, results, labels, title=f"Algorithm Comparison: {title}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
