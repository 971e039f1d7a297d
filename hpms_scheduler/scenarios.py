from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Tuple

from .errors import WorkloadError
from .models import ProcessDescriptor

Workload = Tuple[ProcessDescriptor, ...]


class Scenario(Enum):
    MASS_CASUALTY = "mass-casualty"
    NORMAL = "normal"
    LIGHT = "light"

    @classmethod
    def parse(cls, text: str) -> "Scenario":
        """
        Accept either the value ("mass-casualty") or the member name
        ("MASS_CASUALTY"), case-insensitively.
        """
        normalized = text.strip().lower().replace("_", "-")
        for scenario in cls:
            if scenario.value == normalized:
                return scenario
        choices = ", ".join(s.value for s in cls)
        raise WorkloadError(f"Unknown scenario '{text}' (choose from {choices})")


SCENARIO_TITLES: Dict[Scenario, Tuple[str, str]] = {
    Scenario.MASS_CASUALTY: (
        "EMERGENCY SCENARIO (MASS CASUALTY)",
        "6 Critical Patients + Mixed Priority Operations",
    ),
    Scenario.NORMAL: (
        "NORMAL CASE VALIDATION",
        "Standard Evening Rush (150 patients/hour)",
    ),
    Scenario.LIGHT: (
        "BEST CASE VALIDATION",
        "Light Load (50 patients/hour)",
    ),
}


def build_workload(descriptors: Iterable[ProcessDescriptor]) -> Workload:
    """
    Freeze a sequence of descriptors into a workload.

    Individual descriptors validate themselves; this adds the checks that
    need the whole set: at least one process and unique identifiers.
    """
    workload = tuple(descriptors)
    if not workload:
        raise WorkloadError("A workload needs at least one process")

    seen: set[int] = set()
    for descriptor in workload:
        if descriptor.pid in seen:
            raise WorkloadError(f"Duplicate process id {descriptor.pid}")
        seen.add(descriptor.pid)

    return workload


def _mass_casualty() -> Workload:
    P = ProcessDescriptor
    return build_workload(
        [
            P(0, "Background Report", "Routine Documentation", 5, 0, 30),
            P(1, "EMERGENCY #1", "Critical - Trauma", 1, 5, 3),
            P(2, "EMERGENCY #2", "Critical - Cardiac", 1, 7, 3),
            P(3, "EMERGENCY #3", "Critical - Respiratory", 1, 9, 3),
            P(4, "EMERGENCY #4", "Critical - Hemorrhage", 1, 11, 3),
            P(5, "EMERGENCY #5", "Critical - Head Injury", 1, 13, 3),
            P(6, "EMERGENCY #6", "Critical - Multi-trauma", 1, 15, 3),
            P(7, "Lab Processing", "Urgent - Lab Results", 2, 8, 10),
            P(8, "Check-in", "Standard Registration", 3, 12, 4),
            P(9, "Admin Task", "Non-critical Admin", 4, 15, 8),
            P(10, "Lab Processing #2", "Urgent - Lab Results", 2, 18, 9),
            P(11, "Database Backup", "Background Maintenance", 5, 20, 25),
        ]
    )


def _normal() -> Workload:
    P = ProcessDescriptor
    return build_workload(
        [
            P(0, "Report Generation", "Routine", 5, 0, 20),
            P(1, "Check-in #1", "Standard", 3, 3, 4),
            P(2, "Lab Processing #1", "Urgent", 2, 6, 8),
            P(3, "Check-in #2", "Standard", 3, 10, 4),
            P(4, "EMERGENCY Patient", "Critical", 1, 12, 2),
            P(5, "Lab Processing #2", "Urgent", 2, 15, 7),
            P(6, "Admin Task", "Routine", 4, 18, 6),
            P(7, "Check-in #3", "Standard", 3, 22, 4),
        ]
    )


def _light() -> Workload:
    P = ProcessDescriptor
    return build_workload(
        [
            P(0, "Routine Check-in", "Standard", 3, 0, 5),
            P(1, "Lab Result Processing", "Urgent", 2, 8, 10),
            P(2, "Admin Task", "Routine", 4, 15, 8),
            P(3, "Emergency Patient", "Critical", 1, 20, 3),
            P(4, "Report Generation", "Background", 5, 25, 12),
        ]
    )


_BUILDERS = {
    Scenario.MASS_CASUALTY: _mass_casualty,
    Scenario.NORMAL: _normal,
    Scenario.LIGHT: _light,
}


def load_scenario(scenario: Scenario | str) -> Workload:
    if isinstance(scenario, str):
        scenario = Scenario.parse(scenario)
    return _BUILDERS[scenario]()


def emergency_count(workload: Iterable[ProcessDescriptor]) -> int:
    return sum(1 for p in workload if p.is_emergency)


def describe_scenario(workload: Workload) -> List[str]:
    """
    Short narrative bullets for the report, keyed off how many emergencies
    the workload contains.
    """
    emergencies = emergency_count(workload)

    if emergencies >= 6:
        return [
            f"{emergencies} EMERGENCY patients arrive within 10 seconds (simulating mass casualty)",
            "Background report generation in progress",
            "Lab processing and check-ins queued",
            "System must prioritize life-critical patients immediately",
        ]
    if emergencies > 0:
        return [
            f"{emergencies} emergency patient(s) during normal operations",
            "Mixed priority workload simulating evening rush",
            "Tests algorithm ability to prioritize critical cases",
        ]
    return [
        "Light load scenario with routine operations",
        "Validation of algorithm behavior under minimal stress",
    ]
