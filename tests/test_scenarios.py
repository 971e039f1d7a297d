import dataclasses

import pytest

from hpms_scheduler.errors import WorkloadError
from hpms_scheduler.models import ProcessDescriptor
from hpms_scheduler.scenarios import (
    SCENARIO_TITLES,
    Scenario,
    build_workload,
    describe_scenario,
    emergency_count,
    load_scenario,
)


def test_scenario_sizes():
    assert len(load_scenario(Scenario.MASS_CASUALTY)) == 12
    assert len(load_scenario(Scenario.NORMAL)) == 8
    assert len(load_scenario(Scenario.LIGHT)) == 5


def test_scenarios_are_reproducible():
    for scenario in Scenario:
        assert load_scenario(scenario) == load_scenario(scenario)
        assert scenario in SCENARIO_TITLES


def test_mass_casualty_has_six_emergencies():
    workload = load_scenario("mass-casualty")
    assert emergency_count(workload) == 6
    emergencies = [p for p in workload if p.is_emergency]
    assert [p.arrival_time for p in emergencies] == [5, 7, 9, 11, 13, 15]
    assert workload[0].name == "Background Report"


def test_parse_accepts_names_and_values():
    assert Scenario.parse("normal") is Scenario.NORMAL
    assert Scenario.parse("MASS_CASUALTY") is Scenario.MASS_CASUALTY
    assert Scenario.parse(" Light ") is Scenario.LIGHT
    with pytest.raises(WorkloadError):
        Scenario.parse("worst")


def test_descriptions_follow_emergency_count():
    assert "mass casualty" in describe_scenario(load_scenario(Scenario.MASS_CASUALTY))[0]
    assert describe_scenario(load_scenario(Scenario.NORMAL))[0].startswith("1 emergency")
    routine = [ProcessDescriptor(0, "Check-in", "Standard", 3, 0, 4)]
    assert describe_scenario(tuple(routine))[0].startswith("Light load")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"burst_time": 0},
        {"burst_time": -2},
        {"arrival_time": -1},
        {"priority": 0},
    ],
)
def test_descriptor_rejects_invalid_values(kwargs):
    values = {"pid": 1, "name": "X", "classification": "", "priority": 2, "arrival_time": 0, "burst_time": 3}
    values.update(kwargs)
    with pytest.raises(WorkloadError):
        ProcessDescriptor(**values)


def test_descriptor_is_immutable():
    p = ProcessDescriptor(0, "X", "", 2, 0, 3)
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.burst_time = 10


def test_build_workload_rejects_empty_and_duplicates():
    with pytest.raises(WorkloadError):
        build_workload([])
    with pytest.raises(WorkloadError):
        build_workload([ProcessDescriptor(0, "A", "", 2, 0, 3), ProcessDescriptor(0, "B", "", 2, 0, 3)])


def test_workload_error_is_a_value_error():
    assert issubclass(WorkloadError, ValueError)
