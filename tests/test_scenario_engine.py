"""Tests for the scenario engine."""

import copy
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from models.team import Team
from models.project import Project, TeamEstimate
from models.scenario import Contractor, PriorityOverride, Scenario
from engine.allocation_engine import run_allocation_engine
from engine.scenario_engine import (
    apply_overrides,
    compare_scenarios,
    create_baseline_scenario,
    run_scenario,
)


def make_team(team_id="T1", developer=1.0):
    return Team(team_id, f"Team {team_id}", developer_fte=developer)


def make_project(project_id, priority, dev_hours=400, team_id="T1"):
    return Project(project_id, f"Project {project_id}", priority,
                   team_estimates=[TeamEstimate(team_id, development=dev_hours)])


def make_scenario(**kwargs):
    return Scenario(scenario_id="s1", name="What If", **kwargs)


class TestApplyOverrides:
    def test_returns_copies(self):
        contractor = Contractor("T1", "developer", 1.0, 10)
        scenario = make_scenario(
            contractors=[contractor],
            priority_overrides={"P2": PriorityOverride("P2", 0)},
        )
        contractors, overrides = apply_overrides(scenario)
        assert contractors == [contractor]
        assert contractors[0] is not contractor
        assert overrides == {"P2": 0}

    def test_baseline_is_empty(self):
        contractors, overrides = apply_overrides(create_baseline_scenario())
        assert contractors == []
        assert overrides == {}


class TestRunScenario:
    def test_matches_engine_for_baseline(self):
        teams = [make_team()]
        projects = [make_project("P1", 1), make_project("P2", 2)]
        assert run_scenario(create_baseline_scenario(), teams, projects) == \
            run_allocation_engine(teams, projects)

    def test_override_changes_order_without_touching_projects(self):
        teams = [make_team()]
        projects = [make_project("P1", 1), make_project("P2", 2)]
        snapshot = copy.deepcopy(projects)
        scenario = make_scenario(priority_overrides={"P2": PriorityOverride("P2", 0)})

        result = run_scenario(scenario, teams, projects)

        assert [a.project_id for a in result.allocations] == ["P2", "P1"]
        assert projects == snapshot

    def test_contractors_shorten_schedule(self):
        teams = [make_team()]
        projects = [make_project("P1", 1, dev_hours=800)]
        baseline = run_scenario(create_baseline_scenario(), teams, projects)
        boosted = run_scenario(
            make_scenario(contractors=[Contractor("T1", "developer", 1.0, 52)]),
            teams, projects,
        )
        assert baseline.allocations[0].end_week == 19
        assert boosted.allocations[0].end_week == 9

    def test_caches_results(self):
        scenario = make_scenario()
        result = run_scenario(scenario, [make_team()], [make_project("P1", 1)])
        assert scenario.allocation_results == result.allocations
        assert scenario.last_run_at is not None

    def test_unknown_override_ignored(self):
        scenario = make_scenario(priority_overrides={"NOPE": PriorityOverride("NOPE", 0)})
        result = run_scenario(scenario, [make_team()], [make_project("P1", 1)])
        assert [a.project_id for a in result.allocations] == ["P1"]


class TestCompareScenarios:
    def test_end_week_and_feasibility_change(self):
        teams = [make_team()]
        projects = [make_project("P1", 1, dev_hours=1600), make_project("P2", 2, dev_hours=800)]
        baseline = run_allocation_engine(teams, projects)
        candidate = run_allocation_engine(teams, projects, priority_overrides={"P2": 0})

        rows = compare_scenarios(baseline, candidate)
        by_id = {r["Project ID"]: r for r in rows}

        assert [r["Project ID"] for r in rows] == ["P1", "P2"]
        assert by_id["P2"]["End Week Change"] == 19 - 59
        assert by_id["P1"]["Baseline Feasible"] is True
        assert by_id["P1"]["Scenario Feasible"] is False
        assert by_id["P1"]["Feasibility Changed"] is True
        assert by_id["P2"]["Scenario Priority"] == 0


if __name__ == "__main__":
    import pytest
    pytest.main([__file__, "-v"])
