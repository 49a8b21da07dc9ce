"""Tests for reporting views and schedule explanations."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from models.team import Team
from models.project import Project, TeamEstimate
from models.resource import Resource
from engine.allocation_engine import run_allocation_engine
from engine.explainer import explain_project_allocation
from engine.reporting import (
    allocation_timeline_frame,
    capacity_status,
    find_red_line,
    find_single_points_of_failure,
    find_skill_gaps,
    project_summary_frame,
    summarize_team_capacity,
    weekly_demand_frame,
)


def make_team(team_id="T1", developer=1.0):
    return Team(team_id, f"Team {team_id}", developer_fte=developer)


def make_project(project_id, priority, skills=(), **phases):
    return Project(project_id, f"Project {project_id}", priority, required_skills=skills,
                   team_estimates=[TeamEstimate("T1", **phases)])


def run(*projects, teams=None):
    return run_allocation_engine(teams or [make_team()], list(projects))


class TestCapacitySummary:
    def test_status_thresholds(self):
        assert capacity_status(84.9) == "GREEN"
        assert capacity_status(85) == "AMBER"
        assert capacity_status(100) == "RED"
        assert capacity_status(50, {"capacity_amber_pct": 40}) == "AMBER"

    def test_summary_row(self):
        result = run(make_project("P1", 1, development=1872))
        row = summarize_team_capacity(result)[0]
        assert row["capacity_hours"] == 2080
        assert row["allocated_hours"] == 1872
        assert row["available_hours"] == 208
        assert abs(row["utilization_pct"] - 90) < 1e-9
        assert row["status"] == "AMBER"
        assert row["peak_week_pct"] == 100


class TestRedLine:
    def test_first_infeasible_position(self):
        result = run(
            make_project("P1", 1, development=1600),
            make_project("P2", 2, development=800),
            make_project("P3", 3, development=40),
        )
        assert find_red_line(result) == 1

    def test_all_feasible(self):
        assert find_red_line(run(make_project("P1", 1, development=40))) is None


class TestFrames:
    def test_timeline_rows_per_phase(self):
        result = run(make_project("P1", 1, design=40, development=80))
        df = allocation_timeline_frame(result)
        assert list(df["phase"]) == ["design", "development"]
        assert list(df["start_week"]) == [0, 1]
        assert list(df["end_week"]) == [0, 2]

    def test_empty_timeline_keeps_columns(self):
        df = allocation_timeline_frame(run())
        assert df.empty
        assert "project_id" in df.columns

    def test_weekly_demand_covers_horizon(self):
        teams = [make_team("T1"), make_team("T2")]
        df = weekly_demand_frame(run(make_project("P1", 1, development=60), teams=teams))
        assert len(df) == 2 * 52
        week0 = df[(df["team_id"] == "T1") & (df["week"] == 0)].iloc[0]
        assert week0["allocated_hours"] == 40
        assert week0["remaining_hours"] == 0

    def test_project_summary(self):
        df = project_summary_frame(run(make_project("P1", 1, development=80)))
        row = df.iloc[0]
        assert row["total_weeks"] == 2
        assert row["bottleneck_role"] == "developer"


class TestSinglePointsOfFailure:
    def test_skill_held_by_one_person(self):
        resources = [
            Resource("R1", "Priya", "T1", "developer", ("SAP S/4HANA", "ABAP")),
            Resource("R2", "Sam", "T1", "developer", ("abap",)),
        ]
        projects = [make_project("P1", 1, skills=("SAP S/4HANA", "ABAP"), development=10)]
        spofs = find_single_points_of_failure(resources, projects)
        assert [s["skill"] for s in spofs] == ["SAP S/4HANA"]
        assert spofs[0]["resource_name"] == "Priya"
        assert spofs[0]["projects"] == ["Project P1"]

    def test_uncovered_skill_is_not_spof(self):
        projects = [make_project("P1", 1, skills=("Kotlin",), development=10)]
        assert find_single_points_of_failure([], projects) == []

    def test_minimum_level_excludes_junior_holders(self):
        resources = [
            Resource("R1", "Priya", "T1", "developer", ("ABAP:5",)),
            Resource("R2", "Sam", "T1", "developer", ("ABAP:2",)),
        ]
        loose = [make_project("P1", 1, skills=("ABAP",), development=10)]
        assert find_single_points_of_failure(resources, loose) == []

        strict = loose + [make_project("P2", 2, skills=("ABAP:4",), development=10)]
        spofs = find_single_points_of_failure(resources, strict)
        assert [(s["skill"], s["min_proficiency"], s["resource_id"]) for s in spofs] == [("ABAP", 4, "R1")]
        assert spofs[0]["projects"] == ["Project P1", "Project P2"]


class TestSkillGaps:
    def test_available_people_and_gaps(self):
        resources = [
            Resource("R1", "Priya", "T1", "developer", ("ABAP:5", "Kotlin:1")),
            Resource("R2", "Sam", "T1", "developer", ("ABAP:3",)),
        ]
        project = make_project("P1", 1, skills=("ABAP:4", "Kotlin:2", "SQL"), development=10)
        gaps = {g["skill"]: g for g in find_skill_gaps(project, resources)}

        assert gaps["ABAP"]["available"] == [("R1", 5)]
        assert not gaps["ABAP"]["gap"]
        assert gaps["Kotlin"]["min_proficiency"] == 2
        assert gaps["Kotlin"]["gap"]
        assert gaps["SQL"]["available"] == []
        assert gaps["SQL"]["gap"]

    def test_resource_skill_levels(self):
        person = Resource("R1", "Priya", "T1", "developer", ("ABAP:5", "Python"))
        assert person.proficiency("abap") == 5
        assert person.proficiency("Python") == 3
        assert person.proficiency("Go") == 0
        assert person.has_skill("ABAP", 5)
        assert not person.has_skill("Python", 4)


class TestExplainer:
    def test_feasible_steps(self):
        result = run(make_project("P1", 1, design=40, development=80))
        steps = explain_project_allocation(result.allocations[0])
        assert steps[0].startswith("Step 1 - Priority")
        assert any(s.startswith("Step 4 - Bottleneck") for s in steps)
        assert steps[-1].startswith("Step 5 - Feasible")

    def test_red_line_step(self):
        result = run(make_project("P1", 1, development=2120))
        steps = explain_project_allocation(result.allocations[0])
        assert steps[-1].startswith("Step 5 - Red line: ends 1 week(s)")

    def test_no_demand(self):
        result = run_allocation_engine([make_team()], [Project("P1", "Idea", 1)])
        steps = explain_project_allocation(result.allocations[0])
        assert steps[-1].startswith("Step 2 - Demand")


if __name__ == "__main__":
    import pytest
    pytest.main([__file__, "-v"])
