"""Tests for the PuLP contractor optimizer."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.team import Team
from models.project import Project, TeamEstimate
from engine.allocation_engine import run_allocation_engine
from engine.optimizer import compute_overflow_hours, compute_overflow_windows, recommend_contractors


def make_team(team_id="T1", developer=1.0):
    return Team(team_id, f"Team {team_id}", developer_fte=developer)


def make_project(project_id="P1", priority=1, dev_hours=2480, team_id="T1"):
    return Project(project_id, f"Project {project_id}", priority,
                   team_estimates=[TeamEstimate(team_id, development=dev_hours)])


class TestOverflow:
    def test_hours_past_horizon(self):
        result = run_allocation_engine([make_team()], [make_project(dev_hours=2480)])
        assert compute_overflow_hours(result) == {"T1": pytest.approx(400)}

    def test_no_overflow(self):
        result = run_allocation_engine([make_team()], [make_project(dev_hours=2000)])
        assert compute_overflow_hours(result) == {}

    def test_unscheduled_hours_count(self):
        config = {"horizon_weeks": 4, "max_schedule_weeks": 4}
        result = run_allocation_engine([make_team()], [make_project(dev_hours=200)], rule_config=config)
        assert compute_overflow_hours(result) == {"T1": pytest.approx(40)}


class TestRecommendContractors:
    def test_nothing_needed(self):
        teams = [make_team()]
        result = run_allocation_engine(teams, [make_project(dev_hours=400)])
        rec = recommend_contractors(result, teams)
        assert rec.status == "Optimal"
        assert rec.contractors == []
        assert rec.total_cost == 0

    def test_covers_overflow_at_least_cost(self):
        teams = [make_team()]
        result = run_allocation_engine(teams, [make_project(dev_hours=2480)])
        rec = recommend_contractors(result, teams)

        assert rec.status == "Optimal"
        assert len(rec.contractors) == 1
        contractor = rec.contractors[0]
        assert contractor.team_id == "T1"
        assert contractor.fte == 0.25
        assert contractor.weeks == 52
        assert rec.total_cost == pytest.approx(0.25 * 52 * 40 * 120)
        assert rec.shortfall_hours == {}

    def test_recommendation_clears_red_line(self):
        teams = [make_team()]
        projects = [make_project(dev_hours=2480)]
        result = run_allocation_engine(teams, projects)
        assert not result.allocations[0].feasible

        rec = recommend_contractors(result, teams)
        rerun = run_allocation_engine(teams, projects, contractors=rec.contractors)
        assert rerun.allocations[0].feasible

    def test_only_overflowing_teams_get_contractors(self):
        teams = [make_team("T1"), make_team("T2")]
        projects = [make_project("P1", 1, 2480, "T1"), make_project("P2", 2, 100, "T2")]
        rec = recommend_contractors(run_allocation_engine(teams, projects), teams)
        assert [c.team_id for c in rec.contractors] == ["T1"]

    def test_fte_cap_leaves_shortfall(self):
        teams = [make_team()]
        result = run_allocation_engine(teams, [make_project(dev_hours=2480)])
        rec = recommend_contractors(result, teams, {"max_contractor_fte": 0.1})
        assert rec.contractors[0].fte == pytest.approx(0.1)
        assert rec.shortfall_hours["T1"] == pytest.approx(400 - 0.1 * 2080)


class TestLateStart:
    def late_project(self, offset=50, **phases):
        return Project("P1", "Late start", 1, start_week_offset=offset,
                       team_estimates=[TeamEstimate("T1", **phases)])

    def test_contractor_starts_with_the_overflowing_work(self):
        teams = [make_team()]
        projects = [self.late_project(development=200)]
        result = run_allocation_engine(teams, projects)
        assert compute_overflow_windows(result) == {"T1": 50}

        rec = recommend_contractors(result, teams)
        contractor = rec.contractors[0]
        assert contractor.start_week == 50
        assert contractor.weeks == 2
        assert contractor.fte == 1.5
        assert rec.total_cost == pytest.approx(1.5 * 2 * 40 * 120)

        rerun = run_allocation_engine(teams, projects, contractors=rec.contractors)
        assert rerun.allocations[0].feasible

    def test_verified_against_rerun(self):
        teams = [make_team()]
        projects = [self.late_project(design=10, development=100)]
        result = run_allocation_engine(teams, projects)

        unverified = recommend_contractors(result, teams)
        assert unverified.contractors[0].fte == 0.75
        assert not run_allocation_engine(teams, projects, contractors=unverified.contractors).allocations[0].feasible

        verified = recommend_contractors(result, teams, projects=projects)
        assert verified.contractors[0].fte == 1.5
        assert verified.shortfall_hours == {}
        assert verified.still_infeasible == []
        assert run_allocation_engine(teams, projects, contractors=verified.contractors).allocations[0].feasible

    def test_work_starting_past_horizon_is_shortfall(self):
        teams = [make_team()]
        projects = [self.late_project(offset=60, development=200)]
        result = run_allocation_engine(teams, projects)

        rec = recommend_contractors(result, teams, projects=projects)
        assert rec.contractors == []
        assert rec.shortfall_hours == {"T1": pytest.approx(200)}
        assert rec.still_infeasible == ["P1"]
        assert "stay short of the red line" in rec.message


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
