"""Tests for the allocation engine."""

import copy
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from models.team import Team
from models.project import Project, TeamEstimate
from models.calendar import Holiday
from models.scenario import Contractor
from engine.allocation_engine import (
    order_projects,
    place_phase,
    run_allocation_engine,
)


def make_team(team_id="T1", developer=2.5, klo=0.0, admin=0.0, name=None):
    return Team(team_id, name or f"Team {team_id}", developer_fte=developer,
                klo_tlm_hours_per_week=klo, admin_pct=admin)


def make_project(project_id="P1", priority=1, team_id="T1", status="not_started", offset=0, **phases):
    if not phases:
        phases = {"development": 100}
    return Project(project_id, f"Project {project_id}", priority, status=status,
                   start_week_offset=offset, team_estimates=[TeamEstimate(team_id, **phases)])


class TestOrderProjects:
    def test_sorted_by_priority(self):
        projects = [make_project("A", 3), make_project("B", 1), make_project("C", 2)]
        ordered, excluded = order_projects(projects)
        assert [p.project_id for p in ordered] == ["B", "C", "A"]
        assert excluded == []

    def test_ties_keep_input_order(self):
        projects = [make_project("A", 1), make_project("B", 1), make_project("C", 1)]
        ordered, _ = order_projects(projects)
        assert [p.project_id for p in ordered] == ["A", "B", "C"]

    def test_override_wins(self):
        projects = [make_project("A", 1), make_project("B", 2)]
        ordered, _ = order_projects(projects, {"B": 0})
        assert [p.project_id for p in ordered] == ["B", "A"]

    def test_complete_and_cancelled_excluded(self):
        projects = [
            make_project("A", 1, status="complete"),
            make_project("B", 2),
            make_project("C", 3, status="cancelled"),
        ]
        ordered, excluded = order_projects(projects)
        assert [p.project_id for p in ordered] == ["B"]
        assert excluded == ["A", "C"]


class TestPlacePhase:
    def test_fills_weeks_in_order(self):
        capacity = [40.0] * 10
        consumed = [0.0] * 10
        phase = place_phase("development", 100, capacity, consumed, 0)
        assert phase.start_week == 0
        assert phase.end_week == 2
        assert phase.hours_per_week == [40, 40, 20]
        assert consumed[:3] == [40, 40, 20]

    def test_skips_leading_full_weeks(self):
        capacity = [40.0] * 10
        consumed = [40.0, 40.0] + [0.0] * 8
        phase = place_phase("design", 40, capacity, consumed, 0)
        assert phase.start_week == 2
        assert phase.hours_per_week == [40]

    def test_leftover_reported_unscheduled(self):
        capacity = [40.0] * 3
        consumed = [0.0] * 3
        phase = place_phase("testing", 200, capacity, consumed, 0)
        assert phase.total_hours == 120
        assert phase.unscheduled_hours == 80
        assert phase.end_week == 2

    def test_earliest_week_past_range_is_kept(self):
        capacity = [40.0] * 3
        consumed = [0.0] * 3
        phase = place_phase("design", 30, capacity, consumed, 5)
        assert phase.start_week == 5
        assert phase.end_week == 5
        assert phase.total_hours == 0
        assert phase.unscheduled_hours == 30
        assert consumed == [0.0, 0.0, 0.0]


class TestWorkedExamples:
    def test_second_project_waits_for_first(self):
        team = make_team(developer=2.5)  # 100 h/week
        p1 = make_project("P1", 1, development=100)
        p2 = make_project("P2", 2, development=100)
        result = run_allocation_engine([team], [p1, p2])

        first, second = result.allocations
        assert (first.start_week, first.end_week) == (0, 0)
        assert (second.start_week, second.end_week) == (1, 1)
        assert first.feasible and second.feasible

    def test_holiday_week_stretches_phase(self):
        team = make_team(developer=1.0)  # 40 h/week
        holiday = Holiday("Company Day", week=5, hours_off=40)
        project = make_project("P1", 1, offset=4, development=120)
        result = run_allocation_engine([team], [project], holidays=[holiday])

        phase = result.allocations[0].team_allocations[0].phases[0]
        assert phase.start_week == 4
        assert phase.end_week == 7
        assert phase.hours_per_week == [40, 0, 40, 40]


class TestFeasibility:
    def test_ending_in_last_horizon_week_is_feasible(self):
        team = make_team(developer=1.0)
        result = run_allocation_engine([team], [make_project(development=2080)])
        allocation = result.allocations[0]
        assert allocation.end_week == 51
        assert allocation.feasible

    def test_one_hour_past_horizon_is_infeasible(self):
        team = make_team(developer=1.0)
        result = run_allocation_engine([team], [make_project(development=2081)])
        allocation = result.allocations[0]
        assert allocation.end_week == 52
        assert not allocation.feasible
        assert allocation.scheduled_hours == 2081

    def test_unplaced_hours_make_project_infeasible(self):
        team = make_team(developer=1.0)
        config = {"horizon_weeks": 4, "max_schedule_weeks": 4}
        result = run_allocation_engine([team], [make_project(development=200)], rule_config=config)
        allocation = result.allocations[0]
        assert allocation.unscheduled_hours == 40
        assert allocation.end_week == 3
        assert not allocation.feasible

    def test_offset_past_schedule_range_never_starts_early(self):
        team = make_team(developer=1.0)
        config = {"horizon_weeks": 4, "max_schedule_weeks": 6}
        project = make_project(offset=8, design=10, development=20)
        result = run_allocation_engine([team], [project], rule_config=config)
        allocation = result.allocations[0]
        phases = allocation.team_allocations[0].phases
        assert all(p.start_week >= 8 for p in phases)
        assert allocation.start_week == 8
        assert allocation.unscheduled_hours == 30
        assert not allocation.feasible

    def test_zero_capacity_team(self):
        team = make_team(developer=0.0)
        result = run_allocation_engine([team], [make_project(development=10)])
        allocation = result.allocations[0]
        assert not allocation.feasible
        assert allocation.unscheduled_hours == 10


class TestRunAllocationEngine:
    def test_phases_run_back_to_back(self):
        team = make_team(developer=1.0)
        project = make_project(design=20, development=40, testing=40)
        result = run_allocation_engine([team], [project])

        phases = result.allocations[0].team_allocations[0].phases
        assert [p.phase for p in phases] == ["design", "development", "testing"]
        assert [(p.start_week, p.end_week) for p in phases] == [(0, 0), (1, 1), (2, 2)]

    def test_zero_hour_phases_omitted(self):
        team = make_team()
        result = run_allocation_engine([team], [make_project(development=50, post_deploy=0)])
        phases = result.allocations[0].team_allocations[0].phases
        assert [p.phase for p in phases] == ["development"]

    def test_hours_conserved(self):
        teams = [make_team("T1", developer=1.0), make_team("T2", developer=0.5)]
        projects = [
            make_project("P1", 1, "T1", design=80, development=300, testing=120),
            make_project("P2", 2, "T2", development=500),
            make_project("P3", 3, "T1", development=900, post_deploy=40),
        ]
        result = run_allocation_engine(teams, projects)
        for project, allocation in zip(projects, result.allocations):
            placed = allocation.scheduled_hours + allocation.unscheduled_hours
            assert abs(placed - project.total_hours) < 1e-6

    def test_no_week_over_capacity(self):
        team = make_team(developer=1.0)
        projects = [make_project(f"P{i}", i, development=150) for i in range(6)]
        result = run_allocation_engine([team], projects)
        tc = result.team_capacities[0]
        for cap, used in zip(tc.weekly_capacity, tc.weekly_allocated):
            assert used <= cap + 1e-9

    def test_priority_override_reorders(self):
        team = make_team(developer=2.5)
        projects = [make_project("P1", 1), make_project("P2", 2)]
        result = run_allocation_engine([team], projects, priority_overrides={"P2": 0})
        assert result.allocations[0].project_id == "P2"
        assert result.allocations[0].priority == 0
        assert result.get("P1").start_week == 1

    def test_higher_priority_never_finishes_later(self):
        team = make_team(developer=1.0)
        projects = [make_project("A", 1, development=400), make_project("B", 2, development=400)]
        baseline = run_allocation_engine([team], projects)
        promoted = run_allocation_engine([team], projects, priority_overrides={"B": 0})
        assert promoted.get("B").end_week <= baseline.get("B").end_week

    def test_excluded_projects_not_allocated(self):
        team = make_team()
        projects = [make_project("P1", 1, status="complete"), make_project("P2", 2)]
        result = run_allocation_engine([team], projects)
        assert [a.project_id for a in result.allocations] == ["P2"]
        assert result.excluded_project_ids == ["P1"]
        assert result.allocations[0].start_week == 0

    def test_unknown_team_skipped(self):
        team = make_team("T1")
        project = Project("P1", "Mixed", 1, team_estimates=[
            TeamEstimate("GHOST", development=100),
            TeamEstimate("T1", development=50),
        ])
        result = run_allocation_engine([team], [project])
        allocation = result.allocations[0]
        assert [t.team_id for t in allocation.team_allocations] == ["T1"]
        assert allocation.feasible

    def test_project_without_estimates(self):
        result = run_allocation_engine([make_team()], [Project("P1", "Idea", 1)])
        allocation = result.allocations[0]
        assert allocation.team_allocations == []
        assert allocation.total_weeks == 0
        assert allocation.feasible

    def test_contractor_adds_capacity_in_window(self):
        team = make_team(developer=1.0)
        contractor = Contractor("T1", "developer", fte=1.0, weeks=2, start_week=0)
        result = run_allocation_engine([team], [make_project(development=160)], contractors=[contractor])
        phase = result.allocations[0].team_allocations[0].phases[0]
        assert phase.hours_per_week == [80, 80]

    def test_bottleneck_names_longest_phase_role(self):
        team = make_team(developer=1.0)
        result = run_allocation_engine([team], [make_project(design=40, development=80)])
        bottleneck = result.allocations[0].bottleneck
        assert bottleneck.team_id == "T1"
        assert bottleneck.role == "developer"

    def test_utilization_over_horizon(self):
        team = make_team(developer=1.0)
        result = run_allocation_engine([team], [make_project(development=520)])
        tc = result.team_capacities[0]
        assert tc.allocated_hours == 520
        assert abs(tc.utilization - 25.0) < 1e-9
        assert len(tc.weekly_capacity) == 52

    def test_deterministic_and_inputs_untouched(self):
        teams = [make_team("T1", developer=1.0)]
        projects = [make_project("P1", 2, development=300), make_project("P2", 1, development=90)]
        snapshot = copy.deepcopy(projects)

        first = run_allocation_engine(teams, projects)
        second = run_allocation_engine(teams, projects)

        assert first == second
        assert projects == snapshot


if __name__ == "__main__":
    import pytest
    pytest.main([__file__, "-v"])
