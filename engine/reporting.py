"""Reporting views derived from an allocation run."""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence

import pandas as pd

from models.allocation import AllocationResult
from models.project import Project
from models.resource import Resource, SkillRequirement
from config.defaults import CAPACITY_AMBER_PCT, CAPACITY_RED_PCT


def capacity_status(utilization: float, rule_config: Optional[dict] = None) -> str:
    cfg = rule_config or {}
    amber = cfg.get("capacity_amber_pct", CAPACITY_AMBER_PCT)
    red = cfg.get("capacity_red_pct", CAPACITY_RED_PCT)
    if utilization >= red:
        return "RED"
    if utilization >= amber:
        return "AMBER"
    return "GREEN"


def summarize_team_capacity(
    result: AllocationResult,
    rule_config: Optional[dict] = None,
) -> List[dict]:
    """Per-team capacity vs. allocated hours over the planning horizon.

    Returns list of dicts with: team_id, team_name, capacity_hours,
    allocated_hours, available_hours, utilization_pct, peak_week_pct, status
    """
    summaries = []
    for tc in result.team_capacities:
        peak = 0.0
        for cap, used in zip(tc.weekly_capacity, tc.weekly_allocated):
            if cap > 0:
                peak = max(peak, used / cap * 100)
        summaries.append({
            "team_id": tc.team_id,
            "team_name": tc.team_name,
            "capacity_hours": sum(tc.weekly_capacity),
            "allocated_hours": tc.allocated_hours,
            "available_hours": tc.available_hours,
            "utilization_pct": tc.utilization,
            "peak_week_pct": peak,
            "status": capacity_status(tc.utilization, rule_config),
        })
    return summaries


def find_red_line(result: AllocationResult) -> Optional[int]:
    """Index (in priority order) of the first project past the horizon, or None."""
    return next((i for i, a in enumerate(result.allocations) if not a.feasible), None)


def allocation_timeline_frame(result: AllocationResult) -> pd.DataFrame:
    """One row per project/team/phase, the data behind a Gantt view."""
    rows = []
    for a in result.allocations:
        for team in a.team_allocations:
            for phase in team.phases:
                rows.append({
                    "project_id": a.project_id,
                    "project_name": a.project_name,
                    "priority": a.priority,
                    "feasible": a.feasible,
                    "team_id": team.team_id,
                    "team_name": team.team_name,
                    "phase": phase.phase,
                    "start_week": phase.start_week,
                    "end_week": phase.end_week,
                    "hours": phase.total_hours,
                    "unscheduled_hours": phase.unscheduled_hours,
                })
    columns = [
        "project_id", "project_name", "priority", "feasible", "team_id", "team_name",
        "phase", "start_week", "end_week", "hours", "unscheduled_hours",
    ]
    return pd.DataFrame(rows, columns=columns)


def project_summary_frame(result: AllocationResult) -> pd.DataFrame:
    """One row per project with its span and red-line flag."""
    rows = [{
        "project_id": a.project_id,
        "project_name": a.project_name,
        "priority": a.priority,
        "start_week": a.start_week,
        "end_week": a.end_week,
        "total_weeks": a.total_weeks,
        "feasible": a.feasible,
        "scheduled_hours": a.scheduled_hours,
        "bottleneck_team": a.bottleneck.team_name if a.bottleneck else "",
        "bottleneck_role": a.bottleneck.role if a.bottleneck else "",
    } for a in result.allocations]
    columns = [
        "project_id", "project_name", "priority", "start_week", "end_week", "total_weeks",
        "feasible", "scheduled_hours", "bottleneck_team", "bottleneck_role",
    ]
    return pd.DataFrame(rows, columns=columns)


def weekly_demand_frame(result: AllocationResult) -> pd.DataFrame:
    """One row per team/week: capacity, allocated and remaining hours."""
    rows = []
    for tc in result.team_capacities:
        for week, (cap, used) in enumerate(zip(tc.weekly_capacity, tc.weekly_allocated)):
            rows.append({
                "team_id": tc.team_id,
                "team_name": tc.team_name,
                "week": week,
                "capacity_hours": cap,
                "allocated_hours": used,
                "remaining_hours": max(0.0, cap - used),
            })
    columns = ["team_id", "team_name", "week", "capacity_hours", "allocated_hours", "remaining_hours"]
    return pd.DataFrame(rows, columns=columns)


def _qualified(resources: Sequence[Resource], requirement: SkillRequirement) -> List[Resource]:
    return [r for r in resources if r.has_skill(requirement.name, requirement.min_proficiency)]


def find_skill_gaps(project: Project, resources: Sequence[Resource]) -> List[dict]:
    """Each required skill of a project with the people who meet its minimum level.

    Returns list of dicts with: skill, min_proficiency, available (list of
    (resource_id, proficiency)), gap
    """
    gaps = []
    for req in project.required_skills:
        available = [(r.resource_id, r.proficiency(req.name)) for r in _qualified(resources, req)]
        gaps.append({
            "skill": req.name,
            "min_proficiency": req.min_proficiency,
            "available": available,
            "gap": not available,
        })
    return gaps


def find_single_points_of_failure(
    resources: Sequence[Resource],
    projects: Sequence[Project],
) -> List[dict]:
    """Required project skills where exactly one person meets the minimum level.

    A skill required at different levels by different projects is judged
    against the strictest requirement.

    Returns list of dicts with: skill, min_proficiency, resource_id,
    resource_name, team_id, projects
    """
    strictest: Dict[str, SkillRequirement] = {}
    demand: Dict[str, List[str]] = defaultdict(list)
    for p in projects:
        for req in p.required_skills:
            current = strictest.get(req.key)
            if current is None or req.min_proficiency > current.min_proficiency:
                strictest[req.key] = req
            if p.name not in demand[req.key]:
                demand[req.key].append(p.name)

    spofs = []
    for key in sorted(demand):
        req = strictest[key]
        people = _qualified(resources, req)
        if len(people) != 1:
            continue
        only = people[0]
        spofs.append({
            "skill": req.name,
            "min_proficiency": req.min_proficiency,
            "resource_id": only.resource_id,
            "resource_name": only.name,
            "team_id": only.team_id,
            "projects": demand[key],
        })
    return spofs
