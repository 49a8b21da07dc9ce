"""Per-person assignment load: weekly utilization, over-allocation and burnout risk."""

from typing import Dict, List, Optional, Sequence

from models.resource import Resource, ResourceAssignment
from config.defaults import (
    BURNOUT_MIN_CONSECUTIVE_WEEKS, BURNOUT_UTILIZATION_PCT, OVERALLOCATION_PCT,
    PLANNING_HORIZON_WEEKS,
)


def resource_utilization(
    resource_id: str,
    week: int,
    assignments: Sequence[ResourceAssignment],
) -> float:
    """Sum of allocation % across the person's assignments active in ``week``."""
    return sum(
        a.allocation_pct for a in assignments
        if a.resource_id == resource_id and a.covers(week)
    )


def resource_weekly_utilization(
    resource_id: str,
    assignments: Sequence[ResourceAssignment],
    weeks: int = PLANNING_HORIZON_WEEKS,
) -> List[float]:
    mine = [a for a in assignments if a.resource_id == resource_id]
    return [resource_utilization(resource_id, w, mine) for w in range(weeks)]


def find_overallocated_resources(
    resources: Sequence[Resource],
    assignments: Sequence[ResourceAssignment],
    rule_config: Optional[dict] = None,
) -> List[dict]:
    """Every (person, week) whose assignments add up to more than a full week.

    Returns list of dicts with: resource_id, resource_name, team_id, week, total_pct
    """
    cfg = rule_config or {}
    weeks = cfg.get("horizon_weeks", PLANNING_HORIZON_WEEKS)
    limit = cfg.get("overallocation_pct", OVERALLOCATION_PCT)

    rows = []
    for r in resources:
        for week, pct in enumerate(resource_weekly_utilization(r.resource_id, assignments, weeks)):
            if pct > limit:
                rows.append({
                    "resource_id": r.resource_id,
                    "resource_name": r.name,
                    "team_id": r.team_id,
                    "week": week,
                    "total_pct": pct,
                })
    return rows


def _longest_run(values: Sequence[float], threshold: float) -> int:
    longest = current = 0
    for v in values:
        if v >= threshold:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def find_burnout_risks(
    resources: Sequence[Resource],
    assignments: Sequence[ResourceAssignment],
    rule_config: Optional[dict] = None,
) -> List[dict]:
    """People loaded at or above the burnout threshold for too many weeks in a row.

    Returns list of dicts with: resource_id, resource_name, team_id,
    max_consecutive_high_weeks
    """
    cfg = rule_config or {}
    weeks = cfg.get("horizon_weeks", PLANNING_HORIZON_WEEKS)
    threshold = cfg.get("burnout_utilization_pct", BURNOUT_UTILIZATION_PCT)
    min_weeks = cfg.get("burnout_min_weeks", BURNOUT_MIN_CONSECUTIVE_WEEKS)

    risks = []
    for r in resources:
        run = _longest_run(resource_weekly_utilization(r.resource_id, assignments, weeks), threshold)
        if run >= min_weeks:
            risks.append({
                "resource_id": r.resource_id,
                "resource_name": r.name,
                "team_id": r.team_id,
                "max_consecutive_high_weeks": run,
            })
    return risks


def summarize_resource_utilization(
    resources: Sequence[Resource],
    assignments: Sequence[ResourceAssignment],
    rule_config: Optional[dict] = None,
) -> List[dict]:
    """One row per person: average and peak weekly load over the horizon."""
    cfg = rule_config or {}
    weeks = cfg.get("horizon_weeks", PLANNING_HORIZON_WEEKS)

    rows = []
    for r in resources:
        weekly = resource_weekly_utilization(r.resource_id, assignments, weeks)
        projects: Dict[str, None] = {}
        for a in assignments:
            if a.resource_id == r.resource_id:
                projects.setdefault(a.project_id)
        rows.append({
            "resource_id": r.resource_id,
            "resource_name": r.name,
            "team_id": r.team_id,
            "avg_utilization_pct": sum(weekly) / weeks if weeks else 0.0,
            "peak_utilization_pct": max(weekly, default=0.0),
            "projects": list(projects),
        })
    return rows
