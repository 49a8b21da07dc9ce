"""Priority-based, week-by-week allocation engine — the core scheduling logic."""

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from models.team import Team
from models.project import Project, TeamEstimate
from models.calendar import Holiday, PTOEntry, NewHire
from models.scenario import Contractor
from models.allocation import (
    AllocationResult, Bottleneck, PhaseAllocation, ProjectAllocation,
    TeamAllocation, TeamCapacity,
)
from engine.capacity import build_capacity_vector, calculate_team_capacity
from config.defaults import (
    EXCLUDED_STATUSES, HOURS_EPSILON, MAX_SCHEDULE_WEEKS,
    PHASE_ROLE_MAP, PLANNING_HORIZON_WEEKS,
)

logger = logging.getLogger(__name__)


def resolve_priority(project: Project, priority_overrides: Optional[Mapping[str, int]] = None) -> int:
    """Scenario override if one exists, else the project's stored priority."""
    overrides = priority_overrides or {}
    return overrides.get(project.project_id, project.priority)


def order_projects(
    projects: Sequence[Project],
    priority_overrides: Optional[Mapping[str, int]] = None,
    rule_config: Optional[dict] = None,
) -> Tuple[List[Project], List[str]]:
    """Drop excluded statuses, then sort by effective priority.

    The sort is stable, so equal priorities keep their input order.
    Returns (ordered projects, excluded project ids).
    """
    cfg = rule_config or {}
    excluded_statuses = cfg.get("excluded_statuses", EXCLUDED_STATUSES)

    active = [p for p in projects if p.status not in excluded_statuses]
    excluded = [p.project_id for p in projects if p.status in excluded_statuses]
    ordered = sorted(active, key=lambda p: resolve_priority(p, priority_overrides))
    return ordered, excluded


def place_phase(
    phase: str,
    hours: float,
    capacity: List[float],
    consumed: List[float],
    earliest_week: int,
) -> PhaseAllocation:
    """Consume a team's remaining capacity week by week until the phase is done.

    ``consumed`` is updated in place. Weeks with no remaining capacity stretch
    the phase; hours that do not fit before the end of the schedule range are
    reported as unscheduled. A phase that places nothing is reported starting
    at ``earliest_week``, even when that lies past the schedule range.
    """
    total_weeks = len(capacity)
    remaining = hours
    placed: Dict[int, float] = {}

    week = earliest_week
    while remaining > HOURS_EPSILON and week < total_weeks:
        available = capacity[week] - consumed[week]
        if available > HOURS_EPSILON:
            take = min(available, remaining)
            consumed[week] += take
            remaining -= take
            placed[week] = take
        week += 1

    unscheduled = remaining if remaining > HOURS_EPSILON else 0.0
    if placed:
        start_week = min(placed)
        end_week = max(placed)
    else:
        start_week = end_week = earliest_week
    if unscheduled:
        end_week = max(end_week, total_weeks - 1)

    return PhaseAllocation(
        phase=phase,
        start_week=start_week,
        end_week=end_week,
        hours_per_week=[placed.get(w, 0.0) for w in range(start_week, end_week + 1)],
        unscheduled_hours=unscheduled,
    )


def schedule_team_estimate(
    estimate: TeamEstimate,
    team: Team,
    capacity: List[float],
    consumed: List[float],
    start_week: int,
) -> TeamAllocation:
    """Place a team's phases back to back, each starting after the previous one ends."""
    phases: List[PhaseAllocation] = []
    cursor = start_week
    for phase, hours in estimate.phase_hours():
        if hours <= HOURS_EPSILON:
            continue
        allocation = place_phase(phase, hours, capacity, consumed, cursor)
        phases.append(allocation)
        cursor = allocation.end_week + 1
    return TeamAllocation(team_id=team.team_id, team_name=team.name, phases=phases)


def _find_bottleneck(team_allocations: List[TeamAllocation]) -> Optional[Bottleneck]:
    """The team with the longest span, named by the role of its longest phase."""
    if not team_allocations:
        return None
    longest = max(team_allocations, key=lambda t: t.end_week - t.start_week)
    longest_phase = max(longest.phases, key=lambda p: p.end_week - p.start_week)
    return Bottleneck(
        team_id=longest.team_id,
        team_name=longest.team_name,
        role=PHASE_ROLE_MAP.get(longest_phase.phase, "developer"),
    )


def allocate_project(
    project: Project,
    priority: int,
    team_map: Dict[str, Team],
    capacity: Dict[str, List[float]],
    consumed: Dict[str, List[float]],
    horizon_weeks: int,
) -> ProjectAllocation:
    """Schedule one project against what higher-priority projects left behind."""
    team_allocations: List[TeamAllocation] = []
    for estimate in project.team_estimates:
        team = team_map.get(estimate.team_id)
        if team is None:
            logger.debug(
                "Project %s references unknown team %s; skipping its demand",
                project.project_id, estimate.team_id,
            )
            continue
        if estimate.total_hours <= HOURS_EPSILON:
            continue
        team_allocations.append(schedule_team_estimate(
            estimate, team, capacity[team.team_id], consumed[team.team_id],
            project.start_week_offset,
        ))

    unscheduled = sum(p.unscheduled_hours for t in team_allocations for p in t.phases)

    if team_allocations:
        start_week = min(t.start_week for t in team_allocations)
        end_week = max(t.end_week for t in team_allocations)
        total_weeks = end_week - start_week + 1
    else:
        start_week = end_week = project.start_week_offset
        total_weeks = 0

    feasible = unscheduled <= HOURS_EPSILON and (total_weeks == 0 or end_week < horizon_weeks)

    return ProjectAllocation(
        project_id=project.project_id,
        project_name=project.name,
        priority=priority,
        feasible=feasible,
        start_week=start_week,
        end_week=end_week,
        total_weeks=total_weeks,
        team_allocations=team_allocations,
        bottleneck=_find_bottleneck(team_allocations),
        unscheduled_hours=unscheduled,
    )


def _summarize_team(
    team: Team,
    capacity: List[float],
    consumed: List[float],
    contractors: Sequence[Contractor],
    horizon_weeks: int,
    rule_config: dict,
) -> TeamCapacity:
    summary = calculate_team_capacity(team, contractors, rule_config)
    summary.weekly_capacity = list(capacity[:horizon_weeks])
    summary.weekly_allocated = list(consumed[:horizon_weeks])
    summary.allocated_hours = sum(summary.weekly_allocated)
    horizon_capacity = sum(summary.weekly_capacity)
    summary.utilization = (
        summary.allocated_hours / horizon_capacity * 100 if horizon_capacity > 0 else 0.0
    )
    return summary


def run_allocation_engine(
    teams: Sequence[Team],
    projects: Sequence[Project],
    contractors: Sequence[Contractor] = (),
    priority_overrides: Optional[Mapping[str, int]] = None,
    holidays: Sequence[Holiday] = (),
    pto_entries: Sequence[PTOEntry] = (),
    new_hires: Sequence[NewHire] = (),
    rule_config: Optional[dict] = None,
) -> AllocationResult:
    """Full allocation pipeline: capacity vectors, priority walk, feasibility.

    Pure: inputs are never mutated and repeated calls give identical results.
    Projects ending at or after ``horizon_weeks`` are still scheduled but
    flagged infeasible (past the red line).
    """
    cfg = rule_config or {}
    horizon_weeks = cfg.get("horizon_weeks", PLANNING_HORIZON_WEEKS)
    schedule_weeks = max(horizon_weeks, cfg.get("max_schedule_weeks", MAX_SCHEDULE_WEEKS))

    team_map: Dict[str, Team] = {}
    for team in teams:
        team_map.setdefault(team.team_id, team)

    capacity = {
        team_id: build_capacity_vector(
            team, schedule_weeks, holidays, pto_entries, contractors, new_hires, cfg,
        )
        for team_id, team in team_map.items()
    }
    consumed = {team_id: [0.0] * schedule_weeks for team_id in team_map}

    ordered, excluded = order_projects(projects, priority_overrides, cfg)
    if excluded:
        logger.debug("Excluded %d projects by status: %s", len(excluded), ", ".join(excluded))

    allocations = [
        allocate_project(
            project, resolve_priority(project, priority_overrides),
            team_map, capacity, consumed, horizon_weeks,
        )
        for project in ordered
    ]

    team_capacities = [
        _summarize_team(team, capacity[team_id], consumed[team_id], contractors, horizon_weeks, cfg)
        for team_id, team in team_map.items()
    ]

    infeasible = sum(1 for a in allocations if not a.feasible)
    logger.info(
        "Allocated %d projects across %d teams (%d past the %d-week horizon)",
        len(allocations), len(team_map), infeasible, horizon_weeks,
    )

    return AllocationResult(
        allocations=allocations,
        team_capacities=team_capacities,
        excluded_project_ids=excluded,
        horizon_weeks=horizon_weeks,
    )
