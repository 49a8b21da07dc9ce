"""PuLP LP-based contractor staffing optimizer."""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pulp

from models.team import Team
from models.project import Project
from models.calendar import Holiday, PTOEntry, NewHire
from models.scenario import Contractor
from models.allocation import AllocationResult
from engine.allocation_engine import run_allocation_engine
from config.defaults import (
    CONTRACTOR_HOURLY_RATE, HOURS_EPSILON, HOURS_PER_WEEK, MAX_CONTRACTOR_FTE_PER_TEAM,
)

logger = logging.getLogger(__name__)

CONTRACTOR_FTE_STEP = 0.25
MAX_VERIFICATION_ROUNDS = 40


@dataclass
class StaffingRecommendation:
    status: str  # "Optimal", "Infeasible", "Not Solved"
    total_cost: float
    contractors: List[Contractor] = field(default_factory=list)
    overflow_hours: Dict[str, float] = field(default_factory=dict)   # team_id -> hours past horizon
    shortfall_hours: Dict[str, float] = field(default_factory=dict)  # team_id -> still uncovered
    still_infeasible: List[str] = field(default_factory=list)        # project ids, verified runs only
    team_rows: List[dict] = field(default_factory=list)
    message: str = ""


def compute_overflow_hours(result: AllocationResult) -> Dict[str, float]:
    """Hours each team was given past the planning horizon, plus unplaced hours."""
    horizon = result.horizon_weeks
    overflow: Dict[str, float] = {}
    for a in result.allocations:
        for team in a.team_allocations:
            for phase in team.phases:
                late = sum(
                    phase.hours_in_week(w)
                    for w in range(max(horizon, phase.start_week), phase.end_week + 1)
                )
                extra = late + phase.unscheduled_hours
                if extra > HOURS_EPSILON:
                    overflow[team.team_id] = overflow.get(team.team_id, 0.0) + extra
    return overflow


def compute_overflow_windows(result: AllocationResult) -> Dict[str, int]:
    """First week of work, per team, on any project that overflows for that team.

    Contractor capacity only helps the overflowing work from this week on.
    """
    horizon = result.horizon_weeks
    windows: Dict[str, int] = {}
    for a in result.allocations:
        for team in a.team_allocations:
            overflows = any(
                p.unscheduled_hours > HOURS_EPSILON or p.end_week >= horizon
                for p in team.phases
            )
            if overflows:
                windows[team.team_id] = min(windows.get(team.team_id, team.start_week), team.start_week)
    return windows


def _round_up_fte(fte: float, step: float) -> float:
    if fte <= HOURS_EPSILON:
        return 0.0
    return math.ceil(round(fte / step, 9)) * step


def _solve_fte(
    overflow: Dict[str, float],
    hours_per_fte: Dict[str, float],
    rate: float,
    max_fte: float,
) -> Tuple[str, Dict[str, float]]:
    """Cheapest FTE per team with contractor hours plus slack covering the overflow."""
    team_ids = sorted(overflow)
    prob = pulp.LpProblem("ContractorStaffing", pulp.LpMinimize)

    x = {
        tid: pulp.LpVariable(f"fte_{tid}", lowBound=0, upBound=max_fte)
        for tid in team_ids
    }
    s = {tid: pulp.LpVariable(f"short_{tid}", lowBound=0) for tid in team_ids}

    SHORTFALL_WEIGHT = 100.0 * rate
    prob += (
        pulp.lpSum(x[tid] * hours_per_fte[tid] * rate for tid in team_ids)
        + SHORTFALL_WEIGHT * pulp.lpSum(s[tid] for tid in team_ids)
    ), "staffing_cost"

    # C1: contractor hours inside the team's window plus slack cover its overflow
    for tid in team_ids:
        prob += x[tid] * hours_per_fte[tid] + s[tid] >= overflow[tid], f"cover_{tid}"

    prob.solve(pulp.PULP_CBC_CMD(msg=0, timeLimit=30))
    status = pulp.LpStatus[prob.status]
    return status, {tid: x[tid].varValue or 0.0 for tid in team_ids}


def recommend_contractors(
    result: AllocationResult,
    teams: Sequence[Team],
    rule_config: Optional[dict] = None,
    projects: Optional[Sequence[Project]] = None,
    contractors: Sequence[Contractor] = (),
    priority_overrides: Optional[Mapping[str, int]] = None,
    holidays: Sequence[Holiday] = (),
    pto_entries: Sequence[PTOEntry] = (),
    new_hires: Sequence[NewHire] = (),
) -> StaffingRecommendation:
    """
    Cheapest contractor FTE per team that clears the red line.

    Each overflowing team gets one continuous FTE variable, bounded by
    ``max_contractor_fte``, for a contractor working from the first week of
    that team's overflowing work to the end of the horizon. A shortfall slack
    keeps the model solvable when the bound is too tight; it is weighted far
    above cost so it is used only when nothing else fits.

    When ``projects`` is given, the recommendation is checked by re-running
    the engine with the extra contractors. Teams still overflowing get another
    FTE step until the red line clears or the cap is reached; what remains is
    reported as shortfall along with the projects still past the horizon.
    """
    cfg = rule_config or {}
    rate = cfg.get("contractor_hourly_rate", CONTRACTOR_HOURLY_RATE)
    max_fte = cfg.get("max_contractor_fte", MAX_CONTRACTOR_FTE_PER_TEAM)
    hours_per_week = cfg.get("hours_per_week", HOURS_PER_WEEK)
    fte_step = cfg.get("contractor_fte_step", CONTRACTOR_FTE_STEP)
    role_key = cfg.get("contractor_role", "developer")
    max_rounds = cfg.get("max_verification_rounds", MAX_VERIFICATION_ROUNDS)
    horizon = result.horizon_weeks

    team_map = {t.team_id: t for t in teams}
    overflow = {
        team_id: hours for team_id, hours in compute_overflow_hours(result).items()
        if team_id in team_map
    }

    if not overflow:
        return StaffingRecommendation(
            status="Optimal", total_cost=0.0,
            message="All demand fits inside the planning horizon. No contractors needed.",
        )

    windows = compute_overflow_windows(result)
    # Work that cannot start before the horizon is out of a contractor's reach
    reachable = {tid: h for tid, h in overflow.items() if windows.get(tid, horizon) < horizon}
    hours_per_fte = {tid: (horizon - windows[tid]) * hours_per_week for tid in reachable}

    fte: Dict[str, float] = {}
    status = "Optimal"
    if reachable:
        status, solved = _solve_fte(reachable, hours_per_fte, rate, max_fte)
        if status != "Optimal":
            logger.warning("Contractor optimizer finished with status %s", status)
            return StaffingRecommendation(
                status=status, total_cost=0.0, overflow_hours=overflow,
                message=f"Optimization could not find a solution. Status: {status}",
            )
        fte = {tid: min(max_fte, _round_up_fte(v, fte_step)) for tid, v in solved.items()}

    def build(fte_map: Dict[str, float]) -> List[Contractor]:
        return [
            Contractor(
                team_id=tid, role_key=role_key, fte=value,
                weeks=horizon - windows[tid], start_week=windows[tid],
                label=f"Recommended {team_map[tid].name} contractor",
            )
            for tid, value in sorted(fte_map.items()) if value > 0
        ]

    shortfall = {
        tid: max(0.0, overflow[tid] - fte.get(tid, 0.0) * hours_per_fte.get(tid, 0.0))
        for tid in overflow
    }
    still_infeasible: List[str] = []

    if projects is not None:
        for _ in range(max_rounds):
            rerun = run_allocation_engine(
                teams, projects, list(contractors) + build(fte), priority_overrides,
                holidays, pto_entries, new_hires, cfg,
            )
            remaining = {
                tid: h for tid, h in compute_overflow_hours(rerun).items() if tid in team_map
            }
            shortfall = remaining
            still_infeasible = [a.project_id for a in rerun.allocations if not a.feasible]
            if not remaining:
                break
            rerun_windows = compute_overflow_windows(rerun)
            bumped = False
            for tid in remaining:
                if tid not in windows:
                    windows[tid] = rerun_windows.get(tid, horizon)
                    if windows[tid] >= horizon:
                        continue
                    hours_per_fte[tid] = (horizon - windows[tid]) * hours_per_week
                if tid not in hours_per_fte:
                    continue
                if fte.get(tid, 0.0) + fte_step <= max_fte + HOURS_EPSILON:
                    fte[tid] = fte.get(tid, 0.0) + fte_step
                    bumped = True
            if not bumped:
                break
        logger.debug("Verified contractor plan: %s still past the horizon", still_infeasible or "nothing")

    shortfall = {tid: h for tid, h in shortfall.items() if h > HOURS_EPSILON}
    recommended = build(fte)

    rows: List[dict] = []
    total_cost = 0.0
    for tid in sorted(set(overflow) | set(fte)):
        hours = fte.get(tid, 0.0) * hours_per_fte.get(tid, 0.0)
        cost = hours * rate
        total_cost += cost
        rows.append({
            "Team": team_map[tid].name,
            "Overflow Hours": overflow.get(tid, 0.0),
            "Start Week": windows.get(tid, horizon),
            "Contractor FTE": fte.get(tid, 0.0),
            "Cost": cost,
            "Shortfall Hours": shortfall.get(tid, 0.0),
        })

    msg = f"Recommended {sum(c.fte for c in recommended):.2f} contractor FTE, cost {total_cost:,.0f}."
    if shortfall:
        msg += f" {len(shortfall)} team(s) stay short of the red line."
    logger.info(msg)

    return StaffingRecommendation(
        status=status,
        total_cost=total_cost,
        contractors=recommended,
        overflow_hours=overflow,
        shortfall_hours=shortfall,
        still_infeasible=still_infeasible,
        team_rows=rows,
        message=msg,
    )
