"""Team capacity model — staffing configuration into weekly hour budgets."""

import logging
from typing import Dict, List, Optional, Sequence

from models.team import Team
from models.calendar import Holiday, PTOEntry, NewHire
from models.scenario import Contractor
from models.allocation import RoleCapacity, TeamCapacity
from config.defaults import HOURS_PER_WEEK

logger = logging.getLogger(__name__)


def effective_weekly_hours(team: Team, rule_config: Optional[dict] = None) -> float:
    """Project hours a team can spend per week before calendar effects.

    total FTE x hours/week, minus the KLO/TLM tax, minus admin_pct of what
    remains. Never negative.
    """
    cfg = rule_config or {}
    hours_per_week = cfg.get("hours_per_week", HOURS_PER_WEEK)

    total_hours = team.total_fte * hours_per_week
    after_klo = max(0.0, total_hours - team.klo_tlm_hours_per_week)
    admin_hours = after_klo * (team.admin_pct / 100)
    return max(0.0, after_klo - admin_hours)


def calculate_team_capacity(
    team: Team,
    contractors: Sequence[Contractor] = (),
    rule_config: Optional[dict] = None,
) -> TeamCapacity:
    """Break a team's weekly hours down into KLO, admin, project and per-role capacity."""
    cfg = rule_config or {}
    hours_per_week = cfg.get("hours_per_week", HOURS_PER_WEEK)

    roles = team.role_ftes()
    total_fte = team.total_fte
    total_hours = total_fte * hours_per_week
    after_klo = max(0.0, total_hours - team.klo_tlm_hours_per_week)
    admin_hours = after_klo * (team.admin_pct / 100)
    project_capacity = effective_weekly_hours(team, cfg)

    contractor_fte: Dict[str, float] = {}
    for c in contractors:
        if c.team_id == team.team_id:
            contractor_fte[c.role_key] = contractor_fte.get(c.role_key, 0.0) + c.fte

    role_capacities: Dict[str, RoleCapacity] = {}
    for role, fte in roles.items():
        extra = contractor_fte.get(role, 0.0)
        if fte <= 0 and extra <= 0:
            continue
        base_hours = (fte / total_fte) * project_capacity if total_fte > 0 else 0.0
        role_capacities[role] = RoleCapacity(
            fte=fte + extra,
            hours_per_week=base_hours + extra * hours_per_week,
        )

    return TeamCapacity(
        team_id=team.team_id,
        team_name=team.name,
        total_hours_per_week=total_hours,
        klo_tlm_hours=team.klo_tlm_hours_per_week,
        admin_hours=admin_hours,
        project_capacity_per_week=project_capacity,
        roles=role_capacities,
    )


def build_capacity_vector(
    team: Team,
    weeks: int,
    holidays: Sequence[Holiday] = (),
    pto_entries: Sequence[PTOEntry] = (),
    contractors: Sequence[Contractor] = (),
    new_hires: Sequence[NewHire] = (),
    rule_config: Optional[dict] = None,
) -> List[float]:
    """Per-week project capacity for a team over ``weeks`` weeks.

    Staff capacity (base + ramping hires - holidays - PTO) is clamped at zero
    before contractor hours are added, so contractors are unaffected by the
    team's own time off.
    """
    cfg = rule_config or {}
    hours_per_week = cfg.get("hours_per_week", HOURS_PER_WEEK)
    admin_factor = 1 - team.admin_pct / 100

    staff = [effective_weekly_hours(team, cfg)] * weeks

    for hire in new_hires:
        if hire.team_id != team.team_id:
            continue
        for w in range(hire.start_week, weeks):
            staff[w] += hire.productivity(w) * hours_per_week * admin_factor

    for holiday in holidays:
        if not holiday.observed_by(team.team_id):
            continue
        for w in holiday.weeks_within(weeks):
            staff[w] -= holiday.hours_off * team.total_fte

    for entry in pto_entries:
        if entry.team_id != team.team_id:
            continue
        for w in range(entry.start_week, weeks):
            if not entry.covers(w):
                break
            staff[w] -= entry.hours_per_week

    capacity = [max(0.0, h) for h in staff]

    for c in contractors:
        if c.team_id != team.team_id:
            continue
        contractor_hours = c.fte * hours_per_week
        for w in range(c.start_week, weeks):
            if not c.is_active(w):
                break
            capacity[w] += contractor_hours

    logger.debug(
        "Capacity vector for %s: base %.1f h/week, %d weeks",
        team.team_id, effective_weekly_hours(team, cfg), weeks,
    )
    return capacity
