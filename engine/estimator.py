"""Phase estimator — derives phase hours, cost and duration from development hours."""

import copy
import logging
import math
from typing import Dict, Iterable, List, Optional

from models.estimation import (
    AggregateEstimation, CostLine, EstimationResult, PhaseBreakdown, TeamEstimation,
)
from models.project import TeamEstimate
from config.defaults import DEFAULT_ESTIMATION_CONFIG

logger = logging.getLogger(__name__)

PHASE_LABELS = {
    "requirements": "Requirements",
    "technical_design": "Technical Design",
    "development": "Development",
    "testing": "Testing",
    "support": "Hypercare Support",
    "dev_ops": "DevOps",
    "project_management": "Project Management",
}


def _deep_merge(base: dict, overrides: Optional[dict]) -> dict:
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _deep_merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def merge_estimation_config(
    org_config: Optional[dict] = None,
    project_config: Optional[dict] = None,
) -> dict:
    """Layer org settings, then project settings, over the defaults."""
    merged = copy.deepcopy(DEFAULT_ESTIMATION_CONFIG)
    merged = _deep_merge(merged, org_config)
    return _deep_merge(merged, project_config)


def _round_hours(hours: float, dev_hours: float, cfg: dict) -> float:
    """Round up to 4h increments for small projects, 8h otherwise."""
    if hours <= 0:
        return 0
    rounding = cfg["rounding"]
    if dev_hours <= rounding["small_max_dev_hours"]:
        step = rounding["small_increment"]
    else:
        step = rounding["large_increment"]
    return math.ceil(round(hours / step, 9)) * step


def get_project_size(dev_hours: float, config: Optional[dict] = None) -> str:
    cfg = merge_estimation_config(config)
    thresholds = cfg["project_size_thresholds"]
    if dev_hours <= thresholds["micro"]:
        return "micro"
    if dev_hours <= thresholds["small"]:
        return "small"
    if dev_hours <= thresholds["medium"]:
        return "medium"
    return "large"


def get_testing_model(dev_hours: float, config: Optional[dict] = None) -> str:
    cfg = merge_estimation_config(config)
    thresholds = cfg["testing_model_thresholds"]
    if dev_hours <= thresholds["sequential"]:
        return "sequential"
    if dev_hours <= thresholds["hybrid"]:
        return "hybrid"
    return "parallel"


def estimate_phases(dev_hours: float, config: Optional[dict] = None) -> PhaseBreakdown:
    """Derive every phase's hours from the development estimate.

    Raises ValueError for negative input; zero yields an all-zero breakdown.
    """
    if dev_hours < 0:
        raise ValueError(f"dev_hours cannot be negative: {dev_hours}")
    if dev_hours == 0:
        return PhaseBreakdown()

    cfg = merge_estimation_config(config)
    pct = cfg["percentages"]
    size = get_project_size(dev_hours, cfg)

    def portion(percentage: float) -> float:
        return _round_hours(dev_hours * percentage / 100, dev_hours, cfg)

    pm_pct = cfg["role_flexibility"]["project_management"].get(size, 0)
    dev_ops_pct = cfg["role_flexibility"]["dev_ops"].get(size, 0)

    return PhaseBreakdown(
        requirements=portion(pct["requirements"]),
        technical_design=portion(pct["technical_design"]),
        development=_round_hours(dev_hours, dev_hours, cfg),
        testing=portion(pct["testing"]),
        support=portion(pct["support"]),
        dev_ops=min(portion(dev_ops_pct), cfg["dev_ops_max_hours"]),
        project_management=portion(pm_pct),
    )


def _team_size(total_hours: float, cfg: dict) -> float:
    sizing = cfg["team_sizing"]
    raw_weeks = total_hours / cfg["capacity"]["max_weekly_hours"]
    if raw_weeks <= sizing["small_max_weeks"]:
        return sizing["small_developers"]
    if raw_weeks <= sizing["medium_max_weeks"]:
        return sizing["medium_developers"]
    return sizing["large_developers"]


def calculate_project_estimate(dev_hours: float, config: Optional[dict] = None) -> EstimationResult:
    """Full estimate for one team's development figure."""
    cfg = merge_estimation_config(config)
    phases = estimate_phases(dev_hours, cfg)
    if phases.total_hours == 0:
        return EstimationResult(
            phases=phases, total_hours=0, total_cost=0, capex_total=0, opex_total=0,
        )

    total_hours = phases.total_hours
    team_size = _team_size(total_hours, cfg)
    weekly_hours = cfg["capacity"]["max_weekly_hours"]
    sprint_weeks = cfg["capacity"]["sprint_weeks"]
    raw_duration = math.ceil(round(total_hours / (team_size * weekly_hours), 9))
    duration_sprints = math.ceil(raw_duration / sprint_weeks)

    rate = cfg["blended_rate"]
    capex_phases = set(cfg["capex_phases"])
    capex_lines: List[CostLine] = []
    opex_lines: List[CostLine] = []
    for key, hours in phases.as_dict().items():
        if hours <= 0:
            continue
        line = CostLine(phase=PHASE_LABELS[key], hours=hours, cost=hours * rate)
        if key in capex_phases:
            capex_lines.append(line)
        else:
            opex_lines.append(line)

    capex_total = sum(line.cost for line in capex_lines)
    opex_total = sum(line.cost for line in opex_lines)
    total_cost = capex_total + opex_total

    return EstimationResult(
        phases=phases,
        total_hours=total_hours,
        total_cost=total_cost,
        capex_total=capex_total,
        opex_total=opex_total,
        capex_lines=capex_lines,
        opex_lines=opex_lines,
        project_size=get_project_size(dev_hours, cfg),
        testing_model=get_testing_model(dev_hours, cfg),
        team_size=team_size,
        recommended_team_size=math.ceil(team_size),
        duration_weeks=duration_sprints * sprint_weeks,
        duration_sprints=duration_sprints,
        cost_per_sprint=total_cost / duration_sprints if duration_sprints > 0 else 0.0,
    )


def aggregate_estimates(
    team_inputs: Iterable[dict],
    config: Optional[dict] = None,
) -> AggregateEstimation:
    """Estimate each team's dev hours and roll the results up.

    Each input dict carries team_id, team_name and dev_hours. Duration is the
    longest team duration on a sprint boundary; team size and testing model
    come from the combined development hours.
    """
    cfg = merge_estimation_config(config)
    teams = [
        TeamEstimation(
            team_id=t["team_id"],
            team_name=t.get("team_name", t["team_id"]),
            dev_hours=t["dev_hours"],
            estimate=calculate_project_estimate(t["dev_hours"], cfg),
        )
        for t in team_inputs
    ]

    totals: Dict[str, float] = PhaseBreakdown().as_dict()
    for t in teams:
        for key, hours in t.estimate.phases.as_dict().items():
            totals[key] += hours

    sprint_weeks = cfg["capacity"]["sprint_weeks"]
    max_weeks = max((t.estimate.duration_weeks for t in teams), default=0)
    duration_sprints = math.ceil(max_weeks / sprint_weeks)
    combined = calculate_project_estimate(sum(t.dev_hours for t in teams), cfg)

    result = AggregateEstimation(
        teams=teams,
        phases=PhaseBreakdown(**totals),
        total_hours=sum(t.estimate.total_hours for t in teams),
        total_cost=sum(t.estimate.total_cost for t in teams),
        total_capex=sum(t.estimate.capex_total for t in teams),
        total_opex=sum(t.estimate.opex_total for t in teams),
        estimated_weeks=duration_sprints * sprint_weeks,
        duration_sprints=duration_sprints,
        recommended_team_size=combined.recommended_team_size,
        testing_model=combined.testing_model,
    )
    logger.debug(
        "Aggregated %d team estimates: %.0f hours, cost %.2f",
        len(teams), result.total_hours, result.total_cost,
    )
    return result


def to_team_estimate(team_id: str, phases: PhaseBreakdown) -> TeamEstimate:
    """Fold an estimator breakdown into the engine's five scheduling phases."""
    return TeamEstimate(
        team_id=team_id,
        design=phases.requirements + phases.technical_design + phases.project_management,
        development=phases.development,
        testing=phases.testing,
        deployment=phases.dev_ops,
        post_deploy=phases.support,
    )
