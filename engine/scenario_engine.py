"""Scenario simulation engine: overlay overrides and contractors, then recompute."""

import copy
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from models.team import Team
from models.project import Project
from models.calendar import Holiday, PTOEntry, NewHire
from models.scenario import Contractor, Scenario
from models.allocation import AllocationResult
from engine.allocation_engine import run_allocation_engine

logger = logging.getLogger(__name__)


def create_baseline_scenario() -> Scenario:
    """An empty overlay: no contractors, no priority overrides."""
    return Scenario(
        scenario_id="baseline",
        name="Baseline",
        description="Current portfolio with stored priorities and staffing",
    )


def apply_overrides(scenario: Scenario) -> Tuple[List[Contractor], Dict[str, int]]:
    """Return copies of the scenario's contractors and its priority override map."""
    contractors = [copy.deepcopy(c) for c in scenario.contractors]
    return contractors, scenario.override_map()


def run_scenario(
    scenario: Scenario,
    teams: Sequence[Team],
    projects: Sequence[Project],
    holidays: Sequence[Holiday] = (),
    pto_entries: Sequence[PTOEntry] = (),
    new_hires: Sequence[NewHire] = (),
    rule_config: Optional[dict] = None,
) -> AllocationResult:
    """Re-run the engine under a scenario and cache the allocations on it.

    Baseline teams and projects are passed through untouched; only the
    scenario's display cache and last_run_at change.
    """
    contractors, overrides = apply_overrides(scenario)
    unknown = [pid for pid in overrides if pid not in {p.project_id for p in projects}]
    if unknown:
        logger.debug("Scenario %s overrides unknown projects: %s", scenario.scenario_id, unknown)

    result = run_allocation_engine(
        teams, projects, contractors, overrides,
        holidays, pto_entries, new_hires, rule_config,
    )

    scenario.allocation_results = result.allocations
    scenario.last_run_at = datetime.now()
    logger.info(
        "Scenario %s: %d contractors, %d priority overrides",
        scenario.scenario_id, len(contractors), len(overrides),
    )
    return result


def compare_scenarios(
    baseline: AllocationResult,
    candidate: AllocationResult,
    baseline_name: str = "Baseline",
    candidate_name: str = "Scenario",
) -> List[dict]:
    """Compare two runs and return per-project differences in baseline priority order."""
    a_map = {a.project_id: a for a in baseline.allocations}
    b_map = {b.project_id: b for b in candidate.allocations}

    project_ids = [a.project_id for a in baseline.allocations]
    project_ids += [b.project_id for b in candidate.allocations if b.project_id not in a_map]

    diffs = []
    for project_id in project_ids:
        a = a_map.get(project_id)
        b = b_map.get(project_id)
        name = a.project_name if a else b.project_name
        diffs.append({
            "Project": name,
            "Project ID": project_id,
            f"{baseline_name} Priority": a.priority if a else None,
            f"{candidate_name} Priority": b.priority if b else None,
            f"{baseline_name} End Week": a.end_week if a else None,
            f"{candidate_name} End Week": b.end_week if b else None,
            "End Week Change": (b.end_week - a.end_week) if a and b else None,
            f"{baseline_name} Feasible": a.feasible if a else None,
            f"{candidate_name} Feasible": b.feasible if b else None,
            "Feasibility Changed": bool(a and b and a.feasible != b.feasible),
        })
    return diffs
