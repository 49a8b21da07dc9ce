"""IT Portfolio Capacity Planner — batch entry point (workbook or CSVs in, CSVs out)."""

import argparse
import logging
import os
import sys
from typing import List, Optional

import pandas as pd
from dateutil import parser as dateparser

from config.defaults import LOGGING_LEVEL
from data.loader import (
    load_csv_directory, load_multi_sheet_excel, load_scenario_json, parse_portfolio,
)
from data.validator import validate_portfolio
from data.sample_data import generate_sample_frames
from data.portfolio_store import PortfolioStore
from engine.explainer import explain_project_allocation
from engine.resource_utilization import summarize_resource_utilization
from engine.reporting import (
    allocation_timeline_frame, find_red_line, find_single_points_of_failure, find_skill_gaps,
    project_summary_frame, summarize_team_capacity, weekly_demand_frame,
)
from engine.scenario_engine import compare_scenarios
from engine.workflow import describe_workflow

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="IT portfolio capacity planning batch tool (CSV/XLSX in, CSV out, no UI)."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--workbook",
        help="Portfolio workbook with Teams/Projects/Estimates tabs (Holidays/PTO/Resources/Assignments optional)",
    )
    source.add_argument("--input-dir", help="Directory holding teams.csv, projects.csv, estimates.csv, ...")
    source.add_argument("--sample", action="store_true", help="Run against the built-in sample portfolio")
    parser.add_argument(
        "--scenario-overrides",
        help="JSON file with scenario contractors and priority overrides",
    )
    parser.add_argument(
        "--planning-start",
        help="ISO date of planning week 0 (needed when holidays carry dates instead of weeks)",
    )
    parser.add_argument("--outdir", default="out", help="Output directory for generated CSV files")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Plan and print summary without writing output CSV files",
    )
    parser.add_argument(
        "--recommend-contractors",
        action="store_true",
        help="Print the cheapest contractor FTE per team that clears the red line",
    )
    parser.add_argument(
        "--explain",
        metavar="PROJECT_ID",
        help="Print the step-by-step schedule explanation for one project",
    )
    parser.add_argument("--log-level", default=LOGGING_LEVEL, help="Logging level (default: INFO)")
    return parser.parse_args(argv)


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")


def _load_store(args: argparse.Namespace) -> PortfolioStore:
    if args.sample:
        frames = generate_sample_frames()
    elif args.workbook:
        if not os.path.exists(args.workbook):
            raise ValueError(f"workbook not found at {args.workbook}")
        frames = load_multi_sheet_excel(args.workbook)
    else:
        if not os.path.isdir(args.input_dir):
            raise ValueError(f"input directory not found: {args.input_dir}")
        frames = load_csv_directory(args.input_dir)

    validation = validate_portfolio(frames)
    for warning in validation.warnings:
        logger.warning(warning)
    if not validation.is_valid:
        raise ValueError("input validation failed:\n  " + "\n  ".join(validation.errors))

    planning_start = None
    if args.planning_start:
        try:
            planning_start = dateparser.isoparse(args.planning_start).date()
        except (ValueError, TypeError) as exc:
            raise ValueError("--planning-start must be an ISO date") from exc

    return PortfolioStore.from_portfolio(parse_portfolio(frames, planning_start))


def _print_summary(result, title: str) -> None:
    print(f"{title}:")
    if not result.allocations:
        print("No projects scheduled.")
    for a in result.allocations:
        flag = "OK " if a.feasible else "RED"
        print(
            f"- [{flag}] P{a.priority} {a.project_id} {a.project_name}: "
            f"week {a.start_week} → {a.end_week} ({a.total_weeks} weeks)"
        )
    red_line = find_red_line(result)
    if red_line is None:
        print(f"\nAll projects finish inside the {result.horizon_weeks}-week horizon.")
    else:
        print(f"\nRed line falls before priority position {red_line + 1}.")
    if result.excluded_project_ids:
        print(f"Excluded by status: {', '.join(result.excluded_project_ids)}")

    print("\nTeam capacity:")
    for row in summarize_team_capacity(result):
        print(
            f"- {row['team_name']}: {row['utilization_pct']:.0f}% utilized, "
            f"{row['available_hours']:.0f}h free [{row['status']}]"
        )


def _print_recommendation(result, store: PortfolioStore, scenario_id: Optional[str]) -> None:
    rec = store.recommend_staffing(result, scenario_id)
    print(f"\nContractor recommendation ({rec.status}): {rec.message}")
    for c in rec.contractors:
        print(f"- {c.team_id}: {c.fte:.2f} FTE {c.role_key} from week {c.start_week} for {c.weeks} weeks")
    for team_id, hours in sorted(rec.shortfall_hours.items()):
        print(f"- {team_id}: {hours:.0f}h still past the red line")
    if rec.still_infeasible:
        print(f"Still past the horizon: {', '.join(rec.still_infeasible)}")


def _skill_gap_rows(store: PortfolioStore) -> List[dict]:
    resources = list(store.resources.values())
    rows = []
    for project in store.projects.values():
        for gap in find_skill_gaps(project, resources):
            rows.append({
                "project_id": project.project_id,
                "skill": gap["skill"],
                "min_proficiency": gap["min_proficiency"],
                "qualified": ", ".join(rid for rid, _ in gap["available"]),
                "gap": gap["gap"],
            })
    return rows


def _print_resource_alerts(store: PortfolioStore) -> None:
    if not store.resources:
        return
    over = store.overallocated_resources()
    burnout = store.burnout_risks()
    spofs = find_single_points_of_failure(list(store.resources.values()), list(store.projects.values()))
    print("\nPeople:")
    print(f"- {len({row['resource_id'] for row in over})} over-allocated ({len(over)} person-weeks above 100%)")
    for row in burnout:
        print(f"- Burnout risk: {row['resource_name']} ({row['max_consecutive_high_weeks']} weeks in a row)")
    for row in spofs:
        print(f"- Single point of failure: {row['skill']} held only by {row['resource_name']}")
    for row in _skill_gap_rows(store):
        if row["gap"]:
            print(f"- Skill gap: {row['project_id']} needs {row['skill']} at level {row['min_proficiency']}")


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    _configure_logging(args.log_level)

    try:
        store = _load_store(args)
        scenario = load_scenario_json(args.scenario_overrides) if args.scenario_overrides else None
        if scenario is not None:
            store.add_scenario(scenario)
    except (ValueError, OSError) as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(2)

    baseline = store.run()
    result = store.run(scenario.scenario_id) if scenario else baseline

    if args.dry_run:
        _print_summary(result, scenario.name if scenario else "Baseline")
        _print_resource_alerts(store)
    if args.recommend_contractors:
        _print_recommendation(result, store, scenario.scenario_id if scenario else None)
    if args.explain:
        allocation = result.get(args.explain)
        if allocation is None:
            print(f"project {args.explain} was not scheduled", file=sys.stderr)
            sys.exit(2)
        print("\n".join(explain_project_allocation(allocation, result.horizon_weeks)))
        workflow = describe_workflow(store.get_project(args.explain).workflow_status, store.rule_config)
        next_steps = ", ".join(t["label"] for t in workflow["allowed_transitions"]) or "none"
        print(f"Workflow: {workflow['current_label']} (next: {next_steps})")
    if args.dry_run:
        return

    os.makedirs(args.outdir, exist_ok=True)
    outputs = {
        "project_timeline.csv": allocation_timeline_frame(result),
        "project_summary.csv": project_summary_frame(result),
        "team_capacity.csv": pd.DataFrame(summarize_team_capacity(result)),
        "weekly_demand.csv": weekly_demand_frame(result),
    }
    if scenario:
        outputs["scenario_comparison.csv"] = pd.DataFrame(
            compare_scenarios(baseline, result, candidate_name=scenario.name)
        )
    if store.resources:
        outputs["resource_utilization.csv"] = pd.DataFrame(summarize_resource_utilization(
            list(store.resources.values()), store.assignments, store.rule_config,
        ))
        outputs["overallocations.csv"] = pd.DataFrame(
            store.overallocated_resources(),
            columns=["resource_id", "resource_name", "team_id", "week", "total_pct"],
        )
        outputs["skill_gaps.csv"] = pd.DataFrame(
            _skill_gap_rows(store), columns=["project_id", "skill", "min_proficiency", "qualified", "gap"],
        )
    for filename, df in outputs.items():
        path = os.path.join(args.outdir, filename)
        df.to_csv(path, index=False)
        print(f"Wrote {path}")


if __name__ == "__main__":
    main()
