"""File upload parsing — CSV/XLSX into typed model lists."""

import json
import logging
import os
from datetime import date
from typing import Dict, List, Optional, Tuple

import pandas as pd
from dateutil import parser as dateparser

from models.team import Team
from models.project import Project, TeamEstimate
from models.calendar import Holiday, PTOEntry
from models.resource import Resource, ResourceAssignment
from models.scenario import Contractor, PriorityOverride, Scenario
from engine.estimator import estimate_phases, to_team_estimate
from config.defaults import (
    DEFAULT_HOLIDAY_HOURS_OFF, DEFAULT_PTO_HOURS_PER_WEEK, DEFAULT_WORKFLOW_STATUS,
    PHASE_COLUMN_LABELS, ROLE_COLUMN_LABELS, SHEET_ALIASES,
)

logger = logging.getLogger(__name__)

OPTIONAL_SHEETS = ("holidays", "pto", "resources", "assignments")


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return bool(pd.isna(value))


def _optional(row, df: pd.DataFrame, column: str, default=None):
    if column in df.columns and not _is_blank(row.get(column)):
        return row[column]
    return default


def _split_list(value) -> Tuple[str, ...]:
    """'Python; SQL, Azure' -> ('Python', 'SQL', 'Azure')"""
    if _is_blank(value):
        return ()
    parts = str(value).replace(";", ",").split(",")
    return tuple(p.strip() for p in parts if p.strip())


def _parse_bool(value) -> bool:
    if _is_blank(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ("y", "yes", "true", "1")
    return bool(value)


def _parse_date(value, field_name: str) -> Optional[date]:
    if _is_blank(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return dateparser.isoparse(str(value).strip()).date()
    except (ValueError, TypeError) as exc:
        raise ValueError(f"invalid date in '{field_name}': {value}") from exc


def parse_teams(df: pd.DataFrame) -> List[Team]:
    """Convert a teams DataFrame into Team objects."""
    teams = []
    for _, row in df.iterrows():
        ftes = {
            f"{role}_fte": float(_optional(row, df, label, 0.0))
            for role, label in ROLE_COLUMN_LABELS.items()
        }
        teams.append(Team(
            team_id=str(row["Team ID"]).strip(),
            name=str(row["Team Name"]).strip(),
            klo_tlm_hours_per_week=float(_optional(row, df, "KLO/TLM Hours/Week", 0.0)),
            admin_pct=float(_optional(row, df, "Admin %", 0.0)),
            skills=_split_list(_optional(row, df, "Skills")),
            **ftes,
        ))
    return teams


def parse_estimates(df: pd.DataFrame, config: Optional[dict] = None) -> Dict[str, List[TeamEstimate]]:
    """Convert an estimates DataFrame into TeamEstimates keyed by project id.

    A row with blank phase columns but a "Dev Hours" figure is expanded
    through the phase estimator.
    """
    estimates: Dict[str, List[TeamEstimate]] = {}
    for _, row in df.iterrows():
        project_id = str(row["Project ID"]).strip()
        team_id = str(row["Team ID"]).strip()
        phase_values = {
            phase: _optional(row, df, label)
            for phase, label in PHASE_COLUMN_LABELS.items()
        }
        dev_hours = _optional(row, df, "Dev Hours")
        if all(v is None for v in phase_values.values()) and dev_hours is not None:
            estimate = to_team_estimate(team_id, estimate_phases(float(dev_hours), config))
        else:
            estimate = TeamEstimate(
                team_id=team_id,
                **{phase: float(v or 0.0) for phase, v in phase_values.items()},
            )
        estimates.setdefault(project_id, []).append(estimate)
    return estimates


def parse_projects(
    df: pd.DataFrame,
    estimates: Optional[Dict[str, List[TeamEstimate]]] = None,
) -> List[Project]:
    """Convert a projects DataFrame into Project objects, attaching team estimates."""
    estimates = estimates or {}
    projects = []
    for _, row in df.iterrows():
        project_id = str(row["Project ID"]).strip()
        business_value = _optional(row, df, "Business Value")
        risk_level = _optional(row, df, "Risk Level")
        projects.append(Project(
            project_id=project_id,
            name=str(row["Project Name"]).strip(),
            priority=int(row["Priority"]),
            status=str(_optional(row, df, "Status", "not_started")).strip().lower(),
            start_week_offset=int(_optional(row, df, "Start Week", 0)),
            team_estimates=list(estimates.get(project_id, [])),
            required_skills=_split_list(_optional(row, df, "Required Skills")),
            business_value=str(business_value).strip().lower() if business_value is not None else None,
            risk_level=str(risk_level).strip().lower() if risk_level is not None else None,
            workflow_status=str(
                _optional(row, df, "Workflow Status", DEFAULT_WORKFLOW_STATUS)
            ).strip().lower().replace(" ", "_"),
        ))
    unmatched = set(estimates) - {p.project_id for p in projects}
    if unmatched:
        logger.debug("Estimates for unknown projects ignored: %s", ", ".join(sorted(unmatched)))
    return projects


def parse_holidays(df: pd.DataFrame, planning_start: Optional[date] = None) -> List[Holiday]:
    """Convert a holidays DataFrame into Holiday objects.

    "Week" wins when present; otherwise the week is derived from "Date"
    relative to ``planning_start``.
    """
    holidays = []
    for _, row in df.iterrows():
        name = str(row["Holiday Name"]).strip()
        holiday_date = _parse_date(_optional(row, df, "Date"), "Date")
        week = _optional(row, df, "Week")
        if week is None:
            if holiday_date is None or planning_start is None:
                raise ValueError(f"Holiday '{name}': needs a Week, or a Date and a planning start")
            week = (holiday_date - planning_start).days // 7
        holidays.append(Holiday(
            name=name,
            week=int(week),
            hours_off=float(_optional(row, df, "Hours Off", DEFAULT_HOLIDAY_HOURS_OFF)),
            team_ids=_split_list(_optional(row, df, "Team IDs")),
            recurring=_parse_bool(_optional(row, df, "Recurring")),
            holiday_date=holiday_date,
        ))
    return holidays


def parse_pto(df: pd.DataFrame) -> List[PTOEntry]:
    """Convert a PTO DataFrame into PTOEntry objects."""
    entries = []
    for _, row in df.iterrows():
        entries.append(PTOEntry(
            team_id=str(row["Team ID"]).strip(),
            person_name=str(row["Person Name"]).strip(),
            start_week=int(row["Start Week"]),
            end_week=int(row["End Week"]),
            hours_per_week=float(_optional(row, df, "Hours/Week", DEFAULT_PTO_HOURS_PER_WEEK)),
            role=str(_optional(row, df, "Role", "")).strip(),
            reason=str(_optional(row, df, "Reason", "Vacation")).strip(),
        ))
    return entries


def parse_resources(df: pd.DataFrame) -> List[Resource]:
    """Convert a resources DataFrame into Resource objects.

    Skills are listed as 'Name:level', e.g. 'ABAP:5; SAP S/4HANA:4'.
    """
    resources = []
    for _, row in df.iterrows():
        resources.append(Resource(
            resource_id=str(row["Resource ID"]).strip(),
            name=str(row["Name"]).strip(),
            team_id=str(row["Team ID"]).strip(),
            role=str(_optional(row, df, "Role", "")).strip(),
            skills=_split_list(_optional(row, df, "Skills")),
        ))
    return resources


def parse_assignments(df: pd.DataFrame) -> List[ResourceAssignment]:
    assignments = []
    for _, row in df.iterrows():
        assignments.append(ResourceAssignment(
            resource_id=str(row["Resource ID"]).strip(),
            project_id=str(row["Project ID"]).strip(),
            allocation_pct=float(row["Allocation %"]),
            start_week=int(row["Start Week"]),
            end_week=int(row["End Week"]),
            role=str(_optional(row, df, "Role", "")).strip(),
        ))
    return assignments


def load_file(path) -> pd.DataFrame:
    """Load a file (CSV or XLSX) into a DataFrame."""
    name = str(getattr(path, "name", path)).lower()
    if name.endswith(".csv"):
        return pd.read_csv(path)
    elif name.endswith(".xlsx") or name.endswith(".xls"):
        return pd.read_excel(path, engine="openpyxl")
    else:
        raise ValueError(f"Unsupported file format: {name}. Use CSV or XLSX.")


def _match_sheet(sheet_names: List[str], category: str) -> Optional[str]:
    """Find a sheet name matching the given category. Returns None for missing optional sheets."""
    aliases = SHEET_ALIASES[category]
    lower_map = {s.lower().strip(): s for s in sheet_names}
    for alias in aliases:
        if alias in lower_map:
            return lower_map[alias]
    if category in OPTIONAL_SHEETS:
        return None
    raise ValueError(
        f"Could not find a sheet for '{category}'. "
        f"Expected one of: {aliases}. "
        f"Found sheets: {sheet_names}"
    )


def load_multi_sheet_excel(path) -> Dict[str, pd.DataFrame]:
    """Load a portfolio workbook with tabs Teams, Projects, Estimates and optional extras.

    Sheet names are matched case-insensitively. Holidays, PTO, Resources and
    Assignments are optional; a missing one comes back as an empty DataFrame.

    Returns one DataFrame per SHEET_ALIASES category.
    """
    xl = pd.ExcelFile(path, engine="openpyxl")
    frames = {}
    for category in SHEET_ALIASES:
        sheet = _match_sheet(xl.sheet_names, category)
        frames[category] = pd.read_excel(xl, sheet_name=sheet) if sheet else pd.DataFrame()
    return frames


def load_csv_directory(directory: str) -> Dict[str, pd.DataFrame]:
    """Load teams.csv, projects.csv, estimates.csv and any optional <category>.csv present."""
    frames = {}
    for category in SHEET_ALIASES:
        path = os.path.join(directory, f"{category}.csv")
        if os.path.exists(path):
            frames[category] = pd.read_csv(path)
        elif category in OPTIONAL_SHEETS:
            frames[category] = pd.DataFrame()
        else:
            raise ValueError(f"Missing required file: {path}")
    return frames


def parse_portfolio(
    frames: Dict[str, pd.DataFrame],
    planning_start: Optional[date] = None,
    estimation_config: Optional[dict] = None,
) -> dict:
    """Turn loaded frames into typed records.

    Returns {"teams", "projects", "holidays", "pto_entries", "resources", "assignments"}.
    """
    estimates = parse_estimates(frames["estimates"], estimation_config)
    holidays_df = frames.get("holidays", pd.DataFrame())
    pto_df = frames.get("pto", pd.DataFrame())
    resources_df = frames.get("resources", pd.DataFrame())
    assignments_df = frames.get("assignments", pd.DataFrame())
    portfolio = {
        "teams": parse_teams(frames["teams"]),
        "projects": parse_projects(frames["projects"], estimates),
        "holidays": parse_holidays(holidays_df, planning_start) if not holidays_df.empty else [],
        "pto_entries": parse_pto(pto_df) if not pto_df.empty else [],
        "resources": parse_resources(resources_df) if not resources_df.empty else [],
        "assignments": parse_assignments(assignments_df) if not assignments_df.empty else [],
    }
    logger.info(
        "Loaded %d teams, %d projects, %d holidays, %d PTO entries, %d resources, %d assignments",
        len(portfolio["teams"]), len(portfolio["projects"]),
        len(portfolio["holidays"]), len(portfolio["pto_entries"]),
        len(portfolio["resources"]), len(portfolio["assignments"]),
    )
    return portfolio


def load_scenario_json(path) -> Scenario:
    """Read a scenario overlay: contractors plus a {project_id: priority} map.

    {"scenario_id": "aug", "name": "Augmentation",
     "contractors": [{"team_id": "T-ERP", "role_key": "developer", "fte": 2, "weeks": 26}],
     "priority_overrides": {"P15": 25}}
    """
    with open(path) as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: scenario file must hold a JSON object")
    try:
        contractors = [Contractor(**c) for c in data.get("contractors", [])]
    except TypeError as exc:
        raise ValueError(f"{path}: invalid contractor entry ({exc})") from exc
    overrides = {
        str(pid): PriorityOverride(project_id=str(pid), priority=int(priority))
        for pid, priority in data.get("priority_overrides", {}).items()
    }
    return Scenario(
        scenario_id=str(data.get("scenario_id", "scenario")),
        name=str(data.get("name", "Scenario")),
        description=str(data.get("description", "")),
        contractors=contractors,
        priority_overrides=overrides,
    )
