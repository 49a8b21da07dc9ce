"""Schema validation for uploaded portfolio files."""

from dataclasses import dataclass, field
from typing import Dict, List
import pandas as pd

from models.resource import ResourceSkill, SkillRequirement
from config.defaults import (
    MAX_PROFICIENCY, MIN_PROFICIENCY, PHASE_COLUMN_LABELS, PROJECT_STATUSES,
    ROLE_COLUMN_LABELS, WORKFLOW_TRANSITIONS,
)


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        self.is_valid = self.is_valid and other.is_valid
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self


TEAM_REQUIRED_COLUMNS = [
    "Team ID",
    "Team Name",
    "KLO/TLM Hours/Week",
    "Admin %",
]

PROJECT_REQUIRED_COLUMNS = [
    "Project ID",
    "Project Name",
    "Priority",
]

ESTIMATE_REQUIRED_COLUMNS = [
    "Project ID",
    "Team ID",
]

HOLIDAY_REQUIRED_COLUMNS = [
    "Holiday Name",
]

PTO_REQUIRED_COLUMNS = [
    "Team ID",
    "Person Name",
    "Start Week",
    "End Week",
]

RESOURCE_REQUIRED_COLUMNS = [
    "Resource ID",
    "Name",
    "Team ID",
]

ASSIGNMENT_REQUIRED_COLUMNS = [
    "Resource ID",
    "Project ID",
    "Allocation %",
    "Start Week",
    "End Week",
]


def _check_required_columns(df: pd.DataFrame, required: List[str], file_label: str) -> ValidationResult:
    result = ValidationResult()
    missing = [col for col in required if col not in df.columns]
    if missing:
        result.is_valid = False
        result.errors.append(f"{file_label}: Missing required columns: {', '.join(missing)}")
    if df.empty:
        result.is_valid = False
        result.errors.append(f"{file_label}: File contains no data rows.")
    return result


def _negative(df: pd.DataFrame, column: str) -> bool:
    values = pd.to_numeric(df[column], errors="coerce")
    return bool((values < 0).any())


def _non_numeric(df: pd.DataFrame, column: str) -> bool:
    values = pd.to_numeric(df[column], errors="coerce")
    return bool((values.isna() & df[column].notna()).any())


def validate_teams(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, TEAM_REQUIRED_COLUMNS, "Teams")
    if not result.is_valid:
        return result

    role_columns = [c for c in ROLE_COLUMN_LABELS.values() if c in df.columns]
    if not role_columns:
        result.is_valid = False
        result.errors.append("Teams: No role FTE columns found (e.g. 'Developer FTE').")

    for column in role_columns + ["KLO/TLM Hours/Week"]:
        if _non_numeric(df, column):
            result.is_valid = False
            result.errors.append(f"Teams: {column} must be numeric.")
        elif _negative(df, column):
            result.is_valid = False
            result.errors.append(f"Teams: {column} cannot be negative.")

    admin = pd.to_numeric(df["Admin %"], errors="coerce")
    if ((admin < 0) | (admin > 100)).any():
        result.is_valid = False
        result.errors.append("Teams: Admin % must be between 0 and 100.")

    dupes = df.duplicated(subset=["Team ID"], keep=False)
    if dupes.any():
        result.is_valid = False
        result.errors.append(f"Teams: Duplicate team IDs: {df[dupes]['Team ID'].unique().tolist()}")

    return result


def validate_projects(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, PROJECT_REQUIRED_COLUMNS, "Projects")
    if not result.is_valid:
        return result

    if _non_numeric(df, "Priority"):
        result.is_valid = False
        result.errors.append("Projects: Priority must be an integer.")

    dupes = df.duplicated(subset=["Project ID"], keep=False)
    if dupes.any():
        result.is_valid = False
        result.errors.append(f"Projects: Duplicate project IDs: {df[dupes]['Project ID'].unique().tolist()}")

    if "Status" in df.columns:
        statuses = df["Status"].dropna().astype(str).str.strip().str.lower()
        unknown = sorted(set(statuses) - set(PROJECT_STATUSES))
        if unknown:
            result.is_valid = False
            result.errors.append(f"Projects: Unknown status values: {unknown}")

    if "Workflow Status" in df.columns:
        stages = df["Workflow Status"].dropna().astype(str).str.strip().str.lower().str.replace(" ", "_")
        unknown = sorted(set(stages) - set(WORKFLOW_TRANSITIONS))
        if unknown:
            result.is_valid = False
            result.errors.append(f"Projects: Unknown workflow status values: {unknown}")

    if "Start Week" in df.columns and _negative(df, "Start Week"):
        result.is_valid = False
        result.errors.append("Projects: Start Week cannot be negative.")

    if "Required Skills" in df.columns:
        bad = _bad_skill_levels(df["Required Skills"], SkillRequirement.parse)
        if bad:
            result.is_valid = False
            result.errors.append(
                f"Projects: Skill levels must be between {MIN_PROFICIENCY} and {MAX_PROFICIENCY}: {bad}"
            )

    return result


def validate_estimates(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, ESTIMATE_REQUIRED_COLUMNS, "Estimates")
    if not result.is_valid:
        return result

    hour_columns = [c for c in PHASE_COLUMN_LABELS.values() if c in df.columns]
    if "Dev Hours" in df.columns:
        hour_columns.append("Dev Hours")
    if not hour_columns:
        result.is_valid = False
        result.errors.append("Estimates: Provide phase hour columns or a 'Dev Hours' column.")
        return result

    for column in hour_columns:
        if _non_numeric(df, column):
            result.is_valid = False
            result.errors.append(f"Estimates: {column} must be numeric.")
        elif _negative(df, column):
            result.is_valid = False
            result.errors.append(f"Estimates: {column} cannot be negative.")

    dupes = df.duplicated(subset=["Project ID", "Team ID"], keep=False)
    if dupes.any():
        result.warnings.append(
            "Estimates: Multiple rows for the same project/team; each is scheduled separately."
        )

    return result


def validate_holidays(df: pd.DataFrame) -> ValidationResult:
    if df.empty:
        return ValidationResult()
    result = _check_required_columns(df, HOLIDAY_REQUIRED_COLUMNS, "Holidays")
    if not result.is_valid:
        return result

    if "Week" not in df.columns and "Date" not in df.columns:
        result.is_valid = False
        result.errors.append("Holidays: Provide a 'Week' or a 'Date' column.")
    if "Week" in df.columns and _negative(df, "Week"):
        result.is_valid = False
        result.errors.append("Holidays: Week cannot be negative.")
    if "Hours Off" in df.columns and _negative(df, "Hours Off"):
        result.is_valid = False
        result.errors.append("Holidays: Hours Off cannot be negative.")

    return result


def validate_pto(df: pd.DataFrame) -> ValidationResult:
    if df.empty:
        return ValidationResult()
    result = _check_required_columns(df, PTO_REQUIRED_COLUMNS, "PTO")
    if not result.is_valid:
        return result

    start = pd.to_numeric(df["Start Week"], errors="coerce")
    end = pd.to_numeric(df["End Week"], errors="coerce")
    if (start < 0).any() or (end < start).any():
        result.is_valid = False
        result.errors.append("PTO: Week ranges must start at 0 or later and end on or after the start.")
    if "Hours/Week" in df.columns and _negative(df, "Hours/Week"):
        result.is_valid = False
        result.errors.append("PTO: Hours/Week cannot be negative.")

    return result


def _bad_skill_levels(values: pd.Series, parse) -> List[str]:
    bad = []
    for cell in values.dropna().astype(str):
        for part in cell.replace(";", ",").split(","):
            if not part.strip():
                continue
            try:
                parse(part)
            except ValueError:
                bad.append(part.strip())
    return bad


def validate_resources(df: pd.DataFrame) -> ValidationResult:
    if df.empty:
        return ValidationResult()
    result = _check_required_columns(df, RESOURCE_REQUIRED_COLUMNS, "Resources")
    if not result.is_valid:
        return result

    dupes = df.duplicated(subset=["Resource ID"], keep=False)
    if dupes.any():
        result.is_valid = False
        result.errors.append(f"Resources: Duplicate resource IDs: {df[dupes]['Resource ID'].unique().tolist()}")

    if "Skills" in df.columns:
        bad = _bad_skill_levels(df["Skills"], ResourceSkill.parse)
        if bad:
            result.is_valid = False
            result.errors.append(
                f"Resources: Skill levels must be between {MIN_PROFICIENCY} and {MAX_PROFICIENCY}: {bad}"
            )

    return result


def validate_assignments(df: pd.DataFrame) -> ValidationResult:
    if df.empty:
        return ValidationResult()
    result = _check_required_columns(df, ASSIGNMENT_REQUIRED_COLUMNS, "Assignments")
    if not result.is_valid:
        return result

    pct = pd.to_numeric(df["Allocation %"], errors="coerce")
    if (pct.isna() | (pct < 0) | (pct > 100)).any():
        result.is_valid = False
        result.errors.append("Assignments: Allocation % must be a number between 0 and 100.")

    start = pd.to_numeric(df["Start Week"], errors="coerce")
    end = pd.to_numeric(df["End Week"], errors="coerce")
    if (start < 0).any() or (end < start).any():
        result.is_valid = False
        result.errors.append(
            "Assignments: Week ranges must start at 0 or later and end on or after the start."
        )

    return result


def validate_cross_file(frames: Dict[str, pd.DataFrame]) -> ValidationResult:
    """Check that ids referenced across files exist."""
    result = ValidationResult()
    team_ids = set(frames["teams"]["Team ID"].astype(str).str.strip())
    project_ids = set(frames["projects"]["Project ID"].astype(str).str.strip())
    estimates = frames["estimates"]

    est_teams = set(estimates["Team ID"].astype(str).str.strip())
    est_projects = set(estimates["Project ID"].astype(str).str.strip())

    unknown_teams = est_teams - team_ids
    unknown_projects = est_projects - project_ids
    no_estimates = project_ids - est_projects

    if unknown_teams:
        result.warnings.append(
            f"Estimates reference unknown teams: {', '.join(sorted(unknown_teams))}. "
            "That demand will be skipped."
        )
    if unknown_projects:
        result.warnings.append(
            f"Estimates for unknown projects: {', '.join(sorted(unknown_projects))}. "
            "These will be ignored."
        )
    if no_estimates:
        result.warnings.append(
            f"Projects without estimates: {', '.join(sorted(no_estimates))}. "
            "They contribute no demand."
        )

    pto = frames.get("pto")
    if pto is not None and not pto.empty and "Team ID" in pto.columns:
        unknown_pto = set(pto["Team ID"].astype(str).str.strip()) - team_ids
        if unknown_pto:
            result.warnings.append(
                f"PTO for unknown teams: {', '.join(sorted(unknown_pto))}. These will be ignored."
            )

    resources = frames.get("resources")
    resource_ids = set()
    if resources is not None and not resources.empty:
        resource_ids = set(resources["Resource ID"].astype(str).str.strip())
        unknown_res_teams = set(resources["Team ID"].astype(str).str.strip()) - team_ids
        if unknown_res_teams:
            result.warnings.append(
                f"Resources on unknown teams: {', '.join(sorted(unknown_res_teams))}."
            )

    assignments = frames.get("assignments")
    if assignments is not None and not assignments.empty:
        unknown_people = set(assignments["Resource ID"].astype(str).str.strip()) - resource_ids
        unknown_work = set(assignments["Project ID"].astype(str).str.strip()) - project_ids
        if unknown_people:
            result.is_valid = False
            result.errors.append(
                f"Assignments reference unknown resources: {', '.join(sorted(unknown_people))}."
            )
        if unknown_work:
            result.is_valid = False
            result.errors.append(
                f"Assignments reference unknown projects: {', '.join(sorted(unknown_work))}."
            )
    return result


def validate_portfolio(frames: Dict[str, pd.DataFrame]) -> ValidationResult:
    """Run every sheet check, then the cross-file check when the sheets are sound."""
    result = ValidationResult()
    result.merge(validate_teams(frames["teams"]))
    result.merge(validate_projects(frames["projects"]))
    result.merge(validate_estimates(frames["estimates"]))
    result.merge(validate_holidays(frames.get("holidays", pd.DataFrame())))
    result.merge(validate_pto(frames.get("pto", pd.DataFrame())))
    result.merge(validate_resources(frames.get("resources", pd.DataFrame())))
    result.merge(validate_assignments(frames.get("assignments", pd.DataFrame())))
    if result.is_valid:
        result.merge(validate_cross_file(frames))
    return result
