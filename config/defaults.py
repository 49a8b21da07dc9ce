"""Default configuration constants for the IT Portfolio Capacity Planner."""

# Standard working hours per FTE per week
HOURS_PER_WEEK = 40

# Planning horizon (weeks); the "red line" boundary
PLANNING_HORIZON_WEEKS = 52

# How far past the horizon the engine keeps scheduling overflow demand
MAX_SCHEDULE_WEEKS = 156

# Floating point tolerance for hour comparisons
HOURS_EPSILON = 1e-9

# Role keys, in display order
ROLE_KEYS = [
    "pm",
    "product_manager",
    "ux_designer",
    "business_analyst",
    "scrum_master",
    "architect",
    "developer",
    "qa",
    "devops",
    "dba",
]

# Engine phases in execution order
PHASE_ORDER = ["design", "development", "testing", "deployment", "post_deploy"]

# Role that carries each phase (used for bottleneck reporting)
PHASE_ROLE_MAP = {
    "design": "architect",
    "development": "developer",
    "testing": "qa",
    "deployment": "devops",
    "post_deploy": "devops",
}

# Project lifecycle
PROJECT_STATUSES = [
    "not_started",
    "in_planning",
    "active",
    "on_hold",
    "complete",
    "cancelled",
]

# Statuses removed from demand before the priority sort
EXCLUDED_STATUSES = ("complete", "cancelled")

# Calendar defaults
DEFAULT_HOLIDAY_HOURS_OFF = 8
DEFAULT_PTO_HOURS_PER_WEEK = 40
WEEKS_PER_YEAR = 52

# Utilization thresholds (% of project capacity)
CAPACITY_AMBER_PCT = 85
CAPACITY_RED_PCT = 100

# Contractor optimizer
CONTRACTOR_HOURLY_RATE = 120
MAX_CONTRACTOR_FTE_PER_TEAM = 5.0

# Estimation defaults (percentages are % of development hours)
DEFAULT_ESTIMATION_CONFIG = {
    "percentages": {
        "requirements": 5,
        "technical_design": 5,
        "testing": 33,
        "support": 10,
    },
    "dev_ops_max_hours": 40,
    "blended_rate": 95,
    "rounding": {
        "small_max_dev_hours": 160,
        "small_increment": 4,
        "large_increment": 8,
    },
    "team_sizing": {
        "small_max_weeks": 8,
        "small_developers": 1,
        "medium_max_weeks": 20,
        "medium_developers": 2.5,
        "large_developers": 3.5,
    },
    "capacity": {
        "max_weekly_hours": 30,
        "sprint_weeks": 2,
    },
    "project_size_thresholds": {
        "micro": 80,
        "small": 240,
        "medium": 600,
    },
    # % of dev hours by project size; 0 disables the role for that size
    "role_flexibility": {
        "project_management": {"micro": 0, "small": 5, "medium": 10, "large": 12},
        "dev_ops": {"micro": 0, "small": 2, "medium": 6, "large": 8},
    },
    "testing_model_thresholds": {
        "sequential": 160,
        "hybrid": 400,
    },
    "capex_phases": ["technical_design", "development"],
}

# Logging
LOGGING_LEVEL = "INFO"

# Sheet aliases for multi-tab workbook import (case-insensitive)
SHEET_ALIASES = {
    "teams": ["teams", "team", "team capacity", "team master"],
    "projects": ["projects", "project", "portfolio", "project list"],
    "estimates": ["estimates", "estimate", "team estimates", "team estimate"],
    "holidays": ["holidays", "holiday", "calendar"],
    "pto": ["pto", "pto entries", "time off", "leave"],
    "resources": ["resources", "resource", "people", "staff"],
    "assignments": ["assignments", "assignment", "resource assignments"],
}

# Import column labels for per-role FTE on the Teams sheet
ROLE_COLUMN_LABELS = {
    "pm": "PM FTE",
    "product_manager": "Product Manager FTE",
    "ux_designer": "UX Designer FTE",
    "business_analyst": "Business Analyst FTE",
    "scrum_master": "Scrum Master FTE",
    "architect": "Architect FTE",
    "developer": "Developer FTE",
    "qa": "QA FTE",
    "devops": "DevOps FTE",
    "dba": "DBA FTE",
}

# Import column labels for engine phase hours on the Estimates sheet
PHASE_COLUMN_LABELS = {
    "design": "Design Hours",
    "development": "Development Hours",
    "testing": "Testing Hours",
    "deployment": "Deployment Hours",
    "post_deploy": "Post-Deploy Hours",
}

# Project intake workflow: status -> statuses it may move to
WORKFLOW_TRANSITIONS = {
    "submitted": ["estimating"],
    "estimating": ["estimated", "submitted"],
    "estimated": ["cost_review", "estimating"],
    "cost_review": ["approved", "estimating"],
    "approved": ["prioritized", "cost_review"],
    "prioritized": ["in_progress", "approved"],
    "in_progress": ["completed", "on_hold"],
    "on_hold": ["in_progress", "prioritized"],
    "completed": [],
}

WORKFLOW_LABELS = {
    "submitted": "Submitted",
    "estimating": "Estimating",
    "estimated": "Estimated",
    "cost_review": "Cost Review",
    "approved": "Approved",
    "prioritized": "Prioritized",
    "in_progress": "In Progress",
    "on_hold": "On Hold",
    "completed": "Completed",
}

DEFAULT_WORKFLOW_STATUS = "submitted"

# Skill proficiency scale (1 = novice, 5 = expert)
MIN_PROFICIENCY = 1
MAX_PROFICIENCY = 5
DEFAULT_SKILL_PROFICIENCY = 3

# Per-person assignment thresholds (% of a person's week)
OVERALLOCATION_PCT = 100
BURNOUT_UTILIZATION_PCT = 85
BURNOUT_MIN_CONSECUTIVE_WEEKS = 4
