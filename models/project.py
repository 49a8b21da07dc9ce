from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from models.resource import SkillRequirement
from config.defaults import (
    DEFAULT_WORKFLOW_STATUS, PHASE_ORDER, PROJECT_STATUSES, WORKFLOW_TRANSITIONS,
)


@dataclass
class TeamEstimate:
    team_id: str
    design: float = 0.0
    development: float = 0.0
    testing: float = 0.0
    deployment: float = 0.0
    post_deploy: float = 0.0

    def __post_init__(self):
        for phase in PHASE_ORDER:
            if getattr(self, phase) < 0:
                raise ValueError(f"TeamEstimate for {self.team_id}: {phase} hours cannot be negative")

    def phase_hours(self) -> List[Tuple[str, float]]:
        """Phase hours in execution order."""
        return [(phase, getattr(self, phase)) for phase in PHASE_ORDER]

    @property
    def total_hours(self) -> float:
        return sum(hours for _, hours in self.phase_hours())


@dataclass
class Project:
    project_id: str
    name: str
    priority: int                      # lower = higher precedence
    status: str = "not_started"
    start_week_offset: int = 0
    team_estimates: List[TeamEstimate] = field(default_factory=list)
    required_skills: Tuple[SkillRequirement, ...] = field(default_factory=tuple)
    business_value: Optional[str] = None  # "critical", "high", "medium", "low"
    risk_level: Optional[str] = None      # "high", "medium", "low"
    workflow_status: str = DEFAULT_WORKFLOW_STATUS  # intake pipeline stage
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.project_id:
            raise ValueError("project_id is required")
        if self.status not in PROJECT_STATUSES:
            raise ValueError(f"Project {self.project_id}: unknown status '{self.status}'")
        if self.workflow_status not in WORKFLOW_TRANSITIONS:
            raise ValueError(f"Project {self.project_id}: unknown workflow status '{self.workflow_status}'")
        if self.start_week_offset < 0:
            raise ValueError(f"Project {self.project_id}: start_week_offset cannot be negative")
        self.required_skills = tuple(SkillRequirement.parse(s) for s in self.required_skills)

    @property
    def total_hours(self) -> float:
        return sum(te.total_hours for te in self.team_estimates)
