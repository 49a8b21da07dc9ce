from dataclasses import dataclass, field
from typing import Dict, Tuple

from config.defaults import ROLE_KEYS


@dataclass
class Team:
    team_id: str
    name: str
    pm_fte: float = 0.0
    product_manager_fte: float = 0.0
    ux_designer_fte: float = 0.0
    business_analyst_fte: float = 0.0
    scrum_master_fte: float = 0.0
    architect_fte: float = 0.0
    developer_fte: float = 0.0
    qa_fte: float = 0.0
    devops_fte: float = 0.0
    dba_fte: float = 0.0
    klo_tlm_hours_per_week: float = 0.0  # fixed weekly operational tax
    admin_pct: float = 0.0                # e.g. 25 for 25%
    skills: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.team_id:
            raise ValueError("team_id is required")
        for role in ROLE_KEYS:
            if getattr(self, f"{role}_fte") < 0:
                raise ValueError(f"Team {self.team_id}: {role}_fte cannot be negative")
        if self.klo_tlm_hours_per_week < 0:
            raise ValueError(f"Team {self.team_id}: klo_tlm_hours_per_week cannot be negative")
        if not 0 <= self.admin_pct <= 100:
            raise ValueError(f"Team {self.team_id}: admin_pct must be between 0 and 100")
        self.skills = tuple(self.skills)

    def role_ftes(self) -> Dict[str, float]:
        return {role: getattr(self, f"{role}_fte") for role in ROLE_KEYS}

    @property
    def total_fte(self) -> float:
        return sum(self.role_ftes().values())
