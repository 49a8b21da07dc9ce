from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from config.defaults import ROLE_KEYS


@dataclass
class Contractor:
    team_id: str
    role_key: str
    fte: float
    weeks: int
    start_week: int = 0
    label: str = ""

    def __post_init__(self):
        if self.role_key not in ROLE_KEYS:
            raise ValueError(f"Contractor for {self.team_id}: unknown role '{self.role_key}'")
        if self.fte < 0:
            raise ValueError(f"Contractor for {self.team_id}: fte cannot be negative")
        if self.weeks < 0 or self.start_week < 0:
            raise ValueError(f"Contractor for {self.team_id}: week range cannot be negative")

    def is_active(self, week: int) -> bool:
        return self.start_week <= week < self.start_week + self.weeks


@dataclass
class PriorityOverride:
    project_id: str
    priority: int


@dataclass
class Scenario:
    scenario_id: str
    name: str
    description: str = ""
    is_locked: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    contractors: List[Contractor] = field(default_factory=list)
    priority_overrides: Dict[str, PriorityOverride] = field(default_factory=dict)
    allocation_results: List = field(default_factory=list)  # display cache only
    last_run_at: Optional[datetime] = None

    def override_map(self) -> Dict[str, int]:
        return {pid: o.priority for pid, o in self.priority_overrides.items()}
