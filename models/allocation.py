from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class PhaseAllocation:
    phase: str
    start_week: int
    end_week: int
    hours_per_week: List[float]     # index 0 == start_week
    unscheduled_hours: float = 0.0  # left over at the end of the schedule range

    @property
    def total_hours(self) -> float:
        return sum(self.hours_per_week)

    def hours_in_week(self, week: int) -> float:
        idx = week - self.start_week
        if 0 <= idx < len(self.hours_per_week):
            return self.hours_per_week[idx]
        return 0.0


@dataclass
class TeamAllocation:
    team_id: str
    team_name: str
    phases: List[PhaseAllocation] = field(default_factory=list)

    @property
    def start_week(self) -> int:
        return min(p.start_week for p in self.phases)

    @property
    def end_week(self) -> int:
        return max(p.end_week for p in self.phases)


@dataclass
class Bottleneck:
    team_id: str
    team_name: str
    role: str


@dataclass
class ProjectAllocation:
    project_id: str
    project_name: str
    priority: int                   # effective (override-aware)
    feasible: bool
    start_week: int
    end_week: int
    total_weeks: int
    team_allocations: List[TeamAllocation] = field(default_factory=list)
    bottleneck: Optional[Bottleneck] = None
    unscheduled_hours: float = 0.0

    @property
    def scheduled_hours(self) -> float:
        return sum(p.total_hours for t in self.team_allocations for p in t.phases)


@dataclass
class RoleCapacity:
    fte: float
    hours_per_week: float


@dataclass
class TeamCapacity:
    team_id: str
    team_name: str
    total_hours_per_week: float
    klo_tlm_hours: float
    admin_hours: float
    project_capacity_per_week: float
    roles: Dict[str, RoleCapacity] = field(default_factory=dict)
    weekly_capacity: List[float] = field(default_factory=list)   # planning horizon
    weekly_allocated: List[float] = field(default_factory=list)  # planning horizon
    allocated_hours: float = 0.0
    utilization: float = 0.0        # % of horizon capacity used

    @property
    def available_hours(self) -> float:
        return max(0.0, sum(self.weekly_capacity) - self.allocated_hours)


@dataclass
class AllocationResult:
    allocations: List[ProjectAllocation] = field(default_factory=list)
    team_capacities: List[TeamCapacity] = field(default_factory=list)
    excluded_project_ids: List[str] = field(default_factory=list)
    horizon_weeks: int = 52

    def get(self, project_id: str) -> Optional[ProjectAllocation]:
        return next((a for a in self.allocations if a.project_id == project_id), None)
