from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class PhaseBreakdown:
    requirements: float = 0.0
    technical_design: float = 0.0
    development: float = 0.0
    testing: float = 0.0
    support: float = 0.0
    dev_ops: float = 0.0
    project_management: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            "requirements": self.requirements,
            "technical_design": self.technical_design,
            "development": self.development,
            "testing": self.testing,
            "support": self.support,
            "dev_ops": self.dev_ops,
            "project_management": self.project_management,
        }

    @property
    def total_hours(self) -> float:
        return sum(self.as_dict().values())


@dataclass
class CostLine:
    phase: str
    hours: float
    cost: float


@dataclass
class EstimationResult:
    phases: PhaseBreakdown
    total_hours: float
    total_cost: float
    capex_total: float
    opex_total: float
    capex_lines: List[CostLine] = field(default_factory=list)
    opex_lines: List[CostLine] = field(default_factory=list)
    project_size: str = "micro"     # "micro", "small", "medium", "large"
    testing_model: str = "sequential"  # "sequential", "hybrid", "parallel"
    team_size: float = 0.0
    recommended_team_size: int = 0
    duration_weeks: int = 0
    duration_sprints: int = 0
    cost_per_sprint: float = 0.0

    @property
    def capex_pct(self) -> float:
        return self.capex_total / self.total_cost * 100 if self.total_cost > 0 else 0.0

    @property
    def opex_pct(self) -> float:
        return self.opex_total / self.total_cost * 100 if self.total_cost > 0 else 0.0


@dataclass
class TeamEstimation:
    team_id: str
    team_name: str
    dev_hours: float
    estimate: EstimationResult


@dataclass
class AggregateEstimation:
    teams: List[TeamEstimation]
    phases: PhaseBreakdown
    total_hours: float
    total_cost: float
    total_capex: float
    total_opex: float
    estimated_weeks: int
    duration_sprints: int
    recommended_team_size: int
    testing_model: str

    @property
    def capex_pct(self) -> float:
        return self.total_capex / self.total_cost * 100 if self.total_cost > 0 else 0.0

    @property
    def opex_pct(self) -> float:
        return self.total_opex / self.total_cost * 100 if self.total_cost > 0 else 0.0
