from models.team import Team
from models.project import Project, TeamEstimate
from models.calendar import Holiday, PTOEntry, NewHire
from models.resource import Resource, ResourceAssignment, ResourceSkill, SkillRequirement
from models.allocation import (
    AllocationResult, Bottleneck, PhaseAllocation, ProjectAllocation,
    RoleCapacity, TeamAllocation, TeamCapacity,
)
from models.estimation import (
    AggregateEstimation, CostLine, EstimationResult, PhaseBreakdown, TeamEstimation,
)
from models.scenario import Contractor, PriorityOverride, Scenario
from models.audit import AuditEntry
