"""In-memory repository for portfolio data, scenarios and the audit trail."""

import logging
from dataclasses import fields, replace
from datetime import datetime
from typing import Dict, List, Optional

from models.team import Team
from models.project import Project, TeamEstimate
from models.calendar import Holiday, PTOEntry, NewHire
from models.resource import Resource, ResourceAssignment
from models.scenario import Contractor, PriorityOverride, Scenario
from models.allocation import AllocationResult
from models.audit import AuditEntry
from engine.scenario_engine import apply_overrides, create_baseline_scenario, run_scenario
from engine.workflow import check_transition, workflow_label
from engine.optimizer import StaffingRecommendation, recommend_contractors
from engine.resource_utilization import (
    find_burnout_risks, find_overallocated_resources, resource_weekly_utilization,
)
from config.defaults import PLANNING_HORIZON_WEEKS

logger = logging.getLogger(__name__)


class ScenarioLockedError(RuntimeError):
    """Raised when a locked scenario is asked to change."""


class PortfolioStore:
    """Owns teams, projects, calendar entries, scenarios and the audit log.

    One store per caller; nothing here is shared between instances.
    """

    def __init__(self, rule_config: Optional[dict] = None):
        self.rule_config: dict = dict(rule_config or {})
        self.teams: Dict[str, Team] = {}
        self.projects: Dict[str, Project] = {}
        self.holidays: List[Holiday] = []
        self.pto_entries: List[PTOEntry] = []
        self.new_hires: List[NewHire] = []
        self.resources: Dict[str, Resource] = {}
        self.assignments: List[ResourceAssignment] = []
        self.scenarios: Dict[str, Scenario] = {}
        self.audit_log: List[AuditEntry] = []
        baseline = create_baseline_scenario()
        self.scenarios[baseline.scenario_id] = baseline

    @classmethod
    def from_portfolio(cls, portfolio: dict, rule_config: Optional[dict] = None) -> "PortfolioStore":
        """Build a store from the dict returned by ``data.loader.parse_portfolio``."""
        store = cls(rule_config)
        for team in portfolio.get("teams", []):
            store.add_team(team)
        for project in portfolio.get("projects", []):
            store.add_project(project)
        for holiday in portfolio.get("holidays", []):
            store.add_holiday(holiday)
        for entry in portfolio.get("pto_entries", []):
            store.add_pto(entry)
        for resource in portfolio.get("resources", []):
            store.add_resource(resource)
        for assignment in portfolio.get("assignments", []):
            store.add_assignment(assignment)
        return store

    # --- Audit ---

    def _audit(
        self,
        action: str,
        entity: str,
        entity_id: str,
        scenario_id: Optional[str] = None,
        field_changed: str = "",
        old_value="",
        new_value="",
        rationale: str = "",
    ):
        self.audit_log.append(AuditEntry(
            timestamp=datetime.now(),
            action=action,
            entity=entity,
            entity_id=entity_id,
            scenario_id=scenario_id,
            field_changed=field_changed,
            old_value=str(old_value),
            new_value=str(new_value),
            rationale=rationale,
        ))

    def _replace(self, record, id_field: str, entity: str, changes: dict):
        """Validated copy of ``record`` with ``changes`` applied; ``record`` itself is left as is."""
        if id_field in changes:
            raise ValueError(f"{entity} {getattr(record, id_field)}: {id_field} cannot be changed")
        for field_name in changes:
            if field_name not in {f.name for f in fields(record)}:
                raise AttributeError(f"{entity} has no field '{field_name}'")
        return replace(record, **changes)

    def _audit_changes(self, entity: str, entity_id: str, before, changes: dict):
        for field_name, value in changes.items():
            self._audit(
                "update", entity, entity_id,
                field_changed=field_name, old_value=getattr(before, field_name), new_value=value,
            )

    # --- Teams ---

    def get_team(self, team_id: str) -> Team:
        if team_id not in self.teams:
            raise KeyError(f"Unknown team: {team_id}")
        return self.teams[team_id]

    def add_team(self, team: Team) -> Team:
        if team.team_id in self.teams:
            raise ValueError(f"Team {team.team_id} already exists")
        self.teams[team.team_id] = team
        self._audit("create", "Team", team.team_id, new_value=team.name)
        return team

    def update_team(self, team_id: str, **changes) -> Team:
        """Apply field changes; nothing is stored or audited unless the result validates."""
        team = self.get_team(team_id)
        updated = self._replace(team, "team_id", "Team", changes)
        self.teams[team_id] = updated
        self._audit_changes("Team", team_id, team, changes)
        return updated

    def remove_team(self, team_id: str):
        team = self.get_team(team_id)
        del self.teams[team_id]
        self._audit("delete", "Team", team_id, old_value=team.name)

    # --- Projects ---

    def get_project(self, project_id: str) -> Project:
        if project_id not in self.projects:
            raise KeyError(f"Unknown project: {project_id}")
        return self.projects[project_id]

    def add_project(self, project: Project) -> Project:
        if project.project_id in self.projects:
            raise ValueError(f"Project {project.project_id} already exists")
        self.projects[project.project_id] = project
        self._audit("create", "Project", project.project_id, new_value=project.name)
        return project

    def update_project(self, project_id: str, **changes) -> Project:
        """Apply field changes; nothing is stored or audited unless the result validates.

        Workflow status moves go through ``transition_project``.
        """
        project = self.get_project(project_id)
        if "workflow_status" in changes:
            raise ValueError(f"Project {project_id}: use transition_project to change workflow_status")
        updated = self._replace(project, "project_id", "Project", changes)
        self.projects[project_id] = updated
        self._audit_changes("Project", project_id, project, changes)
        return updated

    def remove_project(self, project_id: str):
        project = self.get_project(project_id)
        del self.projects[project_id]
        for scenario in self.scenarios.values():
            scenario.priority_overrides.pop(project_id, None)
        self.assignments = [a for a in self.assignments if a.project_id != project_id]
        self._audit("delete", "Project", project_id, old_value=project.name)

    def transition_project(
        self, project_id: str, new_status: str, actor: str = "", rationale: str = "",
    ) -> Project:
        """Move a project along the intake workflow.

        Raises WorkflowTransitionError when the move is not allowed from the
        current status. Approval records who approved and when.
        """
        project = self.get_project(project_id)
        previous = project.workflow_status
        check_transition(previous, new_status, self.rule_config)

        changes = {"workflow_status": new_status}
        if new_status == "approved":
            changes.update(approved_by=actor or None, approved_at=datetime.now())
        updated = replace(project, **changes)
        self.projects[project_id] = updated
        self._audit(
            "transition", "Project", project_id, field_changed="workflow_status",
            old_value=previous, new_value=new_status, rationale=rationale,
        )
        logger.info(
            "Project %s moved from %s to %s",
            project_id, workflow_label(previous), workflow_label(new_status),
        )
        return updated

    def set_team_estimate(self, project_id: str, estimate: TeamEstimate) -> Project:
        """Replace the project's estimate for ``estimate.team_id`` or append a new one."""
        project = self.get_project(project_id)
        for i, existing in enumerate(project.team_estimates):
            if existing.team_id == estimate.team_id:
                project.team_estimates[i] = estimate
                self._audit(
                    "update", "TeamEstimate", project_id, field_changed=estimate.team_id,
                    old_value=existing.total_hours, new_value=estimate.total_hours,
                )
                return project
        project.team_estimates.append(estimate)
        self._audit(
            "create", "TeamEstimate", project_id,
            field_changed=estimate.team_id, new_value=estimate.total_hours,
        )
        return project

    # --- Calendar and people ---

    def add_holiday(self, holiday: Holiday) -> Holiday:
        self.holidays.append(holiday)
        self._audit("create", "Holiday", holiday.name, new_value=holiday.week)
        return holiday

    def add_pto(self, entry: PTOEntry) -> PTOEntry:
        self.pto_entries.append(entry)
        self._audit(
            "create", "PTO", entry.team_id, field_changed=entry.person_name,
            new_value=f"{entry.start_week}-{entry.end_week}",
        )
        return entry

    def add_new_hire(self, hire: NewHire) -> NewHire:
        self.new_hires.append(hire)
        self._audit("create", "NewHire", hire.team_id, field_changed=hire.person_name, new_value=hire.start_week)
        return hire

    def get_resource(self, resource_id: str) -> Resource:
        if resource_id not in self.resources:
            raise KeyError(f"Unknown resource: {resource_id}")
        return self.resources[resource_id]

    def add_resource(self, resource: Resource) -> Resource:
        self.resources[resource.resource_id] = resource
        self._audit("create", "Resource", resource.resource_id, new_value=resource.name)
        return resource

    # --- Assignments ---

    def add_assignment(self, assignment: ResourceAssignment) -> ResourceAssignment:
        self.get_resource(assignment.resource_id)
        self.get_project(assignment.project_id)
        self.assignments.append(assignment)
        self._audit(
            "create", "Assignment", assignment.resource_id, field_changed=assignment.project_id,
            new_value=f"{assignment.allocation_pct:g}% wk {assignment.start_week}-{assignment.end_week}",
        )
        return assignment

    def remove_assignment(self, resource_id: str, project_id: str) -> List[ResourceAssignment]:
        removed = [
            a for a in self.assignments
            if a.resource_id == resource_id and a.project_id == project_id
        ]
        if not removed:
            raise KeyError(f"{resource_id} has no assignment on {project_id}")
        self.assignments = [a for a in self.assignments if a not in removed]
        self._audit("delete", "Assignment", resource_id, field_changed=project_id, old_value=len(removed))
        return removed

    def resource_utilization(self, resource_id: str) -> List[float]:
        """Weekly allocation % for one person over the planning horizon."""
        self.get_resource(resource_id)
        weeks = self.rule_config.get("horizon_weeks", PLANNING_HORIZON_WEEKS)
        return resource_weekly_utilization(resource_id, self.assignments, weeks)

    def overallocated_resources(self) -> List[dict]:
        return find_overallocated_resources(
            list(self.resources.values()), self.assignments, self.rule_config,
        )

    def burnout_risks(self) -> List[dict]:
        return find_burnout_risks(list(self.resources.values()), self.assignments, self.rule_config)

    # --- Scenario Management ---

    def get_scenario(self, scenario_id: str) -> Scenario:
        if scenario_id not in self.scenarios:
            raise KeyError(f"Unknown scenario: {scenario_id}")
        return self.scenarios[scenario_id]

    def _editable_scenario(self, scenario_id: str) -> Scenario:
        scenario = self.get_scenario(scenario_id)
        if scenario.is_locked:
            raise ScenarioLockedError(f"Scenario {scenario_id} is locked")
        return scenario

    def add_scenario(self, scenario: Scenario) -> Scenario:
        if scenario.scenario_id in self.scenarios:
            raise ValueError(f"Scenario {scenario.scenario_id} already exists")
        self.scenarios[scenario.scenario_id] = scenario
        self._audit("create", "Scenario", scenario.scenario_id, scenario.scenario_id, new_value=scenario.name)
        return scenario

    def create_scenario(self, scenario_id: str, name: str, description: str = "") -> Scenario:
        return self.add_scenario(Scenario(scenario_id=scenario_id, name=name, description=description))

    def remove_scenario(self, scenario_id: str):
        scenario = self._editable_scenario(scenario_id)
        del self.scenarios[scenario_id]
        self._audit("delete", "Scenario", scenario_id, scenario_id, old_value=scenario.name)

    def lock_scenario(self, scenario_id: str, rationale: str = "") -> Scenario:
        scenario = self.get_scenario(scenario_id)
        scenario.is_locked = True
        self._audit(
            "lock", "Scenario", scenario_id, scenario_id,
            field_changed="is_locked", old_value=False, new_value=True, rationale=rationale,
        )
        return scenario

    def unlock_scenario(self, scenario_id: str, rationale: str = "") -> Scenario:
        scenario = self.get_scenario(scenario_id)
        scenario.is_locked = False
        self._audit(
            "unlock", "Scenario", scenario_id, scenario_id,
            field_changed="is_locked", old_value=True, new_value=False, rationale=rationale,
        )
        return scenario

    def add_contractor(self, scenario_id: str, contractor: Contractor) -> Contractor:
        scenario = self._editable_scenario(scenario_id)
        scenario.contractors.append(contractor)
        self._audit(
            "create", "Contractor", contractor.team_id, scenario_id,
            field_changed=contractor.role_key, new_value=contractor.fte, rationale=contractor.label,
        )
        return contractor

    def remove_contractor(self, scenario_id: str, index: int) -> Contractor:
        scenario = self._editable_scenario(scenario_id)
        if not 0 <= index < len(scenario.contractors):
            raise KeyError(f"Scenario {scenario_id} has no contractor at position {index}")
        contractor = scenario.contractors.pop(index)
        self._audit(
            "delete", "Contractor", contractor.team_id, scenario_id,
            field_changed=contractor.role_key, old_value=contractor.fte,
        )
        return contractor

    def set_priority_override(
        self, scenario_id: str, project_id: str, priority: int, rationale: str = "",
    ) -> PriorityOverride:
        scenario = self._editable_scenario(scenario_id)
        project = self.get_project(project_id)
        previous = scenario.priority_overrides.get(project_id)
        override = PriorityOverride(project_id=project_id, priority=priority)
        scenario.priority_overrides[project_id] = override
        self._audit(
            "override", "Project", project_id, scenario_id, field_changed="priority",
            old_value=previous.priority if previous else project.priority,
            new_value=priority, rationale=rationale,
        )
        return override

    def remove_priority_override(self, scenario_id: str, project_id: str):
        scenario = self._editable_scenario(scenario_id)
        if project_id not in scenario.priority_overrides:
            raise KeyError(f"Scenario {scenario_id} has no override for {project_id}")
        removed = scenario.priority_overrides.pop(project_id)
        self._audit(
            "delete", "PriorityOverride", project_id, scenario_id,
            field_changed="priority", old_value=removed.priority,
        )

    # --- Engine ---

    def run(self, scenario_id: Optional[str] = None) -> AllocationResult:
        """Run the engine for a scenario (baseline when omitted)."""
        scenario = self.get_scenario(scenario_id or "baseline")
        result = run_scenario(
            scenario,
            list(self.teams.values()),
            list(self.projects.values()),
            self.holidays,
            self.pto_entries,
            self.new_hires,
            self.rule_config,
        )
        self._audit(
            "run", "Scenario", scenario.scenario_id, scenario.scenario_id,
            new_value=f"{sum(1 for a in result.allocations if a.feasible)}/{len(result.allocations)} feasible",
        )
        return result

    def recommend_staffing(
        self, result: AllocationResult, scenario_id: Optional[str] = None,
    ) -> StaffingRecommendation:
        """Contractor recommendation for a run, verified against the same scenario."""
        scenario = self.get_scenario(scenario_id or "baseline")
        contractors, overrides = apply_overrides(scenario)
        return recommend_contractors(
            result,
            list(self.teams.values()),
            self.rule_config,
            projects=list(self.projects.values()),
            contractors=contractors,
            priority_overrides=overrides,
            holidays=self.holidays,
            pto_entries=self.pto_entries,
            new_hires=self.new_hires,
        )
