from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class AuditEntry:
    timestamp: datetime
    action: str              # "create", "update", "delete", "lock", "override", "run"
    entity: str              # "Team", "Project", "Scenario", "Contractor", ...
    entity_id: str
    scenario_id: Optional[str] = None
    field_changed: str = ""
    old_value: str = ""
    new_value: str = ""
    rationale: str = ""
