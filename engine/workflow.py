"""Project intake workflow: submitted through estimation, approval and delivery."""

from typing import List, Optional

from config.defaults import WORKFLOW_LABELS, WORKFLOW_TRANSITIONS


class WorkflowTransitionError(ValueError):
    """Raised when a project is asked to move to a status its current one does not allow."""


def workflow_label(status: str) -> str:
    return WORKFLOW_LABELS.get(status, status)


def allowed_transitions(status: str, rule_config: Optional[dict] = None) -> List[str]:
    cfg = rule_config or {}
    transitions = cfg.get("workflow_transitions", WORKFLOW_TRANSITIONS)
    return list(transitions.get(status, []))


def can_transition(current: str, new_status: str, rule_config: Optional[dict] = None) -> bool:
    return new_status in allowed_transitions(current, rule_config)


def check_transition(current: str, new_status: str, rule_config: Optional[dict] = None):
    """Raise WorkflowTransitionError unless ``current`` -> ``new_status`` is allowed."""
    if not can_transition(current, new_status, rule_config):
        allowed = allowed_transitions(current, rule_config)
        raise WorkflowTransitionError(
            f'Cannot transition from "{current}" to "{new_status}". '
            f"Allowed: {', '.join(allowed) or 'none'}"
        )


def describe_workflow(status: str, rule_config: Optional[dict] = None) -> dict:
    """Current status, its label and the moves available from it."""
    return {
        "current_status": status,
        "current_label": workflow_label(status),
        "allowed_transitions": [
            {"status": s, "label": workflow_label(s)}
            for s in allowed_transitions(status, rule_config)
        ],
    }
