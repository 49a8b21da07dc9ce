"""Generates human-readable explanations for project schedules."""

from typing import List

from models.allocation import ProjectAllocation
from config.defaults import PLANNING_HORIZON_WEEKS


def _phase_label(phase: str) -> str:
    return phase.replace("_", "-").capitalize()


def explain_project_allocation(
    allocation: ProjectAllocation,
    horizon_weeks: int = PLANNING_HORIZON_WEEKS,
) -> List[str]:
    """Produce step-by-step explanation for a project's schedule."""
    steps = []

    steps.append(
        f"Step 1 - Priority: scheduled at effective priority {allocation.priority}, "
        f"after all higher-priority projects have taken their capacity"
    )

    if not allocation.team_allocations:
        steps.append("Step 2 - Demand: no team estimates with hours, nothing to schedule.")
        return steps

    for team in allocation.team_allocations:
        phase_notes = []
        for phase in team.phases:
            idle = sum(1 for h in phase.hours_per_week if h == 0)
            note = (
                f"{_phase_label(phase.phase)} wk {phase.start_week}-{phase.end_week} "
                f"({phase.total_hours:.0f}h"
            )
            if idle:
                note += f", {idle} idle wk"
            note += ")"
            phase_notes.append(note)
        steps.append(f"Step 2 - {team.team_name}: " + "; ".join(phase_notes))

    steps.append(
        f"Step 3 - Span: week {allocation.start_week} to week {allocation.end_week} "
        f"= {allocation.total_weeks} weeks"
    )

    if allocation.bottleneck:
        steps.append(
            f"Step 4 - Bottleneck: {allocation.bottleneck.team_name} "
            f"({allocation.bottleneck.role}) has the longest stretch"
        )

    if allocation.unscheduled_hours > 0:
        steps.append(
            f"Note: {allocation.unscheduled_hours:.0f}h could not be placed before the "
            f"end of the schedule range"
        )

    if allocation.feasible:
        steps.append(f"Step 5 - Feasible: finishes within the {horizon_weeks}-week horizon")
    elif allocation.end_week < horizon_weeks:
        steps.append("Step 5 - Red line: demand remains unplaced at the end of the schedule range")
    else:
        overflow = allocation.end_week - horizon_weeks + 1
        steps.append(
            f"Step 5 - Red line: ends {overflow} week(s) past the {horizon_weeks}-week horizon"
        )

    return steps
