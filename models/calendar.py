from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

from config.defaults import DEFAULT_HOLIDAY_HOURS_OFF, DEFAULT_PTO_HOURS_PER_WEEK, WEEKS_PER_YEAR


@dataclass
class Holiday:
    name: str
    week: int                       # 0-based planning week
    hours_off: float = DEFAULT_HOLIDAY_HOURS_OFF  # per FTE
    team_ids: Tuple[str, ...] = field(default_factory=tuple)  # empty = all teams
    recurring: bool = False
    holiday_date: Optional[date] = None

    def __post_init__(self):
        if self.week < 0:
            raise ValueError(f"Holiday '{self.name}': week cannot be negative")
        if self.hours_off < 0:
            raise ValueError(f"Holiday '{self.name}': hours_off cannot be negative")
        self.team_ids = tuple(self.team_ids)

    def observed_by(self, team_id: str) -> bool:
        return not self.team_ids or team_id in self.team_ids

    def weeks_within(self, total_weeks: int) -> List[int]:
        """Week indexes this holiday falls on inside [0, total_weeks)."""
        if not self.recurring:
            return [self.week] if self.week < total_weeks else []
        return list(range(self.week % WEEKS_PER_YEAR, total_weeks, WEEKS_PER_YEAR))


@dataclass
class PTOEntry:
    team_id: str
    person_name: str
    start_week: int
    end_week: int                   # inclusive
    hours_per_week: float = DEFAULT_PTO_HOURS_PER_WEEK
    role: str = ""
    reason: str = "Vacation"

    def __post_init__(self):
        if self.start_week < 0 or self.end_week < self.start_week:
            raise ValueError(
                f"PTO for {self.person_name}: invalid week range {self.start_week}-{self.end_week}"
            )
        if self.hours_per_week < 0:
            raise ValueError(f"PTO for {self.person_name}: hours_per_week cannot be negative")

    def covers(self, week: int) -> bool:
        return self.start_week <= week <= self.end_week


@dataclass
class NewHire:
    team_id: str
    role: str
    person_name: str
    start_week: int
    ramp_weeks: int = 0             # weeks to reach full productivity

    def __post_init__(self):
        if self.start_week < 0:
            raise ValueError(f"New hire {self.person_name}: start_week cannot be negative")
        if self.ramp_weeks < 0:
            raise ValueError(f"New hire {self.person_name}: ramp_weeks cannot be negative")

    def productivity(self, week: int) -> float:
        """Fraction of a full FTE contributed in the given week."""
        if week < self.start_week:
            return 0.0
        if self.ramp_weeks == 0:
            return 1.0
        return min(1.0, (week - self.start_week + 1) / self.ramp_weeks)
