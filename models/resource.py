from dataclasses import dataclass, field
from typing import Tuple, Union

from config.defaults import DEFAULT_SKILL_PROFICIENCY, MAX_PROFICIENCY, MIN_PROFICIENCY


def _split_level(text: str, default: int) -> Tuple[str, int]:
    """'ABAP:4' -> ('ABAP', 4); 'ABAP' -> ('ABAP', default)"""
    name, sep, level = text.rpartition(":")
    if sep and level.strip().isdigit():
        return name.strip(), int(level)
    return text.strip(), default


def _check_level(name: str, level: int):
    if not MIN_PROFICIENCY <= level <= MAX_PROFICIENCY:
        raise ValueError(
            f"Skill '{name}': proficiency must be between {MIN_PROFICIENCY} and {MAX_PROFICIENCY}"
        )


@dataclass(frozen=True)
class ResourceSkill:
    name: str
    proficiency: int = DEFAULT_SKILL_PROFICIENCY  # 1-5

    def __post_init__(self):
        _check_level(self.name, self.proficiency)

    @classmethod
    def parse(cls, value: Union[str, "ResourceSkill"]) -> "ResourceSkill":
        if isinstance(value, cls):
            return value
        name, level = _split_level(str(value), DEFAULT_SKILL_PROFICIENCY)
        return cls(name, level)

    @property
    def key(self) -> str:
        return self.name.strip().lower()


@dataclass(frozen=True)
class SkillRequirement:
    name: str
    min_proficiency: int = MIN_PROFICIENCY

    def __post_init__(self):
        _check_level(self.name, self.min_proficiency)

    @classmethod
    def parse(cls, value: Union[str, "SkillRequirement"]) -> "SkillRequirement":
        if isinstance(value, cls):
            return value
        name, level = _split_level(str(value), MIN_PROFICIENCY)
        return cls(name, level)

    @property
    def key(self) -> str:
        return self.name.strip().lower()


@dataclass
class Resource:
    """A named person on a team, used for skill coverage and assignment reporting."""
    resource_id: str
    name: str
    team_id: str
    role: str
    skills: Tuple[ResourceSkill, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.resource_id:
            raise ValueError("resource_id is required")
        self.skills = tuple(ResourceSkill.parse(s) for s in self.skills)

    def proficiency(self, skill: str) -> int:
        """Level held in ``skill``, 0 when the person does not have it."""
        wanted = skill.strip().lower()
        return max((s.proficiency for s in self.skills if s.key == wanted), default=0)

    def has_skill(self, skill: str, min_proficiency: int = MIN_PROFICIENCY) -> bool:
        return self.proficiency(skill) >= min_proficiency


@dataclass
class ResourceAssignment:
    resource_id: str
    project_id: str
    allocation_pct: float            # share of the person's week, 0-100
    start_week: int
    end_week: int                    # inclusive
    role: str = ""

    def __post_init__(self):
        if not 0 <= self.allocation_pct <= 100:
            raise ValueError(
                f"Assignment {self.resource_id}/{self.project_id}: allocation_pct must be between 0 and 100"
            )
        if self.start_week < 0 or self.end_week < self.start_week:
            raise ValueError(
                f"Assignment {self.resource_id}/{self.project_id}: "
                f"invalid week range {self.start_week}-{self.end_week}"
            )

    def covers(self, week: int) -> bool:
        return self.start_week <= week <= self.end_week
