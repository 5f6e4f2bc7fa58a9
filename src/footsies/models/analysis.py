"""Skill balance and recommendation models."""

from enum import StrEnum

from pydantic import BaseModel, Field

NO_SKILL = "None"


class SkillSummary(BaseModel):
    """A skill picked out by the imbalance analysis."""

    name: str = NO_SKILL
    level: int = 0
    value: int = 0  # XP within the current level


class ImbalanceResult(BaseModel):
    avg_skill_level: float = 0.0
    strongest_skill: SkillSummary = Field(default_factory=SkillSummary)
    weakest_skill: SkillSummary = Field(default_factory=SkillSummary)
    imbalance_score: float = 0.0
    skill_deviations: dict[str, float] = Field(default_factory=dict)
    imbalance_message: str = "No skills trained yet."


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class RecommendationType(StrEnum):
    FREQUENCY = "frequency"
    IMBALANCE = "imbalance"
    STAGNATION = "stagnation"
    DRILL = "drill"


class Recommendation(BaseModel):
    type: RecommendationType
    priority: Priority
    message: str
    actionable: str
    skill: str | None = None
