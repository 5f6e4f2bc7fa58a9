"""User profile model holding account and per-skill progression."""

from collections.abc import Iterable
from datetime import datetime

from pydantic import BaseModel, Field

from footsies.models.session import utc_now
from footsies.models.skills import DEFAULT_SKILLS

STARTING_LEVEL = 1
STARTING_THRESHOLD = 100


class UserProfile(BaseModel):
    user_id: str
    username: str | None = None
    email: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    xp: int = Field(default=0, ge=0)
    level: int = Field(default=STARTING_LEVEL, ge=1)
    xp_threshold: int = Field(default=STARTING_THRESHOLD, gt=0)
    skills: dict[str, int] = Field(default_factory=dict)
    skill_levels: dict[str, int] = Field(default_factory=dict)
    skill_thresholds: dict[str, int] = Field(default_factory=dict)
    total_sessions: int = Field(default=0, ge=0)
    last_training_date: datetime | None = None

    @classmethod
    def new(
        cls,
        user_id: str,
        skills: Iterable[str] = DEFAULT_SKILLS,
        initial_threshold: int = STARTING_THRESHOLD,
        **fields,
    ) -> "UserProfile":
        """Build the signup-time profile: level 1, no XP, every skill untouched."""
        names = list(skills)
        return cls(
            user_id=user_id,
            xp_threshold=initial_threshold,
            skills={name: 0 for name in names},
            skill_levels={name: STARTING_LEVEL for name in names},
            skill_thresholds={name: initial_threshold for name in names},
            **fields,
        )

    def skill_state(self, skill: str, initial_threshold: int = STARTING_THRESHOLD) -> tuple[int, int, int]:
        """Return (level, xp, threshold) for a skill, defaulting untouched entries."""
        return (
            self.skill_levels.get(skill, STARTING_LEVEL),
            self.skills.get(skill, 0),
            self.skill_thresholds.get(skill, initial_threshold),
        )
