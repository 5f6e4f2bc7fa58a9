"""Quest catalog and level-gated training modules."""

import random

from pydantic import BaseModel

from footsies.models.skills import Skill


class Quest(BaseModel):
    """A completable drill awarding account XP and skill XP."""

    id: int
    skill: str
    title: str
    description: str
    xp: int
    skill_xp: int


class TrainingModule(BaseModel):
    id: int
    skill: str
    title: str
    difficulty: str
    duration_minutes: int
    xp: int
    skill_xp: int
    unlocked: bool


QUEST_CATALOG: list[Quest] = [
    Quest(id=1, skill=Skill.DRIBBLING, title="Cone Dribbling", xp=10, skill_xp=20,
          description="Dribble through 10 cones without touching them"),
    Quest(id=2, skill=Skill.DRIBBLING, title="Speed Dribbling", xp=15, skill_xp=25,
          description="Complete a 50m dribble in under 10 seconds"),
    Quest(id=3, skill=Skill.SHOOTING, title="Target Practice", xp=10, skill_xp=20,
          description="Hit 5 targets in the corners of the goal"),
    Quest(id=4, skill=Skill.SHOOTING, title="Penalty Master", xp=15, skill_xp=25,
          description="Score 8 out of 10 penalties"),
    Quest(id=5, skill=Skill.PASSING, title="Wall Passes", xp=10, skill_xp=20,
          description="Complete 50 wall passes accurately"),
    Quest(id=6, skill=Skill.PASSING, title="Through Balls", xp=15, skill_xp=25,
          description="Practice through balls with moving targets"),
    Quest(id=7, skill=Skill.DEFENDING, title="Shadow Defending", xp=10, skill_xp=20,
          description="Stay goal-side of an attacker for 5 minutes"),
    Quest(id=8, skill=Skill.SPEED, title="Sprint Drills", xp=15, skill_xp=20,
          description="Run 10 x 30m sprints with full recovery"),
    Quest(id=9, skill=Skill.STAMINA, title="Endurance Challenge", xp=20, skill_xp=30,
          description="Run continuously for 30 minutes"),
]

_MODULE_TIERS = (
    # (difficulty, title template, minutes, xp, skill_xp, required skill level)
    ("Beginner", "Basic {skill} Training", 15, 20, 30, 1),
    ("Intermediate", "Intermediate {skill} Drills", 20, 30, 45, 2),
    ("Advanced", "Advanced {skill} Mastery", 30, 50, 75, 3),
)


def quest_counts(level: int) -> tuple[int, int]:
    """Number of (daily, weekly) quests offered at an account level."""
    daily = min(3, level // 2 + 1)
    weekly = min(5, level // 3 + 2)
    return daily, weekly


def generate_quests(
    level: int,
    catalog: list[Quest] | None = None,
    rng: random.Random | None = None,
) -> tuple[list[Quest], list[Quest]]:
    """Draw disjoint daily and weekly quest lists from the catalog.

    Args:
        level: Account level.
        catalog: Quests to draw from (defaults to QUEST_CATALOG).
        rng: Random source, injectable for deterministic draws.

    Returns:
        (daily_quests, weekly_quests)
    """
    pool = list(catalog if catalog is not None else QUEST_CATALOG)
    (rng or random.Random()).shuffle(pool)
    daily_count, weekly_count = quest_counts(level)
    daily = pool[:daily_count]
    weekly = pool[daily_count:daily_count + weekly_count]
    return daily, weekly


def find_quest(quest_id: int, catalog: list[Quest] | None = None) -> Quest | None:
    for quest in catalog if catalog is not None else QUEST_CATALOG:
        if quest.id == quest_id:
            return quest
    return None


def training_modules(skill: str, skill_level: int) -> list[TrainingModule]:
    """Modules for a skill; higher tiers unlock at skill level 2 and 3."""
    name = skill.capitalize()
    return [
        TrainingModule(
            id=index,
            skill=skill,
            title=template.format(skill=name),
            difficulty=difficulty,
            duration_minutes=minutes,
            xp=xp,
            skill_xp=skill_xp,
            unlocked=skill_level >= required,
        )
        for index, (difficulty, template, minutes, xp, skill_xp, required)
        in enumerate(_MODULE_TIERS, start=1)
    ]
