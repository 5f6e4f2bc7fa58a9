"""Actionable training recommendations from frequency, balance and stagnation."""

from collections.abc import Mapping

from footsies.analysis.imbalance import MODERATE_IMBALANCE
from footsies.models.analysis import (
    ImbalanceResult,
    Priority,
    Recommendation,
    RecommendationType,
)
from footsies.models.skills import Skill
from footsies.models.stats import FrequencyStats

MIN_SESSIONS_PER_WEEK = 3
STAGNATION_DAYS = 14
SKILL_STAGNATION_DAYS = 7
SEVERE_STAGNATION_DAYS = 30

SKILL_DRILLS: dict[str, list[tuple[str, str]]] = {
    Skill.DRIBBLING: [
        ("Cone Weaving", "Set up cones in a zigzag pattern and practice dribbling through them quickly."),
        ("Close Control", "Practice dribbling in tight spaces, focusing on quick touches and direction changes."),
    ],
    Skill.SHOOTING: [
        ("Target Practice", "Set up targets in the corners of the goal and aim for precision."),
        ("Power Shots", "Practice shooting with power from outside the box."),
    ],
    Skill.PASSING: [
        ("Wall Passes", "Practice passing against a wall, focusing on accuracy and receiving."),
        ("Partner Passing", "Work with a partner on one-touch passing and movement."),
    ],
    Skill.DEFENDING: [
        ("Shadow Defending", "Practice staying in front of an attacker without committing to a tackle."),
        ("Tackle Timing", "Work on timing your tackles to win the ball cleanly."),
    ],
    Skill.SPEED: [
        ("Sprint Intervals", "Alternate between sprinting and jogging to build explosive speed."),
        ("Agility Ladder", "Use an agility ladder for quick footwork drills."),
    ],
    Skill.STAMINA: [
        ("Endurance Runs", "Run at a moderate pace for extended periods to build stamina."),
        ("HIIT Training", "High-intensity interval training to improve cardiovascular fitness."),
    ],
}


def _by_priority(recommendations: list[Recommendation]) -> list[Recommendation]:
    # sorted() is stable, so insertion order holds within a tier.
    return sorted(recommendations, key=lambda r: r.priority.rank)


def _stagnation_priority(days: int) -> Priority:
    return Priority.HIGH if days > SEVERE_STAGNATION_DAYS else Priority.MEDIUM


def training_recommendations(
    frequency: FrequencyStats,
    imbalance: ImbalanceResult,
    stagnation: Mapping[str, int | None],
    min_sessions_per_week: float = MIN_SESSIONS_PER_WEEK,
) -> list[Recommendation]:
    """Recommendations ordered high -> medium -> low priority.

    Args:
        frequency: Output of training_frequency.
        imbalance: Output of skill_imbalance.
        stagnation: Skill -> days since last improvement (None = never trained).
        min_sessions_per_week: Frequency below which to recommend more sessions.
    """
    recommendations: list[Recommendation] = []

    if frequency.avg_sessions_per_week < min_sessions_per_week:
        target = f"{min_sessions_per_week:g}"
        recommendations.append(Recommendation(
            type=RecommendationType.FREQUENCY,
            priority=Priority.HIGH,
            message=(
                f"Increase your training frequency to at least {target} sessions "
                "per week for optimal improvement."
            ),
            actionable=f"Schedule {target} training sessions this week.",
        ))

    if imbalance.imbalance_score > MODERATE_IMBALANCE:
        weakest = imbalance.weakest_skill.name
        strongest = imbalance.strongest_skill.name
        recommendations.append(Recommendation(
            type=RecommendationType.IMBALANCE,
            priority=Priority.HIGH,
            message=f"Your {weakest} skill is significantly lower than your {strongest} skill.",
            actionable=f"Focus on improving your {weakest} skill in your next few sessions.",
            skill=weakest,
        ))

    for skill, days in stagnation.items():
        if days is not None and days > STAGNATION_DAYS:
            recommendations.append(Recommendation(
                type=RecommendationType.STAGNATION,
                priority=_stagnation_priority(days),
                message=f"It's been {days} days since you improved your {skill} skill.",
                actionable=f"Schedule a focused {skill} training session this week.",
                skill=skill,
            ))

    return _by_priority(recommendations)


def skill_recommendations(skill: str, days_since_improvement: int | None) -> list[Recommendation]:
    """Drills for one skill, plus a nudge if it has not improved for a week."""
    recommendations = [
        Recommendation(
            type=RecommendationType.DRILL,
            priority=Priority.MEDIUM,
            message=title,
            actionable=description,
            skill=skill,
        )
        for title, description in SKILL_DRILLS.get(skill, [])
    ]

    if days_since_improvement is not None and days_since_improvement > SKILL_STAGNATION_DAYS:
        recommendations.append(Recommendation(
            type=RecommendationType.STAGNATION,
            priority=_stagnation_priority(days_since_improvement),
            message=(
                f"It's been {days_since_improvement} days since you improved "
                f"your {skill} skill."
            ),
            actionable=f"Dedicate more time to {skill} training this week.",
            skill=skill,
        ))

    return _by_priority(recommendations)
