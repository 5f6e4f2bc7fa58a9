"""Skill balance analysis over current skill levels."""

from collections.abc import Mapping

import structlog

from footsies.models.analysis import ImbalanceResult, SkillSummary

logger = structlog.get_logger()

SIGNIFICANT_IMBALANCE = 50
MODERATE_IMBALANCE = 20


def _pick(candidates: list[SkillSummary], strongest: bool) -> SkillSummary:
    """Highest (or lowest) within-level XP; the first listed wins ties."""
    best = candidates[0]
    for skill in candidates[1:]:
        if (skill.value > best.value) if strongest else (skill.value < best.value):
            best = skill
    return best


def imbalance_message(score: float, weakest: SkillSummary) -> str:
    if score > SIGNIFICANT_IMBALANCE:
        return (
            f"Significant imbalance detected! Consider focusing on your "
            f"{weakest.name} skill to improve balance."
        )
    if score > MODERATE_IMBALANCE:
        return (
            f"Moderate imbalance detected. Consider focusing on your "
            f"{weakest.name} skill to improve balance."
        )
    return "Good balance between skills."


def skill_imbalance(
    skill_levels: Mapping[str, int], skill_xp: Mapping[str, int]
) -> ImbalanceResult:
    """Find the strongest and weakest skills and score how uneven levels are.

    Strongest: among skills at the highest level, the one with most XP.
    Weakest: among trained skills (XP > 0) at the lowest level that has any
    trained skill, the one with least XP. Untouched skills never count as
    weak. With no progress anywhere both are the "None" sentinel.

    The imbalance score is the mean absolute deviation from the average
    level, relative to that average, as a 0-100 percentage.

    Args:
        skill_levels: Skill name -> level.
        skill_xp: Skill name -> XP within the current level.

    Returns:
        ImbalanceResult.
    """
    if not skill_levels:
        return ImbalanceResult()

    summaries = [
        SkillSummary(name=name, level=level, value=skill_xp.get(name, 0))
        for name, level in skill_levels.items()
    ]
    by_level: dict[int, list[SkillSummary]] = {}
    for summary in summaries:
        by_level.setdefault(summary.level, []).append(summary)

    levels = sorted(by_level)
    avg_level = sum(s.level for s in summaries) / len(summaries)

    untouched = all(s.level <= 1 and s.value == 0 for s in summaries)
    strongest = SkillSummary() if untouched else _pick(by_level[levels[-1]], strongest=True)

    weakest = SkillSummary()
    for level in levels:
        trained = [s for s in by_level[level] if s.value > 0]
        if trained:
            weakest = _pick(trained, strongest=False)
            break

    deviations = {s.name: abs(s.level - avg_level) for s in summaries}
    max_deviation = avg_level * len(summaries)
    score = (
        min(100.0, sum(deviations.values()) / max_deviation * 100) if max_deviation > 0 else 0.0
    )

    logger.debug(
        "skill_imbalance_computed",
        score=score,
        strongest=strongest.name,
        weakest=weakest.name,
    )
    return ImbalanceResult(
        avg_skill_level=avg_level,
        strongest_skill=strongest,
        weakest_skill=weakest,
        imbalance_score=score,
        skill_deviations=deviations,
        imbalance_message=imbalance_message(score, weakest),
    )
