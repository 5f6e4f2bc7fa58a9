"""XP and level progression for the account and for individual skills."""

from collections.abc import Callable
from enum import StrEnum

import structlog
from pydantic import BaseModel

from footsies.config import Settings
from footsies.models.user_profile import STARTING_THRESHOLD, UserProfile

logger = structlog.get_logger()

# (new_level, previous_threshold) -> threshold required to leave new_level
ThresholdGrowth = Callable[[int, int], int]

# Largest XP a single event may award.
MAX_XP_GAIN = 1_000_000
# Beyond this many levels in one call a single summary event is emitted.
MAX_LEVEL_UP_EVENTS = 10


class ProgressionError(ValueError):
    """Raised for XP or threshold values the state machine cannot accept."""


def flat_increment(step: int = 20) -> ThresholdGrowth:
    """Each level-up raises the threshold by a fixed step."""
    if step <= 0:
        raise ProgressionError(f"Threshold step must be positive, got {step}")

    def grow(level: int, previous: int) -> int:
        return previous + step

    return grow


def level_formula(base: int = 100, per_level: int = 20) -> ThresholdGrowth:
    """The threshold is recomputed from the new level: base + level * per_level."""
    if base <= 0 or per_level < 0:
        raise ProgressionError(
            f"Invalid threshold formula: base={base}, per_level={per_level}"
        )

    def grow(level: int, previous: int) -> int:
        return base + level * per_level

    return grow


def growth_policy_from_settings(settings: Settings) -> ThresholdGrowth:
    if settings.threshold_growth == "formula":
        return level_formula(settings.threshold_base, settings.threshold_step)
    return flat_increment(settings.threshold_step)


class XpGainResult(BaseModel):
    level: int
    xp: int
    threshold: int
    levels_gained: int = 0


def apply_xp_gain(
    level: int,
    xp: int,
    threshold: int,
    xp_gained: int,
    growth: ThresholdGrowth,
) -> XpGainResult:
    """Add XP and apply every level-up it pays for.

    Overflow carries into the next level, so one large gain can cross
    several thresholds. The result always satisfies 0 <= xp < threshold.

    Args:
        level: Current level (>= 1).
        xp: XP held within the current level (>= 0).
        threshold: XP needed to leave the current level (> 0).
        xp_gained: XP earned by this event (>= 0).
        growth: Threshold policy applied after each level-up.

    Returns:
        New level, remaining XP, new threshold and the number of levels gained.

    Raises:
        ProgressionError: On negative XP, a gain above MAX_XP_GAIN, a
            non-positive threshold or a level below 1.
    """
    if level < 1:
        raise ProgressionError(f"Level must be at least 1, got {level}")
    if xp < 0 or xp_gained < 0:
        raise ProgressionError(f"XP values must be non-negative, got xp={xp}, gained={xp_gained}")
    if xp_gained > MAX_XP_GAIN:
        raise ProgressionError(f"XP gain {xp_gained} exceeds the maximum of {MAX_XP_GAIN}")
    if threshold <= 0:
        raise ProgressionError(f"Threshold must be positive, got {threshold}")

    total = xp + xp_gained
    start_level = level
    while total >= threshold:
        total -= threshold
        level += 1
        threshold = growth(level, threshold)
        if threshold <= 0:
            raise ProgressionError(
                f"Threshold policy returned {threshold} for level {level}"
            )

    return XpGainResult(
        level=level, xp=total, threshold=threshold, levels_gained=level - start_level
    )


class ProgressTarget(StrEnum):
    ACCOUNT = "account"
    SKILL = "skill"


class LevelUpEvent(BaseModel):
    """Notification that the account or a skill reached a new level."""

    target: ProgressTarget
    name: str
    level: int
    levels_gained: int = 1

    @property
    def message(self) -> str:
        if self.target == ProgressTarget.ACCOUNT:
            return f"Account leveled up to Level {self.level}!"
        return f"{self.name} leveled up to Level {self.level}!"


class ProgressionEngine:
    """Applies XP gains to a UserProfile and announces level-ups.

    The account triple (level, xp, xp_threshold) and each skill triple
    (skill_levels, skills, skill_thresholds) are independent instances of
    the same state machine.

    Args:
        growth: Threshold growth policy.
        initial_threshold: Threshold assumed for skills missing from the profile.
    """

    def __init__(
        self,
        growth: ThresholdGrowth | None = None,
        initial_threshold: int = STARTING_THRESHOLD,
    ) -> None:
        self.growth = growth or flat_increment()
        self.initial_threshold = initial_threshold
        self._level_up_callbacks: list[Callable[[LevelUpEvent], None]] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProgressionEngine":
        return cls(
            growth=growth_policy_from_settings(settings),
            initial_threshold=settings.initial_threshold,
        )

    def on_level_up(self, callback: Callable[[LevelUpEvent], None]) -> None:
        """Register a callback invoked once per level gained."""
        self._level_up_callbacks.append(callback)

    def apply_account_xp(self, profile: UserProfile, xp_gained: int) -> list[LevelUpEvent]:
        result = apply_xp_gain(
            profile.level, profile.xp, profile.xp_threshold, xp_gained, self.growth
        )
        old_level = profile.level
        profile.level = result.level
        profile.xp = result.xp
        profile.xp_threshold = result.threshold
        return self._announce(ProgressTarget.ACCOUNT, "account", old_level, result)

    def apply_skill_xp(
        self, profile: UserProfile, skill: str, xp_gained: int
    ) -> list[LevelUpEvent]:
        level, xp, threshold = profile.skill_state(skill, self.initial_threshold)
        result = apply_xp_gain(level, xp, threshold, xp_gained, self.growth)
        profile.skill_levels[skill] = result.level
        profile.skills[skill] = result.xp
        profile.skill_thresholds[skill] = result.threshold
        return self._announce(ProgressTarget.SKILL, skill, level, result)

    def complete_quest(
        self, profile: UserProfile, skill: str, xp: int, skill_xp: int
    ) -> list[LevelUpEvent]:
        """Award a quest's skill XP and account XP, skill first."""
        if not (0 <= xp <= MAX_XP_GAIN and 0 <= skill_xp <= MAX_XP_GAIN):
            raise ProgressionError(
                f"Quest rewards must be within 0..{MAX_XP_GAIN}, got xp={xp}, skill_xp={skill_xp}"
            )
        events = self.apply_skill_xp(profile, skill, skill_xp)
        events += self.apply_account_xp(profile, xp)
        return events

    def _announce(
        self, target: ProgressTarget, name: str, old_level: int, result: XpGainResult
    ) -> list[LevelUpEvent]:
        if result.levels_gained > MAX_LEVEL_UP_EVENTS:
            events = [
                LevelUpEvent(
                    target=target,
                    name=name,
                    level=result.level,
                    levels_gained=result.levels_gained,
                )
            ]
        else:
            events = [
                LevelUpEvent(target=target, name=name, level=level)
                for level in range(old_level + 1, result.level + 1)
            ]
        if events:
            logger.info(
                "level_up",
                target=target.value,
                name=name,
                old_level=old_level,
                new_level=result.level,
                xp=result.xp,
                threshold=result.threshold,
            )
        for event in events:
            for callback in self._level_up_callbacks:
                callback(event)
        return events
