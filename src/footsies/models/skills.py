"""Trainable skills and the configurable skill registry."""

from collections.abc import Iterable
from enum import StrEnum


class Skill(StrEnum):
    """Built-in trainable skills."""

    DRIBBLING = "dribbling"
    SHOOTING = "shooting"
    PASSING = "passing"
    DEFENDING = "defending"
    SPEED = "speed"
    STAMINA = "stamina"


DEFAULT_SKILLS: tuple[str, ...] = tuple(skill.value for skill in Skill)


class UnknownSkillError(ValueError):
    """Raised when a skill name is not part of the active registry."""


class SkillRegistry:
    """Ordered set of skill names a deployment tracks.

    Defaults to the built-in ``Skill`` members. Extra skills are added
    through the ``skills`` list in settings.yaml (or FOOTSIES_SKILLS).

    Args:
        names: Skill names in display order. Duplicates are dropped.
    """

    def __init__(self, names: Iterable[str] = DEFAULT_SKILLS):
        seen: dict[str, None] = {}
        for name in names:
            key = name.strip().lower()
            if key:
                seen[key] = None
        if not seen:
            raise ValueError("Skill registry must contain at least one skill")
        self._names: tuple[str, ...] = tuple(seen)

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._names

    def __iter__(self):
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def validate(self, name: str) -> str:
        """Return the canonical skill name or raise UnknownSkillError."""
        key = name.strip().lower()
        if key not in self._names:
            raise UnknownSkillError(f"Unknown skill: {name!r}")
        return key
