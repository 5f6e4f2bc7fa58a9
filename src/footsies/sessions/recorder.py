"""Accumulates skill training events into the signed-in user's session."""

import structlog

from footsies.models.session import AccumulatingSession, SessionOptions
from footsies.sessions.context import TrainingContext

logger = structlog.get_logger()


def initialize_session(
    context: TrainingContext, options: SessionOptions | None = None
) -> AccumulatingSession:
    """Start a fresh accumulator, discarding any unsaved one."""
    previous = context.clear()
    if previous is not None and not previous.is_empty:
        logger.warning(
            "unsaved_session_discarded",
            user_id=context.user_id,
            skills=previous.skills_changed,
            duration=previous.total_duration,
        )
    context.accumulator = AccumulatingSession(options=options or SessionOptions())
    logger.info("session_initialized", user_id=context.user_id)
    return context.accumulator


def record_skill_training(
    context: TrainingContext,
    skill_name: str,
    xp_gained: int,
    duration_delta: int | None = None,
) -> AccumulatingSession:
    """Add one training event to the accumulator.

    Starts a session with default options when none is active. Nothing is
    written to storage and the profile's XP fields are left untouched.

    Args:
        context: Signed-in user's training context.
        skill_name: Skill that was trained.
        xp_gained: XP earned for that skill.
        duration_delta: Seconds spent; None counts as 0.

    Returns:
        The updated accumulator.
    """
    duration = duration_delta or 0
    if xp_gained < 0 or duration < 0:
        raise ValueError(
            f"XP and duration must be non-negative, got xp={xp_gained}, duration={duration}"
        )
    if context.accumulator is None:
        initialize_session(context)
    session = context.accumulator
    session.add(skill_name, xp_gained, duration)
    logger.debug(
        "skill_training_recorded",
        user_id=context.user_id,
        skill=skill_name,
        xp=xp_gained,
        duration=duration,
    )
    return session
