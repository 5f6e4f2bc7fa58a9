"""Per-user training context owning the in-memory session accumulator."""

from dataclasses import dataclass

import structlog

from footsies.models.session import AccumulatingSession

logger = structlog.get_logger()


@dataclass
class TrainingContext:
    """State scoped to one signed-in user.

    Holds the session being accumulated and the monotonic time of the last
    completed save, which the persister uses to drop duplicate triggers.
    """

    user_id: str
    accumulator: AccumulatingSession | None = None
    last_save_time: float | None = None

    def clear(self) -> AccumulatingSession | None:
        """Drop the accumulator and return what it held."""
        previous, self.accumulator = self.accumulator, None
        return previous


class SessionContextRegistry:
    """Holds at most one TrainingContext per user id.

    Only one active login per user is supported: signing in again replaces
    the previous context and discards whatever it had accumulated.
    """

    def __init__(self) -> None:
        self._contexts: dict[str, TrainingContext] = {}

    def sign_in(self, user_id: str) -> TrainingContext:
        previous = self._contexts.get(user_id)
        if previous is not None and previous.accumulator is not None:
            logger.warning(
                "session_context_replaced",
                user_id=user_id,
                discarded_skills=previous.accumulator.skills_changed,
            )
        context = TrainingContext(user_id=user_id)
        self._contexts[user_id] = context
        return context

    def get(self, user_id: str) -> TrainingContext | None:
        return self._contexts.get(user_id)

    def get_or_create(self, user_id: str) -> TrainingContext:
        context = self._contexts.get(user_id)
        if context is None:
            context = self.sign_in(user_id)
        return context

    def sign_out(self, user_id: str) -> TrainingContext | None:
        return self._contexts.pop(user_id, None)

    def sign_out_all(self) -> list[TrainingContext]:
        contexts = list(self._contexts.values())
        self._contexts.clear()
        return contexts

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._contexts

    def __len__(self) -> int:
        return len(self._contexts)
