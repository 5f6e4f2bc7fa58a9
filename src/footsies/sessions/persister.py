"""Writes the accumulated session to storage once per logical session."""

import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import structlog

from footsies.models.session import SaveResult, SaveStatus, utc_now
from footsies.sessions.context import TrainingContext
from footsies.storage.errors import StorageError
from footsies.storage.session_history import append_session
from footsies.storage.user_profile import record_session_saved

logger = structlog.get_logger()


class SessionPersister:
    """Flushes a TrainingContext's accumulator to the session history.

    Safe to call redundantly (explicit save, sign-out and app teardown may
    all fire): a save within ``dedup_window_seconds`` of the previous
    successful save is reported as skipped.

    Args:
        data_dir: Root of the JSON document store.
        dedup_window_seconds: Window in which repeated saves are skipped.
        clear_on_failure: Default for dropping the accumulator when a write fails.
        clock: Monotonic clock used for the dedup window.
        now: Wall clock used to timestamp records.
    """

    def __init__(
        self,
        data_dir: Path,
        dedup_window_seconds: float = 5.0,
        clear_on_failure: bool = False,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = utc_now,
    ):
        self.data_dir = data_dir
        self.dedup_window_seconds = dedup_window_seconds
        self.clear_on_failure = clear_on_failure
        self._clock = clock
        self._now = now

    def save_current_session(
        self, context: TrainingContext, clear_on_failure: bool | None = None
    ) -> SaveResult:
        """Persist the accumulated session if there is anything to persist.

        Args:
            context: Signed-in user's training context.
            clear_on_failure: Drop the accumulator even if the write fails.
                Defaults to the persister's configured policy.

        Returns:
            SaveResult; storage failures are reported, never raised.
        """
        if clear_on_failure is None:
            clear_on_failure = self.clear_on_failure

        if not context.user_id:
            logger.warning("session_save_without_user")
            return SaveResult(status=SaveStatus.NOTHING_TO_SAVE, message="No user id provided")

        now_mono = self._clock()
        if (
            context.last_save_time is not None
            and now_mono - context.last_save_time < self.dedup_window_seconds
        ):
            logger.info("session_save_skipped_recent", user_id=context.user_id)
            return SaveResult(
                status=SaveStatus.SKIPPED, message="Session was saved moments ago"
            )

        session = context.accumulator
        if session is None:
            return SaveResult(status=SaveStatus.NOTHING_TO_SAVE, message="No active session")
        if session.is_empty:
            return SaveResult(
                status=SaveStatus.NOTHING_TO_SAVE, message="No skills trained in this session"
            )

        record = session.snapshot(self._now())
        try:
            append_session(self.data_dir, context.user_id, record)
        except (OSError, StorageError) as e:
            logger.exception("session_save_failed", user_id=context.user_id)
            if clear_on_failure:
                context.clear()
            return SaveResult(status=SaveStatus.FAILED, message=f"Could not save session: {e}")

        # The record is durable from here on; a retry would duplicate it.
        message = ""
        try:
            profile = record_session_saved(self.data_dir, context.user_id, record.timestamp)
        except (OSError, StorageError):
            logger.exception("session_counter_update_failed", user_id=context.user_id)
            message = "Session saved, profile totals not updated"
        else:
            if profile is None:
                logger.error("session_saved_without_profile", user_id=context.user_id)
                message = "Session saved, user profile not found"

        context.clear()
        context.last_save_time = now_mono
        logger.info(
            "session_saved",
            user_id=context.user_id,
            session_id=record.id,
            skills=record.skills_changed,
            duration=record.duration,
        )
        return SaveResult(
            status=SaveStatus.SAVED, message=message, session=record, session_id=record.id
        )

    def save_and_end_session(self, context: TrainingContext) -> SaveResult:
        """Save, then clear the accumulator whatever the outcome.

        Used at sign-out and teardown where no retry will follow.
        """
        result = self.save_current_session(context)
        discarded = context.clear()
        if discarded is not None and not discarded.is_empty:
            logger.warning(
                "session_ended_unsaved",
                user_id=context.user_id,
                status=result.status.value,
                skills=discarded.skills_changed,
            )
        return result.model_copy(update={"session_ended": True})
