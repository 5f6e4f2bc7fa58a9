"""Shared helpers for turning stored session records into typed history."""

from collections.abc import Iterable
from datetime import datetime, timezone

import structlog
from pydantic import ValidationError

from footsies.models.session import TrainingSession

logger = structlog.get_logger()

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

SessionLike = TrainingSession | dict


def parse_sessions(sessions: Iterable[SessionLike]) -> list[TrainingSession]:
    """Validate raw records, skipping (and logging) any that are malformed."""
    parsed: list[TrainingSession] = []
    for record in sessions:
        if isinstance(record, TrainingSession):
            parsed.append(record)
            continue
        if not isinstance(record, dict):
            logger.warning("session_record_skipped", reason="not a mapping")
            continue
        try:
            parsed.append(TrainingSession.model_validate(record))
        except ValidationError as e:
            logger.warning(
                "session_record_skipped",
                session_id=record.get("id"),
                errors=e.error_count(),
                reason=e.errors()[0]["msg"],
            )
    return parsed


def as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def format_duration(seconds: int) -> str:
    """Render a duration in seconds for display, e.g. '1 h 5 min'."""
    if seconds < 60:
        return f"{seconds} s"
    hours, minutes = divmod(seconds // 60, 60)
    if hours:
        return f"{hours} h {minutes} min"
    return f"{minutes} min"
