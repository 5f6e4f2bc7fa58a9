"""Training session data models."""

import datetime as dt
import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import (
    BaseModel,
    Field,
    NonNegativeInt,
    computed_field,
    field_validator,
    model_validator,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionOptions(BaseModel):
    """Descriptive fields attached to the record when the session is saved."""

    title: str = "Training Session"
    skills_focus: str = "general"
    intensity: int = Field(default=5, ge=1, le=10)
    notes: str = ""
    date: dt.date | None = None  # overrides the date derived from the save timestamp


class AccumulatingSession(BaseModel):
    """In-memory session built up between sign-in and the next successful save."""

    start_time: datetime = Field(default_factory=utc_now)
    metrics: dict[str, int] = Field(default_factory=dict)
    skills_changed: list[str] = Field(default_factory=list)
    total_duration: int = 0  # seconds
    options: SessionOptions = Field(default_factory=SessionOptions)

    def add(self, skill: str, xp_gained: int, duration: int = 0) -> None:
        """Accumulate XP for a skill and extend the running duration."""
        if skill not in self.metrics:
            self.metrics[skill] = 0
            self.skills_changed.append(skill)
        self.metrics[skill] += xp_gained
        self.total_duration += duration

    @property
    def is_empty(self) -> bool:
        return not self.skills_changed

    def snapshot(self, timestamp: datetime, session_id: str | None = None) -> "TrainingSession":
        """Freeze the accumulator into a persistable record."""
        return TrainingSession(
            id=session_id or uuid.uuid4().hex,
            timestamp=timestamp,
            date=self.options.date or timestamp.date(),
            start_time=self.start_time,
            end_time=timestamp,
            duration=self.total_duration,
            metrics=dict(self.metrics),
            skills_changed=list(self.skills_changed),
            title=self.options.title,
            skills_focus=self.options.skills_focus,
            intensity=self.options.intensity,
            notes=self.options.notes,
        )


class TrainingSession(BaseModel):
    """A persisted training session. Duration is in seconds."""

    id: str
    timestamp: datetime
    date: dt.date | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: NonNegativeInt = 0
    metrics: dict[str, NonNegativeInt]
    skills_changed: list[str] = Field(default_factory=list)
    title: str | None = None
    skills_focus: str | None = None
    intensity: int | None = Field(default=None, ge=1, le=10)
    notes: str | None = None

    @field_validator("timestamp", "start_time", "end_time")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="before")
    @classmethod
    def _default_skills_changed(cls, data):
        # Older records only carry metrics; their key order is the touch order.
        if isinstance(data, dict) and not data.get("skills_changed"):
            metrics = data.get("metrics")
            if isinstance(metrics, dict):
                data = {**data, "skills_changed": list(metrics)}
        return data

    @model_validator(mode="after")
    def _check_consistency(self) -> "TrainingSession":
        if self.date is None:
            self.date = self.timestamp.astimezone(timezone.utc).date()
        if len(set(self.skills_changed)) != len(self.skills_changed):
            raise ValueError("skills_changed contains duplicates")
        if set(self.skills_changed) != set(self.metrics):
            raise ValueError("skills_changed must match the metrics keys")
        return self


class SaveStatus(StrEnum):
    """Outcome of a save attempt."""

    SAVED = "saved"
    SKIPPED = "skipped"
    NOTHING_TO_SAVE = "nothing_to_save"
    FAILED = "failed"


class SaveResult(BaseModel):
    """Structured result of persisting the accumulated session."""

    status: SaveStatus
    message: str = ""
    session: TrainingSession | None = None
    session_id: str | None = None
    session_ended: bool = False

    @computed_field
    @property
    def success(self) -> bool:
        return self.status in (SaveStatus.SAVED, SaveStatus.SKIPPED)
