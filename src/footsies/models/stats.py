"""Read-side statistics models derived from session history."""

import datetime as dt

from pydantic import BaseModel, Field


class Bucket(BaseModel):
    """Session count for one labeled time bucket."""

    label: str
    start: dt.datetime
    end: dt.datetime
    count: int = 0


class AverageBucket(BaseModel):
    """Average sessions per day inside a 7-day window."""

    label: str
    start: dt.date
    end: dt.date  # inclusive
    count: int = 0
    value: float = 0.0


class FrequencyStats(BaseModel):
    total_sessions: int = 0
    daily_sessions: int = 0
    weekly_sessions: int = 0
    monthly_sessions: int = 0
    yearly_sessions: int = 0
    avg_sessions_per_week: float = 0.0
    hourly: list[Bucket] = Field(default_factory=list)
    daily: list[Bucket] = Field(default_factory=list)
    monthly_days: list[Bucket] = Field(default_factory=list)
    monthly: list[Bucket] = Field(default_factory=list)
    weekly_average: list[AverageBucket] = Field(default_factory=list)


class DailyPoint(BaseModel):
    date: dt.date
    value: int = 0


class PeriodPoint(BaseModel):
    """Total duration (seconds) and per-skill XP for a day or a week."""

    label: str
    start: dt.date
    end: dt.date  # inclusive
    duration: int = 0
    skills: dict[str, int] = Field(default_factory=dict)


class RollingPoint(BaseModel):
    """One session's XP for a skill next to the trailing mean ending at it."""

    date: dt.date
    value: float
    raw: int


class SkillProgress(BaseModel):
    daily: dict[str, list[DailyPoint]] = Field(default_factory=dict)
    last_week: list[PeriodPoint] = Field(default_factory=list)
    last_month: list[PeriodPoint] = Field(default_factory=list)
    rolling: dict[str, list[RollingPoint]] = Field(default_factory=dict)


class LastSessionSummary(BaseModel):
    id: str
    date: dt.date
    time: str
    duration: int
    duration_label: str
    metrics: dict[str, int] = Field(default_factory=dict)
    skills_changed: list[str] = Field(default_factory=list)
    title: str | None = None


class DailyAggregate(BaseModel):
    """All sessions recorded on one calendar date."""

    date: dt.date
    count: int = 0
    total_duration: int = 0
    skills: dict[str, int] = Field(default_factory=dict)
    avg_intensity: float | None = None


class SessionAverages(BaseModel):
    sessions_count: int = 0
    avg_duration: int = 0
    avg_skills: dict[str, float] = Field(default_factory=dict)
    avg_intensity: float | None = None
