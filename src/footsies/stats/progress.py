"""Per-skill progress series, stagnation and last-session lookups."""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime, timedelta

from footsies.models.session import TrainingSession, utc_now
from footsies.models.skills import DEFAULT_SKILLS
from footsies.models.stats import (
    DailyPoint,
    LastSessionSummary,
    PeriodPoint,
    RollingPoint,
    SkillProgress,
)
from footsies.stats.history import (
    WEEKDAY_LABELS,
    SessionLike,
    as_utc,
    format_duration,
    parse_sessions,
)

PROGRESS_WINDOW_DAYS = 30
ROLLING_WINDOW = 3


def _period(
    label: str,
    start: date,
    end: date,
    skills: Iterable[str],
    xp_by_day: dict[date, dict[str, int]],
    duration_by_day: dict[date, int],
) -> PeriodPoint:
    days = [start + timedelta(days=i) for i in range((end - start).days + 1)]
    return PeriodPoint(
        label=label,
        start=start,
        end=end,
        duration=sum(duration_by_day.get(day, 0) for day in days),
        skills={skill: sum(xp_by_day[day].get(skill, 0) for day in days) for skill in skills},
    )


def rolling_averages(
    sessions: Iterable[SessionLike],
    skills: Iterable[str] = DEFAULT_SKILLS,
    window: int = ROLLING_WINDOW,
) -> dict[str, list[RollingPoint]]:
    """Trailing mean of per-session XP for each skill, oldest session first.

    Only sessions that gained XP in a skill contribute to its series. Early
    points average over fewer than ``window`` sessions.
    """
    if window < 1:
        raise ValueError(f"Rolling window must be at least 1, got {window}")
    history = sorted(parse_sessions(sessions), key=lambda s: s.timestamp)
    series: dict[str, list[RollingPoint]] = {}
    for skill in skills:
        trained = [s for s in history if s.metrics.get(skill, 0) > 0]
        points = []
        for index, session in enumerate(trained):
            recent = trained[max(0, index - window + 1):index + 1]
            points.append(RollingPoint(
                date=session.date,
                value=sum(s.metrics[skill] for s in recent) / len(recent),
                raw=session.metrics[skill],
            ))
        series[skill] = points
    return series


def skill_progress(
    sessions: Iterable[SessionLike],
    now: datetime | None = None,
    skills: Iterable[str] = DEFAULT_SKILLS,
    window_days: int = PROGRESS_WINDOW_DAYS,
) -> SkillProgress:
    """Build gap-free daily XP series per skill plus weekly breakdowns.

    Sessions are bucketed by their calendar ``date``. Every day of the
    window is present even when nothing was trained on it.

    Args:
        sessions: TrainingSession models or raw stored records.
        now: Reference instant (defaults to the current time).
        skills: Skills to report on.
        window_days: Length of the daily series.

    Returns:
        SkillProgress with ``daily`` (per skill), ``last_week`` (7 days,
        labeled by weekday) and ``last_month`` (4 contiguous 7-day windows)
        plus the per-skill ``rolling`` averages over the whole history.
    """
    skills = list(skills)
    today = as_utc(now or utc_now()).date()
    history = parse_sessions(sessions)
    xp_by_day: dict[date, dict[str, int]] = defaultdict(dict)
    duration_by_day: dict[date, int] = defaultdict(int)
    for session in history:
        day_xp = xp_by_day[session.date]
        for skill, xp in session.metrics.items():
            day_xp[skill] = day_xp.get(skill, 0) + xp
        duration_by_day[session.date] += session.duration

    window = [today - timedelta(days=offset) for offset in range(window_days - 1, -1, -1)]
    daily = {
        skill: [DailyPoint(date=day, value=xp_by_day[day].get(skill, 0)) for day in window]
        for skill in skills
    }

    last_week = [
        _period(WEEKDAY_LABELS[day.weekday()], day, day, skills, xp_by_day, duration_by_day)
        for day in window[-7:]
    ]

    last_month = []
    for week in range(3, -1, -1):
        end = today - timedelta(days=7 * week)
        start = end - timedelta(days=6)
        last_month.append(
            _period(f"Week {4 - week}", start, end, skills, xp_by_day, duration_by_day)
        )

    return SkillProgress(
        daily=daily,
        last_week=last_week,
        last_month=last_month,
        rolling=rolling_averages(history, skills),
    )


def _latest_first(sessions: Iterable[SessionLike]) -> list[TrainingSession]:
    return sorted(parse_sessions(sessions), key=lambda s: s.timestamp, reverse=True)


def last_improvement(
    sessions: Iterable[SessionLike], skill_name: str, now: datetime | None = None
) -> int | None:
    """Whole days since the skill last gained XP, or None if it never has."""
    now = as_utc(now or utc_now())
    for session in _latest_first(sessions):
        if session.metrics.get(skill_name, 0) > 0:
            return max(0, (now - session.timestamp).days)
    return None


def time_since_last_improvement(
    sessions: Iterable[SessionLike],
    skills: Iterable[str] = DEFAULT_SKILLS,
    now: datetime | None = None,
) -> dict[str, int | None]:
    history = _latest_first(sessions)
    return {skill: last_improvement(history, skill, now) for skill in skills}


def last_session(sessions: Iterable[SessionLike]) -> LastSessionSummary | None:
    history = _latest_first(sessions)
    if not history:
        return None
    latest = history[0]
    return LastSessionSummary(
        id=latest.id,
        date=latest.date,
        time=f"{as_utc(latest.timestamp):%H:%M}",
        duration=latest.duration,
        duration_label=format_duration(latest.duration),
        metrics=dict(latest.metrics),
        skills_changed=list(latest.skills_changed),
        title=latest.title,
    )
