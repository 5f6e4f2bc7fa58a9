"""Per-date aggregates and overall averages across training sessions."""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from footsies.models.skills import DEFAULT_SKILLS
from footsies.models.stats import DailyAggregate, SessionAverages
from footsies.stats.history import SessionLike, parse_sessions


def daily_aggregates(
    sessions: Iterable[SessionLike], since: date | None = None
) -> list[DailyAggregate]:
    """Combine sessions that share a calendar date, oldest date first."""
    grouped: dict[date, DailyAggregate] = {}
    intensities: dict[date, list[int]] = defaultdict(list)
    for session in parse_sessions(sessions):
        if since is not None and session.date < since:
            continue
        aggregate = grouped.setdefault(session.date, DailyAggregate(date=session.date))
        aggregate.count += 1
        aggregate.total_duration += session.duration
        for skill, xp in session.metrics.items():
            aggregate.skills[skill] = aggregate.skills.get(skill, 0) + xp
        if session.intensity is not None:
            intensities[session.date].append(session.intensity)

    for day, values in intensities.items():
        grouped[day].avg_intensity = round(sum(values) / len(values), 1)
    return [grouped[day] for day in sorted(grouped)]


def session_averages(
    sessions: Iterable[SessionLike], skills: Iterable[str] = DEFAULT_SKILLS
) -> SessionAverages:
    history = parse_sessions(sessions)
    if not history:
        return SessionAverages()

    count = len(history)
    intensities = [s.intensity for s in history if s.intensity is not None]
    return SessionAverages(
        sessions_count=count,
        avg_duration=round(sum(s.duration for s in history) / count),
        avg_skills={
            skill: round(sum(s.metrics.get(skill, 0) for s in history) / count, 1)
            for skill in skills
        },
        avg_intensity=round(sum(intensities) / len(intensities), 1) if intensities else None,
    )
