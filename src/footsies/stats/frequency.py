"""Training frequency counts and time-bucketed session series."""

import math
from bisect import bisect_left
from collections.abc import Iterable
from datetime import datetime, timedelta

from footsies.models.session import utc_now
from footsies.models.stats import AverageBucket, Bucket, FrequencyStats
from footsies.stats.history import (
    MONTH_LABELS,
    WEEKDAY_LABELS,
    SessionLike,
    as_utc,
    parse_sessions,
)

WEEKS_PER_MONTH = math.ceil(30 / 7)


def _shift_month(moment: datetime, months: int) -> datetime:
    index = moment.year * 12 + moment.month - 1 + months
    return moment.replace(year=index // 12, month=index % 12 + 1)


def _count(stamps: list[datetime], start: datetime, end: datetime) -> int:
    """Number of sorted timestamps in [start, end)."""
    return bisect_left(stamps, end) - bisect_left(stamps, start)


def _bucket(stamps: list[datetime], label: str, start: datetime, end: datetime) -> Bucket:
    return Bucket(label=label, start=start, end=end, count=_count(stamps, start, end))


def training_frequency(
    sessions: Iterable[SessionLike], now: datetime | None = None
) -> FrequencyStats:
    """Count sessions per rolling window and per calendar bucket.

    Buckets are half-open [start, end) and aligned to hour, day or month
    boundaries (UTC); the last bucket of every series contains ``now``.
    Series are ordered oldest to newest and always have their full length,
    even for an empty history.

    Args:
        sessions: TrainingSession models or raw stored records.
        now: Reference instant (defaults to the current time).

    Returns:
        FrequencyStats with window counts and 24 hourly, 7 daily, 30 daily,
        12 monthly and 4 weekly-average buckets.
    """
    now = as_utc(now or utc_now())
    stamps = sorted(s.timestamp for s in parse_sessions(sessions))

    def within(window: timedelta) -> int:
        # Inclusive of now itself.
        return _count(stamps, now - window, now + timedelta(microseconds=1))

    monthly_sessions = within(timedelta(days=30))

    current_hour = now.replace(minute=0, second=0, microsecond=0)
    hourly = []
    for offset in range(23, -1, -1):
        start = current_hour - timedelta(hours=offset)
        hourly.append(_bucket(stamps, f"{start:%H}:00", start, start + timedelta(hours=1)))

    today = current_hour.replace(hour=0)
    daily = []
    for offset in range(6, -1, -1):
        start = today - timedelta(days=offset)
        daily.append(
            _bucket(stamps, WEEKDAY_LABELS[start.weekday()], start, start + timedelta(days=1))
        )

    monthly_days = []
    for offset in range(29, -1, -1):
        start = today - timedelta(days=offset)
        monthly_days.append(
            _bucket(stamps, f"{start.month}/{start.day}", start, start + timedelta(days=1))
        )

    month_start = today.replace(day=1)
    monthly = []
    for offset in range(11, -1, -1):
        start = _shift_month(month_start, -offset)
        monthly.append(
            _bucket(stamps, MONTH_LABELS[start.month - 1], start, _shift_month(start, 1))
        )

    weekly_average = []
    for week in range(3, -1, -1):
        end = today - timedelta(days=7 * week)
        start = end - timedelta(days=6)
        count = _count(stamps, start, end + timedelta(days=1))
        weekly_average.append(
            AverageBucket(
                label=f"{start.month}/{start.day} - {end.month}/{end.day}",
                start=start.date(),
                end=end.date(),
                count=count,
                value=round(count / 7, 1),
            )
        )

    return FrequencyStats(
        total_sessions=len(stamps),
        daily_sessions=within(timedelta(hours=24)),
        weekly_sessions=within(timedelta(days=7)),
        monthly_sessions=monthly_sessions,
        yearly_sessions=within(timedelta(days=365)),
        avg_sessions_per_week=monthly_sessions / WEEKS_PER_MONTH,
        hourly=hourly,
        daily=daily,
        monthly_days=monthly_days,
        monthly=monthly,
        weekly_average=weekly_average,
    )
