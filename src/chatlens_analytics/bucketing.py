"""Adaptive time bucketing for time-series panels.

The bucket size (day, week or month) is chosen from the span between the
earliest and latest record.  Two threshold profiles exist: one for the
general activity dashboard and a coarser one for the sentiment trend.
Bucket keys are ISO date strings of the bucket start, so the keys produced
by :meth:`Bucketing.keys` and :meth:`Bucketing.key_of` always agree.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterator


class Interval(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class BucketingProfile:
    """Span thresholds (in whole days) at which the interval coarsens."""

    name: str
    daily_max_days: int
    weekly_max_days: int

    def interval_for(self, span_days: int) -> Interval:
        if span_days <= self.daily_max_days:
            return Interval.DAY
        if span_days <= self.weekly_max_days:
            return Interval.WEEK
        return Interval.MONTH


GENERAL_PROFILE = BucketingProfile("general", daily_max_days=60, weekly_max_days=365)
SENTIMENT_TREND_PROFILE = BucketingProfile(
    "sentiment_trend", daily_max_days=90, weekly_max_days=730
)


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def bucket_start(day: date, interval: Interval) -> date:
    """Return the first day of the bucket containing *day*.

    Weeks start on Sunday.
    """
    if interval is Interval.WEEK:
        # date.weekday(): Monday == 0 ... Sunday == 6
        return day - timedelta(days=(day.weekday() + 1) % 7)
    if interval is Interval.MONTH:
        return day.replace(day=1)
    return day


def _next_bucket(start: date, interval: Interval) -> date:
    if interval is Interval.WEEK:
        return start + timedelta(days=7)
    if interval is Interval.MONTH:
        if start.month == 12:
            return start.replace(year=start.year + 1, month=1)
        return start.replace(month=start.month + 1)
    return start + timedelta(days=1)


@dataclass(frozen=True)
class Bucketing:
    """A concrete bucketing over the inclusive day range ``[start, end]``."""

    interval: Interval
    start: date
    end: date

    def key_of(self, value: date | datetime) -> str:
        """Map a timestamp to the key of its containing bucket."""
        return bucket_start(_as_date(value), self.interval).isoformat()

    def iterate_all(self) -> Iterator[date]:
        """Yield the start of every bucket across the span, empty ones included."""
        current = bucket_start(self.start, self.interval)
        while current <= self.end:
            yield current
            current = _next_bucket(current, self.interval)

    def keys(self) -> list[str]:
        return [d.isoformat() for d in self.iterate_all()]


def span_days(min_date: date | datetime, max_date: date | datetime) -> int:
    """Whole days between the two floored dates."""
    return (_as_date(max_date) - _as_date(min_date)).days


def choose_bucketing(
    min_date: date | datetime,
    max_date: date | datetime,
    profile: BucketingProfile = GENERAL_PROFILE,
) -> Bucketing:
    """Pick the interval for the span and return a :class:`Bucketing`.

    Parameters
    ----------
    min_date, max_date:
        Earliest and latest timestamps of the (filtered) record set.
    profile:
        Threshold table; :data:`GENERAL_PROFILE` or
        :data:`SENTIMENT_TREND_PROFILE` unless configured otherwise.
    """
    interval = profile.interval_for(span_days(min_date, max_date))
    return Bucketing(interval=interval, start=_as_date(min_date), end=_as_date(max_date))


def bucketing_for(
    timestamps: list[datetime], profile: BucketingProfile = GENERAL_PROFILE
) -> Bucketing | None:
    """Bucketing over the span of *timestamps*, or None when there are none."""
    if not timestamps:
        return None
    return choose_bucketing(min(timestamps), max(timestamps), profile)
