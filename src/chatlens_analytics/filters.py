"""Filter predicate shared by both dashboards.

Every function here is pure: inputs are never mutated and a new list is
returned.  All predicates AND together.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence, TypeVar

from chatlens_analytics.models import (
    DateRange,
    FilterSpec,
    Message,
    SentimentFilterSpec,
    SentimentLabel,
    SentimentRecord,
)

R = TypeVar("R", Message, SentimentRecord)

# Local hours covered by each time-of-day bucket.
TIME_PERIOD_HOURS: dict[str, frozenset[int]] = {
    "Morning": frozenset(range(6, 12)),
    "Afternoon": frozenset(range(12, 17)),
    "Evening": frozenset(range(17, 21)),
    "Night": frozenset([21, 22, 23, 0, 1, 2, 3, 4, 5]),
}
ALL_DAY = "All Day"
TIME_PERIODS: tuple[str, ...] = (ALL_DAY, *TIME_PERIOD_HOURS)

_LABELS: dict[str, SentimentLabel] = {
    "positive": "Positive",
    "negative": "Negative",
    "neutral": "Neutral",
}


def normalize_label(label: str | None) -> SentimentLabel | None:
    """Map a raw label to its canonical form, or None if unrecognised."""
    if not label:
        return None
    return _LABELS.get(label.strip().lower())


def in_date_range(ts: datetime, date_range: DateRange | None) -> bool:
    if date_range is None:
        return True
    return date_range.start <= ts.date() <= date_range.last_day


def in_time_period(ts: datetime, time_period: str) -> bool:
    if time_period == ALL_DAY:
        return True
    return ts.hour in TIME_PERIOD_HOURS[time_period]


def in_participants(sender: str, participants: Iterable[str]) -> bool:
    # An empty allow-list means no restriction.
    return not participants or sender in participants


def _in_window(record: Message | SentimentRecord, spec: FilterSpec) -> bool:
    return in_date_range(record.date, spec.date_range) and in_time_period(
        record.date, spec.time_period
    )


def matches(record: Message | SentimentRecord, spec: FilterSpec) -> bool:
    """True if *record* passes the date, time-of-day and participant filters."""
    return _in_window(record, spec) and in_participants(record.sender, spec.participants)


def filter_messages(messages: Sequence[Message], spec: FilterSpec) -> list[Message]:
    return [m for m in messages if matches(m, spec)]


def filter_window(records: Sequence[R], spec: FilterSpec) -> list[R]:
    """Apply only the date and time-of-day filters, ignoring participants."""
    return [r for r in records if _in_window(r, spec)]


def filter_sentiment_records(
    records: Sequence[SentimentRecord], spec: SentimentFilterSpec
) -> list[SentimentRecord]:
    """Filter sentiment records; unrecognised labels are always dropped."""
    kept = []
    for record in records:
        label = normalize_label(record.overall_label)
        if label is None or label not in spec.sentiment_types:
            continue
        if matches(record, spec):
            kept.append(record)
    return kept
