"""Aggregators for the general activity dashboard.

Each function takes an already-filtered list of :class:`Message` records
(and, where a share-of-total is needed, the unfiltered list) and returns
one view-model.  No function raises on empty input; each returns its empty
sentinel instead.
"""

from __future__ import annotations

import math
from collections import Counter, defaultdict
from datetime import date
from typing import Sequence

from chatlens_analytics.bucketing import GENERAL_PROFILE, BucketingProfile, bucketing_for
from chatlens_analytics.filters import filter_window
from chatlens_analytics.models import (
    ActivityChartData,
    ActivityParticipant,
    ConversationBalance,
    DayData,
    FilterSpec,
    HourData,
    KpiMetric,
    Message,
    MessagesOverTimePoint,
    MultiContribution,
    MultiParticipantSegment,
    ParticipantMessages,
    ParticipantShare,
    ShareOfVoice,
    SingleContribution,
    SingleParticipantSegment,
    SparkPoint,
    TwoContribution,
    TwoParticipantData,
    TwoParticipantSegment,
)
from chatlens_analytics.rounding import percentage, round_half_up

DAY_KEYS: tuple[str, ...] = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")

ACTIVITY_LABELS: list[str] = ["Text", "Media", "Links", "Questions", "Emojis"]

KPI_DEFINITIONS: dict[str, str] = {
    "Total Messages": "Number of messages sent in the selected period.",
    "Active Participants": "Participants who sent at least one message in the selected period.",
    "Active Days": "Calendar days with at least one message.",
    "Avg Messages/Day": "Total messages divided by active days.",
}

# Day-of-week bar colours: one hue, darkening 5 points of lightness per day.
_DAY_HUE = 171
_DAY_SATURATION = 79
_DAY_LIGHTNESS = 40
_DAY_DARKEN_STEP = 5


def hsl_to_hex(h: float, s: float, l: float) -> str:
    """Convert an HSL colour (degrees, percent, percent) to ``#rrggbb``."""
    l /= 100
    a = s * min(l, 1 - l) / 100

    def channel(n: int) -> str:
        k = (n + h / 30) % 12
        colour = l - a * max(min(k - 3, 9 - k, 1), -1)
        return f"{math.floor(255 * colour + 0.5):02x}"

    return f"#{channel(0)}{channel(8)}{channel(4)}"


def day_fill_colors() -> dict[str, str]:
    return {
        day: hsl_to_hex(_DAY_HUE, _DAY_SATURATION, _DAY_LIGHTNESS - i * _DAY_DARKEN_STEP)
        for i, day in enumerate(DAY_KEYS)
    }


DAY_FILL_COLORS = day_fill_colors()


def day_index(day: date) -> int:
    """Sunday-based day-of-week index (Sunday == 0)."""
    return (day.weekday() + 1) % 7


def ordinal(n: int) -> str:
    if 11 <= n % 100 <= 13:
        return f"{n}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def sender_counts(messages: Sequence[Message]) -> Counter[str]:
    """Message count per sender, in first-appearance order."""
    return Counter(m.sender for m in messages)


def ranked_senders(counts: Counter[str]) -> list[tuple[str, int]]:
    """Senders by descending count; ties keep first-appearance order."""
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


# ---------------------------------------------------------------------------
# KPIs and time series
# ---------------------------------------------------------------------------


def kpi_metrics(
    messages: Sequence[Message], profile: BucketingProfile = GENERAL_PROFILE
) -> list[KpiMetric]:
    """Total Messages, Active Participants, Active Days and Avg Messages/Day.

    The first two carry a sparkline bucketed over the span of *messages*.
    """
    total = len(messages)
    senders = {m.sender for m in messages}
    active_days = len({m.date.date() for m in messages})
    avg_per_day = round_half_up(total / active_days) if active_days else 0

    count_line: list[SparkPoint] = []
    sender_line: list[SparkPoint] = []
    bucketing = bucketing_for([m.date for m in messages], profile)
    if bucketing is not None:
        counts: Counter[str] = Counter()
        senders_by_bucket: dict[str, set[str]] = defaultdict(set)
        for m in messages:
            key = bucketing.key_of(m.date)
            counts[key] += 1
            senders_by_bucket[key].add(m.sender)
        for key in bucketing.keys():
            count_line.append(SparkPoint(v=counts[key]))
            sender_line.append(SparkPoint(v=len(senders_by_bucket.get(key, ()))))

    return [
        KpiMetric(
            label="Total Messages",
            value=total,
            definition=KPI_DEFINITIONS["Total Messages"],
            sparkline=count_line,
        ),
        KpiMetric(
            label="Active Participants",
            value=len(senders),
            definition=KPI_DEFINITIONS["Active Participants"],
            sparkline=sender_line,
        ),
        KpiMetric(
            label="Active Days",
            value=active_days,
            definition=KPI_DEFINITIONS["Active Days"],
        ),
        KpiMetric(
            label="Avg Messages/Day",
            value=avg_per_day,
            definition=KPI_DEFINITIONS["Avg Messages/Day"],
        ),
    ]


def messages_over_time(
    messages: Sequence[Message], profile: BucketingProfile = GENERAL_PROFILE
) -> list[MessagesOverTimePoint]:
    """Message counts per bucket across the span, gaps filled with zero."""
    bucketing = bucketing_for([m.date for m in messages], profile)
    if bucketing is None:
        return []
    counts = Counter(bucketing.key_of(m.date) for m in messages)
    return [MessagesOverTimePoint(date=key, count=counts[key]) for key in bucketing.keys()]


def activity_by_day(messages: Sequence[Message]) -> list[DayData]:
    """Message counts for each day of the week, Sunday first."""
    counts = Counter(day_index(m.date.date()) for m in messages)
    return [
        DayData(day=day, messages=counts[i], fill=DAY_FILL_COLORS[day])
        for i, day in enumerate(DAY_KEYS)
    ]


def hourly_activity(messages: Sequence[Message]) -> list[HourData]:
    """Message counts for each hour of the day (0-23)."""
    counts = Counter(m.date.hour for m in messages)
    return [HourData(hour=h, messages=counts[h]) for h in range(24)]


# ---------------------------------------------------------------------------
# Participant panels
# ---------------------------------------------------------------------------


def contribution(
    messages: Sequence[Message],
    all_messages: Sequence[Message],
    spec: FilterSpec,
    limit: int = 30,
) -> SingleContribution | TwoContribution | MultiContribution:
    """Participant contribution, shaped by the number of active participants.

    One participant gets a share-of-voice against every message in the same
    date/time window (ignoring the participant filter), two get a head to
    head, anything else the top *limit* senders.
    """
    counts = sender_counts(messages)

    if len(counts) == 1:
        ((name, own),) = counts.items()
        if spec.participants:
            total = len(filter_window(all_messages, spec))
        else:
            total = len(messages)
        share = percentage(own, total)
        others = round_half_up(100 - share) if total else 0.0
        return SingleContribution(
            data=ShareOfVoice(name=name, percentage=share, others_percentage=others)
        )

    ranked = ranked_senders(counts)
    if len(counts) == 2:
        return TwoContribution(
            data=TwoParticipantData(
                participants=[ParticipantMessages(name=n, messages=c) for n, c in ranked],
                total_messages=len(messages),
            )
        )

    return MultiContribution(
        data=[ParticipantMessages(name=n, messages=c) for n, c in ranked[:limit]]
    )


def activity_profile(
    messages: Sequence[Message], limit: int = 3
) -> ActivityChartData | None:
    """Communication-style matrix over [Text, Media, Links, Questions, Emojis].

    With more than *limit* active participants only the busiest *limit* are
    shown; otherwise everyone, in first-appearance order.
    """
    counts = sender_counts(messages)
    if not counts:
        return None
    if len(counts) > limit:
        names = [name for name, _ in ranked_senders(counts)[:limit]]
    else:
        names = list(counts)

    stats = {name: [0, 0, 0, 0, 0] for name in names}
    for m in messages:
        row = stats.get(m.sender)
        if row is None:
            continue
        if not m.is_media and m.word_count > 0:
            row[0] += 1
        if m.is_media:
            row[1] += 1
        row[2] += m.links_count
        if m.is_question:
            row[3] += 1
        row[4] += m.emojis_count

    return ActivityChartData(
        labels=list(ACTIVITY_LABELS),
        participants=[ActivityParticipant(name=name, data=stats[name]) for name in names],
    )


# ---------------------------------------------------------------------------
# Monthly timeline
# ---------------------------------------------------------------------------


def timeline(
    messages: Sequence[Message],
) -> list[SingleParticipantSegment | TwoParticipantSegment | MultiParticipantSegment]:
    """One segment per calendar month, oldest first.

    The segment shape follows the participant count of the whole filtered
    set, not of the individual month, so a two-person chat always reports a
    conversation balance even for a month where only one of them spoke.
    """
    participants = list(sender_counts(messages))
    by_month: dict[tuple[int, int], list[Message]] = defaultdict(list)
    for m in messages:
        by_month[(m.date.year, m.date.month)].append(m)

    segments = []
    for year, month in sorted(by_month):
        month_messages = by_month[(year, month)]
        base = {
            "month": date(year, month, 1).strftime("%B %Y"),
            "total_messages": len(month_messages),
            "peak_day": ordinal(
                Counter(m.date.day for m in month_messages).most_common(1)[0][0]
            ),
        }
        month_counts = sender_counts(month_messages)

        if len(participants) == 2:
            first, second = participants
            segments.append(
                TwoParticipantSegment(
                    **base,
                    conversation_balance=ConversationBalance(
                        participant_a=ParticipantShare(
                            name=first,
                            percentage=percentage(month_counts[first], len(month_messages)),
                        ),
                        participant_b=ParticipantShare(
                            name=second,
                            percentage=percentage(month_counts[second], len(month_messages)),
                        ),
                    ),
                )
            )
        elif len(participants) >= 3:
            segments.append(
                MultiParticipantSegment(
                    **base,
                    active_participants=len(month_counts),
                    most_active=ranked_senders(month_counts)[0][0],
                )
            )
        else:
            segments.append(SingleParticipantSegment(**base))
    return segments
