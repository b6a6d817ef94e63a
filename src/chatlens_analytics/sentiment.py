"""Aggregators for the sentiment dashboard.

Inputs are :class:`SentimentRecord` lists already restricted to one
granularity by :func:`chatlens_analytics.filters.filter_sentiment_records`.
Records whose label does not normalise are skipped by every count.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import Sequence

from chatlens_analytics.bucketing import SENTIMENT_TREND_PROFILE, BucketingProfile, bucketing_for
from chatlens_analytics.dashboard import DAY_KEYS, day_index
from chatlens_analytics.filters import normalize_label
from chatlens_analytics.models import (
    BreakdownRow,
    DailySentiment,
    Highlight,
    Highlights,
    HourlySentiment,
    SentimentKpi,
    SentimentRecord,
    TrendPoint,
)
from chatlens_analytics.rounding import percentage, round_half_up


def _tally(records: Sequence[SentimentRecord]) -> Counter[str]:
    return Counter(
        label for label in (normalize_label(r.overall_label) for r in records) if label
    )


def _score(positive: int, negative: int, total: int) -> float:
    if not total:
        return 0.0
    return round_half_up(positive / total * 100 - negative / total * 100)


def sentiment_kpi(records: Sequence[SentimentRecord]) -> SentimentKpi | None:
    counts = _tally(records)
    total = sum(counts.values())
    if not total:
        return None
    positive = percentage(counts["Positive"], total)
    negative = percentage(counts["Negative"], total)
    return SentimentKpi(
        overall_score=round_half_up(positive - negative),
        positive_percent=positive,
        negative_percent=negative,
        neutral_percent=percentage(counts["Neutral"], total),
        total_messages_or_segments=total,
    )


def sentiment_trend(
    records: Sequence[SentimentRecord],
    profile: BucketingProfile = SENTIMENT_TREND_PROFILE,
) -> list[TrendPoint]:
    """Label counts per bucket across the span, gaps filled with zero."""
    bucketing = bucketing_for([r.date for r in records], profile)
    if bucketing is None:
        return []
    buckets: dict[str, Counter[str]] = defaultdict(Counter)
    for r in records:
        label = normalize_label(r.overall_label)
        if label:
            buckets[bucketing.key_of(r.date)][label] += 1
    points = []
    for key in bucketing.keys():
        counts = buckets.get(key, Counter())
        points.append(
            TrendPoint(
                date=key,
                positive=counts["Positive"],
                negative=counts["Negative"],
                neutral=counts["Neutral"],
            )
        )
    return points


def sentiment_breakdown(records: Sequence[SentimentRecord]) -> list[BreakdownRow] | None:
    """Label counts per sender, for senders present in *records* only."""
    if not records:
        return None
    per_sender: dict[str, Counter[str]] = {}
    for r in records:
        label = normalize_label(r.overall_label)
        if label:
            per_sender.setdefault(r.sender, Counter())[label] += 1
    return [
        BreakdownRow(
            name=sender,
            positive=c["Positive"],
            negative=c["Negative"],
            neutral=c["Neutral"],
            total=sum(c.values()),
        )
        for sender, c in per_sender.items()
    ]


def sentiment_by_day(records: Sequence[SentimentRecord]) -> dict[str, DailySentiment] | None:
    """All seven days, Sunday first, with counts and a net score."""
    if not records:
        return None
    counts: dict[int, Counter[str]] = defaultdict(Counter)
    for r in records:
        label = normalize_label(r.overall_label)
        if label:
            counts[day_index(r.date.date())][label] += 1

    result = {}
    for i, day in enumerate(DAY_KEYS):
        c = counts.get(i, Counter())
        total = c["Positive"] + c["Negative"] + c["Neutral"]
        result[day] = DailySentiment(
            positive=c["Positive"],
            negative=c["Negative"],
            neutral=c["Neutral"],
            total=total,
            score=_score(c["Positive"], c["Negative"], total),
        )
    return result


def sentiment_by_hour(records: Sequence[SentimentRecord]) -> list[HourlySentiment] | None:
    if not records:
        return None
    counts: dict[int, Counter[str]] = defaultdict(Counter)
    for r in records:
        label = normalize_label(r.overall_label)
        if label:
            counts[r.date.hour][label] += 1

    hours = []
    for hour in range(24):
        c = counts.get(hour, Counter())
        hours.append(
            HourlySentiment(
                hour=hour,
                positive=c["Positive"],
                negative=c["Negative"],
                neutral=c["Neutral"],
                total=c["Positive"] + c["Negative"] + c["Neutral"],
            )
        )
    return hours


def _highlight(record: SentimentRecord) -> Highlight:
    return Highlight(
        id=record.id,
        sender=record.sender,
        text=record.text or record.combined_text or "",
        timestamp=record.date,
        score=record.overall_label_score,
    )


def sentiment_highlights(
    records: Sequence[SentimentRecord], limit: int = 5
) -> Highlights | None:
    """Most positive and most negative records.

    Positives are the first *limit* positive records by descending score;
    negatives are the *limit* lowest-scored negative records, lowest first.
    """
    if not records:
        return None
    ranked = sorted(records, key=lambda r: r.overall_label_score, reverse=True)
    top_positive = [r for r in ranked if normalize_label(r.overall_label) == "Positive"]
    top_negative = [
        r for r in reversed(ranked) if normalize_label(r.overall_label) == "Negative"
    ]
    return Highlights(
        top_positive=[_highlight(r) for r in top_positive[:limit]],
        top_negative=[_highlight(r) for r in top_negative[:limit]],
    )
