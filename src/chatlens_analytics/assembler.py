"""Dashboard assembly: filter once, then run every aggregator.

Aggregators run independently.  If one raises, the failure is logged with
its traceback and that panel falls back to its empty value, so a single
broken panel never blanks the whole dashboard.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence, TypeVar

from chatlens_analytics import dashboard, sentiment
from chatlens_analytics.config import Settings, get_settings
from chatlens_analytics.filters import filter_messages, filter_sentiment_records
from chatlens_analytics.models import (
    DashboardData,
    FilterSpec,
    Message,
    MultiContribution,
    SentimentDashboardData,
    SentimentFilterSpec,
    SentimentRecord,
    SentimentSource,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _run(panel: str, fallback: T, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    try:
        return func(*args, **kwargs)
    except Exception:
        logger.exception("Aggregator for panel '%s' failed; serving empty panel", panel)
        return fallback


def all_participants(records: Sequence[Message | SentimentRecord]) -> list[str]:
    """Every sender of the unfiltered records, sorted by name."""
    return sorted({r.sender for r in records})


def build_dashboard(
    messages: Sequence[Message],
    spec: FilterSpec | None = None,
    settings: Settings | None = None,
) -> DashboardData:
    """Assemble the general activity dashboard for one chat."""
    spec = spec or FilterSpec()
    settings = settings or get_settings()
    profile = settings.general_profile()

    participants = all_participants(messages)
    filtered = filter_messages(messages, spec)
    active = dashboard.sender_counts(filtered)
    logger.debug(
        "Building dashboard: %d of %d messages, %d active participants",
        len(filtered),
        len(messages),
        len(active),
    )

    return DashboardData(
        participants=participants,
        participant_count=len(active),
        kpi_metrics=_run("kpiMetrics", [], dashboard.kpi_metrics, filtered, profile),
        messages_over_time=_run(
            "messagesOverTime", [], dashboard.messages_over_time, filtered, profile
        ),
        contribution=_run(
            "contribution",
            MultiContribution(data=[]),
            dashboard.contribution,
            filtered,
            messages,
            spec,
            limit=settings.contribution_limit,
        ),
        activity=_run(
            "activity",
            None,
            dashboard.activity_profile,
            filtered,
            limit=settings.activity_participant_limit,
        ),
        timeline=_run("timeline", [], dashboard.timeline, filtered),
        activity_by_day=_run("activityByDay", [], dashboard.activity_by_day, filtered),
        hourly_activity=_run("hourlyActivity", [], dashboard.hourly_activity, filtered),
    )


def build_sentiment_dashboard(
    source: SentimentSource,
    spec: SentimentFilterSpec | None = None,
    settings: Settings | None = None,
) -> SentimentDashboardData:
    """Assemble the sentiment dashboard from the collection *spec* selects."""
    spec = spec or SentimentFilterSpec()
    settings = settings or get_settings()

    # Granularity is a filter too; the participant list spans both collections.
    participants = all_participants((*source.messages, *source.segments))
    records = source.for_granularity(spec.granularity)
    filtered = filter_sentiment_records(records, spec)
    logger.debug(
        "Building sentiment dashboard (%s): %d of %d records",
        spec.granularity,
        len(filtered),
        len(records),
    )

    return SentimentDashboardData(
        participants=participants,
        kpi_data=_run("kpiData", None, sentiment.sentiment_kpi, filtered),
        trend_data=_run(
            "trendData", [], sentiment.sentiment_trend, filtered, settings.trend_profile()
        ),
        breakdown_data=_run("breakdownData", None, sentiment.sentiment_breakdown, filtered),
        day_data=_run("dayData", None, sentiment.sentiment_by_day, filtered),
        hour_data=_run("hourData", None, sentiment.sentiment_by_hour, filtered),
        highlights_data=_run(
            "highlightsData",
            None,
            sentiment.sentiment_highlights,
            filtered,
            limit=settings.highlight_limit,
        ),
    )
