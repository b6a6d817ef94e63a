"""Tests for the filter predicate."""

from __future__ import annotations

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from chatlens_analytics.filters import (
    filter_messages,
    filter_sentiment_records,
    filter_window,
    in_time_period,
    normalize_label,
)
from chatlens_analytics.models import (
    DateRange,
    FilterSpec,
    Message,
    SentimentFilterSpec,
    SentimentRecord,
)


class TestTimePeriod:
    """Bucket table: Morning 6-11, Afternoon 12-16, Evening 17-20, Night 21-5."""

    @pytest.mark.parametrize(
        "hour, period",
        [
            (5, "Night"),
            (6, "Morning"),
            (11, "Morning"),
            (12, "Afternoon"),
            (16, "Afternoon"),
            (17, "Evening"),
            (20, "Evening"),
            (21, "Night"),
            (0, "Night"),
        ],
    )
    def test_boundaries(self, hour: int, period: str) -> None:
        ts = datetime(2024, 6, 15, hour, 30)
        assert in_time_period(ts, period)
        others = {"Morning", "Afternoon", "Evening", "Night"} - {period}
        assert not any(in_time_period(ts, other) for other in others)

    def test_all_day_keeps_everything(self) -> None:
        assert all(in_time_period(datetime(2024, 1, 1, h), "All Day") for h in range(24))

    def test_filter_by_period(self, group_messages: list[Message]) -> None:
        counts = {
            period: len(filter_messages(group_messages, FilterSpec(time_period=period)))
            for period in ("Morning", "Afternoon", "Evening", "Night")
        }
        assert counts == {"Morning": 4, "Afternoon": 2, "Evening": 1, "Night": 1}


class TestDateRange:
    def test_single_day_when_end_missing(self, group_messages: list[Message]) -> None:
        spec = FilterSpec(date_range=DateRange(start=date(2024, 6, 15)))
        assert [m.id for m in filter_messages(group_messages, spec)] == [1, 2, 3]

    def test_end_day_is_inclusive(self, group_messages: list[Message]) -> None:
        spec = FilterSpec(date_range=DateRange(start=date(2024, 6, 16), end=date(2024, 6, 18)))
        assert [m.id for m in filter_messages(group_messages, spec)] == [4, 5, 6]

    def test_no_range_keeps_everything(self, group_messages: list[Message]) -> None:
        assert len(filter_messages(group_messages, FilterSpec())) == 8


class TestParticipants:
    def test_empty_set_means_everyone(self, group_messages: list[Message]) -> None:
        assert filter_messages(group_messages, FilterSpec(participants=frozenset())) == group_messages

    def test_allow_list(self, group_messages: list[Message]) -> None:
        spec = FilterSpec(participants=frozenset({"Bob", "Carol"}))
        assert {m.sender for m in filter_messages(group_messages, spec)} == {"Bob", "Carol"}

    def test_predicates_and_together(self, group_messages: list[Message]) -> None:
        spec = FilterSpec(
            participants=frozenset({"Alice"}),
            date_range=DateRange(start=date(2024, 6, 15), end=date(2024, 6, 30)),
            time_period="Morning",
        )
        assert [m.id for m in filter_messages(group_messages, spec)] == [1]

    def test_window_ignores_participants(self, group_messages: list[Message]) -> None:
        spec = FilterSpec(participants=frozenset({"Bob"}), time_period="Morning")
        assert len(filter_window(group_messages, spec)) == 4


class TestPurity:
    def test_idempotent_and_input_untouched(self, group_messages: list[Message]) -> None:
        before = list(group_messages)
        spec = FilterSpec(participants=frozenset({"Alice"}))
        first = filter_messages(group_messages, spec)
        second = filter_messages(group_messages, spec)
        assert first == second
        assert group_messages == before

    def test_filter_spec_is_frozen(self) -> None:
        spec = FilterSpec()
        with pytest.raises(ValidationError):
            spec.time_period = "Night"  # type: ignore[misc]


class TestSentimentFilter:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("positive", "Positive"),
            ("NEGATIVE", "Negative"),
            (" Neutral ", "Neutral"),
            ("mixed", None),
            ("", None),
            (None, None),
        ],
    )
    def test_normalize_label(self, raw: str | None, expected: str | None) -> None:
        assert normalize_label(raw) == expected

    def test_unrecognised_labels_dropped(self, sentiment_messages: list[SentimentRecord]) -> None:
        kept = filter_sentiment_records(sentiment_messages, SentimentFilterSpec())
        assert [r.id for r in kept] == [1, 2, 3, 4, 5]

    def test_sentiment_types(self, sentiment_messages: list[SentimentRecord]) -> None:
        spec = SentimentFilterSpec(sentiment_types=frozenset({"Negative"}))
        assert [r.id for r in filter_sentiment_records(sentiment_messages, spec)] == [2, 3]

    def test_combined_with_participants(self, sentiment_messages: list[SentimentRecord]) -> None:
        spec = SentimentFilterSpec(
            participants=frozenset({"Alice"}), sentiment_types=frozenset({"Positive", "Neutral"})
        )
        assert [r.id for r in filter_sentiment_records(sentiment_messages, spec)] == [1, 4]
