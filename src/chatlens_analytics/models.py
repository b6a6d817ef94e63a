"""Pydantic models for the ChatLens analytics API.

Input records and filter specs are frozen so the engine can never mutate
what callers hand it.  View-models serialise with the camelCase keys the
dashboard front end reads.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SentimentLabel = Literal["Positive", "Negative", "Neutral"]
TimePeriod = Literal["All Day", "Morning", "Afternoon", "Evening", "Night"]
Granularity = Literal["message", "segment"]

ALL_SENTIMENT_LABELS: frozenset[str] = frozenset({"Positive", "Negative", "Neutral"})

# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


class Message(BaseModel):
    """A single parsed chat message."""

    model_config = ConfigDict(frozen=True)

    id: int
    sender: str
    text: str = ""
    word_count: int = 0
    emojis_count: int = 0
    links_count: int = 0
    is_question: bool = False
    is_media: bool = False
    date: datetime


class SentimentRecord(BaseModel):
    """A sentiment-labelled message or conversational segment."""

    model_config = ConfigDict(frozen=True)

    id: int
    sender: str
    text: str | None = None
    combined_text: str | None = Field(
        default=None, description="Concatenated text of a segment's messages"
    )
    date: datetime
    overall_label: str = Field(description="positive, negative or neutral (any case)")
    overall_label_score: float


class SentimentSource(BaseModel):
    """Both sentiment collections of one chat; never mixed in one query."""

    model_config = ConfigDict(frozen=True)

    messages: tuple[SentimentRecord, ...] = ()
    segments: tuple[SentimentRecord, ...] = ()

    def for_granularity(self, granularity: Granularity) -> tuple[SentimentRecord, ...]:
        return self.segments if granularity == "segment" else self.messages


# ---------------------------------------------------------------------------
# Filter specs
# ---------------------------------------------------------------------------


class DateRange(BaseModel):
    """Inclusive calendar-day range; a missing end means a single day."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: date | None = None

    @property
    def last_day(self) -> date:
        return self.end if self.end is not None else self.start


class FilterSpec(BaseModel):
    """Filters of the general activity dashboard."""

    model_config = ConfigDict(frozen=True)

    participants: frozenset[str] = frozenset()
    date_range: DateRange | None = None
    time_period: TimePeriod = "All Day"


class SentimentFilterSpec(FilterSpec):
    """Filters of the sentiment dashboard."""

    sentiment_types: frozenset[SentimentLabel] = ALL_SENTIMENT_LABELS
    granularity: Granularity = "message"


# ---------------------------------------------------------------------------
# General dashboard view-models
# ---------------------------------------------------------------------------


class ViewModel(BaseModel):
    """Base for outputs; dumps with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SparkPoint(ViewModel):
    v: int


class KpiMetric(ViewModel):
    label: str
    value: int | float
    definition: str
    sparkline: list[SparkPoint] | None = None


class MessagesOverTimePoint(ViewModel):
    date: str = Field(description="Bucket start, YYYY-MM-DD")
    count: int


class ParticipantMessages(ViewModel):
    name: str
    messages: int


class ShareOfVoice(ViewModel):
    name: str
    percentage: float
    others_percentage: float


class TwoParticipantData(ViewModel):
    participants: list[ParticipantMessages]
    total_messages: int


class SingleContribution(ViewModel):
    type: Literal["single"] = "single"
    data: ShareOfVoice


class TwoContribution(ViewModel):
    type: Literal["two"] = "two"
    data: TwoParticipantData


class MultiContribution(ViewModel):
    type: Literal["multi"] = "multi"
    data: list[ParticipantMessages]


Contribution = Annotated[
    Union[SingleContribution, TwoContribution, MultiContribution],
    Field(discriminator="type"),
]


class ActivityParticipant(ViewModel):
    name: str
    data: list[int]


class ActivityChartData(ViewModel):
    labels: list[str]
    participants: list[ActivityParticipant]


class ParticipantShare(ViewModel):
    name: str
    percentage: float


class ConversationBalance(ViewModel):
    participant_a: ParticipantShare
    participant_b: ParticipantShare


class SingleParticipantSegment(ViewModel):
    type: Literal["single"] = "single"
    month: str = Field(description='e.g. "October 2025"')
    total_messages: int
    peak_day: str = Field(description='e.g. "15th"')


class TwoParticipantSegment(SingleParticipantSegment):
    type: Literal["two"] = "two"
    conversation_balance: ConversationBalance


class MultiParticipantSegment(SingleParticipantSegment):
    type: Literal["multi"] = "multi"
    active_participants: int
    most_active: str


TimelineSegment = Annotated[
    Union[SingleParticipantSegment, TwoParticipantSegment, MultiParticipantSegment],
    Field(discriminator="type"),
]


class DayData(ViewModel):
    day: str = Field(description="sun, mon, ... sat")
    messages: int
    fill: str = Field(description="Pre-computed hex colour")


class HourData(ViewModel):
    hour: int
    messages: int


class DashboardData(ViewModel):
    """Everything the general activity dashboard renders."""

    participants: list[str] = Field(description="All participants of the chat, unfiltered")
    participant_count: int = Field(description="Active participants after filtering")
    kpi_metrics: list[KpiMetric]
    messages_over_time: list[MessagesOverTimePoint]
    contribution: Contribution
    activity: ActivityChartData | None
    timeline: list[TimelineSegment]
    activity_by_day: list[DayData]
    hourly_activity: list[HourData]


# ---------------------------------------------------------------------------
# Sentiment dashboard view-models
# ---------------------------------------------------------------------------


class SentimentKpi(ViewModel):
    overall_score: float
    positive_percent: float
    negative_percent: float
    neutral_percent: float
    total_messages_or_segments: int


class SentimentCounts(ViewModel):
    positive: int = Field(0, alias="Positive")
    negative: int = Field(0, alias="Negative")
    neutral: int = Field(0, alias="Neutral")


class TrendPoint(SentimentCounts):
    date: str


class BreakdownRow(SentimentCounts):
    name: str
    total: int


class HourlySentiment(SentimentCounts):
    hour: int
    total: int


class DailySentiment(ViewModel):
    positive: int
    negative: int
    neutral: int
    total: int
    score: float


class Highlight(ViewModel):
    id: int
    sender: str
    text: str
    timestamp: datetime
    score: float


class Highlights(ViewModel):
    top_positive: list[Highlight]
    top_negative: list[Highlight]


class SentimentDashboardData(ViewModel):
    """Everything the sentiment dashboard renders."""

    participants: list[str]
    kpi_data: SentimentKpi | None
    trend_data: list[TrendPoint] | None
    breakdown_data: list[BreakdownRow] | None
    day_data: dict[str, DailySentiment] | None
    hour_data: list[HourlySentiment] | None
    highlights_data: Highlights | None


# ---------------------------------------------------------------------------
# Service wrappers
# ---------------------------------------------------------------------------


SentimentStatus = Literal["pending", "processing", "completed", "failed", "error"]


class HealthResponse(BaseModel):
    """Health-check response."""

    status: str = "ok"
    version: str


class ChatUpload(BaseModel):
    """Parsed messages of one chat, as produced by the ingestion pipeline."""

    title: str | None = None
    messages: list[Message]


class SentimentUpload(BaseModel):
    """Sentiment inference output for one chat."""

    messages: list[SentimentRecord] = []
    segments: list[SentimentRecord] = []


class ChatRead(BaseModel):
    """Chat metadata returned after ingestion."""

    id: int
    title: str | None = None
    created_at: datetime
    message_count: int
    sentiment_status: SentimentStatus


class ProgressData(BaseModel):
    """One progress report from the sentiment worker."""

    chat_id: str
    messages_done: int = 0
    messages_total: int = 0
    segments_done: int = 0
    segments_total: int = 0
    percent: float = 0.0


class ProgressEvent(BaseModel):
    """A server-pushed progress event."""

    event: Literal["progress", "completed", "cancelled", "error"]
    progress: ProgressData | None = None
    error: str | None = None


class JobSnapshot(BaseModel):
    """Current state of a sentiment progress job."""

    job_id: str
    state: str
    progress: ProgressData | None = None
    error: str | None = None
    cancel_requested: bool = False
