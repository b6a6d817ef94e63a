"""Sentiment routes -- sentiment dashboard and analysis progress."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from chatlens_analytics.assembler import build_sentiment_dashboard
from chatlens_analytics.config import Settings
from chatlens_analytics.filters import normalize_label
from chatlens_analytics.models import (
    ALL_SENTIMENT_LABELS,
    JobSnapshot,
    ProgressEvent,
    SentimentDashboardData,
    SentimentFilterSpec,
)
from chatlens_analytics.progress import UnknownJobError
from chatlens_analytics.routes import get_app_settings, get_chat_or_404, get_store
from chatlens_analytics.routes.dashboard import check_time_period, parse_date_range
from chatlens_analytics.store import ChatStore

router = APIRouter(tags=["sentiment"])

GRANULARITIES = ("message", "segment")


def _sentiment_types(raw: list[str] | None) -> frozenset[str]:
    if not raw:
        return ALL_SENTIMENT_LABELS
    labels = set()
    for value in raw:
        label = normalize_label(value)
        if label is None:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid sentiment type '{value}'. Must be Positive, Negative or Neutral.",
            )
        labels.add(label)
    return frozenset(labels)


@router.get("/sentiment-dashboard/chats/{chat_id}", response_model=SentimentDashboardData)
def sentiment_dashboard(
    chat_id: int,
    granularity: str = Query("message", description="message or segment"),
    start_date: date | None = Query(None, description="First calendar day, YYYY-MM-DD (inclusive)"),
    end_date: date | None = Query(None, description="Last calendar day, YYYY-MM-DD (inclusive)"),
    time_period: str = Query("All Day", description="All Day, Morning, Afternoon, Evening or Night"),
    participants: list[str] | None = Query(None, description="Restrict to these senders"),
    sentiment_types: list[str] | None = Query(None, description="Positive, Negative, Neutral"),
    store: ChatStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> SentimentDashboardData:
    """Sentiment KPIs, trend, breakdowns and highlights for one chat."""
    if granularity not in GRANULARITIES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid granularity '{granularity}'. Must be message or segment.",
        )
    spec = SentimentFilterSpec(
        participants=frozenset(participants or ()),
        date_range=parse_date_range(start_date, end_date),
        time_period=check_time_period(time_period),
        sentiment_types=_sentiment_types(sentiment_types),
        granularity=granularity,
    )

    chat = get_chat_or_404(store, chat_id)
    job = store.progress.find(str(chat_id))
    if job is not None and not job.state.is_terminal:
        raise HTTPException(
            status_code=409, detail=f"Sentiment analysis for chat {chat_id} is still running."
        )
    if chat.sentiment is None:
        raise HTTPException(
            status_code=404, detail=f"Chat with ID {chat_id} not found or has no data."
        )
    return build_sentiment_dashboard(chat.sentiment, spec, settings=settings)


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


@router.post("/sentiment/start/{chat_id}", response_model=JobSnapshot, status_code=202)
def start_sentiment(chat_id: int, store: ChatStore = Depends(get_store)) -> JobSnapshot:
    """Open a progress job for the chat; any earlier live job is cancelled."""
    get_chat_or_404(store, chat_id)
    handle = store.progress.start(str(chat_id))
    return store.progress.get(handle.job_id).snapshot()


@router.get("/sentiment/progress/{chat_id}", response_model=JobSnapshot)
def sentiment_progress(chat_id: int, store: ChatStore = Depends(get_store)) -> JobSnapshot:
    """Current state of the chat's progress job."""
    try:
        return store.progress.get(str(chat_id)).snapshot()
    except UnknownJobError as exc:
        raise HTTPException(
            status_code=404, detail=f"No sentiment analysis started for chat {chat_id}"
        ) from exc


@router.post("/sentiment/progress/{chat_id}", response_model=JobSnapshot)
def push_progress(
    chat_id: int, event: ProgressEvent, store: ChatStore = Depends(get_store)
) -> JobSnapshot:
    """Apply a progress, completed, cancelled or error event pushed by the worker."""
    if event.event == "progress":
        if event.progress is None:
            raise HTTPException(status_code=400, detail="A progress event needs a 'progress' body.")
        payload = event.progress.model_dump()
    else:
        payload = {"error": event.error}
    try:
        store.progress.dispatch(str(chat_id), event.event, payload)
        return store.progress.get(str(chat_id)).snapshot()
    except UnknownJobError as exc:
        raise HTTPException(
            status_code=404, detail=f"No sentiment analysis started for chat {chat_id}"
        ) from exc


@router.post("/sentiment/cancel/{chat_id}")
def cancel_sentiment(chat_id: int, store: ChatStore = Depends(get_store)) -> dict[str, str]:
    """Request cancellation; the job stops at its next progress tick."""
    try:
        job = store.progress.get(str(chat_id))
    except UnknownJobError as exc:
        raise HTTPException(
            status_code=404, detail=f"No sentiment analysis started for chat {chat_id}"
        ) from exc
    store.progress.cancel(job.handle)
    return {"status": "cancellation_requested", "chat_id": str(chat_id)}
