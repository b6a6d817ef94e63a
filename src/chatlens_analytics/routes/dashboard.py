"""Dashboard routes -- the general activity dashboard of one chat."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from chatlens_analytics.assembler import build_dashboard
from chatlens_analytics.config import Settings
from chatlens_analytics.filters import TIME_PERIODS
from chatlens_analytics.models import DashboardData, DateRange, FilterSpec
from chatlens_analytics.routes import get_app_settings, get_chat_or_404, get_store
from chatlens_analytics.store import ChatStore

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def parse_date_range(start_date: date | None, end_date: date | None) -> DateRange | None:
    """Build the date filter from calendar days.

    Days are compared with message timestamps as recorded in the chat export,
    which carry no timezone, so clients send the days the user picked rather
    than UTC instants.
    """
    if start_date is None:
        return None
    return DateRange(start=start_date, end=end_date)


def check_time_period(time_period: str) -> str:
    if time_period not in TIME_PERIODS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid time_period '{time_period}'. Must be one of: {', '.join(TIME_PERIODS)}.",
        )
    return time_period


@router.get("/chats/{chat_id}", response_model=DashboardData)
def chat_dashboard(
    chat_id: int,
    start_date: date | None = Query(None, description="First calendar day, YYYY-MM-DD (inclusive)"),
    end_date: date | None = Query(None, description="Last calendar day, YYYY-MM-DD (inclusive)"),
    time_period: str = Query("All Day", description="All Day, Morning, Afternoon, Evening or Night"),
    participants: list[str] | None = Query(None, description="Restrict to these senders"),
    store: ChatStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> DashboardData:
    """KPIs, time series, participant panels and timeline for one chat."""
    spec = FilterSpec(
        participants=frozenset(participants or ()),
        date_range=parse_date_range(start_date, end_date),
        time_period=check_time_period(time_period),
    )
    chat = get_chat_or_404(store, chat_id)
    return build_dashboard(chat.messages, spec, settings=settings)
