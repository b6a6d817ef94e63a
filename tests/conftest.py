"""Shared pytest fixtures for the ChatLens test suite.

Builds small deterministic chats: a three-person group chat spanning June
and July 2024, and message- and segment-level sentiment records for it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest
from fastapi.testclient import TestClient

from chatlens_analytics.config import Settings
from chatlens_analytics.main import create_app
from chatlens_analytics.models import Message, SentimentRecord, SentimentSource
from chatlens_analytics.store import ChatStore


def make_message(id: int, sender: str, when: datetime, **fields: Any) -> Message:
    """Build a Message with sensible defaults for the counters."""
    fields.setdefault("text", f"message {id}")
    fields.setdefault("word_count", 2)
    return Message(id=id, sender=sender, date=when, **fields)


def make_record(
    id: int, sender: str, when: datetime, label: str, score: float, **fields: Any
) -> SentimentRecord:
    return SentimentRecord(
        id=id,
        sender=sender,
        date=when,
        overall_label=label,
        overall_label_score=score,
        **fields,
    )


# ---------------------------------------------------------------------------
# Group chat -- 2024-06-15 is a Saturday, 2024-07-02 a Tuesday.
# ---------------------------------------------------------------------------


@pytest.fixture()
def group_messages() -> list[Message]:
    """Eight messages from Alice (4), Bob (2) and Carol (2)."""
    return [
        make_message(1, "Alice", datetime(2024, 6, 15, 10, 0), word_count=3, is_question=True, emojis_count=1),
        make_message(2, "Bob", datetime(2024, 6, 15, 10, 5)),
        make_message(3, "Alice", datetime(2024, 6, 15, 22, 30), text="<Media omitted>", word_count=0, is_media=True),
        make_message(4, "Carol", datetime(2024, 6, 16, 8, 15), word_count=4, links_count=2),
        make_message(5, "Alice", datetime(2024, 6, 16, 13, 0), word_count=5, emojis_count=2),
        make_message(6, "Bob", datetime(2024, 6, 18, 19, 45), word_count=1, is_question=True),
        make_message(7, "Alice", datetime(2024, 7, 2, 7, 30)),
        make_message(8, "Carol", datetime(2024, 7, 2, 15, 0), word_count=3),
    ]


@pytest.fixture()
def sentiment_messages() -> list[SentimentRecord]:
    """Five recognised labels plus one unrecognised ('mixed')."""
    return [
        make_record(1, "Alice", datetime(2024, 6, 15, 10, 0), "positive", 0.9, text="Great news!"),
        make_record(2, "Bob", datetime(2024, 6, 15, 11, 0), "NEGATIVE", -0.8, text="Not again"),
        make_record(3, "Bob", datetime(2024, 6, 16, 21, 0), "negative", -0.95, text="Terrible day"),
        make_record(4, "Alice", datetime(2024, 6, 17, 9, 0), "Positive", 0.5, text="Nice"),
        make_record(5, "Carol", datetime(2024, 6, 17, 14, 0), "neutral", 0.1, text="Ok"),
        make_record(6, "Carol", datetime(2024, 6, 18, 15, 0), "mixed", 0.0, text="Hmm"),
    ]


@pytest.fixture()
def sentiment_segments() -> list[SentimentRecord]:
    return [
        make_record(
            101, "Alice", datetime(2024, 6, 15, 10, 0), "positive", 0.7,
            combined_text="Great news! / Congrats",
        ),
        make_record(
            102, "Bob", datetime(2024, 6, 16, 21, 0), "negative", -0.6,
            combined_text="Terrible day / Sorry to hear",
        ),
    ]


@pytest.fixture()
def sentiment_source(
    sentiment_messages: list[SentimentRecord], sentiment_segments: list[SentimentRecord]
) -> SentimentSource:
    return SentimentSource(messages=sentiment_messages, segments=sentiment_segments)


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings() -> Settings:
    return Settings(log_level="WARNING")


@pytest.fixture()
def store() -> ChatStore:
    return ChatStore()


@pytest.fixture()
def client(settings: Settings, store: ChatStore) -> TestClient:
    """FastAPI test client over a fresh, empty store."""
    return TestClient(create_app(settings=settings, store=store))


def message_payload(messages: list[Message]) -> list[dict[str, Any]]:
    return [m.model_dump(mode="json") for m in messages]
