"""In-memory store of ingested chats.

Holds the parsed messages of each chat plus, once sentiment inference has
finished upstream, its message- and segment-level sentiment records.  Chats
live only as long as the process.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from chatlens_analytics.models import Message, SentimentSource, SentimentStatus
from chatlens_analytics.progress import JobState, ProgressRegistry

logger = logging.getLogger(__name__)


class ChatNotFoundError(KeyError):
    """Raised when a chat id is not in the store."""


@dataclass
class StoredChat:
    id: int
    title: str | None
    created_at: datetime
    messages: tuple[Message, ...]
    sentiment: SentimentSource | None = None


class ChatStore:
    """Thread-safe registry of chats and their sentiment progress jobs.

    Parameters
    ----------
    progress:
        Registry used for sentiment jobs.  A fresh one is created when
        omitted.
    """

    def __init__(self, progress: ProgressRegistry | None = None) -> None:
        self._chats: dict[int, StoredChat] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.progress = progress or ProgressRegistry()

    def add_chat(self, messages: Sequence[Message], title: str | None = None) -> StoredChat:
        with self._lock:
            chat = StoredChat(
                id=self._next_id,
                title=title,
                created_at=datetime.now(timezone.utc),
                messages=tuple(messages),
            )
            self._chats[chat.id] = chat
            self._next_id += 1
        logger.info("Stored chat %d with %d messages", chat.id, len(chat.messages))
        return chat

    def get(self, chat_id: int) -> StoredChat:
        with self._lock:
            try:
                return self._chats[chat_id]
            except KeyError:
                raise ChatNotFoundError(f"Chat {chat_id} not found") from None

    def delete(self, chat_id: int) -> None:
        with self._lock:
            if self._chats.pop(chat_id, None) is None:
                raise ChatNotFoundError(f"Chat {chat_id} not found")
        self.progress.discard(str(chat_id))
        logger.info("Deleted chat %d", chat_id)

    def set_sentiment(self, chat_id: int, source: SentimentSource) -> StoredChat:
        """Attach sentiment records and complete the chat's running job, if any."""
        chat = self.get(chat_id)
        chat.sentiment = source
        job = self.progress.find(str(chat_id))
        if job is not None and not job.state.is_terminal:
            self.progress.complete(str(chat_id))
        logger.info(
            "Stored sentiment for chat %d: %d messages, %d segments",
            chat_id,
            len(source.messages),
            len(source.segments),
        )
        return chat

    def sentiment_status(self, chat_id: int) -> SentimentStatus:
        chat = self.get(chat_id)
        job = self.progress.find(str(chat_id))
        if job is None:
            return "completed" if chat.sentiment is not None else "pending"
        if job.state in (JobState.STARTING, JobState.IN_PROGRESS):
            return "processing"
        if job.state is JobState.COMPLETED:
            return "completed"
        if job.state is JobState.CANCELLED:
            return "failed"
        return "error"
