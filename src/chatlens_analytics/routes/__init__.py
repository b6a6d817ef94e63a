"""HTTP routes and the dependencies they share."""

from __future__ import annotations

from fastapi import HTTPException, Request

from chatlens_analytics.config import Settings
from chatlens_analytics.store import ChatNotFoundError, ChatStore, StoredChat


def get_store(request: Request) -> ChatStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_chat_or_404(store: ChatStore, chat_id: int) -> StoredChat:
    """Look up a chat, raising 404 if it isn't stored."""
    try:
        return store.get(chat_id)
    except ChatNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0]) from exc
