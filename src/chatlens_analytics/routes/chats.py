"""Chat routes -- ingest parsed chats and their sentiment output."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from chatlens_analytics.models import ChatRead, ChatUpload, SentimentSource, SentimentUpload
from chatlens_analytics.routes import get_chat_or_404, get_store
from chatlens_analytics.store import ChatStore, StoredChat

router = APIRouter(prefix="/chats", tags=["chats"])


def _chat_read(store: ChatStore, chat: StoredChat) -> ChatRead:
    return ChatRead(
        id=chat.id,
        title=chat.title,
        created_at=chat.created_at,
        message_count=len(chat.messages),
        sentiment_status=store.sentiment_status(chat.id),
    )


@router.post("", response_model=ChatRead, status_code=201)
def upload_chat(payload: ChatUpload, store: ChatStore = Depends(get_store)) -> ChatRead:
    """Store the parsed messages of one chat."""
    chat = store.add_chat(payload.messages, title=payload.title)
    return _chat_read(store, chat)


@router.get("/{chat_id}", response_model=ChatRead)
def read_chat(chat_id: int, store: ChatStore = Depends(get_store)) -> ChatRead:
    """Chat metadata, including the derived sentiment status."""
    chat = get_chat_or_404(store, chat_id)
    return _chat_read(store, chat)


@router.delete("/{chat_id}")
def delete_chat(chat_id: int, store: ChatStore = Depends(get_store)) -> dict[str, str]:
    """Drop a chat and any progress job attached to it."""
    get_chat_or_404(store, chat_id)
    store.delete(chat_id)
    return {"message": f"Chat {chat_id} deleted successfully"}


@router.put("/{chat_id}/sentiment", response_model=ChatRead)
def upload_sentiment(
    chat_id: int,
    payload: SentimentUpload,
    store: ChatStore = Depends(get_store),
) -> ChatRead:
    """Attach sentiment records; completes the chat's running progress job."""
    get_chat_or_404(store, chat_id)
    chat = store.set_sentiment(
        chat_id,
        SentimentSource(messages=payload.messages, segments=payload.segments),
    )
    return _chat_read(store, chat)
