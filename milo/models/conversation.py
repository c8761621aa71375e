"""Models representing persisted conversation records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .chat_message import ChatMessage

UNKNOWN = "unknown"


class RequestInfo(BaseModel):
    """Best-effort metadata about the visitor who sent a chat turn."""

    ip: str = UNKNOWN
    user_agent: str = UNKNOWN


class ConversationRecord(BaseModel):
    """One logged chat turn: history, model reply and request metadata.

    Records are append-only.  ``message_count`` is captured at write time
    and is not recomputed when reading.  ``created_at`` is assigned by the
    database; legacy rows may lack it, in which case the record is left out
    of every date-based view.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    session_id: str
    ip: str = UNKNOWN
    user_agent: str = UNKNOWN
    message_count: int
    messages: List[ChatMessage] = Field(default_factory=list)
    ai_response: str
    created_at: Optional[datetime] = Field(
        default=None,
        description="Insert timestamp assigned by storage (UTC).",
    )

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands timestamps back without tzinfo; they are written in UTC.
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ConversationList(BaseModel):
    """Payload returned by the conversation listing endpoint."""

    conversations: List[ConversationRecord]
    count: int
